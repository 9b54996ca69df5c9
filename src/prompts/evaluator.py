"""
AI Evaluator Prompt Templates

Contains the prompt for judging a single answer and deciding whether a
follow-up question is warranted.
"""

from src.models.evaluation import AnswerContext
from src.models.roles import InterviewerPersonality


class EvaluatorPrompts:
    """
    Prompt templates for answer judgment.

    Key principles:
    - Judge completeness and quality, not style
    - Suggest follow-ups only when they would reveal something new
    - Always answer in strict JSON
    """

    SYSTEM_CONTEXT = """You are an expert interviewer analyzing a candidate's answer during a mock interview.

Your role:
- Judge how good and how complete the answer is
- Decide whether a follow-up question would help
- If so, propose follow-up questions that dig into what the candidate said
"""

    SCORING_GUIDE = """
=== SCORING GUIDE (1-10) ===
- quality: accuracy, depth and relevance of the answer
- completeness: how fully the question was answered

Ask for a follow-up when the answer is partial, vague, or mentions
something worth exploring. Do not ask for one when the answer is
excellent and complete.
"""

    def generate_judgment_prompt(
        self,
        question: str,
        answer: str,
        context: AnswerContext,
    ) -> str:
        """Generate prompt for judging an answer."""

        personality = InterviewerPersonality(context.personality)
        kind = "follow-up question" if context.is_followup else "question"

        return f"""{self.SYSTEM_CONTEXT}
Your personality: {personality.tone}
{self.SCORING_GUIDE}
Interview Context: {context.to_prompt_context()}

The {kind}: "{question}"
Candidate's answer: "{answer}"

Return as JSON:
{{
  "quality": 7,
  "completeness": 6,
  "followUpNeeded": true,
  "reasoning": "Good approach, but no concrete example",
  "followUpQuestions": ["Can you give me a specific example of when you used that approach?"]
}}
"""
