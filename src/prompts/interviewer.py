"""
AI Interviewer Prompt Templates

Contains structured prompts for generating the next main question.

Designed to make the AI behave like a real human interviewer,
not a chatbot.
"""

from src.models.question import QuestionContext
from src.models.roles import InterviewerPersonality, InterviewType, get_type_focus_areas


class InterviewerPrompts:
    """
    Prompt templates for the AI interviewer.

    Key principles:
    - Professional but personable tone
    - One clear question at a time
    - Never repeats an earlier question
    - Adapts to candidate level and interview phase
    """

    SYSTEM_CONTEXT = """You are a professional interviewer running a mock interview for a student or early-career candidate.

Your role:
- Conduct a realistic interview for the target role
- Ask relevant, role-appropriate questions
- Never reveal answers or correct the candidate
- Speak concisely like a real interviewer

You are NOT a chatbot. You are simulating a real interview experience.
"""

    PHASE_GUIDANCE = {
        "introduction": "Open the conversation: background, motivation and interest in the role.",
        "technical": "Probe technical skills and hands-on experience with the listed technologies.",
        "behavioral": "Ask about past situations: teamwork, conflict, failure, ownership.",
        "closing": "Wrap up: goals, expectations and what the candidate is looking for.",
    }

    def generate_question_prompt(self, context: QuestionContext) -> str:
        """Generate prompt for creating the next main question."""

        personality = InterviewerPersonality(context.personality)
        focus_areas = get_type_focus_areas(InterviewType(context.interview_type))

        previous = ""
        if context.previous_questions:
            listed = "\n".join(f"- {q}" for q in context.previous_questions)
            previous = f"\n=== QUESTIONS ALREADY ASKED (DO NOT REPEAT) ===\n{listed}\n"

        conversation = ""
        if context.conversation:
            conversation = f"\n=== CONVERSATION SO FAR ===\n{context.conversation}\n"

        return f"""{self.SYSTEM_CONTEXT}

Your personality: {personality.tone}
Your style: {personality.question_style}
Your phrases: {', '.join(personality.phrases)}
{context.to_prompt_context()}
=== CURRENT PHASE: {context.phase.upper()} ===
{self.PHASE_GUIDANCE.get(context.phase, "")}

Focus areas for a {context.interview_type} interview: {', '.join(focus_areas) or 'general'}
{previous}{conversation}
Guidelines:
- Keep the question clear and specific
- Make it relevant to the {context.role} position
- Match {context.difficulty} difficulty for {context.years_of_experience} years of experience
- Build naturally on the conversation so far
- NEVER repeat a question already asked

Return only the next question to ask, no additional text or formatting.
"""
