"""
AI Feedback Prompts

Contains the prompt for summarizing a finished interview into
strengths, weaknesses, suggestions and a score.
"""

from src.models.report import InterviewTranscript


class ReportPrompts:
    """Prompt templates for end-of-interview feedback."""

    SYSTEM_CONTEXT = """You are an expert career coach giving feedback on a mock interview.

Your role:
- Provide constructive, actionable feedback
- Be encouraging but honest
- Give specific, practical suggestions
"""

    def generate_summary_prompt(self, transcript: InterviewTranscript) -> str:
        """Generate prompt for the overall interview feedback."""

        return f"""{self.SYSTEM_CONTEXT}

=== INTERVIEW DETAILS ===
Role: {transcript.role}
Type: {transcript.interview_type}
Difficulty: {transcript.difficulty}
Questions Answered: {transcript.answered_count}/{transcript.total_questions}

=== QUESTIONS AND ANSWERS ===
{transcript.to_prompt_text()}

Provide a comprehensive analysis in JSON format:
{{
  "overallScore": 72,
  "summary": "Brief overall assessment",
  "strengths": ["strength1", "strength2"],
  "weaknesses": ["weakness1", "weakness2"],
  "suggestions": ["suggestion1", "suggestion2"],
  "detailedAnalysis": {{
    "technicalSkills": "Assessment of technical abilities",
    "communication": "Assessment of communication skills",
    "problemSolving": "Assessment of problem-solving approach",
    "experience": "Assessment of relevant experience"
  }}
}}

overallScore is 0-100. Be constructive, specific, and professional.
"""
