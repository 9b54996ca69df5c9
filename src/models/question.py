"""
Question generation models.

The question generator is an external collaborator; this module defines
what it is told and the fixed bank used when it cannot answer.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from src.models.interview import InterviewSession


class QuestionContext(BaseModel):
    """Context passed to the question generator."""

    session_id: str
    role: str
    interview_type: str
    difficulty: str
    skills: list[str] = Field(default_factory=list)
    years_of_experience: int = 0
    phase: str = "introduction"
    personality: str = "friendly"
    question_index: int = 0
    total_questions: int = 1
    previous_questions: list[str] = Field(default_factory=list)
    conversation: str = ""

    @property
    def question_number(self) -> int:
        return self.question_index + 1

    @classmethod
    def from_session(
        cls,
        session: "InterviewSession",
        question_index: int,
        phase: str,
    ) -> "QuestionContext":
        setup = session.setup
        previous = [
            event.content
            for event in session.conversation_log
            if event.kind.value in ("question", "follow-up")
        ]
        return cls(
            session_id=session.session_id,
            role=setup.target_role.display_name,
            interview_type=setup.interview_type.value,
            difficulty=setup.difficulty.value,
            skills=list(setup.skills),
            years_of_experience=setup.years_of_experience,
            phase=phase,
            personality=session.personality.value,
            question_index=question_index,
            total_questions=setup.total_questions,
            previous_questions=previous,
            conversation=session.get_conversation_context_str(limit=12),
        )

    def to_prompt_context(self) -> str:
        """Convert context to a string for AI prompts."""
        return f"""
Interview Context:
- Role: {self.role}
- Type: {self.interview_type}
- Difficulty: {self.difficulty}
- Current Phase: {self.phase}
- Question: {self.question_number}/{self.total_questions}
- Candidate Experience: {self.years_of_experience} years
- Key Skills/Technologies: {', '.join(self.skills) or 'General'}
"""


# Used when the generator fails. Keyed by phase; role is interpolated.
FALLBACK_QUESTIONS: dict[str, list[str]] = {
    "introduction": [
        "Can you tell me about yourself and what interests you about {role} positions?",
        "Let's start with your experience as a {role}. What brings you here today?",
    ],
    "technical": [
        "Can you walk me through a challenging {role} project you've worked on recently?",
        "How would you approach solving a complex problem in your field?",
    ],
    "behavioral": [
        "Tell me about a time when you had to work with a difficult team member. How did you handle it?",
        "Describe a situation where you had to learn something new quickly. How did you approach it?",
    ],
    "closing": [
        "What are you looking for in your next position?",
        "Do you have any questions about the role or the team?",
    ],
}


def fallback_question(context: QuestionContext) -> str:
    """Pick a fallback question deterministically, avoiding repeats where possible."""
    bank = FALLBACK_QUESTIONS.get(context.phase, FALLBACK_QUESTIONS["introduction"])
    candidates = [q.format(role=context.role) for q in bank]
    asked = set(context.previous_questions)
    fresh = [q for q in candidates if q not in asked] or candidates
    return fresh[context.question_index % len(fresh)]
