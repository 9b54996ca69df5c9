"""
Feedback models.

Defines the contract of the feedback synthesizer and the feedback block
attached to a completed session.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from src.models.interview import InterviewSession


NEUTRAL_SCORE = 50

DETAILED_ANALYSIS_KEYS = ("technical_skills", "communication", "problem_solving", "experience")


class TranscriptEntry(BaseModel):
    """A main question with its answer."""

    question: str
    answer: str
    time_spent: int = 0
    followups: list[dict[str, str]] = Field(default_factory=list)


class InterviewTranscript(BaseModel):
    """Everything the synthesizer sees about a finished interview."""

    session_id: str
    role: str
    interview_type: str
    difficulty: str
    total_questions: int
    entries: list[TranscriptEntry] = Field(default_factory=list)

    @property
    def answered_count(self) -> int:
        return sum(1 for e in self.entries if e.answer.strip())

    @classmethod
    def from_session(cls, session: "InterviewSession") -> "InterviewTranscript":
        """Build the transcript from a session's slots and conversation log."""
        entries = []
        for index, slot in enumerate(session.questions):
            if not slot.is_asked:
                continue
            followups = []
            pending: str | None = None
            for event in session.conversation_log:
                if event.question_index != index or not event.is_followup:
                    continue
                if event.kind.value == "follow-up":
                    pending = event.content
                elif pending is not None:
                    followups.append({"question": pending, "answer": event.content})
                    pending = None
            entries.append(TranscriptEntry(
                question=slot.question,
                answer=slot.answer,
                time_spent=slot.time_spent,
                followups=followups,
            ))
        return cls(
            session_id=session.session_id,
            role=session.setup.target_role.display_name,
            interview_type=session.setup.interview_type.value,
            difficulty=session.setup.difficulty.value,
            total_questions=session.setup.total_questions,
            entries=entries,
        )

    def to_prompt_text(self) -> str:
        """Render Q&A pairs for the summary prompt."""
        lines = []
        for i, entry in enumerate(self.entries, 1):
            lines.append(f"{i}. Q: {entry.question}\n   A: {entry.answer or '(no answer)'}")
            for followup in entry.followups:
                lines.append(f"   Follow-up Q: {followup['question']}\n   A: {followup['answer']}")
        return "\n\n".join(lines)


class FeedbackResult(BaseModel):
    """Result returned by the feedback synthesizer."""

    model_config = ConfigDict(frozen=True)

    strengths: tuple[str, ...] = ()
    weaknesses: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()
    overall_score: int = Field(..., ge=0, le=100)
    summary: str = ""
    detailed_analysis: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def fallback(cls, transcript: InterviewTranscript) -> "FeedbackResult":
        """Generic feedback with a neutral score, used when synthesis fails."""
        answered = transcript.answered_count
        total = transcript.total_questions
        return cls(
            strengths=(
                "Completed the interview process",
                "Provided responses to questions",
            ),
            weaknesses=(
                "Could benefit from more specific examples",
            ),
            suggestions=(
                "Practice answering interview questions out loud",
                "Prepare specific examples from past experience",
                f"Research common questions for {transcript.role} roles",
            ),
            overall_score=NEUTRAL_SCORE,
            summary=(
                f"Interview completed with {answered}/{total} questions answered. "
                "Detailed feedback could not be generated for this session."
            ),
            detailed_analysis={
                "technical_skills": f"Assessment unavailable for this {transcript.interview_type} interview.",
                "communication": "Assessment unavailable.",
                "problem_solving": "Assessment unavailable.",
                "experience": f"Answers were given for a {transcript.difficulty} level {transcript.role} role.",
            },
        )


class InterviewFeedback(FeedbackResult):
    """Feedback block attached to a completed session."""

    generated_at: datetime
    is_fallback: bool = False

    @classmethod
    def from_result(
        cls,
        result: FeedbackResult,
        generated_at: datetime,
        is_fallback: bool = False,
    ) -> "InterviewFeedback":
        return cls(
            **result.model_dump(),
            generated_at=generated_at,
            is_fallback=is_fallback,
        )
