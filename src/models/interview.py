"""
Interview session and state models.

An InterviewSession is an immutable value: every engine operation returns
a new instance built with ``model_copy(update=...)`` instead of mutating
fields in place.
"""

from datetime import datetime
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.report import InterviewFeedback
from src.models.roles import Difficulty, InterviewerPersonality, InterviewType, Role


class SessionStatus(str, Enum):
    """Session lifecycle states."""

    DRAFT = "draft"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionStatus.COMPLETED, SessionStatus.CANCELLED)


class InterviewPhase(str, Enum):
    """Advisory interview phase used to steer question generation."""

    INTRODUCTION = "introduction"
    TECHNICAL = "technical"
    BEHAVIORAL = "behavioral"
    CLOSING = "closing"


class EventKind(str, Enum):
    """Kinds of conversation log entries."""

    QUESTION = "question"
    FOLLOW_UP = "follow-up"
    ANSWER = "answer"


class InterviewSetup(BaseModel):
    """User's interview configuration. Immutable after creation."""

    model_config = ConfigDict(frozen=True)

    title: str | None = Field(
        default=None, max_length=200,
        description="Display title; derived from role and type when omitted"
    )
    target_role: Role = Field(
        default=Role.SOFTWARE_ENGINEER,
        description="Target role for the interview"
    )
    interview_type: InterviewType = Field(
        default=InterviewType.TECHNICAL,
        description="Interview category"
    )
    difficulty: Difficulty = Field(
        default=Difficulty.INTERMEDIATE,
        description="Difficulty level"
    )
    skills: tuple[str, ...] = Field(
        default=(),
        description="Skills and technologies to focus on"
    )
    years_of_experience: int = Field(
        default=0, ge=0, le=50,
        description="Candidate's years of experience"
    )
    total_questions: int = Field(
        default=10, ge=1, le=20,
        description="Number of main questions"
    )
    max_followup_depth: int = Field(
        default=3, ge=1, le=5,
        description="Maximum follow-ups per main question"
    )

    @field_validator("skills", mode="before")
    @classmethod
    def _clean_skills(cls, value):
        if value is None:
            return ()
        return tuple(s.strip() for s in value if isinstance(s, str) and s.strip())

    @property
    def display_title(self) -> str:
        if self.title:
            return self.title
        kind = self.interview_type.value.replace("-", " ").title()
        return f"{self.target_role.display_name} {kind} Interview"


class QuestionSlot(BaseModel):
    """One main question and the candidate's answer to it."""

    model_config = ConfigDict(frozen=True)

    question: str = ""
    answer: str = ""
    transcript: str = ""
    time_spent: int = Field(default=0, ge=0, description="Seconds spent answering")
    is_answered: bool = False
    asked_at: datetime | None = None
    answered_at: datetime | None = None

    @property
    def is_asked(self) -> bool:
        return self.asked_at is not None


class ConversationEvent(BaseModel):
    """A single immutable entry of the conversation log."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    content: str
    timestamp: datetime
    question_index: int = Field(..., ge=0)
    is_followup: bool = False


class FollowUpCandidate(BaseModel):
    """A pending follow-up question spawned from a main question's answer."""

    model_config = ConfigDict(frozen=True)

    question_index: int = Field(..., ge=0)
    text: str
    consumed: bool = False


class InterviewSession(BaseModel):
    """Complete interview session state."""

    model_config = ConfigDict(frozen=True)

    # Identification
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str

    # Setup
    setup: InterviewSetup
    personality: InterviewerPersonality = InterviewerPersonality.FRIENDLY

    # State
    status: SessionStatus = SessionStatus.DRAFT
    phase: InterviewPhase = InterviewPhase.INTRODUCTION

    # Timing
    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    # Questions & conversation
    questions: tuple[QuestionSlot, ...] = ()
    conversation_log: tuple[ConversationEvent, ...] = ()
    followup_queue: tuple[FollowUpCandidate, ...] = ()

    # Progress counters
    current_question_index: int = Field(default=0, ge=0)
    current_question_followups: int = Field(default=0, ge=0)  # depth for current topic
    total_core_questions_asked: int = Field(default=0, ge=0)
    total_followups_asked: int = Field(default=0, ge=0)
    last_question_was_followup: bool = False

    # Question text awaiting an answer (main question or follow-up)
    current_prompt: str | None = None

    # Present only once completed
    feedback: InterviewFeedback | None = None

    # Optimistic concurrency token, owned by the session store
    version: int = 0

    @classmethod
    def new(cls, user_id: str, setup: InterviewSetup, **kwargs) -> "InterviewSession":
        """Create a draft session with one empty slot per main question."""
        return cls(
            user_id=user_id,
            setup=setup,
            questions=tuple(QuestionSlot() for _ in range(setup.total_questions)),
            **kwargs,
        )

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    @property
    def is_closed(self) -> bool:
        return self.status.is_terminal

    @property
    def answered_questions(self) -> int:
        return sum(1 for q in self.questions if q.is_answered)

    @property
    def remaining_questions(self) -> int:
        return self.setup.total_questions - self.answered_questions

    @property
    def progress(self) -> int:
        """Percentage of main questions completed."""
        if self.setup.total_questions == 0:
            return 0
        return round(self.current_question_index / self.setup.total_questions * 100)

    def get_current_question(self) -> QuestionSlot | None:
        """Get the current main question slot, if one is open."""
        if self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    def get_duration_seconds(self) -> float:
        """Get interview duration in seconds."""
        if not self.started_at:
            return 0.0
        end = self.completed_at or datetime.utcnow()
        return (end - self.started_at).total_seconds()

    def get_conversation_context_str(self, limit: int | None = None) -> str:
        """Get the conversation log as a string for AI prompts."""
        events = self.conversation_log[-limit:] if limit else self.conversation_log
        lines = []
        for event in events:
            role = "Candidate" if event.kind == EventKind.ANSWER else "Interviewer"
            lines.append(f"{role}: {event.content}")
        return "\n".join(lines)

    def progress_summary(self) -> dict:
        """Progress fields returned after each mutation."""
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "phase": self.phase.value,
            "current_question_index": self.current_question_index,
            "current_question": self.current_prompt,
            "is_followup": self.last_question_was_followup,
            "followup_depth": self.current_question_followups,
            "total_questions": self.setup.total_questions,
            "answered_questions": self.answered_questions,
            "remaining_questions": self.remaining_questions,
            "progress": self.progress,
        }
