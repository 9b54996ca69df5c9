"""
Data models and schemas for the interview engine

Contains Pydantic models for:
- Interview sessions and their conversation log
- Session configuration
- Answer judgments (oracle contract)
- Feedback (synthesizer contract)
"""

from src.models.interview import (
    ConversationEvent,
    EventKind,
    FollowUpCandidate,
    InterviewPhase,
    InterviewSession,
    InterviewSetup,
    QuestionSlot,
    SessionStatus,
)
from src.models.evaluation import (
    AnswerContext,
    AnswerJudgment,
    CompletenessTier,
    QualityTier,
)
from src.models.question import QuestionContext
from src.models.report import (
    FeedbackResult,
    InterviewFeedback,
    InterviewTranscript,
)
from src.models.roles import Difficulty, InterviewerPersonality, InterviewType, Role

__all__ = [
    # Interview
    "ConversationEvent",
    "EventKind",
    "FollowUpCandidate",
    "InterviewPhase",
    "InterviewSession",
    "InterviewSetup",
    "QuestionSlot",
    "SessionStatus",
    # Evaluation
    "AnswerContext",
    "AnswerJudgment",
    "CompletenessTier",
    "QualityTier",
    # Question
    "QuestionContext",
    # Report
    "FeedbackResult",
    "InterviewFeedback",
    "InterviewTranscript",
    # Roles
    "Difficulty",
    "InterviewerPersonality",
    "InterviewType",
    "Role",
]
