"""
Answer evaluation models.

Defines the contract of the answer-quality oracle: the context it is given
and the judgment it returns.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QualityTier(str, Enum):
    """Qualitative answer quality."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_score(cls, score: float) -> "QualityTier":
        """Map a 1-10 score onto a tier."""
        if score >= 8.5:
            return cls.EXCELLENT
        elif score >= 6.5:
            return cls.GOOD
        elif score >= 4.5:
            return cls.FAIR
        else:
            return cls.POOR


class CompletenessTier(str, Enum):
    """How fully the answer addressed the question."""

    COMPLETE = "complete"
    PARTIAL = "partial"
    INCOMPLETE = "incomplete"

    @classmethod
    def from_score(cls, score: float) -> "CompletenessTier":
        if score >= 8:
            return cls.COMPLETE
        elif score >= 5:
            return cls.PARTIAL
        else:
            return cls.INCOMPLETE


class AnswerContext(BaseModel):
    """Context handed to the oracle alongside the question and answer."""

    session_id: str
    role: str
    interview_type: str
    difficulty: str
    personality: str = "friendly"
    question_index: int = 0
    followup_depth: int = 0
    is_followup: bool = False

    def to_prompt_context(self) -> str:
        return (
            f"Role: {self.role}, Type: {self.interview_type}, "
            f"Difficulty: {self.difficulty}, "
            f"Follow-up depth: {self.followup_depth}"
        )


class AnswerJudgment(BaseModel):
    """Result returned by the answer-quality oracle."""

    model_config = ConfigDict(frozen=True)

    quality_tier: QualityTier = QualityTier.FAIR
    completeness_tier: CompletenessTier = CompletenessTier.PARTIAL
    followup_warranted: bool = False
    reasoning: str = ""
    candidate_followups: tuple[str, ...] = Field(default=())
    is_fallback: bool = False

    @field_validator("candidate_followups", mode="before")
    @classmethod
    def _clean_candidates(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        return tuple(c.strip() for c in value if isinstance(c, str) and c.strip())

    @classmethod
    def fallback(cls, reason: str = "Answer could not be evaluated") -> "AnswerJudgment":
        """Judgment used when the oracle fails: never asks for a follow-up."""
        return cls(
            quality_tier=QualityTier.FAIR,
            completeness_tier=CompletenessTier.PARTIAL,
            followup_warranted=False,
            reasoning=reason,
            candidate_followups=(),
            is_fallback=True,
        )
