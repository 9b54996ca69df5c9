import asyncio
from datetime import datetime, timedelta

import pytest

from src.config.settings import Settings
from src.core.interview_orchestrator import InterviewOrchestrator
from src.models.evaluation import AnswerJudgment, CompletenessTier, QualityTier
from src.models.report import FeedbackResult


class TickingClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: datetime = datetime(2026, 1, 5, 9, 0, 0)):
        self.current = start
        self.step = timedelta(seconds=1)

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


class FakeReasoning:
    """Scripted question generator, answer oracle and feedback synthesizer."""

    def __init__(self):
        self.judgments: list[AnswerJudgment] = []
        self.default_judgment = AnswerJudgment(
            quality_tier=QualityTier.GOOD,
            completeness_tier=CompletenessTier.COMPLETE,
            followup_warranted=False,
            reasoning="Complete answer",
        )
        self.question_error: Exception | None = None
        self.judge_error: Exception | None = None
        self.summary_error: Exception | None = None
        self.judge_delay = 0.0
        self.question_calls = []
        self.judge_calls = []
        self.summary_calls = []
        self.closed = False

    async def generate_question(self, context):
        self.question_calls.append(context)
        if self.question_error:
            raise self.question_error
        return f"Main question {context.question_number}"

    async def judge_answer(self, question, answer, context):
        self.judge_calls.append((question, answer, context))
        if self.judge_delay:
            await asyncio.sleep(self.judge_delay)
        if self.judge_error:
            raise self.judge_error
        if self.judgments:
            return self.judgments.pop(0)
        return self.default_judgment

    async def summarize_interview(self, transcript):
        self.summary_calls.append(transcript)
        if self.summary_error:
            raise self.summary_error
        return FeedbackResult(
            strengths=("Clear structure",),
            weaknesses=("Few concrete examples",),
            suggestions=("Quantify the impact of your work",),
            overall_score=80,
            summary="Solid interview overall",
            detailed_analysis={
                "technical_skills": "Good",
                "communication": "Clear",
                "problem_solving": "Methodical",
                "experience": "Relevant",
            },
        )

    async def close(self):
        self.closed = True


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def fake_reasoning():
    return FakeReasoning()


@pytest.fixture
def settings():
    return Settings(
        llm_gateway_host="",
        langfuse_enabled=False,
        question_timeout_seconds=0.05,
        oracle_timeout_seconds=0.05,
        synthesizer_timeout_seconds=0.05,
    )


@pytest.fixture
def orchestrator(fake_reasoning, settings, clock):
    return InterviewOrchestrator(
        ai_reasoning=fake_reasoning,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def setup_config():
    return {
        "target_role": "backend-developer",
        "interview_type": "technical",
        "difficulty": "intermediate",
        "skills": ["Python", "PostgreSQL"],
        "years_of_experience": 1,
        "total_questions": 3,
        "max_followup_depth": 2,
    }
