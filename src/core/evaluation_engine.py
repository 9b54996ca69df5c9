"""
Evaluation Engine

Wraps the answer-quality oracle. Every judgment is bounded by a timeout;
when the oracle is missing, slow or failing, a fallback judgment that
never asks for a follow-up is returned instead.
"""

import asyncio
import logging
from typing import Any

from src.core.errors import OracleUnavailable
from src.models.evaluation import AnswerContext, AnswerJudgment

logger = logging.getLogger(__name__)


class EvaluationEngine:
    """
    Central evaluation component for candidate answers.

    Responsibilities:
    - Ask the oracle to judge an answer
    - Enforce the oracle timeout
    - Fail open with a no-follow-up judgment
    """

    def __init__(self, ai_reasoning: Any = None, timeout_seconds: float = 20.0):
        """
        Initialize evaluation engine.

        Args:
            ai_reasoning: Object exposing ``judge_answer`` (AIReasoningLayer)
            timeout_seconds: Upper bound for a single judgment
        """
        self.ai_reasoning = ai_reasoning
        self.timeout_seconds = timeout_seconds

    async def judge(
        self,
        question: str,
        answer: str,
        context: AnswerContext,
    ) -> AnswerJudgment:
        """
        Judge one answer. Never raises for oracle failures.

        Args:
            question: Text of the question that was answered
            answer: Candidate's answer text
            context: Session context for the oracle

        Returns:
            The oracle's judgment, or a fallback judgment
        """
        if not self.ai_reasoning:
            return AnswerJudgment.fallback("No answer oracle configured")

        try:
            return await asyncio.wait_for(
                self.ai_reasoning.judge_answer(question, answer, context),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Oracle timed out after {self.timeout_seconds}s for session "
                f"{context.session_id}, Q{context.question_index + 1}"
            )
            return AnswerJudgment.fallback("Answer evaluation timed out")
        except OracleUnavailable as e:
            logger.warning(f"Oracle unavailable for session {context.session_id}: {e}")
            return AnswerJudgment.fallback("Answer evaluation unavailable")
        except Exception as e:
            logger.error(f"Oracle failed for session {context.session_id}: {e}")
            return AnswerJudgment.fallback("Answer evaluation failed")
