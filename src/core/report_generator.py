"""
Report Generator

Produces the feedback block for a completed interview session.
Uses the feedback synthesizer when available and falls back to a
generic report with a neutral score otherwise.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from src.core.errors import SynthesizerUnavailable
from src.models.interview import InterviewSession
from src.models.report import FeedbackResult, InterviewFeedback, InterviewTranscript

logger = logging.getLogger(__name__)


class ReportGenerator:
    """
    Generates end-of-interview feedback.

    The synthesizer is called at most once per invocation; callers are
    responsible for invoking this only once per session.
    """

    def __init__(self, ai_reasoning: Any = None, timeout_seconds: float = 45.0):
        """
        Initialize report generator.

        Args:
            ai_reasoning: Object exposing ``summarize_interview`` (AIReasoningLayer)
            timeout_seconds: Upper bound for synthesis
        """
        self.ai_reasoning = ai_reasoning
        self.timeout_seconds = timeout_seconds

    async def generate(self, session: InterviewSession, now: datetime) -> InterviewFeedback:
        """
        Build the feedback for a session.

        Args:
            session: The completed session
            now: Timestamp recorded as ``generated_at``

        Returns:
            InterviewFeedback, flagged ``is_fallback`` when synthesis failed
        """
        transcript = InterviewTranscript.from_session(session)
        logger.info(
            f"Generating feedback for session {session.session_id} "
            f"({transcript.answered_count}/{transcript.total_questions} answered)"
        )

        result = await self._synthesize(transcript)
        if result is None:
            return InterviewFeedback.from_result(
                FeedbackResult.fallback(transcript),
                generated_at=now,
                is_fallback=True,
            )

        return InterviewFeedback.from_result(result, generated_at=now)

    async def _synthesize(self, transcript: InterviewTranscript) -> FeedbackResult | None:
        """Call the synthesizer; returns None on any failure."""
        if not self.ai_reasoning:
            logger.info("No feedback synthesizer configured, using fallback feedback")
            return None

        try:
            return await asyncio.wait_for(
                self.ai_reasoning.summarize_interview(transcript),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Feedback synthesis timed out after {self.timeout_seconds}s "
                f"for session {transcript.session_id}"
            )
        except SynthesizerUnavailable as e:
            logger.warning(f"Feedback synthesizer unavailable for session {transcript.session_id}: {e}")
        except Exception as e:
            logger.error(f"Feedback synthesis failed for session {transcript.session_id}: {e}")
        return None
