"""
API Dependencies

Provides dependency injection for API endpoints.
Manages the singleton instance of the interview orchestrator.
"""

import logging

from src.config.settings import get_settings
from src.core.ai_reasoning import AIReasoningLayer
from src.core.evaluation_engine import EvaluationEngine
from src.core.interview_orchestrator import InterviewOrchestrator
from src.core.report_generator import ReportGenerator

logger = logging.getLogger(__name__)


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_orchestrator: InterviewOrchestrator | None = None


def get_orchestrator() -> InterviewOrchestrator:
    """
    Get the interview orchestrator singleton.

    Lazily initializes all required components. Without a configured
    gateway host the engine runs on its fallback questions and feedback.
    """
    global _orchestrator

    if _orchestrator is None:
        settings = get_settings()

        ai_reasoning = None
        if settings.llm_gateway_host:
            ai_reasoning = AIReasoningLayer(settings)
        else:
            logger.warning("LLM gateway not configured, using fallback questions and feedback")

        _orchestrator = InterviewOrchestrator(
            ai_reasoning=ai_reasoning,
            evaluation_engine=EvaluationEngine(
                ai_reasoning, timeout_seconds=settings.oracle_timeout_seconds
            ),
            report_generator=ReportGenerator(
                ai_reasoning, timeout_seconds=settings.synthesizer_timeout_seconds
            ),
            settings=settings,
        )

    return _orchestrator


async def cleanup():
    """Cleanup resources on shutdown."""
    global _orchestrator

    if _orchestrator:
        await _orchestrator.close()

    _orchestrator = None
