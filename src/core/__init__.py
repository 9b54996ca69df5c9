"""
Core business logic modules for the interview session engine

Contains:
- Interview Orchestrator: State machine for the session lifecycle
- Phase Tracker: Follow-up vs. advance decisions
- Conversation Log: Append-only event log
- Session Store: Versioned session documents
- AI Reasoning: Language-model gateway client
- Evaluation Engine: Answer oracle with fallback
- Report Generator: Feedback synthesis with fallback
"""

from src.core.interview_orchestrator import InterviewOrchestrator
from src.core.ai_reasoning import AIReasoningLayer
from src.core.evaluation_engine import EvaluationEngine
from src.core.report_generator import ReportGenerator
from src.core.session_store import SessionStore

__all__ = [
    "InterviewOrchestrator",
    "AIReasoningLayer",
    "EvaluationEngine",
    "ReportGenerator",
    "SessionStore",
]
