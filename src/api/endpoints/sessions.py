"""
Interview session API endpoints

Handles the session lifecycle:
- Creating, listing and reading sessions
- Starting interviews
- Submitting answers
- Completing, cancelling and reading feedback
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from src.api.dependencies import get_orchestrator
from src.core.errors import (
    ConcurrentModification,
    InterviewEngineError,
    SessionNotFound,
    SessionStateError,
    ValidationError,
)
from src.core.interview_orchestrator import InterviewOrchestrator
from src.models.interview import InterviewSession

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateSessionRequest(BaseModel):
    """Request model for session creation."""
    user_id: str
    title: str | None = None
    target_role: str = "software-engineer"
    interview_type: str = "technical"
    difficulty: str = "intermediate"
    skills: list[str] = []
    years_of_experience: int = 0
    total_questions: int | None = None
    max_followup_depth: int | None = None
    personality: str = "friendly"


class AnswerRequest(BaseModel):
    """Request model for answering the current question."""
    answer_text: str = ""
    transcript_text: str = ""
    time_spent_seconds: int = Field(default=0, ge=0)


class PersonalityRequest(BaseModel):
    """Request model for changing the interviewer personality."""
    personality: str


class SessionSummaryResponse(BaseModel):
    """One row of a session listing."""
    session_id: str
    title: str
    status: str
    target_role: str
    interview_type: str
    difficulty: str
    total_questions: int
    answered_questions: int
    progress: int
    overall_score: int | None = None
    created_at: str


# ============================================================================
# HELPERS
# ============================================================================

def _http_error(error: InterviewEngineError) -> HTTPException:
    """Map an engine error onto an HTTP error with a structured detail."""
    detail: dict[str, Any] = {
        "error": type(error).__name__,
        "message": str(error),
        "status": None,
        "action": None,
    }

    if isinstance(error, SessionNotFound):
        return HTTPException(status_code=404, detail=detail)

    if isinstance(error, ValidationError):
        detail["errors"] = error.errors
        return HTTPException(status_code=422, detail=detail)

    if isinstance(error, SessionStateError):
        detail["status"] = error.status
        detail["action"] = error.action
        return HTTPException(status_code=409, detail=detail)

    if isinstance(error, ConcurrentModification):
        return HTTPException(status_code=409, detail=detail)

    return HTTPException(status_code=500, detail=detail)


def _session_payload(session: InterviewSession) -> dict[str, Any]:
    """Full session document plus derived progress fields."""
    payload = session.model_dump(mode="json")
    payload["title"] = session.setup.display_title
    payload["progress"] = session.progress_summary()
    payload["duration_seconds"] = session.get_duration_seconds()
    return payload


def _summary(session: InterviewSession) -> SessionSummaryResponse:
    return SessionSummaryResponse(
        session_id=session.session_id,
        title=session.setup.display_title,
        status=session.status.value,
        target_role=session.setup.target_role.value,
        interview_type=session.setup.interview_type.value,
        difficulty=session.setup.difficulty.value,
        total_questions=session.setup.total_questions,
        answered_questions=session.answered_questions,
        progress=session.progress,
        overall_score=session.feedback.overall_score if session.feedback else None,
        created_at=session.created_at.isoformat(),
    )


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("", status_code=201)
async def create_session(
    request: CreateSessionRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """
    Create a new interview session.

    The session starts as a draft; call /start to begin.
    """
    setup = request.model_dump(exclude={"user_id", "personality"}, exclude_none=True)
    try:
        session = await orchestrator.create_session(
            request.user_id, setup, personality=request.personality
        )
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.get("", response_model=list[SessionSummaryResponse])
async def list_sessions(
    user_id: str = Query(...),
    status: str | None = Query(default=None),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> list[SessionSummaryResponse]:
    """List a user's sessions, newest first."""
    try:
        sessions = orchestrator.list_sessions(user_id, status)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return [_summary(s) for s in sessions]


@router.get("/stats")
async def session_stats(
    user_id: str = Query(...),
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Per-status counts, average scores and durations for a user."""
    return orchestrator.get_session_stats(user_id)


@router.get("/{session_id}")
async def get_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Get a session with its progress."""
    try:
        session = orchestrator.get_session(session_id)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.post("/{session_id}/start")
async def start_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """
    Start the interview.

    Moves the session to in-progress and asks the first question.
    """
    try:
        session = await orchestrator.start_session(session_id)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.post("/{session_id}/answer")
async def answer_question(
    session_id: str,
    request: AnswerRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """
    Submit an answer to the current question.

    The response carries the next question (a follow-up or the next main
    question), or the feedback when the interview has finished.
    """
    try:
        session = await orchestrator.record_answer(
            session_id,
            answer_text=request.answer_text,
            transcript_text=request.transcript_text,
            time_spent_seconds=request.time_spent_seconds,
        )
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.post("/{session_id}/complete")
async def complete_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Ensure a finished session carries feedback. Safe to call repeatedly."""
    try:
        session = await orchestrator.complete_and_feedback(session_id)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.post("/{session_id}/cancel")
async def cancel_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Cancel a draft or in-progress session."""
    try:
        session = await orchestrator.cancel_session(session_id)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.put("/{session_id}/personality")
async def update_personality(
    session_id: str,
    request: PersonalityRequest,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Change the interviewer personality."""
    try:
        session = await orchestrator.update_personality(session_id, request.personality)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return _session_payload(session)


@router.get("/{session_id}/feedback")
async def get_feedback(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict[str, Any]:
    """Get the feedback of a completed session."""
    try:
        feedback = orchestrator.get_feedback(session_id)
    except InterviewEngineError as e:
        raise _http_error(e) from e
    return feedback.model_dump(mode="json")
