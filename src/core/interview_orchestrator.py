"""
Interview Orchestrator - State machine for managing interview lifecycle.

This is the central coordinator for the interview session engine.
It validates transitions, serializes mutations per session, consults the
answer oracle through the phase/depth tracker, and attaches feedback
exactly once when the last main question is answered.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from src.config.settings import Settings, get_settings
from src.core.conversation_log import append_event
from src.core.errors import (
    FeedbackAlreadyGenerated,
    InvalidTransition,
    NoCurrentQuestion,
    QuestionGenerationUnavailable,
    SessionClosed,
    ValidationError,
)
from src.core.evaluation_engine import EvaluationEngine
from src.core.phase_tracker import (
    NextAction,
    apply_decision,
    decide_next_step,
    phase_for_question,
)
from src.core.report_generator import ReportGenerator
from src.core.session_store import SessionStore
from src.models.evaluation import AnswerContext
from src.models.interview import (
    EventKind,
    InterviewSession,
    InterviewSetup,
    SessionStatus,
)
from src.models.question import QuestionContext, fallback_question
from src.models.report import InterviewFeedback
from src.models.roles import InterviewerPersonality

logger = logging.getLogger(__name__)


class InterviewOrchestrator:
    """
    Manages the interview lifecycle using a state machine pattern.

    States:
        DRAFT → IN_PROGRESS → COMPLETED
          ↓          ↓
        CANCELLED ←──┘

    The orchestrator coordinates between:
    - Question generator (AI reasoning layer, with a fixed fallback bank)
    - Evaluation engine (answer oracle with timeout and fallback)
    - Phase/depth tracker (pure follow-up vs. advance decision)
    - Report generator (feedback synthesis, once per session)
    - Session store
    """

    VALID_TRANSITIONS: dict[SessionStatus, list[SessionStatus]] = {
        SessionStatus.DRAFT: [SessionStatus.IN_PROGRESS, SessionStatus.CANCELLED],
        SessionStatus.IN_PROGRESS: [SessionStatus.COMPLETED, SessionStatus.CANCELLED],
        SessionStatus.COMPLETED: [],  # Terminal state
        SessionStatus.CANCELLED: [],  # Terminal state
    }

    def __init__(
        self,
        ai_reasoning: Any = None,  # AIReasoningLayer
        evaluation_engine: EvaluationEngine | None = None,
        report_generator: ReportGenerator | None = None,
        store: SessionStore | None = None,
        settings: Settings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the orchestrator with component dependencies.

        Args:
            ai_reasoning: Question generator (and default oracle/synthesizer)
            evaluation_engine: Answer oracle adapter
            report_generator: Feedback synthesizer adapter
            store: Session document store
            settings: Application settings
            clock: Source of "now" timestamps
        """
        self.settings = settings or get_settings()
        self.ai_reasoning = ai_reasoning
        self.evaluation_engine = evaluation_engine or EvaluationEngine(
            ai_reasoning, timeout_seconds=self.settings.oracle_timeout_seconds
        )
        self.report_generator = report_generator or ReportGenerator(
            ai_reasoning, timeout_seconds=self.settings.synthesizer_timeout_seconds
        )
        self.store = store or SessionStore()
        self._clock = clock or datetime.utcnow

        # One lock per session id; sessions never share one
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock(self, session_id: str) -> asyncio.Lock:
        return self._locks.setdefault(session_id, asyncio.Lock())

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    async def create_session(
        self,
        user_id: str,
        setup: InterviewSetup | dict[str, Any],
        personality: InterviewerPersonality | str = InterviewerPersonality.FRIENDLY,
    ) -> InterviewSession:
        """
        Create a new draft session.

        Args:
            user_id: Owning user
            setup: Interview configuration (model or raw mapping)
            personality: Interviewer personality

        Raises:
            ValidationError: If the configuration is malformed
        """
        if not user_id or not str(user_id).strip():
            raise ValidationError("user_id is required")

        if not isinstance(setup, InterviewSetup):
            raw = dict(setup)
            raw.setdefault("total_questions", self.settings.default_total_questions)
            raw.setdefault("max_followup_depth", self.settings.default_follow_up_depth)
            try:
                setup = InterviewSetup.model_validate(raw)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid interview configuration",
                    errors=e.errors(include_url=False, include_context=False, include_input=False),
                ) from e

        if setup.total_questions > self.settings.max_total_questions:
            raise ValidationError(
                f"total_questions must be at most {self.settings.max_total_questions}"
            )
        if setup.max_followup_depth > self.settings.max_follow_up_depth:
            raise ValidationError(
                f"max_followup_depth must be at most {self.settings.max_follow_up_depth}"
            )

        session = InterviewSession.new(
            user_id=str(user_id).strip(),
            setup=setup,
            personality=self._parse_personality(personality),
            created_at=self._clock(),
        )
        session = self.store.insert(session)

        logger.info(
            f"Created interview session: {session.session_id} "
            f"({setup.target_role.value}, {setup.interview_type.value}, "
            f"{setup.total_questions} questions)"
        )
        return session

    def get_session(self, session_id: str) -> InterviewSession:
        """Get a session by ID. Raises SessionNotFound."""
        return self.store.get(session_id)

    def list_sessions(
        self,
        user_id: str,
        status: SessionStatus | str | None = None,
    ) -> list[InterviewSession]:
        """A user's sessions, newest first, optionally filtered by status."""
        if status is not None and not isinstance(status, SessionStatus):
            try:
                status = SessionStatus(status)
            except ValueError as e:
                raise ValidationError(f"Unknown session status: {status}") from e
        return self.store.list_for_user(user_id, status)

    def get_session_stats(self, user_id: str) -> dict[str, Any]:
        """
        Per-status statistics for a user.

        Returns:
            Total count plus, per status, the count, average overall score
            (sessions with feedback only) and average duration in seconds
        """
        by_status: dict[str, dict[str, Any]] = {}
        sessions = self.store.list_for_user(user_id)

        for status in SessionStatus:
            group = [s for s in sessions if s.status == status]
            scores = [s.feedback.overall_score for s in group if s.feedback]
            durations = [s.get_duration_seconds() for s in group if s.started_at]
            by_status[status.value] = {
                "count": len(group),
                "average_score": round(sum(scores) / len(scores), 1) if scores else None,
                "average_duration_seconds": (
                    round(sum(durations) / len(durations), 1) if durations else None
                ),
            }

        return {"total": len(sessions), "by_status": by_status}

    def get_feedback(self, session_id: str) -> InterviewFeedback:
        """Feedback block of a completed session."""
        session = self.store.get(session_id)
        if session.feedback is None:
            raise InvalidTransition(
                session.session_id,
                session.status.value,
                "get_feedback",
                f"Feedback for session {session.session_id} is not available "
                f"while it is {session.status.value}",
            )
        return session.feedback

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _transition(
        self,
        session: InterviewSession,
        new_status: SessionStatus,
        action: str,
    ) -> InterviewSession:
        """
        Validate and apply a status change.

        Raises:
            SessionClosed: If the session is already terminal
            InvalidTransition: If the change is not legal from the current status
        """
        old_status = session.status
        if old_status.is_terminal:
            raise SessionClosed(session.session_id, old_status.value, action)
        if new_status not in self.VALID_TRANSITIONS.get(old_status, []):
            raise InvalidTransition(session.session_id, old_status.value, action)

        logger.info(f"Session {session.session_id}: {old_status.value} → {new_status.value}")
        return session.model_copy(update={"status": new_status})

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def start_session(self, session_id: str) -> InterviewSession:
        """
        Start a draft session and ask the first main question.

        Raises:
            InvalidTransition: If the session is not a draft
            SessionClosed: If the session is completed or cancelled
        """
        async with self._lock(session_id):
            session = self.store.get(session_id)
            session = self._transition(session, SessionStatus.IN_PROGRESS, "start")
            session = session.model_copy(update={
                "started_at": self._clock(),
                "current_question_index": 0,
                "current_question_followups": 0,
            })
            session = await self._ask_main_question(session)
            return self.store.save(session)

    async def record_answer(
        self,
        session_id: str,
        answer_text: str,
        transcript_text: str = "",
        time_spent_seconds: int = 0,
    ) -> InterviewSession:
        """
        Record the answer to the current question and move the interview on.

        The answer is written into the current main-question slot (or only
        logged, for a follow-up), judged by the oracle, and the tracker's
        decision applied. Answering the last main question completes the
        session and attaches feedback.

        Raises:
            InvalidTransition: If the session has not been started
            SessionClosed: If the session is completed or cancelled
            NoCurrentQuestion: If there is no open question to answer
            ValidationError: If the answer payload is malformed
        """
        async with self._lock(session_id):
            session = self.store.get(session_id)
            self._require_answerable(session)
            if not (answer_text or "").strip() and not (transcript_text or "").strip():
                raise ValidationError("answer_text or transcript_text is required")
            if time_spent_seconds < 0:
                raise ValidationError("time_spent_seconds must not be negative")

            index = session.current_question_index
            question_text = session.current_prompt
            is_followup = session.last_question_was_followup
            answer = (answer_text or "").strip() or (transcript_text or "").strip()
            now = self._clock()

            if not is_followup:
                slot = session.questions[index].model_copy(update={
                    "answer": answer,
                    "transcript": transcript_text or "",
                    "time_spent": time_spent_seconds,
                    "is_answered": True,
                    "answered_at": now,
                })
                questions = session.questions[:index] + (slot,) + session.questions[index + 1:]
                session = session.model_copy(update={"questions": questions})

            session = session.model_copy(update={
                "conversation_log": append_event(
                    session.conversation_log,
                    kind=EventKind.ANSWER,
                    content=answer,
                    question_index=index,
                    is_followup=is_followup,
                    timestamp=now,
                ),
            })

            judgment = await self.evaluation_engine.judge(
                question_text,
                answer,
                AnswerContext(
                    session_id=session.session_id,
                    role=session.setup.target_role.display_name,
                    interview_type=session.setup.interview_type.value,
                    difficulty=session.setup.difficulty.value,
                    personality=session.personality.value,
                    question_index=index,
                    followup_depth=session.current_question_followups,
                    is_followup=is_followup,
                ),
            )

            decision = decide_next_step(
                session, judgment, self.settings.follow_up_similarity_threshold
            )
            session = apply_decision(session, decision, self._clock())

            if decision.action == NextAction.FOLLOW_UP:
                logger.info(
                    f"Session {session.session_id}: follow-up "
                    f"{session.current_question_followups}/{session.setup.max_followup_depth} "
                    f"on Q{index + 1}"
                )
            else:
                logger.info(
                    f"Session {session.session_id}: advancing past Q{index + 1} "
                    f"({decision.reason.value})"
                )

            if session.current_question_index >= session.setup.total_questions:
                session = self._transition(session, SessionStatus.COMPLETED, "complete")
                session = session.model_copy(update={"completed_at": self._clock()})
                session = await self._attach_feedback(session)
            elif decision.action == NextAction.ADVANCE:
                session = await self._ask_main_question(session)

            return self.store.save(session)

    async def complete_and_feedback(self, session_id: str) -> InterviewSession:
        """
        Ensure a completed session carries feedback.

        Normally done automatically on the final answer; calling it again
        returns the session unchanged.

        Raises:
            InvalidTransition: If the session has not reached completion
            SessionClosed: If the session was cancelled
        """
        async with self._lock(session_id):
            session = self.store.get(session_id)

            if session.status == SessionStatus.CANCELLED:
                raise SessionClosed(session.session_id, session.status.value, "complete")
            if session.status != SessionStatus.COMPLETED:
                raise InvalidTransition(session.session_id, session.status.value, "complete")

            if session.feedback is not None:
                logger.info(f"Session {session.session_id}: feedback already present")
                return session

            session = await self._attach_feedback(session)
            return self.store.save(session)

    async def cancel_session(self, session_id: str) -> InterviewSession:
        """
        Cancel a draft or in-progress session.

        Raises:
            SessionClosed: If the session is already completed or cancelled
        """
        async with self._lock(session_id):
            session = self.store.get(session_id)
            session = self._transition(session, SessionStatus.CANCELLED, "cancel")
            session = session.model_copy(update={"current_prompt": None})
            return self.store.save(session)

    async def update_personality(
        self,
        session_id: str,
        personality: InterviewerPersonality | str,
    ) -> InterviewSession:
        """Change the interviewer personality of an open session."""
        personality = self._parse_personality(personality)

        async with self._lock(session_id):
            session = self.store.get(session_id)
            if session.is_closed:
                raise SessionClosed(
                    session.session_id, session.status.value, "update_personality"
                )
            session = session.model_copy(update={"personality": personality})
            logger.info(f"Session {session.session_id}: personality → {personality.value}")
            return self.store.save(session)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _require_answerable(self, session: InterviewSession) -> None:
        if session.status == SessionStatus.DRAFT:
            raise InvalidTransition(session.session_id, session.status.value, "answer")
        if session.is_closed:
            raise SessionClosed(session.session_id, session.status.value, "answer")
        if session.get_current_question() is None or session.current_prompt is None:
            raise NoCurrentQuestion(
                session.session_id,
                session.status.value,
                "answer",
                f"Session {session.session_id} has no open question to answer",
            )

    def _parse_personality(self, value: InterviewerPersonality | str) -> InterviewerPersonality:
        try:
            return InterviewerPersonality(value)
        except ValueError as e:
            raise ValidationError(f"Unknown interviewer personality: {value}") from e

    async def _ask_main_question(self, session: InterviewSession) -> InterviewSession:
        """Generate the question for the current slot and log it."""
        index = session.current_question_index
        phase = phase_for_question(index, session.setup.total_questions)
        context = QuestionContext.from_session(session, index, phase.value)

        text = await self._generate_question(context)
        now = self._clock()

        slot = session.questions[index].model_copy(update={"question": text, "asked_at": now})
        questions = session.questions[:index] + (slot,) + session.questions[index + 1:]

        return session.model_copy(update={
            "questions": questions,
            "phase": phase,
            "conversation_log": append_event(
                session.conversation_log,
                kind=EventKind.QUESTION,
                content=text,
                question_index=index,
                is_followup=False,
                timestamp=now,
            ),
            "current_prompt": text,
            "last_question_was_followup": False,
        })

    async def _generate_question(self, context: QuestionContext) -> str:
        """Ask the generator for a question, falling back to the fixed bank."""
        if self.ai_reasoning:
            try:
                return await asyncio.wait_for(
                    self.ai_reasoning.generate_question(context),
                    timeout=self.settings.question_timeout_seconds,
                )
            except asyncio.TimeoutError:
                logger.warning(
                    f"Question generation timed out for session {context.session_id}, "
                    f"using fallback question"
                )
            except QuestionGenerationUnavailable as e:
                logger.warning(
                    f"Question generator unavailable for session {context.session_id}: {e}"
                )
            except Exception as e:
                logger.error(f"Question generation failed for session {context.session_id}: {e}")

        return fallback_question(context)

    async def _attach_feedback(self, session: InterviewSession) -> InterviewSession:
        """Generate and attach feedback; a session gets it only once."""
        if session.feedback is not None:
            raise FeedbackAlreadyGenerated(
                session.session_id, session.status.value, "generate_feedback"
            )

        feedback = await self.report_generator.generate(session, self._clock())
        logger.info(
            f"Session {session.session_id}: feedback generated "
            f"(score {feedback.overall_score}{', fallback' if feedback.is_fallback else ''})"
        )
        return session.model_copy(update={"feedback": feedback})

    async def close(self):
        """Release the AI reasoning layer's resources."""
        if self.ai_reasoning and hasattr(self.ai_reasoning, "close"):
            await self.ai_reasoning.close()
