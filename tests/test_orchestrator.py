import asyncio

import pytest

from src.core.errors import (
    InvalidTransition,
    NoCurrentQuestion,
    OracleUnavailable,
    QuestionGenerationUnavailable,
    SessionClosed,
    SessionNotFound,
    SynthesizerUnavailable,
    ValidationError,
)
from src.models.evaluation import AnswerJudgment
from src.models.interview import EventKind, InterviewSession, InterviewSetup, SessionStatus
from src.models.question import FALLBACK_QUESTIONS
from src.models.report import NEUTRAL_SCORE


def follow_up(*candidates):
    return AnswerJudgment(followup_warranted=True, candidate_followups=candidates)


def _create(orchestrator, config, user_id="user-1", **overrides):
    return asyncio.run(orchestrator.create_session(user_id, {**config, **overrides}))


def _started(orchestrator, config, **overrides):
    session = _create(orchestrator, config, **overrides)
    return asyncio.run(orchestrator.start_session(session.session_id))


# =============================================================================
# CREATE / START
# =============================================================================

def test_create_session_is_draft(orchestrator, setup_config):
    session = _create(orchestrator, setup_config)

    assert session.status == SessionStatus.DRAFT
    assert session.version == 1
    assert len(session.questions) == 3
    assert session.conversation_log == ()
    assert session.followup_queue == ()
    assert orchestrator.get_session(session.session_id) == session


def test_create_session_applies_configured_defaults(orchestrator):
    session = _create(orchestrator, {"target_role": "data-scientist"})

    assert session.setup.total_questions == 10
    assert session.setup.max_followup_depth == 3


@pytest.mark.parametrize(
    "overrides",
    [
        {"total_questions": 0},
        {"total_questions": 21},
        {"max_followup_depth": 0},
        {"max_followup_depth": 6},
        {"target_role": "astronaut"},
        {"difficulty": "impossible"},
        {"years_of_experience": -1},
    ],
)
def test_create_session_rejects_bad_config(orchestrator, setup_config, overrides):
    with pytest.raises(ValidationError) as exc_info:
        _create(orchestrator, setup_config, **overrides)

    assert exc_info.value.errors


def test_create_session_rejects_missing_user_and_bad_personality(orchestrator, setup_config):
    with pytest.raises(ValidationError):
        asyncio.run(orchestrator.create_session("  ", setup_config))
    with pytest.raises(ValidationError):
        asyncio.run(orchestrator.create_session("user-1", setup_config, personality="grumpy"))


def test_create_session_accepts_setup_model(orchestrator):
    setup = InterviewSetup(total_questions=2)
    session = asyncio.run(orchestrator.create_session("user-1", setup, personality="challenging"))

    assert session.setup == setup
    assert session.personality.value == "challenging"


def test_start_asks_first_question(orchestrator, setup_config, clock):
    session = _started(orchestrator, setup_config)

    assert session.status == SessionStatus.IN_PROGRESS
    assert session.started_at is not None
    assert session.current_question_index == 0
    assert session.current_prompt == "Main question 1"
    assert session.questions[0].question == "Main question 1"
    assert session.phase.value == "introduction"
    assert [e.kind for e in session.conversation_log] == [EventKind.QUESTION]


def test_start_twice_is_invalid(orchestrator, setup_config):
    session = _started(orchestrator, setup_config)

    with pytest.raises(InvalidTransition) as exc_info:
        asyncio.run(orchestrator.start_session(session.session_id))

    assert exc_info.value.status == "in-progress"
    assert exc_info.value.action == "start"


def test_start_uses_fallback_question_when_generator_fails(orchestrator, fake_reasoning, setup_config):
    fake_reasoning.question_error = QuestionGenerationUnavailable("gateway down")

    session = _started(orchestrator, setup_config)

    expected = FALLBACK_QUESTIONS["introduction"][0].format(role="Backend Developer")
    assert session.current_prompt == expected
    assert session.status == SessionStatus.IN_PROGRESS


def test_unknown_session(orchestrator):
    with pytest.raises(SessionNotFound):
        asyncio.run(orchestrator.start_session("missing"))


# =============================================================================
# ANSWERS & FOLLOW-UPS
# =============================================================================

def test_follow_up_then_depth_limit_advances(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config, max_followup_depth=1)
    fake_reasoning.judgments = [
        follow_up("Can you give a concrete example?"),
        follow_up("And another example?"),
    ]

    session = asyncio.run(orchestrator.record_answer(session.session_id, "I built an API"))

    assert session.current_question_index == 0
    assert session.current_question_followups == 1
    assert session.current_prompt == "Can you give a concrete example?"
    followups = [e for e in session.conversation_log if e.kind == EventKind.FOLLOW_UP]
    assert len(followups) == 1

    session = asyncio.run(orchestrator.record_answer(session.session_id, "Sure, an order service"))

    assert session.current_question_index == 1
    assert session.current_question_followups == 0
    assert session.current_prompt == "Main question 2"
    assert session.total_followups_asked == 1


def test_single_question_completes_with_feedback(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config, total_questions=1)

    session = asyncio.run(orchestrator.record_answer(session.session_id, "My answer", "my answer", 42))

    assert session.current_question_index == 1
    assert session.status == SessionStatus.COMPLETED
    assert session.completed_at is not None
    assert session.feedback is not None
    assert session.feedback.overall_score == 80
    assert not session.feedback.is_fallback
    assert session.questions[0].is_answered
    assert session.questions[0].time_spent == 42
    assert session.current_prompt is None
    assert len(fake_reasoning.summary_calls) == 1


def test_answer_on_draft_is_invalid_and_changes_nothing(orchestrator, setup_config):
    session = _create(orchestrator, setup_config)
    before = orchestrator.store.document(session.session_id)

    with pytest.raises(InvalidTransition) as exc_info:
        asyncio.run(orchestrator.record_answer(session.session_id, "hello"))

    assert exc_info.value.status == "draft"
    assert orchestrator.store.document(session.session_id) == before


def test_answer_on_completed_is_closed_and_changes_nothing(orchestrator, setup_config):
    session = _started(orchestrator, setup_config, total_questions=1)
    session = asyncio.run(orchestrator.record_answer(session.session_id, "done"))
    before = orchestrator.store.document(session.session_id)

    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.record_answer(session.session_id, "one more"))

    after = orchestrator.store.document(session.session_id)
    assert after == before
    assert after["conversation_log"] == before["conversation_log"]


def test_empty_answer_on_draft_reports_state_first(orchestrator, setup_config):
    session = _create(orchestrator, setup_config)

    with pytest.raises(InvalidTransition) as exc_info:
        asyncio.run(orchestrator.record_answer(session.session_id, ""))

    assert exc_info.value.status == "draft"
    assert exc_info.value.action == "answer"


def test_empty_answer_on_closed_sessions_reports_state_first(orchestrator, setup_config):
    completed = _started(orchestrator, setup_config, total_questions=1)
    asyncio.run(orchestrator.record_answer(completed.session_id, "done"))
    cancelled = _started(orchestrator, setup_config)
    asyncio.run(orchestrator.cancel_session(cancelled.session_id))

    with pytest.raises(SessionClosed) as exc_info:
        asyncio.run(orchestrator.record_answer(completed.session_id, ""))
    assert exc_info.value.status == "completed"

    with pytest.raises(SessionClosed) as exc_info:
        asyncio.run(orchestrator.record_answer(cancelled.session_id, "   ", time_spent_seconds=-1))
    assert exc_info.value.status == "cancelled"


def test_answer_without_open_question(orchestrator, setup_config):
    session = InterviewSession.new(
        "user-1",
        InterviewSetup(total_questions=1),
        status=SessionStatus.IN_PROGRESS,
    )
    orchestrator.store.insert(session)

    with pytest.raises(NoCurrentQuestion):
        asyncio.run(orchestrator.record_answer(session.session_id, "anything"))


def test_answer_validation(orchestrator, setup_config):
    session = _started(orchestrator, setup_config)

    with pytest.raises(ValidationError):
        asyncio.run(orchestrator.record_answer(session.session_id, "   "))
    with pytest.raises(ValidationError):
        asyncio.run(orchestrator.record_answer(session.session_id, "fine", time_spent_seconds=-5))


def test_followup_answer_is_logged_not_slotted(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judgments = [follow_up("What did you measure?")]

    session = asyncio.run(orchestrator.record_answer(session.session_id, "Main answer"))
    session = asyncio.run(orchestrator.record_answer(session.session_id, "Latency, mostly"))

    assert session.questions[0].answer == "Main answer"
    answers = [e for e in session.conversation_log if e.kind == EventKind.ANSWER]
    assert [(a.content, a.is_followup) for a in answers] == [
        ("Main answer", False),
        ("Latency, mostly", True),
    ]
    _, _, context = fake_reasoning.judge_calls[-1]
    assert context.is_followup
    assert fake_reasoning.judge_calls[-1][0] == "What did you measure?"


def test_repeated_follow_up_is_dropped_without_consuming(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judgments = [follow_up("Main question 1")]

    session = asyncio.run(orchestrator.record_answer(session.session_id, "An answer"))

    assert session.current_question_index == 1
    assert session.total_followups_asked == 0
    assert session.followup_queue == ()
    assert not [e for e in session.conversation_log if e.kind == EventKind.FOLLOW_UP]


def test_follow_up_event_precedes_its_answer(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judgments = [follow_up("Why that database?"), follow_up("How did it scale?")]

    session = asyncio.run(orchestrator.record_answer(session.session_id, "Postgres"))
    session = asyncio.run(orchestrator.record_answer(session.session_id, "Relational data"))
    session = asyncio.run(orchestrator.record_answer(session.session_id, "Read replicas"))

    kinds = [e.kind for e in session.conversation_log if e.question_index == 0]
    assert kinds == [
        EventKind.QUESTION, EventKind.ANSWER,
        EventKind.FOLLOW_UP, EventKind.ANSWER,
        EventKind.FOLLOW_UP, EventKind.ANSWER,
    ]
    assert session.current_question_index == 1


# =============================================================================
# FAIL-OPEN
# =============================================================================

def test_oracle_failure_advances(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judge_error = OracleUnavailable("boom")

    session = asyncio.run(orchestrator.record_answer(session.session_id, "An answer"))

    assert session.current_question_index == 1
    assert session.status == SessionStatus.IN_PROGRESS


def test_oracle_timeout_advances(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judge_delay = 1.0

    session = asyncio.run(orchestrator.record_answer(session.session_id, "A slow answer"))

    assert session.current_question_index == 1
    assert session.current_question_followups == 0


def test_synthesizer_failure_yields_fallback_feedback(orchestrator, fake_reasoning, setup_config):
    fake_reasoning.summary_error = SynthesizerUnavailable("down")
    session = _started(orchestrator, setup_config, total_questions=1)

    session = asyncio.run(orchestrator.record_answer(session.session_id, "Answer"))

    assert session.status == SessionStatus.COMPLETED
    assert session.feedback.is_fallback
    assert session.feedback.overall_score == NEUTRAL_SCORE


# =============================================================================
# COMPLETION
# =============================================================================

def test_complete_and_feedback_is_idempotent(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config, total_questions=1)
    session = asyncio.run(orchestrator.record_answer(session.session_id, "Answer"))

    again = asyncio.run(orchestrator.complete_and_feedback(session.session_id))
    once_more = asyncio.run(orchestrator.complete_and_feedback(session.session_id))

    assert again.feedback == session.feedback
    assert once_more.feedback == session.feedback
    assert once_more.version == session.version
    assert len(fake_reasoning.summary_calls) == 1


def test_complete_before_last_answer_is_invalid(orchestrator, setup_config):
    session = _started(orchestrator, setup_config)

    with pytest.raises(InvalidTransition):
        asyncio.run(orchestrator.complete_and_feedback(session.session_id))


def test_get_feedback(orchestrator, setup_config):
    session = _started(orchestrator, setup_config, total_questions=1)

    with pytest.raises(InvalidTransition) as exc_info:
        orchestrator.get_feedback(session.session_id)
    assert exc_info.value.action == "get_feedback"

    asyncio.run(orchestrator.record_answer(session.session_id, "Answer"))
    assert orchestrator.get_feedback(session.session_id).summary == "Solid interview overall"


def test_full_interview_keeps_invariants(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judgments = [
        follow_up("Follow-up alpha?"),
        follow_up("Follow-up beta?"),
        follow_up("Follow-up gamma?"),
        AnswerJudgment(followup_warranted=False),
        follow_up("Follow-up delta?"),
    ]

    previous_index = session.current_question_index
    while session.status == SessionStatus.IN_PROGRESS:
        session = asyncio.run(orchestrator.record_answer(session.session_id, "An answer"))
        assert previous_index <= session.current_question_index <= session.setup.total_questions
        assert session.current_question_followups <= session.setup.max_followup_depth
        if session.current_question_index > previous_index:
            assert session.current_question_followups == 0
        previous_index = session.current_question_index

    stamps = [e.timestamp for e in session.conversation_log]
    assert stamps == sorted(stamps)
    assert session.status == SessionStatus.COMPLETED
    assert session.total_followups_asked == 3
    assert session.total_core_questions_asked == 3
    assert session.answered_questions == 3
    consumed = [c for c in session.followup_queue if c.consumed]
    followups = [e for e in session.conversation_log if e.kind == EventKind.FOLLOW_UP]
    assert len(consumed) == len(followups) == 3


# =============================================================================
# CANCEL / PERSONALITY
# =============================================================================

def test_cancel_from_draft_and_in_progress(orchestrator, setup_config):
    draft = _create(orchestrator, setup_config)
    running = _started(orchestrator, setup_config)

    assert asyncio.run(orchestrator.cancel_session(draft.session_id)).status == SessionStatus.CANCELLED
    cancelled = asyncio.run(orchestrator.cancel_session(running.session_id))
    assert cancelled.status == SessionStatus.CANCELLED
    assert cancelled.feedback is None


def test_cancelled_session_rejects_everything(orchestrator, setup_config):
    session = _started(orchestrator, setup_config)
    asyncio.run(orchestrator.cancel_session(session.session_id))

    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.cancel_session(session.session_id))
    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.record_answer(session.session_id, "late"))
    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.start_session(session.session_id))
    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.complete_and_feedback(session.session_id))


def test_cancel_completed_session_is_closed(orchestrator, setup_config):
    session = _started(orchestrator, setup_config, total_questions=1)
    asyncio.run(orchestrator.record_answer(session.session_id, "Answer"))

    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.cancel_session(session.session_id))


def test_update_personality(orchestrator, setup_config):
    session = _started(orchestrator, setup_config)

    updated = asyncio.run(orchestrator.update_personality(session.session_id, "technical"))
    assert updated.personality.value == "technical"

    asyncio.run(orchestrator.cancel_session(session.session_id))
    with pytest.raises(SessionClosed):
        asyncio.run(orchestrator.update_personality(session.session_id, "friendly"))


# =============================================================================
# CONCURRENCY
# =============================================================================

def test_concurrent_answers_are_serialized(orchestrator, fake_reasoning, setup_config):
    session = _started(orchestrator, setup_config)
    fake_reasoning.judge_delay = 0.01

    async def answer_twice():
        return await asyncio.gather(
            orchestrator.record_answer(session.session_id, "first"),
            orchestrator.record_answer(session.session_id, "second"),
        )

    asyncio.run(answer_twice())
    final = orchestrator.get_session(session.session_id)

    assert final.current_question_index == 2
    assert [(e.kind, e.question_index) for e in final.conversation_log] == [
        (EventKind.QUESTION, 0),
        (EventKind.ANSWER, 0),
        (EventKind.QUESTION, 1),
        (EventKind.ANSWER, 1),
        (EventKind.QUESTION, 2),
    ]
    assert {final.questions[0].answer, final.questions[1].answer} == {"first", "second"}


def test_sessions_do_not_share_state(orchestrator, setup_config):
    first = _started(orchestrator, setup_config)
    second = _started(orchestrator, setup_config)

    asyncio.run(orchestrator.record_answer(first.session_id, "only the first"))

    assert orchestrator.get_session(first.session_id).current_question_index == 1
    assert orchestrator.get_session(second.session_id).current_question_index == 0


# =============================================================================
# LISTING & STATS
# =============================================================================

def test_list_sessions_and_stats(orchestrator, setup_config):
    older = _create(orchestrator, setup_config)
    done = _started(orchestrator, setup_config, total_questions=1)
    asyncio.run(orchestrator.record_answer(done.session_id, "Answer"))
    _create(orchestrator, setup_config, user_id="someone-else")

    sessions = orchestrator.list_sessions("user-1")
    assert [s.session_id for s in sessions] == [done.session_id, older.session_id]
    assert [s.session_id for s in orchestrator.list_sessions("user-1", "draft")] == [older.session_id]

    stats = orchestrator.get_session_stats("user-1")
    assert stats["total"] == 2
    assert stats["by_status"]["completed"]["count"] == 1
    assert stats["by_status"]["completed"]["average_score"] == 80.0
    assert stats["by_status"]["completed"]["average_duration_seconds"] > 0
    assert stats["by_status"]["draft"]["average_score"] is None
    assert stats["by_status"]["cancelled"]["count"] == 0


def test_list_sessions_rejects_unknown_status(orchestrator):
    with pytest.raises(ValidationError):
        orchestrator.list_sessions("user-1", "paused")


def test_close_releases_reasoning_layer(orchestrator, fake_reasoning):
    asyncio.run(orchestrator.close())
    assert fake_reasoning.closed
