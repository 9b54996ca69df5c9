from datetime import datetime, timedelta

import pytest

from src.core.errors import ConcurrentModification, SessionNotFound
from src.core.session_store import SessionStore
from src.models.interview import InterviewSession, InterviewSetup, SessionStatus


def _session(user_id="user-1", minutes=0, **kwargs):
    return InterviewSession.new(
        user_id,
        InterviewSetup(total_questions=2, skills=["SQL"]),
        created_at=datetime(2026, 1, 5, 9, 0) + timedelta(minutes=minutes),
        **kwargs,
    )


def test_insert_and_get_round_trip():
    store = SessionStore()
    stored = store.insert(_session())

    assert stored.version == 1
    assert store.get(stored.session_id) == stored
    assert store.exists(stored.session_id)


def test_insert_twice_is_rejected():
    store = SessionStore()
    stored = store.insert(_session())

    with pytest.raises(ConcurrentModification):
        store.insert(stored)


def test_get_missing():
    with pytest.raises(SessionNotFound):
        SessionStore().get("nope")


def test_save_bumps_version():
    store = SessionStore()
    stored = store.insert(_session())

    saved = store.save(stored.model_copy(update={"status": SessionStatus.IN_PROGRESS}))

    assert saved.version == 2
    assert store.get(stored.session_id).status == SessionStatus.IN_PROGRESS


def test_stale_save_is_rejected():
    store = SessionStore()
    stored = store.insert(_session())
    store.save(stored)

    with pytest.raises(ConcurrentModification) as exc_info:
        store.save(stored.model_copy(update={"status": SessionStatus.CANCELLED}))

    assert exc_info.value.expected == 1
    assert exc_info.value.actual == 2
    assert store.get(stored.session_id).status == SessionStatus.DRAFT


def test_save_unknown_session():
    with pytest.raises(SessionNotFound):
        SessionStore().save(_session())


def test_document_is_plain_json_copy():
    store = SessionStore()
    stored = store.insert(_session())

    document = store.document(stored.session_id)
    document["setup"]["skills"].append("mutated")

    assert document["status"] == "draft"
    assert document["created_at"] == "2026-01-05T09:00:00"
    assert store.get(stored.session_id).setup.skills == ("SQL",)


def test_list_for_user_newest_first_with_filter():
    store = SessionStore()
    first = store.insert(_session(minutes=0))
    second = store.insert(_session(minutes=5, status=SessionStatus.CANCELLED))
    store.insert(_session(user_id="other", minutes=10))

    assert [s.session_id for s in store.list_for_user("user-1")] == [
        second.session_id,
        first.session_id,
    ]
    assert [s.session_id for s in store.list_for_user("user-1", SessionStatus.DRAFT)] == [
        first.session_id
    ]
    assert store.list_for_user("nobody") == []
