"""
Session Store - document persistence for interview sessions.

Sessions are kept as self-contained JSON documents keyed by session id.
Writes are optimistic: a save must carry the version it was read at, and
each successful save bumps the version.

In-memory for now; the document shape is what a real document store
would hold.
"""

import copy
import logging
from typing import Any

from src.core.errors import ConcurrentModification, SessionNotFound
from src.models.interview import InterviewSession, SessionStatus

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory document store for InterviewSession records."""

    def __init__(self):
        self._documents: dict[str, dict[str, Any]] = {}

    def insert(self, session: InterviewSession) -> InterviewSession:
        """Store a brand-new session at version 1."""
        if self.exists(session.session_id):
            raise ConcurrentModification(
                session.session_id,
                expected=0,
                actual=self._documents[session.session_id]["version"],
            )
        stored = session.model_copy(update={"version": 1})
        self._documents[session.session_id] = stored.model_dump(mode="json")
        return stored

    def get(self, session_id: str) -> InterviewSession:
        """Load a session, raising SessionNotFound if absent."""
        document = self._documents.get(session_id)
        if document is None:
            raise SessionNotFound(session_id)
        return InterviewSession.model_validate(document)

    def exists(self, session_id: str) -> bool:
        return session_id in self._documents

    def save(self, session: InterviewSession) -> InterviewSession:
        """
        Replace the stored document.

        Raises:
            SessionNotFound: If the session was never inserted
            ConcurrentModification: If the stored version moved on
        """
        document = self._documents.get(session.session_id)
        if document is None:
            raise SessionNotFound(session.session_id)

        if document["version"] != session.version:
            raise ConcurrentModification(
                session.session_id,
                expected=session.version,
                actual=document["version"],
            )

        stored = session.model_copy(update={"version": session.version + 1})
        self._documents[session.session_id] = stored.model_dump(mode="json")
        logger.debug(f"Saved session {stored.session_id} at version {stored.version}")
        return stored

    def list_for_user(
        self,
        user_id: str,
        status: SessionStatus | None = None,
    ) -> list[InterviewSession]:
        """All sessions of a user, newest first."""
        sessions = [
            InterviewSession.model_validate(doc)
            for doc in self._documents.values()
            if doc["user_id"] == user_id
            and (status is None or doc["status"] == status.value)
        ]
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    def document(self, session_id: str) -> dict[str, Any]:
        """Raw persisted document (a copy)."""
        document = self._documents.get(session_id)
        if document is None:
            raise SessionNotFound(session_id)
        return copy.deepcopy(document)
