"""
Error taxonomy for the interview session engine.

State errors (InvalidTransition, NoCurrentQuestion, SessionClosed,
FeedbackAlreadyGenerated) describe caller misuse and are surfaced verbatim.
Provider errors (OracleUnavailable, SynthesizerUnavailable,
QuestionGenerationUnavailable) are recovered inside the engine.
"""


class InterviewEngineError(Exception):
    """Base class for all engine errors."""


class SessionStateError(InterviewEngineError):
    """A requested action is not legal for the session's current status."""

    def __init__(self, session_id: str, status: str, action: str, message: str | None = None):
        self.session_id = session_id
        self.status = status
        self.action = action
        super().__init__(
            message or f"Cannot {action} session {session_id} while it is {status}"
        )


class InvalidTransition(SessionStateError):
    """Attempted state change is not legal from the current status."""


class NoCurrentQuestion(SessionStateError):
    """An answer was submitted but there is no open question slot."""


class SessionClosed(SessionStateError):
    """Mutation attempted on a completed or cancelled session."""


class FeedbackAlreadyGenerated(SessionStateError):
    """Feedback was already attached to this session."""


class SessionNotFound(InterviewEngineError):
    """No session is stored under the given id."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class ConcurrentModification(InterviewEngineError):
    """A session write was based on a stale version."""

    def __init__(self, session_id: str, expected: int, actual: int):
        self.session_id = session_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Session {session_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class ValidationError(InterviewEngineError):
    """Malformed session configuration or request payload."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        self.errors = errors or []
        super().__init__(message)


class ExternalServiceUnavailable(InterviewEngineError):
    """An external language-model call failed or returned garbage."""


class OracleUnavailable(ExternalServiceUnavailable):
    """The answer-quality oracle could not produce a judgment."""


class SynthesizerUnavailable(ExternalServiceUnavailable):
    """The feedback synthesizer could not produce feedback."""


class QuestionGenerationUnavailable(ExternalServiceUnavailable):
    """The question generator could not produce a question."""
