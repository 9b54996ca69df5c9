"""
Conversation log builder.

The log is an append-only tuple of ConversationEvent. Appending returns a
new tuple; there is no update or delete. Timestamps never go backwards:
an event stamped earlier than its predecessor is clamped to the
predecessor's time.
"""

from datetime import datetime

from src.models.interview import ConversationEvent, EventKind


def append_event(
    log: tuple[ConversationEvent, ...],
    kind: EventKind,
    content: str,
    question_index: int,
    is_followup: bool,
    timestamp: datetime,
) -> tuple[ConversationEvent, ...]:
    """Return ``log`` with one new event at the end."""
    if log and timestamp < log[-1].timestamp:
        timestamp = log[-1].timestamp

    event = ConversationEvent(
        kind=kind,
        content=content,
        timestamp=timestamp,
        question_index=question_index,
        is_followup=is_followup,
    )
    return log + (event,)


def events_for_question(
    log: tuple[ConversationEvent, ...],
    question_index: int,
) -> list[ConversationEvent]:
    """All events tied to one main question, in order."""
    return [e for e in log if e.question_index == question_index]
