"""
Phase/Depth Tracker - decides between a follow-up and the next main question.

Split in two halves:
- ``decide_next_step`` is pure: session + judgment in, TrackerDecision out.
- ``apply_decision`` folds a decision into a new session value.

Neither touches storage or the network, so both are unit-testable on their
own. The controller owns everything effectful around them.
"""

import logging
import math
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.core.conversation_log import append_event, events_for_question
from src.models.evaluation import AnswerJudgment
from src.models.interview import (
    EventKind,
    FollowUpCandidate,
    InterviewPhase,
    InterviewSession,
)

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.7


class NextAction(str, Enum):
    """What the tracker wants to happen after an answer."""

    FOLLOW_UP = "follow_up"
    ADVANCE = "advance"


class AdvanceReason(str, Enum):
    NOT_WARRANTED = "followup_not_warranted"
    DEPTH_LIMIT = "max_depth_reached"
    NO_CANDIDATE = "no_candidate_available"


class TrackerDecision(BaseModel):
    """Outcome of one tracker step."""

    model_config = ConfigDict(frozen=True)

    action: NextAction
    followup_text: str | None = None
    followup_queue: tuple[FollowUpCandidate, ...] = ()
    reason: AdvanceReason | None = None


# =============================================================================
# PHASE
# =============================================================================

def phase_for_question(question_index: int, total_questions: int) -> InterviewPhase:
    """
    Advisory phase for a main question.

    Scales the 10-question plan (1-2 introduction, 3-5 technical,
    6-8 behavioral, 9-10 closing) onto ``total_questions``. The first
    question is always the introduction.
    """
    if question_index <= 0 or total_questions <= 1:
        return InterviewPhase.INTRODUCTION

    position = math.ceil((question_index + 1) * 10 / total_questions)
    if position <= 2:
        return InterviewPhase.INTRODUCTION
    elif position <= 5:
        return InterviewPhase.TECHNICAL
    elif position <= 8:
        return InterviewPhase.BEHAVIORAL
    else:
        return InterviewPhase.CLOSING


# =============================================================================
# SIMILARITY
# =============================================================================

def question_similarity(first: str, second: str) -> float:
    """Share of significant words two questions have in common (0-1)."""
    words1 = [w for w in first.lower().split() if len(w) > 2]
    words2 = [w for w in second.lower().split() if len(w) > 2]
    if not words1 or not words2:
        return 0.0
    common = [w for w in words1 if w in words2]
    return len(common) / max(len(words1), len(words2))


def _is_repeat(text: str, asked: list[str], threshold: float) -> bool:
    return any(
        text.strip().lower() == q.strip().lower() or question_similarity(text, q) > threshold
        for q in asked
    )


# =============================================================================
# DECISION
# =============================================================================

def _take_first_fresh(
    candidates: list[FollowUpCandidate],
    asked: list[str],
    threshold: float,
    session_id: str,
) -> tuple[FollowUpCandidate | None, list[FollowUpCandidate]]:
    """
    Pick the first candidate that does not repeat an asked question.

    Returns the pick (marked consumed) and the surviving candidates in
    order. Repeats are removed, never marked consumed.
    """
    chosen = None
    survivors = []
    for candidate in candidates:
        if chosen is None and _is_repeat(candidate.text, asked, threshold):
            logger.info(
                f"Session {session_id}: dropping repeated follow-up "
                f"'{candidate.text[:50]}'"
            )
            continue
        if chosen is None:
            candidate = candidate.model_copy(update={"consumed": True})
            chosen = candidate
        survivors.append(candidate)
    return chosen, survivors


def decide_next_step(
    session: InterviewSession,
    judgment: AnswerJudgment,
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> TrackerDecision:
    """
    Decide whether to ask a follow-up or move to the next main question.

    Follows up only when the oracle asks for it, the topic depth is below
    the configured maximum, and a fresh candidate is available. Pending
    candidates for the topic are tried before the oracle's new ones, and
    the new ones are queued only when no pending candidate is usable.
    Candidates that repeat a question already asked on this topic are
    dropped from the queue. A candidate is marked consumed only when it
    is asked. Any other outcome advances.
    """
    index = session.current_question_index
    queue = session.followup_queue

    if not judgment.followup_warranted:
        return TrackerDecision(
            action=NextAction.ADVANCE,
            followup_queue=queue,
            reason=AdvanceReason.NOT_WARRANTED,
        )

    if session.current_question_followups >= session.setup.max_followup_depth:
        return TrackerDecision(
            action=NextAction.ADVANCE,
            followup_queue=queue,
            reason=AdvanceReason.DEPTH_LIMIT,
        )

    asked = [
        event.content
        for event in events_for_question(session.conversation_log, index)
        if event.kind in (EventKind.QUESTION, EventKind.FOLLOW_UP)
    ]
    settled = [c for c in queue if c.question_index != index or c.consumed]
    pending = [c for c in queue if c.question_index == index and not c.consumed]

    chosen, pending = _take_first_fresh(pending, asked, similarity_threshold, session.session_id)
    if chosen is None:
        fresh = [
            FollowUpCandidate(question_index=index, text=text)
            for text in judgment.candidate_followups
        ]
        chosen, pending = _take_first_fresh(fresh, asked, similarity_threshold, session.session_id)

    new_queue = tuple(settled + pending)
    if chosen is None:
        return TrackerDecision(
            action=NextAction.ADVANCE,
            followup_queue=new_queue,
            reason=AdvanceReason.NO_CANDIDATE,
        )

    return TrackerDecision(
        action=NextAction.FOLLOW_UP,
        followup_text=chosen.text,
        followup_queue=new_queue,
    )


def apply_decision(
    session: InterviewSession,
    decision: TrackerDecision,
    now: datetime,
) -> InterviewSession:
    """Fold a tracker decision into a new session value."""
    if decision.action == NextAction.FOLLOW_UP:
        log = append_event(
            session.conversation_log,
            kind=EventKind.FOLLOW_UP,
            content=decision.followup_text,
            question_index=session.current_question_index,
            is_followup=True,
            timestamp=now,
        )
        return session.model_copy(update={
            "followup_queue": decision.followup_queue,
            "conversation_log": log,
            "current_question_followups": session.current_question_followups + 1,
            "total_followups_asked": session.total_followups_asked + 1,
            "last_question_was_followup": True,
            "current_prompt": decision.followup_text,
        })

    next_index = min(session.current_question_index + 1, session.setup.total_questions)
    return session.model_copy(update={
        "followup_queue": decision.followup_queue,
        "current_question_index": next_index,
        "current_question_followups": 0,
        "total_core_questions_asked": session.total_core_questions_asked + 1,
        "last_question_was_followup": False,
        "current_prompt": None,
    })
