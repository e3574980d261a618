"""
Session accumulator: buffers review outcomes for one interactive session.

Nothing here touches storage. Answers are collected in memory and handed
back as a single SessionResult when the session ends, so the caller can
persist everything in one bulk write. While the accumulator is IN_SESSION,
callers must hold back externally pushed item updates (see `in_session`).

Not thread-safe: one session is driven by one control flow.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from lexis.domain.constants import XP_EXCELLENT, XP_FAILED, XP_PASSED
from lexis.domain.errors import SessionStateError
from lexis.domain.models import (
    LearningItem,
    ReviewOutcome,
    SessionPhase,
    SessionResult,
    SessionStats,
)

from .review_engine import is_passing, process_review

logger = logging.getLogger(__name__)


def xp_for_quality(quality: int) -> int:
    if quality >= 4:
        return XP_EXCELLENT
    if is_passing(quality):
        return XP_PASSED
    return XP_FAILED


class SessionAccumulator:
    """
    Two-phase state machine: IDLE -> IN_SESSION -> IDLE.

    Illegal transitions raise SessionStateError rather than returning empty
    results, so a broken session flow fails loudly.
    """

    def __init__(self) -> None:
        self._phase = SessionPhase.IDLE
        self._queue: list[LearningItem] = []
        self._outcomes: list[ReviewOutcome] = []
        self._latest: dict[str, LearningItem] = {}
        self._correct = 0
        self._incorrect = 0

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def in_session(self) -> bool:
        return self._phase is SessionPhase.IN_SESSION

    @property
    def queue(self) -> list[LearningItem]:
        return list(self._queue)

    @property
    def outcomes(self) -> list[ReviewOutcome]:
        return list(self._outcomes)

    def _require(self, phase: SessionPhase, action: str) -> None:
        if self._phase is not phase:
            raise SessionStateError(f"Cannot {action} while {self._phase.value}")

    def _reset(self) -> None:
        self._queue = []
        self._outcomes = []
        self._latest = {}
        self._correct = 0
        self._incorrect = 0

    def start_session(self, candidate_queue: Sequence[LearningItem]) -> None:
        self._require(SessionPhase.IDLE, "start a session")
        self._reset()
        self._queue = list(candidate_queue)
        self._phase = SessionPhase.IN_SESSION
        logger.info(f"Session started with {len(self._queue)} candidates")

    def record_outcome(self, item: LearningItem, quality: int, now: datetime) -> LearningItem:
        """
        Apply one answer and buffer the result.

        If the item was already answered in this session, the new review
        builds on the buffered state rather than the one passed in.

        Returns:
            The updated item, for immediate feedback. It is not persisted.
        """
        self._require(SessionPhase.IN_SESSION, "record an outcome")

        current = self._latest.get(item.id, item)
        new_state = process_review(current.review_state, quality, now)
        updated = replace(current, review_state=new_state)

        self._outcomes.append(
            ReviewOutcome(item=updated, previous_state=current.review_state, quality=quality)
        )
        self._latest[item.id] = updated
        if is_passing(quality):
            self._correct += 1
        else:
            self._incorrect += 1
        return updated

    def _flush(self, abandoned: bool) -> SessionResult:
        stats = SessionStats(
            total_reviewed=len(self._outcomes),
            correct=self._correct,
            incorrect=self._incorrect,
            xp=sum(xp_for_quality(o.quality) for o in self._outcomes),
        )
        result = SessionResult(
            updated_items=list(self._latest.values()),
            stats=stats,
            outcomes=list(self._outcomes),
            abandoned=abandoned,
        )
        self._reset()
        self._phase = SessionPhase.IDLE
        return result

    def end_session(self) -> SessionResult:
        self._require(SessionPhase.IN_SESSION, "end a session")
        result = self._flush(abandoned=False)
        logger.info(
            f"Session ended: {result.stats.total_reviewed} reviewed, "
            f"{result.stats.correct} correct, {result.stats.xp} XP"
        )
        return result

    def abandon_session(self) -> SessionResult:
        """
        End early (e.g. the learner navigated away mid-batch).

        Answers already given are still returned; discarding them is up to
        the caller.
        """
        self._require(SessionPhase.IN_SESSION, "abandon a session")
        result = self._flush(abandoned=True)
        logger.info(f"Session abandoned after {result.stats.total_reviewed} reviews")
        return result
