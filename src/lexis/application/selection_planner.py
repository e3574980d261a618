"""
Selection planner for review sessions.

Builds ordered review queues by:
1. Scoring every candidate (due-ness, failure rate, ladder position,
   interval length, overdue days)
2. Interleaving across group keys so one lesson cannot dominate
3. Topping up with not-yet-due items when too few are due
4. Splitting the result into fixed-size batches

Priorities are computed once per session start; batches are plain windows
over that order so a learner can stop and resume without reshuffling.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from lexis.domain.constants import (
    DEFAULT_GROUP_KEY,
    DEFAULT_WEAK_LIST_SIZE,
    DUE_WEIGHT,
    FAILURE_RATE_WEIGHT,
    FOCUS_FAILURE_RATE,
    FOCUS_MIN_REVIEWS,
    LADDER_POSITION_CAP,
    LADDER_POSITION_WEIGHT,
    OVERDUE_DAY_WEIGHT,
    SHORT_INTERVAL_CAP,
    SHORT_INTERVAL_WEIGHT,
)
from lexis.domain.errors import InvalidInputError
from lexis.domain.models import LearningItem

from .review_engine import compute_failure_rate, is_due_for_review, is_weak

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise InvalidInputError(f"limit must be >= 0, got {limit}")


def overdue_days(item: LearningItem, is_due: bool, now: datetime) -> int:
    """Whole days past the due date; 0 when not due or never scheduled."""
    next_review = item.review_state.next_review_at
    if not is_due or next_review is None:
        return 0
    return max(0, (now - next_review) // ONE_DAY)


def compute_priority(item: LearningItem, is_due: bool, now: datetime) -> float:
    """
    Urgency score for an item, higher first.

    priority = due * 1000
             + failure_rate * 250
             + max(0, 5 - repetitions) * 12
             + max(0, 2 - interval_days) * 8
             + overdue_days * 2
    """
    state = item.review_state
    score = (
        (DUE_WEIGHT if is_due else 0.0)
        + compute_failure_rate(state) * FAILURE_RATE_WEIGHT
        + max(0, LADDER_POSITION_CAP - state.repetition_count) * LADDER_POSITION_WEIGHT
        + max(0, SHORT_INTERVAL_CAP - state.interval_days) * SHORT_INTERVAL_WEIGHT
        + overdue_days(item, is_due, now) * OVERDUE_DAY_WEIGHT
    )
    logger.debug(f"priority {item.id}: {score:.1f} (due={is_due})")
    return score


def find_due_items(items: Iterable[LearningItem], now: datetime) -> list[LearningItem]:
    return [item for item in items if is_due_for_review(item.review_state, now)]


def interleave_by_group(items: Sequence[LearningItem], limit: int) -> list[LearningItem]:
    """
    Round-robin across group buckets, one item per bucket per round.

    Buckets are visited in the order their first item appears and keep the
    incoming order internally, so the output is reproducible. Items without
    a group key share the "general" bucket.
    """
    _check_limit(limit)

    buckets: dict[str, list[LearningItem]] = {}
    for item in items:
        buckets.setdefault(item.group_key or DEFAULT_GROUP_KEY, []).append(item)

    queues = list(buckets.values())
    cursors = [0] * len(queues)
    result: list[LearningItem] = []

    while len(result) < limit:
        progressed = False
        for idx, queue in enumerate(queues):
            if len(result) >= limit:
                break
            if cursors[idx] < len(queue):
                result.append(queue[cursors[idx]])
                cursors[idx] += 1
                progressed = True
        if not progressed:
            break

    return result


def _rank(items: Iterable[LearningItem], is_due: bool, now: datetime) -> list[LearningItem]:
    # sorted() is stable with reverse=True, so ties keep their incoming order
    return sorted(items, key=lambda item: compute_priority(item, is_due, now), reverse=True)


def select_for_session(
    all_items: Sequence[LearningItem],
    due_items: Sequence[LearningItem],
    limit: int,
    now: datetime,
) -> list[LearningItem]:
    """
    Pick up to `limit` items for a session, due items first.

    Args:
        all_items: The learner's full collection (snapshot).
        due_items: The subset currently due.
        limit: Maximum queue length.
        now: Time used for overdue computation.

    Returns:
        Ordered queue; exactly `limit` long whenever enough non-mastered
        items exist. An empty collection yields an empty queue.
    """
    _check_limit(limit)
    if limit == 0 or (not all_items and not due_items):
        return []

    sorted_due = _rank(due_items, True, now)
    if len(sorted_due) >= limit:
        return interleave_by_group(sorted_due, limit)

    selected = interleave_by_group(sorted_due, len(sorted_due))
    remaining = limit - len(selected)

    due_ids = {item.id for item in due_items}
    not_due = [
        item
        for item in all_items
        if item.id not in due_ids and not item.review_state.is_mastered
    ]
    selected.extend(interleave_by_group(_rank(not_due, False, now), remaining))

    logger.debug(
        f"Selected {len(selected)} items ({len(sorted_due)} due, limit {limit})"
    )
    return selected


def plan_batches(candidates: Sequence[LearningItem], batch_size: int) -> list[list[LearningItem]]:
    """Split an ordered queue into consecutive windows of `batch_size`."""
    if batch_size <= 0:
        raise InvalidInputError(f"batch_size must be > 0, got {batch_size}")
    return [list(candidates[i : i + batch_size]) for i in range(0, len(candidates), batch_size)]


def select_focus_items(items: Iterable[LearningItem]) -> list[LearningItem]:
    """
    Items the learner keeps getting wrong, worst first.

    Looser than `is_weak` (2 reviews, failure rate above 25%) so focus
    sessions have material earlier. Mastered items are skipped.
    """
    struggling = [
        item
        for item in items
        if not item.review_state.is_mastered
        and item.review_state.total_reviews >= FOCUS_MIN_REVIEWS
        and compute_failure_rate(item.review_state) > FOCUS_FAILURE_RATE
    ]
    return sorted(
        struggling, key=lambda item: compute_failure_rate(item.review_state), reverse=True
    )


def rank_weak_items(
    items: Iterable[LearningItem], limit: int = DEFAULT_WEAK_LIST_SIZE
) -> list[LearningItem]:
    """Top `limit` weak items by failure rate."""
    _check_limit(limit)
    weak = [item for item in items if is_weak(item.review_state)]
    weak.sort(key=lambda item: compute_failure_rate(item.review_state), reverse=True)
    return weak[:limit]
