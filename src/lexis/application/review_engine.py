"""
Review state engine: the SM-2 variant used to schedule vocabulary items.

Pure functions only. The current time is always passed in by the caller so
every transition is reproducible in tests.

Quality grades (0-5):
  0 - complete blackout
  1 - wrong answer, remembered after seeing the correct one
  2 - wrong answer, but the correct one seemed easy to recall
  3 - correct answer with serious difficulty
  4 - correct answer after some hesitation
  5 - perfect, instant recall

Unlike classic SM-2, intervals follow a fixed ladder (1, 3, 7, 14, 30, 60
days) indexed by the repetition count. The ease factor is still tracked with
the SM-2 update so that it can drive future tuning, but it does not stretch
intervals. Climbing the full ladder marks the item mastered and pins it to
the last rung.
"""

import logging
import re
from dataclasses import replace
from datetime import datetime, timedelta

from lexis.domain.constants import (
    DEFAULT_RATING_QUALITY,
    FAILED_INTERVAL_DAYS,
    INTERVAL_LADDER,
    LEITNER_BOX_LIMITS,
    MASTERY_LEVELS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASS_THRESHOLD,
    RATING_QUALITY,
    WEAK_FAILURE_RATE,
    WEAK_MIN_REVIEWS,
)
from lexis.domain.errors import InvalidInputError
from lexis.domain.models import ReviewState

logger = logging.getLogger(__name__)

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def validate_quality(quality: int) -> int:
    """Reject anything that is not an int in [0, 5]. No clamping."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"Quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInputError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality


def is_passing(quality: int) -> bool:
    return quality >= PASS_THRESHOLD


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """SM-2 E-Factor adjustment, floored at 1.3."""
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def add_calendar_days(moment: datetime, days: int) -> datetime:
    """
    Shift `moment` by whole calendar days, keeping its wall-clock time and tzinfo.
    """
    return datetime.combine(moment.date() + timedelta(days=days), moment.timetz())


def process_review(state: ReviewState, quality: int, now: datetime) -> ReviewState:
    """
    Compute the state that follows one review.

    Args:
        state: Current review state (an empty ReviewState for new items).
        quality: Recall quality 0-5. Anything else raises InvalidInputError.
        now: Review time.

    Returns:
        A new ReviewState; `state` is left untouched.
    """
    validate_quality(quality)
    last_rung = len(INTERVAL_LADDER) - 1

    if is_passing(quality):
        interval = INTERVAL_LADDER[min(state.repetition_count, last_rung)]
        repetitions = state.repetition_count + 1
        mastered = repetitions >= len(INTERVAL_LADDER)
        correct, wrong = state.correct_reviews + 1, state.wrong_reviews
    else:
        interval = FAILED_INTERVAL_DAYS
        repetitions = 0
        mastered = False
        correct, wrong = state.correct_reviews, state.wrong_reviews + 1

    return replace(
        state,
        ease_factor=update_ease_factor(state.ease_factor, quality),
        interval_days=interval,
        repetition_count=repetitions,
        next_review_at=add_calendar_days(now, interval),
        last_reviewed_at=now,
        total_reviews=state.total_reviews + 1,
        correct_reviews=correct,
        wrong_reviews=wrong,
        is_mastered=mastered,
    )


def quality_from_rating(rating: str) -> int:
    """
    Map a button label to a quality grade.

    again=1, hard=3, good=4, easy=5. Labels are case-insensitive; anything
    unrecognised maps to 3 so newer UI labels keep working.
    """
    label = str(rating).strip().lower()
    if label not in RATING_QUALITY:
        logger.debug(f"Unknown rating label {rating!r}, using quality {DEFAULT_RATING_QUALITY}")
        return DEFAULT_RATING_QUALITY
    return RATING_QUALITY[label]


def resolve_quality(rating: str | int) -> int:
    """
    Accept either a label or a numeric grade.

    Anything that looks like a number is validated as a grade, so "-1" or
    "3.5" are rejected instead of falling back to the default label quality.
    """
    if isinstance(rating, str):
        stripped = rating.strip()
        if _NUMERIC_RE.match(stripped):
            if "." in stripped:
                raise InvalidInputError(f"Quality must be an integer, got {rating!r}")
            return validate_quality(int(stripped))
        return quality_from_rating(stripped)
    return validate_quality(rating)


def is_due_for_review(state: ReviewState, now: datetime) -> bool:
    if state.is_mastered:
        return False
    if state.next_review_at is None:
        return True
    return state.next_review_at <= now


def compute_failure_rate(state: ReviewState) -> float:
    if state.total_reviews <= 0:
        return 0.0
    return state.wrong_reviews / state.total_reviews


def is_weak(state: ReviewState) -> bool:
    """
    True once an item has enough history to show real struggle:
    at least 3 reviews and a failure rate of 30% or more.
    """
    return (
        state.total_reviews >= WEAK_MIN_REVIEWS
        and compute_failure_rate(state) >= WEAK_FAILURE_RATE
    )


def predict_next_interval(state: ReviewState, quality: int) -> int:
    """
    Interval `process_review` would assign for this quality, without reviewing.

    Used to label answer buttons ("good: 3d").
    """
    validate_quality(quality)
    if not is_passing(quality):
        return FAILED_INTERVAL_DAYS
    return INTERVAL_LADDER[min(state.repetition_count, len(INTERVAL_LADDER) - 1)]


def leitner_box(state: ReviewState) -> int:
    """Leitner box (0-4) derived from the repetition count."""
    reps = state.repetition_count
    if reps == 0:
        return 0
    for box, upper in enumerate(LEITNER_BOX_LIMITS[1:], start=1):
        if reps <= upper:
            return box
    return len(LEITNER_BOX_LIMITS)


def mastery_level(state: ReviewState) -> int:
    """Mastery level (0-4) derived from the total number of reviews."""
    for level in range(len(MASTERY_LEVELS) - 1, -1, -1):
        if state.total_reviews >= MASTERY_LEVELS[level][1]:
            return level
    return 0


def mastery_name(level: int) -> str:
    return MASTERY_LEVELS[level][0]
