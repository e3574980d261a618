"""
Domain models for review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from .constants import DEFAULT_EASE_FACTOR


@dataclass(frozen=True)
class ReviewState:
    """
    Scheduling state attached to a learning item.

    A fresh item carries the default value; every review produces a new
    instance rather than mutating this one.

    Attributes:
        ease_factor: SM-2 E-Factor, never below 1.3.
        interval_days: Days until the next review after the latest one.
        repetition_count: Consecutive passing reviews since the last failure.
        next_review_at: When the item becomes due. None means due immediately.
        last_reviewed_at: Time of the latest review, None if never reviewed.
        total_reviews: All reviews ever recorded.
        correct_reviews: Reviews with quality >= 3.
        wrong_reviews: Reviews with quality < 3.
        is_mastered: Set once the full interval ladder has been climbed.
    """

    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = 0
    repetition_count: int = 0
    next_review_at: datetime | None = None
    last_reviewed_at: datetime | None = None
    total_reviews: int = 0
    correct_reviews: int = 0
    wrong_reviews: int = 0
    is_mastered: bool = False

    @property
    def is_new(self) -> bool:
        return self.total_reviews == 0


@dataclass
class LearningItem:
    """
    A vocabulary item in the learner's collection.

    `term`, `definition` and everything in `extra` (phonetics, examples,
    synonyms...) are opaque to the scheduler and passed through unchanged.
    `group_key` is only used for interleaving; None means ungrouped.
    """

    id: str
    term: str = ""
    definition: str = ""
    group_key: str | None = None
    review_state: ReviewState = field(default_factory=ReviewState)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReviewOutcome:
    """
    One buffered answer inside a session.

    Attributes:
        item: The item with its new review state applied.
        previous_state: The state before this review.
        quality: Recall quality (0-5) that produced the new state.
    """

    item: LearningItem
    previous_state: ReviewState
    quality: int

    @property
    def new_state(self) -> ReviewState:
        return self.item.review_state


@dataclass(frozen=True)
class SessionStats:
    """Aggregate counters for one finished session."""

    total_reviewed: int = 0
    correct: int = 0
    incorrect: int = 0
    xp: int = 0


@dataclass(frozen=True)
class SessionResult:
    """
    Everything a session produced, ready for one bulk write.

    `updated_items` holds the latest version of each reviewed item (an
    item answered twice appears once, with its final state). `outcomes`
    keeps every answer in order.
    """

    updated_items: list[LearningItem]
    stats: SessionStats
    outcomes: list[ReviewOutcome] = field(default_factory=list)
    abandoned: bool = False


@dataclass(frozen=True)
class LearnerStats:
    """
    Learner-wide aggregate statistics, persisted next to the items.

    Attributes:
        total_reviews: Reviews across all sessions.
        today_reviews: Reviews on `today_date`.
        today_date: Calendar date `today_reviews` refers to.
        last_study_date: Last calendar date with at least one review.
        streak: Consecutive study days ending at `last_study_date`.
        xp: Accumulated experience points.
        daily_goal: Target reviews per day.
    """

    total_reviews: int = 0
    today_reviews: int = 0
    today_date: date | None = None
    last_study_date: date | None = None
    streak: int = 0
    xp: int = 0
    daily_goal: int = 20


class SessionPhase(str, Enum):
    IDLE = "idle"
    IN_SESSION = "in_session"
