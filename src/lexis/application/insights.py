"""
Learner-facing insights derived from the item collection.

This is a pure computation module with no I/O.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from lexis.domain.constants import (
    CATCHUP_BOOST_CAP,
    DEFAULT_GROUP_KEY,
    GROUP_DUE_WEIGHT,
    GROUP_PROGRESS_WEIGHT,
    GROUP_WEAK_WEIGHT,
    MASTERY_LEVELS,
    WEAK_BOOST_CAP,
)
from lexis.domain.models import LearnerStats, LearningItem, SessionStats

from .review_engine import is_due_for_review, is_weak, mastery_level


@dataclass
class GroupInsight:
    """
    Progress summary for one group (lesson).
    """

    group_key: str
    total: int
    due: int
    weak: int
    mastered: int
    progress: float  # mastered / total
    priority: float


@dataclass
class TodayPlan:
    due_count: int
    weak_count: int
    suggested_reviews: int
    recommended_group: str | None


def group_insights(items: Iterable[LearningItem], now: datetime) -> list[GroupInsight]:
    """
    Summaries per group, most urgent first.

    priority = due * 3 + weak * 4 + (1 - progress) * 2; ties go to the
    group with less progress.
    """
    groups: dict[str, list[LearningItem]] = {}
    for item in items:
        groups.setdefault(item.group_key or DEFAULT_GROUP_KEY, []).append(item)

    insights = []
    for key, members in groups.items():
        total = len(members)
        due = sum(1 for m in members if is_due_for_review(m.review_state, now))
        weak = sum(1 for m in members if is_weak(m.review_state))
        mastered = sum(1 for m in members if m.review_state.is_mastered)
        progress = mastered / total
        insights.append(
            GroupInsight(
                group_key=key,
                total=total,
                due=due,
                weak=weak,
                mastered=mastered,
                progress=progress,
                priority=due * GROUP_DUE_WEIGHT
                + weak * GROUP_WEAK_WEIGHT
                + (1 - progress) * GROUP_PROGRESS_WEIGHT,
            )
        )

    insights.sort(key=lambda g: (-g.priority, g.progress))
    return insights


def today_plan(items: Sequence[LearningItem], daily_goal: int, now: datetime) -> TodayPlan:
    due_count = sum(1 for i in items if is_due_for_review(i.review_state, now))
    weak_count = sum(1 for i in items if is_weak(i.review_state))
    groups = group_insights(items, now)
    return TodayPlan(
        due_count=due_count,
        weak_count=weak_count,
        suggested_reviews=max(
            daily_goal, min(CATCHUP_BOOST_CAP, due_count) + min(WEAK_BOOST_CAP, weak_count)
        ),
        recommended_group=groups[0].group_key if groups else None,
    )


def mastery_distribution(items: Iterable[LearningItem]) -> list[int]:
    """Count of items per mastery level, index = level."""
    dist = [0] * len(MASTERY_LEVELS)
    for item in items:
        dist[mastery_level(item.review_state)] += 1
    return dist


def apply_session_stats(stats: LearnerStats, session: SessionStats, now: datetime) -> LearnerStats:
    """
    Fold one session's counters into the learner's aggregate stats.

    Today's count resets when the calendar date changes. The streak grows
    by one when the previous study day was yesterday, stays put for a second
    session on the same day, and restarts at 1 after a gap. Empty sessions
    leave the stats unchanged.
    """
    if session.total_reviewed == 0:
        return stats

    today = now.date()
    if stats.last_study_date == today:
        streak = stats.streak
    elif stats.last_study_date == today - timedelta(days=1):
        streak = stats.streak + 1
    else:
        streak = 1

    today_reviews = stats.today_reviews if stats.today_date == today else 0

    return replace(
        stats,
        total_reviews=stats.total_reviews + session.total_reviewed,
        today_reviews=today_reviews + session.total_reviewed,
        today_date=today,
        last_study_date=today,
        streak=streak,
        xp=stats.xp + session.xp,
    )


def daily_goal_reached(before: LearnerStats, after: LearnerStats) -> bool:
    """True when `after` crosses the daily goal that `before` had not reached."""
    previous = before.today_reviews if before.today_date == after.today_date else 0
    return previous < after.daily_goal <= after.today_reviews
