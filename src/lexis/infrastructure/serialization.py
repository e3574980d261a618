"""
Conversion between domain models and plain dicts for storage adapters.

Timestamps are stored as ISO-8601 strings and dates as YYYY-MM-DD. Unknown
item keys are preserved in `LearningItem.extra` so display data survives a
round trip.
"""

from datetime import date, datetime, time, timezone
from typing import Any

from lexis.domain.models import LearnerStats, LearningItem, ReviewState

_ITEM_KEYS = {"id", "term", "definition", "group", "review_state"}


def _dt_out(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt_in(value: Any) -> datetime | None:
    """Parse a stored timestamp. Naive values and bare dates are read as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _date_in(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def state_to_dict(state: ReviewState) -> dict[str, Any]:
    return {
        "ease_factor": state.ease_factor,
        "interval_days": state.interval_days,
        "repetition_count": state.repetition_count,
        "next_review_at": _dt_out(state.next_review_at),
        "last_reviewed_at": _dt_out(state.last_reviewed_at),
        "total_reviews": state.total_reviews,
        "correct_reviews": state.correct_reviews,
        "wrong_reviews": state.wrong_reviews,
        "is_mastered": state.is_mastered,
    }


def state_from_dict(data: dict[str, Any] | None) -> ReviewState:
    """Missing or empty data yields the state of a never-reviewed item."""
    if not data:
        return ReviewState()
    defaults = ReviewState()
    return ReviewState(
        ease_factor=float(data.get("ease_factor", defaults.ease_factor)),
        interval_days=int(data.get("interval_days", 0)),
        repetition_count=int(data.get("repetition_count", 0)),
        next_review_at=_dt_in(data.get("next_review_at")),
        last_reviewed_at=_dt_in(data.get("last_reviewed_at")),
        total_reviews=int(data.get("total_reviews", 0)),
        correct_reviews=int(data.get("correct_reviews", 0)),
        wrong_reviews=int(data.get("wrong_reviews", 0)),
        is_mastered=bool(data.get("is_mastered", False)),
    )


def item_to_dict(item: LearningItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": item.id,
        "term": item.term,
        "definition": item.definition,
    }
    if item.group_key:
        data["group"] = item.group_key
    data.update(item.extra)
    data["review_state"] = state_to_dict(item.review_state)
    return data


def item_from_dict(data: dict[str, Any]) -> LearningItem:
    if not data.get("id"):
        raise ValueError("Item is missing an id")
    return LearningItem(
        id=str(data["id"]),
        term=str(data.get("term", "")),
        definition=str(data.get("definition", "")),
        group_key=data.get("group") or None,
        review_state=state_from_dict(data.get("review_state")),
        extra={k: v for k, v in data.items() if k not in _ITEM_KEYS},
    )


def stats_to_dict(stats: LearnerStats) -> dict[str, Any]:
    return {
        "total_reviews": stats.total_reviews,
        "today_reviews": stats.today_reviews,
        "today_date": stats.today_date.isoformat() if stats.today_date else None,
        "last_study_date": stats.last_study_date.isoformat() if stats.last_study_date else None,
        "streak": stats.streak,
        "xp": stats.xp,
        "daily_goal": stats.daily_goal,
    }


def stats_from_dict(data: dict[str, Any] | None) -> LearnerStats:
    if not data:
        return LearnerStats()
    defaults = LearnerStats()
    return LearnerStats(
        total_reviews=int(data.get("total_reviews", 0)),
        today_reviews=int(data.get("today_reviews", 0)),
        today_date=_date_in(data.get("today_date")),
        last_study_date=_date_in(data.get("last_study_date")),
        streak=int(data.get("streak", 0)),
        xp=int(data.get("xp", 0)),
        daily_goal=int(data.get("daily_goal", defaults.daily_goal)),
    )
