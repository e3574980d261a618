import os
from datetime import datetime, timedelta, timezone

import pytest

from lexis.domain.models import LearningItem, ReviewState

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


def make_item(
    item_id: str,
    group: str | None = None,
    *,
    total: int = 0,
    wrong: int = 0,
    reps: int = 0,
    interval: int = 0,
    next_review_days: float | None = None,
    mastered: bool = False,
) -> LearningItem:
    """Build an item whose counters are consistent (total == correct + wrong)."""
    next_review = None if next_review_days is None else NOW + timedelta(days=next_review_days)
    return LearningItem(
        id=item_id,
        term=f"term-{item_id}",
        definition=f"definition of {item_id}",
        group_key=group,
        review_state=ReviewState(
            interval_days=interval,
            repetition_count=reps,
            next_review_at=next_review,
            total_reviews=total,
            correct_reviews=total - wrong,
            wrong_reviews=wrong,
            is_mastered=mastered,
        ),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config files and LEXIS_* variables from the developer machine
    monkeypatch.setenv("HOME", str(home))
    for var in [v for v in os.environ if v.startswith("LEXIS_")]:
        monkeypatch.delenv(var, raising=False)
    return home
