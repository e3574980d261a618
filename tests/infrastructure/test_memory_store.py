"""Tests for the in-memory item repository."""

import pytest

from lexis.domain.models import LearnerStats
from lexis.infrastructure.adapters.memory_store import InMemoryItemRepository

from tests.conftest import make_item


@pytest.mark.asyncio
async def test_unknown_learner_is_empty():
    repo = InMemoryItemRepository()
    assert await repo.fetch_all_items("nobody") == []
    assert await repo.fetch_stats("nobody") == LearnerStats()


@pytest.mark.asyncio
async def test_commit_upserts_and_notifies():
    repo = InMemoryItemRepository({"ana": [make_item("a"), make_item("b")]})
    seen = []
    unsubscribe = repo.on_items_changed("ana", seen.append)

    updated = make_item("a", total=1)
    assert await repo.commit_items("ana", [updated, make_item("c")]) is True

    items = await repo.fetch_all_items("ana")
    assert [i.id for i in items] == ["a", "b", "c"]
    assert items[0].review_state.total_reviews == 1
    assert [i.id for i in seen[0]] == ["a", "b", "c"]

    unsubscribe()
    await repo.commit_items("ana", [make_item("d")])
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_other_learners_not_notified():
    repo = InMemoryItemRepository()
    seen = []
    repo.on_items_changed("ana", seen.append)

    await repo.commit_items("bo", [make_item("x")])

    assert seen == []


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_commit():
    repo = InMemoryItemRepository()

    def boom(items):
        raise RuntimeError("subscriber bug")

    seen = []
    repo.on_items_changed("ana", boom)
    repo.on_items_changed("ana", seen.append)

    assert await repo.commit_items("ana", [make_item("x")]) is True
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_stats_round_trip():
    repo = InMemoryItemRepository()
    stats = LearnerStats(total_reviews=4, xp=50, streak=2)
    assert await repo.commit_stats("ana", stats) is True
    assert await repo.fetch_stats("ana") == stats
