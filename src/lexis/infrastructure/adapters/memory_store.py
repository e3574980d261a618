"""
In-Memory Item Repository — Infrastructure adapter backed by dicts.

Used by tests and by hosts that manage persistence themselves.
"""

import logging

from lexis.domain.models import LearnerStats, LearningItem
from lexis.domain.ports import ItemRepository, ItemsChangedCallback, Unsubscribe

from .subscriptions import SubscriberRegistry

logger = logging.getLogger(__name__)


class InMemoryItemRepository(ItemRepository):
    """
    Keeps items per learner in insertion order. Writes are last-write-wins
    upserts and every write notifies subscribers with the full item list.
    """

    def __init__(self, items: dict[str, list[LearningItem]] | None = None):
        self._items: dict[str, dict[str, LearningItem]] = {
            learner: {item.id: item for item in learner_items}
            for learner, learner_items in (items or {}).items()
        }
        self._stats: dict[str, LearnerStats] = {}
        self._subscribers = SubscriberRegistry()

    async def fetch_all_items(self, learner_id: str) -> list[LearningItem]:
        return list(self._items.get(learner_id, {}).values())

    async def commit_items(self, learner_id: str, items: list[LearningItem]) -> bool:
        store = self._items.setdefault(learner_id, {})
        for item in items:
            store[item.id] = item
        logger.debug(f"Stored {len(items)} items for learner {learner_id}")
        self._subscribers.notify(learner_id, list(store.values()))
        return True

    async def fetch_stats(self, learner_id: str) -> LearnerStats:
        return self._stats.get(learner_id, LearnerStats())

    async def commit_stats(self, learner_id: str, stats: LearnerStats) -> bool:
        self._stats[learner_id] = stats
        return True

    def on_items_changed(self, learner_id: str, callback: ItemsChangedCallback) -> Unsubscribe:
        return self._subscribers.add(learner_id, callback)
