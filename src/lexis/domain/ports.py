"""
Ports (interfaces) for item persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from .models import LearnerStats, LearningItem

ItemsChangedCallback = Callable[[list[LearningItem]], None]
Unsubscribe = Callable[[], None]


class ItemRepository(ABC):
    """
    Port for reading and writing a learner's items and aggregate stats.

    Implementations:
        - InMemoryItemRepository: Dict-backed store for tests and embedding hosts.
        - YamlItemRepository: One YAML document per learner on disk.
    """

    @abstractmethod
    async def fetch_all_items(self, learner_id: str) -> list[LearningItem]:
        """
        Snapshot read of every item belonging to the learner.

        Returns:
            Items in storage order. An unknown learner yields an empty list.
        """
        pass

    @abstractmethod
    async def commit_items(self, learner_id: str, items: list[LearningItem]) -> bool:
        """
        Bulk upsert items by id.

        Returns:
            True if the whole batch was written, False otherwise.
        """
        pass

    @abstractmethod
    async def fetch_stats(self, learner_id: str) -> LearnerStats:
        """Read the learner's aggregate stats (defaults if none stored)."""
        pass

    @abstractmethod
    async def commit_stats(self, learner_id: str, stats: LearnerStats) -> bool:
        """Replace the learner's aggregate stats."""
        pass

    @abstractmethod
    def on_items_changed(self, learner_id: str, callback: ItemsChangedCallback) -> Unsubscribe:
        """
        Register a callback that receives the full item list after every change.

        Returns:
            A function that removes the subscription.
        """
        pass
