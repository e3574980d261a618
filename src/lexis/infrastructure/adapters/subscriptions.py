"""Change-notification bookkeeping shared by the item repositories."""

import logging

from lexis.domain.models import LearningItem
from lexis.domain.ports import ItemsChangedCallback, Unsubscribe

logger = logging.getLogger(__name__)


class SubscriberRegistry:
    """Per-learner callback lists. Callbacks run synchronously, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[ItemsChangedCallback]] = {}

    def add(self, learner_id: str, callback: ItemsChangedCallback) -> Unsubscribe:
        callbacks = self._subscribers.setdefault(learner_id, [])
        callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def notify(self, learner_id: str, items: list[LearningItem]) -> None:
        for callback in list(self._subscribers.get(learner_id, [])):
            try:
                callback(list(items))
            except Exception as e:
                logger.warning(f"Change callback failed for learner {learner_id}: {e}")
