"""
YAML Item Repository — Infrastructure adapter storing one document per learner.

Layout of `<data_dir>/<learner_id>.yaml`:

    items:
      - id: vocab_01H...
        term: ubiquitous
        definition: Present everywhere
        group: academic
        review_state: {...}
    stats: {...}
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from lexis.domain.models import LearnerStats, LearningItem
from lexis.domain.ports import ItemRepository, ItemsChangedCallback, Unsubscribe
from lexis.infrastructure.serialization import (
    item_from_dict,
    item_to_dict,
    stats_from_dict,
    stats_to_dict,
)

from .subscriptions import SubscriberRegistry

logger = logging.getLogger(__name__)

_LEARNER_ID_RE = re.compile(r"^[A-Za-z0-9_.@-]+$")


def _parse_items(learner_id: str, raw_items: list[Any]) -> list[LearningItem]:
    items: list[LearningItem] = []
    for raw in raw_items:
        try:
            items.append(item_from_dict(raw))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed item in {learner_id}: {e}")
    return items


class YamlItemRepository(ItemRepository):
    """
    File-backed repository. Each commit rewrites the learner's document via a
    temporary file so a failed write never leaves a half-written file behind.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self._subscribers = SubscriberRegistry()

    def path_for(self, learner_id: str) -> Path:
        if not _LEARNER_ID_RE.match(learner_id) or learner_id in {".", ".."}:
            raise ValueError(f"Invalid learner id: {learner_id!r}")
        return self.data_dir / f"{learner_id}.yaml"

    def _load(self, learner_id: str) -> dict[str, Any]:
        path = self.path_for(learner_id)
        if not path.exists():
            return {"items": [], "stats": None}
        doc = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(doc, dict):
            raise ValueError(f"{path} does not contain a mapping")
        return {"items": doc.get("items") or [], "stats": doc.get("stats")}

    def _save(self, learner_id: str, doc: dict[str, Any]) -> None:
        path = self.path_for(learner_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".yaml.tmp")
        tmp.write_text(
            yaml.safe_dump(doc, sort_keys=False, allow_unicode=True), encoding="utf-8"
        )
        tmp.replace(path)

    async def fetch_all_items(self, learner_id: str) -> list[LearningItem]:
        try:
            doc = self._load(learner_id)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Could not read items for {learner_id}: {e}")
            return []

        return _parse_items(learner_id, doc["items"])

    async def commit_items(self, learner_id: str, items: list[LearningItem]) -> bool:
        try:
            doc = self._load(learner_id)
            by_id: dict[str, dict[str, Any]] = {}
            for raw in doc["items"]:
                if isinstance(raw, dict) and raw.get("id"):
                    by_id[str(raw["id"])] = raw
            for item in items:
                by_id[item.id] = item_to_dict(item)
            doc["items"] = list(by_id.values())
            self._save(learner_id, doc)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to write items for {learner_id}: {e}")
            return False

        logger.info(f"Wrote {len(items)} items to {self.path_for(learner_id)}")
        self._subscribers.notify(learner_id, _parse_items(learner_id, doc["items"]))
        return True

    async def fetch_stats(self, learner_id: str) -> LearnerStats:
        try:
            doc = self._load(learner_id)
            return stats_from_dict(doc["stats"])
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Could not read stats for {learner_id}: {e}")
            return LearnerStats()

    async def commit_stats(self, learner_id: str, stats: LearnerStats) -> bool:
        try:
            doc = self._load(learner_id)
            doc["stats"] = stats_to_dict(stats)
            self._save(learner_id, doc)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to write stats for {learner_id}: {e}")
            return False
        return True

    def on_items_changed(self, learner_id: str, callback: ItemsChangedCallback) -> Unsubscribe:
        return self._subscribers.add(learner_id, callback)
