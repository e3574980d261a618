"""Service for creating learning items with stable ids."""

import logging
from typing import Any

from ulid import ULID

from lexis.domain.constants import ITEM_ID_PREFIX
from lexis.domain.models import LearningItem, ReviewState

logger = logging.getLogger(__name__)


def generate_item_id() -> str:
    """Generate a stable item id using ULID."""
    return f"{ITEM_ID_PREFIX}{ULID()}"


def new_learning_item(
    term: str,
    definition: str,
    group_key: str | None = None,
    **extra: Any,
) -> LearningItem:
    """
    Create a never-reviewed item. Extra keyword fields are kept as opaque
    display data.
    """
    item = LearningItem(
        id=generate_item_id(),
        term=term,
        definition=definition,
        group_key=group_key,
        review_state=ReviewState(),
        extra=dict(extra),
    )
    logger.debug(f"Created item {item.id} for {term!r}")
    return item
