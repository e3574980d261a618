# Domain Package
from .errors import CommitError, InvalidInputError, LexisError, SessionStateError
from .models import (
    LearnerStats,
    LearningItem,
    ReviewOutcome,
    ReviewState,
    SessionPhase,
    SessionResult,
    SessionStats,
)
from .ports import ItemRepository

__all__ = [
    "CommitError",
    "InvalidInputError",
    "ItemRepository",
    "LearnerStats",
    "LearningItem",
    "LexisError",
    "ReviewOutcome",
    "ReviewState",
    "SessionPhase",
    "SessionResult",
    "SessionStats",
    "SessionStateError",
]
