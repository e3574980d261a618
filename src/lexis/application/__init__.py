# Application Package
from .review_engine import (
    compute_failure_rate,
    is_due_for_review,
    is_weak,
    process_review,
    quality_from_rating,
)
from .selection_planner import (
    compute_priority,
    interleave_by_group,
    plan_batches,
    select_for_session,
)
from .session import SessionAccumulator
from .study_service import StudyService

__all__ = [
    "SessionAccumulator",
    "StudyService",
    "compute_failure_rate",
    "compute_priority",
    "interleave_by_group",
    "is_due_for_review",
    "is_weak",
    "plan_batches",
    "process_review",
    "quality_from_rating",
    "select_for_session",
]
