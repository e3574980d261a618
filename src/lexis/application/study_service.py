"""
Study Service — Application layer orchestrator.

Coordinates the repository snapshot, the selection planner and the session
accumulator for one learner. Scheduling math stays in the pure modules; this
class owns the snapshot, the deferred external updates and the pending write.
"""

import logging
from dataclasses import replace
from datetime import datetime

from lexis.domain.errors import CommitError, InvalidInputError, SessionStateError
from lexis.domain.models import LearnerStats, LearningItem, SessionResult
from lexis.domain.ports import ItemRepository, Unsubscribe

from .config import AppConfig
from .insights import apply_session_stats, daily_goal_reached
from .review_engine import resolve_quality
from .selection_planner import find_due_items, plan_batches, select_focus_items, select_for_session
from .session import SessionAccumulator

logger = logging.getLogger(__name__)


class StudyService:
    """
    Application service driving review sessions for a single learner.

    Follows Dependency Inversion: depends on the ItemRepository abstraction,
    not on a concrete store.
    """

    def __init__(
        self,
        repository: ItemRepository,
        learner_id: str,
        config: AppConfig | None = None,
        accumulator: SessionAccumulator | None = None,
    ):
        """
        Args:
            repository: The repository (port) holding items and stats.
            learner_id: Whose collection to study.
            config: Session sizing; defaults are used if not provided.
            accumulator: Optional custom accumulator; a fresh one otherwise.
        """
        self._repo = repository
        self._learner_id = learner_id
        self._config = config or AppConfig()
        self._session = accumulator or SessionAccumulator()

        self._items: list[LearningItem] = []
        self._stats = LearnerStats(daily_goal=self._config.daily_goal)
        self._batches: list[list[LearningItem]] = []
        self._pending: list[SessionResult] = []
        self._deferred: list[LearningItem] | None = None
        self._unsubscribe: Unsubscribe | None = None

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[LearningItem]:
        return list(self._items)

    @property
    def stats(self) -> LearnerStats:
        return self._stats

    @property
    def in_session(self) -> bool:
        return self._session.in_session

    @property
    def batches(self) -> list[list[LearningItem]]:
        return [list(b) for b in self._batches]

    @property
    def pending_results(self) -> list[SessionResult]:
        return list(self._pending)

    async def load(self) -> list[LearningItem]:
        """
        Snapshot-read items and stats, and subscribe to external changes.
        """
        if self.in_session:
            raise SessionStateError("Cannot reload items during a session")

        self._items = self._overlay_pending(await self._repo.fetch_all_items(self._learner_id))
        if self._pending:
            # Stats already include the uncommitted sessions; stored ones do not
            logger.debug(f"Keeping local stats for {len(self._pending)} pending sessions")
        else:
            stats = await self._repo.fetch_stats(self._learner_id)
            self._stats = replace(stats, daily_goal=self._config.daily_goal)

        if self._unsubscribe is None:
            self._unsubscribe = self._repo.on_items_changed(
                self._learner_id, self._on_external_change
            )

        logger.info(f"Loaded {len(self._items)} items for learner {self._learner_id}")
        return self.items

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_external_change(self, items: list[LearningItem]) -> None:
        if self.in_session:
            # Applying now would change items the learner is answering
            logger.debug(f"Deferring external update ({len(items)} items) until session ends")
            self._deferred = list(items)
            return
        self._items = self._overlay_pending(items)

    def _overlay_pending(self, items: list[LearningItem]) -> list[LearningItem]:
        """Keep uncommitted session results on top of a fresh snapshot."""
        if not self._pending:
            return list(items)
        latest: dict[str, LearningItem] = {}
        for result in self._pending:
            for item in result.updated_items:
                latest[item.id] = item
        return _merge(items, latest)

    def due_items(self, now: datetime) -> list[LearningItem]:
        return find_due_items(self._items, now)

    # ------------------------------------------------------------------
    # Session flow
    # ------------------------------------------------------------------

    def plan(
        self,
        now: datetime,
        focus: bool = False,
        item_ids: list[str] | None = None,
    ) -> list[LearningItem]:
        """
        Build the ordered queue the next session would use, without starting it.

        In focus mode the queue is the learner's most-failed items; when none
        qualify, normal selection is used. `item_ids` bypasses selection and
        returns exactly those items in the given order.
        """
        limit = self._config.session_limit
        if item_ids is not None:
            by_id = {item.id: item for item in self._items}
            missing = [i for i in item_ids if i not in by_id]
            if missing:
                raise InvalidInputError(f"Unknown item ids: {', '.join(missing)}")
            return [by_id[i] for i in item_ids]

        if focus:
            queue = select_focus_items(self._items)[:limit]
            if queue:
                logger.info(f"Focusing on {len(queue)} weak items")
                return queue
        return select_for_session(self._items, self.due_items(now), limit, now)

    def start(
        self,
        now: datetime,
        focus: bool = False,
        item_ids: list[str] | None = None,
    ) -> list[list[LearningItem]]:
        """
        Rank the snapshot once and start a session over the planned batches.

        Returns:
            The batches. An empty list means there is nothing to review and
            no session was started.
        """
        if self.in_session:
            raise SessionStateError("A session is already in progress")

        queue = self.plan(now, focus=focus, item_ids=item_ids)
        if not queue:
            logger.info("Nothing to review")
            self._batches = []
            return []

        self._batches = plan_batches(queue, self._config.batch_size)
        self._session.start_session(queue)
        return self.batches

    def record(self, item_id: str, rating: str | int, now: datetime) -> LearningItem:
        """
        Record one answer by item id. `rating` is a button label or a 0-5 grade.
        """
        if not self.in_session:
            raise SessionStateError("Cannot record an answer outside a session")

        item = next((i for i in self._session.queue if i.id == item_id), None)
        if item is None:
            item = next((i for i in self._items if i.id == item_id), None)
        if item is None:
            raise InvalidInputError(f"Unknown item id: {item_id}")

        return self._session.record_outcome(item, resolve_quality(rating), now)

    def finish(self, now: datetime) -> SessionResult:
        return self._close_session(self._session.end_session(), now)

    def abandon(self, now: datetime) -> SessionResult:
        return self._close_session(self._session.abandon_session(), now)

    def _close_session(self, result: SessionResult, now: datetime) -> SessionResult:
        before = self._stats
        self._stats = apply_session_stats(before, result.stats, now)
        if daily_goal_reached(before, self._stats):
            logger.info(f"Daily goal reached: {self._stats.daily_goal} reviews")

        if result.updated_items:
            self._pending.append(result)

        if self._deferred is not None:
            base, self._deferred = self._deferred, None
        else:
            base = self._items
        self._items = self._overlay_pending(base)
        self._batches = []
        return result

    async def commit(self) -> int:
        """
        Write every pending session result in one bulk item write plus one
        stats write.

        Returns:
            Number of items written.

        Raises:
            CommitError: The repository rejected the write. Pending results
                are kept so commit() can simply be called again.
        """
        if self.in_session:
            raise SessionStateError("Cannot commit while a session is in progress")

        latest: dict[str, LearningItem] = {}
        for result in self._pending:
            for item in result.updated_items:
                latest[item.id] = item
        items = list(latest.values())

        if items and not await self._repo.commit_items(self._learner_id, items):
            raise CommitError(f"Failed to write {len(items)} items for {self._learner_id}")
        if not await self._repo.commit_stats(self._learner_id, self._stats):
            raise CommitError(f"Failed to write stats for {self._learner_id}")

        self._pending = []
        logger.info(f"Committed {len(items)} items for learner {self._learner_id}")
        return len(items)


def _merge(items: list[LearningItem], updates: dict[str, LearningItem]) -> list[LearningItem]:
    merged = [updates.get(item.id, item) for item in items]
    known = {item.id for item in items}
    merged.extend(item for item_id, item in updates.items() if item_id not in known)
    return merged
