"""
LifeOS Core — Daily Scheduler.

Owns every per-day schedule of time blocks. Blocks inside one day never
overlap when added through add_time_block. Every mutation is applied in
memory, then the whole schedule map is re-encoded and saved through the
storage port, then listeners are notified.

Lookups that miss (update/remove/toggle of an unknown block id) are silent
no-ops: callers fire and forget these operations.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Callable

from src.core.observable import Observable
from src.core.time_slots import find_next_free_start, format_hhmm
from src.data.codec import CodecError, decode_schedules, encode_schedules
from src.data.models import (
    BlockCategory,
    DailyReview,
    DailySchedule,
    DailyStatistics,
    TaskItem,
    TaskPriority,
    TimeBlock,
    start_of_day,
)
from src.ports.storage_port import StorageError

if TYPE_CHECKING:
    from src.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)

SCHEDULES_KEY = "daily_schedules"

_PRIORITY_CATEGORY = {
    TaskPriority.HIGH: BlockCategory.WORK,
    TaskPriority.MEDIUM: BlockCategory.PERSONAL,
    TaskPriority.LOW: BlockCategory.OTHER,
}


class TimeBlockError(Exception):
    """Base class for rejected time block insertions."""


class InvalidTimeRange(TimeBlockError):
    """Raised when a block's end time is not after its start time."""

    def __init__(self, block: TimeBlock) -> None:
        super().__init__("End time must be after start time")
        self.block = block


class OverlappingBlock(TimeBlockError):
    """Raised when a block intersects an existing block of the same day."""

    def __init__(self, block: TimeBlock, conflicting: TimeBlock) -> None:
        super().__init__(
            f"'{block.title}' overlaps with existing block '{conflicting.title}' "
            f"({conflicting.time_range_string})"
        )
        self.block = block
        self.conflicting = conflicting


def compute_statistics(schedule: DailySchedule) -> DailyStatistics:
    """Aggregate block counts and minutes for one schedule."""
    category_minutes: dict[BlockCategory, int] = {}
    total_minutes = 0
    completed_minutes = 0
    completed_blocks = 0

    for block in schedule.time_blocks:
        minutes = block.duration_minutes
        category_minutes[block.category] = category_minutes.get(block.category, 0) + minutes
        total_minutes += minutes
        if block.is_completed:
            completed_minutes += minutes
            completed_blocks += 1

    return DailyStatistics(
        total_blocks=len(schedule.time_blocks),
        completed_blocks=completed_blocks,
        total_minutes=total_minutes,
        completed_minutes=completed_minutes,
        category_breakdown=category_minutes,
        completion_rate=schedule.completion_rate,
    )


class DailyScheduler(Observable):
    """Per-day schedules of non-overlapping time blocks."""

    def __init__(
        self,
        storage: StoragePort | None = None,
        clock: Callable[[], datetime] | None = None,
        slot_minutes: int | None = None,
    ) -> None:
        super().__init__()
        if storage is None:
            from src.data.db import SQLiteBlobStore
            storage = SQLiteBlobStore()
        if slot_minutes is None:
            from src.config import settings
            slot_minutes = settings.SLOT_INTERVAL_MINUTES

        self._storage = storage
        self._clock = clock or datetime.now
        self._slot_minutes = slot_minutes
        self._schedules: dict[date, DailySchedule] = self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> dict[date, DailySchedule]:
        """Load all schedules; fall back to empty on any failure."""
        try:
            data = self._storage.load(SCHEDULES_KEY)
        except StorageError as exc:
            logger.warning("Could not read schedules, starting empty: %s", exc)
            return {}
        if data is None:
            return {}
        try:
            schedules = decode_schedules(data)
        except CodecError as exc:
            logger.warning("Discarding unreadable schedules snapshot: %s", exc)
            return {}
        logger.debug("Loaded %d daily schedules", len(schedules))
        return schedules

    def _save(self, schedule: DailySchedule) -> None:
        try:
            self._storage.save(SCHEDULES_KEY, encode_schedules(self._schedules))
        except StorageError as exc:
            logger.error("Failed to save schedules: %s", exc)
        self._notify(schedule)

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    @property
    def days(self) -> list[date]:
        return sorted(self._schedules)

    def get_or_create_schedule(self, day: date | datetime) -> DailySchedule:
        """Return the schedule for day, creating an empty one on first access."""
        key = start_of_day(day).date()
        schedule = self._schedules.get(key)
        if schedule is None:
            schedule = DailySchedule(day=key)
            self._schedules[key] = schedule
            logger.debug("Created empty schedule for %s", key.isoformat())
            self._save(schedule)
        return schedule

    def today_schedule(self) -> DailySchedule:
        return self.get_or_create_schedule(self._clock())

    # ------------------------------------------------------------------
    # Time blocks
    # ------------------------------------------------------------------

    def add_time_block(self, day: date | datetime, block: TimeBlock) -> None:
        """Insert a block into day's schedule.

        Raises:
            InvalidTimeRange: end_time <= start_time.
            OverlappingBlock: the block intersects an existing block.
        """
        if block.end_time <= block.start_time:
            raise InvalidTimeRange(block)

        schedule = self.get_or_create_schedule(day)
        for existing in schedule.time_blocks:
            if block.overlaps(existing):
                raise OverlappingBlock(block, existing)

        schedule.time_blocks.append(block)
        logger.info(
            "Time block added on %s: '%s' %s (%s)",
            schedule.day.date().isoformat(), block.title,
            block.time_range_string, block.category.value,
        )
        self._save(schedule)

    def update_time_block(self, day: date | datetime, block: TimeBlock) -> None:
        """Replace the block with the same id. Overlap is not re-checked."""
        schedule = self.get_or_create_schedule(day)
        index = schedule.find_block(block.id)
        if index is None:
            logger.debug("Update ignored: no block %s on %s", block.id, schedule.day.date())
            return
        schedule.time_blocks[index] = block
        self._save(schedule)

    def remove_time_block(self, day: date | datetime, block_id: str) -> None:
        schedule = self.get_or_create_schedule(day)
        index = schedule.find_block(block_id)
        if index is None:
            logger.debug("Remove ignored: no block %s on %s", block_id, schedule.day.date())
            return
        removed = schedule.time_blocks.pop(index)
        logger.info("Time block removed: '%s'", removed.title)
        self._save(schedule)

    def toggle_completion(self, day: date | datetime, block_id: str) -> None:
        schedule = self.get_or_create_schedule(day)
        index = schedule.find_block(block_id)
        if index is None:
            logger.debug("Toggle ignored: no block %s on %s", block_id, schedule.day.date())
            return
        block = schedule.time_blocks[index]
        block.is_completed = not block.is_completed
        self._save(schedule)

    def add_task_block(
        self, task: TaskItem, start_time: datetime, duration: timedelta,
    ) -> TimeBlock:
        """Schedule a task as a block on start_time's day.

        The category follows the task priority. Raises the same errors as
        add_time_block.
        """
        block = TimeBlock(
            title=task.title,
            start_time=start_time,
            end_time=start_time + duration,
            category=_PRIORITY_CATEGORY[task.priority],
            task_id=task.id,
            notes=task.description,
        )
        self.add_time_block(start_time, block)
        return block

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def suggest_slot(
        self,
        day: date | datetime,
        duration: timedelta | float,
        after: date | datetime | None = None,
    ) -> datetime:
        """Suggest the earliest free start for a block of this duration.

        Searches from `after` (default: start of day), or from now if that
        is later and `after` is today. The result is aligned to the slot
        grid and may spill into the next day.
        """
        if not isinstance(duration, timedelta):
            duration = timedelta(seconds=duration)

        schedule = self.get_or_create_schedule(day)
        if after is None:
            search_from = schedule.day
        elif isinstance(after, datetime):
            search_from = after
        else:
            search_from = start_of_day(after)

        now = self._clock()
        if search_from.date() == now.date():
            search_from = max(search_from, now)

        busy = [(b.start_time, b.end_time) for b in schedule.sorted_time_blocks]
        suggested = find_next_free_start(busy, duration, search_from, self._slot_minutes)
        logger.debug(
            "Suggested %s for %s on %s",
            format_hhmm(suggested), duration, schedule.day.date().isoformat(),
        )
        return suggested

    def statistics(self, day: date | datetime) -> DailyStatistics:
        return compute_statistics(self.get_or_create_schedule(day))

    # ------------------------------------------------------------------
    # Daily review
    # ------------------------------------------------------------------

    def save_daily_review(self, day: date | datetime, review: DailyReview) -> None:
        """Attach review to day's schedule, replacing any previous one."""
        schedule = self.get_or_create_schedule(day)
        schedule.daily_review = review
        logger.info(
            "Daily review saved for %s (mood %d, energy %d, productivity %d)",
            schedule.day.date().isoformat(),
            review.mood_rating, review.energy_rating, review.productivity_rating,
        )
        self._save(schedule)


if __name__ == "__main__":
    from src.adapters.memory_storage import InMemoryBlobStore
    from src.config import settings

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s: %(message)s")

    scheduler = DailyScheduler(storage=InMemoryBlobStore())
    today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    scheduler.add_time_block(today, TimeBlock(
        title="Deep work",
        start_time=today.replace(hour=9),
        end_time=today.replace(hour=11),
        category=BlockCategory.WORK,
    ))
    scheduler.add_time_block(today, TimeBlock(
        title="Lunch",
        start_time=today.replace(hour=12),
        end_time=today.replace(hour=13),
        category=BlockCategory.MEAL,
    ))

    try:
        scheduler.add_time_block(today, TimeBlock(
            title="Standup",
            start_time=today.replace(hour=10),
            end_time=today.replace(hour=10, minute=15),
            category=BlockCategory.WORK,
        ))
    except TimeBlockError as exc:
        print(f"Rejected: {exc}")

    slot = scheduler.suggest_slot(today, timedelta(minutes=45), after=today.replace(hour=9))
    print(f"Next free 45m slot: {format_hhmm(slot)}")
    print(f"Statistics: {scheduler.statistics(today)}")
