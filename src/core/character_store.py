"""
LifeOS Core — Character Store.

Owns the single character: applies dimension scores and experience awards,
persists the whole character after every change, then notifies listeners.

Every update is applied on its own. A caller deriving several scores from
one event makes several calls, each clamped and awarded independently.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from src.core import scoring
from src.core.observable import Observable
from src.data.codec import CodecError, decode_character, encode_character
from src.data.models import (
    Character,
    DailyReview,
    DailySchedule,
    DailyStatistics,
    DimensionType,
    FinanceSummary,
    Habit,
    TaskPriority,
    TaskSummary,
)
from src.ports.storage_port import StorageError

if TYPE_CHECKING:
    from src.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)

CHARACTER_KEY = "character"


class CharacterStore(Observable):
    """Stateful half of the score aggregator."""

    def __init__(
        self,
        storage: StoragePort | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__()
        if storage is None:
            from src.data.db import SQLiteBlobStore
            storage = SQLiteBlobStore()

        self._storage = storage
        self._clock = clock or datetime.now

        loaded = self._load()
        if loaded is None:
            self.character = Character(last_updated=self._clock())
            self._save()
        else:
            self.character = loaded

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> Character | None:
        try:
            data = self._storage.load(CHARACTER_KEY)
        except StorageError as exc:
            logger.warning("Could not read character, starting fresh: %s", exc)
            return None
        if data is None:
            return None
        try:
            return decode_character(data)
        except CodecError as exc:
            logger.warning("Discarding unreadable character snapshot: %s", exc)
            return None

    def _save(self) -> None:
        try:
            self._storage.save(CHARACTER_KEY, encode_character(self.character))
        except StorageError as exc:
            logger.error("Failed to save character: %s", exc)
        self._notify(self.character)

    # ------------------------------------------------------------------
    # Experience
    # ------------------------------------------------------------------

    def _award(self, points: int) -> None:
        """Apply experience without persisting."""
        gained = self.character.add_experience(points)
        self.character.last_updated = self._clock()
        if gained:
            logger.info(
                "Level up! +%d level(s), now level %d (%d/%d XP)",
                gained, self.character.level,
                self.character.experience, self.character.experience_for_next_level,
            )

    def add_experience(self, points: int) -> None:
        """Add experience, rolling over into as many levels as it covers.

        Raises:
            ValueError: points is negative.
        """
        self._award(points)
        self._save()

    def complete_task(self, priority: TaskPriority) -> None:
        self.add_experience(scoring.task_completion_experience(priority))

    def complete_habit(self) -> None:
        self.add_experience(scoring.HABIT_COMPLETION_EXPERIENCE)

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------

    def update_dimension_score(self, dimension: DimensionType, score: float) -> None:
        """Store the clamped score and award experience for its distance from 50.

        The award is computed from the raw score, before clamping. A
        non-finite score raises ValueError and leaves the character unchanged.
        """
        stored = self.character.dimensions.update(dimension, score)
        self.character.last_updated = self._clock()
        logger.info("%s score set to %.1f", dimension.value, stored)

        points = scoring.experience_for_score(score)
        if points > 0:
            self._award(points)
        self._save()

    def refresh_scores(
        self,
        habits: Iterable[Habit] | None = None,
        tasks: TaskSummary | None = None,
        finance: FinanceSummary | None = None,
    ) -> None:
        """Recompute Health, Career and Wealth from whichever summaries are given."""
        if habits is not None:
            from src.config import settings

            health = scoring.health_score_from_habits(
                habits,
                now=self._clock(),
                keywords=settings.HEALTH_HABIT_KEYWORDS,
                window_days=settings.HEALTH_WINDOW_DAYS,
            )
            self.update_dimension_score(DimensionType.HEALTH, health)
        if tasks is not None:
            self.update_dimension_score(
                DimensionType.CAREER, scoring.career_score(tasks.completed, tasks.total),
            )
        if finance is not None:
            self.update_dimension_score(
                DimensionType.WEALTH,
                scoring.wealth_score(finance.monthly_income, finance.monthly_expenses),
            )

    # ------------------------------------------------------------------
    # Daily review
    # ------------------------------------------------------------------

    def complete_daily_review(
        self,
        review: DailyReview,
        statistics: DailyStatistics,
        schedule: DailySchedule,
    ) -> int:
        """Award review experience, then push per-category completion into dimensions.

        Returns the experience awarded for the review itself.
        """
        points = scoring.review_completion_experience(
            review.mood_rating,
            review.energy_rating,
            review.productivity_rating,
            statistics.completion_rate,
        )
        self.add_experience(points)

        rates = scoring.category_completion_rates(schedule)
        for dimension, score in scoring.review_dimension_updates(rates):
            self.update_dimension_score(dimension, score)
        return points


if __name__ == "__main__":
    from src.adapters.memory_storage import InMemoryBlobStore
    from src.config import settings

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s: %(message)s")

    store = CharacterStore(storage=InMemoryBlobStore())
    store.complete_task(TaskPriority.HIGH)
    store.complete_habit()
    store.refresh_scores(
        tasks=TaskSummary(completed=7, total=10),
        finance=FinanceSummary(monthly_income=3000, monthly_expenses=2100),
    )
    character = store.character
    print(f"Level {character.level}, {character.experience}/{character.experience_for_next_level} XP")
    for dim in character.dimensions.all_dimensions:
        print(f"  {dim.name:<14} {dim.score:5.1f}  {dim.level_label}")
