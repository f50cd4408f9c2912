"""Tests for src.core.character_store — experience, leveling and dimension updates."""

from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from src.adapters.memory_storage import InMemoryBlobStore
from src.core.character_store import CHARACTER_KEY, CharacterStore
from src.core.daily_scheduler import compute_statistics
from src.data.codec import decode_character, encode_character
from src.data.models import (
    BlockCategory,
    DailyReview,
    DailySchedule,
    DimensionType,
    FinanceSummary,
    Habit,
    HabitCompletion,
    TaskPriority,
    TaskSummary,
    TimeBlock,
)
from src.ports.storage_port import StorageError


# ---------------------------------------------------------------------------
# Construction / persistence
# ---------------------------------------------------------------------------


class TestLoad:
    def test_fresh_character_is_saved(self, character_store, memory_store, fixed_now):
        assert character_store.character.level == 1
        assert character_store.character.experience == 0
        assert character_store.character.last_updated == fixed_now
        assert memory_store.load(CHARACTER_KEY) is not None

    def test_reloads_existing_character(self, memory_store, clock):
        CharacterStore(storage=memory_store, clock=clock).add_experience(150)
        reloaded = CharacterStore(storage=memory_store, clock=clock)
        assert (reloaded.character.level, reloaded.character.experience) == (2, 50)

    def test_corrupt_snapshot_falls_back_to_fresh(self, clock):
        store = CharacterStore(storage=InMemoryBlobStore({CHARACTER_KEY: b"garbage"}), clock=clock)
        assert store.character.level == 1

    def test_snapshot_breaking_level_invariant_falls_back_to_fresh(self, clock):
        broken = CharacterStore(storage=InMemoryBlobStore(), clock=clock).character
        broken.level = 0
        store = CharacterStore(
            storage=InMemoryBlobStore({CHARACTER_KEY: encode_character(broken)}), clock=clock,
        )
        assert (store.character.level, store.character.experience) == (1, 0)
        assert store.character.experience_progress == 0.0

    def test_load_failure_falls_back_to_fresh(self, clock):
        storage = MagicMock()
        storage.load.side_effect = StorageError("unavailable")
        store = CharacterStore(storage=storage, clock=clock)
        assert store.character.level == 1

    def test_save_failure_keeps_memory_state(self, clock):
        storage = MagicMock()
        storage.load.return_value = None
        storage.save.side_effect = StorageError("read-only")
        store = CharacterStore(storage=storage, clock=clock)
        store.add_experience(30)
        assert store.character.experience == 30


# ---------------------------------------------------------------------------
# Experience
# ---------------------------------------------------------------------------


class TestAddExperience:
    def test_single_award_multi_level(self, character_store):
        character_store.add_experience(250)
        assert (character_store.character.level, character_store.character.experience) == (2, 150)

    def test_sequential_awards_match_single_award(self, character_store):
        for points in (100, 100, 50):
            character_store.add_experience(points)
        assert (character_store.character.level, character_store.character.experience) == (2, 150)

    def test_invariant_holds_after_large_award(self, character_store):
        character_store.add_experience(10_000)
        character = character_store.character
        assert character.experience < character.level * 100
        # thresholds 100 + 200 + ... + 1300 = 9100, remainder 900 < 1400
        assert (character.level, character.experience) == (14, 900)

    def test_negative_rejected(self, character_store):
        with pytest.raises(ValueError):
            character_store.add_experience(-1)
        assert character_store.character.experience == 0

    def test_persisted(self, character_store, memory_store):
        character_store.add_experience(40)
        assert decode_character(memory_store.load(CHARACTER_KEY)).experience == 40

    def test_complete_task_awards_by_priority(self, character_store):
        character_store.complete_task(TaskPriority.LOW)
        character_store.complete_task(TaskPriority.MEDIUM)
        character_store.complete_task(TaskPriority.HIGH)
        assert character_store.character.experience == 35

    def test_complete_habit(self, character_store):
        character_store.complete_habit()
        character_store.complete_habit()
        assert character_store.character.experience == 30


# ---------------------------------------------------------------------------
# Dimension updates
# ---------------------------------------------------------------------------


class TestUpdateDimensionScore:
    @pytest.mark.parametrize("raw,stored", [(-40, 0.0), (150, 100.0), (72.5, 72.5)])
    def test_score_clamped(self, character_store, raw, stored):
        character_store.update_dimension_score(DimensionType.FUN, raw)
        assert character_store.character.dimensions[DimensionType.FUN].score == stored

    def test_award_from_distance_to_midpoint(self, character_store):
        character_store.update_dimension_score(DimensionType.CAREER, 65.0)
        assert character_store.character.experience == 10

    def test_no_award_near_midpoint(self, character_store):
        character_store.update_dimension_score(DimensionType.CAREER, 55.0)
        assert character_store.character.experience == 0

    def test_award_uses_raw_score(self, character_store):
        character_store.update_dimension_score(DimensionType.WEALTH, 150)
        # |150 - 50| = 100 -> 100 XP -> level 2, 0 XP
        assert (character_store.character.level, character_store.character.experience) == (2, 0)

    @pytest.mark.parametrize("raw", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_score_rejected_without_changes(self, character_store, memory_store, raw):
        before = memory_store.load(CHARACTER_KEY)
        listener = MagicMock()
        character_store.subscribe(listener)
        with pytest.raises(ValueError):
            character_store.update_dimension_score(DimensionType.HEALTH, raw)
        assert character_store.character.dimensions[DimensionType.HEALTH].score == 50.0
        assert character_store.character.experience == 0
        assert memory_store.load(CHARACTER_KEY) == before
        listener.assert_not_called()

    def test_each_update_awards_independently(self, character_store):
        character_store.update_dimension_score(DimensionType.HEALTH, 80)
        character_store.update_dimension_score(DimensionType.HEALTH, 80)
        assert character_store.character.experience == 60

    def test_listener_sees_every_change(self, character_store):
        listener = MagicMock()
        character_store.subscribe(listener)
        character_store.update_dimension_score(DimensionType.FUN, 90)
        character_store.complete_habit()
        assert listener.call_count == 2
        assert listener.call_args[0][0] is character_store.character


# ---------------------------------------------------------------------------
# refresh_scores
# ---------------------------------------------------------------------------


class TestRefreshScores:
    def test_all_summaries(self, character_store, fixed_now):
        habits = [Habit(
            name="Exercise",
            completions=[HabitCompletion(date=fixed_now - timedelta(days=d)) for d in range(7)],
        )]
        character_store.refresh_scores(
            habits=habits,
            tasks=TaskSummary(completed=5, total=10),
            finance=FinanceSummary(monthly_income=1000, monthly_expenses=1000),
        )
        dims = character_store.character.dimensions
        assert dims[DimensionType.HEALTH].score == 100.0
        assert dims[DimensionType.CAREER].score == 65.0
        assert dims[DimensionType.WEALTH].score == 50.0
        # 50 XP for health + 10 XP for career + 0 for wealth
        assert character_store.character.experience == 60

    def test_only_given_summaries_applied(self, character_store):
        character_store.refresh_scores(tasks=TaskSummary(completed=0, total=4))
        dims = character_store.character.dimensions
        assert dims[DimensionType.CAREER].score == 30.0
        assert dims[DimensionType.HEALTH].score == 50.0
        assert dims[DimensionType.WEALTH].score == 50.0

    def test_no_health_habits_keeps_neutral(self, character_store):
        character_store.refresh_scores(habits=[Habit(name="Read")])
        assert character_store.character.dimensions[DimensionType.HEALTH].score == 50.0
        assert character_store.character.experience == 0


# ---------------------------------------------------------------------------
# complete_daily_review
# ---------------------------------------------------------------------------


def _reviewed_day():
    day = datetime(2026, 2, 11)
    blocks = [
        TimeBlock(title="Work", start_time=day.replace(hour=9), end_time=day.replace(hour=11),
                  category=BlockCategory.WORK, is_completed=True),
        TimeBlock(title="Gym", start_time=day.replace(hour=12), end_time=day.replace(hour=13),
                  category=BlockCategory.HEALTH, is_completed=False),
    ]
    return DailySchedule(day=date(2026, 2, 11), time_blocks=blocks)


class TestCompleteDailyReview:
    def test_awards_and_dimension_updates(self, character_store):
        schedule = _reviewed_day()
        review = DailyReview(day=schedule.day, mood_rating=4, energy_rating=4, productivity_rating=4)
        points = character_store.complete_daily_review(review, compute_statistics(schedule), schedule)

        # 50 base + 15 rating bonus + floor(0.5 * 50)
        assert points == 90
        dims = character_store.character.dimensions
        assert dims[DimensionType.CAREER].score == 100.0
        assert dims[DimensionType.HEALTH].score == 50.0
        # 90 (review) + 50 (career at 100) = 140 -> level 2, 40 XP
        assert (character_store.character.level, character_store.character.experience) == (2, 40)

    def test_empty_day(self, character_store):
        schedule = DailySchedule(day=date(2026, 2, 11))
        review = DailyReview(day=schedule.day, mood_rating=1, energy_rating=1, productivity_rating=1)
        points = character_store.complete_daily_review(review, compute_statistics(schedule), schedule)
        assert points == 20
        assert character_store.character.experience == 20
