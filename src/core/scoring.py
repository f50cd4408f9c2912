"""
LifeOS Core — Character Scoring.

Pure business logic that turns activity into dimension scores and
experience awards. The CharacterStore applies the results.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from src.data.models import (
    BlockCategory,
    DailySchedule,
    DimensionType,
    Habit,
    TaskPriority,
)


NEUTRAL_SCORE = 50.0
HEALTH_HABIT_KEYWORDS = ("exercise", "water", "sleep", "meditat")
HEALTH_WINDOW_DAYS = 7

HABIT_COMPLETION_EXPERIENCE = 15
REVIEW_BASE_EXPERIENCE = 50

_TASK_EXPERIENCE = {
    TaskPriority.LOW: 5,
    TaskPriority.MEDIUM: 10,
    TaskPriority.HIGH: 20,
}

# Block category -> (dimension, weight of the completion rate above 50)
_REVIEW_CATEGORY_DIMENSIONS = {
    BlockCategory.HEALTH: (DimensionType.HEALTH, 50.0),
    BlockCategory.WORK: (DimensionType.CAREER, 50.0),
    BlockCategory.PERSONAL: (DimensionType.PERSONAL, 50.0),
    BlockCategory.SOCIAL: (DimensionType.RELATIONSHIPS, 50.0),
    BlockCategory.LEARNING: (DimensionType.PERSONAL, 30.0),
}


def clamp_score(score: float) -> float:
    return min(100.0, max(0.0, float(score)))


# ---------------------------------------------------------------------------
# Dimension scores
# ---------------------------------------------------------------------------


def is_health_habit(habit: Habit, keywords: Sequence[str] = HEALTH_HABIT_KEYWORDS) -> bool:
    name = habit.name.lower()
    return any(kw in name for kw in keywords)


def health_score_from_habits(
    habits: Iterable[Habit],
    now: datetime | None = None,
    keywords: Sequence[str] = HEALTH_HABIT_KEYWORDS,
    window_days: int = HEALTH_WINDOW_DAYS,
) -> float:
    """Score health habits by their completions over the trailing window.

    Returns the neutral 50.0 when no habit name matches a health keyword.
    Otherwise each matching habit's completion rate (completions in the
    window / window days, capped at 1) is averaged and mapped to 50..100.
    """
    matching = [h for h in habits if is_health_habit(h, keywords)]
    if not matching:
        return NEUTRAL_SCORE

    cutoff = (now or datetime.now()) - timedelta(days=window_days)
    rates = []
    for habit in matching:
        recent = sum(1 for c in habit.completions if c.date > cutoff)
        rates.append(min(1.0, recent / window_days))

    average = sum(rates) / len(rates)
    return NEUTRAL_SCORE + average * 50.0


def wealth_score(monthly_income: float, monthly_expenses: float) -> float:
    """Map the monthly savings rate to 0..100 around a neutral 50."""
    if monthly_income <= 0:
        return NEUTRAL_SCORE
    savings_rate = (monthly_income - monthly_expenses) / monthly_income
    return clamp_score(NEUTRAL_SCORE + savings_rate * 100.0)


def career_score(completed_tasks: int, total_tasks: int) -> float:
    """Map the task completion ratio to 30..100."""
    if total_tasks == 0:
        return NEUTRAL_SCORE
    return 30.0 + (completed_tasks / total_tasks) * 70.0


# ---------------------------------------------------------------------------
# Experience awards
# ---------------------------------------------------------------------------


def experience_for_score(score: float) -> int:
    """Experience for a dimension update: 10 per full 10 points away from 50."""
    return int(abs(score - NEUTRAL_SCORE) // 10) * 10


def task_completion_experience(priority: TaskPriority) -> int:
    return _TASK_EXPERIENCE[priority]


def review_completion_experience(
    mood_rating: int,
    energy_rating: int,
    productivity_rating: int,
    completion_rate: float,
) -> int:
    """Base 50, +/-5 per rating point away from all-3s, up to +50 for completion."""
    rating_bonus = (mood_rating + energy_rating + productivity_rating - 9) * 5
    completion_bonus = math.floor(completion_rate * 50)
    return REVIEW_BASE_EXPERIENCE + rating_bonus + completion_bonus


# ---------------------------------------------------------------------------
# Daily review -> dimensions
# ---------------------------------------------------------------------------


def category_completion_rates(schedule: DailySchedule) -> dict[BlockCategory, float]:
    """Fraction of completed blocks per category present in the schedule."""
    totals: dict[BlockCategory, int] = {}
    completed: dict[BlockCategory, int] = {}
    for block in schedule.time_blocks:
        totals[block.category] = totals.get(block.category, 0) + 1
        if block.is_completed:
            completed[block.category] = completed.get(block.category, 0) + 1
    return {cat: completed.get(cat, 0) / count for cat, count in totals.items()}


def review_dimension_updates(
    rates: dict[BlockCategory, float],
) -> list[tuple[DimensionType, float]]:
    """Dimension scores implied by per-category completion, in category order.

    Categories without a matching dimension are ignored. Personal and
    Learning both feed the Personal dimension, so it may appear twice.
    """
    updates = []
    for category in BlockCategory:
        if category not in rates or category not in _REVIEW_CATEGORY_DIMENSIONS:
            continue
        dimension, weight = _REVIEW_CATEGORY_DIMENSIONS[category]
        updates.append((dimension, NEUTRAL_SCORE + rates[category] * weight))
    return updates
