"""
LifeOS Core — Data Models.

Plain entities shared by the daily scheduler and the character layer.
Entities never touch storage: the owning store mutates them and persists
the whole state afterwards.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum


def start_of_day(value: date | datetime) -> datetime:
    """Normalize a date or datetime to local midnight (naive datetime)."""
    if isinstance(value, datetime):
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime(value.year, value.month, value.day)


def _new_id() -> str:
    return uuid.uuid4().hex


# ---------------------------------------------------------------------------
# Daily schedule
# ---------------------------------------------------------------------------


class BlockCategory(Enum):
    WORK = "Work"
    PERSONAL = "Personal"
    HEALTH = "Health"
    LEARNING = "Learning"
    SOCIAL = "Social"
    BREAK = "Break"
    COMMUTE = "Commute"
    MEAL = "Meal"
    PLANNING = "Planning"
    OTHER = "Other"

    @property
    def icon(self) -> str:
        return _CATEGORY_ICONS[self]

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS[self]


_CATEGORY_ICONS = {
    BlockCategory.WORK: "briefcase.fill",
    BlockCategory.PERSONAL: "person.fill",
    BlockCategory.HEALTH: "heart.fill",
    BlockCategory.LEARNING: "book.fill",
    BlockCategory.SOCIAL: "person.2.fill",
    BlockCategory.BREAK: "pause.circle.fill",
    BlockCategory.COMMUTE: "car.fill",
    BlockCategory.MEAL: "fork.knife",
    BlockCategory.PLANNING: "calendar",
    BlockCategory.OTHER: "square.grid.2x2",
}

_CATEGORY_COLORS = {
    BlockCategory.WORK: "blue",
    BlockCategory.PERSONAL: "purple",
    BlockCategory.HEALTH: "red",
    BlockCategory.LEARNING: "orange",
    BlockCategory.SOCIAL: "green",
    BlockCategory.BREAK: "gray",
    BlockCategory.COMMUTE: "indigo",
    BlockCategory.MEAL: "yellow",
    BlockCategory.PLANNING: "teal",
    BlockCategory.OTHER: "secondary",
}


@dataclass
class TimeBlock:
    """A scheduled interval of a day.

    The interval is half-open: a block ending at 10:00 does not collide
    with one starting at 10:00.
    """

    title: str
    start_time: datetime
    end_time: datetime
    category: BlockCategory
    task_id: str | None = None        # weak link to a task, may dangle
    notes: str = ""
    is_completed: bool = False
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def duration_minutes(self) -> int:
        return int(self.duration.total_seconds() / 60)

    @property
    def duration_string(self) -> str:
        seconds = int(self.duration.total_seconds())
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        if hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"

    @property
    def time_range_string(self) -> str:
        return f"{self.start_time:%H:%M} - {self.end_time:%H:%M}"

    def overlaps(self, other: TimeBlock) -> bool:
        return self.start_time < other.end_time and self.end_time > other.start_time


@dataclass
class DailyReview:
    """End-of-day reflection with three 1-5 ratings."""

    day: datetime
    accomplishments: str = ""
    challenges: str = ""
    lessons_learned: str = ""
    tomorrows_priorities: str = ""
    gratitude: str = ""
    mood_rating: int = 3
    energy_rating: int = 3
    productivity_rating: int = 3
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.day = start_of_day(self.day)
        for name in ("mood_rating", "energy_rating", "productivity_rating"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be between 1 and 5, got {value}")

    @property
    def rating_total(self) -> int:
        return self.mood_rating + self.energy_rating + self.productivity_rating


@dataclass
class DailySchedule:
    """All time blocks of one calendar day, plus an optional review."""

    day: datetime
    time_blocks: list[TimeBlock] = field(default_factory=list)
    daily_review: DailyReview | None = None

    def __post_init__(self) -> None:
        self.day = start_of_day(self.day)

    @property
    def sorted_time_blocks(self) -> list[TimeBlock]:
        return sorted(self.time_blocks, key=lambda b: b.start_time)

    @property
    def total_planned_minutes(self) -> int:
        return sum(b.duration_minutes for b in self.time_blocks)

    @property
    def completion_rate(self) -> float:
        if not self.time_blocks:
            return 0.0
        completed = sum(1 for b in self.time_blocks if b.is_completed)
        return completed / len(self.time_blocks)

    def find_block(self, block_id: str) -> int | None:
        """Return the index of the block with this id, or None."""
        for index, block in enumerate(self.time_blocks):
            if block.id == block_id:
                return index
        return None


@dataclass
class DailyStatistics:
    """Read-only snapshot computed from a schedule. Never persisted."""

    total_blocks: int
    completed_blocks: int
    total_minutes: int
    completed_minutes: int
    category_breakdown: dict[BlockCategory, int]
    completion_rate: float

    @property
    def total_hours(self) -> float:
        return self.total_minutes / 60.0

    @property
    def completed_hours(self) -> float:
        return self.completed_minutes / 60.0


# ---------------------------------------------------------------------------
# Character
# ---------------------------------------------------------------------------


class DimensionType(Enum):
    HEALTH = "Health"
    WEALTH = "Wealth"
    RELATIONSHIPS = "Relationships"
    CAREER = "Career"
    PERSONAL = "Personal"
    FUN = "Fun"


def dimension_level_label(score: float) -> str:
    """Qualitative band for a 0-100 dimension score."""
    if score < 20:
        return "Critical"
    if score < 40:
        return "Poor"
    if score < 60:
        return "Average"
    if score < 80:
        return "Good"
    return "Excellent"


@dataclass
class Dimension:
    name: str
    icon: str
    color: str
    score: float = 50.0

    @property
    def level_label(self) -> str:
        return dimension_level_label(self.score)


_DIMENSION_PRESENTATION = {
    DimensionType.HEALTH: ("heart.fill", "red"),
    DimensionType.WEALTH: ("dollarsign.circle.fill", "green"),
    DimensionType.RELATIONSHIPS: ("person.2.fill", "blue"),
    DimensionType.CAREER: ("briefcase.fill", "orange"),
    DimensionType.PERSONAL: ("brain", "purple"),
    DimensionType.FUN: ("gamecontroller.fill", "pink"),
}


def default_dimension(dimension_type: DimensionType) -> Dimension:
    icon, color = _DIMENSION_PRESENTATION[dimension_type]
    return Dimension(name=dimension_type.value, icon=icon, color=color)


def _default_dimensions() -> dict[DimensionType, Dimension]:
    return {t: default_dimension(t) for t in DimensionType}


@dataclass
class LifeDimensions:
    """The six fixed life axes, keyed by DimensionType."""

    dimensions: dict[DimensionType, Dimension] = field(default_factory=_default_dimensions)

    def __getitem__(self, dimension_type: DimensionType) -> Dimension:
        return self.dimensions[dimension_type]

    @property
    def all_dimensions(self) -> list[Dimension]:
        return [self.dimensions[t] for t in DimensionType]

    @property
    def average_score(self) -> float:
        return sum(d.score for d in self.all_dimensions) / len(DimensionType)

    def update(self, dimension_type: DimensionType, score: float) -> float:
        """Clamp the score to [0, 100], store it, and return the stored value."""
        if not math.isfinite(score):
            raise ValueError(f"Score must be a finite number, got {score}")
        clamped = min(100.0, max(0.0, float(score)))
        self.dimensions[dimension_type].score = clamped
        return clamped


@dataclass
class Character:
    """Gamified progress. Invariant: experience < level * 100."""

    level: int = 1
    experience: int = 0
    dimensions: LifeDimensions = field(default_factory=LifeDimensions)
    last_updated: datetime = field(default_factory=datetime.now)

    @property
    def experience_for_next_level(self) -> int:
        return self.level * 100

    @property
    def experience_progress(self) -> float:
        return self.experience / self.experience_for_next_level

    @property
    def total_score(self) -> float:
        return self.dimensions.average_score

    def add_experience(self, points: int) -> int:
        """Add points and roll over into levels. Returns the levels gained.

        The threshold grows with the level, so the carry is applied one
        level at a time.
        """
        if points < 0:
            raise ValueError(f"Experience points must be non-negative, got {points}")
        self.experience += points
        gained = 0
        while self.experience >= self.experience_for_next_level:
            self.experience -= self.experience_for_next_level
            self.level += 1
            gained += 1
        return gained


# ---------------------------------------------------------------------------
# Activity records (read-only inputs to scoring)
# ---------------------------------------------------------------------------


@dataclass
class HabitCompletion:
    date: datetime
    count: int = 1


@dataclass
class Habit:
    name: str
    completions: list[HabitCompletion] = field(default_factory=list)
    is_active: bool = True
    description: str = ""


class TaskPriority(Enum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


@dataclass
class TaskItem:
    title: str
    priority: TaskPriority = TaskPriority.MEDIUM
    is_completed: bool = False
    description: str = ""
    due_date: datetime | None = None
    id: str = field(default_factory=_new_id)


class TransactionType(Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


@dataclass
class Transaction:
    amount: float
    description: str
    type: TransactionType
    date: datetime
    category: str = "Other"


@dataclass
class TaskSummary:
    completed: int
    total: int


@dataclass
class FinanceSummary:
    monthly_income: float
    monthly_expenses: float

    @property
    def savings_rate(self) -> float:
        if self.monthly_income <= 0:
            return 0.0
        return (self.monthly_income - self.monthly_expenses) / self.monthly_income
