"""
LifeOS Core — Activity Summaries.

Read-only aggregates over task, habit and finance records. These are the
inputs the character scoring consumes; the records themselves are owned
elsewhere.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from src.data.models import (
    FinanceSummary,
    Habit,
    TaskItem,
    TaskSummary,
    Transaction,
    TransactionType,
)


def summarize_tasks(tasks: Iterable[TaskItem]) -> TaskSummary:
    """Count completed vs. total tasks."""
    completed = 0
    total = 0
    for task in tasks:
        total += 1
        if task.is_completed:
            completed += 1
    return TaskSummary(completed=completed, total=total)


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def monthly_finance_summary(
    transactions: Iterable[Transaction], now: datetime | None = None,
) -> FinanceSummary:
    """Total income and expenses dated from the first of now's month on."""
    month_start = start_of_month(now or datetime.now())
    income = 0.0
    expenses = 0.0
    for tx in transactions:
        if tx.date < month_start:
            continue
        if tx.type is TransactionType.INCOME:
            income += tx.amount
        else:
            expenses += tx.amount
    return FinanceSummary(monthly_income=income, monthly_expenses=expenses)


def active_habits(habits: Iterable[Habit]) -> list[Habit]:
    """Active habits sorted by name."""
    return sorted((h for h in habits if h.is_active), key=lambda h: h.name)


def habit_completed_on(habit: Habit, day: date) -> bool:
    return any(c.date.date() == day for c in habit.completions)
