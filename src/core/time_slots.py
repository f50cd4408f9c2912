"""
LifeOS Core — Time Slot Helpers.

Pure interval math shared by the daily scheduler: half-open overlap checks,
rounding up to a slot grid, and walking past busy blocks to the next free
start.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta

DEFAULT_SLOT_MINUTES = 15


def overlaps(
    start: datetime, end: datetime, other_start: datetime, other_end: datetime,
) -> bool:
    """Check if [start, end) intersects [other_start, other_end)."""
    return start < other_end and end > other_start


def round_up_to_slot(value: datetime, slot_minutes: int = DEFAULT_SLOT_MINUTES) -> datetime:
    """Round up to the next slot boundary measured from midnight.

    A value already on a boundary is returned unchanged. Rounding may carry
    into the next hour or the next day.
    """
    step = timedelta(minutes=slot_minutes)
    midnight = value.replace(hour=0, minute=0, second=0, microsecond=0)
    remainder = (value - midnight) % step
    if not remainder:
        return value
    return value + (step - remainder)


def find_next_free_start(
    busy: Iterable[tuple[datetime, datetime]],
    duration: timedelta,
    search_from: datetime,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> datetime:
    """Find the earliest grid-aligned start at or after search_from.

    The candidate is rounded up to the slot grid, then pushed past every
    busy interval it collides with (re-rounding after each push) until the
    trial interval [candidate, candidate + duration) is free. There is no
    end-of-day bound, so the result may fall on a later day.
    """
    sorted_busy = sorted(busy)
    candidate = round_up_to_slot(search_from, slot_minutes)

    moved = True
    while moved:
        moved = False
        for bs, be in sorted_busy:
            if overlaps(candidate, candidate + duration, bs, be):
                # be > candidate here, so every push strictly advances
                candidate = round_up_to_slot(be, slot_minutes)
                moved = True
    return candidate


def format_hhmm(value: datetime) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"
