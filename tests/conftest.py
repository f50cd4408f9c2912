"""Shared test fixtures and configuration.

Sets up environment variables before any src imports so src.config loads
predictable defaults, and provides common fixtures like a temp blob store
and a fixed clock.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("SLOT_INTERVAL_MINUTES", "15")
os.environ.setdefault("HEALTH_WINDOW_DAYS", "7")
os.environ.setdefault("HEALTH_HABIT_KEYWORDS", "exercise,water,sleep,meditat")

from datetime import datetime

import pytest

# Wednesday 2026-02-11, 08:00 local time
FIXED_NOW = datetime(2026, 2, 11, 8, 0)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def clock():
    """Clock callable frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_lifeos.db")


@pytest.fixture
def blob_store(tmp_db_path):
    """Return a SQLiteBlobStore backed by a temp file."""
    from src.data.db import SQLiteBlobStore
    return SQLiteBlobStore(db_path=tmp_db_path)


@pytest.fixture
def memory_store():
    from src.adapters.memory_storage import InMemoryBlobStore
    return InMemoryBlobStore()


@pytest.fixture
def scheduler(memory_store, clock):
    """Return a DailyScheduler over an in-memory store with a fixed clock."""
    from src.core.daily_scheduler import DailyScheduler
    return DailyScheduler(storage=memory_store, clock=clock, slot_minutes=15)


@pytest.fixture
def character_store(memory_store, clock):
    from src.core.character_store import CharacterStore
    return CharacterStore(storage=memory_store, clock=clock)
