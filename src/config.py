"""
LifeOS Core — Centralized configuration.

Loads all settings from .env and validates them.
Every store falls back to these values when not given explicit overrides.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite blob store
    DATABASE_PATH: str = "data/lifeos.db"

    # Daily scheduler — slot suggestions snap to this grid
    SLOT_INTERVAL_MINUTES: int = 15

    # Character scoring — trailing window for health habits
    HEALTH_WINDOW_DAYS: int = 7
    HEALTH_HABIT_KEYWORDS: list[str] = ["exercise", "water", "sleep", "meditat"]

    # Logging (used by the __main__ demos)
    LOG_LEVEL: str = "INFO"

    @field_validator("SLOT_INTERVAL_MINUTES", mode="before")
    @classmethod
    def parse_slot_interval(cls, v: str | int) -> int:
        minutes = int(v)
        if minutes <= 0 or 60 % minutes != 0:
            raise ValueError(f"SLOT_INTERVAL_MINUTES must divide 60, got {minutes}")
        return minutes

    @field_validator("HEALTH_WINDOW_DAYS", mode="before")
    @classmethod
    def parse_window(cls, v: str | int) -> int:
        days = int(v)
        if days <= 0:
            raise ValueError(f"HEALTH_WINDOW_DAYS must be positive, got {days}")
        return days

    @field_validator("HEALTH_HABIT_KEYWORDS", mode="before")
    @classmethod
    def parse_keywords(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, list):
            return [kw.strip().lower() for kw in v if kw.strip()]
        if isinstance(v, str) and v.strip():
            return [kw.strip().lower() for kw in v.split(",") if kw.strip()]
        return []

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/lifeos.db"),
            SLOT_INTERVAL_MINUTES=os.getenv("SLOT_INTERVAL_MINUTES", "15"),
            HEALTH_WINDOW_DAYS=os.getenv("HEALTH_WINDOW_DAYS", "7"),
            HEALTH_HABIT_KEYWORDS=os.getenv(
                "HEALTH_HABIT_KEYWORDS", "exercise,water,sleep,meditat",
            ),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValidationError as exc:
        print(f"ERROR: invalid LifeOS configuration in .env:\n{exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
