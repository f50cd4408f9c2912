"""
LifeOS Core — Snapshot Codec.

Encodes whole-state snapshots (all daily schedules, the character) as UTF-8
JSON for the storage port, and decodes them back with every field intact.
Datetimes travel as ISO 8601 strings; enums travel by value.
"""

from __future__ import annotations

import json
from datetime import date, datetime

from src.data.models import (
    BlockCategory,
    Character,
    DailyReview,
    DailySchedule,
    Dimension,
    DimensionType,
    LifeDimensions,
    TimeBlock,
)


class CodecError(ValueError):
    """Raised when a stored snapshot cannot be decoded."""


# ---------------------------------------------------------------------------
# Daily schedules
# ---------------------------------------------------------------------------


def _block_to_dict(block: TimeBlock) -> dict:
    return {
        "id": block.id,
        "title": block.title,
        "start_time": block.start_time.isoformat(),
        "end_time": block.end_time.isoformat(),
        "category": block.category.value,
        "task_id": block.task_id,
        "notes": block.notes,
        "is_completed": block.is_completed,
        "created_at": block.created_at.isoformat(),
        "updated_at": block.updated_at.isoformat(),
    }


def _dict_to_block(data: dict) -> TimeBlock:
    return TimeBlock(
        id=data["id"],
        title=data["title"],
        start_time=datetime.fromisoformat(data["start_time"]),
        end_time=datetime.fromisoformat(data["end_time"]),
        category=BlockCategory(data["category"]),
        task_id=data.get("task_id"),
        notes=data.get("notes", ""),
        is_completed=bool(data.get("is_completed", False)),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
    )


def _review_to_dict(review: DailyReview) -> dict:
    return {
        "id": review.id,
        "day": review.day.isoformat(),
        "accomplishments": review.accomplishments,
        "challenges": review.challenges,
        "lessons_learned": review.lessons_learned,
        "tomorrows_priorities": review.tomorrows_priorities,
        "gratitude": review.gratitude,
        "mood_rating": review.mood_rating,
        "energy_rating": review.energy_rating,
        "productivity_rating": review.productivity_rating,
        "created_at": review.created_at.isoformat(),
    }


def _dict_to_review(data: dict) -> DailyReview:
    return DailyReview(
        id=data["id"],
        day=datetime.fromisoformat(data["day"]),
        accomplishments=data.get("accomplishments", ""),
        challenges=data.get("challenges", ""),
        lessons_learned=data.get("lessons_learned", ""),
        tomorrows_priorities=data.get("tomorrows_priorities", ""),
        gratitude=data.get("gratitude", ""),
        mood_rating=int(data["mood_rating"]),
        energy_rating=int(data["energy_rating"]),
        productivity_rating=int(data["productivity_rating"]),
        created_at=datetime.fromisoformat(data["created_at"]),
    )


def schedule_to_dict(schedule: DailySchedule) -> dict:
    review = schedule.daily_review
    return {
        "day": schedule.day.isoformat(),
        "time_blocks": [_block_to_dict(b) for b in schedule.time_blocks],
        "daily_review": _review_to_dict(review) if review is not None else None,
    }


def dict_to_schedule(data: dict) -> DailySchedule:
    review = data.get("daily_review")
    return DailySchedule(
        day=datetime.fromisoformat(data["day"]),
        time_blocks=[_dict_to_block(b) for b in data.get("time_blocks", [])],
        daily_review=_dict_to_review(review) if review is not None else None,
    )


def encode_schedules(schedules: dict[date, DailySchedule]) -> bytes:
    """Encode every schedule, keyed by ISO date."""
    payload = {
        day.isoformat(): schedule_to_dict(schedule)
        for day, schedule in sorted(schedules.items())
    }
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def decode_schedules(data: bytes) -> dict[date, DailySchedule]:
    """Decode a snapshot produced by encode_schedules.

    Raises CodecError on malformed input.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
        if not isinstance(payload, dict):
            raise TypeError(f"expected an object, got {type(payload).__name__}")
        return {
            date.fromisoformat(key): dict_to_schedule(value)
            for key, value in payload.items()
        }
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise CodecError(f"Invalid schedules snapshot: {exc}") from exc


# ---------------------------------------------------------------------------
# Character
# ---------------------------------------------------------------------------


def character_to_dict(character: Character) -> dict:
    return {
        "level": character.level,
        "experience": character.experience,
        "last_updated": character.last_updated.isoformat(),
        "dimensions": {
            t.value: {
                "name": d.name,
                "icon": d.icon,
                "color": d.color,
                "score": d.score,
            }
            for t, d in character.dimensions.dimensions.items()
        },
    }


def dict_to_character(data: dict) -> Character:
    dimensions = LifeDimensions()
    for raw_type, raw in data.get("dimensions", {}).items():
        dimensions.dimensions[DimensionType(raw_type)] = Dimension(
            name=raw["name"],
            icon=raw["icon"],
            color=raw["color"],
            score=float(raw["score"]),
        )
    level = int(data["level"])
    experience = int(data["experience"])
    if level < 1 or not 0 <= experience < level * 100:
        raise ValueError(f"level {level} with {experience} XP is out of range")
    return Character(
        level=level,
        experience=experience,
        dimensions=dimensions,
        last_updated=datetime.fromisoformat(data["last_updated"]),
    )


def encode_character(character: Character) -> bytes:
    return json.dumps(character_to_dict(character), ensure_ascii=False).encode("utf-8")


def decode_character(data: bytes) -> Character:
    """Decode a snapshot produced by encode_character.

    Raises CodecError on malformed input.
    """
    try:
        payload = json.loads(data.decode("utf-8"))
        if not isinstance(payload, dict):
            raise TypeError(f"expected an object, got {type(payload).__name__}")
        return dict_to_character(payload)
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise CodecError(f"Invalid character snapshot: {exc}") from exc
