"""Storage port — abstract interface for whole-state blob persistence.

Core stores depend on this protocol, never on a specific backend.
Each key holds a complete snapshot; there are no partial updates.
"""

from __future__ import annotations

from typing import Protocol


class StorageError(Exception):
    """Raised when any storage backend operation fails."""


class StoragePort(Protocol):
    """Abstract key-value blob store used by core modules."""

    def load(self, key: str) -> bytes | None: ...

    def save(self, key: str, data: bytes) -> None: ...
