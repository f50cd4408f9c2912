"""In-memory storage adapter — a dict-backed StoragePort for tests and demos."""

from __future__ import annotations


class InMemoryBlobStore:
    """Keeps snapshots in a dict. Nothing survives the process."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._blobs: dict[str, bytes] = dict(initial or {})

    def load(self, key: str) -> bytes | None:
        return self._blobs.get(key)

    def save(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)
