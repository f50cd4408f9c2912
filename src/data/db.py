"""
LifeOS Core — Blob Database.

The Memory pillar: schedules and the character persist in SQLite across
restarts. Each key stores one complete encoded snapshot, rewritten on
every change.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from src.ports.storage_port import StorageError

logger = logging.getLogger(__name__)


class SQLiteBlobStore:
    """SQLite-backed implementation of StoragePort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the blobs table if it doesn't exist."""
        try:
            with self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS blobs (
                        key         TEXT PRIMARY KEY,
                        data        BLOB NOT NULL,
                        updated_at  TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot initialize blob store at {self._db_path}: {exc}") from exc
        logger.debug("Blobs table initialized at %s", self._db_path)

    def load(self, key: str) -> bytes | None:
        """Fetch the snapshot stored under key, or None if never saved."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT data FROM blobs WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to load '{key}': {exc}") from exc
        if row is None:
            return None
        return bytes(row["data"])

    def save(self, key: str, data: bytes) -> None:
        """Replace the snapshot stored under key."""
        now = datetime.now().isoformat()
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO blobs (key, data, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        data = excluded.data,
                        updated_at = excluded.updated_at
                    """,
                    (key, sqlite3.Binary(data), now),
                )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to save '{key}': {exc}") from exc
        logger.debug("Saved '%s' (%d bytes)", key, len(data))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    store = SQLiteBlobStore(db_path="data/test_blobs.db")
    store.save("greeting", b"hello")
    print(f"Loaded: {store.load('greeting')!r}")
    store.save("greeting", b"hello again")
    print(f"After overwrite: {store.load('greeting')!r}")
