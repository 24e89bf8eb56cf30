"""Key-value stores the engine persists its state to."""
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from study_tracker.db import DEFAULT_DB_PATH, get_connection, init_db
from study_tracker.errors import PersistenceError

logger = logging.getLogger(__name__)


class MemoryStore:
    """Dict-backed store. Set `fail` to simulate an unavailable backend."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail = False
        self.writes = 0

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("Memory store unavailable")

    def get(self, key: str) -> Optional[str]:
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str]) -> None:
        self._check()
        self.data.update(values)
        self.writes += 1

    def clear(self) -> None:
        self._check()
        self.data.clear()


class SqliteStore:
    """One record per user in the `user_state` table, one row per key."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH, user_id: str = "default"):
        self.db_path = db_path
        self.user_id = user_id
        try:
            init_db(db_path)
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Cannot open database {db_path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            conn = get_connection(self.db_path)
            try:
                row = conn.execute(
                    "SELECT value FROM user_state WHERE user_id = ? AND key = ?",
                    (self.user_id, key),
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read {key!r}: {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: dict[str, str]) -> None:
        """Write all keys in a single transaction."""
        now = datetime.now().isoformat()
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    conn.executemany(
                        """INSERT INTO user_state (user_id, key, value, updated_at) VALUES (?, ?, ?, ?)
                        ON CONFLICT(user_id, key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at""",
                        [(self.user_id, key, value, now) for key, value in values.items()],
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to save state for {self.user_id}: {e}") from e
        logger.debug("Saved %d keys for user %s", len(values), self.user_id)

    def clear(self) -> None:
        try:
            conn = get_connection(self.db_path)
            try:
                with conn:
                    conn.execute("DELETE FROM user_state WHERE user_id = ?", (self.user_id,))
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to clear state for {self.user_id}: {e}") from e
