"""
LocalStore - Durable key-value store in ~/.tubeacademy/tubeacademy.db.

One table per concern:
- cache: catalog responses, expire after a TTL
- progress: per-video watch state, never expire
- preferences: language, theme, unlocked courses

Every row holds a JSON envelope {"data": ..., "timestamp": epoch-ms}.
Reads fail open (anything unreadable is absent) and writes fail silently,
so a broken store never takes playback down with it.
"""

import json
import logging
import re
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable, Optional, Protocol


logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(r"^[a-z_][a-z0-9_]*$")


class KeyValueStore(Protocol):
    """The store surface components depend on."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self, prefix: str = "") -> list[str]: ...

    def clear_namespace(self, prefix: str) -> int: ...


class LocalStore:
    """
    SQLite-backed key-value table with optional TTL.

    Each method opens its own connection, so one instance may be shared
    between the UI thread and background workers.
    """

    def __init__(
        self,
        db_path: Path,
        table: str = "entries",
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
        timeout: float = 5.0,
    ):
        """
        Initialize store.

        Args:
            db_path: Path to the SQLite file (created if missing)
            table: Table holding this store's entries
            ttl_seconds: Entry lifetime; None means entries never expire
            clock: Returns current time in seconds (injectable for tests)
            timeout: Seconds to wait for a locked database before giving up
        """
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name: {table!r}")
        self.db_path = Path(db_path)
        self.table = table
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self.timeout = timeout
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _is_expired(self, timestamp: int) -> bool:
        if self.ttl_seconds is None:
            return False
        return self._now_ms() - timestamp > self.ttl_seconds * 1000

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get the value stored under `key`.

        Expired entries are deleted and reported as absent. Malformed
        entries and storage errors also read as absent.
        """
        try:
            conn = self._get_connection()
            try:
                row = conn.execute(
                    f"SELECT value FROM {self.table} WHERE key = ?", (key,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.debug(f"Store read failed for {key}: {e}")
            return default

        if row is None:
            return default

        try:
            envelope = json.loads(row["value"])
            data = envelope["data"]
            timestamp = int(envelope["timestamp"])
        except (ValueError, TypeError, KeyError, OverflowError) as e:
            # OverflowError: json accepts Infinity, int() does not
            logger.debug(f"Discarding malformed entry {key}: {e}")
            return default

        if self._is_expired(timestamp):
            self.delete(key)
            return default
        return data

    def contains(self, key: str) -> bool:
        """True if a live entry exists for `key`."""
        marker = object()
        return self.get(key, marker) is not marker

    def keys(self, prefix: str = "") -> list[str]:
        """Keys starting with `prefix` (expired entries included until read)."""
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    f"SELECT key FROM {self.table} WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix)
                )
                return [row["key"] for row in cursor.fetchall()]
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.debug(f"Store key scan failed: {e}")
            return []

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def set(self, key: str, value: Any) -> None:
        """Store `value` with the current timestamp. Failures are logged only."""
        try:
            payload = json.dumps({"data": value, "timestamp": self._now_ms()})
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot serialize value for {key}: {e}")
            return

        try:
            conn = self._get_connection()
            try:
                conn.execute(
                    f"""INSERT INTO {self.table} (key, value) VALUES (?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value""",
                    (key, payload)
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Store write failed for {key}: {e}")

    def delete(self, key: str) -> None:
        """Remove one entry."""
        try:
            conn = self._get_connection()
            try:
                conn.execute(f"DELETE FROM {self.table} WHERE key = ?", (key,))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Store delete failed for {key}: {e}")

    def clear_namespace(self, prefix: str) -> int:
        """Delete every entry whose key starts with `prefix`. Returns count removed."""
        try:
            conn = self._get_connection()
            try:
                cursor = conn.execute(
                    f"DELETE FROM {self.table} WHERE substr(key, 1, ?) = ?",
                    (len(prefix), prefix)
                )
                conn.commit()
                return cursor.rowcount
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.warning(f"Store clear failed for prefix {prefix!r}: {e}")
            return 0

    def clear(self) -> int:
        """Delete every entry in this table."""
        return self.clear_namespace("")
