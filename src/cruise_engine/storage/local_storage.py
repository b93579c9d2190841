"""SQLite-backed key/value storage that survives process restarts.

The itinerary only needs "one key, JSON text, survives reload", the same
contract a browser's local storage offers. Writes commit before returning.
"""
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

VALID_JOURNAL_MODES = frozenset({"delete", "truncate", "persist", "memory", "wal", "off"})

_SCHEMA = """
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""


class LocalStorage:
    """Synchronous string key/value store over sqlite3."""

    def __init__(
        self,
        db_path: Path,
        *,
        busy_timeout_ms: int = 2000,
        journal_mode: str | None = "wal",
    ) -> None:
        self._path = db_path
        self._busy_timeout_ms = busy_timeout_ms
        self._journal_mode = self._normalize_journal_mode(journal_mode)
        self._connection: sqlite3.Connection | None = None

    @classmethod
    def from_settings(cls, settings) -> "LocalStorage":
        return cls(
            settings.itinerary_storage_path,
            busy_timeout_ms=settings.storage_busy_timeout_ms,
            journal_mode=settings.storage_journal_mode,
        )

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # lifecycle

    def open(self) -> "LocalStorage":
        if self._connection is None:
            self._connection = self._open_connection()
        return self

    def close(self) -> None:
        if self._connection is None:
            return
        conn = self._connection
        self._connection = None
        conn.close()

    def __enter__(self) -> "LocalStorage":
        return self.open()

    def __exit__(self, exc_type, exc, exc_tb) -> None:
        self.close()

    def _open_connection(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path)
        conn.execute(f"PRAGMA busy_timeout = {int(max(self._busy_timeout_ms, 0))};")
        if self._journal_mode:
            conn.execute(f"PRAGMA journal_mode = {self._journal_mode.upper()};")
        try:
            conn.executescript(_SCHEMA)
            conn.execute(
                "INSERT INTO meta(key, value) VALUES('schema_version', ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (str(SCHEMA_VERSION),),
            )
            conn.commit()
        except sqlite3.OperationalError as exc:
            conn.close()
            logger.error(
                "Local storage schema setup failed (path=%s, timeout_ms=%s): %s",
                self._path,
                self._busy_timeout_ms,
                exc,
            )
            raise
        return conn

    @staticmethod
    def _normalize_journal_mode(value: str | None) -> str | None:
        if value is None:
            return None
        mode = value.strip().lower()
        if not mode:
            return None
        if mode not in VALID_JOURNAL_MODES:
            raise ValueError(
                f"Unsupported SQLite journal_mode '{value}'. Expected one of: {sorted(VALID_JOURNAL_MODES)}"
            )
        return mode

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self.open()
        if self._connection is None:
            raise RuntimeError(f"Local storage at {self._path} could not be opened")
        return self._connection

    # ------------------------------------------------------------------
    # key/value API

    def get_item(self, key: str) -> Optional[str]:
        row = self._require_connection().execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        conn = self._require_connection()
        with conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES(?, ?)\n"
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
                "updated_at=strftime('%Y-%m-%dT%H:%M:%fZ', 'now')",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        conn = self._require_connection()
        with conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        rows = self._require_connection().execute("SELECT key FROM kv ORDER BY key").fetchall()
        return [row[0] for row in rows]


class MemoryStorage:
    """In-process stand-in with the same interface, for previews and tests."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._items)
