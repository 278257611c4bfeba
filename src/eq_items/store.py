"""
SQLite store for resolved items.

Thin wrapper over a single sqlite3 connection providing parameterized
queries and inserts. Item names and display names compare without
regard to case. The connection runs in autocommit mode, so every
statement is its own write; callers get no atomicity across statements.
Access is serialized with a lock so background persistence threads can
share one store.
"""

import logging
import sqlite3
import threading
from pathlib import Path

from eq_items.exceptions import StoreError

log = logging.getLogger(__name__)

MEMORY = ":memory:"

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    name         TEXT NOT NULL COLLATE NOCASE UNIQUE,
    display_name TEXT NOT NULL COLLATE NOCASE,
    image_src    TEXT,
    price        REAL
);

CREATE TABLE IF NOT EXISTS statistics (
    id      INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER NOT NULL REFERENCES items(id),
    code    TEXT NOT NULL CHECK (code != ''),
    value   REAL,
    effect  TEXT
);

CREATE TABLE IF NOT EXISTS effects (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    uri  TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS item_effects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id     INTEGER NOT NULL REFERENCES items(id),
    effect_id   INTEGER NOT NULL REFERENCES effects(id),
    restriction TEXT
);

CREATE INDEX IF NOT EXISTS idx_items_display_name ON items(display_name);
CREATE INDEX IF NOT EXISTS idx_statistics_item ON statistics(item_id);
CREATE INDEX IF NOT EXISTS idx_item_effects_item ON item_effects(item_id);
"""


class Store:
    def __init__(self, db_path: Path | str):
        if str(db_path) != MEMORY:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                str(db_path), check_same_thread=False, isolation_level=None
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store at {db_path}: {e}") from e
        log.debug("Opened store at %s", db_path)

    def query(self, sql: str, *args) -> list[sqlite3.Row]:
        with self._lock:
            try:
                cursor = self._conn.execute(sql, args)
                try:
                    return cursor.fetchall()
                finally:
                    cursor.close()
            except sqlite3.Error as e:
                raise StoreError(f"Query failed: {e}") from e

    def insert(self, sql: str, *args) -> int | None:
        """Run an INSERT and return the new row id, or None when nothing was inserted."""
        with self._lock:
            try:
                cursor = self._conn.execute(sql, args)
                try:
                    return cursor.lastrowid if cursor.rowcount > 0 else None
                finally:
                    cursor.close()
            except sqlite3.Error as e:
                raise StoreError(f"Insert failed: {e}") from e

    def execute(self, sql: str, *args) -> int:
        with self._lock:
            try:
                cursor = self._conn.execute(sql, args)
                try:
                    return cursor.rowcount
                finally:
                    cursor.close()
            except sqlite3.Error as e:
                raise StoreError(f"Statement failed: {e}") from e

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
