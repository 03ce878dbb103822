"""SQLite-backed cache store."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from statsburner.domain.exceptions import CacheError
from statsburner.domain.interfaces import ICacheStore
from statsburner.domain.models import CacheRecord

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS cache (
    key TEXT PRIMARY KEY,
    expires_at INTEGER NOT NULL,
    payload TEXT NOT NULL
);
"""

_UPSERT_SQL = """
INSERT INTO cache (key, expires_at, payload)
VALUES (?, ?, ?)
ON CONFLICT(key) DO UPDATE SET
    expires_at=excluded.expires_at,
    payload=excluded.payload;
"""

_SELECT_SQL = """
SELECT expires_at, payload
FROM cache
WHERE key = ?;
"""


class SQLiteCacheStore(ICacheStore):
    """Key-value cache table in a single SQLite file."""

    def __init__(self, db_path: str | Path):
        self._db_path = str(db_path)
        self._ensure_schema()

    def read(self, key: str) -> Optional[CacheRecord]:
        try:
            with sqlite3.connect(self._db_path) as conn:
                row = conn.execute(_SELECT_SQL, (key,)).fetchone()
        except sqlite3.Error as exc:
            raise CacheError("Unable to read cache", context={"key": key}) from exc
        if row is None:
            return None
        expires_at, payload = row
        return CacheRecord(expires_at=int(expires_at), payload=payload)

    def write(self, key: str, record: CacheRecord) -> None:
        try:
            with sqlite3.connect(self._db_path) as conn:
                conn.execute(_UPSERT_SQL, (key, record.expires_at, record.payload))
                conn.commit()
        except sqlite3.Error as exc:
            raise CacheError("Unable to write cache", context={"key": key}) from exc

    def _ensure_schema(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self._db_path) as conn:
            conn.execute(_CREATE_TABLE_SQL)
            conn.commit()
