"""Flat-file cache store: one ``<expires_at>\\n<payload>`` file per key."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from statsburner.domain.exceptions import CacheError
from statsburner.domain.interfaces import ICacheStore
from statsburner.domain.models import CacheRecord


class FileCacheStore(ICacheStore):
    """Persists cache records as files named after their key."""

    def __init__(self, directory: str | Path):
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def read(self, key: str) -> Optional[CacheRecord]:
        path = self._directory / key
        if not path.is_file():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CacheError("Unable to read cache file", context={"path": str(path)}) from exc

        expires_at, _, payload = raw.partition("\n")
        try:
            return CacheRecord(expires_at=int(expires_at), payload=payload.strip())
        except ValueError:
            # Unreadable header; treat as absent so the next write replaces it.
            return None

    def write(self, key: str, record: CacheRecord) -> None:
        path = self._directory / key
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(f"{record.expires_at}\n{record.payload}", encoding="utf-8")
        except OSError as exc:
            raise CacheError("Unable to write cache file", context={"path": str(path)}) from exc
