"""Time-bounded result cache on top of a pluggable record store."""

from __future__ import annotations

import hashlib
import logging
import time
from typing import Callable, Optional

from pydantic import ValidationError

from statsburner.cache.ttl import TTL, resolve_expiry
from statsburner.domain.interfaces import ICacheStore, IResultCache
from statsburner.domain.models import AggregateResult, CacheRecord


def fingerprint(url: str) -> str:
    """Stable cache key for a fully assembled request URL."""

    return hashlib.md5(url.encode("utf-8")).hexdigest()


class TimedCache(IResultCache):
    """Stores aggregate results until their expiry; expiry is checked on read."""

    def __init__(
        self,
        store: ICacheStore,
        *,
        default_ttl: TTL = "+1 day",
        clock: Callable[[], float] = time.time,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self._default_ttl = default_ttl
        self._clock = clock
        self.logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    def get(self, fingerprint: str) -> Optional[AggregateResult]:
        record = self._store.read(fingerprint)
        if record is None:
            self.logger.debug("stats_cache_miss", extra={"key": fingerprint})
            return None
        if record.expires_at < self._clock():
            self.logger.debug(
                "stats_cache_expired",
                extra={"key": fingerprint, "expires_at": record.expires_at},
            )
            return None
        try:
            result = AggregateResult.model_validate_json(record.payload)
        except ValidationError:
            self.logger.warning("stats_cache_corrupt", extra={"key": fingerprint})
            return None
        self.logger.debug("stats_cache_hit", extra={"key": fingerprint})
        return result

    def put(
        self,
        fingerprint: str,
        result: AggregateResult,
        ttl: Optional[TTL] = None,
    ) -> AggregateResult:
        expires_at = resolve_expiry(
            self._default_ttl if ttl is None else ttl, self._clock()
        )
        self._store.write(
            fingerprint,
            CacheRecord(expires_at=expires_at, payload=result.model_dump_json()),
        )
        self.logger.debug(
            "stats_cache_write", extra={"key": fingerprint, "expires_at": expires_at}
        )
        return result
