"""Dependency injection container for building fully-wired StatsClient instances."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import httpx

from statsburner.cache.file_store import FileCacheStore
from statsburner.cache.sqlite_store import SQLiteCacheStore
from statsburner.cache.timed_cache import TimedCache
from statsburner.core.client import StatsClient
from statsburner.core.config import ClientConfig
from statsburner.dates.resolver import DateRangeResolver
from statsburner.domain.interfaces import ICacheStore, IResultCache, ITransport
from statsburner.reports.aggregator import ResponseAggregator
from statsburner.reports.parser import XmlReportParser
from statsburner.transport.http import HttpTransport, TransportConfig

SQLITE_CACHE_FILENAME = "statsburner.db"


class DIContainer:
    """Factory helpers that assemble a StatsClient with default wiring."""

    @staticmethod
    def create_client(
        feed_uri: str,
        *,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[ITransport] = None,
    ) -> StatsClient:
        if http_client is not None and transport is not None:
            raise ValueError("Provide either 'http_client' or 'transport', not both")

        cfg = config or ClientConfig.from_env()
        resolved_transport = transport or HttpTransport(
            http_client,
            TransportConfig(timeout=float(cfg.timeout_seconds)),
        )

        return StatsClient(
            feed_uri,
            cfg,
            transport=resolved_transport,
            parser=XmlReportParser(),
            resolver=DateRangeResolver(allow_duplicates=cfg.allow_duplicate_dates),
            aggregator=ResponseAggregator(),
            cache=DIContainer._build_cache(cfg),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_cache(config: ClientConfig) -> Optional[IResultCache]:
        if not config.cache_enabled:
            return None
        return TimedCache(
            DIContainer._build_store(config), default_ttl=config.cache_duration
        )

    @staticmethod
    def _build_store(config: ClientConfig) -> ICacheStore:
        path = Path(config.cache_path)
        if config.cache_backend == "sqlite":
            db_path = path if path.suffix else path / SQLITE_CACHE_FILENAME
            return SQLiteCacheStore(db_path)
        return FileCacheStore(path)
