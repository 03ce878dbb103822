"""Statistics client facade coordinating dates, transport, aggregation and cache."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from statsburner.cache.timed_cache import fingerprint
from statsburner.core.config import ClientConfig
from statsburner.domain.exceptions import (
    CacheError,
    DuplicateRangeError,
    ReportParseError,
    StatsburnerError,
    TransportError,
)
from statsburner.domain.interfaces import (
    IDateRangeResolver,
    IReportParser,
    IResultCache,
    ITransport,
)
from statsburner.domain.models import (
    AggregateResult,
    DateSpec,
    ErrorDetail,
    StatsOutcome,
)
from statsburner.reports.aggregator import ResponseAggregator

FEED_DATA = "GetFeedData"
ITEM_DATA = "GetItemData"
RESYNDICATION_DATA = "GetResyndicationData"

Ranges = Sequence[Union[DateSpec, str]]


class StatsClient:
    """High-level API for fetching aggregated statistics for one feed."""

    def __init__(
        self,
        feed_uri: str,
        config: ClientConfig,
        *,
        transport: ITransport,
        parser: IReportParser,
        resolver: IDateRangeResolver,
        aggregator: Optional[ResponseAggregator] = None,
        cache: Optional[IResultCache] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not feed_uri:
            raise ValueError("feed_uri must be provided")
        self._feed_uri = feed_uri
        self._config = config
        self._transport = transport
        self._parser = parser
        self._resolver = resolver
        self._aggregator = aggregator or ResponseAggregator()
        self._cache = cache
        self.logger = logger or logging.getLogger(__name__)

    @property
    def feed_uri(self) -> str:
        return self._feed_uri

    def get_feed_data(self, ranges: Ranges = ()) -> StatsOutcome:
        """Feed circulation, hits, downloads and reach."""

        return self.request(self._endpoint(FEED_DATA), ranges)

    def get_item_data(
        self, ranges: Ranges = (), item: Optional[str] = None
    ) -> StatsOutcome:
        """Feed data plus per-item views and clickthroughs."""

        return self.request(self._endpoint(ITEM_DATA), ranges, item)

    def get_resyndication_data(
        self, ranges: Ranges = (), item: Optional[str] = None
    ) -> StatsOutcome:
        """Item data plus the referrers of every item."""

        return self.request(self._endpoint(RESYNDICATION_DATA), ranges, item)

    def request(
        self, url: str, ranges: Ranges = (), item: Optional[str] = None
    ) -> StatsOutcome:
        """Resolve dates, then serve from cache or fetch and aggregate."""

        errors: List[ErrorDetail] = []
        try:
            resolution = self._resolver.resolve(ranges)
        except DuplicateRangeError as exc:
            self._report(exc, url=url)
            return StatsOutcome(errors=(exc.to_detail(),))

        for error in resolution.errors:
            errors.append(self._report(error, url=url))

        dates = resolution.tokens
        api_url = self.build_api_url(url, {"dates": dates, "itemurl": item})
        key = fingerprint(api_url)
        self.logger.info("stats_request", extra={"url": api_url, "key": key})

        if self._cache is not None:
            try:
                cached = self._cache.get(key)
            except CacheError as exc:
                errors.append(self._report(exc, url=api_url))
                cached = None
            if cached is not None:
                return StatsOutcome(result=cached, errors=tuple(errors), from_cache=True)

        try:
            body = self._transport.fetch(api_url)
            report = self._parser.parse(body)
        except (TransportError, ReportParseError) as exc:
            errors.append(self._report(exc, url=api_url))
            return StatsOutcome(
                result=self._aggregator.empty(api_url, dates), errors=tuple(errors)
            )

        result = self._aggregator.aggregate(report, api_url, dates)
        failure = self._aggregator.failure(report)
        if failure is not None:
            errors.append(self._report(failure, url=api_url))
            return StatsOutcome(result=result, errors=tuple(errors))

        result = self._store(key, result, errors)
        return StatsOutcome(result=result, errors=tuple(errors))

    def build_api_url(self, url: str, query: Mapping[str, Any]) -> str:
        """Append query params without escaping; empty values are omitted."""

        params = {"uri": self._feed_uri, **query}
        dates = params.get("dates")
        if dates and not isinstance(dates, str):
            params["dates"] = "/".join(dates)

        pairs = [f"{name}={value}" for name, value in params.items() if value]
        return f"{url}?{'&'.join(pairs)}"

    def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "StatsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _endpoint(self, name: str) -> str:
        return f"{self._config.base_url.rstrip('/')}/{name}"

    def _store(
        self, key: str, result: AggregateResult, errors: List[ErrorDetail]
    ) -> AggregateResult:
        if self._cache is None:
            return result
        try:
            return self._cache.put(key, result, self._config.cache_duration)
        except CacheError as exc:
            errors.append(self._report(exc, url=result.api))
            return result

    def _report(self, error: StatsburnerError, **extra: Any) -> ErrorDetail:
        detail = error.to_detail()
        self.logger.warning(
            "%s", detail.message, extra={"kind": detail.kind.value, **extra}
        )
        return detail
