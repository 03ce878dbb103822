"""Domain-level interfaces defining contracts for statistics collaborators."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, Union

from .models import AggregateResult, CacheRecord, DateResolution, DateSpec


class IReportNode(Protocol):
    """A named markup node with attributes and child nodes.

    ``xml.etree.ElementTree.Element`` satisfies this contract.
    """

    tag: str

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return an attribute value or ``default``."""

    def find(self, path: str) -> Optional["IReportNode"]:
        """Return the first matching child node."""

    def findall(self, path: str) -> Iterable["IReportNode"]:
        """Return all matching child nodes in document order."""


class ITransport(Protocol):
    """Fetches the raw report body for a fully built URL."""

    def fetch(self, url: str) -> str:
        """Return the response text or raise ``TransportError``."""


class IReportParser(Protocol):
    """Parses a report body into a node tree."""

    def parse(self, text: str) -> IReportNode:
        """Return the root node or raise ``ReportParseError``."""


class IDateRangeResolver(Protocol):
    def resolve(
        self,
        ranges: Sequence[Union[DateSpec, str]] = (),
        *,
        allow_duplicates: Optional[bool] = None,
    ) -> DateResolution:
        """Return API ready date tokens for ``ranges``."""


class ICacheStore(Protocol):
    """Durable key-value storage for cache records."""

    def read(self, key: str) -> Optional[CacheRecord]:
        """Return the stored record or None when the key is unknown."""

    def write(self, key: str, record: CacheRecord) -> None:
        """Persist ``record`` under ``key``, replacing any previous one."""


class IResultCache(Protocol):
    def get(self, fingerprint: str) -> Optional[AggregateResult]:
        """Return a fresh cached result or None."""

    def put(
        self, fingerprint: str, result: AggregateResult, ttl: object = None
    ) -> AggregateResult:
        """Persist ``result`` until ``ttl`` and return it."""
