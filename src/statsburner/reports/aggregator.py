"""Pure business-logic helpers for report aggregation."""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from statsburner.domain.exceptions import ReportError
from statsburner.domain.interfaces import IReportNode
from statsburner.domain.models import (
    AggregateResult,
    EntryRecord,
    FeedTotals,
    LinkRecord,
    LinkTotals,
    ReferrerRecord,
)

_LEADING_INT = re.compile(r"\s*[-+]?\d+")

_FEED_METRICS = ("circulation", "downloads", "reach", "hits")


class ResponseAggregator:
    """Derives per-day records, totals and averages from a report tree."""

    def aggregate(
        self, report: IReportNode, request_url: str, dates: Sequence[str]
    ) -> AggregateResult:
        feed = report.find("feed")
        entries = list(feed.findall("entry")) if feed is not None else []

        items: Dict[str, EntryRecord] = {}
        totals = dict.fromkeys(_FEED_METRICS, 0)
        for entry in entries:
            record = self._entry_record(entry)
            items[entry.get("date", "") or ""] = record
            for metric in _FEED_METRICS:
                totals[metric] += getattr(record, metric)

        # Avoid dividing by zero when the report has no entries.
        count = len(entries) or 1

        return AggregateResult(
            id=self._text(feed, "id"),
            uri=self._text(feed, "uri"),
            api=request_url,
            dates=tuple(dates),
            items=items,
            total=FeedTotals(**totals),
            average=FeedTotals(
                **{metric: round_half_up(value, count) for metric, value in totals.items()}
            ),
        )

    def empty(self, request_url: str, dates: Sequence[str]) -> AggregateResult:
        """Zero-valued result used when no report could be obtained."""

        return AggregateResult(api=request_url, dates=tuple(dates))

    @staticmethod
    def failure(report: IReportNode) -> Optional[ReportError]:
        """Return the report-level error when the report status is ``fail``."""

        if report.get("stat") != "fail":
            return None
        err = report.find("err")
        code = to_int(err.get("code")) if err is not None else None
        context = {"msg": err.get("msg")} if err is not None and err.get("msg") else None
        return ReportError(code, context=context)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _entry_record(self, entry: IReportNode) -> EntryRecord:
        metrics = {metric: to_int(entry.get(metric)) for metric in _FEED_METRICS}

        links = [self._link_record(link) for link in entry.findall("item")]
        if not links:
            return EntryRecord(**metrics)

        clicks = sum(link.clicks for link in links)
        views = sum(link.views for link in links)
        return EntryRecord(
            **metrics,
            total=LinkTotals(clicks=clicks, views=views),
            average=LinkTotals(
                clicks=round_half_up(clicks, len(links)),
                views=round_half_up(views, len(links)),
            ),
            links=tuple(links),
        )

    def _link_record(self, link: IReportNode) -> LinkRecord:
        referrers: List[ReferrerRecord] = [
            ReferrerRecord(
                url=self._text(referrer, "url"),
                views=to_int(referrer.get("itemviews")),
                clicks=to_int(referrer.get("clickthroughs")),
            )
            for referrer in link.findall("referrer")
        ]
        return LinkRecord(
            title=self._text(link, "title"),
            url=self._text(link, "url"),
            views=to_int(link.get("itemviews")),
            clicks=to_int(link.get("clickthroughs")),
            referrers=tuple(referrers) if referrers else None,
        )

    @staticmethod
    def _text(node: Optional[IReportNode], attribute: str) -> str:
        if node is None:
            return ""
        return node.get(attribute) or ""


def to_int(value: Optional[str]) -> int:
    """Integer cast that honors leading digits and treats anything else as 0."""

    if value is None:
        return 0
    match = _LEADING_INT.match(value)
    return int(match.group()) if match else 0


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded to nearest, halves away from zero."""

    quotient, remainder = divmod(abs(numerator), denominator)
    if remainder * 2 >= denominator:
        quotient += 1
    return quotient if numerator >= 0 else -quotient
