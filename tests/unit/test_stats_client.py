import logging
from datetime import date
from typing import Dict, List, Optional

import pytest

from statsburner.cache.timed_cache import TimedCache, fingerprint
from statsburner.core.client import StatsClient
from statsburner.core.config import ClientConfig
from statsburner.dates.resolver import DateRangeResolver
from statsburner.domain.exceptions import CacheError, TransportError
from statsburner.domain.models import CacheRecord, ErrorKind, ParametrizedDateSpec
from statsburner.reports.parser import XmlReportParser

BASE_URL = "https://api.test/awareness/1.0"

OK_REPORT = """<rsp stat="ok">
  <feed id="abc123" uri="milesj">
    <entry date="2011-02-14" circulation="100" hits="10" downloads="1" reach="2" />
    <entry date="2011-02-15" circulation="200" hits="20" downloads="3" reach="4" />
  </feed>
</rsp>"""

FAIL_REPORT = '<rsp stat="fail"><err code="1" msg="Feed Not Found" /></rsp>'


class _StubTransport:
    def __init__(self, body: str = OK_REPORT, error: Optional[Exception] = None):
        self.body = body
        self.error = error
        self.urls: List[str] = []

    def fetch(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.body


class _MemoryStore:
    def __init__(self, fail_writes: bool = False):
        self.records: Dict[str, CacheRecord] = {}
        self.fail_writes = fail_writes

    def read(self, key: str) -> Optional[CacheRecord]:
        return self.records.get(key)

    def write(self, key: str, record: CacheRecord) -> None:
        if self.fail_writes:
            raise CacheError("disk full")
        self.records[key] = record


def _client(
    transport: _StubTransport,
    store: Optional[_MemoryStore] = None,
    *,
    cache_enabled: bool = True,
) -> StatsClient:
    config = ClientConfig(base_url=BASE_URL)
    cache = (
        TimedCache(store if store is not None else _MemoryStore(), clock=lambda: 1_000_000.0)
        if cache_enabled
        else None
    )
    return StatsClient(
        "milesj",
        config,
        transport=transport,
        parser=XmlReportParser(),
        resolver=DateRangeResolver(today=lambda: date(2011, 3, 15)),
        cache=cache,
    )


def test_build_api_url_joins_dates_without_escaping():
    client = _client(_StubTransport())

    url = client.build_api_url(
        "https://api.test/GetFeedData",
        {"dates": ["2010-10-01,2010-11-01", "2011-02-26"], "itemurl": None},
    )

    assert url == (
        "https://api.test/GetFeedData?uri=milesj&dates=2010-10-01,2010-11-01/2011-02-26"
    )


def test_build_api_url_includes_item_and_omits_empty_params():
    client = _client(_StubTransport())

    url = client.build_api_url(
        "https://api.test/GetItemData",
        {"dates": [], "itemurl": "http://example.com/post"},
    )

    assert url == "https://api.test/GetItemData?uri=milesj&itemurl=http://example.com/post"


def test_get_feed_data_defaults_to_past_month():
    transport = _StubTransport()
    client = _client(transport)

    outcome = client.get_feed_data()

    assert outcome.ok
    assert transport.urls == [
        f"{BASE_URL}/GetFeedData?uri=milesj&dates=2011-02-15,2011-03-15"
    ]
    assert outcome.result.dates == ("2011-02-15,2011-03-15",)
    assert outcome.result.total.circulation == 300
    assert outcome.result.average.circulation == 150
    assert list(outcome.result.items) == ["2011-02-14", "2011-02-15"]


def test_item_and_resyndication_endpoints():
    transport = _StubTransport()
    client = _client(transport, cache_enabled=False)

    client.get_item_data(["2011-01-01"], item="http://example.com/post")
    client.get_resyndication_data([ParametrizedDateSpec(date="2011-01-01", offset=0)])

    assert transport.urls == [
        f"{BASE_URL}/GetItemData?uri=milesj&dates=2010-12-01,2011-01-01"
        "&itemurl=http://example.com/post",
        f"{BASE_URL}/GetResyndicationData?uri=milesj&dates=2011-01-01",
    ]


def test_second_request_is_served_from_cache():
    transport = _StubTransport()
    store = _MemoryStore()
    client = _client(transport, store)

    first = client.get_feed_data()
    second = client.get_feed_data()

    assert len(transport.urls) == 1
    assert not first.from_cache
    assert second.from_cache
    assert second.result == first.result
    assert fingerprint(transport.urls[0]) in store.records


def test_failed_report_is_returned_but_not_cached(caplog):
    transport = _StubTransport(body=FAIL_REPORT)
    store = _MemoryStore()
    client = _client(transport, store)

    with caplog.at_level(logging.WARNING):
        outcome = client.get_feed_data()
    client.get_feed_data()

    assert outcome.result is not None
    assert outcome.result.total.circulation == 0
    assert outcome.errors[0].kind is ErrorKind.REPORT
    assert outcome.errors[0].code == 1
    assert outcome.messages() == ("Feed not found.",)
    assert store.records == {}
    assert len(transport.urls) == 2
    assert "Feed not found." in caplog.text


def test_transport_error_yields_zero_result():
    transport = _StubTransport(error=TransportError("connection refused"))
    store = _MemoryStore()
    client = _client(transport, store)

    outcome = client.get_feed_data()

    assert outcome.result is not None
    assert outcome.result.total.hits == 0
    assert outcome.result.dates == ("2011-02-15,2011-03-15",)
    assert outcome.errors[0].kind is ErrorKind.TRANSPORT
    assert outcome.messages() == ("connection refused",)
    assert store.records == {}


def test_malformed_body_is_reported():
    client = _client(_StubTransport(body="<html>"))

    outcome = client.get_feed_data()

    assert outcome.result.items == {}
    assert outcome.errors[0].kind is ErrorKind.REPORT
    assert outcome.messages() == ("Malformed report body",)


def test_duplicate_ranges_abort_before_network():
    transport = _StubTransport()
    client = _client(transport)

    outcome = client.get_feed_data(["2010-06-01,2010-08-01", "2010-07-01,2010-07-15"])

    assert outcome.result is None
    assert outcome.errors[0].kind is ErrorKind.DUPLICATE_RANGE
    assert transport.urls == []


def test_malformed_dates_are_reported_alongside_result():
    transport = _StubTransport()
    client = _client(transport)

    outcome = client.get_feed_data(["2011-02-30", "2011-01-01"])

    assert outcome.result is not None
    assert not outcome.ok
    assert [error.kind for error in outcome.errors] == [ErrorKind.MALFORMED_DATE]
    assert transport.urls[0].endswith("dates=2010-12-01,2011-01-01")


@pytest.mark.parametrize(
    "spec",
    [
        {"date": "2011-01-01", "type": "week"},
        {"date": "2011-01-01", "offset": -1},
        {"type": "m"},
    ],
)
def test_invalid_mapping_specs_are_reported_alongside_result(spec):
    transport = _StubTransport()
    client = _client(transport, cache_enabled=False)

    outcome = client.get_feed_data(["2010-01-01", spec])

    assert outcome.result is not None
    assert [error.kind for error in outcome.errors] == [ErrorKind.MALFORMED_DATE]
    assert transport.urls == [
        f"{BASE_URL}/GetFeedData?uri=milesj&dates=2009-12-01,2010-01-01"
    ]


def test_cache_write_failure_still_returns_result():
    client = _client(_StubTransport(), _MemoryStore(fail_writes=True))

    outcome = client.get_feed_data()

    assert outcome.result.total.circulation == 300
    assert [error.kind for error in outcome.errors] == [ErrorKind.CACHE]


def test_disabled_cache_always_fetches():
    transport = _StubTransport()
    client = _client(transport, cache_enabled=False)

    client.get_feed_data()
    client.get_feed_data()

    assert len(transport.urls) == 2


def test_client_requires_feed_uri():
    with pytest.raises(ValueError):
        StatsClient(
            "",
            ClientConfig(),
            transport=_StubTransport(),
            parser=XmlReportParser(),
            resolver=DateRangeResolver(),
        )
