"""Domain value objects for feed statistics requests and reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DateType(str, Enum):
    """Unit used to step back from a reference date."""

    DAY = "day"
    MONTH = "month"
    YEAR = "year"

    @classmethod
    def _missing_(cls, value: object) -> Optional["DateType"]:
        if isinstance(value, str):
            lowered = value.strip().lower()
            for member in cls:
                if lowered in {member.value, member.value[0]}:
                    return member
        return None


class RawDateSpec(BaseModel):
    """A bare date (``2010-11-01``) or a pre-built span (``start,finish``)."""

    model_config = ConfigDict(frozen=True)

    token: str

    @property
    def is_span(self) -> bool:
        return "," in self.token


class ParametrizedDateSpec(BaseModel):
    """A reference date with an explicit unit and backward offset."""

    model_config = ConfigDict(frozen=True)

    date: str
    type: DateType = DateType.MONTH
    offset: int = Field(default=1, ge=0)

    @field_validator("date", mode="before")
    @classmethod
    def format_date(cls, value: Any) -> Any:
        if isinstance(value, date):
            return _date_text(value)
        return value

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return DateType(value)
        return value


DateSpec = Union[RawDateSpec, ParametrizedDateSpec]


@dataclass(frozen=True)
class DateResolution:
    """Resolved date tokens plus the errors of specs skipped as malformed."""

    tokens: Tuple[str, ...] = ()
    errors: Tuple[Exception, ...] = ()


class ReferrerRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = ""
    views: int = 0
    clicks: int = 0


class LinkRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = ""
    views: int = 0
    clicks: int = 0
    referrers: Optional[Tuple[ReferrerRecord, ...]] = None


class LinkTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    clicks: int = 0
    views: int = 0


class EntryRecord(BaseModel):
    """Statistics for a single reporting day."""

    model_config = ConfigDict(frozen=True)

    circulation: int = 0
    downloads: int = 0
    reach: int = 0
    hits: int = 0
    total: Optional[LinkTotals] = None
    average: Optional[LinkTotals] = None
    links: Optional[Tuple[LinkRecord, ...]] = None


class FeedTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    circulation: int = 0
    downloads: int = 0
    reach: int = 0
    hits: int = 0


class AggregateResult(BaseModel):
    """Aggregated statistics for one request, as returned and cached."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    uri: str = ""
    api: str
    dates: Tuple[str, ...] = ()
    items: Dict[str, EntryRecord] = Field(default_factory=dict)
    total: FeedTotals = Field(default_factory=FeedTotals)
    average: FeedTotals = Field(default_factory=FeedTotals)


class CacheRecord(BaseModel):
    """Persisted cache entry: absolute expiry plus serialized payload."""

    model_config = ConfigDict(frozen=True)

    expires_at: int
    payload: str


class ErrorKind(str, Enum):
    MALFORMED_DATE = "malformed_date"
    DUPLICATE_RANGE = "duplicate_range"
    TRANSPORT = "transport"
    REPORT = "report"
    CACHE = "cache"


class ErrorDetail(BaseModel):
    """Structured error surfaced to callers instead of being raised."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    code: Optional[int] = None


class StatsOutcome(BaseModel):
    """Result of a statistics request: the data, any errors, and provenance."""

    model_config = ConfigDict(frozen=True)

    result: Optional[AggregateResult] = None
    errors: Tuple[ErrorDetail, ...] = ()
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.result is not None and not self.errors

    def messages(self) -> Tuple[str, ...]:
        return tuple(error.message for error in self.errors)


def coerce_date_spec(value: Union[DateSpec, str, Mapping[str, Any]]) -> DateSpec:
    """Wrap plain strings and mappings into the matching spec variant."""

    if isinstance(value, (RawDateSpec, ParametrizedDateSpec)):
        return value
    if isinstance(value, str):
        return RawDateSpec(token=value)
    if isinstance(value, date):
        return RawDateSpec(token=_date_text(value))
    if isinstance(value, Mapping):
        return ParametrizedDateSpec(**value)
    raise TypeError(f"Unsupported date spec: {value!r}")


def _date_text(value: date) -> str:
    # Datetimes are dates too; drop the time part.
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
