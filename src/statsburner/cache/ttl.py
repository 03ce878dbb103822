"""Cache duration parsing."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Union

from statsburner.domain.exceptions import InvalidTTLError
from statsburner.domain.models import DateType
from statsburner.utils import calendar

TTL = Union[str, int, float, timedelta]

_TERM_PATTERN = re.compile(r"([+-]?\s*\d+)\s*([a-z]+)")

_SECONDS = {
    "sec": 1,
    "second": 1,
    "min": 60,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
    "week": 604800,
}

_CALENDAR_UNITS = {"month": DateType.MONTH, "year": DateType.YEAR}


def _is_numeric(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def resolve_expiry(ttl: TTL, now: float) -> int:
    """Return the absolute expiry, in epoch seconds, described by ``ttl``.

    Numbers (and numeric strings) are taken as absolute epoch seconds.
    Strings such as ``"+1 day"`` or ``"+1 week +2 hours"`` are relative to
    ``now``. The result must lie in the future.
    """

    if isinstance(ttl, timedelta):
        expiry = now + ttl.total_seconds()
    elif isinstance(ttl, (int, float)) and not isinstance(ttl, bool):
        expiry = float(ttl)
    elif isinstance(ttl, str) and _is_numeric(ttl.strip()):
        expiry = float(ttl.strip())
    elif isinstance(ttl, str):
        expiry = _apply_relative(ttl, now)
    else:
        raise InvalidTTLError(f"Unsupported cache duration {ttl!r}")

    if expiry <= now:
        raise InvalidTTLError(context={"ttl": ttl, "expiry": int(expiry)})
    return int(expiry)


def _apply_relative(text: str, now: float) -> float:
    remainder = _TERM_PATTERN.sub("", text.lower()).strip()
    terms = _TERM_PATTERN.findall(text.lower())
    if not terms or remainder:
        raise InvalidTTLError(f"Unsupported cache duration {text!r}")

    moment = datetime.fromtimestamp(now, tz=timezone.utc)
    for raw_amount, raw_unit in terms:
        amount = int(raw_amount.replace(" ", ""))
        unit = raw_unit[:-1] if raw_unit.endswith("s") and raw_unit != "s" else raw_unit
        if unit in _SECONDS:
            moment += timedelta(seconds=amount * _SECONDS[unit])
        elif unit in _CALENDAR_UNITS:
            shifted = calendar.shift(moment.date(), _CALENDAR_UNITS[unit], amount)
            moment = datetime.combine(shifted, moment.timetz())
        else:
            raise InvalidTTLError(f"Unsupported cache duration unit '{raw_unit}'")
    return moment.timestamp()
