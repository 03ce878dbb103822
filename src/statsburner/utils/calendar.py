"""Calendar arithmetic with ``mktime``-style rollover."""

from __future__ import annotations

import re
from datetime import date, timedelta

from statsburner.domain.models import DateType

DATE_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>0?[1-9]|1[0-2])-(?P<day>0?[1-9]|[1-2]\d|3[0-1])$"
)


def parse_date(text: str) -> date | None:
    """Return the calendar date for ``text`` or None when it is not a real date."""

    match = DATE_PATTERN.match(text.strip())
    if match is None:
        return None
    try:
        return date(int(match["year"]), int(match["month"]), int(match["day"]))
    except ValueError:
        return None


def normalize(year: int, month: int, day: int) -> date:
    """Build a date, rolling month and day overflow into the next unit.

    ``normalize(2011, 2, 31)`` is 2011-03-03 and ``normalize(2011, -2, 1)``
    is 2010-10-01.
    """

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return date(year, month, 1) + timedelta(days=day - 1)


def shift(value: date, unit: DateType, amount: int) -> date:
    """Move ``value`` by ``amount`` units; negative amounts step backwards."""

    if unit is DateType.DAY:
        return value + timedelta(days=amount)
    if unit is DateType.YEAR:
        return normalize(value.year + amount, value.month, value.day)
    return normalize(value.year, value.month + amount, value.day)


def format_date(value: date) -> str:
    return value.isoformat()
