from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import List, Union

__all__ = [
    "parse_date",
    "format_date",
    "add_days",
    "days_between",
    "date_window",
    "ISO_DATE_PATTERN",
]

DateLike = Union[str, date, datetime]

# Canonical output: YYYY-MM-DD
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Sanity window (inclusive lower bound, exclusive upper bound)
_MIN_DATE = date(1900, 1, 1)
_MAX_DATE = date(2100, 1, 1)


def _normalize_candidate(s: str) -> str:
    """
    Normalize common date quirks without changing semantics.
    Handles:
      - 'YYYY/MM/DD' -> 'YYYY-MM-DD'
      - single-digit month/day ('2024-5-2') -> zero padded
      - trailing time component ('T00:00:00Z', ' 12:30') -> dropped
    """
    s = s.strip()
    s = re.sub(r"^(\d{4})/(\d{1,2})/(\d{1,2})", r"\1-\2-\3", s)

    m = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T\s].*)?$", s)
    if m:
        return f"{m.group(1)}-{int(m.group(2)):02d}-{int(m.group(3)):02d}"
    return s


def parse_date(value: DateLike) -> date:
    """
    Parse a calendar date tolerantly.
    Accepts date/datetime objects, ISO dates, slash dates and ISO datetimes
    (the time part is ignored, no timezone shifting).

    Raises ValueError with one of: "missing", "unparseable", "out_of_range".
    """
    if value is None:
        raise ValueError("missing")

    if isinstance(value, datetime):
        d = value.date()
    elif isinstance(value, date):
        d = value
    else:
        raw = str(value).strip()
        if not raw:
            raise ValueError("missing")
        try:
            d = date.fromisoformat(_normalize_candidate(raw))
        except ValueError:
            raise ValueError("unparseable")

    if not (_MIN_DATE <= d < _MAX_DATE):
        raise ValueError("out_of_range")
    return d


def format_date(value: DateLike) -> str:
    """Return the canonical YYYY-MM-DD string for a date-like value."""
    return parse_date(value).isoformat()


def add_days(value: DateLike, days: int) -> date:
    return parse_date(value) + timedelta(days=days)


def days_between(start: DateLike, end: DateLike) -> int:
    """Signed whole-day difference ``end - start``."""
    return (parse_date(end) - parse_date(start)).days


def date_window(anchor: DateLike, radius: int) -> List[date]:
    """
    Ordered calendar dates from ``anchor - radius`` to ``anchor + radius``
    inclusive (``2 * radius + 1`` entries).
    """
    if radius < 0:
        raise ValueError("radius must be >= 0")
    center = parse_date(anchor)
    return [center + timedelta(days=off) for off in range(-radius, radius + 1)]
