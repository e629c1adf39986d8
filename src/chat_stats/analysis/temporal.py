"""Convert Messages timestamps into local calendar dates and day buckets.

chat.db stores ``message.date`` as nanoseconds since 2001-01-01 00:00:00 UTC
(older snapshots used whole seconds). Every year/day bucket in the package is
derived from :func:`to_calendar_date`, so SQL windows built with
:func:`year_bounds` select exactly the rows Python assigns to that year.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from dateutil import tz as dateutil_tz

# Seconds from 1970-01-01 to 2001-01-01 (Core Data epoch).
APPLE_EPOCH_OFFSET = 978307200
NANOSECONDS_PER_SECOND = 1_000_000_000
SECONDS_PER_DAY = 86400

NANOSECONDS = "nanoseconds"
SECONDS = "seconds"
AUTO = "auto"
TIMESTAMP_UNITS = (NANOSECONDS, SECONDS, AUTO)

# Largest plausible value of a seconds-based timestamp.
_NANOSECOND_THRESHOLD = 1e12


@dataclass(frozen=True)
class CalendarDate:
    """Local-time year and day bucket of a message timestamp."""

    year: int
    date: date


def local_timezone() -> tzinfo:
    return dateutil_tz.tzlocal()


def detect_unit(max_raw: int | float | None) -> str:
    """Guess the timestamp unit from the largest absolute ``message.date``."""
    if max_raw and abs(max_raw) > _NANOSECOND_THRESHOLD:
        return NANOSECONDS
    if max_raw:
        return SECONDS
    return NANOSECONDS


def _scale(unit: str) -> int:
    if unit == SECONDS:
        return 1
    return NANOSECONDS_PER_SECOND


def to_unix_seconds(raw: int | float, unit: str = NANOSECONDS) -> int:
    """Whole Unix seconds for a raw store timestamp (floor division)."""
    return int(raw) // _scale(unit) + APPLE_EPOCH_OFFSET


def to_datetime(
    raw: int | float | None,
    tz: tzinfo | None = None,
    unit: str = NANOSECONDS,
) -> datetime | None:
    if raw is None:
        return None
    unix_ts = to_unix_seconds(raw, unit)
    try:
        return datetime.fromtimestamp(unix_ts, tz=tz or local_timezone())
    except (OverflowError, OSError, ValueError):
        return None


def to_calendar_date(
    raw: int | float | None,
    tz: tzinfo | None = None,
    unit: str = NANOSECONDS,
) -> CalendarDate | None:
    """Year and day of ``raw`` in ``tz``; None for a missing timestamp."""
    dt = to_datetime(raw, tz, unit)
    if dt is None:
        return None
    return CalendarDate(year=dt.year, date=dt.date())


def from_datetime(dt: datetime, unit: str = NANOSECONDS) -> int:
    """Raw store timestamp for the start of the second containing ``dt``."""
    unix_seconds = int(dt.timestamp()) - APPLE_EPOCH_OFFSET
    return unix_seconds * _scale(unit)


def year_bounds(
    year: int,
    tz: tzinfo | None = None,
    unit: str = NANOSECONDS,
) -> tuple[int, int]:
    """Half-open raw ``[lo, hi)`` window covering local calendar ``year``."""
    zone = tz or local_timezone()
    start = datetime(year, 1, 1, tzinfo=zone)
    end = datetime(year + 1, 1, 1, tzinfo=zone)
    return from_datetime(start, unit), from_datetime(end, unit)


def day_delta(a: date, b: date) -> int:
    """Whole days from ``a`` to ``b``."""
    return (b - a).days


def longest_consecutive_run(dates: Iterable[date]) -> int:
    """Length of the longest run of consecutive days in an ascending sequence."""
    longest = 0
    current = 0
    previous: date | None = None
    for current_date in dates:
        if previous is not None and day_delta(previous, current_date) == 1:
            current += 1
        else:
            longest = max(longest, current)
            current = 1
        previous = current_date
    return max(longest, current)


def _round_half_up(value: float, precision: int) -> float:
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def average_per_day(total: int, span_days: float, precision: int = 1) -> float | int:
    """``total / span_days`` rounded half-up; 0 for an empty or negative span.

    ``precision=1`` is used for year-scoped and per-entity stats,
    ``precision=0`` for the app-wide average (returned as an int).
    """
    if span_days <= 0:
        return 0
    value = _round_half_up(total / span_days, precision)
    if precision == 0:
        return int(value)
    return value


def year_span_days(year: int) -> int:
    """Days between Jan 1 and Dec 31 of ``year``."""
    return day_delta(date(year, 1, 1), date(year, 12, 31))


def days_since(
    raw: int | float | None,
    now: float | None = None,
    unit: str = NANOSECONDS,
) -> float:
    """Fractional days from a raw timestamp to ``now`` (Unix seconds)."""
    if raw is None:
        return 0.0
    current = time.time() if now is None else now
    return (current - to_unix_seconds(raw, unit)) / SECONDS_PER_DAY


# English regardless of LC_TIME.
_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def format_short_date(
    raw: int | float | None,
    tz: tzinfo | None = None,
    unit: str = NANOSECONDS,
) -> str:
    """``Jan 5, 2023`` style label, or ``Unknown`` without a timestamp."""
    dt = to_datetime(raw, tz, unit) if raw else None
    if dt is None:
        return "Unknown"
    return f"{_MONTH_ABBREVIATIONS[dt.month - 1]} {dt.day}, {dt.year}"
