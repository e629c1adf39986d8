"""Tests for timestamp conversion, streaks and averages."""

from datetime import date, datetime

import pytest
from dateutil import tz

from chat_stats.analysis.temporal import (
    APPLE_EPOCH_OFFSET,
    NANOSECONDS,
    SECONDS,
    average_per_day,
    days_since,
    detect_unit,
    format_short_date,
    from_datetime,
    longest_consecutive_run,
    to_calendar_date,
    to_unix_seconds,
    year_bounds,
    year_span_days,
)

UTC = tz.UTC


def test_to_unix_seconds_nanoseconds():
    assert to_unix_seconds(0) == APPLE_EPOCH_OFFSET
    assert to_unix_seconds(5 * 10**9 + 999) == APPLE_EPOCH_OFFSET + 5


def test_to_unix_seconds_seconds_unit():
    assert to_unix_seconds(60, SECONDS) == APPLE_EPOCH_OFFSET + 60


def test_detect_unit():
    assert detect_unit(700_000_000 * 10**9) == NANOSECONDS
    assert detect_unit(700_000_000) == SECONDS
    assert detect_unit(None) == NANOSECONDS


def test_calendar_date_roundtrip_from_datetime():
    dt = datetime(2023, 6, 1, 12, 30, tzinfo=UTC)
    cal = to_calendar_date(from_datetime(dt), UTC)
    assert cal.year == 2023
    assert cal.date == date(2023, 6, 1)


def test_calendar_date_uses_timezone():
    # 03:00 UTC on Jan 1 is still Dec 31 in New York.
    raw = from_datetime(datetime(2023, 1, 1, 3, tzinfo=UTC))
    cal = to_calendar_date(raw, tz.gettz("America/New_York"))
    assert cal.year == 2022
    assert cal.date == date(2022, 12, 31)


def test_calendar_date_none():
    assert to_calendar_date(None, UTC) is None


def test_year_bounds_match_calendar_dates():
    lo, hi = year_bounds(2023, UTC)
    assert to_calendar_date(lo, UTC).date == date(2023, 1, 1)
    assert to_calendar_date(hi - 1, UTC).date == date(2023, 12, 31)
    assert to_calendar_date(hi, UTC).year == 2024


def test_longest_run_empty_and_single():
    assert longest_consecutive_run([]) == 0
    assert longest_consecutive_run([date(2023, 1, 1)]) == 1


def test_longest_run_consecutive():
    dates = [date(2023, 1, 1), date(2023, 1, 2), date(2023, 1, 3)]
    assert longest_consecutive_run(dates) == 3


def test_longest_run_gap():
    assert longest_consecutive_run([date(2023, 1, 1), date(2023, 1, 3)]) == 1


def test_longest_run_picks_longest_segment():
    dates = [
        date(2023, 1, 1), date(2023, 1, 2),
        date(2023, 2, 1), date(2023, 2, 2), date(2023, 2, 3),
        date(2023, 3, 1),
    ]
    assert longest_consecutive_run(dates) == 3


def test_average_per_day_zero_span():
    assert average_per_day(100, 0) == 0
    assert average_per_day(100, -3) == 0


def test_average_per_day_rounding():
    assert average_per_day(10, 4) == 2.5
    assert average_per_day(1, 3) == 0.3
    assert average_per_day(5, 2, precision=0) == 3
    assert isinstance(average_per_day(5, 2, precision=0), int)


def test_average_per_day_rounds_exact_binary_value():
    # 3 / 20 is stored just below 0.15
    assert average_per_day(3, 20) == 0.1
    assert average_per_day(7, 20) == 0.3


def test_year_span_days():
    assert year_span_days(2023) == 364
    assert year_span_days(2024) == 365


def test_days_since():
    raw = from_datetime(datetime(2023, 1, 1, tzinfo=UTC))
    now = datetime(2023, 1, 11, tzinfo=UTC).timestamp()
    assert days_since(raw, now) == pytest.approx(10.0)
    assert days_since(None, now) == 0.0


def test_format_short_date():
    raw = from_datetime(datetime(2023, 1, 5, 15, tzinfo=UTC))
    assert format_short_date(raw, UTC) == "Jan 5, 2023"
    assert format_short_date(None, UTC) == "Unknown"


def test_format_short_date_uses_english_months():
    labels = [
        format_short_date(from_datetime(datetime(2023, month, 1, 12, tzinfo=UTC)), UTC)
        for month in range(1, 13)
    ]
    assert [label.split()[0] for label in labels] == [
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    ]
    assert labels[11] == "Dec 1, 2023"
