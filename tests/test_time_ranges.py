"""Tests for time window helpers."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from beer_tracker.domain.errors import ValidationError
from beer_tracker.services.time_ranges import (
    BACRange,
    ConsumptionRange,
    calendar_days,
    ensure_aware,
    format_time_label,
    resolve_range,
    sample_times,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("preset", "lookback"),
    [
        (BACRange.SIX_HOURS, timedelta(hours=6)),
        (BACRange.TWELVE_HOURS, timedelta(hours=12)),
        (BACRange.DAY, timedelta(hours=24)),
        (ConsumptionRange.DAY, timedelta(hours=24)),
        (ConsumptionRange.WEEK, timedelta(days=7)),
        (ConsumptionRange.MONTH, timedelta(days=30)),
    ],
)
def test_resolve_range_presets(preset, lookback) -> None:
    start, end = resolve_range(preset, NOW)

    assert end == NOW
    assert start == NOW - lookback


def test_resolve_all_time_goes_back_ten_years() -> None:
    start, _ = resolve_range(ConsumptionRange.ALL, NOW)

    assert start == datetime(2014, 3, 10, 12, 0, tzinfo=UTC)


def test_resolve_all_time_from_leap_day() -> None:
    leap_day = datetime(2024, 2, 29, 8, 0, tzinfo=UTC)

    start, _ = resolve_range(ConsumptionRange.ALL, leap_day)

    assert start == datetime(2014, 2, 28, 8, 0, tzinfo=UTC)


def test_sample_times_include_both_ends_when_aligned() -> None:
    times = sample_times(NOW, NOW + timedelta(hours=1), 15)

    assert len(times) == 5
    assert times[0] == NOW
    assert times[-1] == NOW + timedelta(hours=1)


def test_sample_times_for_empty_window() -> None:
    assert sample_times(NOW, NOW, 15) == [NOW]


def test_sample_times_reject_bad_input() -> None:
    with pytest.raises(ValidationError):
        sample_times(NOW, NOW + timedelta(hours=1), -5)
    with pytest.raises(ValidationError):
        sample_times(NOW, NOW - timedelta(hours=1), 15)


def test_calendar_days_are_inclusive() -> None:
    days = list(calendar_days(NOW - timedelta(days=2), NOW))

    assert days == [date(2024, 3, 8), date(2024, 3, 9), date(2024, 3, 10)]


def test_calendar_days_follow_local_timezone() -> None:
    tokyo = ZoneInfo("Asia/Tokyo")
    late_utc = datetime(2024, 3, 10, 20, 0, tzinfo=UTC)

    days = list(calendar_days(late_utc, late_utc, tokyo))

    assert days == [date(2024, 3, 11)]


def test_format_time_label_uses_24h_clock() -> None:
    assert format_time_label(datetime(2024, 3, 10, 21, 5, tzinfo=UTC)) == "21:05"
    assert (
        format_time_label(
            datetime(2024, 3, 10, 21, 5, tzinfo=UTC), ZoneInfo("Europe/Berlin")
        )
        == "22:05"
    )


def test_ensure_aware_normalizes_to_utc() -> None:
    berlin = datetime(2024, 3, 10, 13, 0, tzinfo=ZoneInfo("Europe/Berlin"))

    assert ensure_aware(berlin) == NOW
    assert ensure_aware(berlin).tzinfo is UTC
    with pytest.raises(ValidationError, match="occurred_at"):
        ensure_aware(datetime(2024, 3, 10, 12, 0), "occurred_at")
