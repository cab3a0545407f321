"""Time window helpers shared by the BAC and consumption charts."""

import math
from collections.abc import Iterable, Iterator
from datetime import UTC, date, datetime, timedelta, tzinfo
from enum import Enum

from beer_tracker.domain.drinks import MAX_ALCOHOL_PERCENTAGE, DrinkEvent
from beer_tracker.domain.errors import ValidationError

ALL_TIME_YEARS = 10


class BACRange(str, Enum):
    """Look-back windows offered for BAC charts."""

    SIX_HOURS = "6h"
    TWELVE_HOURS = "12h"
    DAY = "24h"


class ConsumptionRange(str, Enum):
    """Look-back windows offered for consumption charts."""

    DAY = "24h"
    WEEK = "7d"
    MONTH = "30d"
    ALL = "all"


_LOOKBACKS: dict[str, timedelta] = {
    "6h": timedelta(hours=6),
    "12h": timedelta(hours=12),
    "24h": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def ensure_aware(value: datetime, name: str = "timestamp") -> datetime:
    """Reject naive datetimes and normalize to UTC."""
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValidationError(f"{name} must be timezone-aware")
    return value.astimezone(UTC)


def validate_window(window_start: datetime, window_end: datetime) -> None:
    """Raise if the window is inverted."""
    if window_start > window_end:
        raise ValidationError("window_start must not be after window_end")


def validate_events(events: Iterable[DrinkEvent]) -> list[DrinkEvent]:
    """Check entries before they feed a chart; bad rows raise, never clamp."""
    checked = []
    for event in events:
        if event.volume_ml < 0:
            raise ValidationError(f"Entry {event.id} has a negative volume")
        if not 0 <= event.alcohol_percentage <= MAX_ALCOHOL_PERCENTAGE:
            raise ValidationError(f"Entry {event.id} has an invalid ABV")
        ensure_aware(event.occurred_at, "occurred_at")
        checked.append(event)
    return checked


def resolve_range(
    preset: BACRange | ConsumptionRange, now: datetime | None = None
) -> tuple[datetime, datetime]:
    """Return the (start, end) window for a preset ending at now."""
    end = ensure_aware(now, "now") if now else datetime.now(tz=UTC)
    if preset.value == ConsumptionRange.ALL.value:
        return _years_back(end, ALL_TIME_YEARS), end
    return end - _LOOKBACKS[preset.value], end


def sample_times(
    window_start: datetime, window_end: datetime, interval_minutes: int
) -> list[datetime]:
    """Return sample instants from window_start every interval, up to window_end.

    The last sample is at floor(window / interval) steps, so it can fall short
    of window_end when the window is not a whole number of intervals.
    """
    if interval_minutes <= 0:
        raise ValidationError("interval_minutes must be positive")
    validate_window(window_start, window_end)
    total_minutes = (window_end - window_start).total_seconds() / 60
    steps = math.floor(total_minutes / interval_minutes)
    return [
        window_start + timedelta(minutes=step * interval_minutes)
        for step in range(steps + 1)
    ]


def calendar_days(
    window_start: datetime, window_end: datetime, tz: tzinfo = UTC
) -> Iterator[date]:
    """Yield every calendar day touched by the window, inclusive."""
    validate_window(window_start, window_end)
    day = window_start.astimezone(tz).date()
    last = window_end.astimezone(tz).date()
    while day <= last:
        yield day
        day += timedelta(days=1)


def format_time_label(instant: datetime, tz: tzinfo = UTC) -> str:
    """Format an instant as a 24h HH:MM chart label."""
    return instant.astimezone(tz).strftime("%H:%M")


def _years_back(value: datetime, years: int) -> datetime:
    try:
        return value.replace(year=value.year - years)
    except ValueError:
        # Feb 29 has no counterpart in the target year
        return value.replace(year=value.year - years, day=28)
