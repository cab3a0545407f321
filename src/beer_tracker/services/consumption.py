"""Consumption aggregation for charts and profiles."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from uuid import UUID

from beer_tracker.domain.consumption import (
    CumulativeConsumptionRow,
    DailyConsumptionRow,
    DrinkerProfile,
    LeaderboardRow,
)
from beer_tracker.domain.drinks import DrinkEvent
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.cache import EntryCache
from beer_tracker.services.leaderboard import rank_users
from beer_tracker.services.time_ranges import (
    ConsumptionRange,
    calendar_days,
    ensure_aware,
    resolve_range,
    validate_events,
)
from beer_tracker.services.users import UserService

UNKNOWN_BEER_TYPE = "Unknown"
NO_BEER_TYPE = "N/A"


def total_consumption(
    events: Iterable[DrinkEvent], user_id: UUID | None = None
) -> float:
    """Total liters for one user, or for everyone when user_id is None."""
    return (
        sum(
            event.volume_ml
            for event in validate_events(events)
            if user_id is None or event.user_id == user_id
        )
        / 1000
    )


def consumption_by_day(  # noqa: PLR0913
    events: Iterable[DrinkEvent],
    window_start: datetime,
    window_end: datetime,
    users: list[UserRecord],
    user_id: UUID | None = None,
    tz: tzinfo = UTC,
) -> list[DailyConsumptionRow]:
    """Liters per user per calendar day, with a row for every day in the window."""
    start = ensure_aware(window_start, "window_start")
    end = ensure_aware(window_end, "window_end")
    checked = validate_events(events)
    tracked = [user for user in users if user_id is None or user.id == user_id]
    names = {user.id: user.name for user in tracked}
    days: dict[date, dict[str, float]] = {
        day: {user.name: 0.0 for user in tracked}
        for day in calendar_days(start, end, tz)
    }

    extra_names: list[str] = []
    for event in checked:
        if user_id is not None and event.user_id != user_id:
            continue
        if not start <= event.occurred_at <= end:
            continue
        bucket = days.get(event.occurred_at.astimezone(tz).date())
        if bucket is None:
            continue
        name = names.get(event.user_id, event.user_name)
        if event.user_id not in names and name not in extra_names:
            extra_names.append(name)
        bucket[name] = bucket.get(name, 0.0) + event.liters

    # drinkers missing from the roster still get a dense axis
    for bucket in days.values():
        for name in extra_names:
            bucket.setdefault(name, 0.0)

    return [
        DailyConsumptionRow(day=day, liters_by_user=liters)
        for day, liters in sorted(days.items())
    ]


def cumulative_consumption(
    events: Iterable[DrinkEvent],
    users: list[UserRecord] | None = None,
    user_id: UUID | None = None,
) -> list[CumulativeConsumptionRow]:
    """Running liters per user, one row per drink in time order.

    Drinks sharing a timestamp keep their input order.
    """
    roster = [user for user in users or [] if user_id is None or user.id == user_id]
    names = {user.id: user.name for user in roster}
    totals = {user.name: 0.0 for user in roster}
    rows = []
    for event in sorted(validate_events(events), key=lambda item: item.occurred_at):
        if user_id is not None and event.user_id != user_id:
            continue
        name = names.get(event.user_id, event.user_name)
        totals[name] = totals.get(name, 0.0) + event.liters
        rows.append(
            CumulativeConsumptionRow(
                timestamp=event.occurred_at, liters_by_user=dict(totals)
            )
        )
    return rows


def drinker_profile(
    user: UserRecord, events: Iterable[DrinkEvent], recent_limit: int = 5
) -> DrinkerProfile:
    """Summarize a user's drinking history."""
    own = [event for event in events if event.user_id == user.id]
    type_counts: dict[str, int] = {}
    for event in own:
        beer_type = event.beer_type or UNKNOWN_BEER_TYPE
        type_counts[beer_type] = type_counts.get(beer_type, 0) + 1

    preferred = NO_BEER_TYPE
    best = 0
    for beer_type, count in type_counts.items():
        if count > best:
            preferred, best = beer_type, count

    recent = sorted(own, key=lambda event: event.occurred_at, reverse=True)
    return DrinkerProfile(
        user=user,
        total_liters=total_consumption(own),
        drink_count=len(own),
        average_size_ml=(
            sum(event.volume_ml for event in own) / len(own) if own else 0.0
        ),
        preferred_beer_type=preferred,
        recent_entries=recent[:recent_limit],
    )


@dataclass
class ConsumptionService:
    """Service that feeds cached entries into the consumption aggregations."""

    entry_cache: EntryCache
    user_service: UserService
    timezone: tzinfo = UTC

    def daily(
        self,
        preset: ConsumptionRange = ConsumptionRange.WEEK,
        user_id: UUID | None = None,
        now: datetime | None = None,
    ) -> list[DailyConsumptionRow]:
        """Return per-day liters for the preset window."""
        if user_id is not None:
            self.user_service.get_user(user_id)
        start, end = resolve_range(preset, now)
        return consumption_by_day(
            self.entry_cache.entries(),
            start,
            end,
            self.user_service.list_users(),
            user_id=user_id,
            tz=self.timezone,
        )

    def cumulative(self, user_id: UUID | None = None) -> list[CumulativeConsumptionRow]:
        """Return running totals, one row per drink."""
        if user_id is not None:
            self.user_service.get_user(user_id)
        return cumulative_consumption(
            self.entry_cache.entries(),
            self.user_service.list_users(),
            user_id=user_id,
        )

    def leaderboard(self) -> list[LeaderboardRow]:
        """Return users ranked by total liters."""
        return rank_users(self.user_service.list_users(), self.entry_cache.entries())

    def profile(self, user_id: UUID) -> DrinkerProfile:
        """Return a user's drinking profile."""
        user = self.user_service.get_user(user_id)
        return drinker_profile(user, self.entry_cache.entries())
