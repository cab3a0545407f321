"""Blood alcohol estimation using the Widmark formula with linear elimination.

Model:
- Peak per drink: BAC = grams / (body_weight_kg * r) * 10 (permille)
- r = 0.68 (male), 0.55 (female)
- Elimination: 0.15 permille per hour, applied per drink and floored at zero

All functions here are pure; ``BACService`` only fetches entries and users
before delegating to them.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, tzinfo
from uuid import UUID

from beer_tracker.domain.bac import (
    DEFAULT_SAMPLE_INTERVAL_MINUTES,
    BACSample,
    BACSeries,
    BACStatus,
    GroupBACRow,
    JoinKey,
    PhysiologyParams,
    UserBACSeries,
)
from beer_tracker.domain.drinks import DrinkEvent
from beer_tracker.domain.errors import ValidationError
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.cache import EntryCache
from beer_tracker.services.time_ranges import (
    BACRange,
    ensure_aware,
    format_time_label,
    resolve_range,
    sample_times,
    validate_events,
    validate_window,
)
from beer_tracker.services.users import UserService

LIGHT_THRESHOLD = 0.5
MODERATE_THRESHOLD = 1.0
DISPLAY_PRECISION = 2

_logger = logging.getLogger(__name__)


def drink_contribution(
    event: DrinkEvent, at: datetime, physiology: PhysiologyParams
) -> float:
    """BAC (permille) still contributed by one drink at a given instant."""
    if event.occurred_at > at:
        return 0.0
    initial = (
        event.alcohol_grams
        / (physiology.body_weight_kg * physiology.distribution_factor)
        * 10
    )
    minutes_elapsed = (at - event.occurred_at).total_seconds() / 60
    eliminated = minutes_elapsed / 60 * physiology.elimination_rate_per_hour
    return max(0.0, initial - eliminated)


def bac_at(
    events: Iterable[DrinkEvent], at: datetime, physiology: PhysiologyParams
) -> float:
    """Full-precision BAC (permille) at an instant."""
    return sum(drink_contribution(event, at, physiology) for event in events)


def zero_bac_eta(
    current_bac: float, physiology: PhysiologyParams, now: datetime
) -> datetime | None:
    """Project when the current BAC reaches zero, or None when already sober.

    Extrapolates linearly from the aggregate value rather than re-simulating
    each drink, so it can overshoot when some drinks are already eliminated.
    """
    if current_bac <= 0:
        return None
    hours_to_zero = current_bac / physiology.elimination_rate_per_hour
    return now + timedelta(hours=hours_to_zero)


def bac_status(bac: float) -> BACStatus:
    """Map a BAC value to its display band."""
    if bac <= 0:
        return BACStatus.SOBER
    if bac < LIGHT_THRESHOLD:
        return BACStatus.LIGHT
    if bac < MODERATE_THRESHOLD:
        return BACStatus.MODERATE
    return BACStatus.HIGH


def compute_bac_series(  # noqa: PLR0913
    events: Iterable[DrinkEvent],
    window_start: datetime,
    window_end: datetime,
    interval_minutes: int = DEFAULT_SAMPLE_INTERVAL_MINUTES,
    physiology: PhysiologyParams | None = None,
    now: datetime | None = None,
) -> BACSeries:
    """Sample one user's BAC over a window and estimate the sober time.

    Drinks before the window still count towards the samples; drinks after
    window_end are ignored.
    """
    params = physiology or PhysiologyParams()
    _validate_physiology(params)
    start = ensure_aware(window_start, "window_start")
    end = ensure_aware(window_end, "window_end")
    if interval_minutes <= 0:
        raise ValidationError("interval_minutes must be positive")
    validate_window(start, end)
    reference_now = ensure_aware(now, "now") if now else datetime.now(tz=UTC)

    relevant = [
        event for event in validate_events(events) if event.occurred_at <= end
    ]
    if not relevant:
        return BACSeries(samples=[], current_bac=0.0, zero_bac_at=None)

    samples = [
        BACSample(
            timestamp=instant,
            bac_permille=round(bac_at(relevant, instant, params), DISPLAY_PRECISION),
        )
        for instant in sample_times(start, end, interval_minutes)
    ]
    current = _current_bac(samples, reference_now)
    return BACSeries(
        samples=samples,
        current_bac=current,
        zero_bac_at=zero_bac_eta(current, params, reference_now),
    )


def compute_group_bac(  # noqa: PLR0913
    events: Iterable[DrinkEvent],
    users: list[UserRecord],
    window_start: datetime,
    window_end: datetime,
    interval_minutes: int = DEFAULT_SAMPLE_INTERVAL_MINUTES,
    physiology: PhysiologyParams | None = None,
    now: datetime | None = None,
) -> list[UserBACSeries]:
    """Compute each user's series independently, in roster order."""
    by_user: dict[UUID, list[DrinkEvent]] = {user.id: [] for user in users}
    for event in events:
        if event.user_id in by_user:
            by_user[event.user_id].append(event)
    return [
        UserBACSeries(
            user_id=user.id,
            user_name=user.name,
            series=compute_bac_series(
                by_user[user.id],
                window_start,
                window_end,
                interval_minutes=interval_minutes,
                physiology=physiology,
                now=now,
            ),
        )
        for user in users
    ]


def join_bac_series(
    user_series: list[UserBACSeries],
    key: JoinKey = JoinKey.TIMESTAMP,
    tz: tzinfo = UTC,
) -> list[GroupBACRow]:
    """Join per-user samples into comparison rows ordered by time.

    JoinKey.DISPLAY_TIME groups by the HH:MM label, which merges distinct
    instants that format the same (e.g. the same clock time on two days).
    The first instant seen for a label becomes the row timestamp.
    """
    rows: dict[object, GroupBACRow] = {}
    for entry in user_series:
        for sample in entry.series.samples:
            label = format_time_label(sample.timestamp, tz)
            join_key: object = (
                label if key is JoinKey.DISPLAY_TIME else sample.timestamp_millis
            )
            row = rows.get(join_key)
            if row is None:
                row = GroupBACRow(timestamp=sample.timestamp, time_label=label)
                rows[join_key] = row
            row.bac_by_user[entry.user_name] = sample.bac_permille
    return sorted(rows.values(), key=lambda row: row.timestamp)


@dataclass
class BACService:
    """Service that feeds cached entries into the BAC estimator."""

    entry_cache: EntryCache
    user_service: UserService
    physiology: PhysiologyParams = field(default_factory=PhysiologyParams)
    interval_minutes: int = DEFAULT_SAMPLE_INTERVAL_MINUTES
    timezone: tzinfo = UTC

    def user_series(
        self,
        user_id: UUID,
        preset: BACRange = BACRange.TWELVE_HOURS,
        now: datetime | None = None,
    ) -> UserBACSeries:
        """Return a user's BAC curve for the preset window."""
        user = self.user_service.get_user(user_id)
        reference_now = now or datetime.now(tz=UTC)
        start, end = resolve_range(preset, reference_now)
        events = [
            event for event in self.entry_cache.entries() if event.user_id == user.id
        ]
        series = compute_bac_series(
            events,
            start,
            end,
            interval_minutes=self.interval_minutes,
            physiology=self.physiology,
            now=reference_now,
        )
        _logger.info(
            "BAC series: user_id=%s samples=%s current=%s",
            user.id,
            len(series.samples),
            series.current_bac,
        )
        return UserBACSeries(user_id=user.id, user_name=user.name, series=series)

    def group_series(
        self,
        preset: BACRange = BACRange.TWELVE_HOURS,
        now: datetime | None = None,
        user_id: UUID | None = None,
        join_key: JoinKey = JoinKey.TIMESTAMP,
    ) -> list[GroupBACRow]:
        """Return comparison rows for all users, or for a single user."""
        if user_id is not None:
            users = [self.user_service.get_user(user_id)]
        else:
            users = self.user_service.list_users()
        reference_now = now or datetime.now(tz=UTC)
        start, end = resolve_range(preset, reference_now)
        per_user = compute_group_bac(
            self.entry_cache.entries(),
            users,
            start,
            end,
            interval_minutes=self.interval_minutes,
            physiology=self.physiology,
            now=reference_now,
        )
        return join_bac_series(per_user, key=join_key, tz=self.timezone)


def _validate_physiology(params: PhysiologyParams) -> None:
    if params.body_weight_kg <= 0:
        raise ValidationError("body_weight_kg must be positive")
    if params.distribution_factor <= 0:
        raise ValidationError("distribution_factor must be positive")
    if params.elimination_rate_per_hour <= 0:
        raise ValidationError("elimination_rate_per_hour must be positive")


def _current_bac(samples: list[BACSample], now: datetime) -> float:
    current = 0.0
    for sample in samples:
        if sample.timestamp > now:
            break
        current = sample.bac_permille
    return current
