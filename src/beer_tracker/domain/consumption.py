"""Domain models for consumption charts and rankings."""

from dataclasses import dataclass
from datetime import date, datetime

from beer_tracker.domain.drinks import DrinkEvent, PurchaseLot
from beer_tracker.domain.models import UserRecord


@dataclass(frozen=True)
class DailyConsumptionRow:
    """Liters per user for one calendar day."""

    day: date
    liters_by_user: dict[str, float]


@dataclass(frozen=True)
class CumulativeConsumptionRow:
    """Running liters per user as of one drink."""

    timestamp: datetime
    liters_by_user: dict[str, float]


@dataclass(frozen=True)
class LeaderboardRow:
    """A ranked user with their share of the group total."""

    user: UserRecord
    liters: float
    percent_of_group_total: float


@dataclass(frozen=True)
class DrinkerProfile:
    """Per-user consumption statistics."""

    user: UserRecord
    total_liters: float
    drink_count: int
    average_size_ml: float
    preferred_beer_type: str
    recent_entries: list[DrinkEvent]


@dataclass(frozen=True)
class PurchaseHistory:
    """Recent purchases with spend totals."""

    purchases: list[PurchaseLot]
    total_spent: float
    total_items: int
