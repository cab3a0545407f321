"""Domain models for drink entries and purchase lots."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

DEFAULT_ALCOHOL_PERCENTAGE = 5.0
ETHANOL_DENSITY_G_PER_ML = 0.8
MAX_ALCOHOL_PERCENTAGE = 100.0


@dataclass(frozen=True)
class NewDrinkEvent:
    """A drink entry that has not been stored yet."""

    user_id: UUID
    user_name: str
    volume_ml: float
    alcohol_percentage: float
    occurred_at: datetime
    beer_type: str | None = None
    purchase_id: UUID | None = None


@dataclass(frozen=True)
class DrinkEvent:
    """A logged drink. Never mutated after creation."""

    id: UUID
    user_id: UUID
    user_name: str
    volume_ml: float
    alcohol_percentage: float
    occurred_at: datetime
    beer_type: str | None = None
    purchase_id: UUID | None = None

    @property
    def alcohol_grams(self) -> float:
        """Grams of ethanol in the drink."""
        return (
            (self.volume_ml / 1000)
            * self.alcohol_percentage
            * ETHANOL_DENSITY_G_PER_ML
        )

    @property
    def liters(self) -> float:
        return self.volume_ml / 1000


@dataclass(frozen=True)
class NewPurchaseLot:
    """A purchase that has not been stored yet."""

    user_id: UUID
    user_name: str
    beer_name: str
    unit_size_ml: float
    quantity: int
    cost_per_unit: float
    purchase_date: datetime
    beer_type: str | None = None
    quantity_unit: str = "bottles"
    store_name: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PurchaseLot:
    """A batch buy with a depletable remaining quantity."""

    id: UUID
    user_id: UUID
    user_name: str
    beer_name: str
    unit_size_ml: float
    total_quantity: int
    remaining_quantity: int
    cost_per_unit: float
    purchase_date: datetime
    beer_type: str | None = None
    quantity_unit: str = "bottles"
    store_name: str | None = None
    notes: str | None = None

    @property
    def total_cost(self) -> float:
        return self.cost_per_unit * self.total_quantity


@dataclass(frozen=True)
class EntryDeletion:
    """Outcome of an admin entry deletion."""

    entry_id: UUID
    purchase_id: UUID | None
    quantity_restored: bool
    restore_error: str | None = None


@dataclass(frozen=True)
class EntryChange:
    """A change notification for the entries table."""

    event_type: str
    entry_id: UUID | None = None
