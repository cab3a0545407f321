"""Drink entry logging and deletion."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from beer_tracker.domain.drinks import (
    DEFAULT_ALCOHOL_PERCENTAGE,
    MAX_ALCOHOL_PERCENTAGE,
    DrinkEvent,
    EntryDeletion,
    NewDrinkEvent,
    PurchaseLot,
)
from beer_tracker.domain.errors import (
    BeerTrackerError,
    InsufficientQuantityError,
    NotFoundError,
    ValidationError,
)
from beer_tracker.domain.models import SessionContext
from beer_tracker.services.purchases import PurchaseRepository
from beer_tracker.services.time_ranges import ensure_aware, validate_window

_logger = logging.getLogger(__name__)


class EntryRepository(Protocol):
    """Persistence interface for drink entries."""

    def list_entries(self) -> list[DrinkEvent]:
        """Return all entries."""

    def insert_entry(self, entry: NewDrinkEvent) -> DrinkEvent:
        """Create an entry and return it with its id."""

    def get_entry(self, entry_id: UUID) -> DrinkEvent | None:
        """Return an entry by id, if present."""

    def list_entries_for_user(self, user_id: UUID) -> list[DrinkEvent]:
        """Return entries belonging to a user."""

    def list_entries_in_range(self, start: datetime, end: datetime) -> list[DrinkEvent]:
        """Return entries with start <= occurred_at <= end."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry."""


@dataclass
class EntryService:
    """Service that records drinks and keeps purchase lots in step."""

    entry_repository: EntryRepository
    purchase_repository: PurchaseRepository

    def log_drink(  # noqa: PLR0913
        self,
        context: SessionContext,
        volume_ml: float | None = None,
        alcohol_percentage: float | None = None,
        beer_type: str | None = None,
        purchase_id: UUID | None = None,
        occurred_at: datetime | None = None,
    ) -> DrinkEvent:
        """Record a drink for the session user.

        When the drink comes from a purchase lot, one unit is taken from the
        lot before the entry is written; an empty lot rejects the drink.
        """
        lot: PurchaseLot | None = None
        if purchase_id is not None:
            lot = self.purchase_repository.get_purchase(purchase_id)
            if lot is None:
                raise NotFoundError(f"Purchase {purchase_id} not found")
            if lot.remaining_quantity <= 0:
                raise InsufficientQuantityError(purchase_id)
            if volume_ml is None:
                volume_ml = lot.unit_size_ml
            beer_type = beer_type or lot.beer_type

        new_entry = NewDrinkEvent(
            user_id=context.user_id,
            user_name=context.user.name,
            volume_ml=_validate_volume(volume_ml),
            alcohol_percentage=_validate_abv(alcohol_percentage),
            occurred_at=(
                ensure_aware(occurred_at, "occurred_at")
                if occurred_at
                else datetime.now(tz=UTC)
            ),
            beer_type=beer_type or None,
            purchase_id=purchase_id,
        )

        if lot is not None and not self.purchase_repository.decrement_remaining(
            lot.id
        ):
            raise InsufficientQuantityError(lot.id)
        try:
            entry = self.entry_repository.insert_entry(new_entry)
        except Exception:
            if lot is not None:
                _logger.warning(
                    "Entry insert failed, returning unit: purchase_id=%s", lot.id
                )
                try:
                    self.purchase_repository.restore_remaining(lot.id)
                except BeerTrackerError:
                    _logger.exception(
                        "Failed to return unit, lot is one unit short: purchase_id=%s",
                        lot.id,
                    )
            raise
        _logger.info(
            "Drink logged: entry_id=%s user_id=%s volume_ml=%s purchase_id=%s",
            entry.id,
            entry.user_id,
            entry.volume_ml,
            entry.purchase_id,
        )
        return entry

    def delete_entry(self, entry_id: UUID) -> EntryDeletion:
        """Delete an entry and give its unit back to the purchase lot.

        The restore runs after the delete and is not rolled back with it: a
        failed restore is logged and reported in the result.
        """
        entry = self.entry_repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"Entry {entry_id} not found")
        self.entry_repository.delete_entry(entry_id)
        if entry.purchase_id is None:
            return EntryDeletion(
                entry_id=entry_id, purchase_id=None, quantity_restored=False
            )
        try:
            self.purchase_repository.restore_remaining(entry.purchase_id)
        except BeerTrackerError as exc:
            _logger.exception(
                "Failed to restore purchase quantity: entry_id=%s purchase_id=%s",
                entry_id,
                entry.purchase_id,
            )
            return EntryDeletion(
                entry_id=entry_id,
                purchase_id=entry.purchase_id,
                quantity_restored=False,
                restore_error=str(exc),
            )
        return EntryDeletion(
            entry_id=entry_id, purchase_id=entry.purchase_id, quantity_restored=True
        )

    def list_entries(self) -> list[DrinkEvent]:
        """Return all entries."""
        return self.entry_repository.list_entries()

    def list_user_entries(self, user_id: UUID) -> list[DrinkEvent]:
        """Return a user's entries."""
        return self.entry_repository.list_entries_for_user(user_id)

    def list_entries_in_range(self, start: datetime, end: datetime) -> list[DrinkEvent]:
        """Return entries in an inclusive time window."""
        start = ensure_aware(start, "start")
        end = ensure_aware(end, "end")
        validate_window(start, end)
        return self.entry_repository.list_entries_in_range(start, end)


def _validate_volume(volume_ml: float | None) -> float:
    if volume_ml is None:
        raise ValidationError("volume_ml is required")
    if volume_ml <= 0:
        raise ValidationError("volume_ml must be positive")
    return float(volume_ml)


def _validate_abv(alcohol_percentage: float | None) -> float:
    if alcohol_percentage is None:
        return DEFAULT_ALCOHOL_PERCENTAGE
    if not 0 <= alcohol_percentage <= MAX_ALCOHOL_PERCENTAGE:
        raise ValidationError("alcohol_percentage must be between 0 and 100")
    return float(alcohol_percentage)
