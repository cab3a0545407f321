"""Purchase lot logging and history."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from beer_tracker.domain.consumption import PurchaseHistory
from beer_tracker.domain.drinks import NewPurchaseLot, PurchaseLot
from beer_tracker.domain.errors import NotFoundError, ValidationError
from beer_tracker.domain.models import SessionContext
from beer_tracker.services.time_ranges import ensure_aware

_logger = logging.getLogger(__name__)


class PurchaseRepository(Protocol):
    """Persistence interface for purchase lots."""

    def insert_purchase(self, purchase: NewPurchaseLot) -> PurchaseLot:
        """Create a purchase lot and return it."""

    def get_purchase(self, purchase_id: UUID) -> PurchaseLot | None:
        """Return a purchase lot by id, if present."""

    def list_recent_purchases(self, limit: int) -> list[PurchaseLot]:
        """Return purchases, newest first."""

    def list_purchases_with_remaining_above(self, threshold: int) -> list[PurchaseLot]:
        """Return purchases whose remaining quantity exceeds the threshold."""

    def decrement_remaining(self, purchase_id: UUID, by: int = 1) -> bool:
        """Atomically take units; False when fewer than `by` remain."""

    def restore_remaining(self, purchase_id: UUID, by: int = 1) -> None:
        """Atomically give units back to a lot."""

    def delete_purchase(self, purchase_id: UUID) -> None:
        """Delete a purchase lot."""


@dataclass
class PurchaseService:
    """Application service for purchase lots."""

    repository: PurchaseRepository

    def log_purchase(  # noqa: PLR0913
        self,
        context: SessionContext,
        beer_name: str,
        unit_size_ml: float,
        quantity: int,
        cost_per_unit: float,
        beer_type: str | None = None,
        quantity_unit: str = "bottles",
        store_name: str | None = None,
        notes: str | None = None,
        purchase_date: datetime | None = None,
    ) -> PurchaseLot:
        """Validate and store a new purchase lot for the session user."""
        name = beer_name.strip()
        if not name:
            raise ValidationError("beer_name is required")
        if unit_size_ml <= 0:
            raise ValidationError("unit_size_ml must be positive")
        if quantity <= 0:
            raise ValidationError("quantity must be positive")
        if cost_per_unit <= 0:
            raise ValidationError("cost_per_unit must be positive")
        purchased_at = (
            ensure_aware(purchase_date, "purchase_date")
            if purchase_date
            else datetime.now(tz=UTC)
        )
        lot = self.repository.insert_purchase(
            NewPurchaseLot(
                user_id=context.user_id,
                user_name=context.user.name,
                beer_name=name,
                unit_size_ml=unit_size_ml,
                quantity=quantity,
                cost_per_unit=cost_per_unit,
                purchase_date=purchased_at,
                beer_type=beer_type or None,
                quantity_unit=quantity_unit,
                store_name=store_name or None,
                notes=notes or None,
            )
        )
        _logger.info(
            "Purchase logged: purchase_id=%s user_id=%s quantity=%s",
            lot.id,
            context.user_id,
            quantity,
        )
        return lot

    def get_purchase(self, purchase_id: UUID) -> PurchaseLot:
        """Return a purchase lot or raise NotFoundError."""
        lot = self.repository.get_purchase(purchase_id)
        if lot is None:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        return lot

    def history(self, limit: int = 10) -> PurchaseHistory:
        """Return recent purchases with spend totals."""
        purchases = self.repository.list_recent_purchases(limit)
        return PurchaseHistory(
            purchases=purchases,
            total_spent=sum(lot.total_cost for lot in purchases),
            total_items=sum(lot.total_quantity for lot in purchases),
        )

    def available_lots(self) -> list[PurchaseLot]:
        """Return lots that still have units to drink from."""
        return self.repository.list_purchases_with_remaining_above(0)

    def delete_purchase(self, purchase_id: UUID) -> None:
        """Delete a purchase lot."""
        self.get_purchase(purchase_id)
        self.repository.delete_purchase(purchase_id)
        _logger.info("Purchase deleted: purchase_id=%s", purchase_id)
