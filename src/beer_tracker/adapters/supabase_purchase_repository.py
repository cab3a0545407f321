"""Supabase repository for purchase lots."""

import logging
from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from beer_tracker.adapters.supabase_queries import execute, parse_timestamp
from beer_tracker.domain.drinks import NewPurchaseLot, PurchaseLot
from beer_tracker.domain.errors import DataUnavailableError, NotFoundError
from beer_tracker.services.purchases import PurchaseRepository

_COLUMNS = (
    "id, user_id, user_name, beer_name, beer_type, beer_size, quantity, "
    "remaining_quantity, cost, quantity_unit, purchase_date, store_name, notes"
)

_logger = logging.getLogger(__name__)


@dataclass
class SupabasePurchaseRepository(PurchaseRepository):
    """Supabase implementation for the beer_purchases table.

    Quantity changes are compare-and-set updates filtered on the value read
    just before, so concurrent consumers cannot lose an update or push the
    remaining quantity below zero.
    """

    client: Client
    max_attempts: int = 3

    def insert_purchase(self, purchase: NewPurchaseLot) -> PurchaseLot:
        """Create a purchase row and return it."""
        response = execute(
            self.client.table("beer_purchases").insert(
                {
                    "user_id": str(purchase.user_id),
                    "user_name": purchase.user_name,
                    "beer_name": purchase.beer_name,
                    "beer_type": purchase.beer_type,
                    "beer_size": purchase.unit_size_ml,
                    "quantity": purchase.quantity,
                    "remaining_quantity": purchase.quantity,
                    "cost": purchase.cost_per_unit,
                    "quantity_unit": purchase.quantity_unit,
                    "purchase_date": purchase.purchase_date.isoformat(),
                    "store_name": purchase.store_name,
                    "notes": purchase.notes,
                }
            ),
            "insert purchase",
        )
        if not response.data:
            raise DataUnavailableError("Failed to create beer purchase")
        return _parse_row(response.data[0])

    def get_purchase(self, purchase_id: UUID) -> PurchaseLot | None:
        """Return a purchase by id."""
        response = execute(
            self.client.table("beer_purchases")
            .select(_COLUMNS)
            .eq("id", str(purchase_id))
            .limit(1),
            "get purchase",
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_recent_purchases(self, limit: int) -> list[PurchaseLot]:
        """Return the newest purchases."""
        response = execute(
            self.client.table("beer_purchases")
            .select(_COLUMNS)
            .order("purchase_date", desc=True)
            .limit(limit),
            "list purchases",
        )
        return [_parse_row(row) for row in response.data or []]

    def list_purchases_with_remaining_above(self, threshold: int) -> list[PurchaseLot]:
        """Return purchases that still have more than `threshold` units."""
        response = execute(
            self.client.table("beer_purchases")
            .select(_COLUMNS)
            .gt("remaining_quantity", threshold)
            .order("purchase_date", desc=True),
            "list available purchases",
        )
        return [_parse_row(row) for row in response.data or []]

    def decrement_remaining(self, purchase_id: UUID, by: int = 1) -> bool:
        """Take units from a lot; returns False when fewer than `by` remain."""
        for _ in range(self.max_attempts):
            current = self._remaining(purchase_id)
            if current < by:
                return False
            if self._swap_remaining(purchase_id, current, current - by):
                return True
            _logger.info(
                "Purchase quantity changed concurrently, retrying: purchase_id=%s",
                purchase_id,
            )
        raise DataUnavailableError(
            f"Could not decrement purchase {purchase_id} after "
            f"{self.max_attempts} attempts"
        )

    def restore_remaining(self, purchase_id: UUID, by: int = 1) -> None:
        """Give units back to a lot."""
        for _ in range(self.max_attempts):
            current = self._remaining(purchase_id)
            if self._swap_remaining(purchase_id, current, current + by):
                return
            _logger.info(
                "Purchase quantity changed concurrently, retrying: purchase_id=%s",
                purchase_id,
            )
        raise DataUnavailableError(
            f"Could not restore purchase {purchase_id} after "
            f"{self.max_attempts} attempts"
        )

    def delete_purchase(self, purchase_id: UUID) -> None:
        """Delete a purchase row."""
        execute(
            self.client.table("beer_purchases").delete().eq("id", str(purchase_id)),
            "delete purchase",
        )

    def _remaining(self, purchase_id: UUID) -> int:
        response = execute(
            self.client.table("beer_purchases")
            .select("remaining_quantity")
            .eq("id", str(purchase_id))
            .limit(1),
            "read purchase quantity",
        )
        if not response.data:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        return int(response.data[0].get("remaining_quantity") or 0)

    def _swap_remaining(self, purchase_id: UUID, expected: int, new: int) -> bool:
        query = (
            self.client.table("beer_purchases")
            .update({"remaining_quantity": new})
            .eq("id", str(purchase_id))
            .eq("remaining_quantity", expected)
        )
        if new < expected:
            query = query.gt("remaining_quantity", 0)
        response = execute(query, "update purchase quantity")
        return bool(response.data)


def _parse_row(row: dict[str, object]) -> PurchaseLot:
    quantity = int(row.get("quantity") or 0)
    remaining = row.get("remaining_quantity")
    return PurchaseLot(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        user_name=str(row.get("user_name") or ""),
        beer_name=str(row.get("beer_name") or ""),
        unit_size_ml=float(row.get("beer_size") or 0.0),
        total_quantity=quantity,
        remaining_quantity=int(remaining) if remaining is not None else quantity,
        cost_per_unit=float(row.get("cost") or 0.0),
        purchase_date=parse_timestamp(row.get("purchase_date")),
        beer_type=str(row["beer_type"]) if row.get("beer_type") else None,
        quantity_unit=str(row.get("quantity_unit") or "bottles"),
        store_name=str(row["store_name"]) if row.get("store_name") else None,
        notes=str(row["notes"]) if row.get("notes") else None,
    )
