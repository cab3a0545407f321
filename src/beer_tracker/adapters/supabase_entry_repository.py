"""Supabase repository for drink entries."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from supabase import Client

from beer_tracker.adapters.supabase_queries import execute, parse_timestamp
from beer_tracker.domain.drinks import (
    DEFAULT_ALCOHOL_PERCENTAGE,
    DrinkEvent,
    NewDrinkEvent,
)
from beer_tracker.domain.errors import DataUnavailableError
from beer_tracker.services.entries import EntryRepository

_COLUMNS = (
    "id, user_id, user_name, size, alcohol_percentage, timestamp, type, purchase_id"
)
# PostgREST caps a single response at max-rows (1000 by default)
PAGE_SIZE = 1000


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for the beer_entries table."""

    client: Client
    page_size: int = PAGE_SIZE

    def list_entries(self) -> list[DrinkEvent]:
        """Return all entries, oldest first."""
        return self._select_all(
            lambda: self.client.table("beer_entries").select(_COLUMNS),
            "list entries",
        )

    def insert_entry(self, entry: NewDrinkEvent) -> DrinkEvent:
        """Create an entry row and return it."""
        response = execute(
            self.client.table("beer_entries").insert(
                {
                    "user_id": str(entry.user_id),
                    "user_name": entry.user_name,
                    "size": entry.volume_ml,
                    "alcohol_percentage": entry.alcohol_percentage,
                    "timestamp": entry.occurred_at.isoformat(),
                    "type": entry.beer_type,
                    "purchase_id": str(entry.purchase_id)
                    if entry.purchase_id
                    else None,
                }
            ),
            "insert entry",
        )
        if not response.data:
            raise DataUnavailableError("Failed to create beer entry")
        return _parse_row(response.data[0])

    def get_entry(self, entry_id: UUID) -> DrinkEvent | None:
        """Return an entry by id."""
        response = execute(
            self.client.table("beer_entries")
            .select(_COLUMNS)
            .eq("id", str(entry_id))
            .limit(1),
            "get entry",
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def list_entries_for_user(self, user_id: UUID) -> list[DrinkEvent]:
        """Return a user's entries, oldest first."""
        return self._select_all(
            lambda: self.client.table("beer_entries")
            .select(_COLUMNS)
            .eq("user_id", str(user_id)),
            "list user entries",
        )

    def list_entries_in_range(self, start: datetime, end: datetime) -> list[DrinkEvent]:
        """Return entries with start <= timestamp <= end."""
        return self._select_all(
            lambda: self.client.table("beer_entries")
            .select(_COLUMNS)
            .gte("timestamp", start.isoformat())
            .lte("timestamp", end.isoformat()),
            "list entries in range",
        )

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry row."""
        execute(
            self.client.table("beer_entries").delete().eq("id", str(entry_id)),
            "delete entry",
        )

    def _select_all(
        self, build_query: Callable[[], Any], action: str
    ) -> list[DrinkEvent]:
        """Read every page of a select, oldest first."""
        rows: list[dict[str, Any]] = []
        offset = 0
        while True:
            response = execute(
                build_query()
                .order("timestamp", desc=False)
                .order("id", desc=False)
                .range(offset, offset + self.page_size - 1),
                action,
            )
            page = response.data or []
            rows.extend(page)
            if len(page) < self.page_size:
                return [_parse_row(row) for row in rows]
            offset += self.page_size


def _parse_row(row: dict[str, object]) -> DrinkEvent:
    abv = row.get("alcohol_percentage")
    purchase_id = row.get("purchase_id")
    return DrinkEvent(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        user_name=str(row.get("user_name") or ""),
        volume_ml=float(row.get("size", 0.0)),
        alcohol_percentage=(
            float(abv) if abv is not None else DEFAULT_ALCOHOL_PERCENTAGE
        ),
        occurred_at=parse_timestamp(row.get("timestamp")),
        beer_type=str(row["type"]) if row.get("type") else None,
        purchase_id=UUID(str(purchase_id)) if purchase_id else None,
    )
