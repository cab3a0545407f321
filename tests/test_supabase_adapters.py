"""Tests for Supabase adapter implementations."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import httpx
import pytest
from postgrest.exceptions import APIError

from beer_tracker.adapters.supabase_entry_repository import SupabaseEntryRepository
from beer_tracker.adapters.supabase_purchase_repository import (
    SupabasePurchaseRepository,
)
from beer_tracker.adapters.supabase_queries import parse_timestamp
from beer_tracker.adapters.supabase_user_repository import SupabaseUserRepository
from beer_tracker.domain.drinks import NewDrinkEvent, NewPurchaseLot
from beer_tracker.domain.errors import DataUnavailableError, NotFoundError


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": [], "update": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_ranges: list[tuple[str, str, object]] = field(default_factory=list)
    pages: list[tuple[int, int]] = field(default_factory=list)
    error: Exception | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def update(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "update"
        self.last_payload = payload
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_ranges.append(("gt", column, value))
        return self

    def gte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_ranges.append(("gte", column, value))
        return self

    def lte(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_ranges.append(("lte", column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def range(self, start: int, end: int) -> "FakeTable":
        self.pages.append((start, end))
        return self

    def execute(self) -> FakeResponse:
        if self.error is not None:
            raise self.error
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _entry_row(**overrides) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "user_name": "Alice",
        "size": 500,
        "alcohol_percentage": 5.2,
        "timestamp": "2024-06-01T20:00:00+00:00",
        "type": "IPA",
        "purchase_id": None,
    }
    row.update(overrides)
    return row


def _purchase_row(**overrides) -> dict[str, object]:
    row: dict[str, object] = {
        "id": str(uuid4()),
        "user_id": str(uuid4()),
        "user_name": "Bob",
        "beer_name": "Guinness",
        "beer_type": "Stout",
        "beer_size": 440,
        "quantity": 4,
        "remaining_quantity": 3,
        "cost": 2.25,
        "quantity_unit": "cans",
        "purchase_date": "2024-06-01T12:00:00+00:00",
        "store_name": None,
        "notes": None,
    }
    row.update(overrides)
    return row


def test_supabase_user_repository() -> None:
    client = FakeSupabaseClient()
    profiles = client.table("profiles")
    user_id = str(uuid4())
    profiles.queue("select", [{"id": user_id, "name": "Alice", "email": "a@x.io"}])
    profiles.queue("select", [])

    repository = SupabaseUserRepository(client)
    users = repository.list_users()
    missing = repository.get_user(uuid4())

    assert users[0].id == UUID(user_id)
    assert users[0].name == "Alice"
    assert missing is None


def test_supabase_entry_repository_parses_rows() -> None:
    client = FakeSupabaseClient()
    entries = client.table("beer_entries")
    purchase_id = str(uuid4())
    entries.queue(
        "select",
        [
            _entry_row(),
            _entry_row(
                alcohol_percentage=None,
                timestamp="2024-06-01T21:00:00",
                type=None,
                purchase_id=purchase_id,
            ),
        ],
    )

    repository = SupabaseEntryRepository(client)
    first, second = repository.list_entries()

    assert first.alcohol_percentage == 5.2
    assert first.occurred_at == datetime(2024, 6, 1, 20, 0, tzinfo=UTC)
    assert second.alcohol_percentage == 5.0
    assert second.occurred_at == datetime(2024, 6, 1, 21, 0, tzinfo=UTC)
    assert second.beer_type is None
    assert second.purchase_id == UUID(purchase_id)


def test_supabase_entry_repository_reads_every_page() -> None:
    client = FakeSupabaseClient()
    entries = client.table("beer_entries")
    entries.queue("select", [_entry_row(), _entry_row()])
    entries.queue("select", [_entry_row(), _entry_row()])
    entries.queue("select", [_entry_row()])

    listed = SupabaseEntryRepository(client, page_size=2).list_entries()

    assert len(listed) == 5
    assert entries.pages == [(0, 1), (2, 3), (4, 5)]


def test_supabase_entry_repository_stops_on_empty_page() -> None:
    client = FakeSupabaseClient()
    entries = client.table("beer_entries")
    entries.queue("select", [_entry_row(), _entry_row()])

    listed = SupabaseEntryRepository(client, page_size=2).list_entries()

    assert len(listed) == 2
    assert entries.pages == [(0, 1), (2, 3)]


def test_supabase_entry_repository_insert() -> None:
    client = FakeSupabaseClient()
    entries = client.table("beer_entries")
    user_id = uuid4()
    occurred_at = datetime(2024, 6, 1, 20, 0, tzinfo=UTC)
    entries.queue("insert", [_entry_row(user_id=str(user_id))])

    repository = SupabaseEntryRepository(client)
    created = repository.insert_entry(
        NewDrinkEvent(
            user_id=user_id,
            user_name="Alice",
            volume_ml=500,
            alcohol_percentage=5.2,
            occurred_at=occurred_at,
        )
    )

    assert created.user_id == user_id
    assert entries.last_payload == {
        "user_id": str(user_id),
        "user_name": "Alice",
        "size": 500,
        "alcohol_percentage": 5.2,
        "timestamp": occurred_at.isoformat(),
        "type": None,
        "purchase_id": None,
    }


def test_supabase_entry_repository_range_filters() -> None:
    client = FakeSupabaseClient()
    entries = client.table("beer_entries")
    start = datetime(2024, 6, 1, tzinfo=UTC)
    end = start + timedelta(days=1)

    SupabaseEntryRepository(client).list_entries_in_range(start, end)

    assert entries.last_ranges == [
        ("gte", "timestamp", start.isoformat()),
        ("lte", "timestamp", end.isoformat()),
    ]


def test_supabase_entry_repository_empty_insert() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(DataUnavailableError):
        SupabaseEntryRepository(client).insert_entry(
            NewDrinkEvent(
                user_id=uuid4(),
                user_name="Alice",
                volume_ml=500,
                alcohol_percentage=5,
                occurred_at=datetime.now(tz=UTC),
            )
        )


@pytest.mark.parametrize(
    "error",
    [
        APIError({"message": "permission denied", "code": "42501"}),
        httpx.ConnectError("connection refused"),
    ],
)
def test_store_failures_become_data_unavailable(error) -> None:
    client = FakeSupabaseClient()
    client.table("beer_entries").error = error

    with pytest.raises(DataUnavailableError, match="list entries"):
        SupabaseEntryRepository(client).list_entries()


def test_supabase_purchase_repository_insert_sets_remaining() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchases.queue("insert", [_purchase_row(remaining_quantity=4)])

    lot = SupabasePurchaseRepository(client).insert_purchase(
        NewPurchaseLot(
            user_id=uuid4(),
            user_name="Bob",
            beer_name="Guinness",
            unit_size_ml=440,
            quantity=4,
            cost_per_unit=2.25,
            purchase_date=datetime(2024, 6, 1, 12, 0, tzinfo=UTC),
        )
    )

    assert isinstance(purchases.last_payload, dict)
    assert purchases.last_payload["quantity"] == 4
    assert purchases.last_payload["remaining_quantity"] == 4
    assert lot.remaining_quantity == 4
    assert lot.total_cost == pytest.approx(9.0)


def test_supabase_purchase_repository_available_filter() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchases.queue("select", [_purchase_row()])

    lots = SupabasePurchaseRepository(client).list_purchases_with_remaining_above(0)

    assert len(lots) == 1
    assert purchases.last_ranges == [("gt", "remaining_quantity", 0)]


def test_decrement_is_a_conditional_update() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchase_id = uuid4()
    purchases.queue("select", [{"remaining_quantity": 2}])
    purchases.queue("update", [{"id": str(purchase_id), "remaining_quantity": 1}])

    taken = SupabasePurchaseRepository(client).decrement_remaining(purchase_id)

    assert taken is True
    assert purchases.last_payload == {"remaining_quantity": 1}
    assert ("remaining_quantity", 2) in purchases.last_filters
    assert ("gt", "remaining_quantity", 0) in purchases.last_ranges


def test_decrement_refuses_to_go_below_zero() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchases.queue("select", [{"remaining_quantity": 0}])

    taken = SupabasePurchaseRepository(client).decrement_remaining(uuid4())

    assert taken is False
    assert purchases.last_payload is None


def test_decrement_retries_after_concurrent_change() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchases.queue("select", [{"remaining_quantity": 3}])
    purchases.queue("update", [])
    purchases.queue("select", [{"remaining_quantity": 2}])
    purchases.queue("update", [{"remaining_quantity": 1}])

    taken = SupabasePurchaseRepository(client).decrement_remaining(uuid4())

    assert taken is True
    assert purchases.last_payload == {"remaining_quantity": 1}


def test_decrement_gives_up_after_max_attempts() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    for _ in range(2):
        purchases.queue("select", [{"remaining_quantity": 5}])
        purchases.queue("update", [])

    repository = SupabasePurchaseRepository(client, max_attempts=2)

    with pytest.raises(DataUnavailableError):
        repository.decrement_remaining(uuid4())


def test_restore_adds_one_unit() -> None:
    client = FakeSupabaseClient()
    purchases = client.table("beer_purchases")
    purchases.queue("select", [{"remaining_quantity": 0}])
    purchases.queue("update", [{"remaining_quantity": 1}])

    SupabasePurchaseRepository(client).restore_remaining(uuid4())

    assert purchases.last_payload == {"remaining_quantity": 1}
    assert purchases.last_ranges == []


def test_restore_missing_purchase() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(NotFoundError):
        SupabasePurchaseRepository(client).restore_remaining(uuid4())


def test_parse_timestamp_rejects_garbage() -> None:
    with pytest.raises(DataUnavailableError):
        parse_timestamp(None)
    with pytest.raises(DataUnavailableError):
        parse_timestamp("yesterday")
    assert parse_timestamp("2024-06-01T22:00:00+02:00") == datetime(
        2024, 6, 1, 20, 0, tzinfo=UTC
    )
