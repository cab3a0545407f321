"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from beer_tracker.config import Settings
from beer_tracker.containers import AppContainer, wire_container
from beer_tracker.domain.drinks import (
    DrinkEvent,
    NewDrinkEvent,
    NewPurchaseLot,
    PurchaseLot,
)
from beer_tracker.domain.errors import DataUnavailableError, NotFoundError
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.entries import EntryRepository
from beer_tracker.services.purchases import PurchaseRepository
from beer_tracker.services.users import UserRepository

ALICE_ID = UUID("00000000-0000-0000-0000-00000000000a")
BOB_ID = UUID("00000000-0000-0000-0000-00000000000b")


def make_user(name: str, user_id: UUID | None = None) -> UserRecord:
    return UserRecord(
        id=user_id or uuid4(), name=name, email=f"{name.lower()}@example.com"
    )


def make_event(  # noqa: PLR0913
    user: UserRecord,
    occurred_at: datetime,
    volume_ml: float = 500.0,
    alcohol_percentage: float = 5.0,
    beer_type: str | None = None,
    purchase_id: UUID | None = None,
) -> DrinkEvent:
    return DrinkEvent(
        id=uuid4(),
        user_id=user.id,
        user_name=user.name,
        volume_ml=volume_ml,
        alcohol_percentage=alcohol_percentage,
        occurred_at=occurred_at,
        beer_type=beer_type,
        purchase_id=purchase_id,
    )


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)

    def add(self, user: UserRecord) -> UserRecord:
        self.users[user.id] = user
        return user

    def list_users(self) -> list[UserRecord]:
        return sorted(self.users.values(), key=lambda user: user.name)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository for tests."""

    entries: dict[UUID, DrinkEvent] = field(default_factory=dict)
    fail_inserts: bool = False
    list_calls: int = 0

    def add(self, entry: DrinkEvent) -> DrinkEvent:
        self.entries[entry.id] = entry
        return entry

    def list_entries(self) -> list[DrinkEvent]:
        self.list_calls += 1
        return sorted(self.entries.values(), key=lambda entry: entry.occurred_at)

    def insert_entry(self, entry: NewDrinkEvent) -> DrinkEvent:
        if self.fail_inserts:
            raise DataUnavailableError("insert failed")
        stored = DrinkEvent(
            id=uuid4(),
            user_id=entry.user_id,
            user_name=entry.user_name,
            volume_ml=entry.volume_ml,
            alcohol_percentage=entry.alcohol_percentage,
            occurred_at=entry.occurred_at,
            beer_type=entry.beer_type,
            purchase_id=entry.purchase_id,
        )
        return self.add(stored)

    def get_entry(self, entry_id: UUID) -> DrinkEvent | None:
        return self.entries.get(entry_id)

    def list_entries_for_user(self, user_id: UUID) -> list[DrinkEvent]:
        return [entry for entry in self.list_entries() if entry.user_id == user_id]

    def list_entries_in_range(
        self, start: datetime, end: datetime
    ) -> list[DrinkEvent]:
        return [
            entry
            for entry in self.list_entries()
            if start <= entry.occurred_at <= end
        ]

    def delete_entry(self, entry_id: UUID) -> None:
        self.entries.pop(entry_id, None)


@dataclass
class InMemoryPurchaseRepository(PurchaseRepository):
    """In-memory purchase repository for tests."""

    purchases: dict[UUID, PurchaseLot] = field(default_factory=dict)
    fail_restores: bool = False

    def add(self, lot: PurchaseLot) -> PurchaseLot:
        self.purchases[lot.id] = lot
        return lot

    def insert_purchase(self, purchase: NewPurchaseLot) -> PurchaseLot:
        return self.add(
            PurchaseLot(
                id=uuid4(),
                user_id=purchase.user_id,
                user_name=purchase.user_name,
                beer_name=purchase.beer_name,
                unit_size_ml=purchase.unit_size_ml,
                total_quantity=purchase.quantity,
                remaining_quantity=purchase.quantity,
                cost_per_unit=purchase.cost_per_unit,
                purchase_date=purchase.purchase_date,
                beer_type=purchase.beer_type,
                quantity_unit=purchase.quantity_unit,
                store_name=purchase.store_name,
                notes=purchase.notes,
            )
        )

    def get_purchase(self, purchase_id: UUID) -> PurchaseLot | None:
        return self.purchases.get(purchase_id)

    def list_recent_purchases(self, limit: int) -> list[PurchaseLot]:
        ordered = sorted(
            self.purchases.values(), key=lambda lot: lot.purchase_date, reverse=True
        )
        return ordered[:limit]

    def list_purchases_with_remaining_above(self, threshold: int) -> list[PurchaseLot]:
        return [
            lot
            for lot in self.list_recent_purchases(len(self.purchases))
            if lot.remaining_quantity > threshold
        ]

    def decrement_remaining(self, purchase_id: UUID, by: int = 1) -> bool:
        lot = self.purchases.get(purchase_id)
        if lot is None:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        if lot.remaining_quantity < by:
            return False
        self.purchases[purchase_id] = replace(
            lot, remaining_quantity=lot.remaining_quantity - by
        )
        return True

    def restore_remaining(self, purchase_id: UUID, by: int = 1) -> None:
        if self.fail_restores:
            raise DataUnavailableError("restore failed")
        lot = self.purchases.get(purchase_id)
        if lot is None:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        self.purchases[purchase_id] = replace(
            lot, remaining_quantity=lot.remaining_quantity + by
        )

    def delete_purchase(self, purchase_id: UUID) -> None:
        self.purchases.pop(purchase_id, None)


def make_lot(
    user: UserRecord,
    remaining_quantity: int = 6,
    unit_size_ml: float = 330.0,
    beer_type: str | None = "Lager",
    purchase_date: datetime | None = None,
) -> PurchaseLot:
    return PurchaseLot(
        id=uuid4(),
        user_id=user.id,
        user_name=user.name,
        beer_name="Pilsner Urquell",
        unit_size_ml=unit_size_ml,
        total_quantity=max(remaining_quantity, 6),
        remaining_quantity=remaining_quantity,
        cost_per_unit=1.5,
        purchase_date=purchase_date or datetime(2024, 1, 1, tzinfo=UTC),
        beer_type=beer_type,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
        webhook_secret="webhook-secret",
    )


@pytest.fixture
def alice() -> UserRecord:
    return make_user("Alice", ALICE_ID)


@pytest.fixture
def bob() -> UserRecord:
    return make_user("Bob", BOB_ID)


@pytest.fixture
def user_repository(alice: UserRecord, bob: UserRecord) -> InMemoryUserRepository:
    repository = InMemoryUserRepository()
    repository.add(alice)
    repository.add(bob)
    return repository


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def purchase_repository() -> InMemoryPurchaseRepository:
    return InMemoryPurchaseRepository()


@pytest.fixture
def container(
    settings: Settings,
    user_repository: InMemoryUserRepository,
    entry_repository: InMemoryEntryRepository,
    purchase_repository: InMemoryPurchaseRepository,
) -> AppContainer:
    return wire_container(
        settings,
        user_repository=user_repository,
        entry_repository=entry_repository,
        purchase_repository=purchase_repository,
    )
