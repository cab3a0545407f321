"""Dependency container wiring for the application."""

from collections.abc import Callable
from dataclasses import dataclass

from supabase import create_client

from beer_tracker.adapters.supabase_entry_repository import SupabaseEntryRepository
from beer_tracker.adapters.supabase_purchase_repository import (
    SupabasePurchaseRepository,
)
from beer_tracker.adapters.supabase_user_repository import SupabaseUserRepository
from beer_tracker.config import Settings, parse_timezone
from beer_tracker.services.bac import BACService
from beer_tracker.services.cache import EntryCache
from beer_tracker.services.consumption import ConsumptionService
from beer_tracker.services.entries import EntryRepository, EntryService
from beer_tracker.services.notifications import EntryChangeNotifier
from beer_tracker.services.purchases import PurchaseRepository, PurchaseService
from beer_tracker.services.users import UserRepository, UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    entry_service: EntryService
    purchase_service: PurchaseService
    entry_cache: EntryCache
    notifier: EntryChangeNotifier
    bac_service: BACService
    consumption_service: ConsumptionService
    close_resources: Callable[[], None]


def wire_container(
    settings: Settings,
    user_repository: UserRepository,
    entry_repository: EntryRepository,
    purchase_repository: PurchaseRepository,
) -> AppContainer:
    """Assemble services around the given repositories."""
    tz = parse_timezone(settings.timezone)
    user_service = UserService(user_repository)
    entry_cache = EntryCache(
        repository=entry_repository, ttl_seconds=settings.entry_cache_ttl_seconds
    )
    notifier = EntryChangeNotifier()
    unsubscribe = notifier.subscribe(entry_cache.handle_change)
    return AppContainer(
        settings=settings,
        user_service=user_service,
        entry_service=EntryService(
            entry_repository=entry_repository,
            purchase_repository=purchase_repository,
        ),
        purchase_service=PurchaseService(purchase_repository),
        entry_cache=entry_cache,
        notifier=notifier,
        bac_service=BACService(
            entry_cache=entry_cache,
            user_service=user_service,
            physiology=settings.physiology(),
            interval_minutes=settings.bac_sample_interval_minutes,
            timezone=tz,
        ),
        consumption_service=ConsumptionService(
            entry_cache=entry_cache, user_service=user_service, timezone=tz
        ),
        close_resources=unsubscribe,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container backed by Supabase."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    return wire_container(
        resolved_settings,
        user_repository=SupabaseUserRepository(supabase_client),
        entry_repository=SupabaseEntryRepository(supabase_client),
        purchase_repository=SupabasePurchaseRepository(supabase_client),
    )
