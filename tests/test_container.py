"""Tests for container wiring."""

from beer_tracker.adapters.supabase_entry_repository import SupabaseEntryRepository
from beer_tracker.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.bac_service is not None
    assert isinstance(container.entry_cache.repository, SupabaseEntryRepository)
    assert container.bac_service.physiology.distribution_factor == 0.68
    container.close_resources()
