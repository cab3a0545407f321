"""In-memory snapshot of drink entries."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from beer_tracker.domain.drinks import DrinkEvent, EntryChange
from beer_tracker.services.entries import EntryRepository

_logger = logging.getLogger(__name__)


@dataclass
class EntryCache:
    """Caches the full entry list and refetches it on change or expiry.

    Every change notification triggers a full refetch; there is no incremental
    update path.
    """

    repository: EntryRepository
    ttl_seconds: int = 30
    _entries: list[DrinkEvent] | None = field(default=None, init=False)
    _expires_at: datetime | None = field(default=None, init=False)

    def entries(self) -> list[DrinkEvent]:
        """Return cached entries, refetching when missing or expired."""
        if self._entries is None or self._is_expired():
            return self.refresh()
        return list(self._entries)

    def refresh(self) -> list[DrinkEvent]:
        """Refetch all entries from the repository."""
        entries = self.repository.list_entries()
        self._entries = list(entries)
        self._expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        _logger.info("Entry cache refreshed: entries=%s", len(entries))
        return list(entries)

    def invalidate(self) -> None:
        """Drop the snapshot so the next read refetches."""
        self._entries = None
        self._expires_at = None

    def handle_change(self, change: EntryChange) -> None:
        """Refetch everything in response to a change notification."""
        _logger.info(
            "Entry change received: type=%s entry_id=%s",
            change.event_type,
            change.entry_id,
        )
        self.refresh()

    def _is_expired(self) -> bool:
        return self._expires_at is None or datetime.now(tz=UTC) >= self._expires_at
