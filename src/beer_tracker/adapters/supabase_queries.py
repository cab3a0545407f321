"""Helpers shared by the Supabase repositories."""

from datetime import UTC, datetime
from typing import Any

import httpx
from postgrest.exceptions import APIError

from beer_tracker.domain.errors import DataUnavailableError


def execute(query: Any, action: str) -> Any:  # noqa: ANN401
    """Run a query builder, wrapping store failures in DataUnavailableError."""
    try:
        return query.execute()
    except (APIError, httpx.HTTPError) as exc:
        raise DataUnavailableError(f"Supabase {action} failed: {exc}") from exc


def parse_timestamp(raw: object) -> datetime:
    """Parse a timestamptz column, treating naive values as UTC."""
    if not isinstance(raw, str) or not raw:
        raise DataUnavailableError(f"Invalid timestamp from Supabase: {raw!r}")
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise DataUnavailableError(f"Invalid timestamp from Supabase: {raw}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
