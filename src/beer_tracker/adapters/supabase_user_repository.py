"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from beer_tracker.adapters.supabase_queries import execute
from beer_tracker.domain.models import UserRecord
from beer_tracker.services.users import UserRepository


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for the profiles table."""

    client: Client

    def list_users(self) -> list[UserRecord]:
        """Return all profiles ordered by name."""
        response = execute(
            self.client.table("profiles")
            .select("id, name, email")
            .order("name", desc=False),
            "list profiles",
        )
        return [_parse_row(row) for row in response.data or []]

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a profile by id, if present."""
        response = execute(
            self.client.table("profiles")
            .select("id, name, email")
            .eq("id", str(user_id))
            .limit(1),
            "get profile",
        )
        if response.data:
            return _parse_row(response.data[0])
        return None


def _parse_row(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
    )
