"""User roster lookups."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from beer_tracker.domain.errors import NotFoundError
from beer_tracker.domain.models import SessionContext, UserRecord


class UserRepository(Protocol):
    """Persistence interface for user profiles."""

    def list_users(self) -> list[UserRecord]:
        """Return all user profiles."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user profile by id, if present."""


@dataclass
class UserService:
    """Application service for the user roster."""

    repository: UserRepository

    def list_users(self) -> list[UserRecord]:
        """Return the roster."""
        return self.repository.list_users()

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return a user or raise NotFoundError."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    def session_for(self, user_id: UUID) -> SessionContext:
        """Build the session context for an authenticated user id."""
        return SessionContext(user=self.get_user(user_id))
