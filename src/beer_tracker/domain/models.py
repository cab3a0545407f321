"""Domain models for the beer tracker."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user profile stored in the database."""

    id: UUID
    name: str
    email: str


@dataclass(frozen=True)
class SessionContext:
    """The authenticated user a request acts on behalf of."""

    user: UserRecord

    @property
    def user_id(self) -> UUID:
        return self.user.id
