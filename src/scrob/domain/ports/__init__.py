"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from scrob.domain.entities import (
    ApiToken,
    Scrob,
    ScrobDraft,
    TopArtist,
    TopTrack,
    User,
)
from scrob.domain.value_objects import TimeRange


# Hey future me, these are PORTS (Hexagonal Architecture)! Services depend on these ABCs, the
# SQLAlchemy implementations live in infrastructure/persistence/repositories.py. Tests can mock
# them easily. None of these methods commit - the unit of work (Database.session_scope) does.
class IUserRepository(ABC):
    """Repository interface for User entities."""

    @abstractmethod
    async def add(
        self, username: str, password_hash: str, is_admin: bool, created_at: int
    ) -> User:
        """Insert a new user and return it with its id."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by id."""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> User | None:
        """Get a user by exact (case-sensitive) username."""
        pass


class IApiTokenRepository(ABC):
    """Repository interface for ApiToken entities."""

    @abstractmethod
    async def add(
        self, user_id: int, token_hash: str, label: str | None, created_at: int
    ) -> ApiToken:
        """Insert a new active token."""
        pass

    @abstractmethod
    async def get_by_id(self, token_id: int) -> ApiToken | None:
        """Get a token by id regardless of owner or state."""
        pass

    @abstractmethod
    async def find_active_by_hash(self, token_hash: str) -> tuple[User, ApiToken] | None:
        """Get an active token and its owner in one lookup."""
        pass

    @abstractmethod
    async def touch_last_used(self, token_id: int, used_at: int) -> None:
        """Record the time of the latest successful resolution."""
        pass

    @abstractmethod
    async def mark_revoked(self, token_id: int, user_id: int) -> bool:
        """Revoke a token owned by user_id; False if no such token."""
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int) -> list[ApiToken]:
        """List all tokens of a user, newest first."""
        pass


class IScrobRepository(ABC):
    """Repository interface for Scrob entities."""

    @abstractmethod
    async def add_batch(
        self, user_id: int, drafts: Sequence[ScrobDraft], created_at: int
    ) -> list[Scrob]:
        """Insert all drafts in one unit of work, returned in input order."""
        pass

    @abstractmethod
    async def list_recent(self, user_id: int, limit: int) -> list[Scrob]:
        """List plays ordered by (timestamp desc, id desc)."""
        pass

    @abstractmethod
    async def top_artists(
        self, user_id: int, limit: int, time_range: TimeRange | None = None
    ) -> list[TopArtist]:
        """Rank artists by play count."""
        pass

    @abstractmethod
    async def top_tracks(
        self, user_id: int, limit: int, time_range: TimeRange | None = None
    ) -> list[TopTrack]:
        """Rank (artist, track) pairs by play count."""
        pass

    @abstractmethod
    async def count_for_user(self, user_id: int) -> int:
        """Count all plays of a user."""
        pass


__all__ = [
    "IApiTokenRepository",
    "IScrobRepository",
    "IUserRepository",
]
