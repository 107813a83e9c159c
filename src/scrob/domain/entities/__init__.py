"""Domain entities."""

from dataclasses import dataclass

from scrob.domain.value_objects import TokenState


# Yo, User is the DOMAIN ENTITY (not DB model)! Plain dataclass, the domain layer doesn't
# depend on SQLAlchemy or Pydantic. password_hash is the bcrypt string ($2b$12$...), the
# plaintext never leaves the CredentialStore. Username comparisons are case-SENSITIVE.
@dataclass
class User:
    """A registered listener."""

    id: int
    username: str
    password_hash: str
    is_admin: bool
    created_at: int


# Hey future me - token is ONLY populated right after issue()! The store keeps a SHA-256
# digest, so a token read back from the DB has token=None. Don't try to "fix" that by
# storing the plaintext again.
@dataclass
class ApiToken:
    """A bearer credential owned by one user."""

    id: int
    user_id: int
    label: str | None
    created_at: int
    last_used_at: int | None
    state: TokenState = TokenState.ACTIVE
    token: str | None = None

    @property
    def revoked(self) -> bool:
        """Check if the token has been revoked."""
        return self.state is TokenState.REVOKED

    @property
    def is_usable(self) -> bool:
        """Check if the token may authenticate requests."""
        return self.state is TokenState.ACTIVE


@dataclass
class Scrob:
    """A persisted play event."""

    id: int
    user_id: int
    artist: str
    track: str
    album: str | None
    duration: int | None
    timestamp: int
    created_at: int


# Listen up, ScrobDraft is a play event that has passed validation but has no id yet.
# IngestionService builds these, ScrobRepository.add_batch() turns them into Scrob rows.
@dataclass(frozen=True)
class ScrobDraft:
    """A validated play event awaiting persistence."""

    artist: str
    track: str
    timestamp: int
    album: str | None = None
    duration: int | None = None


@dataclass(frozen=True)
class NowPlaying:
    """A validated now-playing notification (never persisted)."""

    artist: str
    track: str
    album: str | None = None


@dataclass(frozen=True)
class TopArtist:
    """An artist with its play count."""

    name: str
    count: int


@dataclass(frozen=True)
class TopTrack:
    """An (artist, track) pair with its play count."""

    artist: str
    track: str
    count: int


# Hey future me, AuthUser is the ONLY thing handlers may use to decide who is calling!
# Never read a user id out of a request body. token_id is the token that authenticated
# this request (used by logout).
@dataclass(frozen=True)
class AuthUser:
    """The authenticated principal of a request."""

    user_id: int
    username: str
    is_admin: bool
    token_id: int


__all__ = [
    "ApiToken",
    "AuthUser",
    "NowPlaying",
    "Scrob",
    "ScrobDraft",
    "TokenState",
    "TopArtist",
    "TopTrack",
    "User",
]
