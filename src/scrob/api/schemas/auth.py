"""API schemas for login, the current user and token management."""

from pydantic import BaseModel, Field

from scrob.domain.entities import ApiToken


class LoginRequest(BaseModel):
    """Request schema for password login."""

    username: str = Field(..., description="Exact, case-sensitive username")
    password: str = Field(..., description="Plaintext password")


class LoginResponse(BaseModel):
    """Response schema for a successful login."""

    token: str = Field(..., description="Bearer token for the Authorization header")
    username: str
    is_admin: bool


class MeResponse(BaseModel):
    """Response schema for the authenticated user."""

    id: int
    username: str
    is_admin: bool
    created_at: int = Field(..., description="Account creation time (epoch seconds)")
    scrobble_count: int = Field(..., description="Total number of recorded plays")


class TokenCreateRequest(BaseModel):
    """Request schema for issuing an additional API token."""

    label: str | None = Field(default=None, max_length=255, description="Free-form label")


# Hey future me - TokenResponse never carries the token value! Only TokenCreatedResponse does,
# and only in the response to the request that created it.
class TokenResponse(BaseModel):
    """Response schema for a stored API token (value withheld)."""

    id: int
    label: str | None
    created_at: int
    last_used_at: int | None
    revoked: bool

    @classmethod
    def from_entity(cls, token: ApiToken) -> "TokenResponse":
        """Build from a domain token."""
        return cls(
            id=token.id,
            label=token.label,
            created_at=token.created_at,
            last_used_at=token.last_used_at,
            revoked=token.revoked,
        )


class TokenCreatedResponse(TokenResponse):
    """Response schema for a freshly issued token (value shown once)."""

    token: str

    @classmethod
    def from_entity(cls, token: ApiToken) -> "TokenCreatedResponse":
        """Build from a freshly issued domain token."""
        return cls(
            id=token.id,
            label=token.label,
            created_at=token.created_at,
            last_used_at=token.last_used_at,
            revoked=token.revoked,
            token=token.token or "",
        )
