"""Token Ledger - issue, resolve and revoke bearer tokens."""

from __future__ import annotations

import hashlib
import logging
import secrets
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scrob.config import SecuritySettings
from scrob.domain.entities import ApiToken, User
from scrob.domain.exceptions import (
    AuthorizationError,
    EntityNotFoundException,
    InvalidOrRevokedToken,
)
from scrob.domain.ports import IApiTokenRepository
from scrob.domain.value_objects import INT64_MAX, epoch_now

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """Return the SHA-256 hex digest under which a token value is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


# Hey future me, tokens are capability secrets: whoever holds one IS the user. We store only the
# SHA-256 digest (tokens are 256 random bits, so a plain fast hash is fine - no bcrypt needed
# here). A leaked database dump therefore can't be replayed against the API.
class TokenLedger:
    """Issues, resolves and revokes API tokens."""

    def __init__(
        self,
        token_repo: IApiTokenRepository,
        settings: SecuritySettings,
        session: AsyncSession | None = None,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        """Initialize the ledger.

        Args:
            token_repo: Token repository bound to the current unit of work
            settings: Security settings (token entropy)
            session: Session of the unit of work; when given, the last_used_at refresh runs
                in a SAVEPOINT so its failure can't poison the surrounding transaction
            clock: Source of epoch seconds (overridable in tests)
        """
        self._token_repo = token_repo
        self._settings = settings
        self._session = session
        self._clock = clock

    async def issue(self, user: User, label: str | None = None) -> ApiToken:
        """Issue a fresh active token for user.

        Args:
            user: Owner of the new token
            label: Optional human-readable label

        Returns:
            The token, with its plaintext value set (the only time it is visible)
        """
        token_value = secrets.token_urlsafe(self._settings.token_bytes)
        token = await self._token_repo.add(
            user_id=user.id,
            token_hash=hash_token(token_value),
            label=label,
            created_at=self._clock(),
        )
        token.token = token_value
        logger.info(
            "Issued API token", extra={"user_id": user.id, "token_id": token.id, "label": label}
        )
        return token

    # Listen up, resolve() is ONE lookup (token joined with owner, revoked=false). The
    # last_used_at refresh afterwards is best-effort: if it blows up we log a WARNING and still
    # authenticate - a bookkeeping write must never lock a user out.
    async def resolve(self, token_value: str) -> tuple[User, ApiToken]:
        """Resolve a token value to its owner.

        Args:
            token_value: Plaintext bearer token

        Returns:
            (owner, token) for an active token

        Raises:
            InvalidOrRevokedToken: Unknown or revoked token (indistinguishable)
        """
        found = await self._token_repo.find_active_by_hash(hash_token(token_value))
        if found is None:
            raise InvalidOrRevokedToken()

        user, token = found
        now = self._clock()
        try:
            if self._session is not None:
                async with self._session.begin_nested():
                    await self._token_repo.touch_last_used(token.id, now)
            else:
                await self._token_repo.touch_last_used(token.id, now)
        except SQLAlchemyError as e:
            logger.warning(
                "Could not refresh last_used_at: %s",
                type(e).__name__,
                extra={"token_id": token.id, "error_type": type(e).__name__},
            )
        else:
            token.last_used_at = now
        return user, token

    async def revoke(self, token_id: int, owner: User | int) -> None:
        """Revoke a token owned by owner.

        Revoking an own token that is already revoked is a no-op.

        Args:
            token_id: Token to revoke
            owner: Owning user (or its id)

        Raises:
            EntityNotFoundException: No token with this id
            AuthorizationError: Token belongs to someone else
        """
        owner_id = owner.id if isinstance(owner, User) else owner
        # No row can carry an id outside BIGINT range, and the driver would overflow on it.
        if abs(token_id) > INT64_MAX:
            raise EntityNotFoundException("ApiToken", token_id)
        if await self._token_repo.mark_revoked(token_id, owner_id):
            logger.info("Revoked API token", extra={"user_id": owner_id, "token_id": token_id})
            return

        existing = await self._token_repo.get_by_id(token_id)
        if existing is None:
            raise EntityNotFoundException("ApiToken", token_id)
        logger.warning(
            "Refused to revoke token of another user",
            extra={"user_id": owner_id, "token_id": token_id},
        )
        raise AuthorizationError("Token belongs to another user")

    async def list_for_user(self, user_id: int) -> list[ApiToken]:
        """List a user's tokens (without values), newest first."""
        return await self._token_repo.list_for_user(user_id)
