"""Session Resolver - turns an Authorization header into an AuthUser."""

from __future__ import annotations

from scrob.application.services.token_ledger import TokenLedger
from scrob.domain.entities import AuthUser
from scrob.domain.exceptions import MissingOrMalformedCredential

BEARER_PREFIX = "Bearer "


# Hey future me - the scheme is CASE-SENSITIVE on purpose: "bearer abc" and "BEARER abc" are
# malformed. Exactly one space after "Bearer", then the token with no whitespace in or around it.
def parse_bearer_token(header_value: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` value.

    Args:
        header_value: Raw header value, or None if the header was absent

    Returns:
        The token

    Raises:
        MissingOrMalformedCredential: Header absent, wrong scheme or empty token
    """
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        raise MissingOrMalformedCredential()
    token = header_value[len(BEARER_PREFIX) :]
    if not token or any(char.isspace() for char in token):
        raise MissingOrMalformedCredential()
    return token


class SessionResolver:
    """Gate in front of every protected operation.

    Exactly one ledger lookup per call and no cache, so a revocation is
    effective for the very next request.
    """

    def __init__(self, ledger: TokenLedger) -> None:
        self._ledger = ledger

    async def authenticate(self, header_value: str | None) -> AuthUser:
        """Authenticate a request from its Authorization header.

        Raises:
            MissingOrMalformedCredential: Header absent or malformed
            InvalidOrRevokedToken: Token unknown or revoked
        """
        token_value = parse_bearer_token(header_value)
        user, token = await self._ledger.resolve(token_value)
        return AuthUser(
            user_id=user.id,
            username=user.username,
            is_admin=user.is_admin,
            token_id=token.id,
        )
