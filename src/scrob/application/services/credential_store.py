"""Credential Store - password verification and user bootstrap.

Hey future me - this is the ONLY place that touches plaintext passwords!
bcrypt does the heavy lifting: salted one-way hash, constant-time checkpw().
bcrypt is deliberately slow (cost 12 ≈ 250ms), so every call goes through
asyncio.to_thread() - never block the event loop with a hash.
"""

from __future__ import annotations

import asyncio
import logging

import bcrypt

from scrob.config import SecuritySettings
from scrob.domain.entities import User
from scrob.domain.exceptions import (
    DuplicateEntityException,
    InvalidCredentials,
    ValidationError,
)
from scrob.domain.ports import IUserRepository
from scrob.domain.value_objects import epoch_now

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer inputs raise ValueError in bcrypt>=4.1
BCRYPT_MAX_PASSWORD_BYTES = 72

# One dummy hash per cost factor, shared by all stores (the store itself is per request)
_DUMMY_HASHES: dict[int, bytes] = {}


class CredentialStore:
    """Verifies username/password pairs and creates users."""

    def __init__(self, user_repo: IUserRepository, settings: SecuritySettings) -> None:
        """Initialize the store.

        Args:
            user_repo: User repository bound to the current unit of work
            settings: Security settings (bcrypt cost factor)
        """
        self._user_repo = user_repo
        self._settings = settings

    def hash_password(self, plaintext: str) -> str:
        """Hash a password with a fresh salt at the configured cost."""
        salt = bcrypt.gensalt(rounds=self._settings.bcrypt_rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def _check(plaintext: str, hashed: bytes) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), hashed)
        except ValueError:
            # Over-long password or a corrupt stored hash - both are simply "no match"
            return False

    # Listen up, verify() answers "unknown user" and "wrong password" with the SAME exception
    # AND roughly the same latency: an unknown username is still checked against a dummy hash.
    # Otherwise a stopwatch tells an attacker which usernames exist.
    async def verify(self, username: str, plaintext_password: str) -> User:
        """Verify a username/password pair.

        Args:
            username: Exact (case-sensitive) username
            plaintext_password: Password as typed by the user

        Returns:
            The matching User

        Raises:
            InvalidCredentials: Unknown user or wrong password (indistinguishable)
        """
        user = await self._user_repo.get_by_username(username)
        if user is None:
            await asyncio.to_thread(self._check_dummy, plaintext_password)
            logger.info("Login failed: unknown user")
            raise InvalidCredentials()

        matches = await asyncio.to_thread(
            self._check, plaintext_password, user.password_hash.encode("utf-8")
        )
        if not matches:
            logger.info("Login failed: bad password", extra={"user_id": user.id})
            raise InvalidCredentials()

        return user

    async def create_user(
        self, username: str, plaintext_password: str, is_admin: bool = False
    ) -> User:
        """Create a user (bootstrap path, there is no self-registration).

        Args:
            username: Unique, case-sensitive username
            plaintext_password: Initial password
            is_admin: Administrator flag

        Returns:
            The created User

        Raises:
            ValidationError: Empty username/password or password over 72 bytes
            DuplicateEntityException: Username already taken
        """
        if not username or not username.strip():
            raise ValidationError("must not be empty", field="username")
        if not plaintext_password:
            raise ValidationError("must not be empty", field="password")
        if len(plaintext_password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes", field="password"
            )

        if await self._user_repo.get_by_username(username) is not None:
            raise DuplicateEntityException("User", username)

        password_hash = await asyncio.to_thread(self.hash_password, plaintext_password)
        user = await self._user_repo.add(
            username=username,
            password_hash=password_hash,
            is_admin=is_admin,
            created_at=epoch_now(),
        )
        logger.info(
            "Created user %s", username, extra={"user_id": user.id, "is_admin": is_admin}
        )
        return user

    def _check_dummy(self, plaintext: str) -> bool:
        rounds = self._settings.bcrypt_rounds
        if rounds not in _DUMMY_HASHES:
            _DUMMY_HASHES[rounds] = bcrypt.hashpw(
                b"scrob-dummy-password", bcrypt.gensalt(rounds=rounds)
            )
        return self._check(plaintext, _DUMMY_HASHES[rounds])
