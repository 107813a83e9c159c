"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). This is the base class - DON'T raise it directly! Always use a specific
    # subclass so callers (and the exception handlers) can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found.

    HTTP Status: 404
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityException(DomainException):
    """Raised when trying to create a duplicate entity.

    HTTP Status: 409
    """

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} already exists")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainException):
    """Input validation failed.

    Carries the offending field path (e.g. ``scrobbles[2].artist``) so clients
    can fix the request. Messages never include data of other users.

    HTTP Status: 422

    Example:
        raise ValidationError("must not be empty", field="scrobbles[0].track")
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AuthenticationError(DomainException):
    """Caller could not be authenticated.

    All subclasses are surfaced identically as a generic 401 "Unauthorized";
    the subclass only tells the server-side log what went wrong.

    HTTP Status: 401
    """

    pass


class InvalidCredentials(AuthenticationError):
    """Unknown username or wrong password (deliberately indistinguishable)."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class MissingOrMalformedCredential(AuthenticationError):
    """Authorization header absent or not of the form ``Bearer <token>``."""

    def __init__(self, message: str = "Missing or malformed bearer credential") -> None:
        super().__init__(message)


class InvalidOrRevokedToken(AuthenticationError):
    """Bearer token is unknown or has been revoked."""

    def __init__(self, message: str = "Invalid or revoked token") -> None:
        super().__init__(message)


class AuthorizationError(DomainException):
    """User is authenticated but not allowed to touch this resource.

    HTTP Status: 403
    """

    pass


class StoreUnavailableError(DomainException):
    """The durable store could not be reached.

    Not retried internally; surfaced as a retryable server error so callers
    can resend a whole batch safely (batches are all-or-nothing).

    HTTP Status: 503
    """

    def __init__(self, message: str = "Store temporarily unavailable") -> None:
        super().__init__(message)


class ConfigurationError(DomainException):
    """Application misconfiguration.

    HTTP Status: 503
    """

    pass


# Short aliases.
AuthFailure = AuthenticationError
Forbidden = AuthorizationError
NotFound = EntityNotFoundException


__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "DuplicateEntityException",
    "ValidationError",
    "AuthenticationError",
    "InvalidCredentials",
    "MissingOrMalformedCredential",
    "InvalidOrRevokedToken",
    "AuthorizationError",
    "StoreUnavailableError",
    "ConfigurationError",
    "AuthFailure",
    "Forbidden",
    "NotFound",
]
