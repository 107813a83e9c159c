"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions
and validation errors into HTTP responses with the right status codes.

Hey future me - every authentication failure looks EXACTLY the same on the wire:
401, {"detail": "Unauthorized"}, WWW-Authenticate: Bearer. The concrete reason
(unknown user, wrong password, malformed header, revoked token) only goes to the
server log. Store connectivity problems become 503 + Retry-After so batch
senders know a resend is safe.
"""

import json
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import InterfaceError, OperationalError

from scrob.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    DuplicateEntityException,
    EntityNotFoundException,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5


# Hey future me - pydantic puts the offending input into each error dict. For /login that
# input is the password, so we drop it before logging or returning anything. Also decode any
# bytes (raw body) so the JSONResponse doesn't crash on serialization.
def _sanitize_validation_errors(
    errors: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Sanitize validation errors for logging and JSON output.

    Args:
        errors: List of validation error dictionaries from Pydantic

    Returns:
        Errors without "input"/"ctx" and with bytes decoded
    """

    def _sanitize_value(value: Any) -> Any:
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, dict):
            return {k: _sanitize_value(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_sanitize_value(item) for item in value]
        return value

    return [
        _sanitize_value({k: v for k, v in error.items() if k not in ("input", "ctx", "url")})
        for error in errors
    ]


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": "Unauthorized"},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _store_unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable, retry later"},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


# Hey future me, call this ONCE during app setup (create_app does) - handlers registered after
# startup are not picked up.
def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers for domain, validation and database exceptions.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle every authentication failure with the same generic 401."""
        logger.warning(
            "Authentication failed at %s: %s",
            request.url.path,
            type(exc).__name__,
            extra={"path": request.url.path, "reason": type(exc).__name__},
        )
        return _unauthorized()

    @app.exception_handler(AuthorizationError)
    async def authorization_error_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        """Handle authorization errors with 403 Forbidden."""
        logger.warning(
            "Authorization error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": "Forbidden"},
        )

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_exception_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        """Handle entity not found exceptions with 404 Not Found."""
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": exc.entity_id,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"{exc.entity_type} not found"},
        )

    @app.exception_handler(DuplicateEntityException)
    async def duplicate_entity_exception_handler(
        request: Request, exc: DuplicateEntityException
    ) -> JSONResponse:
        """Handle duplicate entity exceptions with 409 Conflict."""
        logger.info(
            "Duplicate entity at %s: %s",
            request.url.path,
            exc.entity_type,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": f"{exc.entity_type} already exists"},
        )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle domain validation errors with 422, naming the offending field."""
        logger.warning(
            "Validation error at %s: %s %s",
            request.url.path,
            exc.field,
            exc.message,
            extra={"path": request.url.path, "field": exc.field, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": exc.message, "field": exc.field},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic request validation errors with 422 Unprocessable Entity."""
        sanitized_errors = _sanitize_validation_errors(list(exc.errors()))
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            sanitized_errors,
            extra={"path": request.url.path, "errors": sanitized_errors},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": sanitized_errors},
        )

    @app.exception_handler(json.JSONDecodeError)
    async def json_decode_error_handler(
        request: Request, exc: json.JSONDecodeError
    ) -> JSONResponse:
        """Handle malformed JSON with 400 Bad Request."""
        logger.warning(
            "Malformed JSON at %s: %s",
            request.url.path,
            exc.msg,
            extra={"path": request.url.path, "error": exc.msg},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": f"Malformed JSON: {exc.msg}"},
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable_handler(
        request: Request, exc: StoreUnavailableError
    ) -> JSONResponse:
        """Handle store outages with a retryable 503."""
        logger.error(
            "Store unavailable at %s",
            request.url.path,
            extra={"path": request.url.path, "error": exc.message},
        )
        return _store_unavailable()

    # Connectivity errors raised outside session_scope (e.g. while a dependency opens the
    # connection) arrive here untranslated.
    @app.exception_handler(OperationalError)
    async def database_operational_error_handler(
        request: Request, exc: OperationalError
    ) -> JSONResponse:
        """Handle SQLAlchemy OperationalError with a retryable 503."""
        logger.error(
            "Database error at %s: %s",
            request.url.path,
            str(exc)[:500],
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return _store_unavailable()

    @app.exception_handler(InterfaceError)
    async def database_interface_error_handler(
        request: Request, exc: InterfaceError
    ) -> JSONResponse:
        """Handle SQLAlchemy InterfaceError with a retryable 503."""
        logger.error(
            "Database interface error at %s: %s",
            request.url.path,
            str(exc)[:500],
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return _store_unavailable()

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle configuration errors with 503 Service Unavailable."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Service misconfigured"},
        )
