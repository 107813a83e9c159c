"""Request logging middleware with correlation ids."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from scrob.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


# Only method, path and client address. Headers, query strings and bodies stay out of the
# logs: they carry bearer tokens and login passwords.
def _request_fields(request: Request) -> dict[str, Any]:
    return {
        "method": request.method,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else None,
    }


# Hey future me - one line when a request starts, one when it ends. 4xx is the client's
# problem and logs at INFO; 5xx and exceptions are ours and log louder. The correlation id
# from the client (or a fresh UUID) tags every record in between and goes back in the
# response header.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request and tag it with a correlation id."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        set_correlation_id(request.headers.get(CORRELATION_HEADER))
        fields = _request_fields(request)
        logger.info("%s %s started", fields["method"], fields["path"], extra=fields)

        started = time.monotonic()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "Request failed: %s %s",
                fields["method"],
                fields["path"],
                extra={
                    **fields,
                    "duration_ms": _elapsed_ms(started),
                    "error_type": type(exc).__name__,
                },
            )
            raise

        duration_ms = _elapsed_ms(started)
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d in %dms",
            fields["method"],
            fields["path"],
            response.status_code,
            duration_ms,
            extra={**fields, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
