"""Application factory and server entry point."""

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrob import __version__
from scrob.api.exception_handlers import register_exception_handlers
from scrob.api.routers import api_router
from scrob.config import Settings, get_settings
from scrob.infrastructure.lifecycle import lifespan
from scrob.infrastructure.observability import RequestLoggingMiddleware


# Hey future me, this is the ONE place where configuration is loaded. Pass a Settings object in
# (tests do) or get the env/.env one. Everything downstream reads app.state.settings or gets its
# section through a constructor.
def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Explicit settings; loaded from the environment when omitted

    Returns:
        Configured application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="scrob",
        description="Self-hosted scrobble tracker",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=False,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["Authorization", "Content-Type", "X-Correlation-ID"],
        )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


def run() -> None:
    """Run the server with uvicorn (console script ``scrob``)."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.api.host,
        port=settings.api.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
