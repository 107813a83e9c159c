"""API module for scrob.

Structure:
- routers/: All API endpoints (auth, scrobble, stats, health)
- schemas/: Pydantic models for request/response
- dependencies.py: Dependency injection (repositories, services, current user)
- exception_handlers.py: Global error handlers
"""

from scrob.api.routers import api_router, auth, health, scrobble, stats

__all__ = [
    "api_router",
    "auth",
    "health",
    "scrobble",
    "stats",
]
