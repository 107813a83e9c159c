"""API router initialization."""

# Hey future me, this is the MAIN API router aggregator! Routes live at the root (POST /login,
# POST /scrob, GET /top/artists, ...) because that is what scrobbler clients are configured
# against - don't add an /api prefix in main.py.

from fastapi import APIRouter

from scrob.api.routers import auth, health, scrobble, stats

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["Health"])
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(scrobble.router, tags=["Scrobbles"])
api_router.include_router(stats.router, tags=["Stats"])

__all__ = [
    "api_router",
    "auth",
    "health",
    "scrobble",
    "stats",
]
