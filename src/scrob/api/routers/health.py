# Hey future me - liveness only! These endpoints never touch the database and need no token.
# A store outage shows up as 503 on real requests, not here.
#
# Use cases:
# - Docker HEALTHCHECK: curl -f http://localhost:3000/health/live || exit 1
# - K8s livenessProbe: /health/live
"""Liveness endpoints for Docker/Kubernetes probes."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter()


class LivenessStatus(BaseModel):
    """Simple liveness probe response."""

    status: str = Field(description="alive")
    timestamp: str = Field(description="ISO timestamp")
    version: str = Field(description="Application version")


def _alive(request: Request) -> LivenessStatus:
    return LivenessStatus(
        status="alive",
        timestamp=datetime.now(UTC).isoformat(),
        version=request.app.version,
    )


@router.get("", response_model=LivenessStatus)
async def health(request: Request) -> LivenessStatus:
    """Report that the service is up (no dependency checks)."""
    return _alive(request)


@router.get("/live", response_model=LivenessStatus)
async def liveness_probe(request: Request) -> LivenessStatus:
    """Liveness probe for Kubernetes/Docker.

    Returns 200 if the application process is running.
    """
    return _alive(request)
