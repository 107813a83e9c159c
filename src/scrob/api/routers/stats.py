"""Listening statistics endpoints: recent plays and rankings."""

from fastapi import APIRouter, Depends, Query

from scrob.api.dependencies import get_aggregation_service, get_current_user
from scrob.api.schemas import ScrobResponse, TopArtistResponse, TopTrackResponse
from scrob.application.services import AggregationService
from scrob.domain.entities import AuthUser
from scrob.domain.value_objects import INT64_MAX, TimeRange

router = APIRouter()


# Hey future me - NO ge/le on limit! Out-of-range values are clamped silently by the service
# (0 -> 1, 1000 -> 100). A Query(ge=1, le=100) would turn that into a 422.
# since/until ARE bounded: they go straight into SQL and must fit a BIGINT.
@router.get("/recent", response_model=list[ScrobResponse])
async def recent(
    limit: int | None = Query(default=None, description="Max rows (clamped to 1..100, default 20)"),
    user: AuthUser = Depends(get_current_user),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> list[ScrobResponse]:
    """Latest plays of the caller, newest first."""
    scrobs = await aggregation.recent(user, limit)
    return [ScrobResponse.from_entity(s) for s in scrobs]


@router.get("/top/artists", response_model=list[TopArtistResponse])
async def top_artists(
    limit: int | None = Query(default=None, description="Max rows (clamped to 1..100, default 10)"),
    since: int | None = Query(
        default=None, ge=0, le=INT64_MAX, description="Only plays at/after this epoch second"
    ),
    until: int | None = Query(
        default=None, ge=0, le=INT64_MAX, description="Only plays at/before this epoch second"
    ),
    user: AuthUser = Depends(get_current_user),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> list[TopArtistResponse]:
    """The caller's most played artists."""
    artists = await aggregation.top_artists(user, limit, TimeRange(since=since, until=until))
    return [TopArtistResponse(name=a.name, count=a.count) for a in artists]


@router.get("/top/tracks", response_model=list[TopTrackResponse])
async def top_tracks(
    limit: int | None = Query(default=None, description="Max rows (clamped to 1..100, default 10)"),
    since: int | None = Query(
        default=None, ge=0, le=INT64_MAX, description="Only plays at/after this epoch second"
    ),
    until: int | None = Query(
        default=None, ge=0, le=INT64_MAX, description="Only plays at/before this epoch second"
    ),
    user: AuthUser = Depends(get_current_user),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> list[TopTrackResponse]:
    """The caller's most played tracks (album ignored)."""
    tracks = await aggregation.top_tracks(user, limit, TimeRange(since=since, until=until))
    return [TopTrackResponse(artist=t.artist, track=t.track, count=t.count) for t in tracks]
