"""Ingestion endpoints: now playing and scrobble submission."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrob.api.dependencies import get_current_user, get_db_session, get_ingestion_service
from scrob.api.schemas import (
    NowPlayingRequest,
    NowPlayingResponse,
    ScrobRequest,
    ScrobResponse,
)
from scrob.application.services import IngestionService
from scrob.domain.entities import AuthUser

router = APIRouter()


@router.post("/now", response_model=NowPlayingResponse)
async def now_playing(
    payload: NowPlayingRequest,
    user: AuthUser = Depends(get_current_user),
    ingestion: IngestionService = Depends(get_ingestion_service),
) -> NowPlayingResponse:
    """Acknowledge what the user is listening to right now (not stored)."""
    await ingestion.record_now_playing(user, payload.model_dump())
    return NowPlayingResponse()


# Yo, clients may send ONE object or a LIST - the response is always a list in submission order.
# The whole batch is one transaction: the explicit commit below is the only point where rows
# become visible, and a ValidationError before it means nothing was written.
@router.post(
    "/scrob",
    response_model=list[ScrobResponse],
    status_code=status.HTTP_200_OK,
)
async def scrob(
    payload: ScrobRequest | list[ScrobRequest],
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    ingestion: IngestionService = Depends(get_ingestion_service),
) -> list[ScrobResponse]:
    """Record one or more plays."""
    entries = payload if isinstance(payload, list) else [payload]
    scrobs = await ingestion.record_scrobbles(user, [entry.model_dump() for entry in entries])
    await session.commit()
    return [ScrobResponse.from_entity(s) for s in scrobs]
