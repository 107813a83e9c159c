"""Authentication endpoints: login, logout, current user and API tokens."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from scrob.api.dependencies import (
    get_aggregation_service,
    get_credential_store,
    get_current_user,
    get_db_session,
    get_settings_from_app,
    get_token_ledger,
    get_user_repository,
)
from scrob.api.schemas import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    TokenCreatedResponse,
    TokenCreateRequest,
    TokenResponse,
)
from scrob.application.services import AggregationService, CredentialStore, TokenLedger
from scrob.config import Settings
from scrob.domain.entities import AuthUser
from scrob.domain.exceptions import InvalidOrRevokedToken
from scrob.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter()


# Hey future me, login = verify password + issue a token labelled "session". Wrong username and
# wrong password both end up as the same 401 (InvalidCredentials -> exception handler).
@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
    credentials: CredentialStore = Depends(get_credential_store),
    ledger: TokenLedger = Depends(get_token_ledger),
    settings: Settings = Depends(get_settings_from_app),
) -> LoginResponse:
    """Exchange username and password for a bearer token."""
    user = await credentials.verify(payload.username, payload.password)
    token = await ledger.issue(user, label=settings.security.session_token_label)
    await session.commit()
    logger.info("User logged in", extra={"user_id": user.id})
    return LoginResponse(
        token=token.token or "",
        username=user.username,
        is_admin=user.is_admin,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    ledger: TokenLedger = Depends(get_token_ledger),
) -> Response:
    """Revoke the token used for this request."""
    await ledger.revoke(user.token_id, user.user_id)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=MeResponse)
async def me(
    user: AuthUser = Depends(get_current_user),
    user_repo: UserRepository = Depends(get_user_repository),
    aggregation: AggregationService = Depends(get_aggregation_service),
) -> MeResponse:
    """Get the authenticated user."""
    record = await user_repo.get_by_id(user.user_id)
    if record is None:
        # Owner vanished between token lookup and now
        raise InvalidOrRevokedToken()
    return MeResponse(
        id=record.id,
        username=record.username,
        is_admin=record.is_admin,
        created_at=record.created_at,
        scrobble_count=await aggregation.scrobble_count(user),
    )


@router.get("/tokens", response_model=list[TokenResponse])
async def list_tokens(
    user: AuthUser = Depends(get_current_user),
    ledger: TokenLedger = Depends(get_token_ledger),
) -> list[TokenResponse]:
    """List the caller's tokens, newest first (values are never shown)."""
    tokens = await ledger.list_for_user(user.user_id)
    return [TokenResponse.from_entity(token) for token in tokens]


@router.post(
    "/tokens",
    response_model=TokenCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_token(
    payload: TokenCreateRequest | None = None,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    user_repo: UserRepository = Depends(get_user_repository),
    ledger: TokenLedger = Depends(get_token_ledger),
) -> TokenCreatedResponse:
    """Issue an additional token for the caller (e.g. for a scrobbler client)."""
    owner = await user_repo.get_by_id(user.user_id)
    if owner is None:
        raise InvalidOrRevokedToken()
    label = payload.label if payload else None
    token = await ledger.issue(owner, label=label)
    await session.commit()
    return TokenCreatedResponse.from_entity(token)


@router.delete("/tokens/{token_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_token(
    token_id: int,
    user: AuthUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    ledger: TokenLedger = Depends(get_token_ledger),
) -> Response:
    """Revoke one of the caller's tokens (404 unknown, 403 someone else's)."""
    await ledger.revoke(token_id, user.user_id)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
