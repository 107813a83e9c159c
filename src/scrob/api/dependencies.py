"""Dependency injection for FastAPI."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scrob.application.services import (
    AggregationService,
    CredentialStore,
    IngestionService,
    SessionResolver,
    TokenLedger,
)
from scrob.config import Settings
from scrob.domain.entities import AuthUser
from scrob.infrastructure.persistence import (
    ApiTokenRepository,
    Database,
    ScrobRepository,
    UserRepository,
)


# Hey future me - settings are built ONCE in create_app() and parked on app.state. Nothing in
# here calls get_settings(); that keeps tests free to hand in their own Settings object.
def get_settings_from_app(request: Request) -> Settings:
    """Get the application settings."""
    settings: Settings = request.app.state.settings
    return settings


# Yo, one session per request = one unit of work. Write routes call session.commit() themselves
# before building the response; anything left over (read routes, last_used_at) is committed when
# session_scope exits. Any exception rolls the whole request back.
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    db: Database = request.app.state.db
    async with db.session_scope() as session:
        yield session


def get_user_repository(
    session: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    """Get user repository instance."""
    return UserRepository(session)


def get_token_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ApiTokenRepository:
    """Get API token repository instance."""
    return ApiTokenRepository(session)


def get_scrob_repository(
    session: AsyncSession = Depends(get_db_session),
) -> ScrobRepository:
    """Get scrobble repository instance."""
    return ScrobRepository(session)


def get_credential_store(
    user_repo: UserRepository = Depends(get_user_repository),
    settings: Settings = Depends(get_settings_from_app),
) -> CredentialStore:
    """Get credential store instance."""
    return CredentialStore(user_repo, settings.security)


def get_token_ledger(
    token_repo: ApiTokenRepository = Depends(get_token_repository),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings_from_app),
) -> TokenLedger:
    """Get token ledger instance."""
    return TokenLedger(token_repo, settings.security, session=session)


def get_session_resolver(
    ledger: TokenLedger = Depends(get_token_ledger),
) -> SessionResolver:
    """Get session resolver instance."""
    return SessionResolver(ledger)


def get_ingestion_service(
    scrob_repo: ScrobRepository = Depends(get_scrob_repository),
    settings: Settings = Depends(get_settings_from_app),
) -> IngestionService:
    """Get ingestion service instance."""
    return IngestionService(scrob_repo, settings.ingestion)


def get_aggregation_service(
    scrob_repo: ScrobRepository = Depends(get_scrob_repository),
) -> AggregationService:
    """Get aggregation service instance."""
    return AggregationService(scrob_repo)


# Listen up, THIS is the gate for every protected route. Declare `user: AuthUser =
# Depends(get_current_user)` and use ONLY user.user_id for scoping - never an id from the body
# or the query string. Failures raise AuthenticationError subclasses, which the exception
# handlers turn into a generic 401.
async def get_current_user(
    authorization: str | None = Header(default=None),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> AuthUser:
    """Authenticate the request from its Authorization header."""
    return await resolver.authenticate(authorization)
