"""Database session management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from scrob.config import DatabaseSettings
from scrob.domain.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class Database:
    """Database connection and session manager."""

    def __init__(self, settings: DatabaseSettings) -> None:
        """Initialize database with settings."""
        self.settings = settings

        engine_kwargs: dict[str, Any] = {
            "echo": settings.echo,
            "pool_pre_ping": settings.pool_pre_ping,
        }

        # Only apply pool settings for PostgreSQL
        if "postgresql" in settings.url:
            engine_kwargs.update(
                {
                    "pool_size": settings.pool_size,
                    "max_overflow": settings.max_overflow,
                    "pool_timeout": settings.pool_timeout,
                    "pool_recycle": settings.pool_recycle,
                }
            )
        elif "sqlite" in settings.url:
            engine_kwargs.update(
                {
                    "connect_args": {
                        "check_same_thread": False,
                        "timeout": 30,  # Wait up to 30s for lock
                    }
                }
            )

        self._engine = create_async_engine(settings.url, **engine_kwargs)

        # api_tokens and scrobs cascade with their user - needs FKs on in SQLite
        if "sqlite" in settings.url:
            self._enable_sqlite_foreign_keys()

        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _enable_sqlite_foreign_keys(self) -> None:
        """Enable foreign key constraints for SQLite.

        SQLite has foreign keys disabled by default. This method enables them
        for all connections.
        """

        @event.listens_for(self._engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_conn: Any, _connection_record: Any) -> None:
            """Set SQLite pragmas on connection."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            logger.debug("Enabled foreign keys for SQLite connection")

    # Hey future me, this is THE unit of work! One session == one transaction. Everything a
    # request writes (a whole scrobble batch, a token + its last_used_at) commits together or
    # not at all. Connectivity failures are translated to StoreUnavailableError so the API can
    # answer 503 + Retry-After; we never retry here - the caller decides.
    @asynccontextmanager
    async def session_scope(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a transactional scope for database operations."""
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except (OperationalError, InterfaceError) as exc:
                await session.rollback()
                logger.error(
                    "Database unavailable: %s",
                    str(exc)[:200],
                    extra={"error_type": type(exc).__name__},
                )
                raise StoreUnavailableError() from exc
            except Exception:
                # Rollback on any exception - all exceptions are re-raised for proper handling.
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self._engine.dispose()

    async def create_tables(self) -> None:
        """Create all tables (idempotent)."""
        from scrob.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop all tables (for testing only)."""
        from scrob.infrastructure.persistence.models import Base

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
