"""Application lifecycle management for startup and shutdown tasks.

This module handles the FastAPI lifespan context manager:
- Logging configuration
- SQLite path validation
- Database initialization and (optional) schema creation
- Admin bootstrap from the environment
- Resource cleanup
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from scrob.application.services import CredentialStore
from scrob.config import Settings
from scrob.domain.exceptions import ConfigurationError
from scrob.infrastructure.observability import configure_logging
from scrob.infrastructure.persistence import Database, UserRepository

logger = logging.getLogger(__name__)


# Hey future me, this validates SQLite paths BEFORE we create the engine. SQLite needs to create
# temp files (-journal, -wal) next to the .db file, so the directory must be writable. We DON'T
# pre-create the .db file - SQLite initializes it properly on first connection. Only runs for
# file-backed SQLite URLs.
def _validate_sqlite_path(settings: Settings) -> None:
    """Validate SQLite database path accessibility before engine creation."""
    db_path = settings._get_sqlite_db_path()
    if db_path is None:
        return

    try:
        if db_path.parent and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Ensured SQLite parent directory exists: %s", db_path.parent)
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to create SQLite database directory '{db_path.parent}': {exc}. "
            "Update DATABASE__URL or adjust directory permissions."
        ) from exc

    try:
        test_file = db_path.parent / f".{db_path.stem}_write_test"
        test_file.write_bytes(b"test")
        test_file.unlink()
    except OSError as exc:
        raise ConfigurationError(
            f"Unable to write files in database directory '{db_path.parent}': {exc}. "
            "SQLite requires write permissions to create database and journal files."
        ) from exc


# Yo, there's no self-registration. If BOOTSTRAP__ADMIN_USERNAME and BOOTSTRAP__ADMIN_PASSWORD
# are set and that user doesn't exist yet, we create it as admin. An existing user is left
# alone - we never overwrite a password from the environment.
async def _bootstrap_admin(db: Database, settings: Settings) -> None:
    """Create the configured admin user if missing."""
    bootstrap = settings.bootstrap
    if not bootstrap.is_configured:
        return
    username = bootstrap.admin_username or ""

    async with db.session_scope() as session:
        user_repo = UserRepository(session)
        if await user_repo.get_by_username(username) is not None:
            logger.info("Bootstrap admin '%s' already exists", username)
            return
        store = CredentialStore(user_repo, settings.security)
        await store.create_user(username, bootstrap.admin_password or "", is_admin=True)
    logger.info("Bootstrap admin '%s' created", username)


# Listen future me, everything before `yield` runs at STARTUP, everything after at SHUTDOWN.
# Settings come from app.state (create_app put them there) - no get_settings() in here, so a
# test can start the app against its own temporary database.
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings

    configure_logging(
        log_level=settings.log_level,
        json_format=settings.observability.log_json_format,
        app_name=settings.app_name,
    )
    logger.info("Starting application: %s", settings.app_name)

    try:
        _validate_sqlite_path(settings)

        db = Database(settings.database)
        app.state.db = db
        logger.info("Database initialized: %s", settings.database.url.split("@")[-1])

        if settings.database.create_schema_on_startup:
            await db.create_tables()
            logger.info("Database schema ensured")

        await _bootstrap_admin(db, settings)

        yield
    finally:
        logger.info("Shutting down application")
        db_to_close: Database | None = getattr(app.state, "db", None)
        if db_to_close is not None:
            await db_to_close.close()
            logger.info("Database connection closed")
