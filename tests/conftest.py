"""Shared fixtures.

Hey future me - every test gets its OWN SQLite file under tmp_path and bcrypt
at cost 4 (cost 12 would make the suite crawl). Settings are built explicitly,
never read from the developer's .env.
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from scrob.config import DatabaseSettings, SecuritySettings, Settings
from scrob.infrastructure.persistence import Database


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a temporary SQLite database."""
    return Settings(
        _env_file=None,
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path}/test.db"),
        security=SecuritySettings(bcrypt_rounds=4),
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Database with all tables created."""
    db = Database(settings.database)
    await db.create_tables()
    yield db
    await db.close()
