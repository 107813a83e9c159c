"""Application settings loaded from environment variables and .env."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from scrob.domain.value_objects import INT64_MAX


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite+aiosqlite:///./data/scrob.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_pre_ping: bool = Field(default=True)
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=1)
    pool_recycle: int = Field(default=3600, ge=-1)
    # Hey future me - production deployments run `alembic upgrade head` instead.
    # create_all() is idempotent (checkfirst) so leaving this on is harmless.
    create_schema_on_startup: bool = Field(default=True)


class SecuritySettings(BaseModel):
    """Password hashing and token issuance settings."""

    bcrypt_rounds: int = Field(default=12, ge=4, le=31)
    token_bytes: int = Field(
        default=32,
        ge=16,
        description="Random bytes per issued token (16 bytes = 128 bits minimum)",
    )
    session_token_label: str = Field(default="session")


class IngestionSettings(BaseModel):
    """Scrobble ingestion limits."""

    max_batch_size: int = Field(default=50, ge=1)
    max_future_skew_seconds: int = Field(
        default=86400,
        ge=0,
        description="How far in the future a play timestamp may lie",
    )
    max_duration_seconds: int = Field(
        default=2**31 - 1,
        ge=0,
        le=INT64_MAX,
        description="Longest accepted play duration",
    )


class ApiSettings(BaseModel):
    """HTTP server settings."""

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: list[str] = Field(default_factory=list)


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_json_format: bool = Field(default=False)


class BootstrapSettings(BaseModel):
    """Optional admin account created at startup when missing."""

    admin_username: str | None = Field(default=None)
    admin_password: str | None = Field(default=None)

    @property
    def is_configured(self) -> bool:
        """Check if both username and password are set."""
        return bool(self.admin_username and self.admin_password)


class Settings(BaseSettings):
    """Top-level application settings.

    Nested sections are set with a double underscore, e.g.
    ``DATABASE__URL=postgresql+asyncpg://...`` or ``SECURITY__BCRYPT_ROUNDS=13``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field(default="scrob")
    log_level: str = Field(default="INFO")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    bootstrap: BootstrapSettings = Field(default_factory=BootstrapSettings)

    def _get_sqlite_db_path(self) -> Path | None:
        """Return the database file path for file-backed SQLite URLs, else None."""
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, path = url.partition(":///")
        if not path or path == ":memory:" or path.startswith("file::memory:"):
            return None
        return Path(path.split("?", 1)[0])


# Hey future me - this is called ONCE by create_app() when no Settings object is
# passed in. Components never call it themselves, they get their section handed in.
@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment (cached)."""
    return Settings()
