"""SQLAlchemy ORM models for scrob."""

from typing import Any

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
    validates,
)

from scrob.domain.value_objects import epoch_now

# Hey future me - BIGINT ids on PostgreSQL, but SQLite only autoincrements a column that is
# literally "INTEGER PRIMARY KEY". with_variant() gives us both.
BigIntId = BigInteger().with_variant(Integer(), "sqlite")


# Yo, Base is THE foundation of all ORM models! DeclarativeBase is SQLAlchemy 2.0 style.
# ALL models inherit from this - it manages the shared metadata registry that both
# Database.create_tables() and alembic look at.
class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


# Listen up, all timestamps in this schema are INTEGER epoch seconds, not DateTime columns!
# Clients send play times as epoch seconds and the API returns them the same way, so there is
# nothing to gain from timezone-aware datetimes here (and no naive/aware comparison bugs).
class UserModel(Base):
    """SQLAlchemy model for User entity."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=epoch_now)

    # Relationships
    api_tokens: Mapped[list["ApiTokenModel"]] = relationship(
        "ApiTokenModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    scrobs: Mapped[list["ScrobModel"]] = relationship(
        "ScrobModel",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# Hey future me - token_hash is the SHA-256 hex digest of the bearer value, never the value
# itself! The plaintext is shown to the client exactly once (on issue) and then forgotten.
class ApiTokenModel(Base):
    """SQLAlchemy model for ApiToken entity."""

    __tablename__ = "api_tokens"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=epoch_now)
    last_used_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped["UserModel"] = relationship("UserModel", back_populates="api_tokens")

    __table_args__ = (Index("ix_api_tokens_user_id", "user_id"),)

    # Revocation is one-way. This guards the ORM path; the repository's bulk UPDATE only
    # ever writes revoked=True.
    @validates("revoked")
    def _validate_revoked(self, _key: str, value: Any) -> bool:
        if self.revoked and not value:
            raise ValueError("A revoked token cannot be re-activated")
        return bool(value)


class ScrobModel(Base):
    """SQLAlchemy model for Scrob (play event) entity."""

    __tablename__ = "scrobs"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    artist: Mapped[str] = mapped_column(Text, nullable=False)
    track: Mapped[str] = mapped_column(Text, nullable=False)
    album: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    # When the track was played (client supplied)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # When the server accepted the batch
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    user: Mapped["UserModel"] = relationship("UserModel", back_populates="scrobs")

    # Recency listing and every aggregate filter on user_id first, then timestamp.
    __table_args__ = (Index("ix_scrobs_user_timestamp", "user_id", "timestamp"),)
