"""Repository implementations for domain entities."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from scrob.domain.entities import (
    ApiToken,
    Scrob,
    ScrobDraft,
    TopArtist,
    TopTrack,
    User,
)
from scrob.domain.ports import IApiTokenRepository, IScrobRepository, IUserRepository
from scrob.domain.value_objects import TimeRange, TokenState

from .models import ApiTokenModel, ScrobModel, UserModel


def _user_to_entity(model: UserModel) -> User:
    return User(
        id=model.id,
        username=model.username,
        password_hash=model.password_hash,
        is_admin=model.is_admin,
        created_at=model.created_at,
    )


def _token_to_entity(model: ApiTokenModel) -> ApiToken:
    return ApiToken(
        id=model.id,
        user_id=model.user_id,
        label=model.label,
        created_at=model.created_at,
        last_used_at=model.last_used_at,
        state=TokenState.from_revoked_flag(model.revoked),
    )


def _scrob_to_entity(model: ScrobModel) -> Scrob:
    return Scrob(
        id=model.id,
        user_id=model.user_id,
        artist=model.artist,
        track=model.track,
        album=model.album,
        duration=model.duration,
        timestamp=model.timestamp,
        created_at=model.created_at,
    )


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of User repository."""

    # Hey future me, this is the Repository pattern! Each repo gets its own AsyncSession injected
    # from the DB dependency. The session is NOT committed here - that happens when the unit of
    # work (Database.session_scope) exits. Don't create your own session inside repos!
    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(
        self, username: str, password_hash: str, is_admin: bool, created_at: int
    ) -> User:
        """Insert a new user and return it with its id."""
        model = UserModel(
            username=username,
            password_hash=password_hash,
            is_admin=is_admin,
            created_at=created_at,
        )
        self.session.add(model)
        # flush() so the autoincrement id is assigned - still inside the transaction
        await self.session.flush()
        return _user_to_entity(model)

    async def get_by_id(self, user_id: int) -> User | None:
        """Get a user by id."""
        model = await self.session.get(UserModel, user_id)
        return _user_to_entity(model) if model else None

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by exact (case-sensitive) username."""
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _user_to_entity(model) if model else None


class ApiTokenRepository(IApiTokenRepository):
    """SQLAlchemy implementation of ApiToken repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    async def add(
        self, user_id: int, token_hash: str, label: str | None, created_at: int
    ) -> ApiToken:
        """Insert a new active token."""
        model = ApiTokenModel(
            user_id=user_id,
            token_hash=token_hash,
            label=label,
            created_at=created_at,
            revoked=False,
        )
        self.session.add(model)
        await self.session.flush()
        return _token_to_entity(model)

    async def get_by_id(self, token_id: int) -> ApiToken | None:
        """Get a token by id regardless of owner or state."""
        model = await self.session.get(ApiTokenModel, token_id)
        return _token_to_entity(model) if model else None

    # Listen up, this is the hot path - it runs for EVERY authenticated request! One SELECT
    # joining the owner, filtered on revoked=false, so a revoked token simply isn't found.
    async def find_active_by_hash(self, token_hash: str) -> tuple[User, ApiToken] | None:
        """Get an active token and its owner in one lookup."""
        stmt = (
            select(ApiTokenModel, UserModel)
            .join(UserModel, ApiTokenModel.user_id == UserModel.id)
            .where(
                ApiTokenModel.token_hash == token_hash,
                ApiTokenModel.revoked.is_(False),
            )
        )
        result = await self.session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        token_model, user_model = row
        return _user_to_entity(user_model), _token_to_entity(token_model)

    async def touch_last_used(self, token_id: int, used_at: int) -> None:
        """Record the time of the latest successful resolution."""
        stmt = (
            update(ApiTokenModel)
            .where(ApiTokenModel.id == token_id)
            .values(last_used_at=used_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    # Hey future me - the WHERE includes user_id so a token can only be revoked by its owner,
    # and the SET only ever writes True. There is deliberately no "unrevoke" method anywhere.
    async def mark_revoked(self, token_id: int, user_id: int) -> bool:
        """Revoke a token owned by user_id; False if no such token."""
        stmt = (
            update(ApiTokenModel)
            .where(ApiTokenModel.id == token_id, ApiTokenModel.user_id == user_id)
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def list_for_user(self, user_id: int) -> list[ApiToken]:
        """List all tokens of a user, newest first."""
        stmt = (
            select(ApiTokenModel)
            .where(ApiTokenModel.user_id == user_id)
            .order_by(ApiTokenModel.created_at.desc(), ApiTokenModel.id.desc())
        )
        result = await self.session.execute(stmt)
        return [_token_to_entity(model) for model in result.scalars().all()]


class ScrobRepository(IScrobRepository):
    """SQLAlchemy implementation of the scrobble log."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with session."""
        self.session = session

    # Yo, add_batch() stages ALL rows and flushes once. Ids come back from the INSERT in the
    # order the models were added, which is the submission order. If the transaction is rolled
    # back (any exception before commit), none of these rows exist - that is the whole
    # all-or-nothing guarantee, no row-by-row commits!
    async def add_batch(
        self, user_id: int, drafts: Sequence[ScrobDraft], created_at: int
    ) -> list[Scrob]:
        """Insert all drafts in one unit of work, returned in input order."""
        models = [
            ScrobModel(
                user_id=user_id,
                artist=draft.artist,
                track=draft.track,
                album=draft.album,
                duration=draft.duration,
                timestamp=draft.timestamp,
                created_at=created_at,
            )
            for draft in drafts
        ]
        self.session.add_all(models)
        await self.session.flush()
        return [_scrob_to_entity(model) for model in models]

    async def list_recent(self, user_id: int, limit: int) -> list[Scrob]:
        """List plays ordered by (timestamp desc, id desc)."""
        stmt = (
            select(ScrobModel)
            .where(ScrobModel.user_id == user_id)
            .order_by(ScrobModel.timestamp.desc(), ScrobModel.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_scrob_to_entity(model) for model in result.scalars().all()]

    async def top_artists(
        self, user_id: int, limit: int, time_range: TimeRange | None = None
    ) -> list[TopArtist]:
        """Rank artists by play count, ties broken by name ascending."""
        play_count = func.count(ScrobModel.id).label("play_count")
        stmt = select(ScrobModel.artist, play_count).where(ScrobModel.user_id == user_id)
        stmt = self._apply_time_range(stmt, time_range)
        stmt = (
            stmt.group_by(ScrobModel.artist)
            .order_by(play_count.desc(), ScrobModel.artist.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [TopArtist(name=row.artist, count=row.play_count) for row in result.all()]

    # Hey future me - album is NOT part of the key! The same song from the album and from a
    # compilation (or without album tags at all) counts as one track.
    async def top_tracks(
        self, user_id: int, limit: int, time_range: TimeRange | None = None
    ) -> list[TopTrack]:
        """Rank (artist, track) pairs by play count, ties by artist then track."""
        play_count = func.count(ScrobModel.id).label("play_count")
        stmt = select(ScrobModel.artist, ScrobModel.track, play_count).where(
            ScrobModel.user_id == user_id
        )
        stmt = self._apply_time_range(stmt, time_range)
        stmt = (
            stmt.group_by(ScrobModel.artist, ScrobModel.track)
            .order_by(
                play_count.desc(), ScrobModel.artist.asc(), ScrobModel.track.asc()
            )
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [
            TopTrack(artist=row.artist, track=row.track, count=row.play_count)
            for row in result.all()
        ]

    async def count_for_user(self, user_id: int) -> int:
        """Count all plays of a user."""
        stmt = select(func.count(ScrobModel.id)).where(ScrobModel.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    @staticmethod
    def _apply_time_range(stmt: Select, time_range: TimeRange | None) -> Select:
        if time_range is None:
            return stmt
        if time_range.since is not None:
            stmt = stmt.where(ScrobModel.timestamp >= time_range.since)
        if time_range.until is not None:
            stmt = stmt.where(ScrobModel.timestamp <= time_range.until)
        return stmt
