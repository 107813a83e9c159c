"""Aggregation Service - recent plays and rankings for one user.

Hey future me - read-only, and ALWAYS scoped to the AuthUser passed in. There
is no parameter that lets a caller name another user. Limits are clamped here
so every transport gets the same silent clamping.
"""

from __future__ import annotations

from scrob.domain.entities import AuthUser, Scrob, TopArtist, TopTrack
from scrob.domain.ports import IScrobRepository
from scrob.domain.value_objects import (
    DEFAULT_RECENT_LIMIT,
    DEFAULT_TOP_LIMIT,
    TimeRange,
    clamp_limit,
)


class AggregationService:
    """Recency listing and play-count rankings."""

    def __init__(self, scrob_repo: IScrobRepository) -> None:
        self._scrob_repo = scrob_repo

    async def recent(self, user: AuthUser, limit: int | None = None) -> list[Scrob]:
        """Latest plays, newest first (ties: most recently ingested first)."""
        return await self._scrob_repo.list_recent(
            user.user_id, clamp_limit(limit, DEFAULT_RECENT_LIMIT)
        )

    async def top_artists(
        self,
        user: AuthUser,
        limit: int | None = None,
        time_range: TimeRange | None = None,
    ) -> list[TopArtist]:
        """Artists by play count desc, ties by name asc."""
        return await self._scrob_repo.top_artists(
            user.user_id,
            clamp_limit(limit, DEFAULT_TOP_LIMIT),
            self._effective_range(time_range),
        )

    async def top_tracks(
        self,
        user: AuthUser,
        limit: int | None = None,
        time_range: TimeRange | None = None,
    ) -> list[TopTrack]:
        """(artist, track) pairs by play count desc, ties by artist then track."""
        return await self._scrob_repo.top_tracks(
            user.user_id,
            clamp_limit(limit, DEFAULT_TOP_LIMIT),
            self._effective_range(time_range),
        )

    async def scrobble_count(self, user: AuthUser) -> int:
        """Total number of plays of user."""
        return await self._scrob_repo.count_for_user(user.user_id)

    @staticmethod
    def _effective_range(time_range: TimeRange | None) -> TimeRange | None:
        if time_range is None or time_range.is_unbounded:
            return None
        return time_range
