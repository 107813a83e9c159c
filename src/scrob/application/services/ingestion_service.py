"""Ingestion Service - now-playing notifications and scrobble batches.

Hey future me - ALL validation for play events lives here, not in the pydantic
schemas. The schemas only check JSON types; this service decides what counts as
a valid play. That way every transport gets the same rules and the same
field paths in error messages (e.g. ``scrobbles[2].artist``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from scrob.config import IngestionSettings
from scrob.domain.entities import AuthUser, NowPlaying, Scrob, ScrobDraft
from scrob.domain.exceptions import ValidationError
from scrob.domain.ports import IScrobRepository
from scrob.domain.value_objects import INT64_MAX, epoch_now

logger = logging.getLogger(__name__)


def _required_text(entry: Mapping[str, Any], key: str, path: str) -> str:
    value = entry.get(key)
    if value is None:
        raise ValidationError("is required", field=f"{path}{key}")
    if not isinstance(value, str):
        raise ValidationError("must be a string", field=f"{path}{key}")
    value = value.strip()
    if not value:
        raise ValidationError("must not be empty", field=f"{path}{key}")
    return value


def _optional_text(entry: Mapping[str, Any], key: str, path: str) -> str | None:
    value = entry.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("must be a string", field=f"{path}{key}")
    return value.strip() or None


# bool is a subclass of int - True must not sneak through as 1
def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class IngestionService:
    """Accepts now-playing notifications and play events for a user."""

    def __init__(
        self,
        scrob_repo: IScrobRepository,
        settings: IngestionSettings,
        clock: Callable[[], int] = epoch_now,
    ) -> None:
        """Initialize the service.

        Args:
            scrob_repo: Scrobble repository bound to the current unit of work
            settings: Batch size and timestamp plausibility limits
            clock: Source of epoch seconds (overridable in tests)
        """
        self._scrob_repo = scrob_repo
        self._settings = settings
        self._clock = clock

    async def record_now_playing(
        self, user: AuthUser, entry: Mapping[str, Any]
    ) -> NowPlaying:
        """Acknowledge a now-playing notification.

        Nothing is persisted - the notification is validated, logged and
        acknowledged.

        Raises:
            ValidationError: artist or track missing or empty
        """
        now_playing = NowPlaying(
            artist=_required_text(entry, "artist", ""),
            track=_required_text(entry, "track", ""),
            album=_optional_text(entry, "album", ""),
        )
        logger.info(
            "Now playing: %s - %s",
            now_playing.artist,
            now_playing.track,
            extra={"user_id": user.user_id},
        )
        return now_playing

    # Listen up, this is all-or-nothing in TWO layers: 1) every entry is validated before the
    # repository is even called, 2) the repository writes the whole batch in the caller's single
    # transaction. A ValidationError therefore means zero rows, always.
    async def record_scrobbles(
        self, user: AuthUser, entries: Sequence[Mapping[str, Any]]
    ) -> list[Scrob]:
        """Validate and persist a batch of play events.

        Args:
            user: Authenticated owner of the plays
            entries: Play events as submitted (artist, track, album?, duration?, timestamp)

        Returns:
            The created records, in submission order, each with its id

        Raises:
            ValidationError: Empty or over-limit batch, or any invalid entry
        """
        if not entries:
            raise ValidationError("must contain at least one scrobble", field="scrobbles")
        max_batch = self._settings.max_batch_size
        if len(entries) > max_batch:
            raise ValidationError(
                f"at most {max_batch} scrobbles per request, got {len(entries)}",
                field="scrobbles",
            )

        accepted_at = self._clock()
        drafts = [
            self._validate_entry(entry, f"scrobbles[{index}].", accepted_at)
            for index, entry in enumerate(entries)
        ]

        scrobs = await self._scrob_repo.add_batch(user.user_id, drafts, accepted_at)
        logger.info(
            "Recorded %d scrobble(s)",
            len(scrobs),
            extra={"user_id": user.user_id, "batch_size": len(scrobs)},
        )
        return scrobs

    def _validate_entry(
        self, entry: Mapping[str, Any], path: str, accepted_at: int
    ) -> ScrobDraft:
        artist = _required_text(entry, "artist", path)
        track = _required_text(entry, "track", path)
        album = _optional_text(entry, "album", path)

        duration = entry.get("duration")
        if duration is not None:
            if not _is_int(duration):
                raise ValidationError("must be an integer", field=f"{path}duration")
            if duration < 0:
                raise ValidationError("must not be negative", field=f"{path}duration")
            max_duration = self._settings.max_duration_seconds
            if duration > max_duration:
                raise ValidationError(
                    f"must be at most {max_duration} seconds", field=f"{path}duration"
                )

        # Plausible = a non-negative epoch second not further ahead than the allowed clock skew.
        timestamp = entry.get("timestamp")
        if timestamp is None:
            raise ValidationError("is required", field=f"{path}timestamp")
        if not _is_int(timestamp):
            raise ValidationError("must be an integer epoch", field=f"{path}timestamp")
        if timestamp < 0:
            raise ValidationError("must not be negative", field=f"{path}timestamp")
        latest = min(accepted_at + self._settings.max_future_skew_seconds, INT64_MAX)
        if timestamp > latest:
            raise ValidationError("lies too far in the future", field=f"{path}timestamp")

        return ScrobDraft(
            artist=artist,
            track=track,
            album=album,
            duration=duration,
            timestamp=timestamp,
        )
