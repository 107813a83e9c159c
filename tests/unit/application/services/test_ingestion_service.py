"""Tests for IngestionService validation and batching."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from scrob.application.services import IngestionService
from scrob.config import IngestionSettings
from scrob.domain.entities import AuthUser, Scrob, ScrobDraft
from scrob.domain.exceptions import ValidationError

NOW = 1_700_000_000
USER = AuthUser(user_id=1, username="alice", is_admin=False, token_id=1)


def _entry(**overrides: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {"artist": "Pink Floyd", "track": "Time", "timestamp": NOW - 60}
    entry.update(overrides)
    return entry


@pytest.fixture
def scrob_repo() -> AsyncMock:
    """Repository that assigns sequential ids."""
    repo = AsyncMock()

    async def add_batch(user_id: int, drafts: list[ScrobDraft], created_at: int) -> list[Scrob]:
        return [
            Scrob(
                id=100 + i,
                user_id=user_id,
                artist=d.artist,
                track=d.track,
                album=d.album,
                duration=d.duration,
                timestamp=d.timestamp,
                created_at=created_at,
            )
            for i, d in enumerate(drafts)
        ]

    repo.add_batch.side_effect = add_batch
    return repo


@pytest.fixture
def service(scrob_repo: AsyncMock) -> IngestionService:
    return IngestionService(
        scrob_repo,
        IngestionSettings(max_batch_size=5, max_future_skew_seconds=3600),
        clock=lambda: NOW,
    )


class TestRecordScrobbles:
    """Tests for IngestionService.record_scrobbles()."""

    async def test_returns_records_in_submission_order(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        entries = [_entry(track=f"Track {i}") for i in range(3)]

        result = await service.record_scrobbles(USER, entries)

        assert [s.track for s in result] == ["Track 0", "Track 1", "Track 2"]
        assert len({s.id for s in result}) == 3
        assert all(s.created_at == NOW for s in result)
        scrob_repo.add_batch.assert_awaited_once()
        assert scrob_repo.add_batch.await_args.args[0] == 1

    async def test_trims_text_and_drops_blank_album(
        self, service: IngestionService
    ) -> None:
        [scrob] = await service.record_scrobbles(
            USER, [_entry(artist="  Pink Floyd ", track=" Time", album="   ", duration=413)]
        )

        assert scrob.artist == "Pink Floyd"
        assert scrob.track == "Time"
        assert scrob.album is None
        assert scrob.duration == 413

    async def test_past_timestamps_are_fine(self, service: IngestionService) -> None:
        [scrob] = await service.record_scrobbles(USER, [_entry(timestamp=0)])
        assert scrob.timestamp == 0

    @pytest.mark.parametrize(
        ("bad", "field"),
        [
            ({"artist": ""}, "artist"),
            ({"artist": "   "}, "artist"),
            ({"artist": None}, "artist"),
            ({"track": ""}, "track"),
            ({"track": 5}, "track"),
            ({"duration": -1}, "duration"),
            ({"duration": "300"}, "duration"),
            ({"timestamp": None}, "timestamp"),
            ({"timestamp": -1}, "timestamp"),
            ({"timestamp": "1700000000"}, "timestamp"),
            ({"timestamp": 1.5}, "timestamp"),
            ({"timestamp": True}, "timestamp"),
            ({"timestamp": NOW + 3601}, "timestamp"),
            ({"album": 12}, "album"),
        ],
    )
    async def test_one_bad_entry_rejects_whole_batch(
        self,
        service: IngestionService,
        scrob_repo: AsyncMock,
        bad: dict[str, Any],
        field: str,
    ) -> None:
        entries = [_entry(), _entry(), _entry(**bad)]

        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, entries)

        assert exc_info.value.field == f"scrobbles[2].{field}"
        scrob_repo.add_batch.assert_not_awaited()

    async def test_missing_key_is_reported(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, [{"artist": "A", "timestamp": NOW}])

        assert exc_info.value.field == "scrobbles[0].track"
        scrob_repo.add_batch.assert_not_awaited()

    async def test_empty_batch_rejected(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError):
            await service.record_scrobbles(USER, [])
        scrob_repo.add_batch.assert_not_awaited()

    async def test_over_limit_batch_rejected_not_truncated(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, [_entry() for _ in range(6)])

        assert exc_info.value.field == "scrobbles"
        scrob_repo.add_batch.assert_not_awaited()

    async def test_batch_at_limit_accepted(self, service: IngestionService) -> None:
        result = await service.record_scrobbles(USER, [_entry() for _ in range(5)])
        assert len(result) == 5

    async def test_duration_above_limit_rejects_whole_batch(
        self, scrob_repo: AsyncMock
    ) -> None:
        service = IngestionService(
            scrob_repo,
            IngestionSettings(max_duration_seconds=3600),
            clock=lambda: NOW,
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, [_entry(duration=3600), _entry(duration=3601)])

        assert exc_info.value.field == "scrobbles[1].duration"
        scrob_repo.add_batch.assert_not_awaited()

    async def test_default_duration_limit_fits_the_column(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, [_entry(duration=2**70)])

        assert exc_info.value.field == "scrobbles[0].duration"
        scrob_repo.add_batch.assert_not_awaited()

    async def test_huge_future_skew_still_bounds_timestamp(
        self, scrob_repo: AsyncMock
    ) -> None:
        service = IngestionService(
            scrob_repo,
            IngestionSettings(max_future_skew_seconds=2**80),
            clock=lambda: NOW,
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.record_scrobbles(USER, [_entry(timestamp=2**63)])

        assert exc_info.value.field == "scrobbles[0].timestamp"
        scrob_repo.add_batch.assert_not_awaited()


class TestRecordNowPlaying:
    """Tests for IngestionService.record_now_playing()."""

    async def test_accepts_and_persists_nothing(
        self, service: IngestionService, scrob_repo: AsyncMock
    ) -> None:
        now_playing = await service.record_now_playing(
            USER, {"artist": " Pink Floyd ", "track": "Time", "album": None}
        )

        assert now_playing.artist == "Pink Floyd"
        assert now_playing.track == "Time"
        scrob_repo.add_batch.assert_not_awaited()

    @pytest.mark.parametrize(
        "entry",
        [
            {"artist": "", "track": "Time"},
            {"artist": "Pink Floyd", "track": "  "},
            {"track": "Time"},
        ],
    )
    async def test_requires_artist_and_track(
        self, service: IngestionService, entry: dict[str, Any]
    ) -> None:
        with pytest.raises(ValidationError):
            await service.record_now_playing(USER, entry)
