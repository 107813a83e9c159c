"""Tests for the SQLAlchemy repositories against a real SQLite file.

Hey future me - these run against an actual database (tmp_path) because ordering,
grouping and the one-way revoke are exactly the things a mock can't prove.
"""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from scrob.domain.entities import ScrobDraft, User
from scrob.domain.value_objects import TimeRange, TokenState
from scrob.infrastructure.persistence import (
    ApiTokenRepository,
    Database,
    ScrobRepository,
    UserRepository,
)


@pytest.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_scope() as s:
        yield s


async def _make_user(session: AsyncSession, username: str) -> User:
    return await UserRepository(session).add(
        username=username, password_hash="$2b$04$x", is_admin=False, created_at=1
    )


def _drafts(*pairs: tuple[str, str], timestamp: int = 1000) -> list[ScrobDraft]:
    return [ScrobDraft(artist=a, track=t, timestamp=timestamp) for a, t in pairs]


class TestUserRepository:
    """Tests for UserRepository."""

    async def test_add_and_lookup(self, session: AsyncSession) -> None:
        repo = UserRepository(session)
        alice = await _make_user(session, "alice")

        assert alice.id is not None
        assert await repo.get_by_id(alice.id) == alice
        assert await repo.get_by_username("alice") == alice

    async def test_username_lookup_is_case_sensitive(self, session: AsyncSession) -> None:
        await _make_user(session, "alice")

        assert await UserRepository(session).get_by_username("Alice") is None


class TestApiTokenRepository:
    """Tests for ApiTokenRepository."""

    async def test_find_active_by_hash_joins_owner(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ApiTokenRepository(session)
        token = await repo.add(alice.id, "h" * 64, "session", 10)

        found = await repo.find_active_by_hash("h" * 64)

        assert found is not None
        user, resolved = found
        assert user.username == "alice"
        assert resolved.id == token.id
        assert resolved.state is TokenState.ACTIVE
        assert resolved.token is None

    async def test_revoked_token_is_not_found(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ApiTokenRepository(session)
        token = await repo.add(alice.id, "h" * 64, None, 10)

        assert await repo.mark_revoked(token.id, alice.id) is True

        assert await repo.find_active_by_hash("h" * 64) is None
        stored = await repo.get_by_id(token.id)
        assert stored is not None and stored.revoked

    async def test_revoke_requires_owner(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        bob = await _make_user(session, "bob")
        repo = ApiTokenRepository(session)
        token = await repo.add(alice.id, "h" * 64, None, 10)

        assert await repo.mark_revoked(token.id, bob.id) is False
        assert await repo.find_active_by_hash("h" * 64) is not None

    async def test_touch_last_used(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ApiTokenRepository(session)
        token = await repo.add(alice.id, "h" * 64, None, 10)

        await repo.touch_last_used(token.id, 99)

        stored = await repo.get_by_id(token.id)
        assert stored is not None and stored.last_used_at == 99

    async def test_list_for_user_newest_first_and_scoped(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        bob = await _make_user(session, "bob")
        repo = ApiTokenRepository(session)
        first = await repo.add(alice.id, "a" * 64, "one", 10)
        second = await repo.add(alice.id, "b" * 64, "two", 20)
        await repo.add(bob.id, "c" * 64, "bob", 30)

        tokens = await repo.list_for_user(alice.id)

        assert [t.id for t in tokens] == [second.id, first.id]


class TestScrobRepository:
    """Tests for ScrobRepository."""

    async def test_add_batch_keeps_order_and_assigns_distinct_ids(
        self, session: AsyncSession
    ) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)

        scrobs = await repo.add_batch(
            alice.id, _drafts(("A", "1"), ("B", "2"), ("C", "3")), created_at=500
        )

        assert [s.artist for s in scrobs] == ["A", "B", "C"]
        assert len({s.id for s in scrobs}) == 3
        assert all(s.created_at == 500 and s.user_id == alice.id for s in scrobs)
        assert await repo.count_for_user(alice.id) == 3

    async def test_recent_orders_by_timestamp_then_id(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        old = await repo.add_batch(alice.id, _drafts(("A", "old"), timestamp=100), 1)
        same_a = await repo.add_batch(alice.id, _drafts(("A", "tie-1"), timestamp=200), 2)
        same_b = await repo.add_batch(alice.id, _drafts(("A", "tie-2"), timestamp=200), 3)
        newest = await repo.add_batch(alice.id, _drafts(("A", "new"), timestamp=300), 4)

        recent = await repo.list_recent(alice.id, 10)

        assert [s.id for s in recent] == [newest[0].id, same_b[0].id, same_a[0].id, old[0].id]
        assert [s.id for s in await repo.list_recent(alice.id, 2)] == [
            newest[0].id,
            same_b[0].id,
        ]

    async def test_queries_are_isolated_per_user(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        bob = await _make_user(session, "bob")
        repo = ScrobRepository(session)
        await repo.add_batch(alice.id, _drafts(("A", "X")), 1)
        await repo.add_batch(bob.id, _drafts(("B", "Y"), ("B", "Z")), 1)

        assert {s.user_id for s in await repo.list_recent(alice.id, 100)} == {alice.id}
        assert [a.name for a in await repo.top_artists(alice.id, 10)] == ["A"]
        assert await repo.count_for_user(bob.id) == 2

    async def test_rankings_example(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        await repo.add_batch(
            alice.id, _drafts(("A", "X"), ("A", "Y"), ("B", "Z"), ("A", "X")), 1
        )

        artists = await repo.top_artists(alice.id, 10)
        tracks = await repo.top_tracks(alice.id, 10)

        assert [(a.name, a.count) for a in artists] == [("A", 3), ("B", 1)]
        assert [(t.artist, t.track, t.count) for t in tracks] == [
            ("A", "X", 2),
            ("A", "Y", 1),
            ("B", "Z", 1),
        ]

    async def test_top_tracks_ignores_album(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        await repo.add_batch(
            alice.id,
            [
                ScrobDraft(artist="A", track="X", timestamp=1, album="Album"),
                ScrobDraft(artist="A", track="X", timestamp=2, album="Best Of"),
                ScrobDraft(artist="A", track="X", timestamp=3),
            ],
            1,
        )

        [track] = await repo.top_tracks(alice.id, 10)

        assert (track.artist, track.track, track.count) == ("A", "X", 3)

    async def test_ranking_counts_sum_to_total(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        pairs = [(f"Artist {i % 7}", f"Track {i % 11}") for i in range(60)]
        await repo.add_batch(alice.id, _drafts(*pairs[:40]), 1)
        await repo.add_batch(alice.id, _drafts(*pairs[40:]), 2)

        total = await repo.count_for_user(alice.id)
        assert sum(a.count for a in await repo.top_artists(alice.id, 100)) == total
        assert sum(t.count for t in await repo.top_tracks(alice.id, 100)) == total

    async def test_limit_cuts_ranking(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        await repo.add_batch(alice.id, _drafts(("C", "1"), ("B", "1"), ("A", "1")), 1)

        assert [a.name for a in await repo.top_artists(alice.id, 2)] == ["A", "B"]

    async def test_time_range_filters_rankings(self, session: AsyncSession) -> None:
        alice = await _make_user(session, "alice")
        repo = ScrobRepository(session)
        await repo.add_batch(alice.id, _drafts(("Old", "1"), timestamp=100), 1)
        await repo.add_batch(alice.id, _drafts(("Mid", "1"), timestamp=200), 1)
        await repo.add_batch(alice.id, _drafts(("New", "1"), timestamp=300), 1)

        window = TimeRange(since=200, until=300)
        assert [a.name for a in await repo.top_artists(alice.id, 10, window)] == ["Mid", "New"]
        assert [
            t.artist for t in await repo.top_tracks(alice.id, 10, TimeRange(until=100))
        ] == ["Old"]
