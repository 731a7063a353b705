"""
Unit Tests for Queue Operations and Read Queries

Tests for:
- QueueApplicationService (enqueue, remove, clear, shuffle, loop)
- GetQueueHandler and GetCurrentTrackHandler
"""

import pytest

from discord_music_queue.application.queries.get_current import (
    GetCurrentTrackHandler,
    GetCurrentTrackQuery,
)
from discord_music_queue.application.queries.get_queue import GetQueueHandler, GetQueueQuery
from discord_music_queue.application.services.queue_service import QueueApplicationService
from discord_music_queue.domain.music.value_objects import LoopMode, PlaybackState
from discord_music_queue.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidLoopModeError,
    MetadataOnlyError,
    PreconditionFailedError,
)
from discord_music_queue.infrastructure.persistence.repositories.session_repository import (
    InMemorySessionRepository,
)

GUILD_ID = 444444444
USER_ID = 555555555


@pytest.fixture
def queue_service(session_repository):
    return QueueApplicationService(session_repository=session_repository)


# =============================================================================
# QueueApplicationService
# =============================================================================


class TestEnqueue:
    @pytest.mark.asyncio
    async def test_enqueue_records_requester(self, queue_service, sample_track):
        result = await queue_service.enqueue(GUILD_ID, sample_track, USER_ID, "alice")

        assert result.position == 0
        assert result.queue_length == 1
        assert result.should_start is True
        assert result.track.requested_by_id == USER_ID
        assert result.track.requested_by_name == "alice"

    @pytest.mark.asyncio
    async def test_should_start_false_while_playing(
        self, queue_service, session_repository, track_factory
    ):
        await queue_service.enqueue(GUILD_ID, track_factory("A"), USER_ID, "alice")
        (await session_repository.get(GUILD_ID)).advance()

        result = await queue_service.enqueue(GUILD_ID, track_factory("B"), USER_ID, "alice")

        assert result.position == 0
        assert result.should_start is False

    @pytest.mark.asyncio
    async def test_metadata_only_rejected(self, queue_service, track_factory):
        with pytest.raises(MetadataOnlyError):
            await queue_service.enqueue(GUILD_ID, track_factory("A", playable=False), USER_ID, "a")

    @pytest.mark.asyncio
    async def test_queue_cap_from_store(self, track_factory):
        service = QueueApplicationService(
            session_repository=InMemorySessionRepository(max_queue_size=1)
        )
        await service.enqueue(GUILD_ID, track_factory("A"), USER_ID, "alice")

        with pytest.raises(BusinessRuleViolationError):
            await service.enqueue(GUILD_ID, track_factory("B"), USER_ID, "alice")

    @pytest.mark.asyncio
    async def test_guilds_are_isolated(self, queue_service, session_repository, track_factory):
        await queue_service.enqueue(GUILD_ID, track_factory("A"), USER_ID, "alice")
        await queue_service.enqueue(GUILD_ID + 1, track_factory("B"), USER_ID, "alice")

        first = await session_repository.get(GUILD_ID)
        second = await session_repository.get(GUILD_ID + 1)
        assert [t.title for t in first.queue] == ["A"]
        assert [t.title for t in second.queue] == ["B"]


class TestQueueEditing:
    @pytest.mark.asyncio
    async def test_remove(self, queue_service, track_factory):
        for title in ("A", "B"):
            await queue_service.enqueue(GUILD_ID, track_factory(title), USER_ID, "alice")

        removed = await queue_service.remove(GUILD_ID, 1)

        assert removed.title == "B"
        assert await queue_service.remove(GUILD_ID, 5) is None

    @pytest.mark.asyncio
    async def test_remove_and_clear_without_session(self, queue_service, session_repository):
        assert await queue_service.remove(GUILD_ID, 0) is None
        assert await queue_service.clear(GUILD_ID) == 0
        assert await session_repository.exists(GUILD_ID) is False

    @pytest.mark.asyncio
    async def test_clear(self, queue_service, track_factory):
        for title in ("A", "B", "C"):
            await queue_service.enqueue(GUILD_ID, track_factory(title), USER_ID, "alice")

        assert await queue_service.clear(GUILD_ID) == 3

    @pytest.mark.asyncio
    async def test_shuffle_requires_two_tracks(self, queue_service, track_factory):
        await queue_service.enqueue(GUILD_ID, track_factory("A"), USER_ID, "alice")

        with pytest.raises(PreconditionFailedError):
            await queue_service.shuffle(GUILD_ID)

        await queue_service.enqueue(GUILD_ID, track_factory("B"), USER_ID, "alice")
        await queue_service.shuffle(GUILD_ID)

    @pytest.mark.asyncio
    async def test_set_loop(self, queue_service):
        assert await queue_service.set_loop(GUILD_ID, "all") == LoopMode.ALL

        with pytest.raises(InvalidLoopModeError):
            await queue_service.set_loop(GUILD_ID, "twice")


# =============================================================================
# Queries
# =============================================================================


class TestGetQueueHandler:
    @pytest.mark.asyncio
    async def test_unknown_guild_is_empty(self, session_repository):
        handler = GetQueueHandler(session_repository=session_repository)

        info = await handler.handle(GetQueueQuery(guild_id=GUILD_ID))

        assert info.is_empty
        assert info.total_tracks == 0
        assert info.state == PlaybackState.IDLE
        assert info.total_duration == 0

    @pytest.mark.asyncio
    async def test_snapshot_of_current_and_pending(self, session_repository, track_factory):
        session = await session_repository.get_or_create(GUILD_ID)
        for title, duration in (("A", 60), ("B", 120), ("C", 30)):
            session.enqueue(track_factory(title, duration_seconds=duration))
        session.advance()
        session.set_loop(LoopMode.ONE)
        handler = GetQueueHandler(session_repository=session_repository)

        info = await handler.handle(GetQueueQuery(guild_id=GUILD_ID))

        assert info.current_track.title == "A"
        assert [t.title for t in info.tracks] == ["B", "C"]
        assert info.length == 2
        assert info.total_tracks == 3
        assert info.state == PlaybackState.PLAYING
        assert info.loop_mode == LoopMode.ONE
        assert info.total_duration == 210

    @pytest.mark.asyncio
    async def test_unknown_duration_makes_total_unknown(self, session_repository, track_factory):
        session = await session_repository.get_or_create(GUILD_ID)
        session.enqueue(track_factory("A", duration_seconds=60))
        session.enqueue(track_factory("Live", duration_seconds=0))
        handler = GetQueueHandler(session_repository=session_repository)

        info = await handler.handle(GetQueueQuery(guild_id=GUILD_ID))

        assert info.total_duration is None

    @pytest.mark.asyncio
    async def test_snapshot_is_not_live(self, session_repository, track_factory):
        session = await session_repository.get_or_create(GUILD_ID)
        session.enqueue(track_factory("A"))
        handler = GetQueueHandler(session_repository=session_repository)

        info = await handler.handle(GetQueueQuery(guild_id=GUILD_ID))
        session.enqueue(track_factory("B"))

        assert info.length == 1


class TestGetCurrentTrackHandler:
    @pytest.mark.asyncio
    async def test_nothing_playing(self, session_repository):
        handler = GetCurrentTrackHandler(session_repository=session_repository)

        info = await handler.handle(GetCurrentTrackQuery(guild_id=GUILD_ID))

        assert info.track is None
        assert info.is_playing is False

    @pytest.mark.asyncio
    async def test_paused_track(self, session_repository, track_factory):
        session = await session_repository.get_or_create(GUILD_ID)
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        session.advance()
        session.pause()
        handler = GetCurrentTrackHandler(session_repository=session_repository)

        info = await handler.handle(GetCurrentTrackQuery(guild_id=GUILD_ID))

        assert info.track.title == "A"
        assert info.is_paused is True
        assert info.is_playing is False
        assert info.queue_length == 1


class TestInMemorySessionRepository:
    @pytest.mark.asyncio
    async def test_get_or_create_returns_same_session(self, session_repository):
        first = await session_repository.get_or_create(GUILD_ID)
        second = await session_repository.get_or_create(GUILD_ID)

        assert first is second
        assert await session_repository.count() == 1

    @pytest.mark.asyncio
    async def test_get_all_active(self, session_repository, track_factory):
        idle = await session_repository.get_or_create(GUILD_ID)
        active = await session_repository.get_or_create(GUILD_ID + 1)
        active.enqueue(track_factory("A"))
        active.advance()

        assert await session_repository.get_all_active() == [active]
        assert idle.is_idle
