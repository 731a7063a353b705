from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio

from discord_music_queue.application.interfaces.voice_transport import (
    TrackEndCallback,
    VoiceTransport,
)
from discord_music_queue.domain.music.entities import Track
from discord_music_queue.domain.music.value_objects import TrackId
from discord_music_queue.domain.shared.exceptions import PlaybackFailureError

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from discord_music_queue.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def playlist_repository(in_memory_database):
    """Create a playlist repository backed by the in-memory database."""
    from discord_music_queue.infrastructure.persistence.repositories.playlist_repository import (
        SQLitePlaylistRepository,
    )

    return SQLitePlaylistRepository(in_memory_database)


@pytest.fixture
def session_repository():
    """Create an empty in-memory queue store."""
    from discord_music_queue.infrastructure.persistence.repositories.session_repository import (
        InMemorySessionRepository,
    )

    return InMemorySessionRepository()


@pytest.fixture
def event_bus():
    from discord_music_queue.domain.shared.events import EventBus

    return EventBus()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_track(
    title: str = "Test Track",
    *,
    track_id: str | None = None,
    duration_seconds: int = 180,
    playable: bool = True,
    **kwargs: Any,
) -> Track:
    """Build a track; playable tracks get a stream URL derived from the title."""
    slug = title.lower().replace(" ", "-")
    return Track(
        id=TrackId(track_id or slug),
        title=title,
        duration_seconds=duration_seconds,
        stream_url=f"https://stream.example/{slug}" if playable else None,
        webpage_url=f"https://www.youtube.com/watch?v={slug}",
        **kwargs,
    )


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    return make_track("Test Track", artist="Test Artist")


@pytest.fixture
def track_factory():
    return make_track


# ============================================================================
# Voice Transport Fake
# ============================================================================


class FakeConnection:
    def __init__(self, guild_id: int, channel_id: int) -> None:
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.connected = True
        self.paused = False


class FakePlay:
    def __init__(self, connection: FakeConnection, track: Track, on_end: TrackEndCallback) -> None:
        self.connection = connection
        self.track = track
        self.player = object()
        self._on_end = on_end
        self.ended = False

    def end(self, error: BaseException | None = None) -> None:
        """Fire the completion callback; a play only ever ends once."""
        if self.ended:
            return
        self.ended = True
        self._on_end(error)


class FakeVoiceTransport(VoiceTransport):
    """Records every call. Stopping or disconnecting ends the active play like a real stream."""

    def __init__(self) -> None:
        self.connections: list[FakeConnection] = []
        self.disconnected: list[FakeConnection] = []
        self.plays: list[FakePlay] = []
        self.failing_titles: set[str] = set()
        self.connect_error: Exception | None = None
        self.stop_calls = 0
        self.pause_calls = 0
        self.resume_calls = 0

    def _active_play(self, connection: FakeConnection) -> FakePlay | None:
        for play in reversed(self.plays):
            if play.connection is connection and not play.ended:
                return play
        return None

    async def connect(self, guild_id: int, channel_id: int) -> FakeConnection:
        if self.connect_error is not None:
            raise self.connect_error
        connection = FakeConnection(guild_id, channel_id)
        self.connections.append(connection)
        return connection

    async def disconnect(self, connection: FakeConnection) -> None:
        play = self._active_play(connection)
        if play is not None:
            play.end()
        connection.connected = False
        self.disconnected.append(connection)

    async def play(
        self,
        connection: FakeConnection,
        track: Track,
        *,
        volume: float,
        on_end: TrackEndCallback,
    ) -> object:
        if track.title in self.failing_titles:
            raise PlaybackFailureError(track.title, "stream refused")
        play = FakePlay(connection, track, on_end)
        self.plays.append(play)
        return play.player

    def stop(self, connection: FakeConnection) -> None:
        self.stop_calls += 1
        play = self._active_play(connection)
        if play is not None:
            play.end()

    def pause(self, connection: FakeConnection) -> None:
        self.pause_calls += 1
        connection.paused = True

    def resume(self, connection: FakeConnection) -> None:
        self.resume_calls += 1
        connection.paused = False

    def is_connected(self, connection: FakeConnection) -> bool:
        return connection.connected

    def channel_id(self, connection: FakeConnection) -> int | None:
        return connection.channel_id if connection.connected else None

    @property
    def played_titles(self) -> list[str]:
        return [p.track.title for p in self.plays]


@pytest.fixture
def fake_transport():
    return FakeVoiceTransport()
