"""Query for retrieving the current queue."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.music.entities import Track
from discord_music_queue.domain.music.value_objects import LoopMode, PlaybackState
from discord_music_queue.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.repository import SessionRepository


class GetQueueQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake


class QueueInfo(BaseModel):
    """Snapshot of a guild's queue for display.

    ``total_duration`` is None when any listed track has an unknown duration.
    """

    guild_id: DiscordSnowflake
    tracks: list[Track] = Field(default_factory=list)
    current_track: Track | None = None
    state: PlaybackState = PlaybackState.IDLE
    loop_mode: LoopMode = LoopMode.OFF
    total_duration: NonNegativeInt | None = None

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def total_tracks(self) -> int:
        return self.length + (1 if self.current_track else 0)

    @property
    def is_empty(self) -> bool:
        return self.current_track is None and not self.tracks


class GetQueueHandler:

    def __init__(self, *, session_repository: SessionRepository) -> None:
        self._session_repo = session_repository

    async def handle(self, query: GetQueueQuery) -> QueueInfo:
        session = await self._session_repo.get(query.guild_id)

        if session is None:
            return QueueInfo(guild_id=query.guild_id, total_duration=0)

        listed = [t for t in (session.current_track, *session.queue) if t is not None]
        known = all(t.duration_seconds for t in listed)

        return QueueInfo(
            guild_id=query.guild_id,
            tracks=list(session.queue),
            current_track=session.current_track,
            state=session.state,
            loop_mode=session.loop_mode,
            total_duration=sum(t.duration_seconds for t in listed) if known else None,
        )
