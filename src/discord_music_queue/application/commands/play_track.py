"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, field_validator

from discord_music_queue.domain.music.entities import Track
from discord_music_queue.domain.shared.exceptions import (
    BusinessRuleViolationError,
    PlaybackFailureError,
)
from discord_music_queue.domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ..services.playback_service import PlaybackApplicationService
    from ..services.queue_service import QueueApplicationService
    from ..services.track_resolver import TrackResolver


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    QUEUED = "queued"
    NOW_PLAYING = "now_playing"
    TRACK_NOT_FOUND = "track_not_found"
    METADATA_ONLY = "metadata_only"
    VOICE_ERROR = "voice_error"
    QUEUE_FULL = "queue_full"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL, queue the track, and start playback if idle."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_id: DiscordSnowflake
    user_name: NonEmptyStr
    query: NonEmptyStr

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v


class PlayTrackResult(BaseModel):
    """Result of a play track command."""

    model_config = ConfigDict(frozen=True, strict=True)

    status: PlayTrackStatus
    message: str = ""
    track: Track | None = None
    queue_position: NonNegativeInt | None = None
    queue_length: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status in {PlayTrackStatus.QUEUED, PlayTrackStatus.NOW_PLAYING}

    @classmethod
    def success(
        cls, track: Track, queue_position: int, queue_length: int, started_playing: bool = False
    ) -> PlayTrackResult:
        return cls(
            status=PlayTrackStatus.NOW_PLAYING if started_playing else PlayTrackStatus.QUEUED,
            track=track,
            queue_position=queue_position,
            queue_length=queue_length,
        )

    @classmethod
    def error(
        cls, status: PlayTrackStatus, message: str = "", track: Track | None = None
    ) -> PlayTrackResult:
        return cls(status=status, message=message, track=track)


class PlayTrackHandler:
    """Resolves a track from a query, adds it to the queue, and starts playback if idle.

    The query is resolved before joining voice, so a query that finds nothing
    playable never moves the bot.
    """

    def __init__(
        self,
        *,
        track_resolver: TrackResolver,
        queue_service: QueueApplicationService,
        playback_service: PlaybackApplicationService,
    ) -> None:
        self._resolver = track_resolver
        self._queue_service = queue_service
        self._playback_service = playback_service

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        track = await self._resolver.resolve(command.query)
        if track is None:
            return PlayTrackResult.error(PlayTrackStatus.TRACK_NOT_FOUND, command.query)
        if not track.is_playable:
            return PlayTrackResult.error(PlayTrackStatus.METADATA_ONLY, track=track)

        try:
            await self._playback_service.ensure_connected(command.guild_id, command.channel_id)
        except PlaybackFailureError as e:
            return PlayTrackResult.error(PlayTrackStatus.VOICE_ERROR, str(e), track=track)

        try:
            enqueued = await self._queue_service.enqueue(
                command.guild_id, track, command.user_id, command.user_name
            )
        except BusinessRuleViolationError as e:
            return PlayTrackResult.error(PlayTrackStatus.QUEUE_FULL, e.message, track=track)

        # Also restarts a current track left without a player by a dropped connection
        started = await self._playback_service.start_playback(command.guild_id)
        started_playing = enqueued.should_start and started is enqueued.track

        return PlayTrackResult.success(
            track=enqueued.track,
            queue_position=enqueued.position,
            queue_length=enqueued.queue_length,
            started_playing=started_playing,
        )
