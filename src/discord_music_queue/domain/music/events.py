"""Domain events for the music bounded context."""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord_music_queue.domain.shared.events import DomainEvent
from discord_music_queue.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    NonEmptyStr,
    NonNegativeInt,
)

from .value_objects import TrackIdField, TrackOutcome

if TYPE_CHECKING:
    from .entities import Track


class TrackEnded(DomainEvent):
    """A play of a guild's current track finished or failed.

    Emitted by the voice transport and consumed by the track-end dispatcher.
    ``play_sequence`` identifies the play, so signals from a play that was
    already replaced by skip/stop can be recognised and dropped.
    """

    guild_id: DiscordSnowflake
    track_id: TrackIdField
    play_sequence: NonNegativeInt
    outcome: TrackOutcome = TrackOutcome.COMPLETED
    error: str | None = None


class TrackStartedPlaying(DomainEvent):
    guild_id: DiscordSnowflake
    track_id: TrackIdField
    track_title: NonEmptyStr
    duration_seconds: DurationSeconds = 0
    requested_by_id: DiscordSnowflake | None = None

    @classmethod
    def from_track(cls, guild_id: int, track: Track) -> TrackStartedPlaying:
        return cls(
            guild_id=guild_id,
            track_id=track.id,
            track_title=track.title,
            duration_seconds=track.duration_seconds,
            requested_by_id=track.requested_by_id,
        )


class TrackPlaybackFailed(DomainEvent):
    """A track was dropped from a guild's queue because it could not be played."""

    guild_id: DiscordSnowflake
    track_id: TrackIdField
    track_title: NonEmptyStr
    reason: str = ""

    @classmethod
    def from_track(cls, guild_id: int, track: Track, reason: str = "") -> TrackPlaybackFailed:
        return cls(guild_id=guild_id, track_id=track.id, track_title=track.title, reason=reason)


class QueueExhausted(DomainEvent):
    guild_id: DiscordSnowflake
    last_track_title: str = ""
