"""
Music Bounded Context

Domain logic for tracks, the per-guild queue session and its playback state machine.
"""

from discord_music_queue.domain.music.entities import GuildPlaybackSession, Track
from discord_music_queue.domain.music.events import (
    QueueExhausted,
    TrackEnded,
    TrackPlaybackFailed,
    TrackStartedPlaying,
)
from discord_music_queue.domain.music.repository import SessionRepository
from discord_music_queue.domain.music.value_objects import (
    LoopMode,
    PlaybackState,
    QueuePosition,
    TrackId,
    TrackOutcome,
    TrackProvenance,
)

__all__ = [
    # Entities
    "Track",
    "GuildPlaybackSession",
    # Value Objects
    "TrackId",
    "QueuePosition",
    "PlaybackState",
    "LoopMode",
    "TrackProvenance",
    "TrackOutcome",
    # Events
    "TrackEnded",
    "TrackStartedPlaying",
    "TrackPlaybackFailed",
    "QueueExhausted",
    # Repository
    "SessionRepository",
]
