"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import PlainSerializer, PlainValidator

from discord_music_queue.domain.shared.exceptions import InvalidLoopModeError
from discord_music_queue.domain.shared.messages import ErrorMessages

_YOUTUBE_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})"),
)
_SPOTIFY_TRACK_PATTERN = re.compile(r"open\.spotify\.com/(?:intl-[a-z]+/)?track/([a-zA-Z0-9]{22})")


@dataclass(frozen=True)
class TrackId:
    """Typically a YouTube video ID, a Spotify track ID, or a hash of the URL."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def from_url(cls, url: str) -> TrackId:
        """Extract track ID from a URL, using the provider's ID or a URL hash as fallback."""
        for pattern in _YOUTUBE_ID_PATTERNS:
            match = pattern.search(url)
            if match:
                return cls(match.group(1))

        match = _SPOTIFY_TRACK_PATTERN.search(url)
        if match:
            return cls(f"spotify:{match.group(1)}")

        url_hash = hashlib.md5(url.encode()).hexdigest()[:16]
        return cls(url_hash)


def spotify_track_id(url: str) -> str | None:
    """Return the Spotify track ID embedded in an open.spotify.com link, if any."""
    match = _SPOTIFY_TRACK_PATTERN.search(url)
    return match.group(1) if match else None


# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]


@dataclass(frozen=True)
class QueuePosition:
    """Zero-based position of a track in the pending queue."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(ErrorMessages.INVALID_QUEUE_POSITION)

    def __str__(self) -> str:
        return str(self.value)

    def __int__(self) -> int:
        return self.value

    @property
    def display(self) -> int:
        """One-based position as shown to users."""
        return self.value + 1


class PlaybackState(Enum):
    """Playback state of a queue session.

    - IDLE: no current track
    - PLAYING: current track is streaming
    - PAUSED: current track is held, transport still connected
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    @property
    def is_active(self) -> bool:
        return self in {PlaybackState.PLAYING, PlaybackState.PAUSED}


class LoopMode(Enum):
    """Loop mode settings for queue playback."""

    OFF = "off"
    ONE = "one"  # Replay the finished track
    ALL = "all"  # Requeue the finished track at the tail

    @classmethod
    def parse(cls, value: LoopMode | str) -> LoopMode:
        """Accept an enum member or a case-insensitive 'off'/'one'/'all'."""
        if isinstance(value, LoopMode):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidLoopModeError(value)


class TrackProvenance(Enum):
    """Which provider(s) contributed a track's data."""

    NATIVE = "native"
    AGGREGATED = "aggregated"
    METADATA_ONLY = "metadata-only"


class TrackOutcome(Enum):
    """How a play of the current track ended."""

    COMPLETED = "completed"
    ERROR = "error"
