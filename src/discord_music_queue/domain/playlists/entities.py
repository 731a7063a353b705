"""Entities for the playlists bounded context."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.shared.constants import ResolverConstants
from discord_music_queue.domain.shared.datetime_utils import UtcDateTime, utcnow
from discord_music_queue.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    PlaylistNameStr,
    TrackTitleStr,
    UtcDatetimeField,
)

if TYPE_CHECKING:
    from discord_music_queue.domain.music.entities import Track


class PlaylistEntry(BaseModel):
    """A saved track. Only the page URL is kept; the stream is resolved again on play."""

    model_config = ConfigDict(frozen=True)

    title: TrackTitleStr
    artist: NonEmptyStr = ResolverConstants.UNKNOWN_ARTIST
    duration_seconds: DurationSeconds = 0
    source_url: HttpUrlStr | None = None
    added_at: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def from_track(cls, track: Track) -> PlaylistEntry:
        return cls(
            title=track.title,
            artist=track.artist,
            duration_seconds=track.duration_seconds,
            source_url=track.webpage_url or track.secondary_url,
        )

    @property
    def query(self) -> str:
        """What to hand the resolver to find this entry again."""
        if self.source_url:
            return self.source_url
        if self.artist != ResolverConstants.UNKNOWN_ARTIST:
            return f"{self.title} {self.artist}"
        return self.title


class Playlist(BaseModel):
    """A named playlist owned by one user."""

    id: NonEmptyStr
    name: PlaylistNameStr
    owner_id: DiscordSnowflake
    entries: list[PlaylistEntry] = Field(default_factory=list)
    created_at: UtcDatetimeField = Field(default_factory=utcnow)

    @classmethod
    def new(cls, owner_id: int, name: str) -> Playlist:
        """Create an empty playlist with an ID derived from the owner, creation time and a random suffix."""
        created = UtcDateTime.now()
        return cls(
            id=f"{owner_id}_{created.unix_millis}_{uuid4().hex[:6]}",
            name=name.strip(),
            owner_id=owner_id,
            created_at=created.dt,
        )

    @property
    def track_count(self) -> int:
        return len(self.entries)

    def is_owned_by(self, user_id: int) -> bool:
        return self.owner_id == user_id
