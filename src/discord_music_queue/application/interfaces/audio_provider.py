"""Port interface for the primary audio provider (search + playable streams)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict

from discord_music_queue.domain.shared.constants import ResolverConstants
from discord_music_queue.domain.shared.types import (
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    TrackTitleStr,
)


class TrackMetadata(BaseModel):
    """What a provider knows about one matching track.

    Only the primary audio provider fills ``stream_url``.
    """

    model_config = ConfigDict(frozen=True)

    source_id: NonEmptyStr
    title: TrackTitleStr
    artist: NonEmptyStr = ResolverConstants.UNKNOWN_ARTIST
    duration_seconds: DurationSeconds = 0
    stream_url: HttpUrlStr | None = None
    webpage_url: HttpUrlStr | None = None
    thumbnail_url: HttpUrlStr | None = None

    @property
    def search_text(self) -> str:
        """Title and artist, used to look the same track up on another provider."""
        if self.artist == ResolverConstants.UNKNOWN_ARTIST:
            return self.title
        return f"{self.title} {self.artist}"


class AudioProvider(ABC):
    """Interface for the provider that yields playable stream locators."""

    @abstractmethod
    def is_direct_link(self, query: NonEmptyStr) -> bool:
        """Whether the query is a link this provider can fetch directly."""
        ...

    @abstractmethod
    async def lookup(self, url: HttpUrlStr) -> TrackMetadata | None:
        """Fetch metadata and stream locator for a direct link."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr) -> TrackMetadata | None:
        """Return the best match for a free-text query."""
        ...
