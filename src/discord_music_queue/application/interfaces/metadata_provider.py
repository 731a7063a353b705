"""Port interface for the secondary metadata provider."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_music_queue.application.interfaces.audio_provider import TrackMetadata
from discord_music_queue.domain.shared.types import HttpUrlStr, NonEmptyStr


class MetadataProvider(ABC):
    """Interface for a provider with rich track metadata but no playable streams."""

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present. Unconfigured providers are skipped."""
        ...

    @abstractmethod
    def is_track_link(self, query: NonEmptyStr) -> bool:
        """Whether the query is a track link on this provider."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr) -> TrackMetadata | None:
        """Return the best match for a free-text query."""
        ...

    @abstractmethod
    async def lookup(self, url: HttpUrlStr) -> TrackMetadata | None:
        """Fetch metadata for a track link."""
        ...

    @abstractmethod
    async def close(self) -> None:
        ...
