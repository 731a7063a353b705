"""Track resolution across the primary audio provider and the secondary metadata provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING

from ...domain.music.entities import Track
from ...domain.music.value_objects import TrackId, TrackProvenance
from ...domain.shared.constants import ResolverConstants
from ...domain.shared.exceptions import MetadataOnlyError, ResolutionFailureError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.audio_provider import AudioProvider, TrackMetadata
    from ..interfaces.metadata_provider import MetadataProvider

logger = logging.getLogger(__name__)


class TrackResolver:
    """Turns a free-text query or a link into a Track.

    Strategy, in order:

    1. A track link of the metadata provider is looked up there.
    2. Any other link the audio provider recognises is fetched directly (native).
    3. Free text is searched on the metadata provider when it is configured.
    4. A metadata match is re-searched on the audio provider by title and
       artist: found gives an aggregated track, not found a metadata-only one.
    5. Without a metadata match, the raw text is searched on the audio provider.

    Every provider call is bounded by ``timeout_seconds``. Timeouts and
    provider errors count as "no result" from that provider, so ``resolve``
    never raises.
    """

    def __init__(
        self,
        *,
        audio_provider: AudioProvider,
        metadata_provider: MetadataProvider | None = None,
        timeout_seconds: float = ResolverConstants.DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._audio = audio_provider
        self._metadata = metadata_provider
        self._timeout = timeout_seconds

    async def resolve(self, query: str) -> Track | None:
        """Resolve a query, returning None when nothing was found anywhere."""
        query = query.strip()
        if not query:
            return None
        logger.debug(LogTemplates.RESOLVE_STARTED, query)

        track = await self._resolve(query)
        if track is None:
            logger.info(LogTemplates.RESOLVE_NOT_FOUND, query)
        else:
            logger.info(LogTemplates.RESOLVE_RESULT, query, track.title, track.provenance.value)
        return track

    async def resolve_playable(self, query: str) -> Track:
        """Resolve a query to a track that can be enqueued.

        Raises:
            ResolutionFailureError: Nothing was found.
            MetadataOnlyError: A match was found but has no stream locator.
        """
        track = await self.resolve(query)
        if track is None:
            raise ResolutionFailureError(query)
        if not track.is_playable:
            raise MetadataOnlyError(track.title)
        return track

    async def _resolve(self, query: str) -> Track | None:
        metadata = self._metadata
        secondary: TrackMetadata | None = None

        if metadata is not None and metadata.is_track_link(query):
            if metadata.is_configured:
                secondary = await self._guarded("metadata lookup", query, metadata.lookup(query))
            else:
                logger.debug(LogTemplates.SECONDARY_SKIPPED)
        elif self._audio.is_direct_link(query):
            primary = await self._guarded("audio lookup", query, self._audio.lookup(query))
            return self._native(primary) if primary else None
        elif metadata is not None and metadata.is_configured:
            secondary = await self._guarded("metadata search", query, metadata.search(query))
        else:
            logger.debug(LogTemplates.SECONDARY_SKIPPED)

        if secondary is not None:
            derived = secondary.search_text
            primary = await self._guarded("audio search", derived, self._audio.search(derived))
            if primary is None:
                return self._metadata_only(secondary)
            return self._aggregated(primary, secondary)

        primary = await self._guarded("audio search", query, self._audio.search(query))
        return self._native(primary) if primary else None

    async def _guarded(
        self, label: str, query: str, call: Awaitable[TrackMetadata | None]
    ) -> TrackMetadata | None:
        try:
            async with asyncio.timeout(self._timeout):
                return await call
        except TimeoutError:
            logger.warning(LogTemplates.PROVIDER_TIMEOUT, label, self._timeout, query)
        except Exception as e:
            logger.warning(LogTemplates.PROVIDER_FAILED, label, query, e)
        return None

    @staticmethod
    def _native(primary: TrackMetadata) -> Track | None:
        if primary.stream_url is None:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, primary.title)
            return None
        return Track(
            id=TrackId(primary.source_id),
            title=primary.title,
            artist=primary.artist,
            duration_seconds=primary.duration_seconds,
            stream_url=primary.stream_url,
            webpage_url=primary.webpage_url,
            thumbnail_url=primary.thumbnail_url,
            provenance=TrackProvenance.NATIVE,
        )

    @staticmethod
    def _aggregated(primary: TrackMetadata, secondary: TrackMetadata) -> Track:
        if primary.stream_url is None:
            return TrackResolver._metadata_only(secondary)
        return Track(
            id=TrackId(primary.source_id),
            title=secondary.title,
            artist=secondary.artist,
            duration_seconds=primary.duration_seconds or secondary.duration_seconds,
            stream_url=primary.stream_url,
            webpage_url=primary.webpage_url,
            thumbnail_url=secondary.thumbnail_url or primary.thumbnail_url,
            provenance=TrackProvenance.AGGREGATED,
            secondary_url=secondary.webpage_url,
            provenance_note=ResolverConstants.AGGREGATED_NOTE,
        )

    @staticmethod
    def _metadata_only(secondary: TrackMetadata) -> Track:
        return Track(
            id=TrackId(secondary.source_id),
            title=secondary.title,
            artist=secondary.artist,
            duration_seconds=secondary.duration_seconds,
            thumbnail_url=secondary.thumbnail_url,
            provenance=TrackProvenance.METADATA_ONLY,
            secondary_url=secondary.webpage_url,
        )
