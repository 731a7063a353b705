"""AudioProvider implementation using yt-dlp for link extraction and YouTube search."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import re
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_music_queue.application.interfaces.audio_provider import AudioProvider, TrackMetadata
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.shared.constants import ResolverConstants
from discord_music_queue.domain.shared.messages import LogTemplates
from discord_music_queue.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    HASH_ID_LENGTH,
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^https?://", re.IGNORECASE)

YOUTUBE_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/|youtube\.com/shorts/)([a-zA-Z0-9_-]{11})"
)


def _generate_track_id(url: str) -> str:
    match = YOUTUBE_ID_PATTERN.search(url)
    if match:
        return match.group(1)

    return hashlib.sha256(url.encode()).hexdigest()[:HASH_ID_LENGTH]


class YtDlpAudioProvider(AudioProvider):
    """Primary provider: resolves links and searches YouTube, yielding stream URLs.

    yt-dlp is blocking, so extraction runs in a worker thread. Extraction
    results are cached per URL for ``settings.info_cache_ttl_seconds``.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)
        self._cache_ttl = self._settings.info_cache_ttl_seconds
        self._info_cache: dict[str, CacheEntry] = {}

    def _opts(self) -> dict[str, Any]:
        return self._base_opts.model_dump(exclude_none=True)

    def is_direct_link(self, query: str) -> bool:
        return bool(URL_PATTERN.match(query.strip()))

    async def lookup(self, url: str) -> TrackMetadata | None:
        info = await asyncio.to_thread(self._extract_info_sync, url)
        return self._info_to_metadata(info) if info else None

    async def search(self, query: str) -> TrackMetadata | None:
        results = await asyncio.to_thread(self._search_sync, query)
        for info in results:
            metadata = self._info_to_metadata(info)
            if metadata is not None:
                return metadata
        return None

    def _info_to_metadata(self, info: YtDlpTrackInfo) -> TrackMetadata | None:
        webpage_url = info.webpage_url
        stream_url = self._extract_stream_url(info)
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, info.title)
            return None

        source_id = info.id or _generate_track_id(webpage_url or stream_url)
        return TrackMetadata(
            source_id=source_id,
            title=info.title[:500],
            artist=(
                info.artist
                or info.creator
                or info.uploader
                or info.channel
                or ResolverConstants.UNKNOWN_ARTIST
            ),
            duration_seconds=info.duration,
            stream_url=stream_url,
            webpage_url=webpage_url,
            thumbnail_url=info.thumbnail,
        )

    def _extract_stream_url(self, info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return self._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    def _cached(self, key: str, now: float) -> CacheEntry | None:
        cached = self._info_cache.get(key)
        if cached is None:
            return None
        if now - cached.cached_at < self._cache_ttl:
            logger.debug(LogTemplates.CACHE_HIT, key[:LOG_URL_TRUNCATE])
            return cached
        self._info_cache.pop(key, None)
        return None

    def _store(self, key: str, info: YtDlpTrackInfo | None, now: float) -> None:
        self._info_cache[key] = CacheEntry(info=info, cached_at=now)
        if len(self._info_cache) > CACHE_MAX_SIZE:
            expired = [k for k, e in self._info_cache.items() if now - e.cached_at >= self._cache_ttl]
            for k in expired:
                self._info_cache.pop(k, None)
            if expired:
                logger.debug(LogTemplates.CACHE_EXPIRED_PRUNED, len(expired))

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        now = time.time()
        cached = self._cached(url, now)
        if cached is not None:
            return cached.info

        try:
            with YoutubeDL(params=cast(Any, self._opts())) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

        result = YtDlpTrackInfo.model_validate(dict(data)) if isinstance(data, dict) else None
        self._store(url, result, now)
        return result

    def _search_sync(self, query: str) -> list[YtDlpTrackInfo]:
        try:
            with YoutubeDL(params=cast(Any, self._opts())) as ydl:
                data = ydl.extract_info(f"ytsearch1:{query}", download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []

        if not isinstance(data, dict):
            return []

        entries = data.get("entries", [])
        if not isinstance(entries, list):
            return []

        return [YtDlpTrackInfo.model_validate(dict(e)) for e in entries if e]
