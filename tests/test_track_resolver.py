"""
Unit Tests for TrackResolver

Tests for:
- Direct links resolved natively on the audio provider
- Free text searched on the metadata provider and aggregated
- Metadata-only results when the audio provider has no match
- Fallback to the audio provider when the metadata provider is unconfigured or fails
- Provider timeouts
"""

import asyncio

import pytest

from discord_music_queue.application.interfaces.audio_provider import AudioProvider, TrackMetadata
from discord_music_queue.application.interfaces.metadata_provider import MetadataProvider
from discord_music_queue.application.services.track_resolver import TrackResolver
from discord_music_queue.domain.music.value_objects import TrackProvenance
from discord_music_queue.domain.shared.constants import ResolverConstants
from discord_music_queue.domain.shared.exceptions import MetadataOnlyError, ResolutionFailureError

SPOTIFY_LINK = "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC"


def _primary(title="Never Gonna Give You Up", **kwargs):
    data = {
        "source_id": "dQw4w9WgXcQ",
        "title": title,
        "artist": "Rick Astley",
        "duration_seconds": 213,
        "stream_url": "https://rr1.googlevideo.com/videoplayback?id=1",
        "webpage_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "thumbnail_url": "https://i.ytimg.com/vi/dQw4w9WgXcQ/hq.jpg",
    }
    data.update(kwargs)
    return TrackMetadata(**data)


def _secondary(**kwargs):
    data = {
        "source_id": "spotify:4uLU6hMCjMI75M1A2tKUQC",
        "title": "Never Gonna Give You Up",
        "artist": "Rick Astley",
        "duration_seconds": 214,
        "webpage_url": SPOTIFY_LINK,
        "thumbnail_url": "https://i.scdn.co/image/cover",
    }
    data.update(kwargs)
    return TrackMetadata(**data)


class FakeAudioProvider(AudioProvider):
    def __init__(self, result=None, *, delay=0.0, error=None):
        self.result = result
        self.delay = delay
        self.error = error
        self.searches = []
        self.lookups = []

    def is_direct_link(self, query):
        return query.startswith(("http://", "https://"))

    async def _respond(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def lookup(self, url):
        self.lookups.append(url)
        return await self._respond()

    async def search(self, query):
        self.searches.append(query)
        return await self._respond()


class FakeMetadataProvider(MetadataProvider):
    def __init__(self, result=None, *, configured=True, delay=0.0, error=None):
        self.result = result
        self.configured = configured
        self.delay = delay
        self.error = error
        self.searches = []
        self.lookups = []

    @property
    def is_configured(self):
        return self.configured

    def is_track_link(self, query):
        return "open.spotify.com/track/" in query

    async def _respond(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result

    async def search(self, query):
        self.searches.append(query)
        return await self._respond()

    async def lookup(self, url):
        self.lookups.append(url)
        return await self._respond()

    async def close(self):
        pass


class TestResolveDirectLinks:
    @pytest.mark.asyncio
    async def test_native_link(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(_secondary())
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert track.provenance == TrackProvenance.NATIVE
        assert track.id.value == "dQw4w9WgXcQ"
        assert track.duration_seconds == 213
        assert track.is_playable
        assert audio.lookups == ["https://www.youtube.com/watch?v=dQw4w9WgXcQ"]
        assert metadata.searches == []

    @pytest.mark.asyncio
    async def test_native_link_not_found(self):
        resolver = TrackResolver(audio_provider=FakeAudioProvider(None))

        assert await resolver.resolve("https://example.com/missing") is None

    @pytest.mark.asyncio
    async def test_native_result_without_stream_is_not_found(self):
        audio = FakeAudioProvider(_primary(stream_url=None))
        resolver = TrackResolver(audio_provider=audio)

        assert await resolver.resolve("https://www.youtube.com/watch?v=dQw4w9WgXcQ") is None

    @pytest.mark.asyncio
    async def test_spotify_link_is_aggregated(self):
        audio = FakeAudioProvider(_primary(title="Rick Astley - Never Gonna Give You Up (Official)"))
        metadata = FakeMetadataProvider(_secondary())
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve(SPOTIFY_LINK)

        assert track.provenance == TrackProvenance.AGGREGATED
        assert track.title == "Never Gonna Give You Up"
        assert track.artist == "Rick Astley"
        assert track.secondary_url == SPOTIFY_LINK
        assert track.stream_url.startswith("https://rr1.googlevideo.com")
        assert track.provenance_note == ResolverConstants.AGGREGATED_NOTE
        assert metadata.lookups == [SPOTIFY_LINK]
        assert audio.searches == ["Never Gonna Give You Up Rick Astley"]

    @pytest.mark.asyncio
    async def test_spotify_link_without_credentials_searches_audio_provider(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(_secondary(), configured=False)
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve(SPOTIFY_LINK)

        assert track.provenance == TrackProvenance.NATIVE
        assert metadata.lookups == []
        assert audio.searches == [SPOTIFY_LINK]


class TestResolveFreeText:
    @pytest.mark.asyncio
    async def test_aggregated_prefers_secondary_metadata(self):
        audio = FakeAudioProvider(_primary(duration_seconds=0, thumbnail_url=None))
        metadata = FakeMetadataProvider(_secondary())
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("never gonna give you up")

        assert track.provenance == TrackProvenance.AGGREGATED
        assert track.id.value == "dQw4w9WgXcQ"
        assert track.duration_seconds == 214
        assert track.thumbnail_url == "https://i.scdn.co/image/cover"
        assert track.webpage_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert metadata.searches == ["never gonna give you up"]

    @pytest.mark.asyncio
    async def test_metadata_only_when_audio_has_no_match(self):
        metadata = FakeMetadataProvider(_secondary())
        resolver = TrackResolver(audio_provider=FakeAudioProvider(None), metadata_provider=metadata)

        track = await resolver.resolve("never gonna give you up")

        assert track.provenance == TrackProvenance.METADATA_ONLY
        assert not track.is_playable
        assert track.title == "Never Gonna Give You Up"
        assert track.secondary_url == SPOTIFY_LINK

    @pytest.mark.asyncio
    async def test_no_metadata_match_falls_back_to_raw_search(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(None)
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("  some obscure song  ")

        assert track.provenance == TrackProvenance.NATIVE
        assert audio.searches == ["some obscure song"]

    @pytest.mark.asyncio
    async def test_unconfigured_metadata_provider_is_skipped(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(_secondary(), configured=False)
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("rick astley")

        assert track.provenance == TrackProvenance.NATIVE
        assert metadata.searches == []

    @pytest.mark.asyncio
    async def test_no_metadata_provider_at_all(self):
        audio = FakeAudioProvider(_primary())
        resolver = TrackResolver(audio_provider=audio)

        track = await resolver.resolve("rick astley")

        assert track.provenance == TrackProvenance.NATIVE

    @pytest.mark.asyncio
    async def test_nothing_found_anywhere(self):
        resolver = TrackResolver(
            audio_provider=FakeAudioProvider(None), metadata_provider=FakeMetadataProvider(None)
        )

        assert await resolver.resolve("zzzz") is None

    @pytest.mark.asyncio
    async def test_blank_query(self):
        audio = FakeAudioProvider(_primary())
        resolver = TrackResolver(audio_provider=audio)

        assert await resolver.resolve("   ") is None
        assert audio.searches == []


class TestResolveProviderFailures:
    @pytest.mark.asyncio
    async def test_metadata_error_falls_back_to_audio(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(error=RuntimeError("503"))
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("rick astley")

        assert track.provenance == TrackProvenance.NATIVE

    @pytest.mark.asyncio
    async def test_metadata_timeout_falls_back_to_audio(self):
        audio = FakeAudioProvider(_primary())
        metadata = FakeMetadataProvider(_secondary(), delay=1.0)
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata, timeout_seconds=0.05)

        track = await resolver.resolve("rick astley")

        assert track.provenance == TrackProvenance.NATIVE

    @pytest.mark.asyncio
    async def test_audio_timeout_is_not_found(self):
        audio = FakeAudioProvider(_primary(), delay=1.0)
        resolver = TrackResolver(audio_provider=audio, timeout_seconds=0.05)

        assert await resolver.resolve("rick astley") is None

    @pytest.mark.asyncio
    async def test_audio_error_after_metadata_match_is_metadata_only(self):
        audio = FakeAudioProvider(error=RuntimeError("extractor broke"))
        metadata = FakeMetadataProvider(_secondary())
        resolver = TrackResolver(audio_provider=audio, metadata_provider=metadata)

        track = await resolver.resolve("rick astley")

        assert track.provenance == TrackProvenance.METADATA_ONLY


class TestResolvePlayable:
    @pytest.mark.asyncio
    async def test_returns_playable_track(self):
        resolver = TrackResolver(audio_provider=FakeAudioProvider(_primary()))

        track = await resolver.resolve_playable("rick astley")

        assert track.is_playable

    @pytest.mark.asyncio
    async def test_not_found_raises(self):
        resolver = TrackResolver(audio_provider=FakeAudioProvider(None))

        with pytest.raises(ResolutionFailureError):
            await resolver.resolve_playable("zzzz")

    @pytest.mark.asyncio
    async def test_metadata_only_raises(self):
        resolver = TrackResolver(
            audio_provider=FakeAudioProvider(None),
            metadata_provider=FakeMetadataProvider(_secondary()),
        )

        with pytest.raises(MetadataOnlyError):
            await resolver.resolve_playable("rick astley")
