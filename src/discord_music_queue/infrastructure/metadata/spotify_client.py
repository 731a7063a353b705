"""MetadataProvider implementation for the Spotify Web API."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.application.interfaces.audio_provider import TrackMetadata
from discord_music_queue.application.interfaces.metadata_provider import MetadataProvider
from discord_music_queue.config.settings import SpotifySettings
from discord_music_queue.domain.music.value_objects import spotify_track_id
from discord_music_queue.domain.shared.constants import ResolverConstants, SpotifyEndpoints
from discord_music_queue.domain.shared.exceptions import DomainError
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class SpotifyAuthError(DomainError):
    """Raised when the client-credentials grant fails."""


# ── Pydantic models for Spotify responses ───────────────────────────────


class _TokenResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    access_token: str = ""
    expires_in: int = 3600


class _SpotifyImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str


class _SpotifyAlbum(BaseModel):
    model_config = ConfigDict(extra="ignore")

    images: list[_SpotifyImage] = Field(default_factory=list)


class _SpotifyArtist(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class _SpotifyTrack(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    duration_ms: int = 0
    artists: list[_SpotifyArtist] = Field(default_factory=list)
    album: _SpotifyAlbum | None = None
    external_urls: dict[str, str] = Field(default_factory=dict)

    def to_metadata(self) -> TrackMetadata:
        artist = ", ".join(a.name for a in self.artists if a.name) or ResolverConstants.UNKNOWN_ARTIST
        thumbnail = self.album.images[0].url if self.album and self.album.images else None
        return TrackMetadata(
            source_id=f"spotify:{self.id}",
            title=self.name[:500],
            artist=artist,
            duration_seconds=min(max(self.duration_ms, 0) // 1000, 86_400),
            webpage_url=self.external_urls.get("spotify")
            or SpotifyEndpoints.OPEN_TRACK_URL.format(track_id=self.id),
            thumbnail_url=thumbnail,
        )


class _TrackPage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[_SpotifyTrack] = Field(default_factory=list)


class _SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    tracks: _TrackPage = Field(default_factory=_TrackPage)


# ── Client ──────────────────────────────────────────────────────────────


class SpotifyMetadataProvider(MetadataProvider):
    """Secondary provider: track search and lookup with the client-credentials flow.

    The access token is cached until shortly before it expires. HTTP and
    credential errors propagate to the caller, which treats them as "no
    result" from this provider.
    """

    def __init__(
        self,
        settings: SpotifySettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or SpotifySettings()
        self._client = client or httpx.AsyncClient(timeout=self._settings.request_timeout_seconds)
        self._owns_client = client is None
        self._token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = asyncio.Lock()

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def is_track_link(self, query: str) -> bool:
        return spotify_track_id(query) is not None

    async def authenticate(self) -> str:
        """Return a valid access token, requesting a new one when needed."""
        if not self.is_configured:
            raise SpotifyAuthError(ErrorMessages.SPOTIFY_NOT_CONFIGURED)

        async with self._token_lock:
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            response = await self._client.post(
                SpotifyEndpoints.TOKEN_URL,
                data={"grant_type": "client_credentials"},
                auth=(
                    self._settings.client_id,
                    self._settings.client_secret.get_secret_value(),
                ),
            )
            if response.status_code != httpx.codes.OK:
                logger.warning(LogTemplates.SPOTIFY_REQUEST_FAILED, "token", response.status_code)
                response.raise_for_status()

            token = _TokenResponse.model_validate(response.json())
            if not token.access_token:
                raise SpotifyAuthError(ErrorMessages.SPOTIFY_NO_TOKEN)

            self._token = token.access_token
            self._token_expires_at = time.monotonic() + max(
                token.expires_in - SpotifyEndpoints.TOKEN_EXPIRY_MARGIN_SECONDS, 0
            )
            logger.debug(LogTemplates.SPOTIFY_TOKEN_REFRESHED, token.expires_in)
            return self._token

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        token = await self.authenticate()
        response = await self._client.get(
            f"{SpotifyEndpoints.API_BASE_URL}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == httpx.codes.UNAUTHORIZED:
            # Token revoked early; drop it so the next call re-authenticates
            self._token = None
        if response.status_code != httpx.codes.OK:
            logger.warning(LogTemplates.SPOTIFY_REQUEST_FAILED, path, response.status_code)
            response.raise_for_status()
        return response.json()

    async def search(self, query: str) -> TrackMetadata | None:
        data = await self._get(
            SpotifyEndpoints.SEARCH_PATH,
            params={"q": query, "type": "track", "limit": 1},
        )
        page = _SearchResponse.model_validate(data)
        if not page.tracks.items:
            return None
        return page.tracks.items[0].to_metadata()

    async def lookup(self, url: str) -> TrackMetadata | None:
        track_id = spotify_track_id(url)
        if track_id is None:
            return None
        data = await self._get(SpotifyEndpoints.TRACK_PATH.format(track_id=track_id))
        return _SpotifyTrack.model_validate(data).to_metadata()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
