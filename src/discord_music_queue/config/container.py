"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the store, providers, services and handlers.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.play_track import PlayTrackHandler
    from ..application.interfaces.audio_provider import AudioProvider
    from ..application.interfaces.metadata_provider import MetadataProvider
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.queries.get_current import GetCurrentTrackHandler
    from ..application.queries.get_queue import GetQueueHandler
    from ..application.services.playback_service import PlaybackApplicationService
    from ..application.services.playlist_service import PlaylistApplicationService
    from ..application.services.queue_service import QueueApplicationService
    from ..application.services.track_resolver import TrackResolver
    from ..domain.music.repository import SessionRepository
    from ..domain.playlists.repository import PlaylistRepository
    from ..domain.shared.events import EventBus
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _session_repository: SessionRepository | None = None
    _playlist_repository: PlaylistRepository | None = None

    # Providers and adapters
    _audio_provider: AudioProvider | None = None
    _metadata_provider: MetadataProvider | None = None
    _voice_transport: VoiceTransport | None = None
    _event_bus: EventBus | None = None

    # Application services
    _track_resolver: TrackResolver | None = None
    _playback_service: PlaybackApplicationService | None = None
    _queue_service: QueueApplicationService | None = None
    _playlist_service: PlaylistApplicationService | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None

    # Query handlers
    _get_queue_handler: GetQueueHandler | None = None
    _get_current_handler: GetCurrentTrackHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Persistence ===

    @property
    def database(self) -> Database:
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def session_repository(self) -> SessionRepository:
        """The guild queue store. Sessions live in memory only."""
        if self._session_repository is None:
            from ..infrastructure.persistence.repositories.session_repository import (
                InMemorySessionRepository,
            )

            self._session_repository = InMemorySessionRepository(
                max_queue_size=self.settings.audio.max_queue_size
            )
        return self._session_repository

    @property
    def playlist_repository(self) -> PlaylistRepository:
        if self._playlist_repository is None:
            from ..infrastructure.persistence.repositories.playlist_repository import (
                SQLitePlaylistRepository,
            )

            self._playlist_repository = SQLitePlaylistRepository(self.database)
        return self._playlist_repository

    # === Providers and adapters ===

    @property
    def audio_provider(self) -> AudioProvider:
        """Get the primary (yt-dlp) audio provider."""
        if self._audio_provider is None:
            from ..infrastructure.audio.ytdlp_provider import YtDlpAudioProvider

            self._audio_provider = YtDlpAudioProvider(self.settings.audio)
        return self._audio_provider

    @property
    def metadata_provider(self) -> MetadataProvider:
        """Get the secondary (Spotify) metadata provider."""
        if self._metadata_provider is None:
            from ..infrastructure.metadata.spotify_client import SpotifyMetadataProvider

            self._metadata_provider = SpotifyMetadataProvider(self.settings.spotify)
        return self._metadata_provider

    @property
    def voice_transport(self) -> VoiceTransport:
        if self._voice_transport is None:
            from ..infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(self.bot, self.settings.audio)
        return self._voice_transport

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    # === Application Services ===

    @property
    def track_resolver(self) -> TrackResolver:
        if self._track_resolver is None:
            from ..application.services.track_resolver import TrackResolver

            self._track_resolver = TrackResolver(
                audio_provider=self.audio_provider,
                metadata_provider=self.metadata_provider,
                timeout_seconds=self.settings.resolver.timeout_seconds,
            )
        return self._track_resolver

    @property
    def playback_service(self) -> PlaybackApplicationService:
        """Get the playback application service."""
        if self._playback_service is None:
            from ..application.services.playback_service import (
                PlaybackApplicationService,
            )

            self._playback_service = PlaybackApplicationService(
                session_repository=self.session_repository,
                voice_transport=self.voice_transport,
                event_bus=self.event_bus,
            )
        return self._playback_service

    @property
    def queue_service(self) -> QueueApplicationService:
        """Get the queue application service."""
        if self._queue_service is None:
            from ..application.services.queue_service import QueueApplicationService

            self._queue_service = QueueApplicationService(
                session_repository=self.session_repository,
            )
        return self._queue_service

    @property
    def playlist_service(self) -> PlaylistApplicationService:
        if self._playlist_service is None:
            from ..application.services.playlist_service import PlaylistApplicationService

            self._playlist_service = PlaylistApplicationService(
                playlist_repository=self.playlist_repository,
                session_repository=self.session_repository,
                queue_service=self.queue_service,
                track_resolver=self.track_resolver,
            )
        return self._playlist_service

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        """Get the play track command handler."""
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                track_resolver=self.track_resolver,
                queue_service=self.queue_service,
                playback_service=self.playback_service,
            )
        return self._play_track_handler

    # === Query Handlers ===

    @property
    def get_queue_handler(self) -> GetQueueHandler:
        """Get the get queue query handler."""
        if self._get_queue_handler is None:
            from ..application.queries.get_queue import GetQueueHandler

            self._get_queue_handler = GetQueueHandler(
                session_repository=self.session_repository,
            )
        return self._get_queue_handler

    @property
    def get_current_handler(self) -> GetCurrentTrackHandler:
        """Get the get current track query handler."""
        if self._get_current_handler is None:
            from ..application.queries.get_current import GetCurrentTrackHandler

            self._get_current_handler = GetCurrentTrackHandler(
                session_repository=self.session_repository,
            )
        return self._get_current_handler

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Open the database and start the track-end dispatcher."""
        await self.database.initialize()
        self.playback_service.start_dispatcher()

    async def shutdown(self) -> None:
        """Stop playback everywhere and release all resources."""
        if self._playback_service is not None:
            try:
                await self._playback_service.shutdown()
            except Exception as exc:
                logger.warning("Failed stopping playback service: %r", exc)

        if self._metadata_provider is not None:
            await self._metadata_provider.close()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
