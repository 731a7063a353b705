"""Playlist Application Service - saved playlists and loading them into a guild's queue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ...domain.playlists.entities import Playlist, PlaylistEntry
from ...domain.shared.constants import LimitConstants
from ...domain.shared.exceptions import (
    BusinessRuleViolationError,
    DomainError,
    EntityNotFoundError,
    PreconditionFailedError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.repository import SessionRepository
    from ...domain.playlists.repository import PlaylistRepository
    from .queue_service import QueueApplicationService
    from .track_resolver import TrackResolver

logger = logging.getLogger(__name__)


class PlaylistEnqueueResult(BaseModel):
    playlist: Playlist
    queued: NonNegativeInt = 0
    failed: NonNegativeInt = 0
    should_start: bool = False


class PlaylistApplicationService:
    """Creates, edits and plays user playlists.

    Anyone may view or queue a playlist; only its owner may change it.
    """

    def __init__(
        self,
        *,
        playlist_repository: PlaylistRepository,
        session_repository: SessionRepository,
        queue_service: QueueApplicationService,
        track_resolver: TrackResolver,
    ) -> None:
        self._playlist_repo = playlist_repository
        self._session_repo = session_repository
        self._queue_service = queue_service
        self._resolver = track_resolver

    async def create_playlist(self, owner_id: DiscordSnowflake, name: str) -> Playlist:
        if await self._playlist_repo.find_by_name(owner_id, name.strip()) is not None:
            raise BusinessRuleViolationError(
                rule="UNIQUE_PLAYLIST_NAME",
                message=ErrorMessages.PLAYLIST_NAME_TAKEN.format(name=name.strip()),
            )

        existing = await self._playlist_repo.list_for_owner(owner_id)
        if len(existing) >= LimitConstants.MAX_PLAYLISTS_PER_USER:
            raise BusinessRuleViolationError(
                rule="MAX_PLAYLISTS_PER_USER",
                message=ErrorMessages.PLAYLIST_LIMIT_REACHED.format(
                    limit=LimitConstants.MAX_PLAYLISTS_PER_USER
                ),
            )

        playlist = Playlist.new(owner_id, name)
        await self._playlist_repo.create(playlist)
        logger.info(LogTemplates.PLAYLIST_CREATED, playlist.id, playlist.name, owner_id)
        return playlist

    async def list_playlists(self, owner_id: DiscordSnowflake) -> list[Playlist]:
        return await self._playlist_repo.list_for_owner(owner_id)

    async def get_playlist(self, playlist_id: str) -> Playlist:
        """Raises EntityNotFoundError if the playlist does not exist."""
        playlist = await self._playlist_repo.get(playlist_id)
        if playlist is None:
            raise EntityNotFoundError("Playlist", playlist_id)
        return playlist

    async def _owned_playlist(self, playlist_id: str, user_id: DiscordSnowflake) -> Playlist:
        playlist = await self.get_playlist(playlist_id)
        if not playlist.is_owned_by(user_id):
            raise BusinessRuleViolationError(
                rule="PLAYLIST_OWNER",
                message=ErrorMessages.PLAYLIST_NOT_OWNED.format(playlist_id=playlist_id),
            )
        return playlist

    async def add_current_track(
        self, guild_id: DiscordSnowflake, playlist_id: str, user_id: DiscordSnowflake
    ) -> tuple[Playlist, PlaylistEntry]:
        """Save the guild's current track to the end of a playlist."""
        playlist = await self._owned_playlist(playlist_id, user_id)

        session = await self._session_repo.get(guild_id)
        if session is None or session.current_track is None:
            raise PreconditionFailedError("playlist add", "idle", ErrorMessages.NOTHING_PLAYING)

        if playlist.track_count >= LimitConstants.MAX_PLAYLIST_TRACKS:
            raise BusinessRuleViolationError(
                rule="MAX_PLAYLIST_TRACKS",
                message=ErrorMessages.PLAYLIST_FULL.format(limit=LimitConstants.MAX_PLAYLIST_TRACKS),
            )

        entry = PlaylistEntry.from_track(session.current_track)
        await self._playlist_repo.add_entry(playlist.id, entry)
        logger.info(LogTemplates.PLAYLIST_TRACK_ADDED, entry.title, playlist.id)
        return playlist, entry

    async def remove_track(
        self, playlist_id: str, user_id: DiscordSnowflake, position: int
    ) -> tuple[Playlist, PlaylistEntry | None]:
        """Remove the entry at a zero-based position; the entry is None when out of range."""
        playlist = await self._owned_playlist(playlist_id, user_id)
        entry = await self._playlist_repo.remove_entry(playlist.id, position)
        if entry is not None:
            logger.info(LogTemplates.PLAYLIST_TRACK_REMOVED, position, playlist.id)
        return playlist, entry

    async def delete_playlist(self, playlist_id: str, user_id: DiscordSnowflake) -> Playlist:
        playlist = await self._owned_playlist(playlist_id, user_id)
        await self._playlist_repo.delete(playlist.id)
        logger.info(LogTemplates.PLAYLIST_DELETED, playlist.id)
        return playlist

    async def enqueue_playlist(
        self,
        guild_id: DiscordSnowflake,
        playlist_id: str,
        user_id: DiscordSnowflake,
        user_name: NonEmptyStr,
    ) -> PlaylistEnqueueResult:
        """Resolve every entry again and append the playable ones to the guild's queue.

        Entries that no longer resolve are counted as failed. Once the queue
        is full the remaining entries are counted as failed too.
        """
        playlist = await self.get_playlist(playlist_id)
        session = await self._session_repo.get_or_create(guild_id)
        was_idle = session.is_idle

        queued = 0
        failed = 0
        for index, entry in enumerate(playlist.entries):
            try:
                track = await self._resolver.resolve_playable(entry.query)
            except DomainError as e:
                logger.info(LogTemplates.PLAYLIST_ENTRY_UNRESOLVED, entry.title, e.message)
                failed += 1
                continue

            try:
                await self._queue_service.enqueue(guild_id, track, user_id, user_name)
            except BusinessRuleViolationError as e:
                logger.info(LogTemplates.PLAYLIST_ENTRY_UNRESOLVED, entry.title, e.message)
                failed += len(playlist.entries) - index
                break
            queued += 1

        return PlaylistEnqueueResult(
            playlist=playlist,
            queued=queued,
            failed=failed,
            should_start=was_idle and queued > 0,
        )
