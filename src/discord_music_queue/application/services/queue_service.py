"""Queue Application Service - manages queue operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.music.value_objects import LoopMode
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonEmptyStr, QueuePositionInt
from .queue_models import EnqueueResult

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.repository import SessionRepository

logger = logging.getLogger(__name__)


class QueueApplicationService:
    """Manages queue operations (add, remove, clear, shuffle, loop) for guilds.

    Domain errors raised by the session (full queue, metadata-only track,
    shuffle precondition, bad loop mode) propagate to the caller unchanged.
    """

    def __init__(self, *, session_repository: SessionRepository) -> None:
        self._session_repo = session_repository

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        track: Track,
        user_id: DiscordSnowflake,
        user_name: NonEmptyStr,
    ) -> EnqueueResult:
        session = await self._session_repo.get_or_create(guild_id)

        track_with_requester = track.with_requester(user_id=user_id, user_name=user_name)
        position = session.enqueue(track_with_requester)

        logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position.value, guild_id)

        return EnqueueResult(
            track=track_with_requester,
            position=position.value,
            queue_length=session.queue_length,
            should_start=session.is_idle,
        )

    async def remove(self, guild_id: DiscordSnowflake, position: QueuePositionInt) -> Track | None:
        session = await self._session_repo.get(guild_id)
        if session is None:
            return None

        track = session.remove_at(position)
        if track:
            logger.info(LogTemplates.QUEUE_REMOVED, track.title, guild_id)

        return track

    async def clear(self, guild_id: DiscordSnowflake) -> int:
        session = await self._session_repo.get(guild_id)
        if session is None:
            return 0

        count = session.clear_queue()
        logger.info(LogTemplates.QUEUE_CLEARED, count, guild_id)
        return count

    async def shuffle(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get_or_create(guild_id)
        session.shuffle()
        logger.info(LogTemplates.QUEUE_SHUFFLED, guild_id)

    async def set_loop(self, guild_id: DiscordSnowflake, mode: LoopMode | str) -> LoopMode:
        session = await self._session_repo.get_or_create(guild_id)
        new_mode = session.set_loop(mode)
        logger.info(LogTemplates.LOOP_MODE_CHANGED, new_mode.value, guild_id)
        return new_mode

