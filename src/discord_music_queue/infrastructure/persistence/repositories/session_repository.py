"""In-memory implementation of the guild queue store."""

from __future__ import annotations

import logging

from discord_music_queue.domain.music.entities import GuildPlaybackSession
from discord_music_queue.domain.music.repository import SessionRepository
from discord_music_queue.domain.shared.constants import LimitConstants
from discord_music_queue.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class InMemorySessionRepository(SessionRepository):
    """Process-wide map of guild ID to playback session.

    Queue state is not persisted: it is lost when the process restarts.
    """

    def __init__(self, max_queue_size: int = LimitConstants.MAX_QUEUE_SIZE) -> None:
        self._sessions: dict[int, GuildPlaybackSession] = {}
        self._max_queue_size = max_queue_size

    async def get(self, guild_id: int) -> GuildPlaybackSession | None:
        return self._sessions.get(guild_id)

    async def get_or_create(self, guild_id: int) -> GuildPlaybackSession:
        session = self._sessions.get(guild_id)
        if session is None:
            session = GuildPlaybackSession(guild_id=guild_id, max_queue_size=self._max_queue_size)
            self._sessions[guild_id] = session
            logger.debug(LogTemplates.SESSION_CREATED, guild_id)
        return session

    async def exists(self, guild_id: int) -> bool:
        return guild_id in self._sessions

    async def get_all_active(self) -> list[GuildPlaybackSession]:
        return [s for s in self._sessions.values() if s.state.is_active]

    async def count(self) -> int:
        return len(self._sessions)
