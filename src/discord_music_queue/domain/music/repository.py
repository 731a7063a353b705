"""
Music Domain Repository Interfaces

Abstract base classes defining the contracts for the guild queue store.
Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from discord_music_queue.domain.music.entities import GuildPlaybackSession


class SessionRepository(ABC):
    """Abstract store of guild playback sessions.

    Sessions hold live transport handles, so implementations return the same
    session object for a guild on every call. Entries are created on first
    reference and are never removed: stopping playback clears a session, it
    does not delete it.
    """

    @abstractmethod
    async def get(self, guild_id: int) -> GuildPlaybackSession | None:
        """Retrieve a session by guild ID.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The session if one was created before, None otherwise.
        """
        ...

    @abstractmethod
    async def get_or_create(self, guild_id: int) -> GuildPlaybackSession:
        """Get an existing session or create a new, idle one.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The existing or newly created session.
        """
        ...

    @abstractmethod
    async def exists(self, guild_id: int) -> bool:
        ...

    @abstractmethod
    async def get_all_active(self) -> list[GuildPlaybackSession]:
        """Get all sessions that are currently playing or paused."""
        ...

    @abstractmethod
    async def count(self) -> int:
        ...
