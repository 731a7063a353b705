"""Port interface for the real-time voice transport."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from discord_music_queue.domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import Track

TrackEndCallback = Callable[[BaseException | None], None]
"""Called exactly once per play, with the stream error or None on natural end.

May be invoked from a non-event-loop thread.
"""


class VoiceTransport(ABC):
    """Interface for voice connections and audio streaming.

    Connections and players are opaque handles; a queue session owns the
    ones it holds and hands them back to the transport for every operation.
    """

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> Any:
        """Join a voice channel and return the connection handle.

        Raises:
            PlaybackFailureError: If the channel cannot be joined.
        """
        ...

    @abstractmethod
    async def disconnect(self, connection: Any) -> None:
        """Tear down a connection handle. Safe to call on a dead connection."""
        ...

    @abstractmethod
    async def play(
        self,
        connection: Any,
        track: Track,
        *,
        volume: float,
        on_end: TrackEndCallback,
    ) -> Any:
        """Start streaming a track and return the player handle.

        Raises:
            PlaybackFailureError: If the stream cannot be started. ``on_end``
                is not called in that case.
        """
        ...

    @abstractmethod
    def stop(self, connection: Any) -> None:
        """Stop the current stream. Its ``on_end`` callback still fires."""
        ...

    @abstractmethod
    def pause(self, connection: Any) -> None:
        ...

    @abstractmethod
    def resume(self, connection: Any) -> None:
        ...

    @abstractmethod
    def is_connected(self, connection: Any) -> bool:
        ...

    @abstractmethod
    def channel_id(self, connection: Any) -> DiscordSnowflake | None:
        """The voice channel a connection is in, or None if it is gone."""
        ...
