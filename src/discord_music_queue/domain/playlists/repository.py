"""
Playlist Repository Interface

Implementations live in the infrastructure layer.
"""

from abc import ABC, abstractmethod

from discord_music_queue.domain.playlists.entities import Playlist, PlaylistEntry


class PlaylistRepository(ABC):
    """Abstract repository for user playlists."""

    @abstractmethod
    async def create(self, playlist: Playlist) -> None:
        """Persist a new, empty playlist."""
        ...

    @abstractmethod
    async def get(self, playlist_id: str) -> Playlist | None:
        """Retrieve a playlist with its entries in order.

        Args:
            playlist_id: The playlist identifier.

        Returns:
            The playlist if found, None otherwise.
        """
        ...

    @abstractmethod
    async def list_for_owner(self, owner_id: int) -> list[Playlist]:
        """All playlists of a user, oldest first."""
        ...

    @abstractmethod
    async def find_by_name(self, owner_id: int, name: str) -> Playlist | None:
        """Case-insensitive lookup of a user's playlist by name."""
        ...

    @abstractmethod
    async def add_entry(self, playlist_id: str, entry: PlaylistEntry) -> int:
        """Append an entry and return its zero-based position."""
        ...

    @abstractmethod
    async def remove_entry(self, playlist_id: str, position: int) -> PlaylistEntry | None:
        """Remove the entry at a zero-based position.

        Returns:
            The removed entry, or None if the position was out of range.
        """
        ...

    @abstractmethod
    async def delete(self, playlist_id: str) -> bool:
        """Delete a playlist and its entries.

        Returns:
            True if the playlist was deleted, False if it didn't exist.
        """
        ...
