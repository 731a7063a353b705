"""
Playlists Bounded Context

User-owned, named lists of saved tracks that can be queued again later.
"""

from discord_music_queue.domain.playlists.entities import Playlist, PlaylistEntry
from discord_music_queue.domain.playlists.repository import PlaylistRepository

__all__ = [
    "Playlist",
    "PlaylistEntry",
    "PlaylistRepository",
]
