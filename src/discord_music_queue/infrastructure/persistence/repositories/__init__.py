"""Repository implementations."""

from discord_music_queue.infrastructure.persistence.repositories.playlist_repository import (
    SQLitePlaylistRepository,
)
from discord_music_queue.infrastructure.persistence.repositories.session_repository import (
    InMemorySessionRepository,
)

__all__ = [
    "InMemorySessionRepository",
    "SQLitePlaylistRepository",
]
