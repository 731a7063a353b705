"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (in-memory queue store, SQLite playlists)
- Discord (bot, music cog, voice transport)
- Audio (yt-dlp provider)
- Metadata (Spotify Web API provider)
"""

from discord_music_queue.infrastructure.discord.adapters.voice_transport import DiscordVoiceTransport
from discord_music_queue.infrastructure.discord.bot import create_bot
from discord_music_queue.infrastructure.persistence.database import Database

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
    "Database",
]
