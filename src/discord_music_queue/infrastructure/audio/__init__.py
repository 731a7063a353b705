"""Audio infrastructure - yt-dlp audio provider."""

from discord_music_queue.infrastructure.audio.models import (
    AudioFormatInfo,
    CacheEntry,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from discord_music_queue.infrastructure.audio.ytdlp_provider import YtDlpAudioProvider

__all__ = [
    "AudioFormatInfo",
    "CacheEntry",
    "YtDlpAudioProvider",
    "YtDlpOpts",
    "YtDlpTrackInfo",
]
