"""Centralized constants for database schema, providers, audio and limits.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"


class AudioConstants:
    """Audio and FFmpeg configuration constants."""

    # FFmpeg Options
    FFMPEG_BEFORE_OPTIONS_DEFAULT = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS_DEFAULT = "-vn"  # No video

    # yt-dlp Options
    YTDLP_FORMAT_DEFAULT = "bestaudio/best"

    # Fixed at unity; volume control is reserved
    DEFAULT_VOLUME = 1.0
    CONNECT_TIMEOUT_SECONDS = 10.0


class ResolverConstants:
    """Track resolution constants."""

    DEFAULT_TIMEOUT_SECONDS = 8.0
    AGGREGATED_NOTE = "Found on Spotify, streaming from YouTube"
    UNKNOWN_ARTIST = "Unknown"
    INFO_CACHE_TTL_SECONDS = 600


class SpotifyEndpoints:
    """Spotify Web API endpoints used by the metadata provider."""

    TOKEN_URL = "https://accounts.spotify.com/api/token"
    API_BASE_URL = "https://api.spotify.com/v1"
    SEARCH_PATH = "/search"
    TRACK_PATH = "/tracks/{track_id}"
    OPEN_TRACK_URL = "https://open.spotify.com/track/{track_id}"

    # Refresh the token slightly before Spotify expires it
    TOKEN_EXPIRY_MARGIN_SECONDS = 60


class DatabaseURLSchemes:
    """Valid database URL schemes for validation."""

    SQLITE = "sqlite://"

    # For in-memory testing
    MEMORY = ":memory:"
    MEMORY_SHARED_URI = "file:discord-music-queue?mode=memory&cache=shared"


class LogLevels:
    """Valid logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LimitConstants:
    """Numeric limits and constraints."""

    MAX_QUEUE_SIZE = 100
    QUEUE_DISPLAY_LIMIT = 10
    MAX_PLAYLISTS_PER_USER = 25
    MAX_PLAYLIST_TRACKS = 200
    SHUFFLE_MIN_TRACKS = 2
