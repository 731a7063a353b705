"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"

    # Queue Validation Errors
    INVALID_QUEUE_POSITION = "Queue position cannot be negative"
    QUEUE_FULL = "Queue is full (max {max_size} tracks)"
    NOTHING_PLAYING = "Nothing is playing"
    NOT_PLAYING = "Playback is not running"
    NOT_PAUSED = "Playback is not paused"
    NOT_ENOUGH_TO_SHUFFLE = "Need at least {minimum} queued tracks to shuffle"
    INVARIANT_CURRENT_STATE = "current track must be set exactly when the session is not idle"
    INVARIANT_CURRENT_IN_PENDING = "pending tracks must not contain the current track"
    INVARIANT_UNPLAYABLE = "track '{title}' has no stream locator"

    # Playlist Errors
    PLAYLIST_NAME_TAKEN = "You already have a playlist named '{name}'"
    PLAYLIST_LIMIT_REACHED = "Playlist limit reached (max {limit})"
    PLAYLIST_FULL = "Playlist is full (max {limit} tracks)"
    PLAYLIST_NOT_OWNED = "Playlist '{playlist_id}' does not belong to you"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Settings Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"

    # Audio/Stream Errors
    NO_STREAM_URL_FOR_TRACK = "No stream URL found for {title}"
    VOICE_NOT_CONNECTED = "Not connected to a voice channel"
    GUILD_NOT_FOUND = "Guild {guild_id} is not available"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"
    VOICE_CONNECT_TIMEOUT = "Timed out joining voice channel {channel_id}"
    VOICE_NO_PERMISSION = "Missing permission to join voice channel {channel_id}"
    STREAM_START_FAILED = "Could not start the audio stream: {error}"

    # Provider Errors
    SPOTIFY_NOT_CONFIGURED = "Spotify credentials are not configured"
    SPOTIFY_NO_TOKEN = "Spotify token response did not contain an access token"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Cache Operations
    CACHE_HIT = "Cache hit for '%s'"
    CACHE_EXPIRED_PRUNED = "Pruned %d expired cache entries"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_CONNECTION_REPLACED = "Replacing voice connection in guild %s (channel %s -> %s)"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup in guild %s"
    VOICE_SELF_DEAFEN_FAILED = "Failed to self-deafen in guild %s: %r"
    VOICE_AFTER_ERROR = "Stream error reported by voice client in guild %s: %r"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s (sequence %s)"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_TRACK_FAILED = "Dropping track '%s' in guild %s after playback failure: %s"
    PLAYBACK_SUPERSEDED = "Playback of '%s' in guild %s was superseded while starting"
    PLAYBACK_NO_CONNECTION = "No voice connection for guild %s; cannot start '%s'"

    # Track-end dispatch
    TRACK_ENDED = "Track %s ended in guild %s (outcome=%s, sequence=%s)"
    TRACK_ENDED_STALE = "Ignoring stale track end for guild %s (track %s, sequence %s)"
    TRACK_SKIPPED = "Skipped track: %s in guild %s"
    DISPATCHER_STARTED = "Track-end dispatcher started"
    DISPATCHER_STOPPED = "Track-end dispatcher stopped"
    DISPATCHER_HANDLER_FAILED = "Track-end handling failed for guild %s"

    # Queue Operations
    QUEUE_EXHAUSTED = "Queue exhausted in guild %s"
    QUEUE_ENQUEUED = "Enqueued track '%s' at position %s in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"

    # Loop Mode
    LOOP_MODE_CHANGED = "Loop mode changed to %s in guild %s"

    # Session Store
    SESSION_CREATED = "Created queue session for guild %s"

    # Resolution/Search
    RESOLVE_STARTED = "Resolving %r"
    RESOLVE_RESULT = "Resolved %r to '%s' (%s)"
    RESOLVE_NOT_FOUND = "Nothing found for %r"
    PROVIDER_TIMEOUT = "%s timed out after %.1fs for %r"
    PROVIDER_FAILED = "%s failed for %r: %r"
    SECONDARY_SKIPPED = "Secondary metadata provider not configured; skipping lookup"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    SPOTIFY_TOKEN_REFRESHED = "Spotify access token refreshed (expires in %ss)"
    SPOTIFY_REQUEST_FAILED = "Spotify request to %s failed with status %s"

    # Playlists
    PLAYLIST_CREATED = "Created playlist %s ('%s') for user %s"
    PLAYLIST_DELETED = "Deleted playlist %s"
    PLAYLIST_TRACK_ADDED = "Added '%s' to playlist %s"
    PLAYLIST_TRACK_REMOVED = "Removed entry %s from playlist %s"
    PLAYLIST_ENTRY_UNRESOLVED = "Skipping playlist entry '%s': %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Music Queue in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COMMAND_ERROR = "Command error in '%s': %s"
    BOT_NOTICE_FAILED = "Could not post notice in guild %s: %s"
    BOT_SHUTDOWN_TIMEOUT = "Shutdown did not finish within %ss"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_STARTING_RUN = "Connecting to Discord..."
    BOT_STOPPED = "Bot stopped"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord channels.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Play / Queue
    PLAY_QUEUED = "✅ Added to queue: **{title}** ({duration}) at position {position}"
    PLAY_NOW_PLAYING = "🎵 Now playing: **{title}** ({duration})"
    PLAY_AGGREGATED_NOTE = "ℹ️ {note}"
    PLAY_METADATA_ONLY = "⚠️ Found **{title}** by {artist} but couldn't find a playable stream."

    # Actions
    ACTION_SKIPPED = "⏭️ Skipped: **{title}**"
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_SHUFFLED = "🔀 Shuffled the queue."
    ACTION_LOOP_MODE_SET = "🔁 Loop mode set to: **{mode}**"
    ACTION_TRACK_REMOVED = "🗑️ Removed: **{title}**"
    ACTION_QUEUE_CLEARED = "🗑️ Cleared {count} tracks from the queue."
    ACTION_SKIPPED_ERROR = "⚠️ Skipped **{title}** due to a playback error."
    ACTION_QUEUE_FINISHED = "✅ Queue finished."

    # Queue Display
    QUEUE_HEADER_NOW_PLAYING = "🎵 **Now playing:** {title} ({duration})"
    QUEUE_HEADER_UP_NEXT = "📋 **Up next:**"
    QUEUE_ENTRY = "`{position}.` {title} ({duration})"
    QUEUE_MORE = "...and {count} more"
    QUEUE_FOOTER = "🔁 Loop: {loop_mode} | {total} tracks | {duration} total"

    # Now Playing
    NOW_PLAYING = "🎵 **{title}** by {artist} ({duration})"
    NOW_PLAYING_STATUS = "Status: {status} | Loop: {loop_mode}"
    NOW_PLAYING_SPOTIFY = "🔗 Spotify: {url}"

    # Playlists
    PLAYLIST_CREATED = "✅ Created playlist **{name}** (id `{playlist_id}`)"
    PLAYLIST_DELETED = "🗑️ Deleted playlist **{name}**"
    PLAYLIST_TRACK_ADDED = "✅ Added **{title}** to **{name}**"
    PLAYLIST_TRACK_REMOVED = "🗑️ Removed **{title}** from **{name}**"
    PLAYLIST_LIST_HEADER = "📂 **Your playlists:**"
    PLAYLIST_LIST_ENTRY = "`{playlist_id}` **{name}** ({count} tracks)"
    PLAYLIST_EMPTY_LIST = "You don't have any playlists yet."
    PLAYLIST_SHOW_HEADER = "📂 **{name}** ({count} tracks)"
    PLAYLIST_IS_EMPTY = "Playlist **{name}** is empty."
    PLAYLIST_QUEUED = "✅ Queued {queued} tracks from **{name}** ({failed} could not be played)"

    # Errors
    ERROR_TRACK_NOT_FOUND = "❌ Couldn't find a track for: {query}"
    ERROR_COULD_NOT_JOIN_VOICE = "❌ I couldn't join your voice channel."
    ERROR_INVALID_LOOP_MODE = "❌ Invalid loop mode! Use: off, one, or all"
    ERROR_INVALID_POSITION = "❌ Invalid position: {position}"
    ERROR_PLAYLIST_NOT_FOUND = "❌ Playlist not found: {playlist_id}"
    ERROR_MISSING_ARGUMENT = "❌ Missing argument: {param_name}"
    ERROR_COMMAND_FAILED_SEE_LOGS = "❌ Command failed. See logs."
    ERROR_DOMAIN = "❌ {message}"
    ERROR_BAD_ARGUMENT = "❌ {error}"

    # State Messages
    STATE_NOTHING_PLAYING = "Nothing is playing."
    STATE_QUEUE_EMPTY = "Queue is empty."
    STATE_MUST_BE_IN_VOICE = "You must be in a voice channel to use this command!"
    STATE_SERVER_ONLY = "This command can only be used in a server."
