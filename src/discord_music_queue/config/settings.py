"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import (
    AudioConstants,
    DatabaseURLSchemes,
    LimitConstants,
    LogLevels,
    ResolverConstants,
)
from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Playlist database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/playlists.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith(DatabaseURLSchemes.SQLITE):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Audio playback and yt-dlp configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    # Fixed at unity; volume control is reserved
    volume: float = Field(default=AudioConstants.DEFAULT_VOLUME, ge=0.0, le=2.0)
    max_queue_size: int = Field(default=LimitConstants.MAX_QUEUE_SIZE, ge=1, le=1000)
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": AudioConstants.FFMPEG_BEFORE_OPTIONS_DEFAULT,
            "options": AudioConstants.FFMPEG_OPTIONS_DEFAULT,
        }
    )
    ytdlp_format: str = AudioConstants.YTDLP_FORMAT_DEFAULT
    info_cache_ttl_seconds: int = Field(default=ResolverConstants.INFO_CACHE_TTL_SECONDS, ge=0)
    connect_timeout_seconds: float = Field(
        default=AudioConstants.CONNECT_TIMEOUT_SECONDS, gt=0.0, le=60.0
    )


class ResolverSettings(BaseModel):
    """Track resolution configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    timeout_seconds: float = Field(
        default=ResolverConstants.DEFAULT_TIMEOUT_SECONDS,
        gt=0.0,
        le=120.0,
        validation_alias=AliasChoices("timeout_seconds", "timeout"),
    )


class SpotifySettings(BaseModel):
    """Spotify Web API credentials. Empty credentials disable the provider."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(default="", validation_alias=AliasChoices("client_id", "id"))
    client_secret: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("client_secret", "secret")
    )
    request_timeout_seconds: float = Field(default=10.0, gt=0.0, le=60.0)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret.get_secret_value())


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested with "__")
    - AUDIO__MAX_QUEUE_SIZE, AUDIO__YTDLP_FORMAT, ...
    - RESOLVER__TIMEOUT_SECONDS
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET
    - DATABASE__URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    spotify: SpotifySettings = Field(default_factory=SpotifySettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {
            LogLevels.DEBUG,
            LogLevels.INFO,
            LogLevels.WARNING,
            LogLevels.ERROR,
            LogLevels.CRITICAL,
        }
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
