"""Discord voice transport: voice clients as connections, FFmpeg sources as players."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import discord

from discord_music_queue.application.interfaces.voice_transport import (
    TrackEndCallback,
    VoiceTransport,
)
from discord_music_queue.config.settings import AudioSettings
from discord_music_queue.domain.shared.exceptions import PlaybackFailureError
from discord_music_queue.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ....domain.music.entities import Track

logger = logging.getLogger(__name__)


class DiscordVoiceTransport(VoiceTransport):
    """Connection handles are ``discord.VoiceClient`` objects.

    Player handles are the ``PCMVolumeTransformer`` wrapping the FFmpeg
    source of a play.
    """

    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._ffmpeg_options = self._settings.ffmpeg_options
        self._connect_timeout = self._settings.connect_timeout_seconds

    async def connect(self, guild_id: int, channel_id: int) -> discord.VoiceClient:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            raise PlaybackFailureError(
                str(channel_id), ErrorMessages.GUILD_NOT_FOUND.format(guild_id=guild_id)
            )

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            raise PlaybackFailureError(
                str(channel_id), ErrorMessages.CHANNEL_NOT_VOICE.format(channel_id=channel_id)
            )

        # A client left over from an earlier run blocks a new connect
        if isinstance(guild.voice_client, discord.VoiceClient):
            await self.disconnect(guild.voice_client)

        try:
            async with asyncio.timeout(self._connect_timeout):
                vc = await channel.connect(self_deaf=True)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise PlaybackFailureError(
                channel.name, ErrorMessages.VOICE_CONNECT_TIMEOUT.format(channel_id=channel_id)
            ) from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise PlaybackFailureError(
                channel.name, ErrorMessages.VOICE_NO_PERMISSION.format(channel_id=channel_id)
            ) from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise PlaybackFailureError(channel.name, str(e)) from e

        await self._ensure_self_deaf(guild, channel)
        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)
        return vc

    async def _ensure_self_deaf(
        self,
        guild: discord.Guild,
        channel: discord.VoiceChannel | discord.StageChannel,
    ) -> None:
        try:
            await guild.change_voice_state(channel=channel, self_deaf=True)
        except Exception as exc:
            logger.debug(LogTemplates.VOICE_SELF_DEAFEN_FAILED, guild.id, exc)

    async def disconnect(self, connection: discord.VoiceClient) -> None:
        guild_id = connection.guild.id if connection.guild else None
        try:
            await connection.disconnect(force=True)
        except discord.ClientException:
            logger.debug(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)
            return
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)

    async def play(
        self,
        connection: discord.VoiceClient,
        track: Track,
        *,
        volume: float,
        on_end: TrackEndCallback,
    ) -> discord.PCMVolumeTransformer[Any]:
        if not track.stream_url:
            raise PlaybackFailureError(
                track.title, ErrorMessages.NO_STREAM_URL_FOR_TRACK.format(title=track.title)
            )
        if not connection.is_connected():
            raise PlaybackFailureError(track.title, ErrorMessages.VOICE_NOT_CONNECTED)

        if connection.is_playing() or connection.is_paused():
            connection.stop()

        guild_id = connection.guild.id if connection.guild else None

        def after_callback(error: Exception | None = None) -> None:
            if error is not None:
                logger.warning(LogTemplates.VOICE_AFTER_ERROR, guild_id, error)
            on_end(error)

        try:
            source = discord.FFmpegPCMAudio(
                track.stream_url,
                before_options=self._ffmpeg_options.get("before_options", ""),
                options=self._ffmpeg_options.get("options", ""),
            )
            player = discord.PCMVolumeTransformer(source, volume=volume)
            connection.play(player, after=after_callback)
        except (discord.ClientException, OSError) as e:
            raise PlaybackFailureError(
                track.title, ErrorMessages.STREAM_START_FAILED.format(error=e)
            ) from e

        return player

    def stop(self, connection: discord.VoiceClient) -> None:
        if connection.is_playing() or connection.is_paused():
            connection.stop()

    def pause(self, connection: discord.VoiceClient) -> None:
        if connection.is_playing():
            connection.pause()

    def resume(self, connection: discord.VoiceClient) -> None:
        if connection.is_paused():
            connection.resume()

    def is_connected(self, connection: discord.VoiceClient) -> bool:
        return connection.is_connected()

    def channel_id(self, connection: discord.VoiceClient) -> int | None:
        if connection.is_connected() and connection.channel:
            return connection.channel.id
        return None
