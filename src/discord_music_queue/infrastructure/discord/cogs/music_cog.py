"""Prefix-command music cog delegating to application services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_music_queue.application.commands.play_track import PlayTrackCommand, PlayTrackStatus
from discord_music_queue.application.queries.get_current import GetCurrentTrackQuery
from discord_music_queue.application.queries.get_queue import GetQueueQuery
from discord_music_queue.domain.music.events import QueueExhausted, TrackPlaybackFailed
from discord_music_queue.domain.music.value_objects import TrackProvenance
from discord_music_queue.domain.shared.constants import LimitConstants
from discord_music_queue.domain.shared.exceptions import (
    DomainError,
    EntityNotFoundError,
    InvalidLoopModeError,
    PlaybackFailureError,
)
from discord_music_queue.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_music_queue.utils.reply import format_duration, truncate

if TYPE_CHECKING:
    from ....application.commands.play_track import PlayTrackResult
    from ....application.queries.get_queue import QueueInfo
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

        # Text channel each guild last used a command in, for unsolicited notices
        self._notice_channels: dict[int, int] = {}

    async def cog_load(self) -> None:
        event_bus = self.container.event_bus
        event_bus.subscribe(TrackPlaybackFailed, self._on_track_failed)
        event_bus.subscribe(QueueExhausted, self._on_queue_exhausted)

    async def cog_unload(self) -> None:
        event_bus = self.container.event_bus
        event_bus.unsubscribe(TrackPlaybackFailed, self._on_track_failed)
        event_bus.unsubscribe(QueueExhausted, self._on_queue_exhausted)
        self._notice_channels.clear()

    async def cog_check(self, ctx: commands.Context) -> bool:
        if ctx.guild is None:
            raise commands.NoPrivateMessage(DiscordUIMessages.STATE_SERVER_ONLY)
        self._notice_channels[ctx.guild.id] = ctx.channel.id
        return True

    async def cog_command_error(self, ctx: commands.Context, error: Exception) -> None:
        original = getattr(error, "original", error)

        if isinstance(original, InvalidLoopModeError):
            await ctx.send(DiscordUIMessages.ERROR_INVALID_LOOP_MODE)
        elif isinstance(original, EntityNotFoundError):
            await ctx.send(
                DiscordUIMessages.ERROR_PLAYLIST_NOT_FOUND.format(playlist_id=original.identifier)
            )
        elif isinstance(original, DomainError):
            await ctx.send(DiscordUIMessages.ERROR_DOMAIN.format(message=original.message))
        elif isinstance(original, commands.NoPrivateMessage):
            await ctx.send(DiscordUIMessages.STATE_SERVER_ONLY)
        elif isinstance(original, commands.MissingRequiredArgument):
            await ctx.send(
                DiscordUIMessages.ERROR_MISSING_ARGUMENT.format(param_name=original.param.name)
            )
        elif isinstance(original, commands.UserInputError):
            await ctx.send(DiscordUIMessages.ERROR_BAD_ARGUMENT.format(error=original))
        else:
            logger.error(
                LogTemplates.BOT_COMMAND_ERROR,
                getattr(ctx.command, "qualified_name", "<unknown>"),
                original,
                exc_info=original,
            )
            await ctx.send(DiscordUIMessages.ERROR_COMMAND_FAILED_SEE_LOGS)

    # === Event subscribers ===

    async def _send_notice(self, guild_id: int, message: str) -> None:
        channel_id = self._notice_channels.get(guild_id)
        if channel_id is None:
            return
        channel = self.bot.get_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            return
        try:
            await channel.send(message)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.BOT_NOTICE_FAILED, guild_id, e)

    async def _on_track_failed(self, event: TrackPlaybackFailed) -> None:
        await self._send_notice(
            event.guild_id, DiscordUIMessages.ACTION_SKIPPED_ERROR.format(title=event.track_title)
        )

    async def _on_queue_exhausted(self, event: QueueExhausted) -> None:
        await self._send_notice(event.guild_id, DiscordUIMessages.ACTION_QUEUE_FINISHED)

    # === Helpers ===

    async def _voice_channel_id(self, ctx: commands.Context) -> int | None:
        voice = getattr(ctx.author, "voice", None)
        if voice is None or voice.channel is None:
            await ctx.send(DiscordUIMessages.STATE_MUST_BE_IN_VOICE)
            return None
        return voice.channel.id

    @staticmethod
    def _format_play_result(result: PlayTrackResult) -> str:
        track = result.track
        if result.status == PlayTrackStatus.TRACK_NOT_FOUND:
            return DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=result.message)
        if result.status == PlayTrackStatus.METADATA_ONLY and track is not None:
            return DiscordUIMessages.PLAY_METADATA_ONLY.format(title=track.title, artist=track.artist)
        if result.status == PlayTrackStatus.VOICE_ERROR:
            return DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE
        if result.status == PlayTrackStatus.QUEUE_FULL or track is None:
            return DiscordUIMessages.ERROR_DOMAIN.format(message=result.message)

        if result.status == PlayTrackStatus.NOW_PLAYING:
            lines = [
                DiscordUIMessages.PLAY_NOW_PLAYING.format(
                    title=track.display_title, duration=track.duration_formatted
                )
            ]
        else:
            lines = [
                DiscordUIMessages.PLAY_QUEUED.format(
                    title=track.display_title,
                    duration=track.duration_formatted,
                    position=(result.queue_position or 0) + 1,
                )
            ]
        if track.provenance == TrackProvenance.AGGREGATED and track.provenance_note:
            lines.append(DiscordUIMessages.PLAY_AGGREGATED_NOTE.format(note=track.provenance_note))
        return "\n".join(lines)

    @staticmethod
    def _format_queue(info: QueueInfo) -> str:
        if info.is_empty:
            return DiscordUIMessages.STATE_QUEUE_EMPTY

        lines: list[str] = []
        if info.current_track is not None:
            lines.append(
                DiscordUIMessages.QUEUE_HEADER_NOW_PLAYING.format(
                    title=truncate(info.current_track.display_title),
                    duration=info.current_track.duration_formatted,
                )
            )

        if info.tracks:
            lines.append(DiscordUIMessages.QUEUE_HEADER_UP_NEXT)
            shown = info.tracks[: LimitConstants.QUEUE_DISPLAY_LIMIT]
            for position, track in enumerate(shown, start=1):
                lines.append(
                    DiscordUIMessages.QUEUE_ENTRY.format(
                        position=position,
                        title=truncate(track.display_title),
                        duration=track.duration_formatted,
                    )
                )
            if len(info.tracks) > len(shown):
                lines.append(DiscordUIMessages.QUEUE_MORE.format(count=len(info.tracks) - len(shown)))

        lines.append(
            DiscordUIMessages.QUEUE_FOOTER.format(
                loop_mode=info.loop_mode.value,
                total=info.total_tracks,
                duration=format_duration(info.total_duration),
            )
        )
        return "\n".join(lines)

    # === Playback commands ===

    @commands.command(name="play", aliases=["p"], help="Play a song by URL or search query.")
    async def play(self, ctx: commands.Context, *, query: str) -> None:
        channel_id = await self._voice_channel_id(ctx)
        if channel_id is None:
            return
        assert ctx.guild is not None

        command = PlayTrackCommand(
            guild_id=ctx.guild.id,
            channel_id=channel_id,
            user_id=ctx.author.id,
            user_name=ctx.author.display_name,
            query=query,
        )
        async with ctx.typing():
            result = await self.container.play_track_handler.handle(command)

        await ctx.send(self._format_play_result(result))

    @commands.command(name="skip", aliases=["s"], help="Skip the current track.")
    async def skip(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        skipped = await self.container.playback_service.skip_track(ctx.guild.id)
        await ctx.send(DiscordUIMessages.ACTION_SKIPPED.format(title=skipped.title))

    @commands.command(name="pause", help="Pause the current track.")
    async def pause(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await self.container.playback_service.pause_playback(ctx.guild.id)
        await ctx.send(DiscordUIMessages.ACTION_PAUSED)

    @commands.command(name="resume", help="Resume paused playback.")
    async def resume(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await self.container.playback_service.resume_playback(ctx.guild.id)
        await ctx.send(DiscordUIMessages.ACTION_RESUMED)

    @commands.command(name="stop", help="Stop playback, clear the queue and leave voice.")
    async def stop(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await self.container.playback_service.stop_playback(ctx.guild.id)
        await ctx.send(DiscordUIMessages.ACTION_STOPPED)

    @commands.command(name="nowplaying", aliases=["np", "current"], help="Show the current track.")
    async def nowplaying(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        info = await self.container.get_current_handler.handle(
            GetCurrentTrackQuery(guild_id=ctx.guild.id)
        )
        track = info.track
        if track is None:
            await ctx.send(DiscordUIMessages.STATE_NOTHING_PLAYING)
            return

        lines = [
            DiscordUIMessages.NOW_PLAYING.format(
                title=track.title, artist=track.artist, duration=track.duration_formatted
            ),
            DiscordUIMessages.NOW_PLAYING_STATUS.format(
                status="paused" if info.is_paused else "playing",
                loop_mode=info.loop_mode.value,
            ),
        ]
        if track.secondary_url:
            lines.append(DiscordUIMessages.NOW_PLAYING_SPOTIFY.format(url=track.secondary_url))
        await ctx.send("\n".join(lines))

    # === Queue commands ===

    @commands.command(name="queue", aliases=["q"], help="Show the current queue.")
    async def queue(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        info = await self.container.get_queue_handler.handle(GetQueueQuery(guild_id=ctx.guild.id))
        await ctx.send(self._format_queue(info))

    @commands.command(name="shuffle", help="Shuffle the queue.")
    async def shuffle(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        await self.container.queue_service.shuffle(ctx.guild.id)
        await ctx.send(DiscordUIMessages.ACTION_SHUFFLED)

    @commands.command(name="loop", help="Set loop mode: off, one or all.")
    async def loop(self, ctx: commands.Context, mode: str) -> None:
        assert ctx.guild is not None
        new_mode = await self.container.queue_service.set_loop(ctx.guild.id, mode)
        await ctx.send(DiscordUIMessages.ACTION_LOOP_MODE_SET.format(mode=new_mode.value))

    @commands.command(name="remove", help="Remove a track from the queue by its position.")
    async def remove(self, ctx: commands.Context, position: int) -> None:
        assert ctx.guild is not None
        track = None
        if position > 0:
            track = await self.container.queue_service.remove(ctx.guild.id, position - 1)
        if track is None:
            await ctx.send(DiscordUIMessages.ERROR_INVALID_POSITION.format(position=position))
            return
        await ctx.send(DiscordUIMessages.ACTION_TRACK_REMOVED.format(title=track.title))

    @commands.command(name="clear", help="Clear the queue; the current track keeps playing.")
    async def clear(self, ctx: commands.Context) -> None:
        assert ctx.guild is not None
        count = await self.container.queue_service.clear(ctx.guild.id)
        if count == 0:
            await ctx.send(DiscordUIMessages.STATE_QUEUE_EMPTY)
            return
        await ctx.send(DiscordUIMessages.ACTION_QUEUE_CLEARED.format(count=count))

    # === Playlists ===

    @commands.group(name="playlist", aliases=["pl"], invoke_without_command=True)
    async def playlist(self, ctx: commands.Context) -> None:
        """Manage saved playlists. Without a subcommand, lists yours."""
        await self.playlist_list(ctx)

    @playlist.command(name="create", help="Create an empty playlist.")
    async def playlist_create(self, ctx: commands.Context, *, name: str) -> None:
        playlist = await self.container.playlist_service.create_playlist(ctx.author.id, name)
        await ctx.send(
            DiscordUIMessages.PLAYLIST_CREATED.format(name=playlist.name, playlist_id=playlist.id)
        )

    @playlist.command(name="list", help="List your playlists.")
    async def playlist_list(self, ctx: commands.Context) -> None:
        playlists = await self.container.playlist_service.list_playlists(ctx.author.id)
        if not playlists:
            await ctx.send(DiscordUIMessages.PLAYLIST_EMPTY_LIST)
            return

        lines = [DiscordUIMessages.PLAYLIST_LIST_HEADER]
        lines.extend(
            DiscordUIMessages.PLAYLIST_LIST_ENTRY.format(
                playlist_id=p.id, name=p.name, count=p.track_count
            )
            for p in playlists
        )
        await ctx.send("\n".join(lines))

    @playlist.command(name="show", help="Show the tracks of a playlist.")
    async def playlist_show(self, ctx: commands.Context, playlist_id: str) -> None:
        playlist = await self.container.playlist_service.get_playlist(playlist_id)
        if not playlist.entries:
            await ctx.send(DiscordUIMessages.PLAYLIST_IS_EMPTY.format(name=playlist.name))
            return

        lines = [
            DiscordUIMessages.PLAYLIST_SHOW_HEADER.format(
                name=playlist.name, count=playlist.track_count
            )
        ]
        lines.extend(
            DiscordUIMessages.QUEUE_ENTRY.format(
                position=position,
                title=truncate(entry.title),
                duration=format_duration(entry.duration_seconds or None),
            )
            for position, entry in enumerate(playlist.entries, start=1)
        )
        await ctx.send("\n".join(lines))

    @playlist.command(name="add", help="Save the current track to a playlist.")
    async def playlist_add(self, ctx: commands.Context, playlist_id: str) -> None:
        assert ctx.guild is not None
        playlist, entry = await self.container.playlist_service.add_current_track(
            ctx.guild.id, playlist_id, ctx.author.id
        )
        await ctx.send(
            DiscordUIMessages.PLAYLIST_TRACK_ADDED.format(title=entry.title, name=playlist.name)
        )

    @playlist.command(name="remove", help="Remove a track from a playlist by its position.")
    async def playlist_remove(self, ctx: commands.Context, playlist_id: str, position: int) -> None:
        if position < 1:
            await ctx.send(DiscordUIMessages.ERROR_INVALID_POSITION.format(position=position))
            return
        playlist, entry = await self.container.playlist_service.remove_track(
            playlist_id, ctx.author.id, position - 1
        )
        if entry is None:
            await ctx.send(DiscordUIMessages.ERROR_INVALID_POSITION.format(position=position))
            return
        await ctx.send(
            DiscordUIMessages.PLAYLIST_TRACK_REMOVED.format(title=entry.title, name=playlist.name)
        )

    @playlist.command(name="delete", help="Delete one of your playlists.")
    async def playlist_delete(self, ctx: commands.Context, playlist_id: str) -> None:
        playlist = await self.container.playlist_service.delete_playlist(playlist_id, ctx.author.id)
        await ctx.send(DiscordUIMessages.PLAYLIST_DELETED.format(name=playlist.name))

    @playlist.command(name="play", help="Queue every track of a playlist.")
    async def playlist_play(self, ctx: commands.Context, playlist_id: str) -> None:
        channel_id = await self._voice_channel_id(ctx)
        if channel_id is None:
            return
        assert ctx.guild is not None

        playlist_service = self.container.playlist_service
        playback_service = self.container.playback_service

        playlist = await playlist_service.get_playlist(playlist_id)
        if not playlist.entries:
            await ctx.send(DiscordUIMessages.PLAYLIST_IS_EMPTY.format(name=playlist.name))
            return

        try:
            await playback_service.ensure_connected(ctx.guild.id, channel_id)
        except PlaybackFailureError:
            await ctx.send(DiscordUIMessages.ERROR_COULD_NOT_JOIN_VOICE)
            return

        async with ctx.typing():
            result = await playlist_service.enqueue_playlist(
                ctx.guild.id, playlist.id, ctx.author.id, ctx.author.display_name
            )
            await playback_service.start_playback(ctx.guild.id)

        await ctx.send(
            DiscordUIMessages.PLAYLIST_QUEUED.format(
                queued=result.queued, name=playlist.name, failed=result.failed
            )
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
