"""Playback Application Service - drives a guild's queue session through the voice transport."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from ...domain.music.events import (
    QueueExhausted,
    TrackEnded,
    TrackPlaybackFailed,
    TrackStartedPlaying,
)
from ...domain.music.value_objects import TrackId, TrackOutcome
from ...domain.shared.exceptions import PlaybackFailureError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import GuildPlaybackSession, Track
    from ...domain.music.repository import SessionRepository
    from ...domain.shared.events import EventBus
    from ..interfaces.voice_transport import TrackEndCallback, VoiceTransport

logger = logging.getLogger(__name__)


class PlaybackApplicationService:
    """Binds queue sessions to the voice transport.

    Track ends reported by the transport are not handled inline: they are
    turned into ``TrackEnded`` events, put on a queue and consumed one at a
    time by the dispatcher task. Each event carries the play sequence it was
    started with, and events whose play is no longer current are dropped.
    """

    def __init__(
        self,
        *,
        session_repository: SessionRepository,
        voice_transport: VoiceTransport,
        event_bus: EventBus,
    ) -> None:
        self._session_repo = session_repository
        self._transport = voice_transport
        self._event_bus = event_bus

        self._track_end_events: asyncio.Queue[TrackEnded] = asyncio.Queue()
        self._dispatcher_task: asyncio.Task[None] | None = None

    # === Connections ===

    async def ensure_connected(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> Any:
        """Return a live connection to ``channel_id``, replacing any other one the guild holds.

        Raises:
            PlaybackFailureError: If the channel cannot be joined.
        """
        session = await self._session_repo.get_or_create(guild_id)
        current = session.connection
        if (
            current is not None
            and self._transport.is_connected(current)
            and self._transport.channel_id(current) == channel_id
        ):
            return current

        if current is not None:
            logger.info(
                LogTemplates.VOICE_CONNECTION_REPLACED,
                guild_id,
                self._transport.channel_id(current),
                channel_id,
            )
            # The old play's end signal must not consume the current track
            session.restart_current()
            session.replace_connection(None)
            await self._teardown(guild_id, current)

        connection = await self._transport.connect(guild_id, channel_id)
        previous = session.replace_connection(connection)
        if previous is not None:
            # Another connect finished while this one was in flight
            session.restart_current()
            await self._teardown(guild_id, previous)
        return connection

    async def _teardown(self, guild_id: DiscordSnowflake, connection: Any) -> None:
        try:
            await self._transport.disconnect(connection)
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)

    # === Starting tracks ===

    async def start_playback(self, guild_id: DiscordSnowflake) -> Track | None:
        """Start streaming if the guild is not already doing so.

        An idle session advances to the head of its queue first. Returns the
        track that is streaming afterwards, or None.
        """
        session = await self._session_repo.get(guild_id)
        if session is None:
            return None

        if session.is_idle:
            if not session.queue:
                return None
            session.advance()
        elif session.player is not None:
            return session.current_track

        return await self._play_current(session)

    async def _play_current(self, session: GuildPlaybackSession) -> Track | None:
        """Stream the current track, dropping tracks the transport refuses until one starts."""
        guild_id = session.guild_id
        last_failed: Track | None = None

        while (track := session.current_track) is not None:
            connection = session.connection
            if connection is None or not self._transport.is_connected(connection):
                logger.warning(LogTemplates.PLAYBACK_NO_CONNECTION, guild_id, track.title)
                return None

            sequence = session.play_sequence
            try:
                player = await self._transport.play(
                    connection,
                    track,
                    volume=session.volume,
                    on_end=self._track_end_callback(guild_id, track.id, sequence),
                )
            except PlaybackFailureError as e:
                if session.play_sequence != sequence:
                    logger.info(LogTemplates.PLAYBACK_SUPERSEDED, track.title, guild_id)
                    return session.current_track
                logger.warning(LogTemplates.PLAYBACK_TRACK_FAILED, track.title, guild_id, e.reason)
                session.finish_current(TrackOutcome.ERROR)
                last_failed = track
                await self._event_bus.publish(
                    TrackPlaybackFailed.from_track(guild_id, track, e.reason or "")
                )
                continue

            if not session.attach_player(sequence, player):
                # skip/stop ran while the transport was starting this play
                logger.info(LogTemplates.PLAYBACK_SUPERSEDED, track.title, guild_id)
                if session.player is None and self._transport.is_connected(connection):
                    self._transport.stop(connection)
                return session.current_track

            logger.info(LogTemplates.PLAYBACK_STARTED, track.title, guild_id, sequence)
            await self._event_bus.publish(TrackStartedPlaying.from_track(guild_id, track))
            return track

        if last_failed is not None:
            await self._queue_exhausted(guild_id, last_failed)
        return None

    async def _queue_exhausted(self, guild_id: DiscordSnowflake, last_track: Track) -> None:
        logger.info(LogTemplates.QUEUE_EXHAUSTED, guild_id)
        await self._event_bus.publish(
            QueueExhausted(guild_id=guild_id, last_track_title=last_track.title)
        )

    # === Track-end dispatch ===

    def _track_end_callback(
        self, guild_id: DiscordSnowflake, track_id: TrackId, play_sequence: int
    ) -> TrackEndCallback:
        loop = asyncio.get_running_loop()

        def on_end(error: BaseException | None) -> None:
            event = TrackEnded(
                guild_id=guild_id,
                track_id=track_id,
                play_sequence=play_sequence,
                outcome=TrackOutcome.ERROR if error is not None else TrackOutcome.COMPLETED,
                error=repr(error) if error is not None else None,
            )
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(self.notify_track_ended, event)

        return on_end

    def notify_track_ended(self, event: TrackEnded) -> None:
        """Queue a track-end event for the dispatcher. Must run on the event loop."""
        self._track_end_events.put_nowait(event)

    async def handle_track_ended(self, event: TrackEnded) -> None:
        """Apply the end of a play and start whatever comes next."""
        session = await self._session_repo.get(event.guild_id)
        finished = session.current_track if session is not None else None
        if (
            session is None
            or finished is None
            or finished.id != event.track_id
            or session.play_sequence != event.play_sequence
        ):
            logger.debug(
                LogTemplates.TRACK_ENDED_STALE, event.guild_id, event.track_id, event.play_sequence
            )
            return

        logger.info(
            LogTemplates.TRACK_ENDED,
            event.track_id,
            event.guild_id,
            event.outcome.value,
            event.play_sequence,
        )

        next_track = session.finish_current(event.outcome)
        if event.outcome == TrackOutcome.ERROR:
            logger.warning(
                LogTemplates.PLAYBACK_TRACK_FAILED, finished.title, event.guild_id, event.error
            )
            await self._event_bus.publish(
                TrackPlaybackFailed.from_track(event.guild_id, finished, event.error or "")
            )

        if next_track is None:
            await self._queue_exhausted(event.guild_id, finished)
            return

        await self._play_current(session)

    async def run_dispatcher(self) -> None:
        """Consume track-end events serially until cancelled."""
        logger.info(LogTemplates.DISPATCHER_STARTED)
        try:
            while True:
                event = await self._track_end_events.get()
                try:
                    await self.handle_track_ended(event)
                except Exception:
                    logger.exception(LogTemplates.DISPATCHER_HANDLER_FAILED, event.guild_id)
                finally:
                    self._track_end_events.task_done()
        finally:
            logger.info(LogTemplates.DISPATCHER_STOPPED)

    def start_dispatcher(self) -> None:
        if self._dispatcher_task is None or self._dispatcher_task.done():
            self._dispatcher_task = asyncio.create_task(
                self.run_dispatcher(), name="track-end-dispatcher"
            )

    async def stop_dispatcher(self) -> None:
        task, self._dispatcher_task = self._dispatcher_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait_dispatched(self) -> None:
        """Wait until every queued track-end event has been handled."""
        await self._track_end_events.join()

    # === Controls ===

    async def skip_track(self, guild_id: DiscordSnowflake) -> Track:
        """Skip the current track and return it.

        Raises:
            PreconditionFailedError: If nothing is playing.
        """
        session = await self._session_repo.get_or_create(guild_id)
        connection = session.connection
        skipped = session.skip()

        if connection is not None and self._transport.is_connected(connection):
            self._transport.stop(connection)
        logger.info(LogTemplates.TRACK_SKIPPED, skipped.title, guild_id)

        if session.current_track is None:
            await self._queue_exhausted(guild_id, skipped)
        else:
            await self._play_current(session)
        return skipped

    async def pause_playback(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get_or_create(guild_id)
        session.pause()
        if session.connection is not None:
            self._transport.pause(session.connection)
        logger.debug(LogTemplates.PLAYBACK_PAUSED, guild_id)

    async def resume_playback(self, guild_id: DiscordSnowflake) -> None:
        session = await self._session_repo.get_or_create(guild_id)
        session.resume()
        if session.connection is not None:
            self._transport.resume(session.connection)
        logger.debug(LogTemplates.PLAYBACK_RESUMED, guild_id)

    async def stop_playback(self, guild_id: DiscordSnowflake) -> None:
        """Clear the guild's queue, stop streaming and leave the voice channel."""
        session = await self._session_repo.get_or_create(guild_id)
        connection, player = session.stop()

        if connection is not None:
            if player is not None and self._transport.is_connected(connection):
                self._transport.stop(connection)
            await self._teardown(guild_id, connection)
        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)

    async def shutdown(self) -> None:
        """Stop the dispatcher and release every guild's voice connection."""
        await self.stop_dispatcher()
        for session in await self._session_repo.get_all_active():
            await self.stop_playback(session.guild_id)
