"""Core domain entities for the music bounded context."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_music_queue.domain.music.value_objects import (
    LoopMode,
    PlaybackState,
    QueuePosition,
    TrackId,
    TrackOutcome,
    TrackProvenance,
)
from discord_music_queue.domain.shared.constants import LimitConstants, ResolverConstants
from discord_music_queue.domain.shared.datetime_utils import utcnow
from discord_music_queue.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidOperationError,
    MetadataOnlyError,
    PreconditionFailedError,
)
from discord_music_queue.domain.shared.messages import ErrorMessages
from discord_music_queue.domain.shared.types import (
    DiscordSnowflake,
    DurationSeconds,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    PositiveInt,
    QueuePositionInt,
    TrackTitleStr,
    UtcDatetimeField,
    VolumeFloat,
)


class Track(BaseModel):
    """Immutable value object describing a resolved track.

    A track without ``stream_url`` is metadata-only: it was found on the
    metadata provider but nothing playable was located for it.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackId
    title: TrackTitleStr
    artist: NonEmptyStr = ResolverConstants.UNKNOWN_ARTIST
    duration_seconds: DurationSeconds = 0
    stream_url: HttpUrlStr | None = None
    webpage_url: HttpUrlStr | None = None
    thumbnail_url: HttpUrlStr | None = None

    # Provenance (resolver-provided)
    provenance: TrackProvenance = TrackProvenance.NATIVE
    secondary_url: HttpUrlStr | None = None
    provenance_note: NonEmptyStr | None = None

    # Request metadata (set when queued)
    requested_by_id: DiscordSnowflake | None = None
    requested_by_name: NonEmptyStr | None = None
    requested_at: UtcDatetimeField | None = None

    @property
    def is_playable(self) -> bool:
        return self.stream_url is not None

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS; 0 is reported as unknown."""
        if not self.duration_seconds:
            return "Unknown"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_title(self) -> str:
        if self.artist != ResolverConstants.UNKNOWN_ARTIST:
            return f"{self.title} - {self.artist}"
        return self.title

    def with_requester(
        self, user_id: DiscordSnowflake, user_name: NonEmptyStr, requested_at: datetime | None = None
    ) -> Track:
        """Return a copy of this track with requester metadata populated."""
        return self.model_copy(
            update={
                "requested_by_id": user_id,
                "requested_by_name": user_name,
                "requested_at": requested_at or utcnow(),
            }
        )


class GuildPlaybackSession(BaseModel):
    """Aggregate root holding the queue and playback state of a single guild.

    All mutation goes through the transition methods below. Each of them
    re-checks the session invariants before returning:

    - ``current_track`` is set exactly when the state is not IDLE
    - the pending queue never holds the current track entry
    - only tracks with a stream locator are pending or current

    ``play_sequence`` increases every time the current track is replaced or
    cleared, so a completion signal can be matched to the play it belongs to.
    """

    model_config = ConfigDict(strict=True, arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    max_queue_size: PositiveInt = LimitConstants.MAX_QUEUE_SIZE
    queue: list[Track] = Field(default_factory=list)
    current_track: Track | None = None
    state: PlaybackState = PlaybackState.IDLE
    loop_mode: LoopMode = LoopMode.OFF
    volume: VolumeFloat = 1.0
    play_sequence: NonNegativeInt = 0
    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    # Transport handles, owned exclusively by this session
    connection: Any = Field(default=None, exclude=True)
    player: Any = Field(default=None, exclude=True)

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def is_paused(self) -> bool:
        return self.state == PlaybackState.PAUSED

    @property
    def is_idle(self) -> bool:
        return self.state == PlaybackState.IDLE

    @property
    def has_tracks(self) -> bool:
        return self.current_track is not None or bool(self.queue)

    @property
    def can_add_to_queue(self) -> bool:
        return self.queue_length < self.max_queue_size

    @property
    def total_duration(self) -> int:
        """Known duration of the current and pending tracks, in seconds."""
        tracks = [*self.queue, *([self.current_track] if self.current_track else [])]
        return sum(t.duration_seconds for t in tracks)

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = utcnow()

    def _check_invariants(self, operation: str) -> None:
        if (self.current_track is None) != (self.state == PlaybackState.IDLE):
            raise InvalidOperationError(
                operation, self.state.value, ErrorMessages.INVARIANT_CURRENT_STATE
            )
        if self.current_track is not None and any(t is self.current_track for t in self.queue):
            raise InvalidOperationError(
                operation, self.state.value, ErrorMessages.INVARIANT_CURRENT_IN_PENDING
            )
        for track in (*self.queue, self.current_track):
            if track is not None and not track.is_playable:
                raise InvalidOperationError(
                    operation,
                    self.state.value,
                    ErrorMessages.INVARIANT_UNPLAYABLE.format(title=track.title),
                )

    # === Queue editing ===

    def enqueue(self, track: Track) -> QueuePosition:
        """Append a playable track to the tail of the queue. Valid in any state."""
        if not track.is_playable:
            raise MetadataOnlyError(track.title)
        if not self.can_add_to_queue:
            raise BusinessRuleViolationError(
                rule="MAX_QUEUE_SIZE",
                message=ErrorMessages.QUEUE_FULL.format(max_size=self.max_queue_size),
            )

        # The same object queued twice would collide with itself once it becomes current
        if track is self.current_track or any(t is track for t in self.queue):
            track = track.model_copy()

        position = QueuePosition(len(self.queue))
        self.queue.append(track)
        self.touch()
        self._check_invariants("enqueue")
        return position

    def peek(self) -> Track | None:
        """Look at the next track without removing it."""
        return self.queue[0] if self.queue else None

    def remove_at(self, position: QueuePositionInt) -> Track | None:
        """Remove a pending track at a zero-based position, or return None if out of range."""
        if 0 <= position < len(self.queue):
            track = self.queue.pop(position)
            self.touch()
            self._check_invariants("remove")
            return track
        return None

    def clear_queue(self) -> int:
        """Clear all pending tracks and return the count removed. The current track keeps playing."""
        count = len(self.queue)
        self.queue.clear()
        self.touch()
        self._check_invariants("clear")
        return count

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Randomly permute the pending tracks in place."""
        if len(self.queue) < LimitConstants.SHUFFLE_MIN_TRACKS:
            raise PreconditionFailedError(
                "shuffle",
                self.state.value,
                ErrorMessages.NOT_ENOUGH_TO_SHUFFLE.format(minimum=LimitConstants.SHUFFLE_MIN_TRACKS),
            )

        (rng or random).shuffle(self.queue)
        self.touch()
        self._check_invariants("shuffle")

    def set_loop(self, mode: LoopMode | str) -> LoopMode:
        """Set the loop mode from an enum member or 'off'/'one'/'all'."""
        self.loop_mode = LoopMode.parse(mode)
        self.touch()
        return self.loop_mode

    # === Playback transitions ===

    def _replace_current(self, track: Track | None) -> None:
        self.current_track = track
        self.player = None
        self.play_sequence += 1

    def advance(self) -> Track | None:
        """Move the head of the queue into the current slot.

        With an empty queue the session goes idle and the current track is
        cleared. Returns the new current track.
        """
        next_track = self.queue.pop(0) if self.queue else None
        self._replace_current(next_track)
        self.state = PlaybackState.PLAYING if next_track is not None else PlaybackState.IDLE
        self.touch()
        self._check_invariants("advance")
        return next_track

    def finish_current(self, outcome: TrackOutcome) -> Track | None:
        """Apply the end of the current track and advance.

        A completed track is requeued according to the loop mode; a failed
        track is always dropped so a broken stream cannot loop forever.
        """
        finished = self.current_track
        if finished is None:
            raise PreconditionFailedError("finish", self.state.value, ErrorMessages.NOTHING_PLAYING)

        if outcome == TrackOutcome.COMPLETED:
            if self.loop_mode == LoopMode.ONE:
                self.queue.insert(0, finished)
            elif self.loop_mode == LoopMode.ALL:
                self.queue.append(finished)

        return self.advance()

    def skip(self) -> Track:
        """Force the end of the current track, honouring the loop mode. Returns the skipped track."""
        skipped = self.current_track
        if skipped is None:
            raise PreconditionFailedError("skip", self.state.value, ErrorMessages.NOTHING_PLAYING)

        self.finish_current(TrackOutcome.COMPLETED)
        return skipped

    def pause(self) -> None:
        if self.state != PlaybackState.PLAYING:
            raise PreconditionFailedError("pause", self.state.value, ErrorMessages.NOT_PLAYING)
        self.state = PlaybackState.PAUSED
        self.touch()
        self._check_invariants("pause")

    def resume(self) -> None:
        if self.state != PlaybackState.PAUSED:
            raise PreconditionFailedError("resume", self.state.value, ErrorMessages.NOT_PAUSED)
        self.state = PlaybackState.PLAYING
        self.touch()
        self._check_invariants("resume")

    def stop(self) -> tuple[Any, Any]:
        """Clear everything and go idle. Valid from any state.

        Returns the released ``(connection, player)`` handles; the caller is
        responsible for tearing them down.
        """
        connection, player = self.connection, self.player
        self.queue.clear()
        self._replace_current(None)
        self.connection = None
        self.state = PlaybackState.IDLE
        self.touch()
        self._check_invariants("stop")
        return connection, player

    # === Transport handles ===

    def replace_connection(self, connection: Any) -> Any:
        """Install a new transport connection and return the previous one for teardown."""
        previous, self.connection = self.connection, connection
        self.touch()
        return previous

    def restart_current(self) -> Track | None:
        """Abandon the current play so the current track starts over on the next start.

        Completion signals from the abandoned play become stale. A paused
        session returns to PLAYING, since the restarted play is not paused.
        """
        if self.current_track is None:
            return None
        self.player = None
        self.play_sequence += 1
        self.state = PlaybackState.PLAYING
        self.touch()
        self._check_invariants("restart")
        return self.current_track

    def attach_player(self, play_sequence: int, player: Any) -> bool:
        """Record the player handle for a play; refused when that play is no longer current."""
        if play_sequence != self.play_sequence or self.current_track is None:
            return False
        self.player = player
        return True
