"""
Unit Tests for the Music Domain

Tests for:
- Track value object (playability, formatting, requester copy)
- Value objects (TrackId, QueuePosition, LoopMode, PlaybackState)
- GuildPlaybackSession transitions and invariants
"""

import random

import pytest

from discord_music_queue.domain.music.entities import GuildPlaybackSession, Track
from discord_music_queue.domain.music.value_objects import (
    LoopMode,
    PlaybackState,
    QueuePosition,
    TrackId,
    TrackOutcome,
    spotify_track_id,
)
from discord_music_queue.domain.shared.exceptions import (
    BusinessRuleViolationError,
    InvalidLoopModeError,
    MetadataOnlyError,
    PreconditionFailedError,
)

GUILD_ID = 123456789


@pytest.fixture
def session():
    return GuildPlaybackSession(guild_id=GUILD_ID)


def _titles(tracks):
    return [t.title for t in tracks]


# =============================================================================
# Value Objects
# =============================================================================


class TestTrackId:
    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            TrackId("  ")

    def test_from_youtube_url(self):
        assert TrackId.from_url("https://www.youtube.com/watch?v=dQw4w9WgXcQ").value == "dQw4w9WgXcQ"
        assert TrackId.from_url("https://youtu.be/dQw4w9WgXcQ").value == "dQw4w9WgXcQ"

    def test_from_spotify_url(self):
        url = "https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC"
        assert TrackId.from_url(url).value == "spotify:4uLU6hMCjMI75M1A2tKUQC"

    def test_from_other_url_is_stable_hash(self):
        a = TrackId.from_url("https://example.com/song.mp3")
        b = TrackId.from_url("https://example.com/song.mp3")
        assert a == b
        assert len(a.value) == 16

    def test_spotify_track_id_helper(self):
        assert spotify_track_id("https://open.spotify.com/intl-de/track/4uLU6hMCjMI75M1A2tKUQC?si=x")
        assert spotify_track_id("https://open.spotify.com/album/4uLU6hMCjMI75M1A2tKUQC") is None


class TestQueuePosition:
    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            QueuePosition(-1)

    def test_display_is_one_based(self):
        assert QueuePosition(0).display == 1
        assert int(QueuePosition(4)) == 4


class TestLoopMode:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("off", LoopMode.OFF), ("ONE", LoopMode.ONE), (" all ", LoopMode.ALL), (LoopMode.ONE, LoopMode.ONE)],
    )
    def test_parse(self, raw, expected):
        assert LoopMode.parse(raw) == expected

    @pytest.mark.parametrize("raw", ["repeat", "", 3, None])
    def test_parse_rejects_unknown(self, raw):
        with pytest.raises(InvalidLoopModeError):
            LoopMode.parse(raw)

    def test_playback_state_is_active(self):
        assert PlaybackState.PLAYING.is_active
        assert PlaybackState.PAUSED.is_active
        assert not PlaybackState.IDLE.is_active


class TestTrack:
    def test_playable_depends_on_stream_url(self, track_factory):
        assert track_factory("A").is_playable
        assert not track_factory("B", playable=False).is_playable

    def test_duration_formatted(self, track_factory):
        assert track_factory("A", duration_seconds=185).duration_formatted == "3:05"
        assert track_factory("B", duration_seconds=3725).duration_formatted == "1:02:05"
        assert track_factory("C", duration_seconds=0).duration_formatted == "Unknown"

    def test_display_title_includes_known_artist(self, track_factory):
        assert track_factory("Song", artist="Band").display_title == "Song - Band"
        assert track_factory("Song").display_title == "Song"

    def test_with_requester_returns_copy(self, sample_track):
        requested = sample_track.with_requester(user_id=42, user_name="alice")

        assert requested is not sample_track
        assert requested.requested_by_id == 42
        assert requested.requested_by_name == "alice"
        assert requested.requested_at is not None
        assert sample_track.requested_by_id is None

    def test_track_is_frozen(self, sample_track):
        with pytest.raises(Exception):
            sample_track.title = "Changed"  # type: ignore[misc]

    def test_stream_url_must_be_http(self):
        with pytest.raises(Exception):
            Track(id=TrackId("x"), title="X", stream_url="ftp://nope")


# =============================================================================
# GuildPlaybackSession - Queue Editing
# =============================================================================


class TestSessionEnqueue:
    def test_new_session_is_idle(self, session):
        assert session.is_idle
        assert session.current_track is None
        assert session.queue == []
        assert session.loop_mode == LoopMode.OFF

    def test_enqueue_returns_zero_based_position(self, session, track_factory):
        assert session.enqueue(track_factory("A")).value == 0
        assert session.enqueue(track_factory("B")).value == 1
        assert _titles(session.queue) == ["A", "B"]

    def test_enqueue_does_not_start_playback(self, session, track_factory):
        session.enqueue(track_factory("A"))
        assert session.is_idle
        assert session.current_track is None

    def test_metadata_only_track_rejected(self, session, track_factory):
        with pytest.raises(MetadataOnlyError):
            session.enqueue(track_factory("Ghost", playable=False))
        assert session.queue == []

    def test_full_queue_rejected(self, track_factory):
        session = GuildPlaybackSession(guild_id=GUILD_ID, max_queue_size=2)
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            session.enqueue(track_factory("C"))

        assert exc_info.value.rule == "MAX_QUEUE_SIZE"
        assert _titles(session.queue) == ["A", "B"]

    def test_same_object_enqueued_twice_is_copied(self, session, sample_track):
        session.enqueue(sample_track)
        session.enqueue(sample_track)

        assert len(session.queue) == 2
        assert session.queue[0] is not session.queue[1]

    def test_current_track_object_can_be_requeued(self, session, sample_track):
        session.enqueue(sample_track)
        current = session.advance()

        session.enqueue(current)

        assert session.queue[0] is not session.current_track
        assert session.queue[0].id == current.id


class TestSessionQueueEditing:
    def test_peek(self, session, track_factory):
        assert session.peek() is None
        session.enqueue(track_factory("A"))
        assert session.peek().title == "A"
        assert len(session.queue) == 1

    def test_remove_at(self, session, track_factory):
        for title in ("A", "B", "C"):
            session.enqueue(track_factory(title))

        removed = session.remove_at(1)

        assert removed.title == "B"
        assert _titles(session.queue) == ["A", "C"]

    @pytest.mark.parametrize("position", [3, 99])
    def test_remove_out_of_range_returns_none(self, session, track_factory, position):
        for title in ("A", "B", "C"):
            session.enqueue(track_factory(title))

        assert session.remove_at(position) is None
        assert len(session.queue) == 3

    def test_clear_keeps_current_track(self, session, track_factory):
        for title in ("A", "B", "C"):
            session.enqueue(track_factory(title))
        session.advance()

        assert session.clear_queue() == 2
        assert session.queue == []
        assert session.current_track.title == "A"
        assert session.is_playing

    def test_shuffle_is_permutation(self, session, track_factory):
        titles = [f"Track {i}" for i in range(10)]
        for title in titles:
            session.enqueue(track_factory(title))

        session.shuffle(random.Random(1234))

        assert sorted(_titles(session.queue)) == sorted(titles)

    def test_shuffle_does_not_touch_current(self, session, track_factory):
        for title in ("A", "B", "C"):
            session.enqueue(track_factory(title))
        session.advance()

        session.shuffle(random.Random(1))

        assert session.current_track.title == "A"
        assert sorted(_titles(session.queue)) == ["B", "C"]

    @pytest.mark.parametrize("count", [0, 1])
    def test_shuffle_needs_two_tracks(self, session, track_factory, count):
        for i in range(count):
            session.enqueue(track_factory(f"T{i}"))

        with pytest.raises(PreconditionFailedError):
            session.shuffle()

    def test_set_loop(self, session):
        assert session.set_loop("one") == LoopMode.ONE
        assert session.set_loop(LoopMode.ALL) == LoopMode.ALL
        with pytest.raises(InvalidLoopModeError):
            session.set_loop("sometimes")
        assert session.loop_mode == LoopMode.ALL


# =============================================================================
# GuildPlaybackSession - Playback Transitions
# =============================================================================


class TestSessionAdvance:
    def test_advance_moves_head_to_current(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))

        track = session.advance()

        assert track.title == "A"
        assert session.current_track is track
        assert session.is_playing
        assert _titles(session.queue) == ["B"]

    def test_advance_on_empty_queue_goes_idle(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.advance()

        assert session.advance() is None
        assert session.is_idle
        assert session.current_track is None

    def test_play_sequence_increases_on_every_replacement(self, session, track_factory):
        session.enqueue(track_factory("A"))
        start = session.play_sequence

        session.advance()
        after_advance = session.play_sequence
        session.advance()

        assert after_advance == start + 1
        assert session.play_sequence == start + 2


class TestSessionFinishCurrent:
    def _with_queue(self, session, track_factory, *titles):
        for title in titles:
            session.enqueue(track_factory(title))
        session.advance()

    def test_loop_off_completed_advances(self, session, track_factory):
        self._with_queue(session, track_factory, "A", "B")

        next_track = session.finish_current(TrackOutcome.COMPLETED)

        assert next_track.title == "B"
        assert session.queue == []

    def test_loop_off_last_track_goes_idle(self, session, track_factory):
        self._with_queue(session, track_factory, "A")

        assert session.finish_current(TrackOutcome.COMPLETED) is None
        assert session.is_idle

    def test_loop_one_replays_same_track(self, session, track_factory):
        self._with_queue(session, track_factory, "A", "B")
        session.set_loop(LoopMode.ONE)

        next_track = session.finish_current(TrackOutcome.COMPLETED)

        assert next_track.title == "A"
        assert _titles(session.queue) == ["B"]

    def test_loop_one_repeats_n_times(self, session, track_factory):
        self._with_queue(session, track_factory, "A")
        session.set_loop(LoopMode.ONE)

        for _ in range(5):
            assert session.finish_current(TrackOutcome.COMPLETED).title == "A"
        assert session.queue == []

    def test_loop_all_rotates(self, session, track_factory):
        self._with_queue(session, track_factory, "A", "B", "C")
        session.set_loop(LoopMode.ALL)

        played = [session.current_track.title]
        for _ in range(5):
            played.append(session.finish_current(TrackOutcome.COMPLETED).title)

        assert played == ["A", "B", "C", "A", "B", "C"]

    @pytest.mark.parametrize("mode", [LoopMode.OFF, LoopMode.ONE, LoopMode.ALL])
    def test_error_outcome_always_drops_track(self, session, track_factory, mode):
        self._with_queue(session, track_factory, "Broken", "B")
        session.set_loop(mode)

        next_track = session.finish_current(TrackOutcome.ERROR)

        assert next_track.title == "B"
        assert "Broken" not in _titles(session.queue)

    def test_consecutive_failures_drain_to_idle(self, session, track_factory):
        self._with_queue(session, track_factory, "A", "B", "C")
        session.set_loop(LoopMode.ALL)

        for _ in range(3):
            session.finish_current(TrackOutcome.ERROR)

        assert session.is_idle
        assert session.queue == []

    def test_finish_while_idle_rejected(self, session):
        with pytest.raises(PreconditionFailedError):
            session.finish_current(TrackOutcome.COMPLETED)


class TestSessionSkipPauseResumeStop:
    def test_skip_with_loop_off_on_last_track_goes_idle(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.advance()

        skipped = session.skip()

        assert skipped.title == "A"
        assert session.is_idle

    def test_skip_honours_loop_one(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.advance()
        session.set_loop(LoopMode.ONE)

        session.skip()

        assert session.current_track.title == "A"
        assert session.is_playing

    def test_skip_while_idle_rejected(self, session):
        with pytest.raises(PreconditionFailedError):
            session.skip()

    def test_skip_from_paused_plays_next(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        session.advance()
        session.pause()

        session.skip()

        assert session.current_track.title == "B"
        assert session.is_playing

    def test_pause_and_resume(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.advance()

        session.pause()
        assert session.is_paused
        assert session.current_track.title == "A"

        session.resume()
        assert session.is_playing

    def test_pause_requires_playing(self, session, track_factory):
        with pytest.raises(PreconditionFailedError):
            session.pause()

        session.enqueue(track_factory("A"))
        session.advance()
        session.pause()
        with pytest.raises(PreconditionFailedError):
            session.pause()

    def test_resume_requires_paused(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.advance()

        with pytest.raises(PreconditionFailedError):
            session.resume()
        assert session.is_playing

    @pytest.mark.parametrize("state", ["idle", "playing", "paused"])
    def test_stop_from_any_state(self, session, track_factory, state):
        connection, player = object(), object()
        session.replace_connection(connection)
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        if state != "idle":
            session.advance()
            assert session.attach_player(session.play_sequence, player)
        if state == "paused":
            session.pause()

        released = session.stop()

        assert released == (connection, player if state != "idle" else None)
        assert session.is_idle
        assert session.current_track is None
        assert session.queue == []
        assert session.connection is None
        assert session.player is None


class TestSessionHandles:
    def test_replace_connection_returns_previous(self, session):
        first, second = object(), object()

        assert session.replace_connection(first) is None
        assert session.replace_connection(second) is first
        assert session.connection is second

    def test_attach_player_refused_for_stale_sequence(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        session.advance()
        stale_sequence = session.play_sequence
        session.skip()

        assert session.attach_player(stale_sequence, object()) is False
        assert session.player is None

        player = object()
        assert session.attach_player(session.play_sequence, player) is True
        assert session.player is player

    def test_advance_clears_player(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        session.advance()
        session.attach_player(session.play_sequence, object())

        session.advance()

        assert session.player is None

    def test_restart_current_keeps_track_and_invalidates_old_play(self, session, track_factory):
        session.enqueue(track_factory("A"))
        session.enqueue(track_factory("B"))
        session.advance()
        old_sequence = session.play_sequence
        session.attach_player(old_sequence, object())
        session.pause()

        restarted = session.restart_current()

        assert restarted.title == "A"
        assert session.is_playing
        assert session.player is None
        assert session.play_sequence == old_sequence + 1
        assert [t.title for t in session.queue] == ["B"]
        assert session.attach_player(old_sequence, object()) is False

    def test_restart_current_while_idle(self, session):
        assert session.restart_current() is None
        assert session.is_idle
        assert session.play_sequence == 0

    def test_total_duration(self, session, track_factory):
        session.enqueue(track_factory("A", duration_seconds=100))
        session.enqueue(track_factory("B", duration_seconds=50))
        session.advance()

        assert session.total_duration == 150
