"""
PlaybackController - Per-video progress state machine.

Phases:
    IDLE -> TRACKING -> (PAUSED | COMPLETED)

Driven by a small set of named events:
- video_activated(index): a video becomes the active one
- tick(): periodic timer (1s by default)
- visibility_changed(visible): the window/tab was hidden or shown
- player_state_changed(state): the embedded player reports a new state
- player_ended(): the embedded player reports end of video

Invariants:
- The completion callback fires at most once per activation.
- Activating a video cancels the previous tick timer before the new
  session starts; stale timer callbacks are recognised and dropped.
- A video completed in an earlier session never auto-advances.

All handlers run under one re-entrant lock, so a timer-thread tick never
interleaves with a UI event.
"""

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from tubeacademy.schemas import Video

from .player import PlayerAdapter, PlayerState
from .progress import ProgressTracker, clamp_percent


logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_THRESHOLD = 90.0
DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_AUTO_ADVANCE_DELAY = 1.5

# Seconds before the reported duration that count as "end of video"
END_TOLERANCE_SECONDS = 1.0

ProgressCallback = Callable[[int, float, float, int], None]
CompleteCallback = Callable[[int], None]
VideoChangeCallback = Callable[[int], None]


class PlaybackPhase(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    PAUSED = "paused"
    COMPLETED = "completed"


# Phases in which timer ticks do work
_TICKING = (PlaybackPhase.TRACKING, PlaybackPhase.COMPLETED)


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    """Anything with asyncio-style call_later (an event loop qualifies)."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class ThreadingScheduler:
    """Scheduler backed by daemon threading.Timer objects."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class _PolledCall:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class PolledScheduler:
    """
    Scheduler for hosts that cannot be called back, such as a Streamlit
    script run. Nothing runs by itself; run_due() fires whatever is due.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._calls: list[_PolledCall] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _PolledCall:
        call = _PolledCall(self._clock() + delay, callback)
        self._calls.append(call)
        return call

    @property
    def next_due(self) -> Optional[float]:
        pending = [c.due for c in self._calls if not c.cancelled]
        return min(pending) if pending else None

    def run_due(self) -> int:
        """Fire due callbacks in order. Returns how many ran."""
        now = self._clock()
        due = sorted(
            (c for c in self._calls if not c.cancelled and c.due <= now),
            key=lambda c: c.due,
        )
        self._calls = [c for c in self._calls if not c.cancelled and c.due > now]
        ran = 0
        for call in due:
            if call.cancelled:
                continue
            call.callback()
            ran += 1
        return ran


@dataclass
class PlaybackSession:
    """Transient state for the active video. Never persisted."""
    video_id: int
    index: int
    generation: int
    start_position: float = 0.0
    position: float = 0.0
    last_tick_timestamp: Optional[float] = None
    has_completed: bool = False
    is_visible: bool = True
    completed_before: bool = False  # completed in an earlier session
    ended: bool = False


class PlaybackController:
    """
    Track playback of a course's videos against an unreliable player.

    Progress is written through ProgressTracker; no network is needed.
    """

    def __init__(
        self,
        course_id: int,
        videos: list[Video],
        tracker: ProgressTracker,
        scheduler: Optional[Scheduler] = None,
        *,
        completion_threshold: float = DEFAULT_COMPLETION_THRESHOLD,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        auto_advance_delay: float = DEFAULT_AUTO_ADVANCE_DELAY,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_video_change: Optional[VideoChangeCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize controller.

        Args:
            course_id: Course the videos belong to
            videos: Videos in playback order
            tracker: Progress persistence
            scheduler: Timer source (default: threading.Timer)
            completion_threshold: Percent at which a video counts as completed
            tick_interval: Seconds between progress ticks
            auto_advance_delay: Seconds between end of video and the next video
            on_progress: Called with (video_id, current_time, duration, percent)
            on_complete: Called with video_id once per activation
            on_video_change: Called with the next index on auto-advance
            clock: Monotonic clock for tick timestamps
        """
        self.course_id = course_id
        self.videos = list(videos)
        self.tracker = tracker
        self.scheduler = scheduler or ThreadingScheduler()
        self.completion_threshold = completion_threshold
        self.tick_interval = tick_interval
        self.auto_advance_delay = auto_advance_delay
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.on_video_change = on_video_change
        self._clock = clock

        self._lock = threading.RLock()
        self._player = PlayerAdapter()
        self._phase = PlaybackPhase.IDLE
        self._session: Optional[PlaybackSession] = None
        self._generation = 0
        self._visible = True

        self._timer: Optional[Cancellable] = None
        self._timer_token: Optional[int] = None
        self._tokens = itertools.count(1)
        self._advance: Optional[Cancellable] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> PlaybackPhase:
        return self._phase

    @property
    def session(self) -> Optional[PlaybackSession]:
        return self._session

    @property
    def active_index(self) -> Optional[int]:
        return self._session.index if self._session else None

    @property
    def active_video(self) -> Optional[Video]:
        if self._session is None:
            return None
        return self.videos[self._session.index]

    @property
    def player(self) -> PlayerAdapter:
        return self._player

    @property
    def is_timer_running(self) -> bool:
        return self._timer is not None

    @property
    def is_advance_pending(self) -> bool:
        return self._advance is not None

    # -------------------------------------------------------------------------
    # Player lifecycle
    # -------------------------------------------------------------------------

    def attach_player(self, player: Any):
        """Attach the embedded player (it may not be ready yet)."""
        with self._lock:
            self._player.attach(player)
            self._seek_to_start()

    def detach_player(self, destroy: bool = True):
        with self._lock:
            self._player.detach(destroy=destroy)

    def _seek_to_start(self):
        session = self._session
        if session and session.start_position > 0 and self._player.is_ready:
            self._player.seek_to(session.start_position)

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def video_activated(self, index: int) -> PlaybackSession:
        """Make videos[index] the active video and start tracking it."""
        with self._lock:
            if not 0 <= index < len(self.videos):
                raise IndexError(f"No video at index {index}")

            # Old timer goes before the new session exists
            self._cancel_timer()
            self._cancel_advance()
            self._generation += 1

            video = self.videos[index]
            record = self.tracker.get_video_progress(self.course_id, video.id)
            start = record.last_position_seconds
            if video.duration and start >= video.duration - END_TOLERANCE_SECONDS:
                start = 0.0

            self._session = PlaybackSession(
                video_id=video.id,
                index=index,
                generation=self._generation,
                start_position=start,
                position=start,
                is_visible=self._visible,
                completed_before=record.completed,
            )
            self._phase = PlaybackPhase.TRACKING
            logger.debug(f"Activated video {video.id} (index {index}) at {start:.0f}s")

            self._seek_to_start()
            self._schedule_tick()
            return self._session

    def tick(self):
        """Sample the player and record progress."""
        with self._lock:
            session = self._session
            if session is None or self._phase not in _TICKING or session.ended:
                return
            if not session.is_visible:
                return
            if not self._player.is_ready or self._player.state() is not PlayerState.PLAYING:
                return

            current = self._player.current_time()
            if current is None:
                return
            video = self.videos[session.index]
            duration = self._player.duration() or float(video.duration or 0)
            percent = clamp_percent(current, duration)
            if percent is None:
                return

            session.position = current
            session.last_tick_timestamp = self._clock()
            self.tracker.set_video_progress(self.course_id, video.id, current)
            if self.on_progress:
                self.on_progress(video.id, current, duration, percent)
            if self._session is not session:
                return

            if percent >= self.completion_threshold:
                self._complete(session)
                if self._session is not session:
                    return

            if current >= duration - END_TOLERANCE_SECONDS:
                self._reach_end(session)

    def visibility_changed(self, visible: bool):
        """Suspend tick work while hidden; position is kept."""
        with self._lock:
            self._visible = visible
            if self._session is not None:
                self._session.is_visible = visible

    def player_state_changed(self, state):
        """React to a player state report (PlayerState or raw int)."""
        with self._lock:
            try:
                state = PlayerState(int(state))
            except (TypeError, ValueError):
                return

            session = self._session
            if session is None:
                return

            if state is PlayerState.ENDED:
                self._reach_end(session)
            elif state is PlayerState.PLAYING:
                self._resume(session)
            elif not session.ended and self._phase in _TICKING:
                self._cancel_timer()
                self._phase = PlaybackPhase.PAUSED

    def player_ended(self):
        """The player reported the end of the video."""
        with self._lock:
            if self._session is not None:
                self._reach_end(self._session)

    def close(self):
        """Tear down: stop timers, drop the session, destroy the player."""
        with self._lock:
            self._cancel_timer()
            self._cancel_advance()
            self._generation += 1
            self._session = None
            self._phase = PlaybackPhase.IDLE
            self._player.detach(destroy=True)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _resume(self, session: PlaybackSession):
        if session.ended:
            # Replay after the end
            session.ended = False
            self._cancel_advance()
            self._phase = PlaybackPhase.TRACKING
        elif self._phase is PlaybackPhase.PAUSED:
            self._phase = PlaybackPhase.COMPLETED if session.has_completed else PlaybackPhase.TRACKING
        if self._timer is None:
            self._schedule_tick()

    def _complete(self, session: PlaybackSession):
        if session.has_completed:
            return
        session.has_completed = True
        self._phase = PlaybackPhase.COMPLETED
        self.tracker.mark_video_complete(self.course_id, session.video_id)
        logger.info(f"Video {session.video_id} completed")
        if self.on_complete:
            self.on_complete(session.video_id)

    def _reach_end(self, session: PlaybackSession):
        if session.ended:
            return
        session.ended = True
        self._cancel_timer()
        self._complete(session)
        if self._session is not session:
            return
        self._phase = PlaybackPhase.COMPLETED

        next_index = session.index + 1
        if next_index >= len(self.videos):
            return
        if session.completed_before:
            logger.debug(f"Video {session.video_id} was already completed; not advancing")
            return

        generation = session.generation
        self._advance = self.scheduler.call_later(
            self.auto_advance_delay,
            lambda: self._auto_advance(generation, next_index),
        )

    def _auto_advance(self, generation: int, next_index: int):
        with self._lock:
            if generation != self._generation:
                return
            self._advance = None
            if self.on_video_change:
                self.on_video_change(next_index)
            # The callback may already have activated the next video
            if generation == self._generation:
                self.video_activated(next_index)

    # -------------------------------------------------------------------------
    # Timer
    # -------------------------------------------------------------------------

    def _schedule_tick(self):
        token = next(self._tokens)
        self._timer_token = token
        self._timer = self.scheduler.call_later(
            self.tick_interval, lambda: self._on_timer(token)
        )

    def _on_timer(self, token: int):
        with self._lock:
            if token != self._timer_token:
                return
            self._timer = None
            self._timer_token = None
            try:
                self.tick()
            except Exception:
                logger.exception("Progress tick failed")
            session = self._session
            if (
                self._timer is None
                and session is not None
                and not session.ended
                and self._phase in _TICKING
            ):
                self._schedule_tick()

    def _cancel_timer(self):
        timer = self._timer
        self._timer = None
        self._timer_token = None
        if timer is not None:
            timer.cancel()

    def _cancel_advance(self):
        advance = self._advance
        self._advance = None
        if advance is not None:
            advance.cancel()
