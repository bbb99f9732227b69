"""
PlayerAdapter - Narrow, guarded view of an embedded video player.

The embedded player (a YouTube iframe bridge, a desktop widget, a test
double) may load late, lack methods, raise, or be destroyed mid-session.
The adapter turns all of that into "no value" so the playback state
machine never has to handle it.

Both the YouTube IFrame API names (getCurrentTime) and snake_case names
(get_current_time) are accepted.
"""

import logging
import math
from enum import IntEnum
from typing import Any, Callable, Optional


logger = logging.getLogger(__name__)


class PlayerState(IntEnum):
    """YouTube IFrame API player states."""
    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5


_METHODS = {
    "current_time": ("getCurrentTime", "get_current_time"),
    "duration": ("getDuration", "get_duration"),
    "state": ("getPlayerState", "get_player_state"),
    "seek": ("seekTo", "seek_to"),
    "destroy": ("destroy",),
}

# A player must offer these to count as ready
_REQUIRED = ("current_time", "duration", "state")


class PlayerAdapter:
    """Guarded wrapper around a duck-typed player object."""

    def __init__(self, player: Any = None):
        self._player = player

    def _method(self, capability: str) -> Optional[Callable]:
        if self._player is None:
            return None
        for name in _METHODS[capability]:
            fn = getattr(self._player, name, None)
            if callable(fn):
                return fn
        return None

    def _call(self, capability: str, *args) -> Any:
        fn = self._method(capability)
        if fn is None:
            return None
        try:
            return fn(*args)
        except Exception as e:
            logger.debug(f"Player call {capability} failed: {e}")
            return None

    @staticmethod
    def _number(value: Any) -> Optional[float]:
        if isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(number) or math.isinf(number):
            return None
        return number

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def player(self) -> Any:
        return self._player

    def attach(self, player: Any):
        self._player = player

    def detach(self, destroy: bool = True):
        """Drop the player, destroying it first if asked."""
        if destroy:
            self._call("destroy")
        self._player = None

    @property
    def is_ready(self) -> bool:
        """True when a player is attached and offers every required method."""
        return all(self._method(c) is not None for c in _REQUIRED)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def state(self) -> Optional[PlayerState]:
        raw = self._number(self._call("state"))
        if raw is None:
            return None
        try:
            return PlayerState(int(raw))
        except ValueError:
            return None

    def current_time(self) -> Optional[float]:
        return self._number(self._call("current_time"))

    def duration(self) -> Optional[float]:
        value = self._number(self._call("duration"))
        if value is None or value <= 0:
            return None
        return value

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def seek_to(self, seconds: float) -> bool:
        """Ask the player to seek. Returns False if it could not."""
        fn = self._method("seek")
        if fn is None:
            return False
        try:
            fn(seconds, True)
        except TypeError:
            try:
                fn(seconds)
            except Exception as e:
                logger.debug(f"Player seek failed: {e}")
                return False
        except Exception as e:
            logger.debug(f"Player seek failed: {e}")
            return False
        return True
