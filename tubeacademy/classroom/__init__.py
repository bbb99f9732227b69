"""
TubeAcademy Classroom - Runtime components for browsing and watching courses.

This module provides:
- LocalStore: Durable key-value tables (cache with TTL, progress, preferences)
- CatalogCache: Cache-first catalog reads with background pre-fetch
- ProgressTracker: Per-video watch progress
- PlaybackController: Playback progress state machine
- SearchEngine: Cache-first search with network fallback
- PreferenceStore / CourseAccess: UI preferences and protected courses
"""

from .store import (
    KeyValueStore,
    LocalStore,
)

from .catalog import (
    CatalogCache,
    CACHE_PREFIX,
    cache_key,
)

from .progress import (
    ProgressTracker,
    clamp_percent,
)

from .player import (
    PlayerAdapter,
    PlayerState,
)

from .playback import (
    PlaybackController,
    PlaybackPhase,
    PlaybackSession,
    PolledScheduler,
    Scheduler,
    ThreadingScheduler,
)

from .search import (
    SearchEngine,
    MIN_QUERY_LENGTH,
    build_category_labels,
)

from .preferences import PreferenceStore

from .access import CourseAccess

__all__ = [
    # Store
    "KeyValueStore",
    "LocalStore",
    # Catalog
    "CatalogCache",
    "CACHE_PREFIX",
    "cache_key",
    # Progress
    "ProgressTracker",
    "clamp_percent",
    # Playback
    "PlayerAdapter",
    "PlayerState",
    "PlaybackController",
    "PlaybackPhase",
    "PlaybackSession",
    "PolledScheduler",
    "Scheduler",
    "ThreadingScheduler",
    # Search
    "SearchEngine",
    "MIN_QUERY_LENGTH",
    "build_category_labels",
    # Preferences / access
    "PreferenceStore",
    "CourseAccess",
]
