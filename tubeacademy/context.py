"""
AppContext - Composition root wiring one instance of each component.

Each component receives its store explicitly; nothing reaches for a global.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from tubeacademy.classroom import (
    CatalogCache,
    CourseAccess,
    LocalStore,
    PlaybackController,
    PreferenceStore,
    ProgressTracker,
    Scheduler,
    SearchEngine,
)
from tubeacademy.client import CatalogAPI
from tubeacademy.config import Settings, load_settings
from tubeacademy.schemas import Video


logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    api: CatalogAPI
    cache_store: LocalStore
    progress_store: LocalStore
    preference_store: LocalStore
    catalog: CatalogCache
    progress: ProgressTracker
    search: SearchEngine
    preferences: PreferenceStore
    access: CourseAccess

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "AppContext":
        """
        Build every component from settings.

        Args:
            settings: Settings (default: load_settings())
            transport: Optional httpx transport (tests, offline use)
        """
        settings = settings or load_settings()
        db_path = settings.db_path

        api = CatalogAPI(
            settings.api_base_url, timeout=settings.request_timeout, transport=transport
        )
        cache_store = LocalStore(db_path, table="cache", ttl_seconds=settings.cache_ttl_seconds)
        progress_store = LocalStore(db_path, table="progress")
        preference_store = LocalStore(db_path, table="preferences")

        catalog = CatalogCache(api, cache_store, prefetch_workers=settings.prefetch_workers)
        progress = ProgressTracker(
            progress_store,
            reporter=api.report_progress if settings.report_progress else None,
            report_interval=settings.report_interval,
        )
        logger.debug(f"Local store at {db_path}")

        return cls(
            settings=settings,
            api=api,
            cache_store=cache_store,
            progress_store=progress_store,
            preference_store=preference_store,
            catalog=catalog,
            progress=progress,
            search=SearchEngine(catalog, api),
            preferences=PreferenceStore(preference_store),
            access=CourseAccess(api, preference_store),
        )

    def playback(
        self,
        course_id: int,
        videos: list[Video],
        scheduler: Optional[Scheduler] = None,
        **callbacks,
    ) -> PlaybackController:
        """New playback controller configured from settings."""
        return PlaybackController(
            course_id,
            videos,
            self.progress,
            scheduler,
            completion_threshold=self.settings.completion_threshold,
            tick_interval=self.settings.tick_interval,
            auto_advance_delay=self.settings.auto_advance_delay,
            **callbacks,
        )

    def close(self):
        self.catalog.close()
        self.progress.close()
        self.api.close()
