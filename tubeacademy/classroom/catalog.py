"""
CatalogCache - Cache-first access to the catalog API.

Provides:
- Cache-first reads for categories, courses, videos, and documents
- Background pre-fetch of each course's video list
- Bulk refresh with subscriber notification
- Cache-only reads for the search engine
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional, TypeVar

from pydantic import TypeAdapter, ValidationError

from tubeacademy.client import CatalogAPI
from tubeacademy.schemas import Category, Course, Document, Video

from .store import KeyValueStore


logger = logging.getLogger(__name__)

T = TypeVar("T")

CACHE_PREFIX = "api_cache_"

_CATEGORIES = TypeAdapter(list[Category])
_CATEGORY = TypeAdapter(Category)
_COURSES = TypeAdapter(list[Course])
_COURSE = TypeAdapter(Course)
_VIDEOS = TypeAdapter(list[Video])
_DOCUMENTS = TypeAdapter(list[Document])


def cache_key(resource: str) -> str:
    """Store key for a cached resource, e.g. cache_key("videos_3")."""
    return f"{CACHE_PREFIX}{resource}"


class CatalogCache:
    """
    Read-through cache over CatalogAPI.

    Fresh entries are served from the store without touching the network.
    Network errors propagate to the caller; a 404 on a single-resource
    lookup comes back as None and is not cached.
    """

    def __init__(
        self,
        api: CatalogAPI,
        store: KeyValueStore,
        executor: Optional[ThreadPoolExecutor] = None,
        prefetch_workers: int = 4,
    ):
        """
        Initialize cache.

        Args:
            api: Catalog API client used on cache misses
            store: Store holding cache entries (normally with a 24h TTL)
            executor: Pool for background pre-fetch (created if omitted)
            prefetch_workers: Pool size when the pool is created here
        """
        self.api = api
        self.store = store
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=prefetch_workers, thread_name_prefix="catalog-prefetch"
        )
        self._subscribers: list[Callable[[], None]] = []

    # -------------------------------------------------------------------------
    # Cache plumbing
    # -------------------------------------------------------------------------

    def _read(self, resource: str, adapter: TypeAdapter[T]) -> Optional[T]:
        """Cached value for `resource`, or None on miss or bad cached data."""
        data = self.store.get(cache_key(resource))
        if data is None:
            return None
        try:
            return adapter.validate_python(data)
        except ValidationError:
            logger.debug(f"Cached {resource} failed validation, refetching")
            return None

    def _write(self, resource: str, adapter: TypeAdapter[T], value: T) -> None:
        self.store.set(cache_key(resource), adapter.dump_python(value, mode="json", by_alias=True))

    def _read_through(
        self, resource: str, adapter: TypeAdapter[T], fetch: Callable[[], Optional[T]]
    ) -> Optional[T]:
        cached = self._read(resource, adapter)
        if cached is not None:
            return cached
        value = fetch()
        if value is not None:
            self._write(resource, adapter, value)
        return value

    # -------------------------------------------------------------------------
    # Cache-first reads
    # -------------------------------------------------------------------------

    def categories(self) -> list[Category]:
        return self._read_through("categories", _CATEGORIES, self.api.list_categories)

    def category(self, slug: str) -> Optional[Category]:
        return self._read_through(
            f"category_{slug}", _CATEGORY, lambda: self.api.get_category(slug)
        )

    def courses(self) -> list[Course]:
        """Course list; a network fetch also starts video pre-fetch."""
        cached = self._read("courses", _COURSES)
        if cached is not None:
            return cached
        courses = self.api.list_courses()
        self._write("courses", _COURSES, courses)
        self.prefetch_videos(courses)
        return courses

    def course(self, slug: str) -> Optional[Course]:
        return self._read_through(
            f"course_{slug}", _COURSE, lambda: self.api.get_course(slug)
        )

    def videos(self, course_id: int) -> list[Video]:
        return self._read_through(
            f"videos_{course_id}", _VIDEOS, lambda: self.api.list_videos(course_id)
        )

    def documents(self, course_id: int) -> list[Document]:
        return self._read_through(
            f"documents_{course_id}", _DOCUMENTS, lambda: self.api.list_documents(course_id)
        )

    # -------------------------------------------------------------------------
    # Cache-only reads
    # -------------------------------------------------------------------------

    def cached_categories(self) -> list[Category]:
        return self._read("categories", _CATEGORIES) or []

    def cached_courses(self) -> list[Course]:
        return self._read("courses", _COURSES) or []

    def cached_videos(self, course_id: int) -> Optional[list[Video]]:
        """Cached videos, or None if this course's videos were never fetched."""
        return self._read(f"videos_{course_id}", _VIDEOS)

    # -------------------------------------------------------------------------
    # Pre-fetch
    # -------------------------------------------------------------------------

    def prefetch_videos(self, courses: list[Course]) -> list[Future]:
        """
        Fetch video lists for courses not yet cached, in the background.

        Returns the submitted futures; they never raise.
        """
        futures = []
        for course in courses:
            if self.cached_videos(course.id) is not None:
                continue
            try:
                futures.append(self._executor.submit(self._prefetch_course_videos, course.id))
            except RuntimeError:
                # executor shut down
                break
        return futures

    def _prefetch_course_videos(self, course_id: int) -> None:
        try:
            self.videos(course_id)
        except Exception as e:
            logger.debug(f"Prefetch of videos for course {course_id} failed: {e}")

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after refresh(). Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def refresh(self) -> int:
        """Clear every cached catalog entry and notify subscribers."""
        removed = self.store.clear_namespace(CACHE_PREFIX)
        logger.info(f"Cleared {removed} cached catalog entries")
        for callback in list(self._subscribers):
            try:
                callback()
            except Exception:
                logger.exception("Catalog refresh subscriber failed")
        return removed

    def close(self) -> None:
        """Stop the pre-fetch pool (waits for running fetches)."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)
