"""
SearchEngine - Merge cached catalog text with server-side search.

Algorithm:
1. Queries shorter than MIN_QUERY_LENGTH return nothing.
2. Cached courses (and their cached videos) are matched case-insensitively
   against both languages of title and description.
3. A course appears if it matches or owns a matching video; its matching
   videos follow it directly.
4. Any video match makes the cache result final. Otherwise the network
   search runs and its results are merged in, deduplicated by (type, id),
   cache entries winning.

Videos are only cached once a course is opened (or pre-fetched), so the
fallback covers courses the user has not visited yet.

Callers debounce keystrokes (~300ms) before calling search().
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from tubeacademy.client import CatalogAPI, CatalogAPIError
from tubeacademy.schemas import Category, Course, LocalizedText, SearchResult, Video

from .catalog import CatalogCache


logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2

# Relevance weights
COURSE_TITLE_MATCH = 1.0
COURSE_DESCRIPTION_MATCH = 0.7
COURSE_VIA_VIDEO = 0.5
VIDEO_TITLE_MATCH = 0.8
VIDEO_DESCRIPTION_MATCH = 0.6


def _matches(text: LocalizedText, needle: str) -> bool:
    return any(needle in value.casefold() for value in text.values() if value)


def course_url(course: Course) -> str:
    return f"/courses/{course.slug}"


def video_url(course: Course, video: Video) -> str:
    return f"/courses/{course.slug}?video={video.id}"


def build_category_labels(categories: list[Category], lang: str = "en") -> dict[int, str]:
    """Map category id to "parent / child" (or "child" when it has no parent)."""
    by_id = {c.id: c for c in categories}
    labels = {}
    for category in categories:
        name = category.title.get(lang)
        parent = by_id.get(category.parent_id) if category.parent_id is not None else None
        labels[category.id] = f"{parent.title.get(lang)} / {name}" if parent else name
    return labels


@dataclass
class _CourseGroup:
    course: SearchResult
    videos: list[SearchResult] = field(default_factory=list)


class SearchEngine:
    """Cache-first catalog search with a network fallback."""

    def __init__(self, cache: CatalogCache, api: Optional[CatalogAPI] = None):
        """
        Initialize search engine.

        Args:
            cache: Catalog cache to read from (cache-only reads)
            api: Client for the fallback search (default: the cache's client)
        """
        self.cache = cache
        self.api = api or cache.api

    def search(self, query: str, lang: str = "en") -> list[SearchResult]:
        """
        Search courses and videos.

        Args:
            query: Raw query string
            lang: Language for course and category labels

        Returns:
            Ordered, deduplicated results
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        needle = query.casefold()

        groups, video_matches = self._search_cache(needle, lang)
        results = [r for g in groups for r in (g.course, *g.videos)]
        if video_matches:
            return results

        try:
            remote = self.api.search(query)
        except CatalogAPIError as e:
            if results:
                logger.warning(f"Search fallback failed, using cached results: {e}")
                return results
            raise

        return self._merge(results, remote, lang)

    # -------------------------------------------------------------------------
    # Cache pass
    # -------------------------------------------------------------------------

    def _search_cache(self, needle: str, lang: str) -> tuple[list[_CourseGroup], int]:
        labels = build_category_labels(self.cache.cached_categories(), lang)
        groups = []
        video_matches = 0

        for course in self.cache.cached_courses():
            title_hit = _matches(course.title, needle)
            description_hit = _matches(course.description, needle)

            matched_videos = []
            for video in self.cache.cached_videos(course.id) or []:
                if _matches(video.title, needle):
                    relevance = VIDEO_TITLE_MATCH
                elif _matches(video.description, needle):
                    relevance = VIDEO_DESCRIPTION_MATCH
                else:
                    continue
                matched_videos.append(SearchResult(
                    type="video",
                    id=video.id,
                    title=video.title,
                    url=video_url(course, video),
                    relevance=relevance,
                    course_id=course.id,
                    course_name=course.title.get(lang),
                    course_slug=course.slug,
                    category_name=labels.get(course.category_id),
                ))

            if not (title_hit or description_hit or matched_videos):
                continue

            if title_hit:
                relevance = COURSE_TITLE_MATCH
            elif description_hit:
                relevance = COURSE_DESCRIPTION_MATCH
            else:
                relevance = COURSE_VIA_VIDEO

            video_matches += len(matched_videos)
            groups.append(_CourseGroup(
                course=self._course_result(course, relevance, labels, lang),
                videos=matched_videos,
            ))

        groups.sort(key=lambda g: max([g.course.relevance] + [v.relevance for v in g.videos]), reverse=True)
        return groups, video_matches

    @staticmethod
    def _course_result(course: Course, relevance: float, labels: dict[int, str], lang: str) -> SearchResult:
        return SearchResult(
            type="course",
            id=course.id,
            title=course.title,
            url=course_url(course),
            relevance=relevance,
            course_id=course.id,
            course_name=course.title.get(lang),
            course_slug=course.slug,
            category_name=labels.get(course.category_id),
        )

    # -------------------------------------------------------------------------
    # Merge
    # -------------------------------------------------------------------------

    def _merge(self, local: list[SearchResult], remote: list[SearchResult], lang: str) -> list[SearchResult]:
        """Append network results not already present; local entries win."""
        seen = {r.identity for r in local}
        courses = {c.id: c for c in self.cache.cached_courses()}
        labels = None

        extras = []
        for result in sorted(remote, key=lambda r: r.relevance, reverse=True):
            if result.identity in seen:
                continue
            seen.add(result.identity)
            if result.type == "course" and result.id in courses:
                if labels is None:
                    labels = build_category_labels(self.cache.cached_categories(), lang)
                course = courses[result.id]
                result = result.model_copy(update={
                    "course_id": course.id,
                    "course_name": course.title.get(lang),
                    "course_slug": course.slug,
                    "category_name": labels.get(course.category_id),
                })
            extras.append(result)

        return local + extras
