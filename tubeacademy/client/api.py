"""
CatalogAPI - Synchronous client for the catalog REST API.

Provides:
- Category, course, video, and document lookups
- Server-side search
- Progress reports and protected-course login
- Schema validation of every response

Transport failures, non-2xx statuses and responses that do not fit the
schemas all raise CatalogAPIError.
"""

import logging
from typing import Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from tubeacademy.schemas import (
    Category,
    Course,
    Document,
    ProgressUpdate,
    SearchResult,
    Video,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

_CATEGORIES = TypeAdapter(list[Category])
_CATEGORY = TypeAdapter(Category)
_COURSES = TypeAdapter(list[Course])
_COURSE = TypeAdapter(Course)
_VIDEOS = TypeAdapter(list[Video])
_DOCUMENTS = TypeAdapter(list[Document])
_SEARCH_RESULTS = TypeAdapter(list[SearchResult])


class CatalogAPIError(Exception):
    """Raised when a catalog request fails or returns an unexpected shape."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogAPI:
    """
    Client for the catalog REST API.

    A 404 on a single-resource lookup comes back as None; every other
    failure raises CatalogAPIError.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize client.

        Args:
            base_url: API root, e.g. http://localhost:5000/api
            timeout: Request timeout in seconds
            transport: httpx transport override (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "CatalogAPI":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        logger.debug(f"{method} {self.base_url}{path}")
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise CatalogAPIError(f"{method} {path} failed: {e}") from e

    def _get_json(self, path: str, *, allow_missing: bool = False, **kwargs):
        resp = self._request("GET", path, **kwargs)
        if allow_missing and resp.status_code == 404:
            return None
        if not resp.is_success:
            raise CatalogAPIError(
                f"GET {path} returned {resp.status_code}", status_code=resp.status_code
            )
        try:
            return resp.json()
        except ValueError as e:
            raise CatalogAPIError(f"GET {path} returned invalid JSON") from e

    @staticmethod
    def _validate(adapter: TypeAdapter[T], data, path: str) -> T:
        try:
            return adapter.validate_python(data)
        except ValidationError as e:
            raise CatalogAPIError(f"Unexpected response shape from {path}: {e}") from e

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[Category]:
        return self._validate(_CATEGORIES, self._get_json("/categories"), "/categories")

    def get_category(self, slug: str) -> Optional[Category]:
        """Single category, or None if the server answers 404."""
        path = f"/categories/{slug}"
        data = self._get_json(path, allow_missing=True)
        if data is None:
            return None
        return self._validate(_CATEGORY, data, path)

    # -------------------------------------------------------------------------
    # Courses
    # -------------------------------------------------------------------------

    def list_courses(self) -> list[Course]:
        return self._validate(_COURSES, self._get_json("/courses"), "/courses")

    def get_course(self, slug: str) -> Optional[Course]:
        """Single course, or None if the server answers 404."""
        path = f"/courses/{slug}"
        data = self._get_json(path, allow_missing=True)
        if data is None:
            return None
        return self._validate(_COURSE, data, path)

    def list_videos(self, course_id: int) -> list[Video]:
        """Videos of a course in sequence order."""
        path = f"/courses/{course_id}/videos"
        videos = self._validate(_VIDEOS, self._get_json(path), path)
        return sorted(videos, key=lambda v: v.sequence_order)

    def list_documents(self, course_id: int) -> list[Document]:
        path = f"/courses/{course_id}/documents"
        return self._validate(_DOCUMENTS, self._get_json(path), path)

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, query: str) -> list[SearchResult]:
        if not query:
            return []
        data = self._get_json("/search", params={"q": query})
        return self._validate(_SEARCH_RESULTS, data, "/search")

    # -------------------------------------------------------------------------
    # Progress & Auth
    # -------------------------------------------------------------------------

    def report_progress(self, update: ProgressUpdate) -> None:
        """Upsert one progress record on the server."""
        resp = self._request(
            "POST", "/progress", json=update.model_dump(mode="json", by_alias=True)
        )
        if not resp.is_success:
            raise CatalogAPIError(
                f"POST /progress returned {resp.status_code}", status_code=resp.status_code
            )

    def login(self, username: str, password: str, auth_url: Optional[str] = None) -> bool:
        """
        Check credentials for a protected course.

        Args:
            username: Account name
            password: Account password
            auth_url: Course-specific auth endpoint, forwarded as authUrl

        Returns:
            False if the server answers 401 or 403, otherwise the
            response's success flag (True when absent)

        Raises:
            CatalogAPIError: On transport failure or any other non-2xx status
        """
        body: dict = {"username": username, "password": password}
        if auth_url:
            body["authUrl"] = auth_url
        resp = self._request("POST", "/auth/login", json=body)
        if resp.status_code in (401, 403):
            return False
        if not resp.is_success:
            raise CatalogAPIError(
                f"POST /auth/login returned {resp.status_code}", status_code=resp.status_code
            )
        try:
            return bool(resp.json().get("success", True))
        except (ValueError, AttributeError):
            return True
