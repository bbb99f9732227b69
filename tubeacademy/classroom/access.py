"""
CourseAccess - Login gate for protected courses.

Unprotected courses are always open. A protected course opens once a login
succeeds (forwarded to the course's own auth service when it has one); the
unlocked course ids persist in the preference store.
"""

import logging

from tubeacademy.client import CatalogAPI
from tubeacademy.schemas import Course

from .store import KeyValueStore


logger = logging.getLogger(__name__)

UNLOCKED_KEY = "unlocked_courses"


class CourseAccess:
    """Track which protected courses the user has unlocked."""

    def __init__(self, api: CatalogAPI, store: KeyValueStore):
        self.api = api
        self.store = store

    def _unlocked_ids(self) -> set[int]:
        data = self.store.get(UNLOCKED_KEY)
        if not isinstance(data, list):
            return set()
        return {i for i in data if isinstance(i, int)}

    def is_unlocked(self, course: Course) -> bool:
        if not course.protected:
            return True
        return course.id in self._unlocked_ids()

    def unlock(self, course: Course, username: str, password: str) -> bool:
        """
        Log in for a course.

        Returns:
            True if the course is now open, False on rejected credentials

        Raises:
            CatalogAPIError: If the login request itself fails
        """
        if not course.protected:
            return True
        if not self.api.login(username, password, auth_url=course.auth_url):
            logger.info(f"Login rejected for course {course.slug}")
            return False
        unlocked = self._unlocked_ids()
        unlocked.add(course.id)
        self.store.set(UNLOCKED_KEY, sorted(unlocked))
        return True

    def lock_all(self):
        """Forget every unlocked course."""
        self.store.delete(UNLOCKED_KEY)
