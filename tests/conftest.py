"""
Shared fixtures: sample catalog JSON, a mock catalog server, a manual
scheduler, and a scriptable fake player.
"""

import copy
from concurrent.futures import Future
from typing import Callable

import httpx
import pytest

from tubeacademy.classroom import CatalogCache, LocalStore, ProgressTracker
from tubeacademy.client import CatalogAPI


BASE_URL = "http://catalog.test/api"


# -----------------------------------------------------------------------------
# Sample catalog (wire format)
# -----------------------------------------------------------------------------

CATEGORIES = [
    {"id": 1, "slug": "programming", "title": {"en": "Programming", "tr": "Programlama"}, "icon": "code"},
    {"id": 2, "slug": "web", "title": {"en": "Web", "tr": "Web"}, "icon": "globe", "parentId": 1},
]

COURSES = [
    {
        "id": 1, "categoryId": 2, "slug": "react-mastery",
        "title": {"en": "React Mastery", "tr": "React Ustalığı"},
        "description": {"en": "Components and hooks", "tr": "Bileşenler ve hook'lar"},
        "thumbnail": "react.png", "totalVideos": 2,
    },
    {
        "id": 2, "categoryId": 1, "slug": "python-basics",
        "title": {"en": "Python Basics", "tr": "Python Temelleri"},
        "description": {"en": "Variables, loops, functions", "tr": "Değişkenler, döngüler"},
        "thumbnail": "python.png", "totalVideos": 2,
    },
]

VIDEOS = {
    1: [
        {"id": 11, "courseId": 1, "title": {"en": "State with useState", "tr": "useState ile durum"},
         "description": {"en": "Local state", "tr": "Yerel durum"}, "youtubeId": "yt11",
         "duration": 600, "sequenceOrder": 2},
        {"id": 10, "courseId": 1, "title": {"en": "JSX intro", "tr": "JSX giriş"},
         "description": {"en": "Markup in JavaScript", "tr": "JavaScript içinde işaretleme"},
         "youtubeId": "yt10", "duration": 300, "sequenceOrder": 1},
    ],
    2: [
        {"id": 20, "courseId": 2, "title": {"en": "Variables", "tr": "Değişkenler"},
         "description": {"en": "Names and values", "tr": "İsimler ve değerler"}, "youtubeId": "yt20",
         "duration": 400, "sequenceOrder": 1},
        {"id": 21, "courseId": 2, "title": {"en": "Loops", "tr": "Döngüler"},
         "description": {"en": "for and while", "tr": "for ve while"}, "youtubeId": "yt21",
         "duration": 500, "sequenceOrder": 2},
    ],
}

DOCUMENTS = {
    1: [{"id": 100, "courseId": 1, "title": {"en": "Cheatsheet", "tr": "Özet"},
         "fileUrl": "https://files.test/react.pdf", "fileType": "pdf"}],
    2: [],
}


class CatalogServer:
    """In-process catalog API for httpx.MockTransport."""

    def __init__(self):
        self.categories = copy.deepcopy(CATEGORIES)
        self.courses = copy.deepcopy(COURSES)
        self.videos = copy.deepcopy(VIDEOS)
        self.documents = copy.deepcopy(DOCUMENTS)
        self.search_results: list[dict] = []
        self.progress_posts: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.fail_paths: dict[str, int] = {}  # path -> status code
        self.valid_login = ("admin", "admin")

    def paths(self) -> list[str]:
        return [r.url.path.removeprefix("/api") for r in self.requests]

    def count(self, path: str) -> int:
        return self.paths().count(path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        if path in self.fail_paths:
            return httpx.Response(self.fail_paths[path], json={"message": "boom"})

        parts = [p for p in path.split("/") if p]
        if request.method == "POST":
            body = httpx.Response(200, content=request.content).json()
            if parts == ["progress"]:
                self.progress_posts.append(body)
                return httpx.Response(200, json={"ok": True})
            if parts == ["auth", "login"]:
                if (body.get("username"), body.get("password")) == self.valid_login:
                    return httpx.Response(200, json={"success": True})
                return httpx.Response(401, json={"success": False, "message": "Invalid credentials"})
            return httpx.Response(405)

        if parts == ["categories"]:
            return httpx.Response(200, json=self.categories)
        if parts == ["courses"]:
            return httpx.Response(200, json=self.courses)
        if parts == ["search"]:
            return httpx.Response(200, json=self.search_results)
        if len(parts) == 2 and parts[0] == "categories":
            found = [c for c in self.categories if c["slug"] == parts[1]]
            return httpx.Response(200, json=found[0]) if found else httpx.Response(404, json={"message": "Category not found"})
        if len(parts) == 2 and parts[0] == "courses":
            found = [c for c in self.courses if c["slug"] == parts[1]]
            return httpx.Response(200, json=found[0]) if found else httpx.Response(404, json={"message": "Course not found"})
        if len(parts) == 3 and parts[0] == "courses" and parts[2] == "videos":
            return httpx.Response(200, json=self.videos.get(int(parts[1]), []))
        if len(parts) == 3 and parts[0] == "courses" and parts[2] == "documents":
            return httpx.Response(200, json=self.documents.get(int(parts[1]), []))
        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def server() -> CatalogServer:
    return CatalogServer()


@pytest.fixture
def api(server) -> CatalogAPI:
    client = CatalogAPI(BASE_URL, transport=httpx.MockTransport(server.handler))
    yield client
    client.close()


# -----------------------------------------------------------------------------
# Stores
# -----------------------------------------------------------------------------

class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "tubeacademy.db"


@pytest.fixture
def cache_store(db_path, clock) -> LocalStore:
    return LocalStore(db_path, table="cache", ttl_seconds=24 * 3600, clock=clock)


@pytest.fixture
def progress_store(db_path) -> LocalStore:
    return LocalStore(db_path, table="progress")


@pytest.fixture
def tracker(progress_store) -> ProgressTracker:
    return ProgressTracker(progress_store)


class InlineExecutor:
    """Executor that runs submitted work immediately."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass


@pytest.fixture
def catalog(api, cache_store) -> CatalogCache:
    return CatalogCache(api, cache_store, executor=InlineExecutor())


# -----------------------------------------------------------------------------
# Playback doubles
# -----------------------------------------------------------------------------

class ManualScheduler:
    """call_later scheduler driven by advance()."""

    class Handle:
        def __init__(self, due: float, callback: Callable[[], None]):
            self.due = due
            self.callback = callback
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.now = 0.0
        self.handles: list["ManualScheduler.Handle"] = []

    def call_later(self, delay, callback):
        handle = self.Handle(self.now + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list["ManualScheduler.Handle"]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float):
        """Move time forward, firing due callbacks in order."""
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.handles.remove(handle)
            self.now = max(self.now, handle.due)
            handle.callback()
        self.now = target


class FakePlayer:
    """YouTube-IFrame-shaped player double."""

    def __init__(self, state: int = 1, current_time: float = 0.0, duration: float = 100.0):
        self.state = state
        self.time = current_time
        self.length = duration
        self.seeks: list[float] = []
        self.destroyed = False
        self.broken = False

    def _check(self):
        if self.broken:
            raise RuntimeError("player destroyed")

    def getPlayerState(self):
        self._check()
        return self.state

    def getCurrentTime(self):
        self._check()
        return self.time

    def getDuration(self):
        self._check()
        return self.length

    def seekTo(self, seconds, allow_seek_ahead):
        self._check()
        self.seeks.append(seconds)
        self.time = seconds

    def destroy(self):
        self.destroyed = True


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()
