"""
Settings and composition root tests.
"""

import os

import httpx
import pytest
from pydantic import ValidationError

from tubeacademy.classroom import PlaybackPhase
from tubeacademy.config import Settings, load_settings
from tubeacademy.context import AppContext

from conftest import BASE_URL, ManualScheduler


class TestSettings:
    """Test settings from the environment."""

    def test_defaults(self, tmp_path):
        settings = load_settings(env_file=tmp_path / "missing.env")
        assert settings.completion_threshold == 90
        assert settings.cache_ttl_seconds == 24 * 3600

    def test_environment_values(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TUBEACADEMY_COMPLETION_THRESHOLD", "80")
        monkeypatch.setenv("TUBEACADEMY_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("TUBEACADEMY_REPORT_PROGRESS", "true")
        settings = load_settings(env_file=tmp_path / "missing.env")
        assert settings.completion_threshold == 80
        assert settings.report_progress is True
        assert settings.db_path == tmp_path / "tubeacademy.db"

    def test_overrides_win(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TUBEACADEMY_API_BASE_URL", "http://env/api")
        settings = load_settings(env_file=tmp_path / "missing.env", api_base_url="http://arg/api")
        assert settings.api_base_url == "http://arg/api"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("TUBEACADEMY_CACHE_TTL_HOURS=2\n", encoding="utf-8")
        try:
            settings = load_settings(env_file=env_file)
        finally:
            os.environ.pop("TUBEACADEMY_CACHE_TTL_HOURS", None)
        assert settings.cache_ttl_seconds == 7200

    def test_invalid_threshold(self):
        with pytest.raises(ValidationError):
            Settings(completion_threshold=150)


class TestAppContext:
    """Test component wiring."""

    @pytest.fixture
    def context(self, tmp_path, server):
        settings = Settings(
            api_base_url=BASE_URL,
            data_dir=tmp_path,
            completion_threshold=80,
            report_progress=True,
            report_interval=0,
        )
        context = AppContext.from_settings(settings, transport=httpx.MockTransport(server.handler))
        yield context
        context.close()

    def test_catalog_round_trip(self, context, server):
        courses = context.catalog.courses()
        assert len(courses) == 2
        assert context.catalog.courses() == courses
        assert server.count("/courses") == 1

    def test_stores_share_one_file(self, context, tmp_path):
        assert context.cache_store.db_path == tmp_path / "tubeacademy.db"
        assert context.progress_store.db_path == context.cache_store.db_path
        assert context.cache_store.ttl_seconds == 24 * 3600
        assert context.progress_store.ttl_seconds is None

    def test_progress_reported(self, context, server):
        context.progress.mark_video_complete(1, 10)
        context.progress.close()
        assert server.progress_posts == [
            {"courseId": 1, "videoId": 10, "lastPosition": 0, "isCompleted": True}
        ]

    def test_refresh_keeps_progress(self, context):
        context.catalog.categories()
        context.progress.set_video_progress(1, 10, 30)
        context.catalog.refresh()
        assert context.progress.get_initial_position(1, 10) == 30

    def test_playback_uses_settings(self, context):
        videos = context.catalog.videos(1)
        controller = context.playback(1, videos, scheduler=ManualScheduler())
        assert controller.completion_threshold == 80
        assert controller.phase is PlaybackPhase.IDLE

    def test_search(self, context):
        context.catalog.courses()
        context.catalog.categories()
        results = context.search.search("react")
        assert results[0].identity == ("course", 1)
