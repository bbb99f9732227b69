"""
CatalogAPI tests against an in-process mock transport.
"""

import httpx
import pytest

from tubeacademy.client import CatalogAPI, CatalogAPIError
from tubeacademy.schemas import ProgressUpdate

from conftest import BASE_URL


class TestCatalogReads:
    """Test list and detail endpoints."""

    def test_list_categories(self, api):
        categories = api.list_categories()
        assert [c.slug for c in categories] == ["programming", "web"]

    def test_list_courses(self, api):
        courses = api.list_courses()
        assert [c.slug for c in courses] == ["react-mastery", "python-basics"]

    def test_get_course(self, api):
        course = api.get_course("python-basics")
        assert course.id == 2

    def test_get_course_not_found(self, api):
        assert api.get_course("missing") is None

    def test_get_category(self, api):
        assert api.get_category("web").slug == "web"

    def test_get_category_not_found(self, api):
        assert api.get_category("missing") is None

    def test_list_videos_sorted_by_sequence(self, api):
        videos = api.list_videos(1)
        assert [v.id for v in videos] == [10, 11]

    def test_list_documents(self, api):
        documents = api.list_documents(1)
        assert documents[0].title.get("tr") == "Özet"


class TestErrors:
    """Transport, status and shape failures raise CatalogAPIError."""

    def test_server_error(self, api, server):
        server.fail_paths["/courses"] = 500
        with pytest.raises(CatalogAPIError) as exc:
            api.list_courses()
        assert exc.value.status_code == 500

    def test_not_found_on_list_raises(self, api, server):
        server.fail_paths["/categories"] = 404
        with pytest.raises(CatalogAPIError):
            api.list_categories()

    def test_unexpected_shape(self, api, server):
        server.courses = {"courses": []}
        with pytest.raises(CatalogAPIError):
            api.list_courses()

    def test_invalid_json(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<html>"))
        with CatalogAPI(BASE_URL, transport=transport) as client:
            with pytest.raises(CatalogAPIError):
                client.list_categories()

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with CatalogAPI(BASE_URL, transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(CatalogAPIError):
                client.list_courses()


class TestSearch:
    """Test the server-side search endpoint."""

    def test_empty_query_skips_request(self, api, server):
        assert api.search("") == []
        assert server.requests == []

    def test_query_parameter(self, api, server):
        server.search_results = [
            {"type": "video", "id": 21, "title": {"en": "Loops", "tr": "Döngüler"},
             "url": "/courses/python-basics?video=21", "relevance": 0.8},
        ]
        results = api.search("loop")
        assert results[0].identity == ("video", 21)
        assert server.requests[0].url.params["q"] == "loop"


class TestProgressAndAuth:
    """Test write endpoints."""

    def test_report_progress(self, api, server):
        api.report_progress(ProgressUpdate(course_id=5, video_id=9, last_position=550))
        assert server.progress_posts == [
            {"courseId": 5, "videoId": 9, "lastPosition": 550, "isCompleted": False}
        ]

    def test_report_progress_failure(self, api, server):
        server.fail_paths["/progress"] = 503
        with pytest.raises(CatalogAPIError):
            api.report_progress(ProgressUpdate(course_id=5, video_id=9))

    def test_login_success(self, api):
        assert api.login("admin", "admin") is True

    def test_login_rejected(self, api):
        assert api.login("admin", "wrong") is False

    def test_login_server_error(self, api, server):
        server.fail_paths["/auth/login"] = 500
        with pytest.raises(CatalogAPIError):
            api.login("admin", "admin")

    def test_login_forwards_auth_url(self, api, server):
        api.login("admin", "admin", auth_url="https://auth.example.com/login")
        body = httpx.Response(200, content=server.requests[-1].content).json()
        assert body["authUrl"] == "https://auth.example.com/login"

    def test_login_success_flag(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"success": False}))
        with CatalogAPI(BASE_URL, transport=transport) as client:
            assert client.login("admin", "admin") is False

    def test_login_without_body_succeeds(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(204))
        with CatalogAPI(BASE_URL, transport=transport) as client:
            assert client.login("admin", "admin") is True

    def test_error_carries_status_code(self, api, server):
        server.fail_paths["/auth/login"] = 500
        with pytest.raises(CatalogAPIError) as exc_info:
            api.login("admin", "admin")
        assert exc_info.value.status_code == 500
