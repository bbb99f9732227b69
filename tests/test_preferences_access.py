"""
Preference, locale, and protected-course tests.
"""

import json

import pytest

from tubeacademy.classroom import CourseAccess, LocalStore, PreferenceStore
from tubeacademy.client import CatalogAPIError
from tubeacademy.schemas import Course
from tubeacademy.utils import get_available_locales, load_locale, load_translations


@pytest.fixture
def preference_store(db_path):
    return LocalStore(db_path, table="preferences")


@pytest.fixture
def preferences(preference_store):
    return PreferenceStore(preference_store)


@pytest.fixture
def protected_course():
    return Course(
        id=3, category_id=1, slug="secret-course", title="Secret",
        protected=True, auth_url="https://auth.test/login",
    )


class TestPreferences:
    """Test language and theme persistence."""

    def test_defaults(self, preferences):
        assert preferences.language == "en"
        assert preferences.theme == "light"

    def test_set_language(self, preferences, preference_store):
        preferences.set_language("tr")
        assert preferences.language == "tr"
        assert PreferenceStore(preference_store).language == "tr"

    def test_unsupported_language(self, preferences):
        preferences.set_language("de")
        assert preferences.language == "en"

    def test_toggle_theme(self, preferences):
        assert preferences.toggle_theme() == "dark"
        assert preferences.theme == "dark"
        assert preferences.toggle_theme() == "light"

    def test_garbage_theme_reads_as_default(self, preferences, preference_store):
        preference_store.set("theme", "neon")
        assert preferences.theme == "light"

    def test_translations_follow_language(self, preferences):
        assert preferences.translations()["search"] == "Search"
        preferences.set_language("tr")
        assert preferences.translations()["search"] == "Ara"
        assert preferences.translations("en")["search"] == "Search"


class TestLocales:
    """Test YAML translation tables."""

    def test_available_locales(self):
        assert get_available_locales() == ["en", "tr"]

    def test_tables_have_same_keys(self):
        assert set(load_locale("tr")) == set(load_locale("en"))

    def test_values_are_strings(self):
        for lang in ("en", "tr"):
            assert all(isinstance(v, str) for v in load_locale(lang).values())

    def test_unknown_language_gets_english(self):
        assert load_translations("de") == load_translations("en")

    def test_missing_locale(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_locale("en", locales_dir=tmp_path)

    def test_partial_locale_filled_from_english(self, tmp_path):
        (tmp_path / "en.yaml").write_text('search: "Search"\nhome: "Home"\n', encoding="utf-8")
        (tmp_path / "tr.yaml").write_text('search: "Ara"\n', encoding="utf-8")
        assert load_translations("tr", locales_dir=tmp_path) == {"search": "Ara", "home": "Home"}


class TestCourseAccess:
    """Test the protected-course login gate."""

    @pytest.fixture
    def access(self, api, preference_store):
        return CourseAccess(api, preference_store)

    def test_open_course_always_unlocked(self, access, server):
        course = Course(id=1, category_id=1, slug="open", title="Open")
        assert access.is_unlocked(course)
        assert access.unlock(course, "", "")
        assert server.requests == []

    def test_protected_course_locked(self, access, protected_course):
        assert not access.is_unlocked(protected_course)

    def test_unlock(self, access, server, protected_course, preference_store):
        assert access.unlock(protected_course, "admin", "admin")
        assert access.is_unlocked(protected_course)
        assert preference_store.get("unlocked_courses") == [3]
        body = json.loads(server.requests[-1].content)
        assert body["authUrl"] == "https://auth.test/login"

    def test_rejected_credentials(self, access, protected_course):
        assert not access.unlock(protected_course, "admin", "nope")
        assert not access.is_unlocked(protected_course)

    def test_login_failure_propagates(self, access, server, protected_course):
        server.fail_paths["/auth/login"] = 502
        with pytest.raises(CatalogAPIError):
            access.unlock(protected_course, "admin", "admin")

    def test_lock_all(self, access, protected_course):
        access.unlock(protected_course, "admin", "admin")
        access.lock_all()
        assert not access.is_unlocked(protected_course)
