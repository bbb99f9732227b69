"""
PreferenceStore - UI preferences (language, theme) in the local store.
"""

from typing import Optional

from tubeacademy.schemas import SUPPORTED_LANGUAGES
from tubeacademy.utils import load_translations

from .store import KeyValueStore


DEFAULT_LANGUAGE = "en"
DEFAULT_THEME = "light"
THEMES = ("light", "dark")


class PreferenceStore:
    """Persisted language and theme."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    @property
    def language(self) -> str:
        lang = self.store.get("language")
        return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE

    def set_language(self, lang: str):
        """Set UI language; unsupported codes fall back to English."""
        self.store.set("language", lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE)

    @property
    def theme(self) -> str:
        theme = self.store.get("theme")
        return theme if theme in THEMES else DEFAULT_THEME

    def toggle_theme(self) -> str:
        """Switch between light and dark. Returns the new theme."""
        new_theme = "dark" if self.theme == "light" else "light"
        self.store.set("theme", new_theme)
        return new_theme

    def translations(self, lang: Optional[str] = None) -> dict[str, str]:
        """UI strings for `lang` (default: the stored language)."""
        return load_translations(lang or self.language)
