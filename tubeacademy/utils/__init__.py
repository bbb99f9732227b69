"""TubeAcademy utilities."""

from .locale_loader import load_locale, load_translations, get_available_locales

__all__ = ["load_locale", "load_translations", "get_available_locales"]
