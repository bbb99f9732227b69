"""
Locale loader utility for TubeAcademy.

Loads YAML translation tables from the locales/ directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
import yaml


# Default locales directory (inside the package)
LOCALES_DIR = Path(__file__).parent.parent / "locales"

FALLBACK_LANGUAGE = "en"


@lru_cache(maxsize=8)
def _read_locale(file_path: Path) -> dict[str, Any]:
    with open(file_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_locale(lang: str, locales_dir: Path | None = None) -> dict[str, Any]:
    """
    Load one translation table.

    Args:
        lang: Language code without .yaml extension (e.g., "tr")
        locales_dir: Optional custom locales directory

    Returns:
        Dict mapping UI string keys to text

    Raises:
        FileNotFoundError: If the locale file doesn't exist
        yaml.YAMLError: If YAML parsing fails
    """
    dir_path = locales_dir or LOCALES_DIR
    file_path = dir_path / f"{lang}.yaml"

    if not file_path.exists():
        raise FileNotFoundError(f"Locale not found: {file_path}")

    return _read_locale(file_path)


def load_translations(lang: str, locales_dir: Path | None = None) -> dict[str, str]:
    """
    Translation table for `lang`, with English filling any gaps.

    Unknown languages get the English table.
    """
    base = dict(load_locale(FALLBACK_LANGUAGE, locales_dir))
    if lang == FALLBACK_LANGUAGE:
        return base
    try:
        base.update(load_locale(lang, locales_dir))
    except FileNotFoundError:
        pass
    return base


def get_available_locales(locales_dir: Path | None = None) -> list[str]:
    """List language codes with a translation table."""
    dir_path = locales_dir or LOCALES_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))
