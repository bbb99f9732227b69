"""
Catalog schemas for TubeAcademy.

Defines Pydantic models for the content tree served by the catalog API:
- Bilingual text (English / Turkish)
- Categories with optional parent
- Courses, videos, and downloadable documents

Wire JSON uses camelCase keys; models accept either camelCase or snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Literal, Optional


Language = Literal["en", "tr"]

SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "tr")


class CatalogModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocalizedText(BaseModel):
    """Text in both supported languages."""
    en: str = ""
    tr: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_plain_string(cls, data):
        # Some endpoints return a bare string instead of {en, tr}
        if isinstance(data, str):
            return {"en": data, "tr": data}
        return data

    def get(self, lang: str = "en") -> str:
        """Text for `lang`, falling back to English."""
        value = getattr(self, lang, None) if lang in SUPPORTED_LANGUAGES else None
        return value or self.en

    def values(self) -> list[str]:
        return [self.en, self.tr]


# -----------------------------------------------------------------------------
# Content tree
# -----------------------------------------------------------------------------

class Category(CatalogModel):
    id: int
    slug: str
    title: LocalizedText
    icon: str = ""
    parent_id: Optional[int] = None


class Course(CatalogModel):
    id: int
    category_id: int
    slug: str
    title: LocalizedText
    description: LocalizedText = Field(default_factory=LocalizedText)
    thumbnail: str = ""
    total_videos: int = Field(default=0, ge=0)
    protected: bool = False
    auth_url: Optional[str] = None


class Video(CatalogModel):
    id: int
    course_id: int
    title: LocalizedText
    description: LocalizedText = Field(default_factory=LocalizedText)
    youtube_id: str
    duration: int = Field(default=0, ge=0)  # seconds
    sequence_order: int = 0

    @property
    def youtube_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.youtube_id}"


class Document(CatalogModel):
    id: int
    course_id: int
    title: LocalizedText
    file_url: str
    file_type: str
