"""
Search result schema shared by the API client and the search merge engine.
"""

from pydantic import Field
from typing import Literal, Optional

from .catalog import CatalogModel, LocalizedText


ResultType = Literal["course", "video"]


class SearchResult(CatalogModel):
    type: ResultType
    id: int
    title: LocalizedText
    url: str
    relevance: float = Field(default=0.0, ge=0)
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    course_slug: Optional[str] = None
    category_name: Optional[str] = None

    @property
    def identity(self) -> tuple[str, int]:
        """Deduplication key."""
        return (self.type, self.id)
