"""
Progress tracking schemas for TubeAcademy.

Defines Pydantic models for watch progress including:
- Per-video progress records (position, completion, watched flag)
- Per-course aggregates for dashboards
- The body sent to the remote progress endpoint
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum

from .catalog import CatalogModel


class VideoStatus(str, Enum):
    NOT_STARTED = "not_started"
    WATCHED = "watched"
    COMPLETED = "completed"


def progress_key(course_id: int, video_id: int) -> str:
    """Store key for a course+video pair."""
    return f"{course_id}-{video_id}"


class ProgressRecord(CatalogModel):
    last_position_seconds: float = Field(default=0.0, ge=0)
    completed: bool = False
    watched: bool = False

    @property
    def status(self) -> VideoStatus:
        if self.completed:
            return VideoStatus.COMPLETED
        if self.watched:
            return VideoStatus.WATCHED
        return VideoStatus.NOT_STARTED


class CourseProgress(BaseModel):
    course_id: int
    total_videos: int
    completed_count: int = 0
    watched_count: int = 0
    progress_percent: int = Field(default=0, ge=0, le=100)
    positions: dict[int, float] = Field(default_factory=dict)  # video_id -> seconds
    total_seconds: Optional[int] = None
    watched_seconds: Optional[float] = None
    remaining_seconds: Optional[float] = None


class ProgressUpdate(CatalogModel):
    """Body of POST /progress."""
    course_id: int
    video_id: int
    last_position: int = Field(default=0, ge=0)
    is_completed: bool = False
