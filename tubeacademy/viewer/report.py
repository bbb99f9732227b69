"""
Report viewer - Course progress summaries and CSV export.

Provides utilities for formatting durations and building per-course
progress tables for display or download.
"""

from pathlib import Path
from typing import Optional

import pandas as pd

from tubeacademy.classroom import ProgressTracker
from tubeacademy.schemas import Course, Video, VideoStatus
from tubeacademy.utils import load_translations


STATUS_MARKERS = {
    VideoStatus.COMPLETED: "✓",
    VideoStatus.WATCHED: "◐",
    VideoStatus.NOT_STARTED: "○",
}


def format_time(seconds: float, lang: str = "en") -> str:
    """
    Format a total like "1h 5m" (English) or "1s 5dk" (Turkish).

    Args:
        seconds: Duration in seconds
        lang: Language code

    Returns:
        Hours and minutes; hours are omitted when zero
    """
    seconds = max(0, int(seconds))
    hours, minutes = seconds // 3600, (seconds % 3600) // 60
    if lang == "tr":
        return f"{hours}s {minutes}dk" if hours > 0 else f"{minutes}dk"
    return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


def format_duration(seconds: float) -> str:
    """Format a video length as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def status_marker(status: VideoStatus) -> str:
    """Single-character marker for a video list entry."""
    return STATUS_MARKERS[VideoStatus(status)]


def build_course_report(
    course: Course,
    videos: list[Video],
    tracker: ProgressTracker,
    lang: str = "en",
) -> pd.DataFrame:
    """
    Build a per-video progress table for a course.

    Args:
        course: Course being reported
        videos: The course's videos (any order; sorted by sequence)
        tracker: Progress source
        lang: Language for titles and headers

    Returns:
        DataFrame with order, title, duration, progress and completion columns
    """
    t = load_translations(lang)
    rows = []
    ordered = sorted(videos, key=lambda v: v.sequence_order)
    for position, video in enumerate(ordered, start=1):
        completed = tracker.is_video_complete(course.id, video.id)
        percent = tracker.get_video_percent(course.id, video.id, video.duration)
        rows.append({
            t["order"]: position,
            t["title"]: video.title.get(lang),
            t["duration"]: format_duration(video.duration),
            t["progress"]: f"{percent}%",
            t["completed"]: t["answer_yes"] if completed else t["answer_no"],
        })

    columns = [t["order"], t["title"], t["duration"], t["progress"], t["completed"]]
    return pd.DataFrame(rows, columns=columns)


def export_course_csv(
    course: Course,
    videos: list[Video],
    tracker: ProgressTracker,
    output_path: Optional[Path] = None,
    lang: str = "en",
) -> str:
    """
    Export a course progress table as CSV (UTF-8 with BOM for spreadsheets).

    Args:
        course: Course being reported
        videos: The course's videos
        tracker: Progress source
        output_path: File to write (if omitted, nothing is written)
        lang: Language for titles and headers

    Returns:
        The CSV text
    """
    df = build_course_report(course, videos, tracker, lang)
    csv_text = df.to_csv(index=False)
    if output_path is not None:
        Path(output_path).write_text(csv_text, encoding="utf-8-sig")
    return csv_text


def default_export_filename(course: Course) -> str:
    return f"{course.slug}-course-content.csv"
