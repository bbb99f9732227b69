"""
ProgressTracker - Track watch progress in the local store.

Stores per-video progress separately from the catalog cache:
- Last playback position
- Watched flag (any progress event seen)
- Completed flag (threshold crossed, never unset automatically)

The local copy is authoritative for rendering. When a reporter is
configured, updates are also sent to the remote progress endpoint on a
best-effort basis, from a background worker so callers never wait on
the network.
"""

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from tubeacademy.schemas import (
    Course,
    CourseProgress,
    ProgressRecord,
    ProgressUpdate,
    Video,
    progress_key,
)

from .store import KeyValueStore


logger = logging.getLogger(__name__)

ProgressReporter = Callable[[ProgressUpdate], None]


def clamp_percent(current_time: float, duration: float) -> Optional[int]:
    """
    Percent watched, rounded and clamped to [0, 100].

    Returns None when duration is zero or unknown.
    """
    if not duration or duration <= 0:
        return None
    if current_time != current_time or duration != duration:  # NaN
        return None
    percent = round(current_time / duration * 100)
    return max(0, min(percent, 100))


class ProgressTracker:
    """
    Track per-video progress keyed by "<courseId>-<videoId>".

    Records live in a store without expiry and are only removed by
    reset_all_progress().
    """

    def __init__(
        self,
        store: KeyValueStore,
        reporter: Optional[ProgressReporter] = None,
        report_interval: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
        executor: Optional[Executor] = None,
    ):
        """
        Initialize progress tracker.

        Args:
            store: Store for progress records (no TTL)
            reporter: Optional callable sending updates to the server
            report_interval: Minimum seconds between position reports per video
            clock: Monotonic clock used to throttle reports
            executor: Runs reporter calls (default: a single background thread)
        """
        self.store = store
        self.reporter = reporter
        self.report_interval = report_interval
        self._clock = clock
        self._last_reported: dict[str, float] = {}
        self._owns_executor = executor is None and reporter is not None
        if self._owns_executor:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="progress-report")
        self._executor = executor

    # -------------------------------------------------------------------------
    # Video Progress
    # -------------------------------------------------------------------------

    def get_video_progress(self, course_id: int, video_id: int) -> ProgressRecord:
        """Get progress for one video (an empty record if none stored)."""
        data = self.store.get(progress_key(course_id, video_id))
        if data is None:
            return ProgressRecord()
        try:
            return ProgressRecord.model_validate(data)
        except ValidationError:
            logger.debug(f"Ignoring malformed progress for {course_id}-{video_id}")
            return ProgressRecord()

    def _save(self, course_id: int, video_id: int, record: ProgressRecord):
        self.store.set(
            progress_key(course_id, video_id),
            record.model_dump(mode="json", by_alias=True),
        )

    def set_video_progress(self, course_id: int, video_id: int, current_time: float):
        """Record the playback position and mark the video as watched."""
        record = self.get_video_progress(course_id, video_id)
        record.last_position_seconds = max(0.0, float(current_time))
        record.watched = True
        self._save(course_id, video_id, record)
        self._report(course_id, video_id, record)

    def mark_video_watched(self, course_id: int, video_id: int):
        """Mark a video as started without moving its position."""
        record = self.get_video_progress(course_id, video_id)
        if record.watched:
            return
        record.watched = True
        self._save(course_id, video_id, record)

    def mark_video_complete(self, course_id: int, video_id: int):
        """Mark a video as completed."""
        record = self.get_video_progress(course_id, video_id)
        record.completed = True
        record.watched = True
        self._save(course_id, video_id, record)
        self._report(course_id, video_id, record, force=True)

    def is_video_complete(self, course_id: int, video_id: int) -> bool:
        return self.get_video_progress(course_id, video_id).completed

    def get_initial_position(self, course_id: int, video_id: int) -> float:
        """Where playback should resume for this video."""
        return self.get_video_progress(course_id, video_id).last_position_seconds

    def get_video_percent(self, course_id: int, video_id: int, duration: float) -> int:
        """Percent watched for display; completed videos always count as 100."""
        record = self.get_video_progress(course_id, video_id)
        if record.completed:
            return 100
        return clamp_percent(record.last_position_seconds, duration) or 0

    def _course_records(self, course_id: int) -> dict[int, ProgressRecord]:
        prefix = f"{course_id}-"
        records = {}
        for key in self.store.keys(prefix):
            try:
                video_id = int(key[len(prefix):])
            except ValueError:
                continue
            records[video_id] = self.get_video_progress(course_id, video_id)
        return records

    # -------------------------------------------------------------------------
    # Remote reporting
    # -------------------------------------------------------------------------

    def _report(
        self, course_id: int, video_id: int, record: ProgressRecord, force: bool = False
    ) -> Optional[Future]:
        if self.reporter is None or self._executor is None:
            return None
        key = progress_key(course_id, video_id)
        now = self._clock()
        last = self._last_reported.get(key)
        if not force and last is not None and now - last < self.report_interval:
            return None
        self._last_reported[key] = now
        update = ProgressUpdate(
            course_id=course_id,
            video_id=video_id,
            last_position=int(record.last_position_seconds),
            is_completed=record.completed,
        )
        try:
            return self._executor.submit(self._send, key, update)
        except RuntimeError:
            # executor shut down
            return None

    def _send(self, key: str, update: ProgressUpdate):
        try:
            self.reporter(update)
        except Exception as e:
            logger.warning(f"Progress report for {key} failed: {e}")

    def close(self):
        """Wait for queued reports and stop the report worker."""
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    # -------------------------------------------------------------------------
    # Course Progress
    # -------------------------------------------------------------------------

    def get_course_progress(
        self,
        course_id: int,
        total_videos: int,
        videos: Optional[list[Video]] = None,
    ) -> CourseProgress:
        """
        Aggregate progress for a course.

        Args:
            course_id: Course identifier
            total_videos: Number of videos in the course (from the catalog)
            videos: Optional video list; enables duration totals

        Returns:
            CourseProgress with counts, percent, and stored positions
        """
        records = self._course_records(course_id)
        completed = sum(1 for r in records.values() if r.completed)
        watched = sum(1 for r in records.values() if r.watched)
        percent = min(round(completed / max(total_videos, 1) * 100), 100)

        progress = CourseProgress(
            course_id=course_id,
            total_videos=total_videos,
            completed_count=completed,
            watched_count=watched,
            progress_percent=percent,
            positions={vid: r.last_position_seconds for vid, r in records.items()},
        )

        if videos is not None:
            total_seconds = sum(v.duration for v in videos)
            watched_seconds = 0.0
            for v in videos:
                record = records.get(v.id)
                if record is None:
                    continue
                if record.completed:
                    watched_seconds += v.duration
                else:
                    watched_seconds += min(record.last_position_seconds, v.duration)
            progress.total_seconds = total_seconds
            progress.watched_seconds = watched_seconds
            progress.remaining_seconds = max(0.0, total_seconds - watched_seconds)

        return progress

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_completion_stats(self, courses: Iterable[Course]) -> dict:
        """
        Get dashboard statistics.

        Args:
            courses: Courses in the catalog

        Returns:
            Dictionary with completion stats
        """
        per_course = [
            self.get_course_progress(c.id, c.total_videos or 1) for c in courses
        ]
        total_courses = len(per_course)
        overall = sum(p.progress_percent for p in per_course)

        completed_videos = 0
        watched_videos = 0
        for key in self.store.keys():
            record = self.store.get(key)
            if not isinstance(record, dict):
                continue
            if record.get("completed"):
                completed_videos += 1
            if record.get("watched"):
                watched_videos += 1

        return {
            "total_courses": total_courses,
            "average_progress": round(overall / total_courses) if total_courses else 0,
            "completed_videos": completed_videos,
            "watched_videos": watched_videos,
            "courses": {p.course_id: p for p in per_course},
        }

    def reset_all_progress(self) -> int:
        """Delete every progress record."""
        self._last_reported.clear()
        return self.store.clear_namespace("")
