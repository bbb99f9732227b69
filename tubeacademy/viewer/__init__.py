"""
TubeAcademy Viewer - Formatting and export helpers for course display.

This module provides:
- Duration formatting (totals and video lengths)
- Watch status markers for video lists
- Per-course progress tables and CSV export
"""

from .report import (
    format_time,
    format_duration,
    status_marker,
    build_course_report,
    export_course_csv,
    default_export_filename,
)

__all__ = [
    "format_time",
    "format_duration",
    "status_marker",
    "build_course_report",
    "export_course_csv",
    "default_export_filename",
]
