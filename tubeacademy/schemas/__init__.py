"""
TubeAcademy Schemas - Pydantic models for the e-learning catalog client.

This module exports all schema classes for:
- Catalog: categories, courses, videos, documents, bilingual text
- Progress: per-video records, course aggregates, remote updates
- Search: merged search results
"""

# Catalog schemas
from .catalog import (
    Language,
    SUPPORTED_LANGUAGES,
    CatalogModel,
    LocalizedText,
    Category,
    Course,
    Video,
    Document,
)

# Progress schemas
from .progress import (
    VideoStatus,
    ProgressRecord,
    CourseProgress,
    ProgressUpdate,
    progress_key,
)

# Search schemas
from .search import (
    ResultType,
    SearchResult,
)

__all__ = [
    # Catalog
    'Language',
    'SUPPORTED_LANGUAGES',
    'CatalogModel',
    'LocalizedText',
    'Category',
    'Course',
    'Video',
    'Document',
    # Progress
    'VideoStatus',
    'ProgressRecord',
    'CourseProgress',
    'ProgressUpdate',
    'progress_key',
    # Search
    'ResultType',
    'SearchResult',
]
