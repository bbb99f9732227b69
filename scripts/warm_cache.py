#!/usr/bin/env python3
"""
warm_cache.py - Fill the local catalog cache ahead of offline use.

Fetches categories, courses, and every course's videos and documents
through the cache, so later sessions are served from disk.

Usage:
  python scripts/warm_cache.py
  python scripts/warm_cache.py --refresh                 # Clear cached entries first
  python scripts/warm_cache.py --api-url http://host/api
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv(PROJECT_ROOT / ".env")

from tubeacademy.client import CatalogAPIError
from tubeacademy.config import load_settings
from tubeacademy.context import AppContext

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def warm(context: AppContext) -> dict:
    """Fetch the whole catalog through the cache. Returns counts."""
    catalog = context.catalog
    categories = catalog.categories()
    logger.info(f"Categories: {len(categories)}")

    courses = catalog.courses()
    logger.info(f"Courses: {len(courses)}")

    counts = {"categories": len(categories), "courses": len(courses), "videos": 0, "documents": 0, "failed": 0}
    for course in courses:
        try:
            videos = catalog.videos(course.id)
            documents = catalog.documents(course.id)
        except CatalogAPIError as e:
            logger.warning(f"  {course.slug}: {e}")
            counts["failed"] += 1
            continue
        counts["videos"] += len(videos)
        counts["documents"] += len(documents)
        logger.info(f"  {course.slug}: {len(videos)} videos, {len(documents)} documents")
    return counts


def main():
    parser = argparse.ArgumentParser(description="Warm the local catalog cache")
    parser.add_argument("--api-url", help="Catalog API base URL (default: from settings)")
    parser.add_argument("--data-dir", type=Path, help="Local data directory (default: from settings)")
    parser.add_argument("--refresh", action="store_true", help="Clear cached catalog entries first")
    args = parser.parse_args()

    overrides = {}
    if args.api_url:
        overrides["api_base_url"] = args.api_url
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    settings = load_settings(**overrides)

    context = AppContext.from_settings(settings)
    try:
        if args.refresh:
            context.catalog.refresh()
        counts = warm(context)
    except CatalogAPIError as e:
        logger.error(f"Failed to reach catalog API at {settings.api_base_url}: {e}")
        sys.exit(1)
    finally:
        context.close()

    logger.info("")
    logger.info("=" * 50)
    logger.info("CACHE WARM COMPLETE")
    logger.info("=" * 50)
    logger.info(f"Store:      {settings.db_path}")
    logger.info(f"Categories: {counts['categories']}")
    logger.info(f"Courses:    {counts['courses']}")
    logger.info(f"Videos:     {counts['videos']}")
    logger.info(f"Documents:  {counts['documents']}")
    if counts["failed"]:
        logger.warning(f"Failed:     {counts['failed']} courses")


if __name__ == "__main__":
    main()
