#!/usr/bin/env python3
"""
Pre-seed the timezone cache with world capitals.

Usage (from project root):
    python scripts/preseed.py                              # data/capitals.json → TIMEIN_CACHE_PATH
    python scripts/preseed.py data/capitals.json out.json  # explicit paths

Existing cache entries are kept; capitals already cached are skipped.
"""

import logging
import os
import sys

# Allow running as `python scripts/preseed.py` from project root.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from timein.adapters.json_file_cache import JsonFileTimezoneCache
from timein.adapters.timezonefinder_provider import TimezoneFinderProvider
from timein.config import Settings
from timein.preseed import load_capitals, preseed_cache

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
log = logging.getLogger(__name__)

CAPITALS_PATH = "data/capitals.json"


def main() -> int:
    settings = Settings.from_env()
    capitals_path = sys.argv[1] if len(sys.argv) >= 2 else CAPITALS_PATH
    cache_path = sys.argv[2] if len(sys.argv) >= 3 else settings.cache_path

    capitals = load_capitals(capitals_path)
    cache = JsonFileTimezoneCache(
        cache_path, max(settings.cache_size, len(capitals)), ttl=settings.cache_lifetime
    )

    print(f"Pre-seeding cache with {len(capitals)} capitals...")
    report = preseed_cache(capitals, TimezoneFinderProvider(), cache)

    for key, tz in report.resolved.items():
        print(f"  {key} -> {tz}")
    for name in report.failed:
        print(f"  Warning: no timezone for {name}")
    print(f"Added {report.added} new entries to {cache.path}")
    return 0 if not report.failed else 1


if __name__ == "__main__":
    sys.exit(main())
