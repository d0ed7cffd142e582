"""
Pre-seed a timezone cache from a list of well-known places.

Capitals file format:
    [{"name": "Bangkok", "country": "Thailand", "lat": 13.7563, "lng": 100.5018}, ...]

Seeded entries are added as least recently used, so they never push out
places the user actually looked up.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from timein.domain.lookup import NotFoundError, TimezoneProvider
from timein.domain.timezone_cache import TimezoneCache
from timein.resolver import normalize_key

log = logging.getLogger(__name__)


@dataclass
class Capital:
    name: str
    country: str
    lat: float
    lng: float


@dataclass
class PreseedReport:
    resolved: dict[str, str] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)
    added: int = 0


def load_capitals(path: str | Path) -> list[Capital]:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return [
        Capital(
            name=item["name"],
            country=item.get("country", ""),
            lat=float(item["lat"]),
            lng=float(item["lng"]),
        )
        for item in data
    ]


def preseed_cache(
    capitals: list[Capital],
    timezones: TimezoneProvider,
    cache: TimezoneCache,
) -> PreseedReport:
    """Resolve every capital's timezone and add the new ones to `cache`."""
    report = PreseedReport()
    for capital in capitals:
        try:
            tz = timezones.lookup(capital.lat, capital.lng)
        except NotFoundError as exc:
            log.warning("skipping %s, %s: %s", capital.name, capital.country, exc)
            report.failed.append(capital.name)
            continue
        report.resolved[normalize_key(capital.name)] = tz

    report.added = cache.preseed(report.resolved)
    log.info(
        "pre-seeded %d of %d place(s) (%d failed)",
        report.added, len(capitals), len(report.failed),
    )
    return report
