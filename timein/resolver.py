"""
Cache-aside resolver: place name -> current local time.

Flow:
  1. Code: reject empty queries, normalize the cache key
  2. Cache: timezone already known? → skip to 4
  3. Lookups: geocode the place, then find its timezone → store in cache
  4. Formatter: render "now" in that timezone, plus its abbreviation

time_in_zone() starts at step 4 for a caller that already knows the zone.

Only the timezone is cached, never the time itself. The cache is locked
only for its own get/set; no lock is held while a lookup runs.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field

from timein.domain.lookup import (
    GeocodeProvider,
    InvalidTimezoneError,
    NotFoundError,
    TimeFormatter,
    TimezoneProvider,
    city_from_timezone,
)
from timein.domain.timezone_cache import CacheWriteError, TimezoneCache
from timein.errors import (
    CacheWriteFailedError,
    EmptyQueryError,
    FormatFailedError,
    PlaceNotFoundError,
    TimezoneNotFoundError,
)

log = logging.getLogger(__name__)


def normalize_key(query: str) -> str:
    """Cache key for a place name: trimmed and case-folded."""
    return query.strip().casefold()


@dataclass
class ResolverConfig:
    cache: TimezoneCache
    geocoder: GeocodeProvider
    timezones: TimezoneProvider
    formatter: TimeFormatter


@dataclass
class ResolveResult:
    query: str       # the place as the user typed it, trimmed
    timezone: str    # IANA id, e.g. "Asia/Bangkok"
    display: str     # formatted current time, or the timezone id for resolve_timezone()
    cached: bool     # True when no lookup was needed
    abbreviation: str = ""  # zone abbreviation now, e.g. "EDT"; set once formatted


class Resolver:
    """
    Stateless across calls: all remembered state lives in the injected cache.

    Concurrent misses for the same key are collapsed: the first caller does
    the lookups, later callers wait and then read its answer from the cache.
    """

    def __init__(self, config: ResolverConfig):
        self._cfg = config
        self._inflight: dict[str, _Inflight] = {}
        self._inflight_guard = threading.Lock()

    def resolve(self, query: str) -> ResolveResult:
        """Return the current time at `query`. Raises a ResolveError subclass."""
        result = self.resolve_timezone(query)
        try:
            self._render(result)
        except InvalidTimezoneError as exc:
            raise FormatFailedError(str(exc)) from exc
        return result

    def time_in_zone(self, timezone_id: str) -> ResolveResult:
        """
        Return the current time in an IANA zone given directly, e.g. piped
        from `timein --timezone-only`. Touches neither the cache nor the lookups.
        """
        tz = (timezone_id or "").strip()
        if not tz:
            raise EmptyQueryError("IANA timezone argument required.")
        result = ResolveResult(query=city_from_timezone(tz), timezone=tz, display=tz, cached=False)
        try:
            self._render(result)
        except InvalidTimezoneError as exc:
            raise TimezoneNotFoundError(str(exc)) from exc
        return result

    def resolve_timezone(self, query: str) -> ResolveResult:
        """Like resolve(), but stop at the timezone id (display == timezone)."""
        if not query or not query.strip():
            raise EmptyQueryError()

        place = query.strip()
        key = normalize_key(place)

        tz = self._cfg.cache.get(key)
        if tz is not None:
            log.info("cache hit %r → %s", key, tz)
            return ResolveResult(query=place, timezone=tz, display=tz, cached=True)

        with self._single_flight(key):
            # Another thread may have resolved this key while we waited.
            tz = self._cfg.cache.get(key)
            if tz is not None:
                log.info("cache hit %r → %s (after in-flight lookup)", key, tz)
                return ResolveResult(query=place, timezone=tz, display=tz, cached=True)

            log.info("cache miss %r, looking up", key)
            tz = self._lookup(place)

            try:
                self._cfg.cache.set(key, tz)
            except CacheWriteError as exc:
                log.error("could not cache %r → %s: %s", key, tz, exc)
                raise CacheWriteFailedError(str(exc)) from exc

        return ResolveResult(query=place, timezone=tz, display=tz, cached=False)

    def _lookup(self, place: str) -> str:
        try:
            coords = self._cfg.geocoder.geocode(place)
        except NotFoundError as exc:
            raise PlaceNotFoundError(str(exc) or f"Could not geocode: {place}") from exc

        try:
            tz = self._cfg.timezones.lookup(coords.latitude, coords.longitude)
        except NotFoundError as exc:
            raise TimezoneNotFoundError(
                str(exc) or f"Could not resolve timezone for: {place}"
            ) from exc

        if not tz:
            raise TimezoneNotFoundError(f"Could not resolve timezone for: {place}")

        log.info(
            "resolved %r → (%.4f, %.4f) → %s",
            place, coords.latitude, coords.longitude, tz,
        )
        return tz

    def _render(self, result: ResolveResult) -> None:
        formatter = self._cfg.formatter
        result.display = formatter.format(result.timezone)
        result.abbreviation = formatter.abbreviation(result.timezone)

    @contextmanager
    def _single_flight(self, key: str):
        with self._inflight_guard:
            entry = self._inflight.get(key)
            if entry is None:
                entry = self._inflight[key] = _Inflight()
            entry.waiters += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._inflight_guard:
                entry.waiters -= 1
                if entry.waiters == 0:
                    del self._inflight[key]


@dataclass
class _Inflight:
    lock: threading.Lock = field(default_factory=threading.Lock)
    waiters: int = 0
