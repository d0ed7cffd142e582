"""
In-memory TimezoneCache: bounded LRU, nothing written to disk.

Used directly in tests and as the base of JsonFileTimezoneCache, which only
adds loading and persisting the snapshot.

Every entry remembers when it was stored. An entry older than its lifetime
(its own ttl, or the cache default) reads as a miss and is dropped.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping

from timein.domain.timezone_cache import CacheWriteError, TimezoneCache

log = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_TTL = timedelta(days=7)
PRESEED_TTL = timedelta(days=90)


@dataclass(frozen=True)
class CacheEntry:
    value: str
    created_at: datetime
    ttl: timedelta | None = None  # None: the cache's default lifetime

    def expired(self, now: datetime, default_ttl: timedelta | None) -> bool:
        ttl = self.ttl or default_ttl
        return ttl is not None and now - self.created_at > ttl


def _check_ttl(ttl: timedelta | None) -> None:
    if ttl is not None and ttl <= timedelta(0):
        raise ValueError(f"cache ttl must be positive, got {ttl}")


class InMemoryTimezoneCache(TimezoneCache):

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl: timedelta | None = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ):
        if capacity <= 0:
            raise ValueError(f"cache capacity must be positive, got {capacity}")
        _check_ttl(ttl)
        self._capacity = capacity
        self._ttl = ttl
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        # Least recently used first, most recently used last.
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def ttl(self) -> timedelta | None:
        """Default lifetime of an entry; None means entries never expire."""
        return self._ttl

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock(), self._ttl):
                del self._entries[key]
                log.debug("cache entry %r expired", key)
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        _check_ttl(ttl)
        with self._lock:
            previous = self._entries.copy()
            now = self._clock()
            self._drop_expired(now)
            self._entries[key] = CacheEntry(value, now, ttl)
            self._entries.move_to_end(key)
            evicted = None
            if len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
            self._commit(previous)
        if evicted is not None:
            log.debug("cache full (%d), evicted %r", self._capacity, evicted)

    def clear(self) -> None:
        with self._lock:
            self._discard_snapshot()
            self._entries.clear()

    def preseed(self, entries: Mapping[str, str], ttl: timedelta | None = PRESEED_TTL) -> int:
        _check_ttl(ttl)
        with self._lock:
            previous = self._entries.copy()
            now = self._clock()
            self._drop_expired(now)
            added = 0
            for key, value in entries.items():
                if key in self._entries:
                    continue
                if len(self._entries) >= self._capacity:
                    break
                self._entries[key] = CacheEntry(value, now, ttl)
                self._entries.move_to_end(key, last=False)
                added += 1
            if added:
                self._commit(previous)
        return added

    def keys(self) -> list[str]:
        with self._lock:
            now = self._clock()
            return [
                key for key, entry in self._entries.items()
                if not entry.expired(now, self._ttl)
            ]

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.expired(self._clock(), self._ttl)

    # -- internals (caller holds the lock) -------------------------------------

    def _drop_expired(self, now: datetime) -> None:
        stale = [k for k, e in self._entries.items() if e.expired(now, self._ttl)]
        for key in stale:
            del self._entries[key]
        if stale:
            log.debug("dropped %d expired cache entries", len(stale))

    def _commit(self, previous: "OrderedDict[str, CacheEntry]") -> None:
        """Persist the current state, or roll back to `previous` and re-raise."""
        try:
            self._persist()
        except CacheWriteError:
            self._entries = previous
            raise

    def _persist(self) -> None:
        pass

    def _discard_snapshot(self) -> None:
        pass
