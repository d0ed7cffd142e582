"""
TimezoneCache port: remembers which IANA timezone a place name resolved to.

Keys are normalized place names ("bangkok"), values are timezone ids
("Asia/Bangkok"). Implementations are bounded and evict the least recently
used entry when full. Entries also age out: an entry older than its
lifetime reads as a miss.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Mapping


class CacheWriteError(Exception):
    """The cache could not make a mutation durable (disk full, permissions, ...)."""


class TimezoneCache(ABC):
    """
    Port: bounded key -> timezone store with least-recently-used eviction.

    The resolver depends ONLY on this interface. Whether entries survive a
    restart (JsonFileTimezoneCache) or not (InMemoryTimezoneCache) is an
    adapter concern.
    """

    @property
    @abstractmethod
    def capacity(self) -> int:
        """Maximum number of entries held at any time."""
        ...

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Return the cached timezone and mark the key most recently used.

        Returns None when the key is absent or its entry has expired; an
        expired entry is dropped.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        """
        Insert or overwrite an entry and mark it most recently used.

        `ttl` overrides the cache's default lifetime for this entry.
        Evicts the least recently used entry if the cache grows past capacity.
        Raises CacheWriteError if the change cannot be made durable.
        """
        ...

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry (and any durable copy). Raises CacheWriteError on failure."""
        ...

    @abstractmethod
    def preseed(self, entries: Mapping[str, str], ttl: timedelta | None = None) -> int:
        """
        Add entries whose keys are not cached yet, as least recently used.

        Existing entries are left untouched and capacity is respected.
        Pre-seeded entries get a long lifetime unless `ttl` says otherwise.
        Returns the number of entries added.
        """
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """Live (unexpired) keys, least recently used first. Does not change recency."""
        ...

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        return key in self.keys()
