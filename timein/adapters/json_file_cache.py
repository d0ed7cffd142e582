"""
JSON-file adapter for TimezoneCache.

The whole cache is one snapshot file:

    {
      "version": 2,
      "capacity": 100,
      "entries": [
        ["tokyo", "Asia/Tokyo", "2025-05-02T02:30:00+00:00", 7776000],
        ["bangkok", "Asia/Bangkok", "2025-05-02T02:31:12+00:00", null]
      ]
    }

Each entry is [key, timezone, created_at, ttl seconds or null for the cache
default]. Entries are listed least recently used first. The file is
rewritten after every mutation (temp file + os.replace) before the call
returns, so a crash right after a successful set() never loses that entry.

Version 1 snapshots ([key, timezone] pairs) are still read; their entries
count as created at load time.

A missing or malformed snapshot is not an error: the cache starts empty.
Expired entries are skipped on load.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from timein.adapters.memory_lru_cache import (
    DEFAULT_CAPACITY,
    DEFAULT_TTL,
    CacheEntry,
    InMemoryTimezoneCache,
)
from timein.domain.timezone_cache import CacheWriteError

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 2
READABLE_VERSIONS = (1, 2)


class CorruptSnapshotError(ValueError):
    """The snapshot file exists but is not a valid cache snapshot."""


def parse_snapshot(raw: str, now: datetime | None = None) -> list[tuple[str, CacheEntry]]:
    """
    Validate a snapshot document and return its entries, oldest first.

    `now` stamps entries of a version 1 snapshot, which carry no creation time.
    """
    try:
        data = json.loads(raw)
    except ValueError as exc:
        raise CorruptSnapshotError(f"not JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise CorruptSnapshotError("top level is not an object")
    version = data.get("version")
    if version not in READABLE_VERSIONS or isinstance(version, bool):
        raise CorruptSnapshotError(f"unsupported version {version!r}")
    capacity = data.get("capacity")
    if not isinstance(capacity, int) or isinstance(capacity, bool) or capacity <= 0:
        raise CorruptSnapshotError(f"invalid capacity {capacity!r}")
    entries = data.get("entries")
    if not isinstance(entries, list):
        raise CorruptSnapshotError("entries is not a list")

    if version == 1:
        loaded_at = now or datetime.now(timezone.utc)
        return [_parse_v1_entry(item, loaded_at) for item in entries]
    return [_parse_entry(item) for item in entries]


def _parse_v1_entry(item, loaded_at: datetime) -> tuple[str, CacheEntry]:
    if (
        not isinstance(item, list)
        or len(item) != 2
        or not all(isinstance(part, str) for part in item)
    ):
        raise CorruptSnapshotError(f"malformed entry {item!r}")
    return item[0], CacheEntry(item[1], loaded_at)


def _parse_entry(item) -> tuple[str, CacheEntry]:
    if not isinstance(item, list) or len(item) != 4:
        raise CorruptSnapshotError(f"malformed entry {item!r}")
    key, value, created_at, ttl = item
    if not isinstance(key, str) or not isinstance(value, str):
        raise CorruptSnapshotError(f"malformed entry {item!r}")
    try:
        created = datetime.fromisoformat(created_at)
    except (TypeError, ValueError):
        raise CorruptSnapshotError(f"bad created_at in {item!r}") from None
    if created.tzinfo is None:
        raise CorruptSnapshotError(f"created_at without UTC offset in {item!r}")
    if ttl is not None and (not isinstance(ttl, int) or isinstance(ttl, bool) or ttl <= 0):
        raise CorruptSnapshotError(f"bad ttl in {item!r}")
    return key, CacheEntry(value, created, timedelta(seconds=ttl) if ttl else None)


def _dump_entry(key: str, entry: CacheEntry) -> list:
    ttl = int(entry.ttl.total_seconds()) if entry.ttl is not None else None
    return [key, entry.value, entry.created_at.isoformat(), ttl]


def read_snapshot(path: Path, now: datetime | None = None) -> list[tuple[str, CacheEntry]]:
    """
    Degraded-start branch: entries from `path`, or [] if it is absent or corrupt.

    Never raises for a bad file; a corrupt cache must not stop timezone
    resolution.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        log.warning("cache snapshot %s unreadable (%s), starting empty", path, exc)
        return []

    try:
        return parse_snapshot(raw, now)
    except CorruptSnapshotError as exc:
        log.warning("cache snapshot %s is corrupt (%s), starting empty", path, exc)
        return []


def _fsync_directory(directory: Path) -> None:
    """Flush a rename inside `directory` to disk."""
    if os.name == "nt":
        return  # directories cannot be opened for fsync on Windows
    fd = os.open(directory, os.O_RDONLY | getattr(os, "O_DIRECTORY", 0))
    try:
        os.fsync(fd)
    finally:
        os.close(fd)


class JsonFileTimezoneCache(InMemoryTimezoneCache):

    def __init__(
        self,
        path: str | os.PathLike,
        capacity: int = DEFAULT_CAPACITY,
        ttl: timedelta | None = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ):
        super().__init__(capacity, ttl, clock)
        self._path = Path(path)
        now = self._clock()
        expired = 0
        for key, entry in read_snapshot(self._path, now):
            if entry.expired(now, self._ttl):
                expired += 1
                continue
            self._entries[key] = entry
            self._entries.move_to_end(key)
        while len(self._entries) > capacity:
            self._entries.popitem(last=False)
        log.debug(
            "cache loaded from %s: %d entries (%d expired skipped)",
            self._path, len(self._entries), expired,
        )

    @property
    def path(self) -> Path:
        return self._path

    def _persist(self) -> None:
        snapshot = {
            "version": SNAPSHOT_VERSION,
            "capacity": self._capacity,
            "entries": [_dump_entry(key, entry) for key, entry in self._entries.items()],
        }
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            _fsync_directory(self._path.parent)
        except OSError as exc:
            raise CacheWriteError(f"could not write cache snapshot {self._path}: {exc}") from exc

    def _discard_snapshot(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise CacheWriteError(f"could not remove cache snapshot {self._path}: {exc}") from exc
