"""Thread-safe in-memory cache of external segment estimates.

Entries carry their own creation timestamp, so freshness is decided at
read time against the TTL. Entries seeded from a persisted file keep
their original timestamp and go cold once older than the TTL.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from ...domain.models import CacheEntry

KEY_SEPARATOR = "|"


def make_key(origin: str, destination: str, mode: str) -> str:
    """Build the string key ``"<origin>|<destination>|<mode>"``."""
    return KEY_SEPARATOR.join((origin, destination, mode))


@dataclass
class SegmentCache:
    """In-memory segment cache with a TTL measured from entry creation.

    Attributes:
        ttl_seconds: Maximum age of a servable entry (None = no expiry)
        clock: Returns the current time in epoch seconds
        name: Cache name for logging

    Example:
        cache = SegmentCache(ttl_seconds=7 * 86400)
        cache.put(make_key("A", "B", "driving"), 1200, 300)
        entry = cache.get(make_key("A", "B", "driving"))
    """

    ttl_seconds: Optional[float] = None
    clock: Callable[[], float] = field(default=time.time, repr=False)
    name: str = "segments"

    _store: Dict[str, CacheEntry] = field(default_factory=dict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(f"cache.{self.name}")

    def is_fresh(self, entry: CacheEntry) -> bool:
        if self.ttl_seconds is None:
            return True
        return self.clock() - entry.timestamp < self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return a fresh entry, or None if missing or expired.

        Expired entries stay in the store until overwritten so that an
        export still reflects what was loaded.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not self.is_fresh(entry):
                self._logger.debug("Cache entry expired", extra={"key": key})
                return None
            return entry

    def put(self, key: str, distance_meters: float, duration_seconds: float) -> CacheEntry:
        """Store a new estimate stamped with the current time."""
        entry = CacheEntry(
            distance_meters=distance_meters,
            duration_seconds=duration_seconds,
            timestamp=self.clock(),
        )
        with self._lock:
            self._store[key] = entry
        self._logger.debug("Cache entry set", extra={"key": key})
        return entry

    def update(self, entries: Mapping[str, CacheEntry]) -> int:
        """Merge pre-existing entries, keeping their timestamps."""
        with self._lock:
            self._store.update(entries)
            return len(entries)

    def snapshot(self) -> Dict[str, CacheEntry]:
        """Return a copy of every stored entry, fresh or not."""
        with self._lock:
            return dict(self._store)

    def clear(self) -> int:
        """Clear all entries from the cache.

        Returns:
            Number of entries that were cleared.
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
        self._logger.info("Cache cleared", extra={"entries_cleared": count})
        return count

    def size(self) -> int:
        with self._lock:
            return len(self._store)
