"""Cache adapters for external segment estimates.

Available implementations:
- SegmentCache: Thread-safe in-memory cache with TTL
- JsonSegmentStore: Persisted cache file reader/writer
"""

from .json_store import JsonSegmentStore
from .segment_cache import SegmentCache, make_key

__all__ = ["JsonSegmentStore", "SegmentCache", "make_key"]
