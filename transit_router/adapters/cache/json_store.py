"""JSON file store for the persisted segment cache.

File format, keyed by ``"<origin>|<destination>|<mode>"``::

    {
      "TILAGOR|CAMPUS|driving": {
        "distanceMeters": 5200,
        "durationSeconds": 840,
        "timestamp": "2024-05-01T08:00:00.000Z"
      }
    }

``timestamp`` may be epoch milliseconds or an ISO-8601 string. Entries
are written back with epoch milliseconds.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ...domain.errors import TransitRouterError
from ...domain.models import CacheEntry


def _parse_timestamp(value: Union[str, int, float]) -> float:
    """Return epoch seconds from epoch milliseconds or an ISO string.

    ISO strings without an offset are read as UTC.
    """
    if isinstance(value, (int, float)):
        return float(value) / 1000.0
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def entry_from_dict(data: Mapping[str, Any]) -> CacheEntry:
    return CacheEntry(
        distance_meters=float(data["distanceMeters"]),
        duration_seconds=float(data["durationSeconds"]),
        timestamp=_parse_timestamp(data["timestamp"]),
    )


def entry_to_dict(entry: CacheEntry) -> Dict[str, Any]:
    return {
        "distanceMeters": entry.distance_meters,
        "durationSeconds": entry.duration_seconds,
        "timestamp": int(entry.timestamp * 1000),
    }


@dataclass
class JsonSegmentStore:
    """Reads and writes the persisted segment cache file.

    Implements SegmentStorePort. Malformed entries are skipped with a
    warning; an unreadable file raises TransitRouterError.
    """

    path: Path
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self._logger = logging.getLogger(__name__)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Dict[str, CacheEntry]:
        if not self.exists():
            return {}

        try:
            with self.path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            raise TransitRouterError(
                f"Failed to read segment cache {self.path}", cause=e
            )

        if not isinstance(raw, dict):
            raise TransitRouterError(
                f"Segment cache {self.path} does not hold a JSON object"
            )

        entries: Dict[str, CacheEntry] = {}
        for key, data in raw.items():
            try:
                entries[key] = entry_from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                self._logger.warning(
                    "Skipping malformed cache entry",
                    extra={"key": key, "error": str(e)},
                )

        self._logger.info(
            "Segment cache loaded",
            extra={"path": str(self.path), "entries": len(entries)},
        )
        return entries

    def save(self, entries: Mapping[str, CacheEntry]) -> None:
        payload = {key: entry_to_dict(entry) for key, entry in sorted(entries.items())}
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        self._logger.info(
            "Segment cache saved",
            extra={"path": str(self.path), "entries": len(payload)},
        )
