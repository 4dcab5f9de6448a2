# times.py
from __future__ import annotations

import re

from .domain.errors import InvalidTimeError

MINUTES_PER_DAY = 1440

_TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def is_valid_time(value: str) -> bool:
    return bool(value) and _TIME_RE.match(value.strip()) is not None


def to_minutes(value: str) -> int:
    """Convert "HH:MM" into minutes since midnight."""
    match = _TIME_RE.match(value.strip()) if value else None
    if match is None:
        raise InvalidTimeError(
            f"Time '{value}' is not in HH:MM format", value=value or ""
        )
    return int(match.group(1)) * 60 + int(match.group(2))


def from_minutes(minutes: int) -> str:
    """Render minutes as "HH:MM", wrapping at 24 hours."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
