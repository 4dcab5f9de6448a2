"""Typed domain errors for the transit router.

All errors inherit from TransitRouterError and can optionally wrap a
root cause exception for debugging.

Segment lookups fail with a SegmentError subclass. The route planner
treats every SegmentError as a dropped candidate, never as a failed
request; an empty option list is how "no itinerary" is reported.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class TransitRouterError(Exception):
    """Base error for the transit router domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class GraphError(TransitRouterError):
    """Dataset loading or integrity error.

    Attributes:
        file_path: Path to the dataset file if relevant
    """

    file_path: Optional[str] = None


@dataclass
class InvalidTimeError(TransitRouterError):
    """A time of day is not in HH:MM form.

    Attributes:
        value: The rejected input
    """

    value: str = ""


@dataclass
class ConfigurationError(TransitRouterError):
    """Invalid or missing configuration.

    Attributes:
        setting_name: Name of the problematic setting
    """

    setting_name: str = ""


@dataclass
class SegmentError(TransitRouterError):
    """Base for failures of the external segment estimator."""


@dataclass
class NotConfiguredError(SegmentError):
    """No API key is configured for the external estimator."""


@dataclass
class QuotaExceededError(SegmentError):
    """The daily or monthly call quota is exhausted.

    Attributes:
        period: 'daily' or 'monthly'
        limit: The configured limit that was reached
    """

    period: str = ""
    limit: int = 0


@dataclass
class InvalidNodesError(SegmentError):
    """An endpoint of the requested segment is not in the graph."""

    origin: str = ""
    destination: str = ""


@dataclass
class UpstreamError(SegmentError):
    """The estimator answered with a non-OK status.

    Attributes:
        code: Status code reported by the provider (e.g., 'ZERO_RESULTS')
    """

    code: str = ""


@dataclass
class NetworkError(SegmentError):
    """The estimator could not be reached (timeout, connection error)."""
