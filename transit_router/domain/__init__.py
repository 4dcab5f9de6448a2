"""Domain layer - Core models and errors.

This module contains immutable domain models and typed errors
used throughout the application. No external dependencies.
"""

from .errors import (
    ConfigurationError,
    GraphError,
    InvalidNodesError,
    InvalidTimeError,
    NetworkError,
    NotConfiguredError,
    QuotaExceededError,
    SegmentError,
    TransitRouterError,
    UpstreamError,
)
from .models import (
    LOCAL_MODES,
    CacheEntry,
    Edge,
    EdgeInfo,
    GeoLocation,
    LegSource,
    Mode,
    Node,
    NodeCategory,
    OptionCategory,
    OptionType,
    PathResult,
    Route,
    RouteLeg,
    RouteOption,
    RouteResponse,
    SegmentEstimate,
    Trip,
    UsageStats,
)

__all__ = [
    # Models
    "LOCAL_MODES",
    "Mode",
    "NodeCategory",
    "OptionCategory",
    "OptionType",
    "LegSource",
    "GeoLocation",
    "Node",
    "Edge",
    "EdgeInfo",
    "Trip",
    "Route",
    "PathResult",
    "CacheEntry",
    "UsageStats",
    "SegmentEstimate",
    "RouteLeg",
    "RouteOption",
    "RouteResponse",
    # Errors
    "TransitRouterError",
    "GraphError",
    "InvalidTimeError",
    "ConfigurationError",
    "SegmentError",
    "NotConfiguredError",
    "QuotaExceededError",
    "InvalidNodesError",
    "UpstreamError",
    "NetworkError",
]
