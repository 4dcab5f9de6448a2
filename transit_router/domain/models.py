"""Immutable domain models for the transit router.

All network records are frozen dataclasses with slots. They carry no
behaviour beyond small derived properties and ``to_dict`` helpers that
produce the JSON shape consumed by serving layers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Mode(str, Enum):
    """Transport mode of an edge or leg."""

    BUS = "bus"
    LOCAL = "local"
    WALK = "walk"


LOCAL_MODES: tuple[Mode, ...] = (Mode.LOCAL, Mode.WALK)


class NodeCategory(str, Enum):
    """Kind of place a node represents."""

    STOP = "stop"
    INTERSECTION = "intersection"
    DESTINATION = "destination"


class OptionCategory(str, Enum):
    """Ranking category assigned to a route option."""

    FASTEST = "fastest"
    LEAST_LOCAL = "least_local"
    BOTH = "both"


class OptionType(str, Enum):
    """Structural type of a route option."""

    DIRECT = "direct"
    TRANSFER = "transfer"
    LOCAL_ONLY = "local_only"


class LegSource(str, Enum):
    """Where the figures of a leg come from."""

    GRAPH = "graph"
    EXTERNAL = "distance_matrix"


@dataclass(frozen=True, slots=True)
class GeoLocation:
    """GPS coordinates representing a geographic location."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Latitude must be between -90 and 90, got {self.latitude}"
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Longitude must be between -180 and 180, got {self.longitude}"
            )


@dataclass(frozen=True, slots=True)
class Node:
    """A place in the network: bus stop, intersection or destination.

    Attributes:
        id: Unique node identifier (e.g., 'CAMPUS')
        name: Human-readable name
        category: Kind of place
        address: Geocodable address handed to the external estimator
        location: Optional GPS coordinates
    """

    id: str
    name: str
    category: NodeCategory = NodeCategory.STOP
    address: str = ""
    location: Optional[GeoLocation] = None


@dataclass(frozen=True, slots=True)
class Edge:
    """A traversable connection between two nodes as stored in the dataset.

    When ``one_way`` is False the adjacency index materializes both
    directions from this single record.
    """

    source: str
    target: str
    mode: Mode
    time_min: int
    cost: float = 0.0
    one_way: bool = False
    route_ids: tuple[str, ...] = ()
    distance_meters: Optional[float] = None


@dataclass(frozen=True, slots=True)
class EdgeInfo:
    """Outgoing edge descriptor stored in the adjacency index."""

    to: str
    mode: Mode
    time_min: int
    cost: float = 0.0
    route_ids: tuple[str, ...] = ()
    distance_meters: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Trip:
    """One scheduled run of a route.

    Attributes:
        trip_id: Unique trip identifier
        direction: Direction label (e.g., 'to_campus')
        stops: Node ids in calling order
        departure_time: Departure from the first stop, "HH:MM"
    """

    trip_id: str
    direction: str
    stops: tuple[str, ...]
    departure_time: str

    def index_of(self, node_id: str) -> int:
        """Return the calling index of a stop, or -1 if the trip skips it."""
        try:
            return self.stops.index(node_id)
        except ValueError:
            return -1


@dataclass(frozen=True, slots=True)
class Route:
    """A bus route and its scheduled trips."""

    route_id: str
    name: str
    trips: tuple[Trip, ...] = ()

    @property
    def served_stops(self) -> frozenset[str]:
        """All stops called at by any trip of the route."""
        return frozenset(stop for trip in self.trips for stop in trip.stops)


@dataclass(frozen=True, slots=True)
class PathResult:
    """Result of a mode-restricted shortest-path query.

    Attributes:
        found: Whether the target is reachable
        path: Node ids from source to target (inclusive)
        total_time: Sum of edge times, ``inf`` when unreachable
        total_cost: Cost accumulated along the chosen path
        edges: Traversed edge descriptors, one per hop
    """

    found: bool
    path: tuple[str, ...] = ()
    total_time: float = float("inf")
    total_cost: float = 0.0
    edges: tuple[EdgeInfo, ...] = ()

    @property
    def total_distance_meters(self) -> float:
        """Sum of known edge distances along the path."""
        return float(sum(edge.distance_meters or 0 for edge in self.edges))


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached external estimate.

    Attributes:
        distance_meters: Distance reported by the estimator
        duration_seconds: Travel duration reported by the estimator
        timestamp: Creation time in epoch seconds
    """

    distance_meters: float
    duration_seconds: float
    timestamp: float


@dataclass
class UsageStats:
    """Usage counters of the external estimator."""

    monthly_count: int = 0
    daily_count: int = 0
    last_reset: str = ""
    cache_hits: int = 0
    cache_misses: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyCount": self.monthly_count,
            "dailyCount": self.daily_count,
            "lastReset": self.last_reset,
            "cacheHits": self.cache_hits,
            "cacheMisses": self.cache_misses,
        }


@dataclass(frozen=True, slots=True)
class SegmentEstimate:
    """Successful external estimate for an origin-destination pair."""

    distance_meters: float
    duration_seconds: float
    from_cache: bool = False

    @property
    def duration_min(self) -> int:
        """Duration rounded to whole minutes."""
        return int(round(self.duration_seconds / 60))


@dataclass(frozen=True, slots=True)
class RouteLeg:
    """One single-mode segment of an itinerary."""

    mode: Mode
    from_node: str
    to_node: str
    duration_min: int = 0
    distance_meters: float = 0.0
    cost: float = 0.0
    source: LegSource = LegSource.GRAPH
    submode: Optional[str] = None
    route_id: Optional[str] = None
    trip_id: Optional[str] = None
    departure: Optional[str] = None
    arrival: Optional[str] = None

    @property
    def identity(self) -> tuple[str, str, str]:
        return (self.from_node, self.to_node, self.mode.value)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "mode": self.mode.value,
            "from": self.from_node,
            "to": self.to_node,
            "durationMin": self.duration_min,
            "distanceMeters": self.distance_meters,
            "cost": self.cost,
            "source": self.source.value,
        }
        optional = {
            "submode": self.submode,
            "route_id": self.route_id,
            "trip_id": self.trip_id,
            "departure": self.departure,
            "arrival": self.arrival,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data


@dataclass(frozen=True, slots=True)
class RouteOption:
    """A complete itinerary from origin to destination."""

    label: str
    category: OptionCategory
    option_type: OptionType
    total_time_min: int
    legs: tuple[RouteLeg, ...]
    transfers: int = 0
    total_cost: float = 0.0
    local_time_min: int = 0
    local_distance_meters: float = 0.0
    uses_external: bool = False

    @property
    def identity(self) -> tuple[tuple[str, str, str], ...]:
        """Ordered (from, to, mode) of every leg; used for deduplication."""
        return tuple(leg.identity for leg in self.legs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "category": self.category.value,
            "type": self.option_type.value,
            "transfers": self.transfers,
            "totalTimeMin": self.total_time_min,
            "totalCost": self.total_cost,
            "localTimeMin": self.local_time_min,
            "localDistanceMeters": self.local_distance_meters,
            "usesDistanceMatrix": self.uses_external,
            "legs": [leg.to_dict() for leg in self.legs],
        }


@dataclass(frozen=True, slots=True)
class RouteResponse:
    """Answer to a planning request. Empty ``options`` means no itinerary."""

    from_node: str
    to_node: str
    request_time: str
    options: tuple[RouteOption, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return len(self.options) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_node,
            "to": self.to_node,
            "requestTime": self.request_time,
            "options": [option.to_dict() for option in self.options],
        }
