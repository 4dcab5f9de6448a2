"""Shared fixtures: fabricated networks, fake estimators and a fixed clock."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from transit_router.config import PlannerConfig, SegmentConfig
from transit_router.domain.errors import NetworkError, NotConfiguredError, SegmentError
from transit_router.domain.models import (
    Edge,
    Mode,
    Node,
    Route,
    SegmentEstimate,
    Trip,
    UsageStats,
)
from transit_router.graph import TransitGraph


def make_nodes(*ids: str) -> List[Node]:
    return [Node(id=node_id, name=f"{node_id} stop", address=f"{node_id} street") for node_id in ids]


def make_graph(
    node_ids: Sequence[str],
    edges: Sequence[Edge] = (),
    routes: Sequence[Route] = (),
) -> TransitGraph:
    graph = TransitGraph()
    graph.load(make_nodes(*node_ids), edges, routes)
    return graph


def single_trip_route(
    route_id: str, stops: Sequence[str], departure: str, trip_id: Optional[str] = None
) -> Route:
    trip = Trip(
        trip_id=trip_id or f"{route_id}_T1",
        direction="to_campus",
        stops=tuple(stops),
        departure_time=departure,
    )
    return Route(route_id=route_id, name=f"{route_id} Line", trips=(trip,))


def ok_payload(distance: float, duration: float) -> Dict[str, Any]:
    return {
        "status": "OK",
        "rows": [
            {
                "elements": [
                    {
                        "status": "OK",
                        "distance": {"value": distance},
                        "duration": {"value": duration},
                    }
                ]
            }
        ],
    }


@dataclass
class FakeClock:
    """Controllable wall clock and calendar."""

    now: float = datetime(2024, 5, 15, 8, 0, tzinfo=timezone.utc).timestamp()
    day: date = date(2024, 5, 15)

    def time(self) -> float:
        return self.now

    def today(self) -> date:
        return self.day

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeTransport:
    """Distance Matrix stand-in returning canned payloads."""

    payload: Dict[str, Any] = field(default_factory=lambda: ok_payload(1200, 300))
    error: Optional[Exception] = None
    calls: List[Tuple[str, str, str]] = field(default_factory=list)

    def fetch(self, origin: str, destination: str, mode: str) -> Dict[str, Any]:
        self.calls.append((origin, destination, mode))
        if self.error is not None:
            raise self.error
        return self.payload


@dataclass
class FakeSegments:
    """Segment provider stand-in keyed by (origin, destination)."""

    estimates: Dict[Tuple[str, str], SegmentEstimate] = field(default_factory=dict)
    error: SegmentError = field(
        default_factory=lambda: NetworkError("no estimate for this pair")
    )
    calls: List[Tuple[str, str, str]] = field(default_factory=list)

    def get_segment(self, origin: str, destination: str, mode: str = "driving") -> SegmentEstimate:
        self.calls.append((origin, destination, mode))
        estimate = self.estimates.get((origin, destination))
        if estimate is None:
            raise self.error
        return estimate

    def get_stats(self) -> UsageStats:
        return UsageStats()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def segment_config() -> SegmentConfig:
    return SegmentConfig().model_copy(
        update={
            "api_key": "test-key",
            "daily_limit": 3,
            "monthly_limit": 10,
            "cache_ttl_days": 7.0,
            "prewarm_delay_seconds": 0.2,
        }
    )


@pytest.fixture
def planner_config() -> PlannerConfig:
    return PlannerConfig().model_copy(
        update={
            "dwell_minutes": 5,
            "max_transfer_wait_minutes": 15,
            "max_options": 3,
            "local_cost_per_100m": 2.0,
        }
    )


@pytest.fixture
def unconfigured_segments() -> FakeSegments:
    return FakeSegments(error=NotConfiguredError("Distance Matrix API key not configured"))


@pytest.fixture
def abc_graph() -> TransitGraph:
    """A -> B -> C served by one bus trip departing 08:00."""
    return make_graph(
        ["A", "B", "C"],
        edges=[
            Edge("A", "B", Mode.BUS, 5, route_ids=("R1",)),
            Edge("B", "C", Mode.BUS, 5, route_ids=("R1",)),
        ],
        routes=[single_trip_route("R1", ["A", "B", "C"], "08:00")],
    )
