"""Route planner service - Main orchestrator.

Enumerates candidate itineraries between two nodes at a given time of
day, then deduplicates and ranks them:

1. Direct: one bus trip boarding at the origin and alighting at the
   destination.
2. Hybrid: one bus trip to an intermediate stop, then local transport.
3. Transfer: two bus trips on different routes joined at a shared stop.
4. Local-only: local transport or walking the whole way.

Times along a trip are estimated with a fixed dwell per hop; there is no
per-stop schedule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence

from .. import times
from ..config import PlannerConfig, get_config
from ..domain.errors import SegmentError
from ..domain.models import (
    LOCAL_MODES,
    LegSource,
    Mode,
    OptionCategory,
    OptionType,
    Route,
    RouteLeg,
    RouteOption,
    RouteResponse,
    Trip,
)
from ..ports.graph import TransitGraphPort
from ..ports.segments import SegmentProviderPort

FASTEST_LABEL = "Fastest Route"
LEAST_LOCAL_LABEL = "Least Local Transport"
LOCAL_ONLY_LABEL = "Local Transport Only"

EXTERNAL_MODE = "driving"


@dataclass(frozen=True)
class _Ride:
    """A bus ride along one trip between two calling indexes."""

    route: Route
    trip: Trip
    board_index: int
    alight_index: int
    boarding_min: int
    ride_min: int
    wait_min: int

    @property
    def arrival_min(self) -> int:
        return self.boarding_min + self.ride_min

    def leg(self) -> RouteLeg:
        return RouteLeg(
            mode=Mode.BUS,
            from_node=self.trip.stops[self.board_index],
            to_node=self.trip.stops[self.alight_index],
            duration_min=self.ride_min,
            cost=0.0,
            source=LegSource.GRAPH,
            route_id=self.route.route_id,
            trip_id=self.trip.trip_id,
            departure=times.from_minutes(self.boarding_min),
            arrival=times.from_minutes(self.arrival_min),
        )


@dataclass
class RoutePlanner:
    """Plans itineraries over the transit graph.

    Attributes:
        graph: Network topology and local shortest paths
        segments: External estimates for pairs the graph cannot answer
        config: Dwell, transfer window, result size and local fare policy
    """

    graph: TransitGraphPort
    segments: SegmentProviderPort
    config: PlannerConfig = field(default_factory=lambda: get_config().planner)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def plan_route(
        self,
        from_node: str,
        to_node: str,
        request_time: str,
        current_route: Optional[str] = None,
    ) -> RouteResponse:
        """Plan a route from origin to destination at the requested time.

        Args:
            from_node: Origin node id.
            to_node: Destination node id.
            request_time: Earliest departure, "HH:MM".
            current_route: Route the traveller is currently on (informational).

        Returns:
            RouteResponse with at most ``max_options`` options. An empty
            option list means no itinerary was found.

        Raises:
            InvalidTimeError: If request_time is not "HH:MM".
        """
        request_min = times.to_minutes(request_time)
        empty = RouteResponse(from_node=from_node, to_node=to_node, request_time=request_time)

        self._logger.info(
            "Planning route",
            extra={
                "from": from_node,
                "to": to_node,
                "time": request_time,
                "current_route": current_route,
            },
        )

        if not self.graph.has_node(from_node) or not self.graph.has_node(to_node):
            self._logger.info("Unknown endpoint", extra={"from": from_node, "to": to_node})
            return empty
        if from_node == to_node:
            return empty

        candidates: List[RouteOption] = []

        for route in self.graph.get_all_routes():
            candidates.extend(self._direct_options(route, from_node, to_node, request_min))
            hybrid = self._hybrid_option(route, from_node, to_node, request_min)
            if hybrid is not None:
                candidates.append(hybrid)

        candidates.extend(self._transfer_options(from_node, to_node, request_min))

        local = self._local_only_option(from_node, to_node)
        if local is not None:
            candidates.append(local)

        options = self.rank(candidates)
        self._logger.info(
            "Route planned",
            extra={"candidates": len(candidates), "options": len(options)},
        )
        return replace(empty, options=tuple(options))

    # -- bus rides ---------------------------------------------------------

    def _rides(
        self, route: Route, board: str, alight: str, request_min: int
    ) -> Iterator[_Ride]:
        """Yield every trip of ``route`` that still serves board -> alight."""
        for trip in route.trips:
            board_index = trip.index_of(board)
            alight_index = trip.index_of(alight)
            if board_index == -1 or alight_index == -1 or board_index >= alight_index:
                continue

            ride = self._ride(route, trip, board_index, alight_index, request_min)
            if ride is None:
                continue
            yield ride

    def _ride(
        self,
        route: Route,
        trip: Trip,
        board_index: int,
        alight_index: int,
        request_min: int,
    ) -> Optional[_Ride]:
        dwell = self.config.dwell_minutes
        boarding_min = times.to_minutes(trip.departure_time) + board_index * dwell
        if boarding_min < request_min:
            return None
        return _Ride(
            route=route,
            trip=trip,
            board_index=board_index,
            alight_index=alight_index,
            boarding_min=boarding_min,
            ride_min=(alight_index - board_index) * dwell,
            wait_min=boarding_min - request_min,
        )

    # -- strategies --------------------------------------------------------

    def _direct_options(
        self, route: Route, from_node: str, to_node: str, request_min: int
    ) -> List[RouteOption]:
        return [
            RouteOption(
                label=f"{route.name} Direct",
                category=OptionCategory.FASTEST,
                option_type=OptionType.DIRECT,
                total_time_min=ride.wait_min + ride.ride_min,
                legs=(ride.leg(),),
            )
            for ride in self._rides(route, from_node, to_node, request_min)
        ]

    def _hybrid_option(
        self, route: Route, from_node: str, to_node: str, request_min: int
    ) -> Optional[RouteOption]:
        """Best bus-then-local itinerary on this route, by total time."""
        best: Optional[RouteOption] = None

        for trip in route.trips:
            board_index = trip.index_of(from_node)
            if board_index == -1:
                continue

            for alight_index in range(board_index + 1, len(trip.stops)):
                drop_off = trip.stops[alight_index]
                if drop_off == to_node:
                    continue

                ride = self._ride(route, trip, board_index, alight_index, request_min)
                if ride is None:
                    break

                continuation = self._local_continuation(drop_off, to_node)
                if continuation is None:
                    continue

                total = ride.wait_min + ride.ride_min + continuation.duration_min
                if best is None or total < best.total_time_min:
                    best = RouteOption(
                        label=f"{route.name} + Local",
                        category=OptionCategory.FASTEST,
                        option_type=OptionType.DIRECT,
                        total_time_min=total,
                        legs=(ride.leg(), continuation),
                        total_cost=continuation.cost,
                        local_time_min=continuation.duration_min,
                        local_distance_meters=continuation.distance_meters,
                        uses_external=continuation.source is LegSource.EXTERNAL,
                    )

        return best

    def _local_continuation(self, drop_off: str, to_node: str) -> Optional[RouteLeg]:
        """Single local leg from drop-off to destination, graph first."""
        path = self.graph.shortest_path(drop_off, to_node, LOCAL_MODES)
        if path.found:
            return RouteLeg(
                mode=Mode.LOCAL,
                submode=EXTERNAL_MODE,
                from_node=drop_off,
                to_node=to_node,
                duration_min=int(path.total_time),
                distance_meters=path.total_distance_meters,
                cost=path.total_cost,
                source=LegSource.GRAPH,
            )
        return self._external_leg(drop_off, to_node)

    def _external_leg(self, from_node: str, to_node: str) -> Optional[RouteLeg]:
        try:
            estimate = self.segments.get_segment(from_node, to_node, EXTERNAL_MODE)
        except SegmentError as e:
            self._logger.info(
                "External estimate unavailable",
                extra={
                    "from": from_node,
                    "to": to_node,
                    "error": type(e).__name__,
                    "reason": str(e),
                },
            )
            return None

        return RouteLeg(
            mode=Mode.LOCAL,
            submode=EXTERNAL_MODE,
            from_node=from_node,
            to_node=to_node,
            duration_min=estimate.duration_min,
            distance_meters=estimate.distance_meters,
            cost=self._local_fare(estimate.distance_meters),
            source=LegSource.EXTERNAL,
        )

    def _local_fare(self, distance_meters: float) -> float:
        return round(distance_meters / 100) * self.config.local_cost_per_100m

    def _transfer_options(
        self, from_node: str, to_node: str, request_min: int
    ) -> List[RouteOption]:
        options: List[RouteOption] = []
        routes = self.graph.get_all_routes()
        max_wait = self.config.max_transfer_wait_minutes

        for first_route in routes:
            for second_route in routes:
                if first_route.route_id == second_route.route_id:
                    continue

                shared = first_route.served_stops & second_route.served_stops
                for stop in sorted(shared):
                    first = next(self._rides(first_route, from_node, stop, request_min), None)
                    if first is None:
                        continue
                    second = next(
                        self._rides(second_route, stop, to_node, first.arrival_min), None
                    )
                    if second is None:
                        continue

                    wait = second.boarding_min - first.arrival_min
                    if wait < 0 or wait > max_wait:
                        continue

                    node = self.graph.get_node(stop)
                    options.append(
                        RouteOption(
                            label=f"Transfer at {node.name if node else stop}",
                            category=OptionCategory.FASTEST,
                            option_type=OptionType.TRANSFER,
                            transfers=1,
                            total_time_min=first.wait_min + first.ride_min + wait + second.ride_min,
                            legs=(first.leg(), second.leg()),
                        )
                    )

        return options

    def _local_only_option(self, from_node: str, to_node: str) -> Optional[RouteOption]:
        path = self.graph.shortest_path(from_node, to_node, LOCAL_MODES)

        if path.found:
            legs = tuple(
                RouteLeg(
                    mode=edge.mode,
                    from_node=path.path[index],
                    to_node=path.path[index + 1],
                    duration_min=edge.time_min,
                    distance_meters=edge.distance_meters or 0.0,
                    cost=edge.cost,
                    source=LegSource.GRAPH,
                )
                for index, edge in enumerate(path.edges)
            )
            total = int(path.total_time)
            return RouteOption(
                label=LOCAL_ONLY_LABEL,
                category=OptionCategory.LEAST_LOCAL,
                option_type=OptionType.LOCAL_ONLY,
                total_time_min=total,
                legs=legs,
                total_cost=path.total_cost,
                local_time_min=total,
                local_distance_meters=path.total_distance_meters,
            )

        leg = self._external_leg(from_node, to_node)
        if leg is None:
            return None
        return RouteOption(
            label=LOCAL_ONLY_LABEL,
            category=OptionCategory.LEAST_LOCAL,
            option_type=OptionType.LOCAL_ONLY,
            total_time_min=leg.duration_min,
            legs=(leg,),
            total_cost=leg.cost,
            local_time_min=leg.duration_min,
            local_distance_meters=leg.distance_meters,
            uses_external=True,
        )

    # -- ranking -----------------------------------------------------------

    def rank(self, candidates: Sequence[RouteOption]) -> List[RouteOption]:
        """Deduplicate by leg identity and pick fastest / least-local first.

        The first option with the minimum total time leads. The first
        option with the minimum local time follows unless it is the same
        itinerary, in which case the leader is marked BOTH. Remaining
        unique options fill up to ``max_options`` in enumeration order.
        """
        unique: Dict[tuple, RouteOption] = {}
        for option in candidates:
            unique.setdefault(option.identity, option)
        if not unique:
            return []

        ordered = list(unique.values())
        fastest = min(ordered, key=lambda option: option.total_time_min)
        least_local = min(ordered, key=lambda option: option.local_time_min)
        same = fastest.identity == least_local.identity

        result: List[RouteOption] = [
            replace(
                fastest,
                label=FASTEST_LABEL,
                category=OptionCategory.BOTH if same else OptionCategory.FASTEST,
            )
        ]
        taken = {fastest.identity}

        if not same:
            result.append(
                replace(
                    least_local,
                    label=LEAST_LOCAL_LABEL,
                    category=OptionCategory.LEAST_LOCAL,
                )
            )
            taken.add(least_local.identity)

        for option in ordered:
            if len(result) >= self.config.max_options:
                break
            if option.identity not in taken:
                result.append(option)
                taken.add(option.identity)

        return result[: self.config.max_options]
