"""JSON Graph Repository adapter.

Loads the network dataset from three JSON files (nodes, edges, routes)
and converts the records into domain models. Edges without a stored
distance get a geodesic estimate when both endpoints have coordinates.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from geopy.distance import geodesic

from ... import times
from ...config import GraphConfig, get_config
from ...domain.errors import GraphError
from ...domain.models import Edge, GeoLocation, Mode, Node, NodeCategory, Route, Trip
from ...graph.transit_graph import TransitGraph

Dataset = Tuple[List[Node], List[Edge], List[Route]]


def _read_json(path: Path) -> Any:
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def parse_node(row: Dict[str, Any]) -> Node:
    lat = row.get("lat")
    lng = row.get("lng")
    location = None
    if lat is not None and lng is not None:
        location = GeoLocation(latitude=float(lat), longitude=float(lng))

    node_id = str(row["id"]).strip()
    return Node(
        id=node_id,
        name=str(row.get("name") or node_id),
        category=NodeCategory(row.get("type", NodeCategory.STOP.value)),
        address=str(row.get("gmaps_address", "")),
        location=location,
    )


def parse_edge(row: Dict[str, Any]) -> Edge:
    distance = row.get("distance_meters")
    return Edge(
        source=str(row["from"]),
        target=str(row["to"]),
        mode=Mode(row["mode"]),
        time_min=int(row["time_min"]),
        cost=float(row.get("cost", 0)),
        one_way=bool(row.get("one_way", False)),
        route_ids=tuple(row.get("route_ids") or ()),
        distance_meters=float(distance) if distance is not None else None,
    )


def parse_trip(row: Dict[str, Any]) -> Trip:
    trip_id = str(row["trip_id"])
    departure = str(row["departure_time"]).strip()
    if not times.is_valid_time(departure):
        raise ValueError(f"Trip {trip_id} departs at '{departure}', expected HH:MM")
    return Trip(
        trip_id=trip_id,
        direction=str(row.get("direction", "")),
        stops=tuple(row["stops"]),
        departure_time=departure,
    )


def parse_route(row: Dict[str, Any]) -> Route:
    trips = tuple(parse_trip(trip) for trip in row.get("trips", []))
    return Route(route_id=str(row["route_id"]), name=str(row.get("name", "")), trips=trips)


@dataclass
class JsonGraphRepository:
    """Graph repository that loads from JSON files.

    Implements GraphRepositoryPort.

    Attributes:
        config: Graph configuration (paths, file names)
    """

    config: GraphConfig = field(default_factory=lambda: get_config().graph)
    _logger: logging.Logger = field(init=False, repr=False)

    # Cached data
    _dataset: Optional[Dataset] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load(self) -> Dataset:
        """Load nodes, edges and routes.

        Returns:
            Tuple of (nodes, edges, routes).

        Raises:
            GraphError: If a file is missing or a record is malformed.
        """
        if self._dataset is not None:
            return self._dataset

        self._logger.debug(
            "Loading dataset",
            extra={"data_dir": str(self.config.data_dir)},
        )

        current = self.config.nodes_path
        try:
            nodes = [parse_node(row) for row in _read_json(current)]
            current = self.config.edges_path
            edges = [parse_edge(row) for row in _read_json(current)]
            current = self.config.routes_path
            routes = [parse_route(row) for row in _read_json(current)]
        except (OSError, KeyError, TypeError, ValueError) as e:
            raise GraphError(
                f"Failed to load dataset: {e}",
                file_path=str(current),
                cause=e,
            )

        edges = self._fill_distances(nodes, edges)
        self._dataset = (nodes, edges, routes)
        self._logger.info(
            "Dataset loaded",
            extra={"nodes": len(nodes), "edges": len(edges), "routes": len(routes)},
        )
        return self._dataset

    def load_into(self, graph: TransitGraph) -> TransitGraph:
        """Load the dataset and install it into ``graph``."""
        nodes, edges, routes = self.load()
        graph.load(nodes, edges, routes)
        return graph

    @staticmethod
    def _fill_distances(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[Edge]:
        locations = {node.id: node.location for node in nodes}
        filled: List[Edge] = []
        for edge in edges:
            start = locations.get(edge.source)
            end = locations.get(edge.target)
            if edge.distance_meters is None and start is not None and end is not None:
                meters = geodesic(
                    (start.latitude, start.longitude),
                    (end.latitude, end.longitude),
                ).meters
                edge = replace(edge, distance_meters=round(meters))
            filled.append(edge)
        return filled

    def clear_cache(self) -> None:
        """Clear cached dataset."""
        self._dataset = None
        self._logger.debug("Dataset cache cleared")
