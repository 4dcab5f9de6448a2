"""In-memory transit network and mode-restricted shortest paths.

The graph is loaded once from already-parsed records and is read-only
afterwards. ``load`` replaces the whole state and rebuilds the adjacency
index; nothing mutates the index incrementally.
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..domain.errors import GraphError
from ..domain.models import LOCAL_MODES, Edge, EdgeInfo, Mode, Node, PathResult, Route

AdjacencyIndex = Mapping[str, Tuple[EdgeInfo, ...]]

_UNREACHABLE = PathResult(found=False)


@dataclass
class TransitGraph:
    """Nodes, routes and edges of the network with an adjacency index.

    Implements TransitGraphPort. Shortest paths use Dijkstra's algorithm
    with a binary heap keyed on ``(time, node_id)``: among candidates with
    equal tentative time the lexicographically smallest node id is settled
    first, so results are deterministic for a given dataset.
    """

    _nodes: Dict[str, Node] = field(default_factory=dict, repr=False)
    _routes: Dict[str, Route] = field(default_factory=dict, repr=False)
    _edges: Tuple[Edge, ...] = field(default=(), repr=False)
    _adjacency: Dict[str, Tuple[EdgeInfo, ...]] = field(default_factory=dict, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def load(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        routes: Iterable[Route],
    ) -> None:
        """Replace the network and rebuild the adjacency index.

        Raises:
            GraphError: On duplicate node ids, edges referencing unknown
                nodes, or negative edge weights.
        """
        node_map: Dict[str, Node] = {}
        for node in nodes:
            if node.id in node_map:
                raise GraphError(f"Duplicate node id: {node.id}")
            node_map[node.id] = node

        edge_list = tuple(edges)
        for edge in edge_list:
            for endpoint in (edge.source, edge.target):
                if endpoint not in node_map:
                    raise GraphError(
                        f"Edge {edge.source}->{edge.target} references unknown node {endpoint}"
                    )
            if edge.time_min < 0 or edge.cost < 0:
                raise GraphError(
                    f"Edge {edge.source}->{edge.target} has a negative weight"
                )

        self._nodes = node_map
        self._edges = edge_list
        self._routes = {route.route_id: route for route in routes}
        self._adjacency = self._build_adjacency(node_map, edge_list)

        self._logger.info(
            "Graph loaded",
            extra={
                "nodes": len(self._nodes),
                "edges": len(self._edges),
                "routes": len(self._routes),
            },
        )

    @staticmethod
    def _build_adjacency(
        nodes: Mapping[str, Node], edges: Sequence[Edge]
    ) -> Dict[str, Tuple[EdgeInfo, ...]]:
        adjacency: Dict[str, List[EdgeInfo]] = {node_id: [] for node_id in nodes}

        for edge in edges:
            adjacency[edge.source].append(
                EdgeInfo(
                    to=edge.target,
                    mode=edge.mode,
                    time_min=edge.time_min,
                    cost=edge.cost,
                    route_ids=edge.route_ids,
                    distance_meters=edge.distance_meters,
                )
            )
            if not edge.one_way:
                adjacency[edge.target].append(
                    EdgeInfo(
                        to=edge.source,
                        mode=edge.mode,
                        time_min=edge.time_min,
                        cost=edge.cost,
                        route_ids=edge.route_ids,
                        distance_meters=edge.distance_meters,
                    )
                )

        return {node_id: tuple(infos) for node_id, infos in adjacency.items()}

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_all_nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def get_route(self, route_id: str) -> Optional[Route]:
        return self._routes.get(route_id)

    def get_all_routes(self) -> List[Route]:
        return list(self._routes.values())

    def get_neighbors(self, node_id: str) -> Tuple[EdgeInfo, ...]:
        return self._adjacency.get(node_id, ())

    def adjacency(self) -> AdjacencyIndex:
        """Read-only view of the adjacency index."""
        return MappingProxyType(self._adjacency)

    def get_edge(
        self, source: str, target: str, mode: Optional[Mode] = None
    ) -> Optional[EdgeInfo]:
        """Return the first outgoing edge from source to target, optionally by mode."""
        for edge in self.get_neighbors(source):
            if edge.to == target and (mode is None or edge.mode == mode):
                return edge
        return None

    def shortest_path(
        self,
        source: str,
        target: str,
        allowed_modes: Iterable[Mode] = LOCAL_MODES,
    ) -> PathResult:
        """Find the minimum-time path using only edges of the allowed modes.

        Args:
            source: Origin node id.
            target: Destination node id.
            allowed_modes: Modes an edge must have to be traversed.

        Returns:
            PathResult; ``found`` is False and ``total_time`` is ``inf``
            when either node is unknown or the target is unreachable.
        """
        if source not in self._nodes or target not in self._nodes:
            return _UNREACHABLE

        if source == target:
            return PathResult(found=True, path=(source,), total_time=0, total_cost=0.0)

        modes = frozenset(allowed_modes)
        times: Dict[str, float] = {source: 0}
        costs: Dict[str, float] = {source: 0.0}
        previous: Dict[str, Tuple[str, EdgeInfo]] = {}
        visited: set[str] = set()

        heap: List[Tuple[float, str]] = [(0, source)]

        while heap:
            current_time, u = heapq.heappop(heap)

            if u in visited:
                continue

            visited.add(u)

            if u == target:
                break

            for edge in self._adjacency.get(u, ()):
                if edge.mode not in modes or edge.to in visited:
                    continue
                if edge.to not in self._nodes:
                    raise GraphError(
                        f"Adjacency index references unknown node {edge.to}"
                    )
                new_time = current_time + edge.time_min
                if new_time < times.get(edge.to, math.inf):
                    times[edge.to] = new_time
                    costs[edge.to] = costs[u] + edge.cost
                    previous[edge.to] = (u, edge)
                    heapq.heappush(heap, (new_time, edge.to))

        if target not in visited:
            return _UNREACHABLE

        path: List[str] = [target]
        hops: List[EdgeInfo] = []
        current = target
        while current != source:
            current, edge = previous[current]
            path.append(current)
            hops.append(edge)

        path.reverse()
        hops.reverse()
        return PathResult(
            found=True,
            path=tuple(path),
            total_time=times[target],
            total_cost=costs[target],
            edges=tuple(hops),
        )
