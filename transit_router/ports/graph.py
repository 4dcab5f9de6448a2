"""Graph ports - Abstractions for dataset loading and network queries.

These protocols define the contracts between the planner and the
network model, and between the network model and persistent storage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Protocol, Sequence, Tuple

if TYPE_CHECKING:
    from ..domain.models import Edge, EdgeInfo, Mode, Node, PathResult, Route


class GraphRepositoryPort(Protocol):
    """Port for loading the network dataset.

    Implementation: adapters/graph/json_repository.py

    The repository reads nodes, edges and routes from persistent storage
    and hands them over already parsed.
    """

    def load(self) -> Tuple[Sequence[Node], Sequence[Edge], Sequence[Route]]:
        """Load the dataset.

        Returns:
            Tuple of (nodes, edges, routes).
        """
        ...


class TransitGraphPort(Protocol):
    """Port for network queries used by the planner and the estimator.

    Implementation: graph/transit_graph.py
    """

    def has_node(self, node_id: str) -> bool:
        ...

    def get_node(self, node_id: str) -> Optional[Node]:
        ...

    def get_all_nodes(self) -> Sequence[Node]:
        ...

    def get_route(self, route_id: str) -> Optional[Route]:
        ...

    def get_all_routes(self) -> Sequence[Route]:
        ...

    def get_neighbors(self, node_id: str) -> Sequence[EdgeInfo]:
        ...

    def shortest_path(
        self,
        source: str,
        target: str,
        allowed_modes: Iterable[Mode] = ...,
    ) -> PathResult:
        """Find the minimum-time path restricted to the allowed modes.

        Args:
            source: Origin node id.
            target: Destination node id.
            allowed_modes: Modes an edge must have to be traversed.

        Returns:
            PathResult, with ``found`` False when unreachable.
        """
        ...
