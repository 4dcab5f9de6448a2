"""Graph model of the transit network.

This subpackage holds the in-memory network (nodes, routes, edges), its
adjacency index, and the mode-restricted shortest-path search.
"""

from .transit_graph import AdjacencyIndex, TransitGraph

__all__ = ["AdjacencyIndex", "TransitGraph"]
