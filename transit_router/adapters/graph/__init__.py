"""Graph adapters - Implementations of graph-related ports.

Available implementations:
- JsonGraphRepository: Loads nodes, edges and routes from JSON files
"""

from .json_repository import JsonGraphRepository

__all__ = ["JsonGraphRepository"]
