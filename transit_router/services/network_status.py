"""Read-only catalogue and health snapshot for operators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..ports.graph import TransitGraphPort
from .segment_provider import SegmentProvider


@dataclass
class NetworkStatusService:
    """Lists the network and reports estimator usage."""

    graph: TransitGraphPort
    segments: SegmentProvider

    def list_nodes(self) -> Dict[str, Any]:
        nodes = self.graph.get_all_nodes()
        return {
            "count": len(nodes),
            "nodes": [
                {"id": node.id, "name": node.name, "type": node.category.value}
                for node in nodes
            ],
        }

    def list_routes(self) -> Dict[str, Any]:
        routes = self.graph.get_all_routes()
        return {
            "count": len(routes),
            "routes": [
                {
                    "route_id": route.route_id,
                    "name": route.name,
                    "trips_count": len(route.trips),
                }
                for route in routes
            ],
        }

    def health(self) -> Dict[str, Any]:
        """Graph size, estimator availability, quota usage and cache hit rate."""
        stats = self.segments.get_stats()
        daily_limit, monthly_limit = self.segments.limits
        lookups = stats.cache_hits + stats.cache_misses
        hit_rate = (
            f"{round(stats.cache_hits / lookups * 100)}%" if stats.cache_misses > 0 else "N/A"
        )

        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "graph": {
                "nodes": len(self.graph.get_all_nodes()),
                "routes": len(self.graph.get_all_routes()),
            },
            "distanceMatrix": {
                "available": self.segments.is_configured,
                "usage": {
                    "monthly": f"{stats.monthly_count}/{monthly_limit}",
                    "daily": f"{stats.daily_count}/{daily_limit}",
                },
                "cache": {
                    "entries": self.segments.cache_size(),
                    "hits": stats.cache_hits,
                    "misses": stats.cache_misses,
                    "hitRate": hit_rate,
                },
            },
        }

    def stop_pairs(self, mode: str = "driving") -> List[tuple[str, str, str]]:
        """Every consecutive stop pair of every trip, once, in route order."""
        pairs: Dict[tuple[str, str, str], None] = {}
        for route in self.graph.get_all_routes():
            for trip in route.trips:
                for origin, destination in zip(trip.stops, trip.stops[1:]):
                    pairs.setdefault((origin, destination, mode), None)
        return list(pairs)
