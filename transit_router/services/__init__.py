"""Services layer - Application orchestration.

Available services:
- RoutePlanner: Enumerates, deduplicates and ranks itineraries
- SegmentProvider: Cache- and quota-governed external estimates
- NetworkStatusService: Catalogue and health snapshot
"""

from .network_status import NetworkStatusService
from .route_planner import RoutePlanner
from .segment_provider import PrewarmReport, SegmentProvider

__all__ = ["RoutePlanner", "SegmentProvider", "PrewarmReport", "NetworkStatusService"]
