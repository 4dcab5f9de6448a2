"""Segment ports - Abstractions for external travel-time estimates.

The planner only talks to SegmentProviderPort. The provider in turn
drives a DistanceMatrixPort (the network call) and may be seeded from a
SegmentStorePort (the persisted cache file).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Protocol

if TYPE_CHECKING:
    from ..domain.models import CacheEntry, SegmentEstimate, UsageStats


class SegmentProviderPort(Protocol):
    """Port for cache- and quota-governed segment estimates.

    Implementation: services/segment_provider.py
    """

    def get_segment(
        self, origin: str, destination: str, mode: str = "driving"
    ) -> SegmentEstimate:
        """Estimate distance and duration between two nodes.

        Args:
            origin: Origin node id.
            destination: Destination node id.
            mode: Travel mode understood by the estimator.

        Returns:
            SegmentEstimate with distance, duration and cache provenance.

        Raises:
            SegmentError: Any subclass, when no estimate is available.
        """
        ...

    def get_stats(self) -> UsageStats:
        ...


class DistanceMatrixPort(Protocol):
    """Port for the single network call to the external estimator.

    Implementation: adapters/distance_matrix/google_client.py
    """

    def fetch(self, origin: str, destination: str, mode: str) -> Dict[str, Any]:
        """Request one origin-destination element.

        Args:
            origin: Geocodable address of the origin.
            destination: Geocodable address of the destination.
            mode: Travel mode ('driving', 'walking').

        Returns:
            The decoded JSON payload, whatever its status.

        Raises:
            NetworkError: If the provider could not be reached.
        """
        ...


class SegmentStorePort(Protocol):
    """Port for the persisted segment cache.

    Implementation: adapters/cache/json_store.py
    """

    def load(self) -> Dict[str, CacheEntry]:
        ...

    def save(self, entries: Mapping[str, CacheEntry]) -> None:
        ...
