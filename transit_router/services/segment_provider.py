"""Segment provider - cache- and quota-governed external estimates.

The planner falls back to this service when the static graph has no
local-mode path for a pair. Each lookup goes through, in order:

1. configuration check (no key, no lookup)
2. lazy daily/monthly counter rollover
3. cache (hits never consume quota)
4. quota check (monthly first, then daily)
5. endpoint resolution through the graph
6. one bounded network call

Cache and counters are the only mutable state and are guarded by a
re-entrant lock so the provider can be shared across threads. Steps 2-5
run under the lock and reserve the call slot; the network call itself runs
unlocked, and a call that fails to reach the provider gives its slot back.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from ..adapters.cache.segment_cache import SegmentCache, make_key
from ..config import SegmentConfig, get_config
from ..domain.errors import (
    InvalidNodesError,
    NetworkError,
    NotConfiguredError,
    QuotaExceededError,
    SegmentError,
    UpstreamError,
)
from ..domain.models import CacheEntry, SegmentEstimate, UsageStats
from ..ports.graph import TransitGraphPort
from ..ports.segments import DistanceMatrixPort

OK_STATUS = "OK"
INVALID_RESPONSE = "INVALID_RESPONSE"


@dataclass
class PrewarmReport:
    """Outcome of a prewarm run."""

    requested: int = 0
    fetched: int = 0
    cached: int = 0
    failures: List[Tuple[str, str, str]] = field(default_factory=list)


@dataclass
class SegmentProvider:
    """External segment estimates behind a TTL cache and call quotas.

    Implements SegmentProviderPort.

    Attributes:
        graph: Network used to resolve node ids into addresses
        transport: Performs the network call
        config: Key, limits and TTL
        clock: Returns the current time in epoch seconds
        today: Returns the current calendar date
    """

    graph: TransitGraphPort
    transport: DistanceMatrixPort
    config: SegmentConfig = field(default_factory=lambda: get_config().segments)
    clock: Callable[[], float] = field(default=time.time, repr=False)
    today: Callable[[], date] = field(default=date.today, repr=False)

    _cache: SegmentCache = field(init=False, repr=False)
    _stats: UsageStats = field(init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        self._cache = SegmentCache(ttl_seconds=self.config.cache_ttl_seconds, clock=self.clock)
        self._stats = UsageStats(last_reset=self.today().isoformat())
        if not self.is_configured:
            self._logger.warning(
                "Distance Matrix API key not set, external estimates disabled"
            )

    @property
    def is_configured(self) -> bool:
        return self.config.is_configured

    @property
    def limits(self) -> Tuple[int, int]:
        """Return (daily_limit, monthly_limit)."""
        return self.config.daily_limit, self.config.monthly_limit

    def get_segment(
        self, origin: str, destination: str, mode: str = "driving"
    ) -> SegmentEstimate:
        """Estimate distance and duration between two nodes.

        Args:
            origin: Origin node id.
            destination: Destination node id.
            mode: 'driving' or 'walking'.

        Returns:
            SegmentEstimate; ``from_cache`` tells whether quota was spent.

        Raises:
            NotConfiguredError: No API key.
            QuotaExceededError: Monthly or daily limit reached.
            InvalidNodesError: An endpoint is not in the graph.
            NetworkError: The provider could not be reached.
            UpstreamError: The provider answered with a non-OK status or a
                malformed body.
        """
        if not self.is_configured:
            raise NotConfiguredError("Distance Matrix API key not configured")

        key = make_key(origin, destination, mode)

        with self._lock:
            self._roll_over_counters()

            cached = self._cache.get(key)
            if cached is not None:
                self._stats.cache_hits += 1
                self._logger.debug(
                    "Segment cache hit",
                    extra={"origin": origin, "destination": destination, "mode": mode},
                )
                return SegmentEstimate(
                    distance_meters=cached.distance_meters,
                    duration_seconds=cached.duration_seconds,
                    from_cache=True,
                )

            self._stats.cache_misses += 1
            self._check_quota()

            origin_node = self.graph.get_node(origin)
            destination_node = self.graph.get_node(destination)
            if origin_node is None or destination_node is None:
                raise InvalidNodesError(
                    f"Invalid node ids: {origin} -> {destination}",
                    origin=origin,
                    destination=destination,
                )

            # Reserve the call so concurrent lookups cannot overshoot a limit.
            self._stats.daily_count += 1
            self._stats.monthly_count += 1
            reserved_on = self._stats.last_reset

        self._logger.info(
            "Distance Matrix lookup",
            extra={"origin": origin, "destination": destination, "mode": mode},
        )
        try:
            payload = self.transport.fetch(
                origin_node.address, destination_node.address, mode
            )
        except NetworkError:
            self._release_reservation(reserved_on)
            raise

        # The request reached the provider: it counts whatever the status.
        distance, duration = self._parse_payload(payload)
        self._cache.put(key, distance, duration)

        self._logger.info(
            "Distance Matrix estimate",
            extra={
                "origin": origin,
                "destination": destination,
                "distance_m": distance,
                "duration_s": duration,
            },
        )
        return SegmentEstimate(
            distance_meters=distance, duration_seconds=duration, from_cache=False
        )

    def _roll_over_counters(self) -> None:
        today = self.today().isoformat()
        last = self._stats.last_reset
        if last == today:
            return

        self._stats.daily_count = 0
        if last[:7] != today[:7]:
            self._stats.monthly_count = 0
            self._logger.info("Monthly quota reset", extra={"month": today[:7]})
        self._stats.last_reset = today
        self._logger.info("Daily quota reset", extra={"date": today})

    def _check_quota(self) -> None:
        daily_limit, monthly_limit = self.limits
        if self._stats.monthly_count >= monthly_limit:
            self._logger.warning("Monthly limit reached", extra={"limit": monthly_limit})
            raise QuotaExceededError(
                "Monthly API quota exceeded", period="monthly", limit=monthly_limit
            )
        if self._stats.daily_count >= daily_limit:
            self._logger.warning("Daily limit reached", extra={"limit": daily_limit})
            raise QuotaExceededError(
                "Daily API quota exceeded", period="daily", limit=daily_limit
            )

    def _release_reservation(self, reserved_on: str) -> None:
        """Give back a call slot whose request never reached the provider."""
        with self._lock:
            if self._stats.last_reset == reserved_on:
                self._stats.daily_count = max(0, self._stats.daily_count - 1)
            if self._stats.last_reset[:7] == reserved_on[:7]:
                self._stats.monthly_count = max(0, self._stats.monthly_count - 1)

    def _invalid_response(self, reason: str) -> UpstreamError:
        self._logger.warning("Malformed Distance Matrix response", extra={"reason": reason})
        return UpstreamError(f"Invalid response: {reason}", code=INVALID_RESPONSE)

    def _parse_payload(self, payload: Any) -> Tuple[float, float]:
        if not isinstance(payload, Mapping):
            raise self._invalid_response("body is not an object")

        status = payload.get("status", "MISSING")
        if status != OK_STATUS:
            self._logger.warning("Distance Matrix error", extra={"status": status})
            raise UpstreamError(
                payload.get("error_message") or f"API status: {status}", code=str(status)
            )

        try:
            element = payload["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            element = None

        if element is not None and not isinstance(element, Mapping):
            raise self._invalid_response("element is not an object")

        element_status = element.get("status", "MISSING") if element else "MISSING"
        if element_status != OK_STATUS:
            self._logger.warning(
                "Distance Matrix element error", extra={"status": element_status}
            )
            raise UpstreamError(
                f"Element status: {element_status}", code=str(element_status)
            )

        try:
            distance = float(element["distance"]["value"])
            duration = float(element["duration"]["value"])
        except (KeyError, IndexError, TypeError, ValueError):
            raise self._invalid_response("distance or duration missing")
        return distance, duration

    def get_stats(self) -> UsageStats:
        """Return a snapshot of the usage counters."""
        with self._lock:
            return replace(self._stats)

    def cache_size(self) -> int:
        return self._cache.size()

    def clear_cache(self) -> int:
        return self._cache.clear()

    def reset_counters(self) -> None:
        with self._lock:
            self._stats.monthly_count = 0
            self._stats.daily_count = 0
            self._stats.cache_hits = 0
            self._stats.cache_misses = 0
        self._logger.info("Usage counters reset")

    def load_cache(self, entries: Mapping[str, CacheEntry]) -> int:
        """Seed the cache from persisted entries, keeping their timestamps."""
        return self._cache.update(entries)

    def export_cache(self) -> Dict[str, CacheEntry]:
        return self._cache.snapshot()

    def prewarm(
        self,
        pairs: Iterable[Tuple[str, str, str]],
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> PrewarmReport:
        """Fetch estimates for many pairs, pausing after each network call.

        Failures are recorded in the report instead of being raised.
        """
        delay = self.config.prewarm_delay_seconds if delay_seconds is None else delay_seconds
        report = PrewarmReport()

        for origin, destination, mode in pairs:
            report.requested += 1
            try:
                estimate = self.get_segment(origin, destination, mode)
            except SegmentError as e:
                self._logger.warning(
                    "Prewarm lookup failed",
                    extra={"origin": origin, "destination": destination, "error": str(e)},
                )
                report.failures.append((origin, destination, str(e)))
                continue

            if estimate.from_cache:
                report.cached += 1
            else:
                report.fetched += 1
                if delay > 0:
                    sleep(delay)

        self._logger.info(
            "Prewarm complete",
            extra={
                "requested": report.requested,
                "fetched": report.fetched,
                "cached": report.cached,
                "failed": len(report.failures),
            },
        )
        return report
