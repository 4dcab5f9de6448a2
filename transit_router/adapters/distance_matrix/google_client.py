"""Google Distance Matrix transport adapter.

Performs exactly one HTTP request per call with a bounded timeout and
returns the decoded payload. Status interpretation, quota accounting and
caching belong to the SegmentProvider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from ...config import SegmentConfig, get_config
from ...domain.errors import NetworkError


@dataclass
class GoogleDistanceMatrixClient:
    """Distance Matrix client over a shared ``requests.Session``.

    Implements DistanceMatrixPort.

    Attributes:
        config: Estimator configuration (key, endpoint, timeout)
    """

    config: SegmentConfig = field(default_factory=lambda: get_config().segments)
    session: Optional[requests.Session] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)
        if self.session is None:
            self.session = requests.Session()

    def fetch(self, origin: str, destination: str, mode: str) -> Dict[str, Any]:
        """Request a single origin-destination element.

        Raises:
            NetworkError: On timeout, connection failure, HTTP error status
                or an undecodable body.
        """
        assert self.session is not None

        params = {
            "origins": origin,
            "destinations": destination,
            "mode": mode,
            "key": self.config.api_key,
        }

        self._logger.debug(
            "Distance Matrix request",
            extra={"origin": origin, "destination": destination, "mode": mode},
        )

        try:
            response = self.session.get(
                self.config.base_url,
                params=params,
                timeout=self.config.timeout_seconds,
            )
            response.raise_for_status()
            return response.json()
        except requests.Timeout as e:
            raise NetworkError("Distance Matrix request timed out", cause=e)
        except (requests.RequestException, ValueError) as e:
            raise NetworkError("Distance Matrix request failed", cause=e)
