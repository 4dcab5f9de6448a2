"""External estimator adapters - Implementations of DistanceMatrixPort.

Available implementations:
- GoogleDistanceMatrixClient: Google Distance Matrix JSON API over requests
"""

from .google_client import GoogleDistanceMatrixClient

__all__ = ["GoogleDistanceMatrixClient"]
