"""Top-level package for the transit router.

Answers "how do I get from A to B at time T" over a small multi-modal
network of scheduled bus trips, local transport and walking, falling
back to a quota-limited external travel-time estimator when the static
network cannot answer a segment.
"""

__version__ = "1.0.0"
