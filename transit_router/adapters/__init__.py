"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the application to external systems like:
- Dataset storage (JSON files)
- The external travel-time estimator (Google Distance Matrix)
- Segment caching (in-memory, JSON file)
"""
