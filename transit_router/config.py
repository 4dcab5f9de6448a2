"""Centralized configuration using Pydantic Settings.

This module provides a single source of truth for all configuration:
dataset paths, the external estimator (key, quotas, cache TTL) and the
planner's policy constants.

Configuration can be overridden via environment variables:
- TR_GRAPH_DATA_DIR=/path/to/data
- TR_SEGMENTS_API_KEY=... (or GOOGLE_DM_API_KEY)
- TR_SEGMENTS_DAILY_LIMIT=50
- TR_PLANNER_DWELL_MINUTES=5
- TR_LOG_LEVEL=DEBUG
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.errors import ConfigurationError


class GraphConfig(BaseSettings):
    """Network dataset configuration.

    Environment variables prefixed with TR_GRAPH_.
    """

    model_config = SettingsConfigDict(env_prefix="TR_GRAPH_")

    data_dir: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent.parent / "data"
    )
    nodes_file: str = "nodes.json"
    edges_file: str = "edges.json"
    routes_file: str = "routes.json"

    @property
    def nodes_path(self) -> Path:
        """Full path to the nodes JSON file."""
        return self.data_dir / self.nodes_file

    @property
    def edges_path(self) -> Path:
        """Full path to the edges JSON file."""
        return self.data_dir / self.edges_file

    @property
    def routes_path(self) -> Path:
        """Full path to the routes JSON file."""
        return self.data_dir / self.routes_file


class SegmentConfig(BaseSettings):
    """External travel-time estimator configuration.

    Environment variables prefixed with TR_SEGMENTS_. The API key is also
    read from GOOGLE_DM_API_KEY.
    """

    model_config = SettingsConfigDict(env_prefix="TR_SEGMENTS_", populate_by_name=True)

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("TR_SEGMENTS_API_KEY", "GOOGLE_DM_API_KEY"),
    )
    base_url: str = "https://maps.googleapis.com/maps/api/distancematrix/json"
    timeout_seconds: float = 10.0
    daily_limit: int = 50
    monthly_limit: int = 700
    cache_ttl_days: float = 7.0
    cache_file: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parent.parent
        / "data"
        / "distance_cache.json"
    )
    default_mode: str = "driving"
    prewarm_delay_seconds: float = 0.2

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_days * 24 * 60 * 60

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class PlannerConfig(BaseSettings):
    """Policy constants of the route planner.

    Environment variables prefixed with TR_PLANNER_.
    """

    model_config = SettingsConfigDict(env_prefix="TR_PLANNER_")

    dwell_minutes: int = 5
    max_transfer_wait_minutes: int = 15
    max_options: int = 3
    local_cost_per_100m: float = 2.0


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with TR_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="TR_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.graph.nodes_path)
        print(config.segments.daily_limit)

    Environment variables prefixed with TR_.
    """

    model_config = SettingsConfigDict(env_prefix="TR_")

    graph: GraphConfig = Field(default_factory=GraphConfig)
    segments: SegmentConfig = Field(default_factory=SegmentConfig)
    planner: PlannerConfig = Field(default_factory=PlannerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the singleton application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.

    Raises:
        ConfigurationError: If an environment variable holds an invalid value.
    """
    try:
        return AppConfig()
    except ValidationError as e:
        error = e.errors()[0]
        setting = ".".join(str(part) for part in error["loc"])
        raise ConfigurationError(
            f"Invalid setting {setting}: {error['msg']}", setting_name=setting, cause=e
        )


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()
