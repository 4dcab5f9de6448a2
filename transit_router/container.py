"""Dependency injection container.

This module provides a simple DI container without external frameworks.
Services are built once at startup and handed to each other explicitly,
so tests can wire fabricated graphs and estimators instead.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        planner = container.resolve(RoutePlanner)

        # Testing
        container = Container()
        container.register(TransitGraph, lambda: fabricated_graph)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[type[Any], Callable[[], Any]] = field(
        default_factory=dict, repr=False
    )
    _singletons: Dict[type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: set[type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a type.

        Args:
            port_type: The type to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: type[Any]) -> Any:
        """Resolve an instance of a registered type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: type[Any]) -> bool:
        return port_type in self._factories

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        The graph is loaded from the configured dataset on first resolve,
        and the segment provider is seeded from the persisted cache file
        when one exists.
        """
        from .adapters.cache import JsonSegmentStore
        from .adapters.distance_matrix import GoogleDistanceMatrixClient
        from .adapters.graph import JsonGraphRepository
        from .graph import TransitGraph
        from .services import NetworkStatusService, RoutePlanner, SegmentProvider

        config = config or get_config()
        container = cls(config=config)

        container.register(
            JsonGraphRepository,
            lambda: JsonGraphRepository(config.graph),
        )
        container.register(
            TransitGraph,
            lambda: container.resolve(JsonGraphRepository).load_into(TransitGraph()),
        )
        container.register(
            JsonSegmentStore,
            lambda: JsonSegmentStore(config.segments.cache_file),
        )

        def create_segment_provider() -> SegmentProvider:
            provider = SegmentProvider(
                graph=container.resolve(TransitGraph),
                transport=GoogleDistanceMatrixClient(config.segments),
                config=config.segments,
            )
            provider.load_cache(container.resolve(JsonSegmentStore).load())
            return provider

        container.register(SegmentProvider, create_segment_provider)

        container.register(
            RoutePlanner,
            lambda: RoutePlanner(
                graph=container.resolve(TransitGraph),
                segments=container.resolve(SegmentProvider),
                config=config.planner,
            ),
        )
        container.register(
            NetworkStatusService,
            lambda: NetworkStatusService(
                graph=container.resolve(TransitGraph),
                segments=container.resolve(SegmentProvider),
            ),
        )

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container."""
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container."""
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
