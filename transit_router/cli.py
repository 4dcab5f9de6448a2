"""Command-line interface for transit-router."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .config import get_config
from .container import Container
from .domain.errors import TransitRouterError
from .services import NetworkStatusService, RoutePlanner, SegmentProvider


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    observability = get_config().observability
    level = logging.DEBUG if verbose else getattr(logging, observability.level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=observability.format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_plan(args: argparse.Namespace, container: Container) -> int:
    """Execute plan command."""
    planner: RoutePlanner = container.resolve(RoutePlanner)
    response = planner.plan_route(args.origin, args.destination, args.time, args.current_route)
    _print_json(response.to_dict())
    return 0


def cmd_nodes(args: argparse.Namespace, container: Container) -> int:
    """Execute nodes command."""
    _print_json(container.resolve(NetworkStatusService).list_nodes())
    return 0


def cmd_routes(args: argparse.Namespace, container: Container) -> int:
    """Execute routes command."""
    _print_json(container.resolve(NetworkStatusService).list_routes())
    return 0


def cmd_health(args: argparse.Namespace, container: Container) -> int:
    """Execute health command."""
    _print_json(container.resolve(NetworkStatusService).health())
    return 0


def cmd_prewarm(args: argparse.Namespace, container: Container) -> int:
    """Fetch estimates for every consecutive stop pair and save the cache file."""
    from .adapters.cache import JsonSegmentStore

    provider: SegmentProvider = container.resolve(SegmentProvider)
    if not provider.is_configured:
        print("Error: Distance Matrix API key not configured", file=sys.stderr)
        return 1

    status: NetworkStatusService = container.resolve(NetworkStatusService)
    pairs = status.stop_pairs(args.mode)
    report = provider.prewarm(pairs, delay_seconds=args.delay)

    container.resolve(JsonSegmentStore).save(provider.export_cache())
    _print_json(
        {
            "requested": report.requested,
            "fetched": report.fetched,
            "cached": report.cached,
            "failed": [list(failure) for failure in report.failures],
            "usage": provider.get_stats().to_dict(),
        }
    )
    return 0 if not report.failures else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transit-router",
        description="Plan bus, local transport and walking itineraries",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    plan_parser = subparsers.add_parser("plan", help="Plan a route")
    plan_parser.add_argument("origin", help="Origin node id")
    plan_parser.add_argument("destination", help="Destination node id")
    plan_parser.add_argument("time", help="Departure time, HH:MM")
    plan_parser.add_argument("--current-route", default=None, help="Route currently ridden")
    plan_parser.set_defaults(func=cmd_plan)

    nodes_parser = subparsers.add_parser("nodes", help="List nodes")
    nodes_parser.set_defaults(func=cmd_nodes)

    routes_parser = subparsers.add_parser("routes", help="List bus routes")
    routes_parser.set_defaults(func=cmd_routes)

    health_parser = subparsers.add_parser("health", help="Show graph and estimator status")
    health_parser.set_defaults(func=cmd_health)

    prewarm_parser = subparsers.add_parser(
        "prewarm", help="Pre-populate the persisted segment cache"
    )
    prewarm_parser.add_argument("--mode", default="driving", choices=["driving", "walking"])
    prewarm_parser.add_argument(
        "--delay", type=float, default=None, help="Seconds to wait after each API call"
    )
    prewarm_parser.set_defaults(func=cmd_prewarm)

    return parser


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(args.verbose)
        container = container or Container.create_default()
        return args.func(args, container)
    except TransitRouterError as e:
        print(f"Error: {e}", file=sys.stderr)
        logging.getLogger(__name__).debug("Command failed", exc_info=True)
        return 2


if __name__ == "__main__":
    sys.exit(main())
