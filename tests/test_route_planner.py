"""Tests for itinerary enumeration and ranking."""

import pytest

from conftest import FakeSegments, make_graph, single_trip_route
from transit_router.domain.errors import InvalidTimeError, QuotaExceededError
from transit_router.domain.models import (
    Edge,
    LegSource,
    Mode,
    OptionCategory,
    OptionType,
    Route,
    RouteLeg,
    RouteOption,
    SegmentEstimate,
    Trip,
)
from transit_router.services import RoutePlanner


@pytest.fixture
def make_planner(planner_config, unconfigured_segments):
    def _make(graph, segments=None):
        return RoutePlanner(
            graph=graph,
            segments=segments or unconfigured_segments,
            config=planner_config,
        )

    return _make


def test_single_trip_direct_scenario(abc_graph, make_planner):
    response = make_planner(abc_graph).plan_route("A", "C", "07:55")

    assert len(response.options) == 1
    option = response.options[0]
    assert option.option_type is OptionType.DIRECT
    assert option.total_time_min == 15
    assert option.transfers == 0
    assert option.local_time_min == 0
    assert option.label == "Fastest Route"
    # Fastest and least-local coincide.
    assert option.category is OptionCategory.BOTH

    (leg,) = option.legs
    assert (leg.from_node, leg.to_node, leg.mode) == ("A", "C", Mode.BUS)
    assert (leg.departure, leg.arrival) == ("08:00", "08:10")
    assert leg.duration_min == 10
    assert (leg.route_id, leg.trip_id) == ("R1", "R1_T1")


def test_same_origin_and_destination_is_empty(abc_graph, make_planner):
    response = make_planner(abc_graph).plan_route("A", "A", "08:00")

    assert response.options == ()
    assert response.to_dict()["options"] == []


def test_unknown_endpoints_are_empty_not_errors(abc_graph, make_planner):
    planner = make_planner(abc_graph)

    assert planner.plan_route("A", "NOWHERE", "08:00").is_empty
    assert planner.plan_route("NOWHERE", "C", "08:00").is_empty


def test_malformed_time_is_rejected(abc_graph, make_planner):
    with pytest.raises(InvalidTimeError):
        make_planner(abc_graph).plan_route("A", "C", "8h30")


def test_departed_trip_is_skipped(abc_graph, make_planner):
    # Boarding at B is estimated at 08:05
    planner = make_planner(abc_graph)

    assert planner.plan_route("B", "C", "08:06").is_empty
    response = planner.plan_route("B", "C", "08:05")
    assert response.options[0].total_time_min == 5
    assert response.options[0].legs[0].departure == "08:05"


def test_wrong_direction_is_not_served(abc_graph, make_planner):
    assert make_planner(abc_graph).plan_route("C", "A", "07:00").is_empty


def test_identical_trips_collapse_to_one_option(make_planner):
    route = Route(
        route_id="R1",
        name="R1 Line",
        trips=(
            Trip("R1_T1", "to_campus", ("A", "B"), "08:00"),
            Trip("R1_T2", "to_campus", ("A", "B"), "09:00"),
        ),
    )
    other = single_trip_route("R2", ["A", "B"], "08:20")
    graph = make_graph(["A", "B"], routes=[route, other])

    response = make_planner(graph).plan_route("A", "B", "07:50")

    assert len(response.options) == 1
    assert response.options[0].legs[0].trip_id == "R1_T1"
    assert response.options[0].total_time_min == 15


def test_hybrid_uses_local_graph_path(make_planner):
    graph = make_graph(
        ["A", "B", "C", "D"],
        edges=[Edge("C", "D", Mode.WALK, 4, cost=0, distance_meters=300)],
        routes=[single_trip_route("R1", ["A", "B", "C"], "08:00")],
    )

    response = make_planner(graph).plan_route("A", "D", "08:00")

    assert len(response.options) == 1
    option = response.options[0]
    assert option.total_time_min == 14
    assert option.local_time_min == 4
    assert option.local_distance_meters == 300
    assert not option.uses_external
    bus, local = option.legs
    assert (bus.from_node, bus.to_node, bus.arrival) == ("A", "C", "08:10")
    assert (local.from_node, local.to_node, local.mode) == ("C", "D", Mode.LOCAL)
    assert local.source is LegSource.GRAPH


def test_hybrid_falls_back_to_external_estimate(make_planner):
    graph = make_graph(
        ["A", "B", "D"],
        routes=[single_trip_route("R1", ["A", "B"], "08:00")],
    )
    segments = FakeSegments(
        estimates={("B", "D"): SegmentEstimate(distance_meters=1040, duration_seconds=610)},
        error=QuotaExceededError("Daily API quota exceeded", period="daily"),
    )

    response = make_planner(graph, segments).plan_route("A", "D", "08:00")

    assert len(response.options) == 1
    option = response.options[0]
    assert option.uses_external
    assert option.total_time_min == 5 + 10
    assert option.total_cost == 20
    assert option.legs[1].source is LegSource.EXTERNAL
    assert option.legs[1].submode == "driving"
    assert ("A", "D", "driving") in segments.calls


def test_hybrid_keeps_fastest_drop_off_per_route(make_planner):
    graph = make_graph(
        ["A", "B", "C", "D"],
        edges=[
            Edge("B", "D", Mode.LOCAL, 30, cost=40),
            Edge("C", "D", Mode.WALK, 3),
        ],
        routes=[single_trip_route("R1", ["A", "B", "C"], "08:00")],
    )

    response = make_planner(graph).plan_route("A", "D", "08:00")

    hybrids = [option for option in response.options if option.legs[0].mode is Mode.BUS]
    assert len(hybrids) == 1
    assert hybrids[0].legs[0].to_node == "C"
    assert hybrids[0].total_time_min == 13


def test_transfer_within_window(make_planner):
    graph = make_graph(
        ["A", "X", "D"],
        routes=[
            single_trip_route("R1", ["A", "X"], "08:00"),
            single_trip_route("R2", ["X", "D"], "08:10"),
        ],
    )

    response = make_planner(graph).plan_route("A", "D", "08:00")

    assert len(response.options) == 1
    option = response.options[0]
    assert option.option_type is OptionType.TRANSFER
    assert option.transfers == 1
    assert option.total_time_min == 5 + 5 + 5
    first, second = option.legs
    assert (first.route_id, first.arrival) == ("R1", "08:05")
    assert (second.route_id, second.departure) == ("R2", "08:10")


def test_transfer_label_uses_stop_name(make_planner):
    graph = make_graph(
        ["A", "X", "D"],
        routes=[
            single_trip_route("R1", ["A", "X"], "08:00"),
            single_trip_route("R2", ["X", "D"], "08:05"),
        ],
    )
    planner = make_planner(graph)

    options = planner._transfer_options("A", "D", 480)

    assert [option.label for option in options] == ["Transfer at X stop"]
    assert options[0].total_time_min == 10


def test_transfer_with_longest_allowed_wait(make_planner):
    graph = make_graph(
        ["A", "X", "D"],
        routes=[
            single_trip_route("R1", ["A", "X"], "08:00"),
            single_trip_route("R2", ["X", "D"], "08:20"),
        ],
    )

    response = make_planner(graph).plan_route("A", "D", "08:00")

    assert [(option.option_type, option.total_time_min) for option in response.options] == [
        (OptionType.TRANSFER, 25)
    ]


@pytest.mark.parametrize("second_departure", ["08:21", "08:00"])
def test_transfer_outside_window_is_discarded(make_planner, second_departure):
    graph = make_graph(
        ["A", "X", "D"],
        routes=[
            single_trip_route("R1", ["A", "X"], "08:00"),
            single_trip_route("R2", ["X", "D"], second_departure),
        ],
    )

    assert make_planner(graph).plan_route("A", "D", "08:00").is_empty


def test_local_only_follows_graph_edges(make_planner):
    graph = make_graph(
        ["A", "B", "C"],
        edges=[
            Edge("A", "B", Mode.WALK, 6, cost=0, distance_meters=500),
            Edge("B", "C", Mode.LOCAL, 5, cost=20, distance_meters=1200),
        ],
    )

    response = make_planner(graph).plan_route("A", "C", "10:00")

    (option,) = response.options
    assert option.option_type is OptionType.LOCAL_ONLY
    assert [leg.mode for leg in option.legs] == [Mode.WALK, Mode.LOCAL]
    assert option.total_time_min == 11
    assert option.local_time_min == 11
    assert option.total_cost == 20
    assert option.local_distance_meters == 1700


def test_local_only_external_fallback(make_planner):
    graph = make_graph(["A", "B"])
    segments = FakeSegments(
        estimates={("A", "B"): SegmentEstimate(distance_meters=2460, duration_seconds=900)}
    )

    (option,) = make_planner(graph, segments).plan_route("A", "B", "10:00").options

    assert option.uses_external
    assert option.total_time_min == 15
    assert option.total_cost == 50
    assert option.to_dict()["usesDistanceMatrix"] is True
    assert option.to_dict()["legs"][0]["source"] == "distance_matrix"


def test_estimator_failures_degrade_to_fewer_options(abc_graph, make_planner):
    segments = FakeSegments()

    response = make_planner(abc_graph, segments).plan_route("A", "C", "07:55")

    assert len(response.options) == 1
    assert segments.calls


def test_fastest_and_least_local_are_listed_first(make_planner):
    graph = make_graph(
        ["A", "B", "C", "D"],
        edges=[
            Edge("A", "D", Mode.WALK, 12),
            Edge("C", "D", Mode.LOCAL, 2, cost=10),
        ],
        routes=[
            single_trip_route("R1", ["A", "B", "C", "D"], "08:30"),
            single_trip_route("R2", ["A", "D"], "08:40"),
        ],
    )

    response = make_planner(graph).plan_route("A", "D", "08:00")

    labels = [option.label for option in response.options]
    categories = [option.category for option in response.options]
    assert labels[:2] == ["Fastest Route", "Least Local Transport"]
    assert categories[:2] == [OptionCategory.FASTEST, OptionCategory.LEAST_LOCAL]
    # Walking all the way is quickest; riding R1 needs no local transport.
    assert response.options[0].option_type is OptionType.LOCAL_ONLY
    assert response.options[1].local_time_min == 0
    assert len(response.options) == 3


def test_plan_route_is_deterministic(make_planner):
    graph = make_graph(
        ["A", "B", "C", "D"],
        edges=[Edge("A", "D", Mode.WALK, 40), Edge("B", "D", Mode.LOCAL, 6, cost=15)],
        routes=[
            single_trip_route("R1", ["A", "B", "C"], "08:05"),
            single_trip_route("R2", ["C", "D"], "08:25"),
            single_trip_route("R3", ["B", "D"], "08:20"),
        ],
    )
    planner = make_planner(graph)

    first = planner.plan_route("A", "D", "08:00")
    second = planner.plan_route("A", "D", "08:00")

    assert first == second
    assert first.options


def _option(label, total, local, *legs):
    return RouteOption(
        label=label,
        category=OptionCategory.FASTEST,
        option_type=OptionType.DIRECT,
        total_time_min=total,
        local_time_min=local,
        legs=tuple(RouteLeg(mode=mode, from_node=a, to_node=b) for a, b, mode in legs),
    )


def test_rank_deduplicates_and_limits(make_planner, abc_graph):
    planner = make_planner(abc_graph)
    bus = _option("bus", 20, 0, ("A", "C", Mode.BUS))
    bus_again = _option("bus again", 18, 0, ("A", "C", Mode.BUS))
    walk = _option("walk", 10, 10, ("A", "C", Mode.WALK))
    hybrid = _option("hybrid", 16, 4, ("A", "B", Mode.BUS), ("B", "C", Mode.LOCAL))
    slow = _option("slow", 40, 0, ("A", "B", Mode.BUS), ("B", "C", Mode.BUS))

    ranked = planner.rank([bus, bus_again, walk, hybrid, slow])

    assert [option.label for option in ranked] == [
        "Fastest Route",
        "Least Local Transport",
        "hybrid",
    ]
    assert ranked[0].identity == walk.identity
    assert ranked[1].identity == bus.identity
    assert ranked[1].total_time_min == 20
    # Inputs are relabelled on copies.
    assert walk.label == "walk"


def test_rank_of_nothing_is_empty(make_planner, abc_graph):
    assert make_planner(abc_graph).rank([]) == []
