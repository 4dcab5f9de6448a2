"""End-to-end tests of the command line over the bundled dataset."""

import json

import pytest

from transit_router.cli import main
from transit_router.config import AppConfig, SegmentConfig
from transit_router.container import Container
from transit_router.services import NetworkStatusService


@pytest.fixture
def container(tmp_path):
    segments = SegmentConfig().model_copy(
        update={"api_key": "", "cache_file": tmp_path / "distance_cache.json"}
    )
    config = AppConfig().model_copy(update={"segments": segments})
    return Container.create_default(config)


def _run(capsys, container, *argv):
    code = main(list(argv), container=container)
    out = capsys.readouterr().out
    return code, json.loads(out) if out.strip() else None


def test_plan_to_campus(capsys, container):
    code, payload = _run(capsys, container, "plan", "TILAGOR", "CAMPUS", "07:00")

    assert code == 0
    assert payload["from"] == "TILAGOR"
    assert payload["requestTime"] == "07:00"
    options = payload["options"]
    assert 1 <= len(options) <= 3
    assert options[0]["label"] == "Fastest Route"
    trips = [leg.get("trip_id") for option in options for leg in option["legs"]]
    assert "R1_T1" in trips
    assert not any(option["usesDistanceMatrix"] for option in options)


def test_plan_after_last_trip_falls_back_to_local_transport(capsys, container):
    code, payload = _run(capsys, container, "plan", "KUMARPARA", "CAMPUS", "23:00")

    assert code == 0
    # Local transport still connects the two.
    assert all(option["type"] == "local_only" for option in payload["options"])


def test_plan_invalid_time_exits_with_error(capsys, container):
    code = main(["plan", "TILAGOR", "CAMPUS", "25:00"], container=container)

    assert code == 2
    assert "HH:MM" in capsys.readouterr().err


def test_nodes_and_routes(capsys, container):
    _, nodes = _run(capsys, container, "nodes")
    _, routes = _run(capsys, container, "routes")

    assert nodes["count"] == 11
    assert {"id": "CAMPUS", "name": "University Campus", "type": "destination"} in nodes["nodes"]
    assert routes["routes"] == [
        {"route_id": "R1", "name": "Tilagor Line", "trips_count": 3},
        {"route_id": "R2", "name": "Chowhatta Line", "trips_count": 2},
    ]


def test_health_without_key(capsys, container):
    code, health = _run(capsys, container, "health")

    assert code == 0
    assert health["status"] == "healthy"
    assert health["graph"] == {"nodes": 11, "routes": 2}
    estimator = health["distanceMatrix"]
    assert estimator["available"] is False
    assert estimator["usage"] == {"monthly": "0/700", "daily": "0/50"}
    assert estimator["cache"]["hitRate"] == "N/A"


def test_prewarm_requires_key(capsys, container, tmp_path):
    code = main(["prewarm"], container=container)

    assert code == 1
    assert "not configured" in capsys.readouterr().err
    assert not (tmp_path / "distance_cache.json").exists()


def test_stop_pairs_are_unique_and_ordered(container):
    pairs = container.resolve(NetworkStatusService).stop_pairs("walking")

    assert pairs[0] == ("TILAGOR", "NAIORPUL", "walking")
    assert len(pairs) == len(set(pairs))
    # 6 hops each way on R1, 5 each way on R2.
    assert len(pairs) == 22
