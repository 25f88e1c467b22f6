import pytest
from conftest import build_line_graph, make_driver

from ridematch.dispatch import DemandWindow, DispatchEngine, MatchOutcome
from ridematch.driver import DriverRegistry
from ridematch.graph import CityGraph
from ridematch.ride_request import RideRequest


def _engine(graph, *drivers, **kwargs):
    registry = DriverRegistry()
    for driver in drivers:
        registry.add(driver)
    return DispatchEngine(graph, registry, **kwargs), registry


def _two_islands() -> CityGraph:
    graph = CityGraph(4)
    for i in range(4):
        graph.add_node(i, f"N{i}", 0.0, 0.0)
    graph.add_edge(0, 1, 1.0)
    graph.add_edge(2, 3, 1.0)
    return graph


def test_single_driver_on_line_graph(line_graph):
    engine, registry = _engine(line_graph, make_driver("D001", 0))

    result = engine.submit_request(pickup=2, destination=4, requester_id="P1")

    assert result.success
    assert result.outcome == MatchOutcome.MATCHED
    assert result.driver.id == "D001"
    assert result.to_pickup.path == [0, 1, 2]
    assert result.to_pickup.total_distance == 2.0
    assert result.to_destination.path == [2, 3, 4]
    assert result.to_destination.total_distance == 2.0
    assert result.total_distance == 4.0
    assert result.total_eta_minutes == pytest.approx(6.0)
    assert not registry.get("D001").is_available()


def test_no_available_drivers(line_graph):
    engine, registry = _engine(line_graph, make_driver("D001", 0))
    registry.set_availability("D001", False)
    before = engine.analyze_demand()

    result = engine.submit_request(2, 4, "P1")

    assert not result.success
    assert result.outcome == MatchOutcome.NO_AVAILABLE_DRIVERS
    assert result.message == "No available drivers found"
    assert engine.queue_size() == 0
    assert engine.analyze_demand() == before


def test_empty_registry_has_no_available_drivers(line_graph):
    engine, _ = _engine(line_graph)
    assert engine.submit_request(1, 3, "P1").outcome == MatchOutcome.NO_AVAILABLE_DRIVERS


def test_no_reachable_driver_on_disconnected_graph():
    engine, registry = _engine(_two_islands(), make_driver("D001", 0))

    result = engine.submit_request(2, 3, "P1")

    assert result.outcome == MatchOutcome.NO_REACHABLE_DRIVER
    assert result.outcome != MatchOutcome.NO_AVAILABLE_DRIVERS
    assert registry.get("D001").is_available()


def test_unreachable_destination_keeps_driver_free():
    engine, registry = _engine(_two_islands(), make_driver("D001", 0))

    result = engine.submit_request(1, 3, "P1")

    assert result.outcome == MatchOutcome.NO_ROUTE
    assert registry.get("D001").is_available()


def test_same_location_never_searches_drivers(line_graph, monkeypatch):
    engine, _ = _engine(line_graph, make_driver("D001", 0))

    def fail(*args, **kwargs):
        raise AssertionError("driver search should not run")

    monkeypatch.setattr(engine, "find_nearest_driver", fail)
    result = engine.submit_request(3, 3, "P1")

    assert result.outcome == MatchOutcome.SAME_LOCATION
    assert result.message == "Pickup and destination cannot be the same"


@pytest.mark.parametrize("pickup,destination,outcome", [
    (9, 1, MatchOutcome.INVALID_PICKUP),
    (-1, 1, MatchOutcome.INVALID_PICKUP),
    (1, 9, MatchOutcome.INVALID_DESTINATION),
    (9, 9, MatchOutcome.INVALID_PICKUP),
])
def test_invalid_locations(line_graph, pickup, destination, outcome):
    engine, registry = _engine(line_graph, make_driver("D001", 0))

    assert engine.submit_request(pickup, destination, "P1").outcome == outcome
    assert registry.get("D001").is_available()


def test_nearest_driver_wins():
    graph = build_line_graph(7)
    engine, registry = _engine(graph, make_driver("FAR", 0), make_driver("NEAR", 5))

    result = engine.submit_request(4, 6, "P1")

    assert result.driver.id == "NEAR"
    assert result.to_pickup.path == [5, 4]
    assert registry.get("FAR").is_available()


def test_tie_goes_to_first_registered_driver(line_graph):
    engine, _ = _engine(line_graph, make_driver("LEFT", 0), make_driver("RIGHT", 4))

    assert engine.submit_request(2, 3, "P1").driver.id == "LEFT"


def test_driver_at_pickup_has_zero_distance(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 1), make_driver("D002", 2))

    result = engine.submit_request(2, 0, "P1")

    assert result.driver.id == "D002"
    assert result.to_pickup.path == [2]
    assert result.to_pickup.total_distance == 0.0


def test_matched_driver_is_not_dispatched_twice(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0), make_driver("D002", 4))

    first = engine.submit_request(1, 2, "P1")
    second = engine.submit_request(1, 2, "P2")
    third = engine.submit_request(1, 2, "P3")

    assert first.driver.id == "D001"
    assert second.driver.id == "D002"
    assert third.outcome == MatchOutcome.NO_AVAILABLE_DRIVERS


def test_matching_reads_current_registry_state(line_graph):
    engine, registry = _engine(line_graph, make_driver("D001", 0), make_driver("D002", 4))
    registry.update_location("D002", 3)
    registry.update_location("D001", 4)

    assert engine.submit_request(2, 0, "P1").driver.id == "D002"


def test_driver_snapshot_does_not_alias_registry(line_graph):
    engine, registry = _engine(line_graph, make_driver("D001", 0))

    result = engine.submit_request(2, 4, "P1")
    registry.update_location("D001", 4)

    assert result.driver.location == 0
    assert not result.driver.is_available()


def test_queue_is_fifo(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0), make_driver("D002", 4))
    first = engine.create_request(1, 2, "P1")
    second = engine.create_request(3, 2, "P2")
    engine.enqueue(first)
    engine.enqueue(second)

    assert engine.queue_size() == 2
    assert engine.process_next().request is first
    assert engine.process_next().request is second
    assert engine.queue_size() == 0


def test_process_empty_queue_is_benign(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0))

    result = engine.process_next()

    assert result.outcome == MatchOutcome.QUEUE_EMPTY
    assert not result.success
    assert engine.failed_matches == 0


def test_request_ids_are_sequential(line_graph):
    engine, _ = _engine(line_graph)
    ids = [engine.create_request(0, 1, "P").request_id for _ in range(3)]
    assert ids == ["REQ-0001", "REQ-0002", "REQ-0003"]


def test_demand_window_keeps_most_recent_requests(line_graph):
    engine, _ = _engine(line_graph, window_size=20)
    # first five pickups fall out of the window
    pickups = [4, 4, 4, 4, 4] + [1, 1, 1, 2, 2, 3] + [0] * 6 + [2] * 8
    for pickup in pickups:
        engine.enqueue(engine.create_request(pickup, 0, "P"))

    stats = engine.analyze_demand()

    assert len(pickups) == 25
    assert stats.total_tracked == 20
    assert stats.hotspots == [2, 0, 1]
    assert 4 not in stats.hotspots


def test_hotspot_ties_keep_first_seen_order():
    window = DemandWindow(10)
    for i, pickup in enumerate([3, 1, 2, 1, 3, 2, 5]):
        window.add(RideRequest(f"R{i}", pickup, 0, "P"))

    assert window.hotspots(3) == [3, 1, 2]


def test_analyze_demand_is_read_only(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0))
    engine.enqueue(engine.create_request(2, 4, "P1"))

    before = engine.analyze_demand()
    after = engine.analyze_demand()

    assert before == after
    assert engine.queue_size() == 1


def test_match_counters(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0))
    engine.submit_request(2, 4, "P1")
    engine.submit_request(2, 2, "P2")
    engine.submit_request(1, 3, "P3")

    assert engine.successful_matches == 1
    assert engine.failed_matches == 2
    assert engine.analyze_demand().total_tracked == 0


def test_demand_window_rejects_zero_capacity():
    with pytest.raises(ValueError):
        DemandWindow(0)


def test_match_result_to_dict(line_graph):
    engine, _ = _engine(line_graph, make_driver("D001", 0))

    data = engine.submit_request(2, 4, "P1").to_dict()

    assert data['success'] is True
    assert data['outcome'] == "MATCHED"
    assert data['driver']['id'] == "D001"
    assert data['driver_to_pickup']['path'] == [0, 1, 2]
    assert data['pickup_to_destination']['path'] == [2, 3, 4]
    assert data['total_distance'] == 4.0
    assert data['request']['requester_id'] == "P1"

    failure = engine.submit_request(2, 4, "P2").to_dict()
    assert failure['success'] is False
    assert failure['outcome'] == "NO_AVAILABLE_DRIVERS"
    assert 'driver' not in failure


def test_engine_rejects_zero_speed(line_graph):
    with pytest.raises(ValueError):
        _engine(line_graph, make_driver("D001", 0), avg_speed_kmh=0)
