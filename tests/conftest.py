import pytest

from ridematch.driver import Driver, DriverRegistry
from ridematch.graph import CityGraph


def build_line_graph(count: int = 5, weight: float = 1.0) -> CityGraph:
    """0 - 1 - 2 - ... - (count - 1)"""
    graph = CityGraph(count)
    for i in range(count):
        graph.add_node(i, f"Stop {i}", 24.0 + i * 0.01, 67.0)
    for i in range(count - 1):
        graph.add_edge(i, i + 1, weight, f"Road {i}-{i + 1}")
    return graph


def make_driver(driver_id: str, location: int, name: str = "") -> Driver:
    return Driver(driver_id, name or f"Driver {driver_id}", location)


@pytest.fixture
def line_graph() -> CityGraph:
    return build_line_graph()


@pytest.fixture
def registry() -> DriverRegistry:
    return DriverRegistry()
