from .graph import CityGraph, Node, Edge
from .min_heap import MinHeap, HeapEntry
from .dijkstra import Dijkstra, DijkstraResult, PathResult
from .driver import Driver, DriverRegistry, DriverStatus
from .ride_request import RideRequest
from .dispatch import DispatchEngine, MatchResult, MatchOutcome, DemandStats, DemandWindow
from .system import RideShareSystem
from .errors import StructuralError, VertexRangeError, NegativeWeightError

__version__ = "1.0.0"

__all__ = [
    # Graph
    "CityGraph",
    "Node",
    "Edge",
    # Shortest paths
    "MinHeap",
    "HeapEntry",
    "Dijkstra",
    "DijkstraResult",
    "PathResult",
    # Drivers
    "Driver",
    "DriverRegistry",
    "DriverStatus",
    # Dispatch
    "RideRequest",
    "DispatchEngine",
    "MatchResult",
    "MatchOutcome",
    "DemandStats",
    "DemandWindow",
    "RideShareSystem",
    # Errors
    "StructuralError",
    "VertexRangeError",
    "NegativeWeightError",
]
