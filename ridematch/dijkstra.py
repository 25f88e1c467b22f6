"""
Dijkstra's shortest path algorithm over a CityGraph.

Time complexity is O((V + E) log V) with the indexed binary heap from
``min_heap``. Edge weights are never negative; the graph rejects them when
roads are added.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from . import config
from .graph import CityGraph
from .min_heap import MinHeap

logger = logging.getLogger(__name__)

NO_PREDECESSOR = -1


@dataclass
class DijkstraResult:
    """Distance and predecessor tables of one single-source run"""
    success: bool = True
    distances: List[float] = field(default_factory=list)
    predecessors: List[int] = field(default_factory=list)
    error_message: str = ""
    nodes_processed: int = 0


@dataclass
class PathResult:
    """Route between two locations; ``found`` is False when unreachable"""
    found: bool = False
    path: List[int] = field(default_factory=list)
    total_distance: float = 0.0
    eta_minutes: float = 0.0
    road_names: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'found': self.found,
            'path': list(self.path),
            'total_distance': round(self.total_distance, 2),
            'eta_minutes': round(self.eta_minutes, 1),
            'road_names': list(self.road_names)
        }


class Dijkstra:
    def __init__(self, graph: CityGraph, avg_speed_kmh: Optional[float] = None):
        self.graph = graph
        self.avg_speed_kmh = avg_speed_kmh if avg_speed_kmh is not None else config.AVG_SPEED_KMH
        if not self.avg_speed_kmh > 0:
            raise ValueError(f"Average speed must be positive, got {self.avg_speed_kmh}")

    def find_shortest_paths(self, source: int) -> DijkstraResult:
        """Run Dijkstra from source over the whole graph"""
        result = DijkstraResult()

        if not self.graph.node_exists(source):
            result.success = False
            result.error_message = "Source node does not exist"
            logger.debug(f"Dijkstra aborted: node {source} does not exist")
            return result

        n = self.graph.vertex_count
        result.distances = [math.inf] * n
        result.predecessors = [NO_PREDECESSOR] * n
        result.distances[source] = 0.0

        heap = MinHeap()
        heap.insert(source, 0.0)
        logger.debug(f"Starting Dijkstra from node {source}")

        while not heap.is_empty():
            current = heap.extract_min()
            u = current.vertex

            if current.distance > result.distances[u]:
                continue

            result.nodes_processed += 1
            for edge in self.graph.get_adjacent_nodes(u):
                v = edge.destination
                new_distance = result.distances[u] + edge.weight
                if new_distance < result.distances[v]:
                    logger.debug(f"  Relaxing edge {u} -> {v}: {result.distances[v]:.2f} to {new_distance:.2f}")
                    result.distances[v] = new_distance
                    result.predecessors[v] = u
                    heap.decrease_key(v, new_distance)

        logger.debug(f"Dijkstra completed. Processed {result.nodes_processed} nodes.")
        return result

    def find_shortest_path(self, source: int, destination: int) -> PathResult:
        """Shortest route from source to destination with ETA and road names"""
        path_result = PathResult()

        if not self.graph.node_exists(source) or not self.graph.node_exists(destination):
            return path_result

        dijkstra_result = self.find_shortest_paths(source)
        if not dijkstra_result.success:
            return path_result

        distance = dijkstra_result.distances[destination]
        if math.isinf(distance):
            logger.debug(f"No path found from {source} to {destination}")
            return path_result

        path_result.found = True
        path_result.path = self.reconstruct_path(source, destination, dijkstra_result.predecessors)
        path_result.total_distance = distance
        path_result.eta_minutes = self.calculate_eta(distance, self.avg_speed_kmh)
        path_result.road_names = self._road_names(path_result.path)

        logger.debug(
            f"Path found: {' -> '.join(map(str, path_result.path))} "
            f"(Distance: {distance:.2f}, ETA: {path_result.eta_minutes:.1f} min)"
        )
        return path_result

    def _road_names(self, path: List[int]) -> List[str]:
        # With parallel roads between two nodes the first one added is
        # reported, which is not necessarily the one the distance came from.
        names = []
        for src, dest in zip(path, path[1:]):
            for edge in self.graph.get_adjacent_nodes(src):
                if edge.destination == dest:
                    names.append(edge.road_name)
                    break
        return names

    @staticmethod
    def reconstruct_path(source: int, destination: int, predecessors: List[int]) -> List[int]:
        """Walk predecessors back from destination, then reverse"""
        path = []
        current = destination
        while current != NO_PREDECESSOR:
            path.append(current)
            if current == source:
                break
            current = predecessors[current]
        path.reverse()
        return path

    @staticmethod
    def calculate_eta(distance: float, avg_speed_kmh: float = None) -> float:
        """Travel time in minutes at a constant average speed"""
        if avg_speed_kmh is None:
            avg_speed_kmh = config.AVG_SPEED_KMH
        if not avg_speed_kmh > 0:
            raise ValueError(f"Average speed must be positive, got {avg_speed_kmh}")
        return (distance / avg_speed_kmh) * 60
