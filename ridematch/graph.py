import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import NegativeWeightError, VertexRangeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    id: int
    name: str
    latitude: float
    longitude: float

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude
        }


@dataclass(frozen=True)
class Edge:
    destination: int
    weight: float
    road_name: str = ""

    def to_dict(self):
        return {
            'destination': self.destination,
            'weight': self.weight,
            'road_name': self.road_name
        }


class CityGraph:
    """Weighted adjacency-list graph of city locations and roads.

    The vertex count is fixed at construction. Nodes and edges can only be
    appended; nothing is ever removed.
    """

    def __init__(self, vertex_count: int):
        if vertex_count < 0:
            raise ValueError("vertex_count cannot be negative")
        self._vertex_count = vertex_count
        self.adjacency: List[List[Edge]] = [[] for _ in range(vertex_count)]
        self.nodes: Dict[int, Node] = {}
        # one entry per add_edge / add_directed_edge call
        self._roads: List[Tuple[int, Edge, bool]] = []

    @property
    def vertex_count(self) -> int:
        return self._vertex_count

    def _check_vertex(self, vertex: int):
        if not 0 <= vertex < self._vertex_count:
            raise VertexRangeError(vertex, self._vertex_count)

    def _check_edge(self, src: int, dest: int, weight: float):
        self._check_vertex(src)
        self._check_vertex(dest)
        # "not >=" also catches NaN
        if not weight >= 0:
            raise NegativeWeightError(src, dest, weight)

    def add_node(self, id: int, name: str, lat: float, lon: float) -> Node:
        """Add (or replace) the metadata for a location"""
        self._check_vertex(id)
        node = Node(id, name, lat, lon)
        self.nodes[id] = node
        return node

    def add_edge(self, src: int, dest: int, weight: float, road_name: str = ""):
        """Add a two-way road; both directions are inserted together"""
        self._check_edge(src, dest, weight)
        edge = Edge(dest, weight, road_name)
        self.adjacency[src].append(edge)
        self.adjacency[dest].append(Edge(src, weight, road_name))
        self._roads.append((src, edge, False))

    def add_directed_edge(self, src: int, dest: int, weight: float, road_name: str = ""):
        """Add a one-way road from src to dest"""
        self._check_edge(src, dest, weight)
        edge = Edge(dest, weight, road_name)
        self.adjacency[src].append(edge)
        self._roads.append((src, edge, True))

    def get_adjacent_nodes(self, vertex: int) -> List[Edge]:
        self._check_vertex(vertex)
        return self.adjacency[vertex]

    def get_node(self, id: int) -> Optional[Node]:
        return self.nodes.get(id)

    def node_exists(self, id: int) -> bool:
        return id in self.nodes

    def get_all_nodes(self) -> Dict[int, Node]:
        return dict(self.nodes)

    def edge_count(self) -> int:
        """Number of directed edge records"""
        return sum(len(edges) for edges in self.adjacency)

    def validate(self) -> bool:
        """Integrity scan over every stored edge"""
        for src, edges in enumerate(self.adjacency):
            for edge in edges:
                if not 0 <= edge.destination < self._vertex_count:
                    logger.warning(f"Edge {src} -> {edge.destination} points outside the graph")
                    return False
                if not edge.weight >= 0:
                    logger.warning(f"Edge {src} -> {edge.destination} has invalid weight {edge.weight}")
                    return False
        return True

    def roads(self) -> Iterator[Tuple[int, Edge, bool]]:
        """Yield each road once as (source, edge, one_way) in insertion order"""
        return iter(self._roads)

    def to_dict(self):
        """Convert graph data to dictionary for JSON serialization"""
        return {
            'vertex_count': self._vertex_count,
            'nodes': [node.to_dict() for _, node in sorted(self.nodes.items())],
            'roads': [
                {
                    'source': src,
                    'destination': edge.destination,
                    'weight': edge.weight,
                    'road_name': edge.road_name,
                    'one_way': one_way
                }
                for src, edge, one_way in self.roads()
            ]
        }
