import itertools
import logging
import threading
from typing import Dict, List, Optional

from .dijkstra import PathResult
from .dispatch import DemandStats, DispatchEngine, MatchResult
from .driver import Driver, DriverRegistry
from .graph import CityGraph
from .ride_request import RideRequest

logger = logging.getLogger(__name__)

# Demo city: 5 zones of 3 locations, roads inside each zone plus a link
# from the last location of a zone to the first of the next one.
SAMPLE_LOCATIONS = [
    "City Hall", "Financial District", "Central Station",
    "Maple Grove", "Oak Hills", "Riverside",
    "Shopping Mall", "Market Place", "Trade Center",
    "University", "Library", "General Hospital",
    "Airport", "Train Station", "Central Park",
]

SAMPLE_DRIVERS = [
    ("D001", "John", 0, "Sedan", 4.8),
    ("D002", "Sarah", 4, "SUV", 4.9),
    ("D003", "Mike", 8, "Compact", 4.7),
]

ZONES = 5
LOCATIONS_PER_ZONE = 3
BASE_LAT = 24.8600
BASE_LON = 67.0000


class RideShareSystem:
    """One city graph, one driver registry and one dispatch engine.

    Every public method holds the same re-entrant lock, so a match (scan all
    drivers, then mark the winner busy) cannot interleave with another match
    or with driver updates coming from other threads.
    """

    def __init__(self, graph: Optional[CityGraph] = None, registry: Optional[DriverRegistry] = None):
        self._lock = threading.RLock()
        self.graph = graph if graph is not None else self._build_sample_city()
        self.registry = registry if registry is not None else DriverRegistry()
        self.dispatch = DispatchEngine(self.graph, self.registry)
        self._driver_ids = itertools.count(1)

    @staticmethod
    def _build_sample_city() -> CityGraph:
        graph = CityGraph(ZONES * LOCATIONS_PER_ZONE)

        for zone in range(ZONES):
            for i in range(LOCATIONS_PER_ZONE):
                loc_id = zone * LOCATIONS_PER_ZONE + i
                lat = BASE_LAT + zone * 0.02 + (i % 2) * 0.008
                lon = BASE_LON + zone * 0.03 + i * 0.01
                graph.add_node(loc_id, SAMPLE_LOCATIONS[loc_id], lat, lon)

        for zone in range(ZONES):
            base = zone * LOCATIONS_PER_ZONE
            graph.add_edge(base, base + 1, 1.0, f"Zone {zone} Street")
            graph.add_edge(base + 1, base + 2, 1.0, f"Zone {zone} Avenue")
            if zone < ZONES - 1:
                graph.add_edge(base + 2, base + LOCATIONS_PER_ZONE, 1.5, f"Highway {zone + 1}")

        return graph

    def initialize_sample_data(self):
        """Reset to the demo city with its default drivers"""
        with self._lock:
            self.graph = self._build_sample_city()
            self.registry = DriverRegistry()
            self.dispatch = DispatchEngine(self.graph, self.registry)
            self._driver_ids = itertools.count(len(SAMPLE_DRIVERS) + 1)

            for driver_id, name, location, vehicle, rating in SAMPLE_DRIVERS:
                self.registry.add(Driver(driver_id, name, location, vehicle, rating))

            logger.info(
                f"Sample data initialized: {self.graph.vertex_count} locations, "
                f"{self.registry.count()} drivers"
            )

    # Drivers

    def add_driver(self, name: str, location: int, vehicle: str = "Sedan",
                   rating: float = 5.0, driver_id: Optional[str] = None) -> Optional[Driver]:
        """Register a driver; returns None when the id is already taken"""
        with self._lock:
            if driver_id is None:
                driver_id = self._next_driver_id()
            driver = Driver(driver_id, name, location, vehicle, rating)
            if not self.registry.add(driver):
                return None
            return driver

    def _next_driver_id(self) -> str:
        while True:
            driver_id = f"D{next(self._driver_ids):03d}"
            if driver_id not in self.registry:
                return driver_id

    def remove_driver(self, driver_id: str) -> bool:
        with self._lock:
            return self.registry.remove(driver_id)

    def get_driver(self, driver_id: str) -> Optional[Driver]:
        with self._lock:
            return self.registry.get(driver_id)

    def update_driver_location(self, driver_id: str, location: int) -> bool:
        with self._lock:
            return self.registry.update_location(driver_id, location)

    def set_driver_availability(self, driver_id: str, available: bool) -> bool:
        with self._lock:
            return self.registry.set_availability(driver_id, available)

    def complete_trip(self, driver_id: str, dropoff: int) -> bool:
        with self._lock:
            return self.registry.complete_trip(driver_id, dropoff)

    def list_drivers(self) -> List[Driver]:
        with self._lock:
            return self.registry.list_all()

    def list_available_drivers(self) -> List[Driver]:
        with self._lock:
            return self.registry.list_available()

    # Routing and dispatch

    def shortest_path(self, source: int, destination: int) -> PathResult:
        with self._lock:
            return self.dispatch.dijkstra.find_shortest_path(source, destination)

    def request_ride(self, pickup: int, destination: int, requester_id: str) -> MatchResult:
        with self._lock:
            return self.dispatch.submit_request(pickup, destination, requester_id)

    def enqueue_ride(self, pickup: int, destination: int, requester_id: str) -> RideRequest:
        with self._lock:
            request = self.dispatch.create_request(pickup, destination, requester_id)
            self.dispatch.enqueue(request)
            return request

    def process_next_ride(self) -> MatchResult:
        with self._lock:
            return self.dispatch.process_next()

    def analyze_demand(self) -> DemandStats:
        with self._lock:
            return self.dispatch.analyze_demand()

    def get_analytics(self) -> Dict:
        """Get system analytics"""
        with self._lock:
            total_drivers = self.registry.count()
            available_drivers = self.registry.count_available()
            utilization = (total_drivers - available_drivers) / total_drivers if total_drivers > 0 else 0

            analytics = self.dispatch.analyze_demand().to_dict()
            analytics.update({
                'total_drivers': total_drivers,
                'available_drivers': available_drivers,
                'driver_utilization': round(utilization, 2),
                'queue_size': self.dispatch.queue_size(),
                'successful_matches': self.dispatch.successful_matches,
                'failed_matches': self.dispatch.failed_matches
            })
            return analytics

    def get_state(self) -> Dict:
        """Get complete system state"""
        with self._lock:
            return {
                'city': self.graph.to_dict(),
                'drivers': [d.to_dict() for d in self.registry.list_all()],
                'pending_requests': [r.to_dict() for r in self.dispatch.pending_requests()],
                'analytics': self.get_analytics()
            }
