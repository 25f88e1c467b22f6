"""
Greedy nearest-driver dispatch.

For every request the engine runs one full Dijkstra per available driver
(driver location -> pickup), keeps the driver with the smallest finite
distance, then routes pickup -> destination. The first driver in registry
order wins a tie; this is an arbitrary but fixed rule, not a quality of
service policy.

A successful match marks the driver BUSY in the registry straight away.
There is no operation to undo a dispatch.

The engine is not thread safe. Callers serialise access to the engine and
its registry (see ``RideShareSystem``).
"""

import itertools
import logging
from collections import Counter, deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Deque, List, Optional

from . import config
from .dijkstra import Dijkstra, PathResult
from .driver import Driver, DriverRegistry
from .graph import CityGraph
from .ride_request import RideRequest

logger = logging.getLogger(__name__)


class MatchOutcome(Enum):
    MATCHED = "MATCHED"
    INVALID_PICKUP = "INVALID_PICKUP"
    INVALID_DESTINATION = "INVALID_DESTINATION"
    SAME_LOCATION = "SAME_LOCATION"
    NO_AVAILABLE_DRIVERS = "NO_AVAILABLE_DRIVERS"
    NO_REACHABLE_DRIVER = "NO_REACHABLE_DRIVER"
    NO_ROUTE = "NO_ROUTE"
    QUEUE_EMPTY = "QUEUE_EMPTY"


OUTCOME_MESSAGES = {
    MatchOutcome.MATCHED: "Ride matched successfully",
    MatchOutcome.INVALID_PICKUP: "Invalid pickup location",
    MatchOutcome.INVALID_DESTINATION: "Invalid destination location",
    MatchOutcome.SAME_LOCATION: "Pickup and destination cannot be the same",
    MatchOutcome.NO_AVAILABLE_DRIVERS: "No available drivers found",
    MatchOutcome.NO_REACHABLE_DRIVER: "No available driver can reach the pickup location",
    MatchOutcome.NO_ROUTE: "No route found from pickup to destination",
    MatchOutcome.QUEUE_EMPTY: "No pending ride requests",
}


@dataclass
class MatchResult:
    outcome: MatchOutcome
    request: Optional[RideRequest] = None
    driver: Optional[Driver] = None
    to_pickup: PathResult = field(default_factory=PathResult)
    to_destination: PathResult = field(default_factory=PathResult)

    @property
    def success(self) -> bool:
        return self.outcome == MatchOutcome.MATCHED

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self.outcome]

    @property
    def total_distance(self) -> float:
        return self.to_pickup.total_distance + self.to_destination.total_distance

    @property
    def total_eta_minutes(self) -> float:
        return self.to_pickup.eta_minutes + self.to_destination.eta_minutes

    def to_dict(self):
        data = {
            'success': self.success,
            'outcome': self.outcome.value,
            'message': self.message,
            'request': self.request.to_dict() if self.request else None
        }
        if self.success:
            data.update({
                'driver': self.driver.to_dict(),
                'driver_to_pickup': self.to_pickup.to_dict(),
                'pickup_to_destination': self.to_destination.to_dict(),
                'total_distance': round(self.total_distance, 2),
                'total_eta_minutes': round(self.total_eta_minutes, 1)
            })
        return data


@dataclass
class NearestDriver:
    driver: Optional[Driver]
    route: PathResult
    candidates: int


@dataclass
class DemandStats:
    total_tracked: int = 0
    hotspots: List[int] = field(default_factory=list)

    def to_dict(self):
        return {
            'total_tracked': self.total_tracked,
            'hotspots': list(self.hotspots)
        }


class DemandWindow:
    """The most recent ``capacity`` requests; older ones fall off the front"""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("Demand window capacity must be positive")
        self._requests: Deque[RideRequest] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._requests.maxlen

    def add(self, request: RideRequest):
        self._requests.append(request)

    def requests(self) -> List[RideRequest]:
        return list(self._requests)

    def hotspots(self, count: int) -> List[int]:
        """Most frequent pickups, ties kept in first-seen order"""
        frequency = Counter(request.pickup for request in self._requests)
        return [location for location, _ in frequency.most_common(count)]

    def __len__(self):
        return len(self._requests)


class DispatchEngine:
    def __init__(self, graph: CityGraph, registry: DriverRegistry,
                 avg_speed_kmh: Optional[float] = None,
                 window_size: Optional[int] = None,
                 hotspot_count: Optional[int] = None):
        self.graph = graph
        self.registry = registry
        self.dijkstra = Dijkstra(graph, avg_speed_kmh)
        self.demand_window = DemandWindow(window_size if window_size is not None else config.DEMAND_WINDOW_SIZE)
        self.hotspot_count = hotspot_count if hotspot_count is not None else config.HOTSPOT_COUNT

        self._queue: Deque[RideRequest] = deque()
        self._request_ids = itertools.count(1)
        self.successful_matches = 0
        self.failed_matches = 0

    def create_request(self, pickup: int, destination: int, requester_id: str) -> RideRequest:
        request_id = f"REQ-{next(self._request_ids):04d}"
        return RideRequest(request_id, pickup, destination, requester_id)

    def submit_request(self, pickup: int, destination: int, requester_id: str) -> MatchResult:
        """Create a request and match it immediately"""
        return self.process_request(self.create_request(pickup, destination, requester_id))

    def enqueue(self, request: RideRequest):
        """Queue a request for later processing and record it for demand analysis"""
        self._queue.append(request)
        self.demand_window.add(request)
        logger.info(
            f"Added ride request {request.request_id} "
            f"(pickup: {request.pickup}, destination: {request.destination})"
        )

    def process_next(self) -> MatchResult:
        """Dequeue the oldest request and match it"""
        if not self._queue:
            return MatchResult(MatchOutcome.QUEUE_EMPTY)
        return self.process_request(self._queue.popleft())

    def queue_size(self) -> int:
        return len(self._queue)

    def pending_requests(self) -> List[RideRequest]:
        return list(self._queue)

    def find_nearest_driver(self, pickup: int) -> NearestDriver:
        """Greedy search: shortest finite driver -> pickup distance wins"""
        available = self.registry.list_available()
        nearest = NearestDriver(driver=None, route=PathResult(), candidates=len(available))

        if not available:
            logger.info("No available drivers found")
            return nearest

        logger.debug(f"Searching for nearest driver among {len(available)} available drivers")
        for driver in available:
            route = self.dijkstra.find_shortest_path(driver.location, pickup)
            if not route.found:
                continue
            # strict "<": the earlier driver in registry order keeps a tie
            if nearest.driver is None or route.total_distance < nearest.route.total_distance:
                nearest.driver = driver
                nearest.route = route
                logger.debug(
                    f"  Driver {driver.id} at location {driver.location} "
                    f"has distance {route.total_distance:.2f} to pickup"
                )

        if nearest.driver is None:
            logger.info(f"Could not find a driver that can reach location {pickup}")
        return nearest

    def process_request(self, request: RideRequest) -> MatchResult:
        logger.info(f"Processing ride request {request.request_id}")
        result = self._match(request)

        if result.success:
            self.successful_matches += 1
            logger.info(
                f"Ride {request.request_id} matched with driver {result.driver.id}. "
                f"Total distance: {result.total_distance:.2f}, "
                f"Total ETA: {result.total_eta_minutes:.1f} min"
            )
        else:
            self.failed_matches += 1
            logger.info(f"Ride {request.request_id} failed: {result.message}")
        return result

    def _match(self, request: RideRequest) -> MatchResult:
        if not self.graph.node_exists(request.pickup):
            return MatchResult(MatchOutcome.INVALID_PICKUP, request)
        if not self.graph.node_exists(request.destination):
            return MatchResult(MatchOutcome.INVALID_DESTINATION, request)
        if request.pickup == request.destination:
            return MatchResult(MatchOutcome.SAME_LOCATION, request)

        nearest = self.find_nearest_driver(request.pickup)
        if nearest.driver is None:
            if nearest.candidates == 0:
                return MatchResult(MatchOutcome.NO_AVAILABLE_DRIVERS, request)
            return MatchResult(MatchOutcome.NO_REACHABLE_DRIVER, request)

        to_destination = self.dijkstra.find_shortest_path(request.pickup, request.destination)
        if not to_destination.found:
            return MatchResult(MatchOutcome.NO_ROUTE, request)

        self.registry.set_availability(nearest.driver.id, False)
        return MatchResult(
            MatchOutcome.MATCHED,
            request,
            driver=replace(nearest.driver),
            to_pickup=nearest.route,
            to_destination=to_destination
        )

    def analyze_demand(self) -> DemandStats:
        """Read-only report over the demand window"""
        return DemandStats(
            total_tracked=len(self.demand_window),
            hotspots=self.demand_window.hotspots(self.hotspot_count)
        )
