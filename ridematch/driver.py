import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class DriverStatus(Enum):
    AVAILABLE = "AVAILABLE"
    BUSY = "BUSY"


@dataclass
class Driver:
    id: str
    name: str
    location: int
    vehicle: str = "Sedan"
    rating: float = 5.0
    status: DriverStatus = DriverStatus.AVAILABLE
    completed_trips: int = 0

    def is_available(self) -> bool:
        """Check if driver is available"""
        return self.status == DriverStatus.AVAILABLE

    def to_dict(self):
        """Convert driver data to dictionary"""
        return {
            'id': self.id,
            'name': self.name,
            'location': self.location,
            'vehicle': self.vehicle,
            'rating': self.rating,
            'status': self.status.value,
            'completed_trips': self.completed_trips,
            'available': self.is_available()
        }


class DriverRegistry:
    """Driver id -> Driver map, the single owner of driver state.

    Lookups are O(1); availability queries scan every driver. Iteration
    follows insertion order, which the dispatch engine relies on for its
    tie-break. Mutators return False for unknown ids instead of raising.
    """

    def __init__(self):
        self._drivers: Dict[str, Driver] = {}

    def add(self, driver: Driver) -> bool:
        if driver.id in self._drivers:
            logger.warning(f"Failed to add driver {driver.id}: already exists")
            return False
        self._drivers[driver.id] = driver
        logger.info(f"Added driver {driver.id} ({driver.name}) at location {driver.location}")
        return True

    def remove(self, driver_id: str) -> bool:
        if self._drivers.pop(driver_id, None) is None:
            logger.warning(f"Failed to remove driver {driver_id}: not found")
            return False
        logger.info(f"Removed driver {driver_id}")
        return True

    def get(self, driver_id: str) -> Optional[Driver]:
        return self._drivers.get(driver_id)

    def update_location(self, driver_id: str, new_location: int) -> bool:
        driver = self._drivers.get(driver_id)
        if driver is None:
            logger.warning(f"Failed to update location for driver {driver_id}: not found")
            return False
        old_location = driver.location
        driver.location = new_location
        logger.info(f"Updated driver {driver_id} location from {old_location} to {new_location}")
        return True

    def set_availability(self, driver_id: str, available: bool) -> bool:
        driver = self._drivers.get(driver_id)
        if driver is None:
            logger.warning(f"Failed to update availability for driver {driver_id}: not found")
            return False
        driver.status = DriverStatus.AVAILABLE if available else DriverStatus.BUSY
        logger.info(f"Updated driver {driver_id} availability to {driver.status.value}")
        return True

    def complete_trip(self, driver_id: str, dropoff: int) -> bool:
        """Finish a trip: the driver ends up at the dropoff and is free again"""
        driver = self._drivers.get(driver_id)
        if driver is None:
            logger.warning(f"Failed to complete trip for driver {driver_id}: not found")
            return False
        driver.location = dropoff
        driver.completed_trips += 1
        driver.status = DriverStatus.AVAILABLE
        logger.info(f"Driver {driver_id} completed a trip at location {dropoff}")
        return True

    def list_available(self) -> List[Driver]:
        return [d for d in self._drivers.values() if d.is_available()]

    def list_all(self) -> List[Driver]:
        return list(self._drivers.values())

    def count(self) -> int:
        return len(self._drivers)

    def count_available(self) -> int:
        return sum(1 for d in self._drivers.values() if d.is_available())

    def __contains__(self, driver_id):
        return driver_id in self._drivers

    def __len__(self):
        return len(self._drivers)
