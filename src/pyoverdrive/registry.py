"""Explicit per-application vehicle registry."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from typing import Any

from pyoverdrive.link import VehicleLink
from pyoverdrive.vehicle import Vehicle

_logger = logging.getLogger(__name__)


class VehicleRegistry:
    """Vehicles known to one application, keyed by link address.

    Safe to use from several threads; iteration works on a snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._vehicles: dict[str, Vehicle] = {}
        self._registered_at: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, address: object) -> bool:
        return address in self._vehicles

    def __iter__(self) -> Iterator[Vehicle]:
        return iter(self.all())

    def register(self, vehicle: Vehicle) -> Vehicle:
        """Add *vehicle*, replacing any vehicle with the same address."""
        with self._lock:
            previous = self._vehicles.get(vehicle.address)
            self._vehicles[vehicle.address] = vehicle
            self._registered_at[vehicle.address] = time.time()
        if previous is not None and previous is not vehicle:
            _logger.debug("Replaced vehicle registration address=%s", vehicle.address)
        return vehicle

    def create(self, link: VehicleLink, **kwargs: Any) -> Vehicle:
        """Build a :class:`Vehicle` around *link* and register it."""
        return self.register(Vehicle(link, **kwargs))

    def get(self, address: str) -> Vehicle | None:
        return self._vehicles.get(address)

    def remove(self, address: str) -> Vehicle | None:
        with self._lock:
            self._registered_at.pop(address, None)
            return self._vehicles.pop(address, None)

    def registered_at(self, address: str) -> float | None:
        """Epoch seconds at which *address* was last registered."""
        return self._registered_at.get(address)

    def all(self) -> list[Vehicle]:
        """Vehicles in registration order."""
        with self._lock:
            return list(self._vehicles.values())

    def connected(self) -> list[Vehicle]:
        return [vehicle for vehicle in self.all() if vehicle.is_connected()]

    def clear(self) -> None:
        with self._lock:
            self._vehicles.clear()
            self._registered_at.clear()
