"""Bridge between a vehicle's position updates and track-mapping listeners."""

from __future__ import annotations

import logging

from pyoverdrive.exceptions import OverdriveLinkError
from pyoverdrive.listeners import TrackMappingListener
from pyoverdrive.models.notifications import PositionUpdate
from pyoverdrive.models.road_piece import RoadPieceType
from pyoverdrive.vehicle import Vehicle

_logger = logging.getLogger(__name__)


class MappingCoordinator:
    """Drive a vehicle around the track and feed mapping listeners.

    The coordinator registers itself as a position update listener on the
    vehicle.  It always tracks the latest location and road piece and
    records the road piece type seen at every location id.  While mapping
    is active every position update is forwarded to the attached mapping
    listeners as ``on_location_update`` followed by
    ``on_track_piece_discovered``.
    """

    def __init__(self, vehicle: Vehicle) -> None:
        self._vehicle = vehicle
        self._listeners: list[TrackMappingListener] = []
        self._mapping = False
        self._current_location = -1
        self._current_road_piece: RoadPieceType | None = None
        self._track_map: dict[int, RoadPieceType] = {}
        vehicle.add_listener(self)

    @property
    def vehicle(self) -> Vehicle:
        return self._vehicle

    @property
    def is_mapping(self) -> bool:
        return self._mapping

    @property
    def current_location(self) -> int:
        """Last reported location id, ``-1`` before the first update."""
        return self._current_location

    @property
    def current_road_piece(self) -> RoadPieceType | None:
        return self._current_road_piece

    @property
    def track_map(self) -> dict[int, RoadPieceType]:
        """Road piece type first seen at each location id (copy)."""
        return dict(self._track_map)

    def add_mapping_listener(self, listener: TrackMappingListener) -> None:
        if listener not in self._listeners:
            self._listeners = [*self._listeners, listener]

    def remove_mapping_listener(self, listener: TrackMappingListener) -> None:
        self._listeners = [item for item in self._listeners if item is not listener]

    def start_mapping(self, speed: int | None = None, listener: TrackMappingListener | None = None) -> None:
        """Start forwarding updates and drive at *speed*.

        Raises
        ------
        OverdriveLinkError
            The vehicle is not connected.
        """
        if not self._vehicle.is_connected():
            raise OverdriveLinkError("no vehicle connected", address=self._vehicle.address)
        if listener is not None:
            self.add_mapping_listener(listener)
        if speed is None:
            speed = self._vehicle.config.mapping_speed
        self._mapping = True
        _logger.info("Track mapping started at speed %s", speed)
        self._vehicle.set_speed(speed)

    def stop_mapping(self) -> None:
        if not self._mapping:
            return
        self._mapping = False
        _logger.info("Track mapping stopped")
        self._vehicle.stop()

    def clear_track_map(self) -> None:
        self._track_map.clear()
        self._current_location = -1
        self._current_road_piece = None

    def close(self) -> None:
        """Detach from the vehicle."""
        self._vehicle.remove_listener(self)

    def on_position_update(self, notification: PositionUpdate) -> None:
        location = notification.location
        road_piece = notification.road_piece
        self._current_location = location
        self._current_road_piece = road_piece

        if self._mapping:
            for listener in self._listeners:
                try:
                    listener.on_location_update(location, notification.ascending)
                    listener.on_track_piece_discovered(location, notification.road_piece_id, road_piece)
                except Exception:
                    _logger.warning("Mapping listener %r failed", listener, exc_info=True)

        self._track_map.setdefault(location, road_piece)
