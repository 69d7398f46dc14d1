from __future__ import annotations

import struct
from collections.abc import Callable

import pytest

from pyoverdrive import protocol
from pyoverdrive.config import OverdriveConfig
from pyoverdrive.exceptions import OverdriveLinkError
from pyoverdrive.models.road_piece import RoadPieceType
from pyoverdrive.topology import TopologyType, TrackTopologyAnalyzer
from pyoverdrive.tracking import DeadReckoningMapper, MapperState, MappingCoordinator, TrackMapData
from pyoverdrive.vehicle import Vehicle


class _FakeLink:
    address = "AA:BB"

    def __init__(self) -> None:
        self._connected = False
        self.written: list[bytes] = []
        self.callbacks: list[Callable[[bytes], None]] = []

    def connect(self) -> bool:
        self._connected = True
        return True

    def disconnect(self) -> None:
        self._connected = False

    def is_connected(self) -> bool:
        return self._connected

    def write_raw(self, frame: bytes) -> bool:
        self.written.append(frame)
        return True

    def subscribe(self, callback: Callable[[bytes], None]) -> None:
        self.callbacks.append(callback)

    def subscribe_connection(self, callback: Callable[[bool], None]) -> None:
        pass

    def emit(self, location: int, road_piece_id: int, *, reverse: bool = False) -> None:
        payload = struct.pack("<bBfHB", location, road_piece_id, 0.0, 300, 0x40 if reverse else 0)
        frame = bytes([len(payload) + 1, 0x27]) + payload
        for callback in self.callbacks:
            callback(frame)


class _Events:
    def __init__(self) -> None:
        self.events: list[tuple[str, int]] = []

    def on_location_update(self, location_id: int, ascending: bool) -> None:
        self.events.append(("location", location_id))

    def on_track_piece_discovered(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None:
        self.events.append(("piece", location_id))


@pytest.fixture
def link() -> _FakeLink:
    return _FakeLink()


@pytest.fixture
def vehicle(link: _FakeLink) -> Vehicle:
    vehicle = Vehicle(link, config=OverdriveConfig(mapping_speed=250))
    vehicle.connect()
    link.written.clear()
    return vehicle


def test_start_mapping_requires_connection(link: _FakeLink) -> None:
    coordinator = MappingCoordinator(Vehicle(link))
    with pytest.raises(OverdriveLinkError):
        coordinator.start_mapping()


def test_start_and_stop_drive_the_vehicle(vehicle: Vehicle, link: _FakeLink) -> None:
    coordinator = MappingCoordinator(vehicle)

    coordinator.start_mapping()
    assert coordinator.is_mapping
    coordinator.stop_mapping()
    coordinator.stop_mapping()

    assert link.written == [
        protocol.speed_message(250, vehicle.config.default_acceleration),
        protocol.speed_message(0, vehicle.config.default_acceleration),
    ]


def test_events_are_forwarded_in_order(vehicle: Vehicle, link: _FakeLink) -> None:
    events = _Events()
    coordinator = MappingCoordinator(vehicle)

    link.emit(1, 36)
    coordinator.start_mapping(speed=300, listener=events)
    link.emit(2, 36)

    assert events.events == [("location", 2), ("piece", 2)]
    assert coordinator.current_location == 2
    assert coordinator.current_road_piece is RoadPieceType.STRAIGHT


def test_track_map_keeps_first_sighting(vehicle: Vehicle, link: _FakeLink) -> None:
    coordinator = MappingCoordinator(vehicle)
    link.emit(5, 17)
    link.emit(5, 36)
    link.emit(6, 36)

    assert coordinator.track_map == {5: RoadPieceType.CORNER, 6: RoadPieceType.STRAIGHT}
    coordinator.clear_track_map()
    assert coordinator.track_map == {}
    assert coordinator.current_location == -1
    assert coordinator.current_road_piece is None


def test_failing_mapping_listener_does_not_block_others(vehicle: Vehicle, link: _FakeLink) -> None:
    class _Broken:
        def on_location_update(self, location_id: int, ascending: bool) -> None:
            raise RuntimeError("broken")

        def on_track_piece_discovered(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None:
            raise RuntimeError("broken")

    events = _Events()
    coordinator = MappingCoordinator(vehicle)
    coordinator.add_mapping_listener(_Broken())
    coordinator.add_mapping_listener(events)
    coordinator.start_mapping()

    link.emit(3, 36)

    assert events.events == [("location", 3), ("piece", 3)]


def test_close_detaches(vehicle: Vehicle, link: _FakeLink) -> None:
    coordinator = MappingCoordinator(vehicle)
    coordinator.close()
    link.emit(3, 36)
    assert coordinator.current_location == -1


def test_full_mapping_run(vehicle: Vehicle, link: _FakeLink) -> None:
    mapper = DeadReckoningMapper()
    analyzer = TrackTopologyAnalyzer()
    coordinator = MappingCoordinator(vehicle)
    coordinator.add_mapping_listener(mapper)
    coordinator.add_mapping_listener(analyzer)
    mapper.start()
    coordinator.start_mapping()

    # The last corner steps back onto the start cell and closes the loop.
    lap = [(1, 33), (10, 36), (20, 17), (30, 18), (40, 39), (50, 20), (60, 23)]
    for _ in range(2):
        for location, road_piece_id in lap:
            link.emit(location, road_piece_id)
    link.emit(1, 33)
    coordinator.stop_mapping()

    assert mapper.state is MapperState.COMPLETED
    pieces = mapper.snapshot()
    assert [piece.road_piece_id for piece in pieces] == [33, 36, 17, 18, 39, 20]
    assert pieces[4].coordinate == (1, 1)

    track = TrackMapData(pieces=pieces)
    result = track.find_by_location_and_id(40, 39)
    assert result is not None
    assert result.piece.coordinate == (1, 1)

    topology = analyzer.get_topology()
    assert topology.track_length == 7
    assert topology.type is TopologyType.SIMPLE_LOOP
