from __future__ import annotations

import logging
import struct
from collections.abc import Callable

import pytest

from pyoverdrive import protocol
from pyoverdrive.config import OverdriveConfig
from pyoverdrive.exceptions import OverdriveLinkError
from pyoverdrive.link import VehicleLink
from pyoverdrive.models.notifications import ConnectedNotification, PositionUpdate
from pyoverdrive.registry import VehicleRegistry
from pyoverdrive.vehicle import Vehicle


class _FakeLink:
    def __init__(self, address: str = "AA:BB:CC:DD:EE:FF", *, connect_ok: bool = True) -> None:
        self._address = address
        self._connect_ok = connect_ok
        self._connected = False
        self.written: list[bytes] = []
        self.callbacks: list[Callable[[bytes], None]] = []
        self.connection_callbacks: list[Callable[[bool], None]] = []
        self.disconnect_calls = 0

    @property
    def address(self) -> str:
        return self._address

    def connect(self) -> bool:
        self._connected = self._connect_ok
        return self._connect_ok

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.drop()

    def is_connected(self) -> bool:
        return self._connected

    def write_raw(self, frame: bytes) -> bool:
        self.written.append(bytes(frame))
        return True

    def subscribe(self, callback: Callable[[bytes], None]) -> None:
        self.callbacks.append(callback)

    def subscribe_connection(self, callback: Callable[[bool], None]) -> None:
        self.connection_callbacks.append(callback)

    def emit(self, frame: bytes) -> None:
        for callback in self.callbacks:
            callback(frame)

    def drop(self) -> None:
        self._connected = False
        for callback in self.connection_callbacks:
            callback(False)


class _Positions:
    def __init__(self) -> None:
        self.updates: list[PositionUpdate] = []
        self.connected: list[bool] = []

    def on_position_update(self, notification: PositionUpdate) -> None:
        self.updates.append(notification)

    def on_connected(self, notification: ConnectedNotification) -> None:
        self.connected.append(notification.connected)


def _position_frame(location: int, road_piece_id: int) -> bytes:
    payload = struct.pack("<bBfHB", location, road_piece_id, 0.0, 0, 0)
    return bytes([len(payload) + 1, 0x27]) + payload


def test_fake_link_satisfies_protocol() -> None:
    assert isinstance(_FakeLink(), VehicleLink)


def test_connect_sends_sdk_mode_and_notifies() -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)

    assert vehicle.connect() is True

    assert link.written == [protocol.sdk_mode_message()]
    assert listener.connected == [True]
    assert vehicle.router.connected is True
    assert len(link.callbacks) == 1


def test_connect_subscribes_once() -> None:
    link = _FakeLink()
    vehicle = Vehicle(link)
    vehicle.connect()
    vehicle.connect()
    assert len(link.callbacks) == 1
    assert len(link.connection_callbacks) == 1


def test_failed_connect() -> None:
    link = _FakeLink(connect_ok=False)
    vehicle = Vehicle(link)
    assert vehicle.connect() is False
    assert link.written == []


def test_inbound_frames_are_routed() -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)
    vehicle.connect()

    link.emit(_position_frame(9, 17))

    assert [update.location for update in listener.updates] == [9]
    assert listener.updates[0].address == link.address


def test_bad_frames_are_logged_and_dropped(caplog: pytest.LogCaptureFixture) -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)
    vehicle.connect()

    with caplog.at_level(logging.WARNING, logger="pyoverdrive.vehicle"):
        link.emit(b"\x01")
        link.emit(_position_frame(1, 99))
        link.emit(bytes([0x03, 0x29, 0x01, 0x00]))

    assert listener.updates == []
    levels = [record.levelname for record in caplog.records]
    assert levels.count("WARNING") == 2
    assert levels.count("ERROR") == 1


def test_commands_when_connected() -> None:
    link = _FakeLink()
    vehicle = Vehicle(link, config=OverdriveConfig(default_acceleration=500))
    vehicle.connect()
    link.written.clear()

    assert vehicle.set_speed(400) is True
    assert vehicle.speed == 400
    assert vehicle.change_lane(-23.0) is True
    vehicle.ping()
    vehicle.request_version()
    vehicle.request_battery_level()
    vehicle.u_turn()

    assert link.written == [
        protocol.speed_message(400, 500),
        protocol.set_offset_from_road_center_message(0.0),
        protocol.change_lane_message(1000, 1000, -23.0),
        protocol.ping_request(),
        protocol.version_request(),
        protocol.battery_level_request(),
        protocol.turn_message(),
    ]


def test_commands_when_disconnected() -> None:
    link = _FakeLink()
    vehicle = Vehicle(link)
    assert vehicle.set_speed(300) is False
    assert vehicle.speed == 0
    assert link.written == []


def test_strict_mode_raises() -> None:
    vehicle = Vehicle(_FakeLink(), strict=True)
    with pytest.raises(OverdriveLinkError) as excinfo:
        vehicle.stop()
    assert excinfo.value.address == "AA:BB:CC:DD:EE:FF"


def test_disconnect_sends_disconnect_first() -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)
    vehicle.connect()
    link.written.clear()

    vehicle.disconnect()

    assert link.written == [protocol.disconnect_message()]
    assert link.disconnect_calls == 1
    assert listener.connected == [True, False]
    assert vehicle.router.connected is False


def test_link_drop_clears_connected_state(caplog: pytest.LogCaptureFixture) -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)
    vehicle.connect()
    vehicle.set_speed(500)

    with caplog.at_level(logging.WARNING, logger="pyoverdrive.vehicle"):
        link.drop()

    assert vehicle.router.connected is False
    assert vehicle.router.connected is link.is_connected()
    assert listener.connected == [True, False]
    assert vehicle.speed == 0
    assert "lost its link" in caplog.text


def test_link_drop_after_disconnect_is_ignored() -> None:
    link = _FakeLink()
    listener = _Positions()
    vehicle = Vehicle(link)
    vehicle.add_listener(listener)
    vehicle.connect()
    vehicle.disconnect()

    link.drop()

    assert listener.connected == [True, False]


def test_decoded_notifications_are_logged_at_debug(caplog: pytest.LogCaptureFixture) -> None:
    link = _FakeLink()
    vehicle = Vehicle(link)
    vehicle.connect()

    with caplog.at_level(logging.DEBUG, logger="pyoverdrive.vehicle"):
        link.emit(bytes([0x02, 0x4D, 0xAB]))

    assert "02 4d ab" in caplog.text


def test_ready_to_start_requires_off_charger() -> None:
    link = _FakeLink()
    vehicle = Vehicle(link)
    vehicle.connect()
    assert vehicle.is_ready_to_start() is True

    link.emit(bytes([0x05, 0x3F, 0x01, 0x00, 0x00, 0x01]))
    assert vehicle.on_charger is True
    assert vehicle.is_ready_to_start() is False


class TestVehicleRegistry:
    def test_register_and_lookup(self) -> None:
        registry = VehicleRegistry()
        first = registry.create(_FakeLink("A"))
        second = registry.create(_FakeLink("B"))

        assert registry.get("A") is first
        assert "B" in registry
        assert len(registry) == 2
        assert list(registry) == [first, second]
        assert registry.registered_at("A") is not None

    def test_same_address_replaces(self) -> None:
        registry = VehicleRegistry()
        registry.create(_FakeLink("A"))
        replacement = registry.create(_FakeLink("A"))
        assert registry.all() == [replacement]

    def test_remove_and_connected(self) -> None:
        registry = VehicleRegistry()
        connected = registry.create(_FakeLink("A"))
        registry.create(_FakeLink("B"))
        connected.connect()

        assert registry.connected() == [connected]
        assert registry.remove("B") is not None
        assert registry.remove("B") is None
        registry.clear()
        assert len(registry) == 0

    def test_registries_are_independent(self) -> None:
        one, two = VehicleRegistry(), VehicleRegistry()
        one.create(_FakeLink("A"))
        assert two.get("A") is None
