"""Vehicle session: one link, one router, typed commands."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pyoverdrive import protocol
from pyoverdrive._constants import Light, TurnTrigger, TurnType
from pyoverdrive._logfmt import frame_for_log, value_for_log
from pyoverdrive.config import OverdriveConfig
from pyoverdrive.exceptions import (
    ListenerDispatchError,
    OverdriveLinkError,
    OverdriveProtocolError,
    ProtocolAssumptionViolatedError,
)
from pyoverdrive.link import VehicleLink
from pyoverdrive.models.lights import LightConfig
from pyoverdrive.models.notifications import ConnectedNotification, Notification
from pyoverdrive.router import NotificationRouter

_logger = logging.getLogger(__name__)


class Vehicle:
    """Drive one vehicle through a :class:`VehicleLink`.

    Inbound frames delivered by the link are decoded and routed to the
    listeners registered with :meth:`add_listener`.  Command methods
    encode and write a frame and return whether the link accepted it.

    Parameters
    ----------
    link : VehicleLink
        Transport to the vehicle.
    config : OverdriveConfig, optional
        Default speeds and accelerations.
    router : NotificationRouter, optional
        Router to dispatch into.  A fresh one is created by default.
    strict : bool
        Raise :class:`OverdriveLinkError` instead of returning ``False``
        when a command is issued while the link is down.
    """

    def __init__(
        self,
        link: VehicleLink,
        *,
        config: OverdriveConfig | None = None,
        router: NotificationRouter | None = None,
        strict: bool = False,
    ) -> None:
        self._link = link
        self._config = config or OverdriveConfig()
        self._router = router or NotificationRouter()
        self._strict = strict
        self._speed = 0
        self._subscribed = False
        self._disconnecting = False

    def __repr__(self) -> str:
        return f"Vehicle(address={self.address!r})"

    @property
    def address(self) -> str:
        return self._link.address

    @property
    def router(self) -> NotificationRouter:
        return self._router

    @property
    def config(self) -> OverdriveConfig:
        return self._config

    @property
    def speed(self) -> int:
        """Last speed successfully sent to the vehicle."""
        return self._speed

    @property
    def on_charger(self) -> bool:
        return self._router.on_charger

    def is_connected(self) -> bool:
        return self._link.is_connected()

    def is_ready_to_start(self) -> bool:
        """Connected and off the charger."""
        return self.is_connected() and not self.on_charger

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Any) -> None:
        self._router.add(listener)

    def remove_listener(self, listener: Any) -> None:
        self._router.remove(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> bool:
        """Open the link and enable SDK mode.

        Returns ``True`` when the link is up and the SDK mode frame was
        written.
        """
        if not self._subscribed:
            self._link.subscribe(self.on_frame)
            self._link.subscribe_connection(self._on_link_state)
            self._subscribed = True

        _logger.debug("Connecting vehicle address=%s", self.address)
        if not self._link.connect():
            _logger.info("Vehicle %s did not connect", self.address)
            return False

        if not self._link.write_raw(protocol.sdk_mode_message()):
            _logger.warning("Vehicle %s rejected SDK mode frame", self.address)
            return False

        _logger.info("Vehicle %s connected", self.address)
        self.on_connection_changed(True)
        return True

    def disconnect(self) -> None:
        """Ask the vehicle to drop the connection, then close the link."""
        if not self._link.is_connected():
            return
        self._disconnecting = True
        try:
            self._link.write_raw(protocol.disconnect_message())
        finally:
            try:
                self._link.disconnect()
            finally:
                self._disconnecting = False
            self._speed = 0
            _logger.info("Vehicle %s disconnected", self.address)
            self.on_connection_changed(False)

    def _on_link_state(self, connected: bool) -> None:
        # Link-up is reported by connect() once SDK mode is enabled.
        if connected or self._disconnecting or not self._router.connected:
            return
        self._speed = 0
        _logger.warning("Vehicle %s lost its link", self.address)
        self.on_connection_changed(False)

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def on_frame(self, frame: bytes) -> list[ListenerDispatchError]:
        """Decode and route one inbound frame.

        Frames that fail to decode are logged and dropped; the method never
        raises into the transport.
        """
        try:
            notification = protocol.decode(frame, address=self.address)
        except ProtocolAssumptionViolatedError:
            _logger.error(
                "Protocol drift from %s frame=%s",
                self.address,
                frame_for_log(frame),
                exc_info=True,
            )
            return []
        except OverdriveProtocolError as exc:
            _logger.warning("Dropping frame from %s: %s frame=%s", self.address, exc, frame_for_log(frame))
            return []
        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug("Decoded %s", value_for_log(notification.model_dump()))
        return self.dispatch(notification)

    def on_connection_changed(self, connected: bool) -> list[ListenerDispatchError]:
        return self.dispatch(ConnectedNotification(address=self.address, connected=connected))

    def dispatch(self, notification: Notification) -> list[ListenerDispatchError]:
        return self._router.dispatch(notification)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def send(self, frame: bytes) -> bool:
        """Write a pre-encoded frame."""
        if not self._link.is_connected():
            if self._strict:
                raise OverdriveLinkError("vehicle is not connected", address=self.address)
            _logger.debug("Vehicle %s not connected, dropping frame=%s", self.address, frame_for_log(frame))
            return False
        _logger.debug("Write to %s frame=%s", self.address, frame_for_log(frame))
        return self._link.write_raw(frame)

    def set_speed(self, speed: int, acceleration: int | None = None) -> bool:
        if acceleration is None:
            acceleration = self._config.default_acceleration
        sent = self.send(protocol.speed_message(speed, acceleration))
        if sent:
            self._speed = speed
        return sent

    def stop(self) -> bool:
        return self.set_speed(0)

    def change_lane(self, offset: float) -> bool:
        """Move to *offset* millimetres from the road center.

        The vehicle's reference offset is reset to the center first so
        *offset* is absolute.
        """
        if not self.send(protocol.set_offset_from_road_center_message(0.0)):
            return False
        return self.send(
            protocol.change_lane_message(
                self._config.lane_change_speed,
                self._config.lane_change_accel,
                offset,
            )
        )

    def cancel_lane_change(self) -> bool:
        return self.send(protocol.cancel_lane_change_message())

    def turn(self, turn_type: TurnType = TurnType.UTURN, trigger: TurnTrigger = TurnTrigger.IMMEDIATE) -> bool:
        return self.send(protocol.turn_message(turn_type, trigger))

    def u_turn(self) -> bool:
        return self.turn(TurnType.UTURN, TurnTrigger.IMMEDIATE)

    def set_lights(self, light: Light | int, on: bool) -> bool:
        return self.send(protocol.set_lights_message(light, on))

    def set_all_lights(self, on: bool) -> bool:
        return self.send(protocol.set_all_lights_message(on))

    def set_lights_pattern(self, configs: Sequence[LightConfig]) -> bool:
        return self.send(protocol.lights_pattern_multi_message(configs))

    def ping(self) -> bool:
        return self.send(protocol.ping_request())

    def request_version(self) -> bool:
        return self.send(protocol.version_request())

    def request_battery_level(self) -> bool:
        return self.send(protocol.battery_level_request())
