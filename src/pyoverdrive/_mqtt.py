"""Vehicle link bridged over MQTT.

A BLE gateway (e.g. an ESP32 or a Raspberry Pi next to the track)
relays raw frames between the vehicle and a broker:

* ``{prefix}/{address}/notify`` carries every notification frame the
  vehicle emits, one frame per message;
* ``{prefix}/{address}/write`` carries command frames to the vehicle.

:class:`MqttVehicleLink` implements :class:`~pyoverdrive.link.VehicleLink`
on top of a threaded paho-mqtt client, so frame callbacks run on paho's
network thread.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyoverdrive._logfmt import frame_for_log
from pyoverdrive.config import OverdriveConfig
from pyoverdrive.exceptions import OverdriveLinkError
from pyoverdrive.link import ConnectionCallback, FrameCallback


def notify_topic(prefix: str, address: str) -> str:
    return f"{prefix}/{address}/notify"


def write_topic(prefix: str, address: str) -> str:
    return f"{prefix}/{address}/write"


def _default_client_factory(client_id: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
        client_id=client_id,
        protocol=mqtt.MQTTv5,
    )


class MqttVehicleLink:
    """Threaded paho-mqtt link to one vehicle behind a gateway."""

    def __init__(
        self,
        address: str,
        *,
        host: str,
        port: int = 1883,
        topic_prefix: str = "overdrive",
        keepalive: int = 60,
        username: str | None = None,
        password: str | None = None,
        tls: bool = False,
        client_id: str | None = None,
        connect_timeout: float = 5.0,
        on_connection_change: Callable[[bool], None] | None = None,
        client_factory: Callable[[str], mqtt.Client] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._address = address
        self._host = host
        self._port = port
        self._topic_prefix = topic_prefix
        self._keepalive = keepalive
        self._username = username
        self._password = password
        self._tls = tls
        self._client_id = client_id or f"pyoverdrive-{address.replace(':', '').lower()}"
        self._connect_timeout = connect_timeout
        self._client_factory = client_factory or _default_client_factory
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._connected = threading.Event()
        self._callbacks: list[FrameCallback] = []
        self._connection_callbacks: list[ConnectionCallback] = []
        if on_connection_change is not None:
            self._connection_callbacks.append(on_connection_change)

    @classmethod
    def from_config(cls, address: str, config: OverdriveConfig, **kwargs: Any) -> MqttVehicleLink:
        if not config.mqtt_host:
            raise OverdriveLinkError("mqtt_host is not configured", address=address)
        return cls(
            address,
            host=config.mqtt_host,
            port=config.mqtt_port,
            topic_prefix=config.mqtt_topic_prefix,
            keepalive=config.mqtt_keepalive,
            username=config.mqtt_username,
            password=config.mqtt_password,
            tls=config.mqtt_tls,
            **kwargs,
        )

    @property
    def address(self) -> str:
        return self._address

    @property
    def notify_topic(self) -> str:
        return notify_topic(self._topic_prefix, self._address)

    @property
    def write_topic(self) -> str:
        return write_topic(self._topic_prefix, self._address)

    def is_connected(self) -> bool:
        return self._connected.is_set()

    def subscribe(self, callback: FrameCallback) -> None:
        self._callbacks = [*self._callbacks, callback]

    def subscribe_connection(self, callback: ConnectionCallback) -> None:
        self._connection_callbacks = [*self._connection_callbacks, callback]

    def connect(self) -> bool:
        """Connect to the broker and subscribe to the notify topic.

        Blocks up to ``connect_timeout`` seconds for the broker's CONNACK.

        Raises
        ------
        OverdriveLinkError
            The broker could not be reached.
        """
        self.disconnect()
        self._logger.debug(
            "MQTT link connect requested host=%s port=%s topic=%s client_id=%s",
            self._host,
            self._port,
            self.notify_topic,
            self._client_id,
        )

        client = self._client_factory(self._client_id)
        client.enable_logger(self._logger)
        if self._username is not None:
            client.username_pw_set(self._username, self._password)
        if self._tls:
            client.tls_set()

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected successfully reason=%s", reason_code)
            c.subscribe(self.notify_topic, qos=0)
            self._set_connected(True)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            frame = bytes(msg.payload)
            self._logger.debug("Received frame topic=%s frame=%s", msg.topic, frame_for_log(frame))
            for callback in self._callbacks:
                try:
                    callback(frame)
                except Exception:
                    self._logger.debug("Frame callback failure", exc_info=True)

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            self._logger.debug("MQTT disconnected: %s", reason_code)
            self._set_connected(False)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(self._host, self._port, keepalive=self._keepalive)
        except OSError as exc:
            raise OverdriveLinkError(
                f"MQTT broker {self._host}:{self._port} unreachable: {exc}",
                address=self._address,
            ) from exc
        client.loop_start()
        self._client = client
        self._logger.debug("MQTT network loop started")

        if not self._connected.wait(self._connect_timeout):
            self._logger.warning("MQTT link %s not connected after %.1fs", self._address, self._connect_timeout)
            self.disconnect()
            return False
        return True

    def write_raw(self, frame: bytes) -> bool:
        client = self._client
        if client is None or not self.is_connected():
            return False
        info = client.publish(self.write_topic, bytes(frame), qos=0)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._logger.debug("MQTT publish failed rc=%s frame=%s", info.rc, frame_for_log(frame))
            return False
        return True

    def disconnect(self) -> None:
        """Stop and disconnect the current MQTT client if any."""
        client = self._client
        self._client = None
        if client is None:
            return
        try:
            if self.is_connected():
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._set_connected(False)
            self._logger.debug("MQTT network loop stopped")

    def _set_connected(self, connected: bool) -> None:
        was_connected = self._connected.is_set()
        if connected:
            self._connected.set()
        else:
            self._connected.clear()
        if was_connected == connected:
            return
        for callback in self._connection_callbacks:
            try:
                callback(connected)
            except Exception:
                self._logger.debug("Connection change callback failure", exc_info=True)
