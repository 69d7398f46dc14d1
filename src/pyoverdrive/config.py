"""Runtime configuration for pyoverdrive."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyoverdrive._constants import DEFAULT_ACCELERATION
from pyoverdrive.exceptions import OverdriveConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_int(env_key: str, value: str) -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        raise OverdriveConfigError(f"{env_key} must be an integer, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class OverdriveConfig:
    """Library configuration.

    Parameters
    ----------
    mapping_speed : int
        Speed in mm/s used while a vehicle drives the track for mapping.
    default_acceleration : int
        Acceleration in mm/s² sent with speed commands.
    lane_change_speed : int
        Horizontal speed in mm/s for lane changes.
    lane_change_accel : int
        Horizontal acceleration in mm/s² for lane changes.
    mqtt_host : str or None
        Broker host of the BLE-to-MQTT gateway. ``None`` disables the
        MQTT link.
    mqtt_port : int
        Broker port.
    mqtt_topic_prefix : str
        Topic prefix; frames travel on ``{prefix}/{address}/notify`` and
        ``{prefix}/{address}/write``.
    mqtt_keepalive : int
        MQTT keepalive in seconds.
    mqtt_username : str or None
        Broker username.
    mqtt_password : str or None
        Broker password.
    mqtt_tls : bool
        Enable TLS towards the broker.
    """

    mapping_speed: int = 300
    default_acceleration: int = DEFAULT_ACCELERATION
    lane_change_speed: int = 1000
    lane_change_accel: int = 1000
    mqtt_host: str | None = None
    mqtt_port: int = 1883
    mqtt_topic_prefix: str = "overdrive"
    mqtt_keepalive: int = 60
    mqtt_username: str | None = None
    mqtt_password: str | None = None
    mqtt_tls: bool = False

    @classmethod
    def from_env(cls, **overrides: Any) -> OverdriveConfig:
        """Create configuration from ``OVERDRIVE_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        OverdriveConfigError
            A numeric variable does not parse as an integer.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "OVERDRIVE_MQTT_HOST": "mqtt_host",
            "OVERDRIVE_MQTT_TOPIC_PREFIX": "mqtt_topic_prefix",
            "OVERDRIVE_MQTT_USERNAME": "mqtt_username",
            "OVERDRIVE_MQTT_PASSWORD": "mqtt_password",
        }
        _ENV_INT_MAP = {
            "OVERDRIVE_MAPPING_SPEED": "mapping_speed",
            "OVERDRIVE_DEFAULT_ACCELERATION": "default_acceleration",
            "OVERDRIVE_LANE_CHANGE_SPEED": "lane_change_speed",
            "OVERDRIVE_LANE_CHANGE_ACCEL": "lane_change_accel",
            "OVERDRIVE_MQTT_PORT": "mqtt_port",
            "OVERDRIVE_MQTT_KEEPALIVE": "mqtt_keepalive",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = val

        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_int(env_key, val)

        if "mqtt_tls" not in overrides:
            config_kwargs["mqtt_tls"] = _env_bool(env.get("OVERDRIVE_MQTT_TLS"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
