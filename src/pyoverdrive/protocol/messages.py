"""Outbound command frames.

Every function returns the complete frame ``[size, msg_id, payload...]``
where ``size`` counts the id byte plus the payload.  Multi-byte fields are
little-endian; floats are IEEE-754 single precision.

Layouts follow Anki's ``protocol.h``.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable

from pyoverdrive._constants import (
    DEFAULT_ACCELERATION,
    MAX_LIGHT_CHANNELS,
    MAX_LIGHT_INTENSITY,
    Light,
    LightChannel,
    LightEffect,
    MessageId,
    TurnTrigger,
    TurnType,
)
from pyoverdrive.models.lights import LightConfig

_INT16_MIN = -0x8000
_INT16_MAX = 0x7FFF


def _frame(msg_id: MessageId, payload: bytes = b"") -> bytes:
    return bytes((len(payload) + 1, int(msg_id))) + payload


def _check_int16(name: str, value: int) -> int:
    value = int(value)
    if not _INT16_MIN <= value <= _INT16_MAX:
        raise ValueError(f"{name} must fit a signed 16-bit field, got {value}")
    return value


def _check_byte(name: str, value: int) -> int:
    value = int(value)
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit an unsigned byte, got {value}")
    return value


def sdk_mode_message() -> bytes:
    """Enable SDK mode.  Must be sent once after connecting."""
    return _frame(MessageId.SDK_MODE, b"\x01\x01")


def disconnect_message() -> bytes:
    """Ask the vehicle to drop the link itself."""
    return _frame(MessageId.DISCONNECT)


def speed_message(speed: int, acceleration: int = DEFAULT_ACCELERATION) -> bytes:
    """Set speed (mm/s) with the given acceleration (mm/s²).

    The trailing ``respect_road_piece_speed_limit`` byte is always 0.
    """
    payload = struct.pack(
        "<hhB",
        _check_int16("speed", speed),
        _check_int16("acceleration", acceleration),
        0,
    )
    return _frame(MessageId.SET_SPEED, payload)


def change_lane_message(horizontal_speed: int, horizontal_acceleration: int, offset: float) -> bytes:
    """Move to *offset* mm from the road center.

    Send :func:`set_offset_from_road_center_message` first to calibrate.
    ``hop_intent`` and ``tag`` are sent as 0.
    """
    payload = struct.pack(
        "<hhfBB",
        _check_int16("horizontal_speed", horizontal_speed),
        _check_int16("horizontal_acceleration", horizontal_acceleration),
        float(offset),
        0,
        0,
    )
    return _frame(MessageId.CHANGE_LANE, payload)


def cancel_lane_change_message() -> bytes:
    return _frame(MessageId.CANCEL_LANE_CHANGE)


def set_offset_from_road_center_message(offset: float = 0.0) -> bytes:
    return _frame(MessageId.SET_OFFSET_FROM_ROAD_CENTER, struct.pack("<f", float(offset)))


def set_lights_message(light: Light | int, on: bool) -> bytes:
    """Switch a single light.

    The mask's low nibble selects which lights change, the high nibble
    carries their new state.
    """
    light_id = int(light)
    if not 0 <= light_id <= 3:
        raise ValueError(f"light id must be 0..3, got {light_id}")
    mask = (1 << light_id) | (int(bool(on)) << (light_id + 4))
    return _frame(MessageId.SET_LIGHTS, bytes((mask,)))


def set_all_lights_message(on: bool) -> bytes:
    mask = 0x0F | (0xF0 if on else 0x00)
    return _frame(MessageId.SET_LIGHTS, bytes((mask,)))


def turn_message(turn_type: TurnType | int = TurnType.UTURN, trigger: TurnTrigger | int = TurnTrigger.IMMEDIATE) -> bytes:
    payload = bytes((_check_byte("turn_type", turn_type), _check_byte("trigger", trigger)))
    return _frame(MessageId.TURN, payload)


def ping_request() -> bytes:
    """The vehicle answers with a ``PING_RESPONSE``."""
    return _frame(MessageId.PING_REQUEST)


def version_request() -> bytes:
    """The vehicle answers with a ``VERSION_RESPONSE``."""
    return _frame(MessageId.VERSION_REQUEST)


def battery_level_request() -> bytes:
    """The vehicle answers with a ``BATTERY_LEVEL_RESPONSE``."""
    return _frame(MessageId.BATTERY_LEVEL_REQUEST)


def lights_pattern_message(
    channel: LightChannel | int,
    effect: LightEffect | int,
    start: int,
    end: int,
    cycles_per_min: int,
) -> bytes:
    """Single-channel light pattern."""
    config = LightConfig(
        channel=channel,
        effect=effect,
        start=start,
        end=end,
        cycles_per_min=cycles_per_min,
    )
    return lights_pattern_multi_message([config])


def lights_pattern_multi_message(configs: Iterable[LightConfig]) -> bytes:
    """Light pattern over one to three channels."""
    items = list(configs)
    if not 1 <= len(items) <= MAX_LIGHT_CHANNELS:
        raise ValueError(f"must provide 1-{MAX_LIGHT_CHANNELS} light configs, got {len(items)}")
    payload = bytes((len(items),)) + b"".join(config.to_bytes() for config in items)
    return _frame(MessageId.LIGHTS_PATTERN, payload)


# ------------------------------------------------------------------
# Preset patterns
# ------------------------------------------------------------------


def _throb(channel: LightChannel, cycles_per_min: int) -> bytes:
    return lights_pattern_message(channel, LightEffect.THROB, 0, MAX_LIGHT_INTENSITY, cycles_per_min)


def lights_red_throb(cycles_per_min: int) -> bytes:
    return _throb(LightChannel.RED, cycles_per_min)


def lights_green_throb(cycles_per_min: int) -> bytes:
    return _throb(LightChannel.GREEN, cycles_per_min)


def lights_blue_throb(cycles_per_min: int) -> bytes:
    return _throb(LightChannel.BLUE, cycles_per_min)


def lights_warning_flash() -> bytes:
    return lights_pattern_message(LightChannel.RED, LightEffect.FLASH, 0, MAX_LIGHT_INTENSITY, 120)


def lights_police() -> bytes:
    """Alternating red/blue flash."""
    return lights_pattern_multi_message(
        [
            LightConfig(channel=LightChannel.RED, effect=LightEffect.FLASH, start=0, end=MAX_LIGHT_INTENSITY, cycles_per_min=60),
            LightConfig(channel=LightChannel.BLUE, effect=LightEffect.FLASH, start=MAX_LIGHT_INTENSITY, end=0, cycles_per_min=60),
        ]
    )


def lights_rainbow() -> bytes:
    return lights_pattern_multi_message(
        [
            LightConfig(channel=LightChannel.RED, effect=LightEffect.THROB, start=0, end=MAX_LIGHT_INTENSITY, cycles_per_min=20),
            LightConfig(channel=LightChannel.GREEN, effect=LightEffect.THROB, start=5, end=MAX_LIGHT_INTENSITY, cycles_per_min=15),
            LightConfig(channel=LightChannel.BLUE, effect=LightEffect.THROB, start=10, end=MAX_LIGHT_INTENSITY, cycles_per_min=25),
        ]
    )


def lights_off() -> bytes:
    """Turn the RGB pattern channels off."""
    return lights_pattern_multi_message(
        [
            LightConfig(channel=channel, effect=LightEffect.STEADY, start=0, end=0, cycles_per_min=0)
            for channel in (LightChannel.RED, LightChannel.GREEN, LightChannel.BLUE)
        ]
    )
