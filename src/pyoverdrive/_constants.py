"""Protocol constants shared across the library.

Message ids and field layouts follow Anki's ``protocol.h`` from the
drive-sdk.
"""

from __future__ import annotations

import enum

# ------------------------------------------------------------------
# Message ids
# ------------------------------------------------------------------


class MessageId(enum.IntEnum):
    """Message id byte (``frame[1]``)."""

    DISCONNECT = 0x0D
    PING_REQUEST = 0x16
    PING_RESPONSE = 0x17
    VERSION_REQUEST = 0x18
    VERSION_RESPONSE = 0x19
    BATTERY_LEVEL_REQUEST = 0x1A
    BATTERY_LEVEL_RESPONSE = 0x1B
    SET_LIGHTS = 0x1D
    SET_SPEED = 0x24
    CHANGE_LANE = 0x25
    CANCEL_LANE_CHANGE = 0x26
    POSITION_UPDATE = 0x27
    TRANSITION_UPDATE = 0x29
    INTERSECTION_UPDATE = 0x2A
    VEHICLE_DELOCALIZED = 0x2B
    SET_OFFSET_FROM_ROAD_CENTER = 0x2C
    OFFSET_FROM_ROAD_CENTER_UPDATE = 0x2D
    TURN = 0x32
    LIGHTS_PATTERN = 0x33
    CHARGER_INFO = 0x3F
    SDK_MODE = 0x90


# Bit in PositionUpdate.parsing_flags that is set while location ids
# are passed in *descending* order.
PARSING_FLAG_REVERSE = 0x40

DEFAULT_ACCELERATION = 10000

# ------------------------------------------------------------------
# Lights
# ------------------------------------------------------------------


class Light(enum.IntEnum):
    """Simple on/off lights addressed by ``SET_LIGHTS``."""

    HEADLIGHTS = 0
    BRAKELIGHTS = 1
    FRONTLIGHTS = 2
    ENGINE = 3


class LightChannel(enum.IntEnum):
    """Channels addressed by ``LIGHTS_PATTERN``."""

    RED = 0
    TAIL = 1
    BLUE = 2
    GREEN = 3
    FRONT_LEFT = 4
    FRONT_RIGHT = 5


class LightEffect(enum.IntEnum):
    STEADY = 0
    FADE = 1
    THROB = 2
    FLASH = 3
    RANDOM = 4


MAX_LIGHT_INTENSITY = 14
MAX_LIGHT_CHANNELS = 3

# ------------------------------------------------------------------
# Turns
# ------------------------------------------------------------------


class TurnType(enum.IntEnum):
    LEFT = 1
    RIGHT = 2
    UTURN = 3
    UTURN_JUMP = 4


class TurnTrigger(enum.IntEnum):
    IMMEDIATE = 0
    INTERSECTION = 1


def cycles_per_min_to_10s(cycles_per_min: int) -> int:
    """Convert a per-minute cycle rate to the wire's cycles-per-10-seconds.

    The result saturates at 255.

    Raises :class:`ValueError` for negative rates.
    """
    value = int(cycles_per_min)
    if value < 0:
        raise ValueError(f"cycles per minute must be non-negative, got {value}")
    return min(255, (value * 10) // 60)
