"""Wire protocol: command encoders and the inbound frame decoder."""

from pyoverdrive.protocol.messages import (
    battery_level_request,
    cancel_lane_change_message,
    change_lane_message,
    disconnect_message,
    lights_blue_throb,
    lights_green_throb,
    lights_off,
    lights_pattern_message,
    lights_pattern_multi_message,
    lights_police,
    lights_rainbow,
    lights_red_throb,
    lights_warning_flash,
    ping_request,
    sdk_mode_message,
    set_all_lights_message,
    set_lights_message,
    set_offset_from_road_center_message,
    speed_message,
    turn_message,
    version_request,
)
from pyoverdrive.protocol.parser import decode

__all__ = [
    "battery_level_request",
    "cancel_lane_change_message",
    "change_lane_message",
    "decode",
    "disconnect_message",
    "lights_blue_throb",
    "lights_green_throb",
    "lights_off",
    "lights_pattern_message",
    "lights_pattern_multi_message",
    "lights_police",
    "lights_rainbow",
    "lights_red_throb",
    "lights_warning_flash",
    "ping_request",
    "sdk_mode_message",
    "set_all_lights_message",
    "set_lights_message",
    "set_offset_from_road_center_message",
    "speed_message",
    "turn_message",
    "version_request",
]
