"""Helpers for compact debug logging of frames.

Vehicles emit position updates many times per second.  This module
renders frames and nested values into short, bounded strings so DEBUG
logs stay readable.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def frame_for_log(frame: bytes | bytearray | memoryview, *, max_bytes: int = 32) -> str:
    """Hex-format *frame*, truncating after *max_bytes* bytes."""
    data = bytes(frame)
    text = data[:max_bytes].hex(" ")
    if len(data) > max_bytes:
        return f"{text} …<+{len(data) - max_bytes}b>"
    return text


def value_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a copy of *value* with frames hex-formatted and long strings cut."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (bool, int, float)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (bytes, bytearray, memoryview)):
        return frame_for_log(value)

    if isinstance(value, Mapping):
        return {str(k): value_for_log(v, max_string=max_string, _depth=_depth + 1) for k, v in value.items()}

    if isinstance(value, Sequence):
        return [value_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
