"""Inbound frame decoding.

:func:`decode` turns one raw frame into exactly one notification model.
The message id is inspected once here; everything downstream dispatches
on the resulting ``kind``.

Every field access is bound-checked: a frame that is too short for its
message layout, or whose length byte claims more bytes than were
received, raises :class:`MalformedFrameError` instead of an
``IndexError``.
"""

from __future__ import annotations

import logging
import struct
from collections.abc import Callable, Sequence

from pyoverdrive._constants import PARSING_FLAG_REVERSE, MessageId
from pyoverdrive._logfmt import frame_for_log
from pyoverdrive.exceptions import MalformedFrameError, ProtocolAssumptionViolatedError
from pyoverdrive.models.notifications import (
    BatteryLevel,
    ChargerInfo,
    DefaultNotification,
    Delocalized,
    IntersectionCode,
    IntersectionUpdate,
    Notification,
    OffsetUpdate,
    PingResponse,
    PositionUpdate,
    TransitionUpdate,
    VersionResponse,
)
from pyoverdrive.models.road_piece import RoadPieceType

_logger = logging.getLogger(__name__)

FrameLike = bytes | bytearray | memoryview | Sequence[int]


def _as_bytes(frame: FrameLike) -> bytes:
    if isinstance(frame, (bytes, bytearray, memoryview)):
        return bytes(frame)
    # Sequences of ints may come from bindings that expose signed bytes.
    return bytes(int(value) & 0xFF for value in frame)


# ------------------------------------------------------------------
# Per-message parsers.  ``view`` is already trimmed to the declared size.
# ------------------------------------------------------------------


def _parse_transition_update(view: bytes, address: str) -> TransitionUpdate:
    # road_piece_idx and road_piece_idx_prev have always been zero.
    if view[2] != 0 or view[3] != 0:
        raise ProtocolAssumptionViolatedError(
            "transition update carries non-zero road piece index bytes; vehicle firmware has changed",
            msg_id=MessageId.TRANSITION_UPDATE,
            observed=view[2:4],
        )
    return TransitionUpdate(address=address, road_piece_idx=0)


def _parse_position_update(view: bytes, address: str) -> PositionUpdate:
    location, road_piece_id, offset, speed, flags = struct.unpack_from("<bBfHB", view, 2)
    return PositionUpdate(
        address=address,
        location=location,
        road_piece_id=road_piece_id,
        road_piece=RoadPieceType.from_id(road_piece_id),
        ascending=not (flags & PARSING_FLAG_REVERSE),
        offset_from_road_center=offset,
        speed=speed,
    )


def _parse_intersection_update(view: bytes, address: str) -> IntersectionUpdate:
    return IntersectionUpdate(
        address=address,
        code=IntersectionCode(view[7]),
        is_exiting=view[8] != 1,
    )


def _parse_charger_info(view: bytes, address: str) -> ChargerInfo:
    return ChargerInfo(
        address=address,
        on_charger=view[2] != 0,
        battery_low=view[3] != 0,
        battery_full=view[4] != 0,
        charging=view[5] != 0,
    )


def _parse_battery(view: bytes, address: str) -> BatteryLevel:
    (level,) = struct.unpack_from("<H", view, 2)
    return BatteryLevel(address=address, level=level)


def _parse_ping_response(_view: bytes, address: str) -> PingResponse:
    return PingResponse(address=address)


def _parse_version_response(view: bytes, address: str) -> VersionResponse:
    (version,) = struct.unpack_from("<H", view, 2)
    return VersionResponse(address=address, version=version)


def _parse_delocalized(_view: bytes, address: str) -> Delocalized:
    return Delocalized(address=address)


def _parse_offset_update(view: bytes, address: str) -> OffsetUpdate:
    offset, lane_change_id = struct.unpack_from("<fB", view, 2)
    return OffsetUpdate(address=address, offset_mm=offset, lane_change_id=lane_change_id)


# msg id -> (minimum frame size in bytes, parser)
_PARSERS: dict[int, tuple[int, Callable[[bytes, str], Notification]]] = {
    MessageId.TRANSITION_UPDATE: (4, _parse_transition_update),
    MessageId.POSITION_UPDATE: (11, _parse_position_update),
    MessageId.INTERSECTION_UPDATE: (9, _parse_intersection_update),
    MessageId.CHARGER_INFO: (6, _parse_charger_info),
    MessageId.BATTERY_LEVEL_RESPONSE: (4, _parse_battery),
    MessageId.PING_RESPONSE: (2, _parse_ping_response),
    MessageId.VERSION_RESPONSE: (4, _parse_version_response),
    MessageId.VEHICLE_DELOCALIZED: (2, _parse_delocalized),
    MessageId.OFFSET_FROM_ROAD_CENTER_UPDATE: (7, _parse_offset_update),
}


def decode(frame: FrameLike, *, address: str = "") -> Notification:
    """Decode one inbound frame.

    Parameters
    ----------
    frame : bytes-like
        Complete frame ``[size, msg_id, payload...]``.
    address : str
        Link address of the sending vehicle, copied onto the notification.

    Returns
    -------
    Notification
        One of the notification models.  Unrecognised message ids yield a
        :class:`DefaultNotification` wrapping the raw bytes.

    Raises
    ------
    MalformedFrameError
        The frame is shorter than two bytes, or too short for the layout
        of its (recognised) message id.
    UnknownRoadPieceError
        A position update names a road piece id with no known type.
    ProtocolAssumptionViolatedError
        Reserved bytes of a transition update are non-zero.
    """
    data = _as_bytes(frame)
    if len(data) < 2:
        raise MalformedFrameError(f"frame too short ({len(data)} bytes)", frame=data)

    msg_id = data[1]
    entry = _PARSERS.get(msg_id)
    if entry is None:
        _logger.debug("Unhandled message id=0x%02x frame=%s", msg_id, frame_for_log(data))
        return DefaultNotification(address=address, raw=data)

    declared = data[0] + 1
    if declared > len(data):
        raise MalformedFrameError(
            f"length byte declares {declared} bytes but only {len(data)} were received",
            frame=data,
        )
    min_size, parser = entry
    if declared < min_size:
        raise MalformedFrameError(
            f"message 0x{msg_id:02x} needs at least {min_size} bytes, frame declares {declared}",
            frame=data,
        )
    return parser(data[:declared], address)
