"""Notification models.

Every inbound frame decodes into exactly one of the models below.  They
form a tagged union discriminated by ``kind`` so dispatch never has to
inspect a notification's class.

``ConnectedNotification`` is never decoded from the wire; the vehicle
session synthesises it when the link comes up or goes down.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal

from pydantic import Field

from pyoverdrive.models._base import OverdriveBaseModel, OverdriveEnum, now_ms
from pyoverdrive.models.road_piece import RoadPieceType


class NotificationKind(enum.StrEnum):
    """Discriminant of the notification union."""

    POSITION_UPDATE = "position_update"
    TRANSITION_UPDATE = "transition_update"
    INTERSECTION_UPDATE = "intersection_update"
    CHARGER_INFO = "charger_info"
    BATTERY = "battery"
    PING_RESPONSE = "ping_response"
    VERSION_RESPONSE = "version_response"
    DELOCALIZED = "delocalized"
    OFFSET_UPDATE = "offset_update"
    CONNECTED = "connected"
    DEFAULT = "default"


class IntersectionCode(OverdriveEnum):
    """Intersection marker read while crossing an intersection piece."""

    NONE = 0
    ENTRY_FIRST = 1
    EXIT_FIRST = 2
    ENTRY_SECOND = 3
    EXIT_SECOND = 4
    UNKNOWN = 5


class _NotificationBase(OverdriveBaseModel):
    address: str = ""
    """Link address of the vehicle that sent the notification."""


class PositionUpdate(_NotificationBase):
    """Vehicle passed a location marker."""

    kind: Literal[NotificationKind.POSITION_UPDATE] = NotificationKind.POSITION_UPDATE
    location: int
    road_piece_id: int
    road_piece: RoadPieceType
    ascending: bool
    """True while location ids are passed in ascending order."""
    offset_from_road_center: float = 0.0
    speed: int = 0


class TransitionUpdate(_NotificationBase):
    """Vehicle moved from one road piece onto the next."""

    kind: Literal[NotificationKind.TRANSITION_UPDATE] = NotificationKind.TRANSITION_UPDATE
    road_piece_idx: int = 0


class IntersectionUpdate(_NotificationBase):
    kind: Literal[NotificationKind.INTERSECTION_UPDATE] = NotificationKind.INTERSECTION_UPDATE
    code: IntersectionCode
    is_exiting: bool


class ChargerInfo(_NotificationBase):
    kind: Literal[NotificationKind.CHARGER_INFO] = NotificationKind.CHARGER_INFO
    on_charger: bool
    battery_low: bool
    battery_full: bool
    charging: bool


class BatteryLevel(_NotificationBase):
    """Response to a battery level request."""

    kind: Literal[NotificationKind.BATTERY] = NotificationKind.BATTERY
    level: int
    """Raw battery reading (millivolts on current firmware)."""


class PingResponse(_NotificationBase):
    kind: Literal[NotificationKind.PING_RESPONSE] = NotificationKind.PING_RESPONSE
    received_at: int = Field(default_factory=now_ms)
    """Epoch milliseconds at which the response was decoded."""


class VersionResponse(_NotificationBase):
    kind: Literal[NotificationKind.VERSION_RESPONSE] = NotificationKind.VERSION_RESPONSE
    version: int

    @property
    def version_string(self) -> str:
        """Firmware version as ``"major.minor"`` (high byte, low byte)."""
        return f"{(self.version >> 8) & 0xFF}.{self.version & 0xFF}"


class Delocalized(_NotificationBase):
    """Vehicle lost track of its position (lifted, crashed, unreadable code)."""

    kind: Literal[NotificationKind.DELOCALIZED] = NotificationKind.DELOCALIZED
    received_at: int = Field(default_factory=now_ms)


class OffsetUpdate(_NotificationBase):
    """Lateral offset from the road center changed."""

    kind: Literal[NotificationKind.OFFSET_UPDATE] = NotificationKind.OFFSET_UPDATE
    offset_mm: float
    """Positive values are right of center, negative values left."""
    lane_change_id: int


class ConnectedNotification(_NotificationBase):
    kind: Literal[NotificationKind.CONNECTED] = NotificationKind.CONNECTED
    connected: bool


class DefaultNotification(_NotificationBase):
    """Frame with a message id this library does not interpret."""

    kind: Literal[NotificationKind.DEFAULT] = NotificationKind.DEFAULT
    raw: bytes

    @property
    def msg_id(self) -> int:
        return self.raw[1]


Notification = Annotated[
    PositionUpdate
    | TransitionUpdate
    | IntersectionUpdate
    | ChargerInfo
    | BatteryLevel
    | PingResponse
    | VersionResponse
    | Delocalized
    | OffsetUpdate
    | ConnectedNotification
    | DefaultNotification,
    Field(discriminator="kind"),
]
