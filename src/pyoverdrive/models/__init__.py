"""Data models for frames, notifications and track maps."""

from pyoverdrive.models._base import OverdriveBaseModel, OverdriveEnum, now_ms
from pyoverdrive.models.lights import LightConfig
from pyoverdrive.models.notifications import (
    BatteryLevel,
    ChargerInfo,
    ConnectedNotification,
    DefaultNotification,
    Delocalized,
    IntersectionCode,
    IntersectionUpdate,
    Notification,
    NotificationKind,
    OffsetUpdate,
    PingResponse,
    PositionUpdate,
    TransitionUpdate,
    VersionResponse,
)
from pyoverdrive.models.road_piece import FINISH_ID, START_ID, RoadPieceType, alternate_start_finish_id
from pyoverdrive.models.track import Heading, PieceLocation, TrackPiece, VehiclePosition

__all__ = [
    "BatteryLevel",
    "ChargerInfo",
    "ConnectedNotification",
    "DefaultNotification",
    "Delocalized",
    "FINISH_ID",
    "Heading",
    "IntersectionCode",
    "IntersectionUpdate",
    "LightConfig",
    "Notification",
    "NotificationKind",
    "OffsetUpdate",
    "OverdriveBaseModel",
    "OverdriveEnum",
    "PieceLocation",
    "PingResponse",
    "PositionUpdate",
    "RoadPieceType",
    "START_ID",
    "TrackPiece",
    "TransitionUpdate",
    "VehiclePosition",
    "VersionResponse",
    "alternate_start_finish_id",
    "now_ms",
]
