"""pyoverdrive - Python client for Anki Overdrive vehicles and track mapping."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyoverdrive")
except PackageNotFoundError:
    __version__ = "0+local"
from pyoverdrive._constants import Light, LightChannel, LightEffect, MessageId, TurnTrigger, TurnType
from pyoverdrive._mqtt import MqttVehicleLink
from pyoverdrive.config import OverdriveConfig
from pyoverdrive.exceptions import (
    ListenerDispatchError,
    MalformedFrameError,
    OverdriveConfigError,
    OverdriveError,
    OverdriveLinkError,
    OverdriveProtocolError,
    ProtocolAssumptionViolatedError,
    UnknownRoadPieceError,
)
from pyoverdrive.link import VehicleLink
from pyoverdrive.models import (
    BatteryLevel,
    ChargerInfo,
    ConnectedNotification,
    DefaultNotification,
    Delocalized,
    Heading,
    IntersectionCode,
    IntersectionUpdate,
    LightConfig,
    Notification,
    NotificationKind,
    OffsetUpdate,
    PieceLocation,
    PingResponse,
    PositionUpdate,
    RoadPieceType,
    TrackPiece,
    TransitionUpdate,
    VersionResponse,
)
from pyoverdrive.protocol import decode
from pyoverdrive.registry import VehicleRegistry
from pyoverdrive.router import NotificationRouter
from pyoverdrive.topology import TopologyType, TrackTopology, TrackTopologyAnalyzer
from pyoverdrive.tracking import DeadReckoningMapper, MappingCoordinator, SpatialLookupIndex, TrackMapData
from pyoverdrive.vehicle import Vehicle

__all__ = [
    "__version__",
    "BatteryLevel",
    "ChargerInfo",
    "ConnectedNotification",
    "DeadReckoningMapper",
    "DefaultNotification",
    "Delocalized",
    "Heading",
    "IntersectionCode",
    "IntersectionUpdate",
    "Light",
    "LightChannel",
    "LightConfig",
    "LightEffect",
    "ListenerDispatchError",
    "MalformedFrameError",
    "MappingCoordinator",
    "MessageId",
    "MqttVehicleLink",
    "Notification",
    "NotificationKind",
    "NotificationRouter",
    "OffsetUpdate",
    "OverdriveConfig",
    "OverdriveConfigError",
    "OverdriveError",
    "OverdriveLinkError",
    "OverdriveProtocolError",
    "PieceLocation",
    "PingResponse",
    "PositionUpdate",
    "ProtocolAssumptionViolatedError",
    "RoadPieceType",
    "SpatialLookupIndex",
    "TopologyType",
    "TrackMapData",
    "TrackPiece",
    "TrackTopology",
    "TrackTopologyAnalyzer",
    "TransitionUpdate",
    "UnknownRoadPieceError",
    "Vehicle",
    "VehicleLink",
    "VehicleRegistry",
    "VersionResponse",
    "decode",
]
