"""Listener capability protocols.

A listener is any object implementing one or more of the ``on_*``
methods below.  :class:`~pyoverdrive.router.NotificationRouter` resolves
a listener's capabilities once, when it is added, and routes each
notification kind only to the handlers that declared it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pyoverdrive.models.notifications import (
    BatteryLevel,
    ChargerInfo,
    ConnectedNotification,
    Delocalized,
    IntersectionUpdate,
    NotificationKind,
    OffsetUpdate,
    PingResponse,
    PositionUpdate,
    TransitionUpdate,
    VersionResponse,
)
from pyoverdrive.models.road_piece import RoadPieceType


@runtime_checkable
class PositionUpdateListener(Protocol):
    def on_position_update(self, notification: PositionUpdate) -> None: ...


@runtime_checkable
class TransitionUpdateListener(Protocol):
    def on_transition_update(self, notification: TransitionUpdate) -> None: ...


@runtime_checkable
class IntersectionUpdateListener(Protocol):
    def on_intersection_update(self, notification: IntersectionUpdate) -> None: ...


@runtime_checkable
class ChargerInfoListener(Protocol):
    def on_charger_info(self, notification: ChargerInfo) -> None: ...


@runtime_checkable
class BatteryListener(Protocol):
    def on_battery(self, notification: BatteryLevel) -> None: ...


@runtime_checkable
class PingResponseListener(Protocol):
    def on_ping_response(self, notification: PingResponse) -> None: ...


@runtime_checkable
class VersionResponseListener(Protocol):
    def on_version_response(self, notification: VersionResponse) -> None: ...


@runtime_checkable
class DelocalizedListener(Protocol):
    def on_delocalized(self, notification: Delocalized) -> None: ...


@runtime_checkable
class OffsetUpdateListener(Protocol):
    def on_offset_update(self, notification: OffsetUpdate) -> None: ...


@runtime_checkable
class ConnectedListener(Protocol):
    def on_connected(self, notification: ConnectedNotification) -> None: ...


class TrackMappingListener(Protocol):
    """Receives the mapping event stream derived from position updates."""

    def on_track_piece_discovered(self, location_id: int, road_piece_id: int, road_piece: RoadPieceType) -> None: ...

    def on_location_update(self, location_id: int, ascending: bool) -> None: ...


# Capability method per notification kind.  DEFAULT has no capability.
CAPABILITY_METHODS: dict[NotificationKind, str] = {
    NotificationKind.POSITION_UPDATE: "on_position_update",
    NotificationKind.TRANSITION_UPDATE: "on_transition_update",
    NotificationKind.INTERSECTION_UPDATE: "on_intersection_update",
    NotificationKind.CHARGER_INFO: "on_charger_info",
    NotificationKind.BATTERY: "on_battery",
    NotificationKind.PING_RESPONSE: "on_ping_response",
    NotificationKind.VERSION_RESPONSE: "on_version_response",
    NotificationKind.DELOCALIZED: "on_delocalized",
    NotificationKind.OFFSET_UPDATE: "on_offset_update",
    NotificationKind.CONNECTED: "on_connected",
}
