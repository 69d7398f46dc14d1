"""Custom exception hierarchy for pyoverdrive."""

from __future__ import annotations

from typing import Any


class OverdriveError(Exception):
    """Base exception for all pyoverdrive errors."""


class OverdriveConfigError(OverdriveError):
    """Invalid or missing configuration."""


class OverdriveLinkError(OverdriveError):
    """Vehicle link failure (not connected, write rejected, broker unreachable)."""

    def __init__(self, message: str, *, address: str = "") -> None:
        self.address = address
        super().__init__(message)


class OverdriveProtocolError(OverdriveError):
    """A frame could not be encoded or decoded."""


class MalformedFrameError(OverdriveProtocolError):
    """Frame is too short or its length byte disagrees with its content."""

    def __init__(self, message: str, *, frame: bytes = b"") -> None:
        self.frame = bytes(frame)
        super().__init__(message)


class UnknownRoadPieceError(OverdriveProtocolError, ValueError):
    """A position update carried a road piece id with no known type."""

    def __init__(self, road_piece_id: int) -> None:
        self.road_piece_id = road_piece_id
        super().__init__(f"unknown road piece id {road_piece_id}")


class ProtocolAssumptionViolatedError(OverdriveProtocolError):
    """Reserved bytes held unexpected values.

    This is raised for transition updates whose road piece index bytes are
    non-zero.  Every firmware seen so far leaves them at zero, so any other
    value means the vehicle firmware (and therefore the protocol) has changed
    and the parser needs updating.
    """

    def __init__(self, message: str, *, msg_id: int, observed: bytes = b"") -> None:
        self.msg_id = msg_id
        self.observed = bytes(observed)
        super().__init__(message)


class ListenerDispatchError(OverdriveError):
    """A notification listener raised while handling a notification.

    Never raised out of :meth:`NotificationRouter.dispatch`; instances are
    logged and returned so callers can inspect them.  The original exception
    is available as ``__cause__``.
    """

    def __init__(self, message: str, *, listener: Any, kind: str) -> None:
        self.listener = listener
        self.kind = kind
        super().__init__(message)
