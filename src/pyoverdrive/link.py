"""Vehicle link abstraction.

The link is the transport below the frame codec: it connects to one
vehicle, writes raw command frames and delivers raw notification frames.
BLE stacks and gateways implement it; the library only consumes it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

FrameCallback = Callable[[bytes], None]
ConnectionCallback = Callable[[bool], None]


@runtime_checkable
class VehicleLink(Protocol):
    @property
    def address(self) -> str:
        """Stable identifier of the vehicle (usually its BLE MAC address)."""
        ...

    def connect(self) -> bool:
        """Open the link.  Returns ``True`` once frames can be exchanged."""
        ...

    def disconnect(self) -> None: ...

    def is_connected(self) -> bool: ...

    def write_raw(self, frame: bytes) -> bool:
        """Write one complete frame.  Returns ``False`` if it was not sent."""
        ...

    def subscribe(self, callback: FrameCallback) -> None:
        """Deliver every inbound frame to *callback*.

        The callback may run on a transport thread.
        """
        ...

    def subscribe_connection(self, callback: ConnectionCallback) -> None:
        """Call *callback* with the new state whenever the link goes up or down.

        Drops the transport detects on its own are reported too.
        """
        ...
