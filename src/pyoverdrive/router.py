"""Per-vehicle notification routing.

The router keeps one slot list per :class:`NotificationKind`.  Adding a
listener resolves its ``on_*`` capability methods once and appends the
bound handlers to the matching slots; dispatch is then a dictionary
lookup on the notification's ``kind`` followed by calls in registration
order.

Slot lists are replaced rather than mutated, so a dispatch in progress
iterates over the snapshot it started with.  Listeners added or removed
from inside a handler take effect for the next notification.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pyoverdrive.exceptions import ListenerDispatchError
from pyoverdrive.listeners import CAPABILITY_METHODS
from pyoverdrive.models.notifications import (
    ChargerInfo,
    ConnectedNotification,
    Notification,
    NotificationKind,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Slot:
    owner: Any
    handler: Callable[[Any], None]


class _ConnectionState:
    def __init__(self) -> None:
        self.connected = False

    def on_connected(self, notification: ConnectedNotification) -> None:
        self.connected = notification.connected


class _ChargerState:
    def __init__(self) -> None:
        self.on_charger = False

    def on_charger_info(self, notification: ChargerInfo) -> None:
        self.on_charger = notification.on_charger


class NotificationRouter:
    """Fan decoded notifications out to capability-matched listeners.

    Parameters
    ----------
    on_error : callable, optional
        Called with every :class:`ListenerDispatchError` after it has been
        logged.  Exceptions raised by this hook are logged and ignored.
    """

    def __init__(self, *, on_error: Callable[[ListenerDispatchError], None] | None = None) -> None:
        self._lock = threading.Lock()
        self._slots: dict[NotificationKind, list[_Slot]] = {}
        self._on_error = on_error
        self._connection = _ConnectionState()
        self._charger = _ChargerState()
        self.add(self._connection)
        self.add(self._charger)

    # ------------------------------------------------------------------
    # Cached state from the built-in listeners
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        """Last value reported by a :class:`ConnectedNotification`."""
        return self._connection.connected

    @property
    def on_charger(self) -> bool:
        """Last ``on_charger`` value reported by a :class:`ChargerInfo`."""
        return self._charger.on_charger

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def add(self, listener: Any) -> set[NotificationKind]:
        """Register *listener* for every capability it implements.

        Returns the set of kinds the listener was registered for; an empty
        set means the listener implements no capability and was ignored.
        """
        kinds: set[NotificationKind] = set()
        with self._lock:
            for kind, method_name in CAPABILITY_METHODS.items():
                handler = getattr(listener, method_name, None)
                if not callable(handler):
                    continue
                self._slots[kind] = [*self._slots.get(kind, ()), _Slot(owner=listener, handler=handler)]
                kinds.add(kind)
        if not kinds:
            _logger.debug("Listener %r implements no notification capability", listener)
        return kinds

    def subscribe(self, kind: NotificationKind, callback: Callable[[Any], None]) -> Callable[[], None]:
        """Register a bare callable for one notification kind.

        Returns a function that removes the subscription.
        """
        if kind not in CAPABILITY_METHODS:
            raise ValueError(f"no capability slot for notification kind {kind!r}")
        slot = _Slot(owner=callback, handler=callback)
        with self._lock:
            self._slots[kind] = [*self._slots.get(kind, ()), slot]

        def _unsubscribe() -> None:
            with self._lock:
                current = self._slots.get(kind, [])
                self._slots[kind] = [s for s in current if s is not slot]

        return _unsubscribe

    def remove(self, listener: Any) -> bool:
        """Unregister every handler owned by *listener*.

        Returns ``True`` if anything was removed.
        """
        removed = False
        with self._lock:
            for kind, slots in list(self._slots.items()):
                kept = [slot for slot in slots if slot.owner is not listener]
                if len(kept) != len(slots):
                    removed = True
                    self._slots[kind] = kept
        return removed

    def listener_count(self, kind: NotificationKind) -> int:
        return len(self._slots.get(kind, ()))

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, notification: Notification) -> list[ListenerDispatchError]:
        """Deliver *notification* to every handler registered for its kind.

        A handler that raises is reported (logged and passed to
        ``on_error``) without affecting delivery to the remaining handlers.
        Notifications without a capability slot, such as
        :class:`DefaultNotification`, are a no-op.

        Returns
        -------
        list[ListenerDispatchError]
            One entry per failing handler, in dispatch order.
        """
        slots = self._slots.get(notification.kind, ())
        errors: list[ListenerDispatchError] = []
        for slot in slots:
            try:
                slot.handler(notification)
            except Exception as exc:
                error = ListenerDispatchError(
                    f"listener {slot.owner!r} failed on {notification.kind}: {exc}",
                    listener=slot.owner,
                    kind=str(notification.kind),
                )
                error.__cause__ = exc
                _logger.warning(
                    "Listener %r failed handling %s",
                    slot.owner,
                    notification.kind,
                    exc_info=exc,
                )
                errors.append(error)
                self._report(error)
        return errors

    def _report(self, error: ListenerDispatchError) -> None:
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            _logger.debug("on_error hook failed", exc_info=True)
