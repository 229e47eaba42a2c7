"""Per-device change listeners."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)


class ListenerRegistry:
    """Zero-argument callbacks keyed by device id."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[[], None]]] = {}

    def subscribe(
        self,
        device_id: str,
        callback: Callable[[], None],
    ) -> Callable[[], None]:
        """Register a callback for a device.

        Args:
            device_id: Device whose changes the callback wants.
            callback: Function called after each change.

        Returns:
            A function to unregister the callback.

        """
        callbacks = self._listeners.setdefault(device_id, [])
        if callback not in callbacks:
            callbacks.append(callback)

        def unregister() -> None:
            self.unsubscribe(device_id, callback)

        return unregister

    def unsubscribe(self, device_id: str, callback: Callable[[], None]) -> None:
        """Remove a callback; unknown callbacks are ignored."""
        callbacks = self._listeners.get(device_id)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
            if not callbacks:
                del self._listeners[device_id]

    def count(self, device_id: str) -> int:
        """Return how many callbacks a device has."""
        return len(self._listeners.get(device_id, ()))

    def notify(self, device_id: str) -> None:
        """Call every callback registered for a device.

        A callback that raises is logged and does not stop the others.
        """
        for callback in list(self._listeners.get(device_id, ())):
            try:
                callback()
            except Exception:
                _LOGGER.exception("Error in listener for device %s", device_id)
