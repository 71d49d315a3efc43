"""
impmon Event Bus.

Publish/subscribe for reload notifications.
Requires Python 3.11+.
"""

import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Any

# Emitted with the path once a change passes the debounce gate, before reloading
CHANGE = "change"
# Emitted with the path and the new module after every load through the reloader
LOADED = "loaded"
# Emitted with the path and the exception when watching or reloading fails
ERROR = "error"

Listener = Callable[..., Any]


class EventBus:
    """
    Synchronous event emitter.

    Listeners run in the emitting thread, in subscription order, and
    their exceptions propagate to the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._lock = threading.Lock()

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe a listener to an event."""
        with self._lock:
            self._listeners[event].append(listener)

    def once(self, event: str, listener: Listener) -> None:
        """Subscribe a listener that is removed after its first call."""

        def wrapper(*args: Any) -> Any:
            self.off(event, wrapper)
            return listener(*args)

        wrapper.listener = listener  # type: ignore[attr-defined]
        self.on(event, wrapper)

    def off(self, event: str, listener: Listener) -> bool:
        """
        Unsubscribe a listener.

        Returns:
            True if the listener was removed
        """
        with self._lock:
            listeners = self._listeners.get(event, [])
            for registered in listeners:
                if registered == listener or getattr(registered, "listener", None) == listener:
                    listeners.remove(registered)
                    return True
        return False

    def emit(self, event: str, *args: Any) -> bool:
        """
        Call every listener of an event.

        Returns:
            True if the event had listeners
        """
        with self._lock:
            listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            listener(*args)
        return bool(listeners)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def clear(self) -> None:
        """Remove every listener."""
        with self._lock:
            self._listeners.clear()
