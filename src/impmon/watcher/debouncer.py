"""
impmon Debounce Gate.

Suppresses repeated change notifications for a path within a cooldown window.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable

from impmon.utils.logger import LoggerMixin


class DebounceGate(LoggerMixin):
    """
    Per-path rate limiter for file change signals.

    The first signal for a path is accepted and arms a timer; every
    further signal is dropped until the timer removes the entry. This
    does not compare file contents, so a re-save inside the window is
    dropped even if it differs from the accepted version.
    """

    def __init__(self, timeout_ms: Callable[[], int]) -> None:
        """
        Initialize the gate.

        Args:
            timeout_ms: Returns the current cooldown in milliseconds,
                read each time a change is accepted
        """
        self._timeout_ms = timeout_ms
        self._pending: dict[str, threading.Timer] = {}
        self._lock = threading.Lock()

    def accept(self, path: str) -> bool:
        """
        Decide whether a change signal for a path counts as a change.

        Args:
            path: Canonical path that changed

        Returns:
            False while the path is cooling down, True otherwise
        """
        with self._lock:
            if path in self._pending:
                return False

            def expire() -> None:
                # Only remove our own entry: a timer left over from before
                # clear() must not cut short a newer cooldown
                with self._lock:
                    if self._pending.get(path) is timer:
                        del self._pending[path]

            timer = threading.Timer(self._timeout_ms() / 1000.0, expire)
            timer.daemon = True
            self._pending[path] = timer
            timer.start()
            return True

    def clear(self) -> None:
        """Drop every cooldown entry; outstanding timers fire harmlessly."""
        with self._lock:
            self._pending.clear()

    def pending(self, path: str) -> bool:
        """Check if a path is cooling down."""
        return path in self._pending

    @property
    def pending_count(self) -> int:
        """Get number of paths cooling down."""
        return len(self._pending)
