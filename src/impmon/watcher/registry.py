"""
impmon Watch Registry.

Process-wide table of tracked module paths and their file watches.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from impmon.watcher.file_watcher import FileWatch
from impmon.utils.logger import LoggerMixin


@dataclass
class TrackedUnit:
    """A tracked module: its canonical path, module name and live watch."""

    path: str
    name: str | None
    watch: FileWatch


class WatchRegistry(LoggerMixin):
    """
    Tracked-path set.

    A path is tracked if and only if a live watch exists for it, and
    membership is what decides whether a module's own imports get
    tracked. At most one watch exists per path.
    """

    def __init__(
        self,
        on_change: Callable[[str], Any],
        on_error: Callable[[str, BaseException], Any],
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        """
        Initialize the registry.

        Args:
            on_change: Called with a tracked path when its file changes
            on_error: Called with a path and an exception when watching
                or handling a change fails
            observer_factory: Builds the watchdog observer on first use
        """
        self._on_change = on_change
        self._on_error = on_error
        self.observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._units: dict[str, TrackedUnit] = {}
        self._lock = threading.Lock()

    def _ensure_observer(self) -> BaseObserver:
        if self._observer is None:
            self._observer = self.observer_factory()
            # Observer threads are daemons, so watching never keeps the process alive
            self._observer.daemon = True
            self._observer.start()
        return self._observer

    def ensure_watched(self, path: str, name: str | None = None) -> bool:
        """
        Start watching a path unless it is already tracked.

        Args:
            path: Canonical path of the module file
            name: Module name the path is imported under

        Returns:
            True if a new watch was created
        """
        with self._lock:
            if path in self._units:
                return False
            try:
                watch = FileWatch.open(
                    self._ensure_observer(), path, self._on_change, self._on_error
                )
            except OSError as e:
                error = e
            else:
                self._units[path] = TrackedUnit(path=path, name=name, watch=watch)
                error = None

        if error is not None:
            self.log.error("watch_error", path=path, error=str(error))
            self._on_error(path, error)
            return False

        self.log.debug("watch_started", path=path, name=name)
        return True

    def is_tracked(self, path: str | None) -> bool:
        return path in self._units

    def name_for(self, path: str) -> str | None:
        """Get the module name a tracked path was registered under."""
        unit = self._units.get(path)
        return unit.name if unit else None

    def rename(self, path: str, name: str) -> None:
        """Record a new module name for a tracked path."""
        unit = self._units.get(path)
        if unit is not None:
            unit.name = name

    def paths(self) -> list[str]:
        """Get tracked paths in the order they were added."""
        return list(self._units)

    def unwatch_all(self) -> None:
        """Close every watch, stop the observer and forget all paths."""
        with self._lock:
            units = list(self._units.values())
            self._units.clear()
            observer, self._observer = self._observer, None

        for unit in units:
            unit.watch.close()

        if observer is not None:
            observer.stop()
            # unwatch() may run inside a reload on the observer thread itself
            if observer is not threading.current_thread():
                observer.join(timeout=5.0)

        self.log.debug("watches_closed", count=len(units))

    def __len__(self) -> int:
        return len(self._units)

    def __contains__(self, path: object) -> bool:
        return path in self._units
