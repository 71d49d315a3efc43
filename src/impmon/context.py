"""
impmon Reload Context.

The process state shared by every component, built explicitly and passed around.
Requires Python 3.11+.
"""

import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from impmon.events import EventBus
from impmon.loader.cache import ModuleCache
from impmon.loader.ignore import IgnoreList
from impmon.loader.resolver import ModuleResolver
from impmon.utils.config import ReloadSettings, RuntimeConfig, get_settings
from impmon.watcher.debouncer import DebounceGate
from impmon.watcher.registry import WatchRegistry

# Directory of the impmon package; nothing under it is ever re-executed
PACKAGE_DIR = os.path.realpath(os.path.dirname(__file__))


class ReloadContext:
    """
    Tracked paths, cooldowns, ignore list, configuration and caches.

    One instance backs each monitor.
    Lifecycle: watches and cooldowns are created on demand and torn
    down by teardown(); configuration and the ignore list survive it.
    """

    def __init__(
        self,
        on_change: Callable[[str], Any],
        on_error: Callable[[str, BaseException], Any],
        settings: ReloadSettings | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        settings = settings or get_settings().reload
        self.config = RuntimeConfig.from_settings(settings)
        self.ignore = IgnoreList(settings.ignore_patterns)
        self.gate = DebounceGate(lambda: self.config.timeout_ms)
        self.registry = WatchRegistry(on_change, on_error, observer_factory)
        self.events = EventBus()
        self.cache = ModuleCache()
        self.resolver = ModuleResolver()
        # Serializes change turns: a reload and the imports it triggers
        # run to completion before the next change is handled
        self.reload_lock = threading.RLock()
        self._local = threading.local()

    def is_self(self, path: str) -> bool:
        """Check if a path belongs to impmon itself."""
        return path == PACKAGE_DIR or path.startswith(PACKAGE_DIR + os.sep)

    @contextmanager
    def reload_pass(self) -> Iterator[set[str]]:
        """
        Join the current thread's reload pass, opening one if needed.

        Yields the set of paths reloaded so far in the pass. The pass
        closes when the outermost reload finishes.
        """
        visited = getattr(self._local, "visited", None)
        outermost = visited is None
        if outermost:
            visited = self._local.visited = set()
        try:
            yield visited
        finally:
            if outermost:
                self._local.visited = None

    def reloaded_in_pass(self, path: str) -> bool:
        visited = getattr(self._local, "visited", None)
        return visited is not None and path in visited

    def teardown(self) -> None:
        """Close every watch and drop every cooldown."""
        self.registry.unwatch_all()
        self.gate.clear()
        self.cache.forget()
