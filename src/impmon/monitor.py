"""
impmon Monitor.

Public, chainable control surface over the import hook and reload context.
Requires Python 3.11+.
"""

from __future__ import annotations

import asyncio
import importlib
import os
import sys
from collections.abc import Callable, Mapping
from types import ModuleType
from typing import Any

from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from impmon.context import ReloadContext
from impmon.events import CHANGE, ERROR, Listener
from impmon.hooks import ImportHook
from impmon.loader.request import canonical_path
from impmon.loader.scoped import DependencyScopedLoader
from impmon.utils.config import ReloadSettings, WatchOptions
from impmon.utils.logger import LoggerMixin

# Something watch() can track: a module, a module name or a file path
Unit = ModuleType | str | os.PathLike[str]


class Monitor(LoggerMixin):
    """
    Hot-reload monitor.

    Usage:
        import impmon
        impmon.watch(__name__).timeout(500).on("loaded", on_loaded)

    Every method except list() returns the monitor itself.
    """

    def __init__(
        self,
        settings: ReloadSettings | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        """
        Initialize the monitor.

        Args:
            settings: Reload defaults; read from the environment if omitted
            observer_factory: Builds the watchdog observer
        """
        self.context = ReloadContext(
            on_change=self._dispatch_change,
            on_error=self._report_error,
            settings=settings,
            observer_factory=observer_factory,
        )
        self._hook = ImportHook()
        self._loader: DependencyScopedLoader | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # === Lifecycle ===

    def watch(
        self,
        unit: Unit | WatchOptions | Mapping[str, Any] | None = None,
        options: WatchOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> Monitor:
        """
        Install the import hook and start tracking a module.

        Options are applied on every call, including calls made while
        the hook is already installed; installing is done only once.
        Only imports made by tracked modules are tracked, so a call
        without a unit tracks nothing until a unit is given here or
        through track().

        Usage:
            impmon.watch(__name__)
            impmon.watch(__name__, {"timeout": 500})
            impmon.watch({"timeout": 500}, debug=True)

        Args:
            unit: Module to track: a module object, a module name
                (usually ``__name__``) or a file path. An options record
                or mapping in this position is taken as ``options``.
            options: Options record or mapping
            **overrides: Individual options, applied over ``options``

        Returns:
            The monitor

        Raises:
            TypeError: If options are given both positionally and as ``options``
        """
        if isinstance(unit, (WatchOptions, Mapping)):
            if options is not None:
                raise TypeError("watch() got options twice")
            unit, options = None, unit

        self._apply(WatchOptions.coerce(options, overrides))

        if self._hook.install(self._build_loader):
            self.log.info("hook_installed", ignore=len(self.context.ignore.entries))

        if unit is not None:
            self._adopt(unit)
        return self

    def unwatch(self) -> Monitor:
        """Close every watch and restore the original import call."""
        self.context.teardown()
        if self._hook.uninstall():
            self.log.info("hook_removed")
        self._loader = None
        return self

    def reset(self) -> Monitor:
        """Restore the default ignore list and configuration; drop all listeners."""
        self.context.ignore.reset()
        self.context.config.reset()
        self.context.events.clear()
        return self

    def _build_loader(self, delegate: Callable[..., Any]) -> DependencyScopedLoader:
        self._loader = DependencyScopedLoader(self.context, delegate)
        return self._loader

    def _apply(self, options: WatchOptions) -> None:
        if options.ignore is not None:
            self.ignore(options.ignore)
        if options.debug is not None:
            self.debug(options.debug)
        if options.console is not None:
            self.console(options.console)
        if options.timeout is not None:
            self.timeout(options.timeout)
        if options.reload_children is not None:
            self.reload_children(options.reload_children)

    def _adopt(self, unit: Unit) -> None:
        if isinstance(unit, str) and unit in sys.modules:
            unit = sys.modules[unit]

        if isinstance(unit, ModuleType):
            file = getattr(unit, "__file__", None)
            if not file:
                self.log.warning("unit_has_no_file", name=unit.__name__)
                return
            self.track(file, unit.__name__)
            return

        path = canonical_path(os.fspath(unit))
        for name, module in sys.modules.copy().items():
            file = getattr(module, "__file__", None)
            if isinstance(file, str) and canonical_path(file) == path:
                self.track(path, name)
                return
        # A file nothing has imported yet is taken to be the entry script
        self.track(path)

    def track(self, path: str | os.PathLike[str], name: str = "__main__") -> Monitor:
        """
        Track a module file explicitly.

        Args:
            path: Path of the module's source file
            name: Module name it is loaded under
        """
        path = canonical_path(os.fspath(path))
        self.context.cache.bind(path, name)
        if self.context.registry.ensure_watched(path, name) and self.context.config.console:
            self.log.info("unit_tracked", name=name, path=path)
        return self

    # === Configuration ===

    def timeout(self, ms: int) -> Monitor:
        """Set the cooldown after an accepted change, in milliseconds."""
        self.context.config.timeout_ms = ms
        return self

    def debug(self, flag: bool) -> Monitor:
        """Toggle internal diagnostics (debug level)."""
        self.context.config.debug = flag
        return self

    def console(self, flag: bool) -> Monitor:
        """Toggle concise logging of what is tracked and reloaded."""
        self.context.config.console = flag
        return self

    def reload_children(self, flag: bool) -> Monitor:
        """Toggle re-executing already-cached children of tracked modules."""
        self.context.config.reload_children = flag
        return self

    def ignore(self, *entries: Any) -> Monitor:
        """
        Add ignore entries.

        Entries are strings (exact path), compiled patterns, predicates
        or nested lists. A leading ``None`` clears existing entries,
        defaults included.
        """
        self.context.ignore.update(*entries)
        return self

    def set_event_loop(self, loop: asyncio.AbstractEventLoop | None) -> Monitor:
        """Run change handling on an asyncio loop instead of the watcher thread."""
        self._loop = loop
        return self

    def list(self) -> list[str]:
        """Get the canonical paths of tracked modules, in tracking order."""
        return self.context.registry.paths()

    # === Events ===

    def on(self, event: str, listener: Listener) -> Monitor:
        self.context.events.on(event, listener)
        return self

    def once(self, event: str, listener: Listener) -> Monitor:
        self.context.events.once(event, listener)
        return self

    def off(self, event: str, listener: Listener) -> Monitor:
        self.context.events.off(event, listener)
        return self

    # === Change handling ===

    def handle_change(self, path: str) -> bool:
        """
        Handle one change signal for a path.

        Reload errors propagate to the caller.

        Returns:
            True if the change was accepted and the module reloaded
        """
        context = self.context
        loader = self._loader
        if loader is None or not context.registry.is_tracked(path):
            return False
        if not context.gate.accept(path):
            return False

        if context.config.debug:
            self.log.debug("change", path=path)
        if context.config.console:
            self.log.info("reloading", path=path)

        with context.reload_lock:
            context.events.emit(CHANGE, path)
            # Pick up files created since the last import
            importlib.invalidate_caches()
            loader.reloader.reload(path)
        return True

    def _dispatch_change(self, path: str) -> None:
        loop = self._loop
        if loop is not None and not loop.is_closed():
            loop.call_soon_threadsafe(self.handle_change, path)
            return
        self.handle_change(path)

    def _report_error(self, path: str, error: BaseException) -> None:
        self.context.events.emit(ERROR, path, error)
