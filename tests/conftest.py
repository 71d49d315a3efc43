"""
impmon Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import importlib
import os
import sys
import textwrap
from collections import defaultdict
from pathlib import Path
from typing import Any, Callable, Generator

import pytest

import impmon
from impmon.monitor import Monitor


class FakeObserver:
    """Stands in for a watchdog observer; events are fed in with dispatch()."""

    def __init__(self) -> None:
        self.handlers: dict[tuple[str, bool], set[Any]] = defaultdict(set)
        self.daemon = False
        self.started = False
        self.stopped = False
        self.fail_with: OSError | None = None

    def schedule(self, handler: Any, path: str, recursive: bool = False) -> tuple[str, bool]:
        if self.fail_with is not None:
            raise self.fail_with
        watch = (path, recursive)
        self.handlers[watch].add(handler)
        return watch

    def remove_handler_for_watch(self, handler: Any, watch: tuple[str, bool]) -> None:
        self.handlers[watch].remove(handler)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        pass

    def dispatch(self, event: Any) -> None:
        for handlers in list(self.handlers.values()):
            for handler in list(handlers):
                handler.dispatch(event)

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self.handlers.values())


class ModuleTree:
    """A directory of throwaway modules on sys.path."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, relative: str, source: str = "") -> str:
        """
        Write a module file.

        Args:
            relative: Path below the root, e.g. "pkg/__init__.py"
            source: Module source; dedented

        Returns:
            Canonical path of the file
        """
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        importlib.invalidate_caches()
        return os.path.realpath(path)

    def path(self, relative: str) -> str:
        return os.path.realpath(self.root / relative)


@pytest.fixture(autouse=True)
def no_bytecode(monkeypatch: pytest.MonkeyPatch) -> None:
    """Rewritten modules must be read from source, never from a stale .pyc."""
    monkeypatch.setattr(sys, "dont_write_bytecode", True)


@pytest.fixture
def module_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[ModuleTree, None, None]:
    """Create a module directory on sys.path and unload its modules afterwards."""
    root = tmp_path / "units"
    root.mkdir()
    monkeypatch.syspath_prepend(str(root))

    yield ModuleTree(root)

    prefix = os.path.realpath(root) + os.sep
    for name, module in list(sys.modules.items()):
        file = getattr(module, "__file__", None)
        if isinstance(file, str) and os.path.realpath(file).startswith(prefix):
            del sys.modules[name]


@pytest.fixture
def observers() -> list[FakeObserver]:
    """Fake observers created by the monitor under test."""
    return []


@pytest.fixture
def monitor(
    observers: list[FakeObserver], monkeypatch: pytest.MonkeyPatch
) -> Generator[Monitor, None, None]:
    """The process-wide monitor, backed by fake observers and reset after the test."""
    monitor = impmon.get_monitor()

    def factory() -> FakeObserver:
        observer = FakeObserver()
        observers.append(observer)
        return observer

    monkeypatch.setattr(monitor.context.registry, "observer_factory", factory)

    yield monitor

    monitor.unwatch()
    monitor.reset()
    monitor.set_event_loop(None)


@pytest.fixture
def live_monitor() -> Generator[Monitor, None, None]:
    """The process-wide monitor with real watchdog observers."""
    monitor = impmon.get_monitor()

    yield monitor

    monitor.unwatch()
    monitor.reset()


@pytest.fixture
def recorder() -> Callable[[Monitor], list[tuple]]:
    """Subscribe to change and loaded events, collecting (event, path[, module]) tuples."""

    def attach(monitor: Monitor) -> list[tuple]:
        events: list[tuple] = []
        monitor.on(impmon.CHANGE, lambda path: events.append(("change", path)))
        monitor.on(
            impmon.LOADED, lambda path, module: events.append(("loaded", path, module))
        )
        return events

    return attach
