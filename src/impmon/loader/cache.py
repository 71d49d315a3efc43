"""
impmon Module Cache.

Path-keyed view over the interpreter's module table.
Requires Python 3.11+.
"""

import sys
import threading
from collections.abc import MutableMapping
from types import ModuleType


class ModuleCache:
    """
    Reads and invalidates ``sys.modules`` entries by canonical path.

    ``sys.modules`` is keyed by module name, so every path is bound to
    the name it was resolved under. The binding survives eviction so a
    path can be re-imported later. The table itself is never replaced.
    """

    def __init__(self, modules: MutableMapping[str, ModuleType] | None = None) -> None:
        self._modules = modules if modules is not None else sys.modules
        self._names: dict[str, str] = {}
        self._lock = threading.Lock()

    def bind(self, path: str, name: str) -> None:
        """Record that a path is imported under a module name."""
        with self._lock:
            self._names[path] = name

    def name_for(self, path: str) -> str | None:
        return self._names.get(path)

    def get(self, path: str) -> ModuleType | None:
        """Get the cached module for a path, if loaded."""
        name = self._names.get(path)
        if name is None:
            return None
        return self._modules.get(name)

    def __contains__(self, path: object) -> bool:
        name = self._names.get(path)  # type: ignore[arg-type]
        return name is not None and name in self._modules

    def evict(self, path: str) -> ModuleType | None:
        """
        Remove a path's module from ``sys.modules``.

        Returns:
            The evicted module, or None if it was not cached
        """
        name = self._names.get(path)
        if name is None:
            return None
        return self._modules.pop(name, None)

    def store(self, path: str, name: str, module: ModuleType) -> None:
        """Bind a path and put its module in ``sys.modules``."""
        self.bind(path, name)
        self._modules[name] = module

    def submodules(self, name: str) -> dict[str, ModuleType]:
        """Get the loaded direct children of a package, keyed by their last name part."""
        prefix = name + "."
        return {
            child[len(prefix):]: module
            for child, module in list(self._modules.items())
            if child.startswith(prefix) and "." not in child[len(prefix):] and module is not None
        }

    def forget(self) -> None:
        """Drop all path bindings; ``sys.modules`` is left alone."""
        with self._lock:
            self._names.clear()
