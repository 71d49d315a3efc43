"""
impmon Module Reloader.

Evicts one module from the cache and executes it again.
Requires Python 3.11+.
"""

import importlib.util
from collections.abc import Callable
from types import ModuleType
from typing import Any

from impmon.context import ReloadContext
from impmon.events import LOADED
from impmon.loader.request import ImportRequest
from impmon.utils.logger import LoggerMixin

# Optional module attribute called right before the module is evicted
UNLOAD_HOOK = "impmon_on_file_change"

# The entry script is re-executed under this name so its
# ``if __name__ == "__main__":`` block does not run again
ENTRY_ALIAS = "__mp_main__"
ENTRY_NAMES = ("__main__", ENTRY_ALIAS)

Delegate = Callable[[ImportRequest], Any]


class ModuleReloader(LoggerMixin):
    """Cache invalidator: unload hook, eviction, re-execution, notification."""

    def __init__(self, context: ReloadContext, delegate: Delegate) -> None:
        """
        Initialize the reloader.

        Args:
            context: Shared reload context
            delegate: The original import primitive
        """
        self._context = context
        self._delegate = delegate

    def reload(self, path: str, request: ImportRequest | None = None) -> ModuleType | None:
        """
        Produce a freshly executed module for a path.

        Errors from the unload hook or from executing the module are
        not caught.

        Args:
            path: Canonical path of the module
            request: Import request to execute; defaults to an absolute
                import of the name the path is bound to

        Returns:
            The new module
        """
        context = self._context
        name = context.cache.name_for(path) or context.registry.name_for(path)
        if name is None and request is not None:
            name = request.name
        if name is None:
            raise LookupError(f"no module name known for {path}")

        if context.config.debug:
            self.log.debug("load", path=path, name=name)

        with context.reload_pass() as visited:
            visited.add(path)

            previous = context.cache.get(path)
            if previous is not None:
                on_unload = getattr(previous, UNLOAD_HOOK, None)
                if callable(on_unload):
                    on_unload()

            if name in ENTRY_NAMES:
                module = self._execute_entry(path)
            else:
                context.cache.evict(path)
                self._delegate(request or ImportRequest.absolute(name))
                module = context.cache.get(path)
                if module is not None and hasattr(module, "__path__"):
                    self._reattach_submodules(name, module)

        context.events.emit(LOADED, path, module)
        return module

    def _reattach_submodules(self, name: str, package: ModuleType) -> None:
        # The import system only binds a submodule to its parent when the
        # submodule is loaded, so cached children must be bound to the new package
        for child, module in self._context.cache.submodules(name).items():
            if not hasattr(package, child):
                setattr(package, child, module)

    def _execute_entry(self, path: str) -> ModuleType:
        """
        Run the entry script's file again as a fresh module.

        ``sys.modules["__main__"]`` keeps the original module.
        """
        context = self._context
        spec = importlib.util.spec_from_file_location(ENTRY_ALIAS, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"cannot load entry script {path}", path=path)

        module = importlib.util.module_from_spec(spec)
        context.cache.store(path, ENTRY_ALIAS, module)
        context.registry.rename(path, ENTRY_ALIAS)
        try:
            spec.loader.exec_module(module)
        except BaseException:
            context.cache.evict(path)
            raise
        return module
