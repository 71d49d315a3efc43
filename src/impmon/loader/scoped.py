"""
impmon Dependency-Scoped Loader.

The replacement import primitive: tracks what tracked modules import.
Requires Python 3.11+.
"""

from collections.abc import Iterator
from typing import Any

from impmon.context import ReloadContext
from impmon.loader.reloader import Delegate, ModuleReloader
from impmon.loader.request import ImportRequest
from impmon.loader.resolver import Resolution, ResolutionError
from impmon.utils.logger import LoggerMixin


class DependencyScopedLoader(LoggerMixin):
    """
    Wraps an import primitive and adopts the imports of tracked modules.

    Only modules imported by an already tracked module become tracked,
    so monitoring covers the subtree below the module that called
    watch() and nothing else. Tracking starts before a module executes,
    so the imports it makes while executing are tracked too.
    """

    def __init__(self, context: ReloadContext, delegate: Delegate) -> None:
        """
        Initialize the loader.

        Args:
            context: Shared reload context
            delegate: The original import primitive
        """
        self._context = context
        self._delegate = delegate
        self.reloader = ModuleReloader(context, delegate)

    def __call__(self, request: ImportRequest) -> Any:
        context = self._context

        # Imports from code without a file (exec strings, REPL cells) start no subtree
        if request.requester is None or not context.registry.is_tracked(request.requester):
            return self._delegate(request)

        try:
            target = request.rebased()
        except ImportError:
            return self._delegate(request)

        if context.config.debug:
            self.log.debug(
                "import_intercepted",
                requester=request.requester,
                name=request.name,
                level=request.level,
                target=target.name,
            )

        try:
            for name in target.units():
                resolution = context.resolver.resolve(name)
                trackable = self._load_unit(resolution, target, request)
        except ResolutionError:
            return self._delegate(request)

        if trackable:
            for submodule in self._submodules(resolution, target):
                self._load_unit(submodule, target, request)

        return self._delegate(target)

    def _submodules(self, package: Resolution, target: ImportRequest) -> Iterator[Resolution]:
        """Resolve the ``fromlist`` entries of a package import that are modules."""
        if not package.is_package:
            return
        for item in target.fromlist:
            if item == "*":
                continue
            try:
                yield self._context.resolver.resolve(f"{package.name}.{item}")
            except ResolutionError:
                # An attribute of the package, not a submodule
                continue

    def _load_unit(
        self, resolution: Resolution, target: ImportRequest, request: ImportRequest
    ) -> bool:
        """
        Track and load one module unless it is ignored, impmon itself or has no file.

        Returns:
            True if the module is trackable
        """
        context = self._context
        path = resolution.path

        if context.ignore.matches(path):
            return False

        if context.is_self(path):
            # impmon is never re-executed; importing it restores the default configuration
            context.config.reset()
            return False

        if not resolution.has_file:
            return False

        context.cache.bind(path, resolution.name)

        if path in context.cache and (
            not context.config.reload_children or context.reloaded_in_pass(path)
        ):
            return True

        if context.config.console:
            self.log.info(
                "import_tracked",
                requester=request.requester,
                name=request.name,
                path=path,
            )

        if context.registry.ensure_watched(path, resolution.name) and context.config.debug:
            self.log.debug("monitor", path=path)

        self.reloader.reload(
            path,
            ImportRequest(name=resolution.name, globals=target.globals, locals=target.locals),
        )
        return True
