"""
impmon Import Hook.

Installs a loader in place of ``builtins.__import__`` and restores the original.
Requires Python 3.11+.
"""

import builtins
from collections.abc import Callable
from typing import Any

from impmon.loader.request import ImportRequest
from impmon.utils.logger import LoggerMixin

Loader = Callable[[ImportRequest], Any]


class ImportHook(LoggerMixin):
    """
    The boundary where a loader replaces the interpreter's import call.

    install() hands the original ``__import__`` (adapted to take an
    ImportRequest) to a factory and installs whatever loader it returns.
    """

    def __init__(self) -> None:
        self._original: Callable[..., Any] | None = None
        self._installed: Callable[..., Any] | None = None

    def install(self, wrap: Callable[[Loader], Loader]) -> bool:
        """
        Install a loader built around the original import call.

        Args:
            wrap: Receives the original import primitive, returns the
                loader to install

        Returns:
            False if a loader was already installed
        """
        if self._installed is not None:
            return False

        original = builtins.__import__

        def delegate(request: ImportRequest) -> Any:
            return original(
                request.name, request.globals, request.locals, request.fromlist, request.level
            )

        loader = wrap(delegate)

        def __import__(
            name: str,
            globals: dict[str, Any] | None = None,
            locals: Any = None,
            fromlist: Any = (),
            level: int = 0,
        ) -> Any:
            return loader(ImportRequest.from_call(name, globals, locals, fromlist, level))

        self._original = original
        self._installed = __import__
        builtins.__import__ = __import__
        self.log.debug("hook_installed")
        return True

    def uninstall(self) -> bool:
        """
        Restore the original import call.

        Returns:
            False if nothing was installed
        """
        if self._installed is None:
            return False
        builtins.__import__ = self._original
        self._original = None
        self._installed = None
        self.log.debug("hook_removed")
        return True
