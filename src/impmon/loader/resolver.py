"""
impmon Module Resolver.

Turns module names into canonical file paths without importing anything.
Requires Python 3.11+.
"""

import sys
from dataclasses import dataclass
from importlib.machinery import ModuleSpec

from impmon.loader.request import canonical_path


class ResolutionError(LookupError):
    """A module name could not be resolved to a location."""


@dataclass(frozen=True)
class Resolution:
    """Where a module name lives."""

    name: str
    # Canonical file path, or the bare module name for built-in, frozen,
    # standard-library and namespace modules
    path: str
    is_package: bool = False

    @property
    def has_file(self) -> bool:
        return self.path != self.name


class ModuleResolver:
    """
    Resolves module names through the finders on ``sys.meta_path``.

    Unlike ``importlib.util.find_spec`` this never imports a parent
    package to read its ``__path__``: parents that are not loaded yet are
    resolved as well and their search locations used instead.
    Standard-library modules resolve to their bare name so they are
    never tracked.
    """

    def __init__(self, modules: dict | None = None) -> None:
        self._modules = modules if modules is not None else sys.modules

    def resolve(self, name: str) -> Resolution:
        """
        Resolve a fully qualified module name.

        Args:
            name: Absolute module name

        Returns:
            Resolution with the canonical path

        Raises:
            ResolutionError: If no finder knows the module
        """
        if not name or name.startswith("."):
            raise ResolutionError(name)

        top = name.partition(".")[0]
        if top in sys.stdlib_module_names or top in sys.builtin_module_names:
            return Resolution(name=name, path=name)

        module = self._modules.get(name)
        if module is not None:
            file = getattr(module, "__file__", None)
            is_package = hasattr(module, "__path__")
            if isinstance(file, str):
                return Resolution(name=name, path=canonical_path(file), is_package=is_package)
            return Resolution(name=name, path=name, is_package=is_package)

        spec = self.find_spec(name)
        if spec is None:
            raise ResolutionError(name)

        is_package = spec.submodule_search_locations is not None
        if spec.has_location and spec.origin:
            return Resolution(name=name, path=canonical_path(spec.origin), is_package=is_package)
        return Resolution(name=name, path=name, is_package=is_package)

    def find_spec(self, name: str) -> ModuleSpec | None:
        """Ask each meta path finder for a module spec."""
        parent = name.rpartition(".")[0]
        search_path = None
        if parent:
            search_path = self._search_locations(parent)
            if search_path is None:
                return None

        for finder in sys.meta_path:
            find_spec = getattr(finder, "find_spec", None)
            if find_spec is None:
                continue
            spec = find_spec(name, search_path)
            if spec is not None:
                return spec
        return None

    def _search_locations(self, package: str) -> list[str] | None:
        module = self._modules.get(package)
        if module is not None:
            path = getattr(module, "__path__", None)
            return list(path) if path is not None else None
        spec = self.find_spec(package)
        if spec is None or spec.submodule_search_locations is None:
            return None
        return list(spec.submodule_search_locations)
