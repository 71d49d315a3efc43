"""
impmon Import Request.

One intercepted import statement, with its requesting module made explicit.
Requires Python 3.11+.
"""

import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from importlib.util import resolve_name
from typing import Any


@lru_cache(maxsize=4096)
def canonical_path(path: str) -> str:
    """Absolute, symlink-free form of a module path, used as tracking key."""
    return os.path.realpath(path)


def package_of(module_globals: dict[str, Any]) -> str | None:
    """
    Work out the package a module's relative imports are resolved against.

    Follows the interpreter: ``__package__``, then ``__spec__.parent``,
    then ``__name__`` (minus its last part unless it is a package).
    """
    package = module_globals.get("__package__")
    if package is not None:
        return package
    spec = module_globals.get("__spec__")
    if spec is not None:
        return spec.parent
    name = module_globals.get("__name__")
    if name is None:
        return None
    if "__path__" in module_globals:
        return name
    return name.rpartition(".")[0]


@dataclass(frozen=True)
class ImportRequest:
    """Arguments of one ``__import__`` call plus the requesting module's path."""

    name: str
    requester: str | None = None
    package: str | None = None
    fromlist: tuple[str, ...] = ()
    level: int = 0
    globals: dict[str, Any] | None = field(default=None, repr=False, compare=False)
    locals: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_call(
        cls,
        name: str,
        globals: dict[str, Any] | None = None,
        locals: Any = None,
        fromlist: Any = (),
        level: int = 0,
    ) -> "ImportRequest":
        """Build a request from the arguments ``__import__`` receives."""
        requester = None
        package = None
        if globals:
            file = globals.get("__file__")
            if isinstance(file, str):
                requester = canonical_path(file)
            package = package_of(globals)
        return cls(
            name=name,
            requester=requester,
            package=package,
            fromlist=tuple(fromlist or ()),
            level=level,
            globals=globals,
            locals=locals,
        )

    @classmethod
    def absolute(cls, name: str) -> "ImportRequest":
        """A plain ``import name`` with no requesting module."""
        return cls(name=name)

    @property
    def is_relative(self) -> bool:
        return self.level > 0

    def rebased(self) -> "ImportRequest":
        """
        Rewrite a relative request as an absolute one.

        The resolved name is anchored at the requesting module's
        package, since impmon resolves it on the requester's behalf.

        Raises:
            ImportError: If the request is relative but has no usable package
        """
        if not self.is_relative:
            return self
        if not self.package:
            raise ImportError("attempted relative import with no known parent package")
        absolute = resolve_name("." * self.level + self.name, self.package)
        return replace(self, name=absolute, level=0)

    def units(self) -> list[str]:
        """
        Names of the modules an absolute request loads, parents first.

        ``import a.b.c`` loads ``a``, ``a.b`` and ``a.b.c``.
        """
        parts = self.name.split(".")
        return [".".join(parts[: i + 1]) for i in range(len(parts))]
