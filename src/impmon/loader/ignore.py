"""
impmon Ignore Matcher.

Decides whether a resolved module path should ever be tracked.
Requires Python 3.11+.
"""

import re
from collections.abc import Iterable
from typing import Any

from impmon.utils.config import DEFAULT_IGNORE_PATTERN


def matches(path: str, entries: Iterable[Any]) -> bool:
    """
    Check a path against a list of ignore entries.

    An entry is a nested list/tuple (matched recursively), a compiled
    pattern (``search``), a predicate called with the path, or anything
    else compared for equality. Stops at the first match.

    Args:
        path: Canonical module path
        entries: Ignore entries

    Returns:
        True if any entry matches
    """
    for entry in entries:
        if isinstance(entry, (list, tuple)):
            hit = matches(path, entry)
        elif isinstance(entry, re.Pattern):
            hit = entry.search(path) is not None
        elif callable(entry):
            hit = bool(entry(path))
        else:
            hit = entry == path
        if hit:
            return True
    return False


class IgnoreList:
    """Ordered, mutable list of ignore entries."""

    def __init__(self, patterns: Iterable[str] | None = None) -> None:
        self._defaults = [
            re.compile(p) for p in (patterns if patterns is not None else [DEFAULT_IGNORE_PATTERN])
        ]
        self._entries: list[Any] = list(self._defaults)

    def matches(self, path: str) -> bool:
        return matches(path, self._entries)

    def update(self, *entries: Any) -> None:
        """
        Append ignore entries.

        A leading ``None`` clears the current entries (defaults included)
        before the rest are appended.
        """
        if entries and entries[0] is None:
            self._entries = []
            entries = entries[1:]
        self._entries.extend(entries)

    def reset(self) -> None:
        """Restore the default entries."""
        self._entries = list(self._defaults)

    @property
    def entries(self) -> list[Any]:
        return list(self._entries)
