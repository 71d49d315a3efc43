"""
impmon File Watcher Package.

Per-file monitoring and change debouncing.
Requires Python 3.11+.
"""

from impmon.watcher.debouncer import DebounceGate
from impmon.watcher.file_watcher import FileWatch, UnitFileHandler
from impmon.watcher.registry import TrackedUnit, WatchRegistry

__all__ = ["DebounceGate", "FileWatch", "UnitFileHandler", "TrackedUnit", "WatchRegistry"]
