"""
impmon: hot reload for the modules your program imports.

    import impmon
    impmon.watch(__name__)

Every module imported after this call by the calling module, and by the
modules it imports in turn, is watched and re-executed in place when its
file changes. Requires Python 3.11+.
"""

from impmon.events import CHANGE, ERROR, LOADED, EventBus
from impmon.loader.reloader import UNLOAD_HOOK
from impmon.monitor import Monitor
from impmon.utils.config import WatchOptions

_monitor = Monitor()


def get_monitor() -> Monitor:
    """Get the process-wide monitor behind the module-level functions."""
    return _monitor


watch = _monitor.watch
unwatch = _monitor.unwatch
timeout = _monitor.timeout
debug = _monitor.debug
console = _monitor.console
reload_children = _monitor.reload_children
ignore = _monitor.ignore
on = _monitor.on
once = _monitor.once
off = _monitor.off
list = _monitor.list

__all__ = [
    "CHANGE",
    "ERROR",
    "LOADED",
    "EventBus",
    "Monitor",
    "UNLOAD_HOOK",
    "WatchOptions",
    "get_monitor",
    "watch",
    "unwatch",
    "timeout",
    "debug",
    "console",
    "reload_children",
    "ignore",
    "on",
    "once",
    "off",
    "list",
]
