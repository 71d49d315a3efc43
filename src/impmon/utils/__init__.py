"""
impmon Utilities Package.

Configuration and logging shared across the library.
Requires Python 3.11+.
"""

from impmon.utils.config import (
    RuntimeConfig,
    Settings,
    WatchOptions,
    get_settings,
)
from impmon.utils.logger import configure_logging, get_logger, LoggerMixin

__all__ = [
    "RuntimeConfig",
    "Settings",
    "WatchOptions",
    "get_settings",
    "configure_logging",
    "get_logger",
    "LoggerMixin",
]
