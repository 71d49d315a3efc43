"""
impmon Structured Logging Module.

structlog setup for the runner script and the LoggerMixin used by every
component. Importing impmon never configures logging.
Requires Python 3.11+.
"""

import logging
import sys
import threading
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from impmon.utils.config import get_settings


def _add_app_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application context to all log entries."""
    settings = get_settings()
    event_dict["app"] = settings.app_name
    event_dict["version"] = settings.app_version
    return event_dict


def _add_thread(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Name the thread, since reloads run on watchdog observer threads."""
    thread = threading.current_thread()
    if thread is not threading.main_thread():
        event_dict["thread"] = thread.name
    return event_dict


def _renderer(fmt: str) -> list[Processor]:
    if fmt == "json":
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [
        structlog.dev.ConsoleRenderer(
            colors=sys.stderr.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )
    ]


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structured logging on stderr.

    Args:
        level: Log level name; defaults to LOG_LEVEL
        fmt: "console" or "json"; defaults to LOG_FORMAT
    """
    settings = get_settings()
    level_name = (level or settings.logging.level).upper()
    numeric_level = getattr(logging, level_name)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        _add_app_context,
        _add_thread,
        *_renderer(fmt or settings.logging.format),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=numeric_level)

    # watchdog logs every emitter start at debug level
    logging.getLogger("watchdog").setLevel(logging.WARNING)


def get_logger(name: str | None = None, **context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name
        **context: Values bound to every entry

    Returns:
        structlog logger
    """
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger


class LoggerMixin:
    """
    Gives a class a ``log`` property bound to its component name.

    Usage:
        class ModuleReloader(LoggerMixin):
            def reload(self, path):
                self.log.debug("load", path=path)
    """

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        """Get logger bound to this class name."""
        if not hasattr(self, "_logger"):
            name = type(self).__name__
            self._logger = get_logger(f"impmon.{name}", component=name)
        return self._logger
