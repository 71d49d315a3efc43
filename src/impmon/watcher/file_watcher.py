"""
impmon File Watcher.

Per-file change handlers on top of watchdog directory watches.
Requires Python 3.11+.
"""

import os
from collections.abc import Callable
from typing import Any

from watchdog.events import (
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)
from watchdog.observers.api import BaseObserver, ObservedWatch

from impmon.utils.logger import LoggerMixin


def _event_path(raw: str | bytes) -> str:
    return os.path.realpath(os.fsdecode(raw))


class UnitFileHandler(FileSystemEventHandler, LoggerMixin):
    """
    Forwards events for exactly one file.

    watchdog watches directories, so every handler scheduled on a
    directory sees all of its events and keeps only its own path.
    Editors that save through a temporary file show up as a move onto
    the path, which counts as a change. Deletions do not.
    """

    def __init__(
        self,
        path: str,
        on_change: Callable[[str], Any],
        on_error: Callable[[str, BaseException], Any],
    ) -> None:
        """
        Initialize the file handler.

        Args:
            path: Canonical path of the watched file
            on_change: Called with the path when the file changes
            on_error: Called with the path and the exception when
                on_change raises
        """
        super().__init__()
        self._path = path
        self._on_change = on_change
        self._on_error = on_error

    def _notify(self) -> None:
        try:
            self._on_change(self._path)
        except Exception as e:
            # Top of the observer thread: report instead of killing it
            self.log.error("reload_failed", path=self._path, error=str(e), exc_info=e)
            self._on_error(self._path, e)

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        if isinstance(event, DirCreatedEvent):
            return
        if _event_path(event.src_path) == self._path:
            self._notify()

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        if isinstance(event, DirModifiedEvent):
            return
        if _event_path(event.src_path) == self._path:
            self._notify()

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        if isinstance(event, DirMovedEvent):
            return
        if _event_path(event.dest_path) == self._path:
            self._notify()


class FileWatch:
    """Handle for one watched file; close() detaches its handler."""

    def __init__(
        self, observer: BaseObserver, watch: ObservedWatch, handler: UnitFileHandler
    ) -> None:
        self._observer = observer
        self._watch = watch
        self._handler = handler
        self._closed = False

    @classmethod
    def open(
        cls,
        observer: BaseObserver,
        path: str,
        on_change: Callable[[str], Any],
        on_error: Callable[[str, BaseException], Any],
    ) -> "FileWatch":
        """
        Start watching a single file.

        Args:
            observer: Observer that owns the directory watch
            path: Canonical path of the file
            on_change: Change callback
            on_error: Error callback

        Raises:
            OSError: If the directory cannot be watched
        """
        handler = UnitFileHandler(path, on_change, on_error)
        watch = observer.schedule(handler, os.path.dirname(path), recursive=False)
        return cls(observer, watch, handler)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._observer.remove_handler_for_watch(self._handler, self._watch)
        except KeyError:
            # Watch already unscheduled by the observer
            pass
