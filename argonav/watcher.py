"""File-system watcher that invalidates caches when YAML files change."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from . import config

logger = logging.getLogger(__name__)

InvalidateCallback = Callable[[str], None]


class YamlChangeHandler(FileSystemEventHandler):
    """Forward create/modify/delete/move events of YAML files to a callback."""

    def __init__(self, on_change: InvalidateCallback):
        super().__init__()
        self.on_change = on_change
        self.event_count = 0

    def on_created(self, event: FileSystemEvent) -> None:
        self._handle(event.src_path, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._handle(event.src_path, event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._handle(event.src_path, event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._handle(event.src_path, event)
        dest = getattr(event, "dest_path", None)
        if dest:
            self._handle(dest, event)

    def _handle(self, src_path: Union[str, bytes], event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = src_path.decode() if isinstance(src_path, bytes) else src_path
        if not path.endswith(config.YAML_EXTENSIONS):
            return
        self.event_count += 1
        logger.debug("%s: %s", event.event_type, path)
        self.on_change(path)


class WorkspaceWatcher:
    """Owns a watchdog observer scheduled recursively on a workspace root."""

    def __init__(self, root: Union[str, Path], on_change: InvalidateCallback):
        self.root = str(root)
        self.handler = YamlChangeHandler(on_change)
        self._observer: Optional[Observer] = None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self.handler, self.root, recursive=True)
        observer.start()
        self._observer = observer
        logger.info("Watching %s for YAML changes", self.root)

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def __enter__(self) -> "WorkspaceWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
