"""
Asset watcher module.

Watches the public directory tree with watchdog and reports every change
to a callback.
"""

import os
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from server.utils.logger import logger

# Directories to ignore
IGNORE_DIRS = {".git", "__pycache__", "node_modules"}
# Editor temp files
IGNORE_SUFFIXES = (".swp", ".swx", ".tmp", "~")

CHANGE_EVENTS = {"created", "modified", "deleted", "moved"}


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, watcher: "AssetWatcher"):
        self.watcher = watcher

    def on_any_event(self, event):
        if event.event_type not in CHANGE_EVENTS:
            return
        path = os.fsdecode(event.src_path)
        if self.watcher.should_ignore(path):
            return
        logger.debug(f"Asset {event.event_type}: {path}")
        self.watcher.on_change()


class AssetWatcher:
    """Recursive watch of the public directory."""

    def __init__(self, root, on_change: Callable[[], None]):
        self.root = Path(root).resolve()
        self.on_change = on_change  # Called on the observer thread
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def should_ignore(self, path: str) -> bool:
        """Check if the path should be ignored."""
        try:
            rel_path = os.path.relpath(path, self.root)
        except ValueError:
            return True
        parts = rel_path.split(os.sep)
        if any(part in IGNORE_DIRS for part in parts):
            return True
        return parts[-1].endswith(IGNORE_SUFFIXES)

    def start(self):
        """Start watching the directory."""
        if self._observer is not None:
            return
        self.root.mkdir(parents=True, exist_ok=True)
        observer = Observer()
        observer.schedule(_ChangeHandler(self), str(self.root), recursive=True)
        observer.start()
        self._observer = observer
        logger.info(f"Watching {self.root} for changes")

    def stop(self):
        """Stop watching."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        logger.info("Asset watcher stopped")
