"""
File watcher for Ableton Live project files.

This module provides:
- Filesystem monitoring for .als/.xml files
- Debouncing of the burst of events Live produces per save
- A callback per settled change
"""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..constants import ServerConstants

logger = logging.getLogger(__name__)


class AbletonFileHandler(FileSystemEventHandler):
    """
    File system event handler for Ableton Live files.

    Live saves by writing a temporary file and moving it over the set, so
    both modifications and moves onto a watched name count as changes.
    """

    def __init__(
        self,
        callback: Callable[[Path], None],
        target: Optional[Path] = None,
        extensions: Iterable[str] = ServerConstants.WATCHED_SUFFIXES,
        debounce_seconds: float = ServerConstants.DEBOUNCE_SECONDS,
    ):
        """
        Args:
            callback: Function to call with the changed file's path
            target: If set, only changes to this exact file are reported
            extensions: File suffixes to report
            debounce_seconds: Changes to one file closer together than this are merged
        """
        self.callback = callback
        self.target = target.resolve() if target else None
        self.extensions = frozenset(extensions)
        self.debounce_seconds = debounce_seconds
        self.last_modified: Dict[Path, float] = {}

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(Path(event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._handle(Path(event.dest_path))

    def _handle(self, file_path: Path) -> None:
        if file_path.suffix not in self.extensions:
            return
        if self.target is not None and file_path.resolve() != self.target:
            return

        now = time.monotonic()
        last_time = self.last_modified.get(file_path)
        if last_time is not None and now - last_time < self.debounce_seconds:
            return
        self.last_modified[file_path] = now

        logger.info(f"Detected change in {file_path.name}")
        try:
            self.callback(file_path)
        except Exception as e:
            logger.error(f"Error processing file change: {e}")


class FileWatcher:
    """
    Watches one project file for changes.

    Usage:
        watcher = FileWatcher(on_change)
        watcher.watch(Path("Song.als"))
        with watcher:
            ...
    """

    def __init__(self, callback: Callable[[Path], None], debounce_seconds: float = ServerConstants.DEBOUNCE_SECONDS):
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.observer: Optional[Observer] = None
        self.handler: Optional[AbletonFileHandler] = None
        self.watch_path: Optional[Path] = None

    def watch(self, path: Path) -> None:
        """
        Set the file to watch. Its parent directory is what gets observed.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Path does not exist: {path}")

        self.handler = AbletonFileHandler(self.callback, target=path, debounce_seconds=self.debounce_seconds)
        self.watch_path = path.parent

    def start(self) -> None:
        if not self.watch_path:
            raise RuntimeError("No watch path set. Call watch() first.")
        if self.is_running():
            raise RuntimeError("Watcher is already running")

        self.observer = Observer()
        self.observer.schedule(self.handler, str(self.watch_path), recursive=False)
        self.observer.start()
        logger.info(f"Watching for changes in: {self.watch_path}")

    def stop(self) -> None:
        if self.is_running():
            self.observer.stop()
            self.observer.join()
            logger.info("File watcher stopped")

    def is_running(self) -> bool:
        return self.observer is not None and self.observer.is_alive()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
