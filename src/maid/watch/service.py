"""Watch service that suggests ``maid clean`` runs when files change."""

from __future__ import annotations

import logging
import os
import shlex
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers.polling import PollingObserver

from maid.ingestion.discovery import DirectoryScanner, ensure_root

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ChangeBatch:
    """Files created or modified since the previous batch.

    Attributes:
        changed: Changed or newly created files.
        directories: Parent directories of the changed files.
        suggestions: Commands the user may run to tidy those directories.
    """

    changed: list[Path]
    directories: list[Path]
    suggestions: list[str] = field(default_factory=list)


class WatchService:
    """Observe a root with watchdog's polling observer and batch file changes.

    The observer snapshots the tree every ``interval`` seconds and reports created,
    modified and moved files through :class:`_ChangeCollector`. The service never runs
    the organizer itself; it only suggests a command. A ``threading.Event`` acts as the
    cancellation token and is checked every interval.
    """

    def __init__(
        self,
        root: Path,
        *,
        scanner: DirectoryScanner,
        interval: float,
        command_name: str = "maid",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than zero")
        self._root = ensure_root(root)
        self._scanner = scanner
        self._interval = interval
        self._command_name = command_name
        self._stop_event = threading.Event()
        self._handler = _ChangeCollector(self._root, scanner)
        self._observer: Optional[PollingObserver] = None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def handler(self) -> "_ChangeCollector":
        """Return the event handler scheduled on the observer."""
        return self._handler

    def collect(self) -> Optional[ChangeBatch]:
        """Drain the changes recorded since the last call.

        Returns:
            Optional[ChangeBatch]: Detected changes, or ``None`` when nothing changed.
        """
        changed = self._handler.drain()
        if not changed:
            return None

        directories = sorted({path.parent for path in changed})
        suggestions = [
            f"{self._command_name} clean --path {shlex.quote(str(directory))} --verbose"
            for directory in directories
        ]
        LOGGER.info("Detected %d changed file(s) under %s", len(changed), self._root)
        return ChangeBatch(changed=changed, directories=directories, suggestions=suggestions)

    def watch(
        self, callback: Callable[[ChangeBatch], None], *, max_polls: Optional[int] = None
    ) -> None:
        """Report changes until :meth:`stop` is called or ``max_polls`` intervals elapse.

        Args:
            callback: Invoked with each non-empty change batch.
            max_polls: Optional limit on the number of intervals to wait.

        Raises:
            RuntimeError: If the service is already watching.
        """
        if self._observer is not None:
            raise RuntimeError("WatchService is already running.")

        self._observer = PollingObserver(timeout=self._interval)
        self._observer.schedule(self._handler, str(self._root), recursive=self._scanner.recursive)
        self._observer.start()
        try:
            polls = 0
            while not self._stop_event.wait(self._interval):
                batch = self.collect()
                if batch is not None:
                    callback(batch)
                polls += 1
                if max_polls is not None and polls >= max_polls:
                    break
        finally:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None

    def stop(self) -> None:
        """Signal the watch loop to exit at the next interval."""
        self._stop_event.set()


class _ChangeCollector(FileSystemEventHandler):
    """Record files that pass the scanner filters as they are created or modified."""

    def __init__(self, root: Path, scanner: DirectoryScanner) -> None:
        self._root = root
        self._scanner = scanner
        self._lock = threading.Lock()
        self._pending: dict[Path, None] = {}

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle a filesystem create event."""
        self._record(event.src_path, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle a filesystem modify event."""
        self._record(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle a filesystem move event by recording the destination."""
        self._record(event.dest_path, event.is_directory)

    def drain(self) -> list[Path]:
        """Return and clear the recorded paths in the order they first changed."""
        with self._lock:
            changed = list(self._pending)
            self._pending.clear()
        return changed

    def _record(self, raw_path: str | bytes, is_directory: bool) -> None:
        if is_directory or not raw_path:
            return
        path = Path(os.fsdecode(raw_path))
        if not self._scanner.accepts(self._root, path):
            return
        with self._lock:
            self._pending.setdefault(path, None)


__all__ = ["ChangeBatch", "WatchService"]
