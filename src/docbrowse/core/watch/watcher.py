"""Keep the navigation tree in sync with the documentation root."""

import os
import threading
from collections.abc import Callable
from pathlib import Path

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from docbrowse.core.store import DocStore
from docbrowse.errors import DocBrowseError
from docbrowse.protocols import ObserverProtocol


class TreeEventHandler(FileSystemEventHandler):
    """Translate filesystem events into tree patches on a DocStore.

    - file created: insert a document node
    - file deleted: remove the node, drop its cached renders
    - file modified: keep the node, drop its cached render
    - directory created/deleted: re-index just that directory
    - moves: delete at the source, create at the destination
    """

    def __init__(self, store: DocStore) -> None:
        super().__init__()
        self.store = store

    def _relative(self, path: str | bytes) -> str | None:
        try:
            rel = Path(os.fsdecode(path)).relative_to(self.store.root)
        except ValueError:
            return None
        posix = rel.as_posix()
        return "" if posix == "." else posix

    def _apply(self, action: Callable[[str], object], relative_path: str) -> None:
        try:
            action(relative_path)
        except Exception:
            logger.exception("Failed to apply change to {}, re-indexing", relative_path or "/")
            try:
                self.store.reindex()
            except (DocBrowseError, OSError):
                logger.exception("Re-index of {} failed, keeping previous tree", self.store.root)

    def _created(self, relative_path: str, is_directory: bool) -> None:
        if is_directory:
            self._apply(self.store.reindex_directory, relative_path)
        else:
            self._apply(self.store.add_document, relative_path)

    def _deleted(self, relative_path: str, is_directory: bool) -> None:
        if is_directory:
            self._apply(self.store.reindex_directory, relative_path)
        else:
            self._apply(self.store.remove, relative_path)

    def on_created(self, event: FileSystemEvent) -> None:
        rel = self._relative(event.src_path)
        if rel:
            logger.debug("Created: {}", rel)
            self._created(rel, event.is_directory)

    def on_deleted(self, event: FileSystemEvent) -> None:
        rel = self._relative(event.src_path)
        if rel:
            logger.debug("Deleted: {}", rel)
            self._deleted(rel, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        rel = self._relative(event.src_path)
        if rel:
            self.store.touch(rel)

    def on_moved(self, event: FileSystemEvent) -> None:
        src = self._relative(event.src_path)
        dest = self._relative(event.dest_path)
        logger.debug("Moved: {} -> {}", src, dest)
        if src:
            self._deleted(src, event.is_directory)
        if dest:
            self._created(dest, event.is_directory)


def _observer_alive(observer: ObserverProtocol) -> bool:
    if not observer.is_alive():
        return False
    return all(emitter.is_alive() for emitter in getattr(observer, "emitters", ()))


class ChangeWatcher:
    """Watch the documentation root and patch the store as files change.

    If the observer cannot start, or dies later, the watcher logs a warning
    and falls back to re-indexing the whole tree every poll_interval seconds.
    """

    def __init__(
        self,
        store: DocStore,
        *,
        observer_factory: Callable[[], ObserverProtocol] = Observer,
        poll_interval: float | None = None,
    ) -> None:
        self.store = store
        if poll_interval is None:
            poll_interval = store.config.poll_interval
        self.poll_interval = poll_interval
        self.degraded = False
        self._observer_factory = observer_factory
        self._observer: ObserverProtocol | None = None
        self._stop = threading.Event()
        self._monitor: threading.Thread | None = None

    def start(self) -> None:
        """Start the observer and the monitor thread."""
        try:
            observer = self._observer_factory()
            observer.schedule(TreeEventHandler(self.store), str(self.store.root), recursive=True)
            observer.start()
        except (OSError, RuntimeError) as exc:
            self._degrade(f"Cannot watch {self.store.root}: {exc}")
        else:
            self._observer = observer
            logger.info("Watching {} for changes", self.store.root)

        self._monitor = threading.Thread(
            target=self._run, name="docbrowse-watch-monitor", daemon=True
        )
        self._monitor.start()

    def _run(self) -> None:
        while not self._stop.wait(self.poll_interval):
            self.poll_once()

    def poll_once(self) -> None:
        """Check observer health; when degraded, re-index the tree."""
        if not self.degraded and self._observer is not None and not _observer_alive(self._observer):
            self._degrade(f"File observer for {self.store.root} stopped")
        if not self.degraded:
            return
        try:
            self.store.reindex()
        except (DocBrowseError, OSError):
            logger.exception("Periodic re-index of {} failed", self.store.root)

    def _degrade(self, reason: str) -> None:
        if not self.degraded:
            logger.warning("{}; re-indexing every {}s instead", reason, self.poll_interval)
        self.degraded = True

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout)
            self._observer = None
        if self._monitor is not None:
            self._monitor.join(timeout)
            self._monitor = None

    def __enter__(self) -> "ChangeWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
