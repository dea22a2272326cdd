"""Tests for the change watcher and its event handler."""

import shutil
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from loguru import logger
from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)
from watchdog.observers.polling import PollingObserver

from docbrowse.core.store import DocStore
from docbrowse.core.watch.watcher import ChangeWatcher, TreeEventHandler
from docbrowse.errors import NotFoundError
from docbrowse.protocols import ObserverProtocol
from tests.unit.fakes import FakeObserver


def _wait_for(condition: Callable[[], bool], timeout: float = 10.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.05)
    return condition()


def _resolves(store: DocStore, nav_path: str) -> bool:
    try:
        store.resolve(nav_path)
    except NotFoundError:
        return False
    return True


# --- TreeEventHandler ---


def test_file_created_adds_document(store: DocStore) -> None:
    path = store.root / "api" / "new.md"
    path.write_text("# New\n")
    TreeEventHandler(store).dispatch(FileCreatedEvent(str(path)))
    assert store.resolve("api/new").relative_path == "api/new.md"


def test_file_deleted_removes_document(store: DocStore) -> None:
    path = store.root / "guide.md"
    path.unlink()
    TreeEventHandler(store).dispatch(FileDeletedEvent(str(path)))
    assert not _resolves(store, "guide")


def test_file_modified_drops_cached_render(store: DocStore) -> None:
    store.view("guide")
    tree = store.tree
    TreeEventHandler(store).dispatch(FileModifiedEvent(str(store.root / "guide.md")))
    assert len(store.cache) == 0
    assert store.tree is tree


def test_file_moved_renames_document(store: DocStore) -> None:
    src = store.root / "guide.md"
    dest = store.root / "api" / "guide.md"
    src.rename(dest)
    TreeEventHandler(store).dispatch(FileMovedEvent(str(src), str(dest)))
    assert not _resolves(store, "guide")
    assert store.resolve("api/guide").relative_path == "api/guide.md"


def test_directory_created_is_indexed(store: DocStore) -> None:
    directory = store.root / "howto"
    directory.mkdir()
    (directory / "setup.md").write_text("# Setup\n")
    TreeEventHandler(store).dispatch(DirCreatedEvent(str(directory)))
    assert _resolves(store, "howto/setup")


def test_directory_deleted_drops_subtree(store: DocStore) -> None:
    directory = store.root / "api"
    shutil.rmtree(directory)
    TreeEventHandler(store).dispatch(DirDeletedEvent(str(directory)))
    assert not _resolves(store, "api")
    assert not _resolves(store, "api/ref")


def test_events_outside_root_are_ignored(store: DocStore, tmp_path: Path) -> None:
    outside = tmp_path / "elsewhere.md"
    outside.write_text("# Elsewhere\n")
    tree = store.tree
    TreeEventHandler(store).dispatch(FileCreatedEvent(str(outside)))
    assert store.tree is tree


def test_failed_patch_falls_back_to_reindex(
    store: DocStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_patch(relative_path: str) -> None:
        msg = f"cannot patch {relative_path}"
        raise RuntimeError(msg)

    monkeypatch.setattr(store, "add_document", broken_patch)
    path = store.root / "faq.md"
    path.write_text("# FAQ\n")
    TreeEventHandler(store).dispatch(FileCreatedEvent(str(path)))
    assert _resolves(store, "faq")


# --- ChangeWatcher ---


def test_fake_observer_matches_protocol() -> None:
    assert isinstance(FakeObserver(), ObserverProtocol)


def test_start_schedules_recursive_watch_on_root(store: DocStore) -> None:
    observer = FakeObserver()
    watcher = ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=60)
    with watcher:
        assert not watcher.degraded
        assert len(observer.scheduled) == 1
        handler, path, recursive = observer.scheduled[0]
        assert isinstance(handler, TreeEventHandler)
        assert path == str(store.root)
        assert recursive is True
    assert observer.stopped


def test_healthy_observer_does_not_reindex(store: DocStore) -> None:
    observer = FakeObserver()
    with ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=60) as watcher:
        tree = store.tree
        watcher.poll_once()
        assert store.tree is tree


def test_observer_start_failure_degrades_to_polling(store: DocStore) -> None:
    observer = FakeObserver(fail_on_start=True)
    with ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=60) as watcher:
        assert watcher.degraded
        (store.root / "faq.md").write_text("# FAQ\n")
        watcher.poll_once()
        assert _resolves(store, "faq")


def test_dead_observer_degrades_to_polling(store: DocStore) -> None:
    observer = FakeObserver()
    with ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=60) as watcher:
        observer.alive = False
        (store.root / "guide.md").unlink()
        watcher.poll_once()
        assert watcher.degraded
        assert not _resolves(store, "guide")


def test_monitor_thread_reindexes_when_degraded(store: DocStore) -> None:
    observer = FakeObserver(fail_on_start=True)
    with ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=0.05):
        (store.root / "faq.md").write_text("# FAQ\n")
        assert _wait_for(lambda: _resolves(store, "faq"))


def test_polling_observer_picks_up_new_files(store: DocStore) -> None:
    with ChangeWatcher(
        store, observer_factory=lambda: PollingObserver(timeout=0.1), poll_interval=60
    ) as watcher:
        (store.root / "api" / "changes.md").write_text("# Changes\n")
        assert _wait_for(lambda: _resolves(store, "api/changes"))
        assert not watcher.degraded


def test_degraded_polling_is_quiet_when_nothing_changed(store: DocStore) -> None:
    messages: list[str] = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="INFO")
    try:
        observer = FakeObserver(fail_on_start=True)
        with ChangeWatcher(store, observer_factory=lambda: observer, poll_interval=60) as watcher:
            watcher.poll_once()
            watcher.poll_once()
            assert not any(m.startswith(("Indexed", "Re-indexed")) for m in messages)

            (store.root / "faq.md").write_text("# FAQ\n")
            watcher.poll_once()
            assert any(m.startswith("Re-indexed") for m in messages)
    finally:
        logger.remove(sink_id)
