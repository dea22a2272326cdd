"""Tests for the live document store."""

from pathlib import Path

import pytest

from docbrowse.config import ViewerConfig
from docbrowse.core.store import DocStore
from docbrowse.core.tree.navigation import resolve
from docbrowse.errors import NotFoundError, RootNotFoundError
from docbrowse.models.node import DirectoryListing, RenderedDocument


def test_view_document(store: DocStore) -> None:
    tree, node, view = store.view("guide")
    assert tree is store.tree
    assert node.nav_path == "guide"
    assert isinstance(view, RenderedDocument)
    assert view.title == "User Guide"


def test_view_directory(store: DocStore) -> None:
    _, node, view = store.view("api")
    assert node.is_directory
    assert isinstance(view, DirectoryListing)
    assert [e.name for e in view.entries] == ["ref"]


def test_missing_root(tmp_path: Path) -> None:
    with pytest.raises(RootNotFoundError):
        DocStore(tmp_path / "missing")


def test_remove_then_resolve_fails(docs_root: Path, store: DocStore) -> None:
    (docs_root / "api" / "ref.md").unlink()
    store.remove("api/ref.md")
    with pytest.raises(NotFoundError):
        store.resolve("api/ref")


def test_add_document_publishes_new_snapshot(docs_root: Path, store: DocStore) -> None:
    old_tree = store.tree
    (docs_root / "faq.md").write_text("# FAQ\n")

    new_tree = store.add_document("faq.md")
    assert store.tree is new_tree
    assert store.resolve("faq").relative_path == "faq.md"
    with pytest.raises(NotFoundError):
        resolve(old_tree, "faq")


def test_removing_a_document_drops_its_cached_render(docs_root: Path, store: DocStore) -> None:
    store.view("guide")
    assert len(store.cache) == 1

    (docs_root / "guide.md").unlink()
    store.remove("guide.md")
    assert len(store.cache) == 0


def test_touch_drops_cached_render(store: DocStore) -> None:
    store.view("guide")
    store.touch("guide.md")
    assert len(store.cache) == 0
    store.touch("not-indexed.md")


def test_reindex_directory(docs_root: Path, store: DocStore) -> None:
    (docs_root / "howto").mkdir()
    (docs_root / "howto" / "setup.md").write_text("# Setup\n")
    store.reindex_directory("howto")
    assert store.resolve("howto/setup").relative_path == "howto/setup.md"


def test_reindex_picks_up_everything(docs_root: Path, store: DocStore) -> None:
    (docs_root / "guide.md").unlink()
    (docs_root / "api" / "more.md").write_text("# More\n")
    store.reindex()
    assert [c.name for c in store.tree.children(store.resolve("api"))] == ["more", "ref"]
    with pytest.raises(NotFoundError):
        store.resolve("guide")


def test_cache_size_comes_from_config(docs_root: Path) -> None:
    store = DocStore(docs_root, ViewerConfig(cache_size=1))
    store.view("guide")
    store.view("api/ref")
    assert len(store.cache) == 1


def test_displaced_document_drops_its_cached_render(docs_root: Path, store: DocStore) -> None:
    displaced = store.resolve("guide")
    _, _, cached = store.view("guide")

    (docs_root / "guide.markdown").write_text("# Other guide\n")
    store.add_document("guide.markdown")

    assert store.resolve("guide").relative_path == "guide.markdown"
    assert store.cache.get(displaced.id, cached.source_checksum) is None
