"""Holds the live tree snapshot and the render cache."""

import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger

from docbrowse.config import DOCS_URL_PREFIX, ViewerConfig
from docbrowse.core.render.cache import RenderCache
from docbrowse.core.render.renderer import render_directory, render_document
from docbrowse.core.tree import patch
from docbrowse.core.tree.indexer import build_tree
from docbrowse.core.tree.navigation import resolve
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.models.node import DirectoryListing, DocNode, RenderedDocument

TreePatch = Callable[[DocTree], tuple[DocTree, Iterable[str]]]


class DocStore:
    """Single-writer, many-reader owner of the navigation tree.

    Readers grab ``store.tree`` once and work on that immutable snapshot
    without locking. Writers go through apply(), which serializes patches and
    publishes each result with a single attribute assignment.
    """

    def __init__(self, root: str | Path, config: ViewerConfig | None = None) -> None:
        self.config = config or ViewerConfig()
        self.cache = RenderCache(self.config.cache_size)
        self._write_lock = threading.Lock()
        self._tree = build_tree(root, self.config)

    @property
    def tree(self) -> DocTree:
        return self._tree

    @property
    def root(self) -> Path:
        return self._tree.root

    def apply(self, tree_patch: TreePatch) -> DocTree:
        """Run a patch against the current tree and publish the result.

        Cached renders for every removed node id are invalidated.
        """
        with self._write_lock:
            new_tree, removed = tree_patch(self._tree)
            self._tree = new_tree
        for node_id in removed:
            self.cache.invalidate(node_id)
        return new_tree

    def reindex(self) -> DocTree:
        """Rebuild the whole tree from disk."""
        return self.apply(lambda tree: patch.rebuild(tree, self.config))

    def add_document(self, relative_path: str) -> DocTree:
        return self.apply(lambda tree: patch.insert_document(tree, relative_path, self.config))

    def remove(self, relative_path: str) -> DocTree:
        return self.apply(lambda tree: patch.remove_path(tree, relative_path, self.config))

    def reindex_directory(self, relative_path: str) -> DocTree:
        return self.apply(lambda tree: patch.reindex_directory(tree, relative_path, self.config))

    def touch(self, relative_path: str) -> None:
        """Note that a file's contents changed; its next render recomputes the checksum."""
        node = self._tree.find_by_relative_path(relative_path)
        if node is not None and self.cache.invalidate(node.id):
            logger.debug("Dropped cached render of {}", relative_path)

    def resolve(self, nav_path: str) -> DocNode:
        return resolve(self._tree, nav_path)

    def view(
        self, nav_path: str, prefix: str = DOCS_URL_PREFIX
    ) -> tuple[DocTree, DocNode, RenderedDocument | DirectoryListing]:
        """Resolve a path and render it: documents as HTML, directories as listings.

        Returns the snapshot used, so callers can render the sidebar from the
        same tree the content came from.
        """
        tree = self._tree
        node = resolve(tree, nav_path)
        if node.is_directory:
            return tree, node, render_directory(tree, node, prefix)
        return tree, node, render_document(tree, node, self.config, self.cache)
