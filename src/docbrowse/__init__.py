"""Browse a local tree of Markdown documents."""

from docbrowse.core.render.renderer import render_directory, render_document
from docbrowse.core.store import DocStore
from docbrowse.core.tree.indexer import build_tree
from docbrowse.core.tree.navigation import resolve
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.errors import (
    DocBrowseError,
    InvalidPathError,
    NotADocumentError,
    NotFoundError,
    RootNotFoundError,
)

__all__ = [
    "DocBrowseError",
    "DocStore",
    "DocTree",
    "InvalidPathError",
    "NotADocumentError",
    "NotFoundError",
    "RootNotFoundError",
    "build_tree",
    "render_directory",
    "render_document",
    "resolve",
]
