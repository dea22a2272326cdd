"""Domain models for the documentation tree."""

import hashlib
from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePosixPath


class NodeKind(StrEnum):
    """Whether a node is a directory or a Markdown document."""

    DIRECTORY = "directory"
    DOCUMENT = "document"


def node_id_for(relative_path: str) -> str:
    """Derive a stable node id from a path relative to the documentation root."""
    return hashlib.sha256(relative_path.encode("utf-8")).hexdigest()[:16]


@dataclass(frozen=True)
class DocNode:
    """A single entry in the navigation tree.

    Children and parent are ids into the owning DocTree, so nodes can be
    shared between tree snapshots without copying.
    """

    id: str
    name: str
    relative_path: str
    nav_path: str
    kind: NodeKind
    parent_id: str | None
    children: tuple[str, ...] = ()

    @property
    def is_directory(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    @property
    def filename(self) -> str:
        """Entry name on disk ("" for the root)."""
        return PurePosixPath(self.relative_path).name if self.relative_path else ""

    @property
    def depth(self) -> int:
        return len(self.nav_path.split("/")) if self.nav_path else 0

    def sort_key(self) -> tuple[int, str]:
        """Directories first, then lexicographic by file name."""
        return (0 if self.is_directory else 1, self.filename)


@dataclass(frozen=True)
class Breadcrumb:
    """A single ancestor in a breadcrumb trail."""

    label: str
    path: str


@dataclass(frozen=True)
class RenderedDocument:
    """A Markdown document converted to HTML."""

    node_id: str
    title: str
    html: str
    breadcrumbs: tuple[Breadcrumb, ...]
    source_checksum: str


@dataclass(frozen=True)
class DirectoryListing:
    """The immediate children of a directory node."""

    node_id: str
    title: str
    html: str
    breadcrumbs: tuple[Breadcrumb, ...]
    entries: tuple[DocNode, ...]
