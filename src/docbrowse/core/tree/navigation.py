"""Tree navigation: path resolution, breadcrumbs, subtree export."""

from typing import Any

from docbrowse.core.tree.snapshot import DocTree
from docbrowse.errors import InvalidPathError, NotFoundError
from docbrowse.models.node import Breadcrumb, DocNode, NodeKind


def split_nav_path(nav_path: str) -> list[str]:
    """Split a navigation path into segments, rejecting anything unsafe.

    Raises:
        InvalidPathError: On empty, "." or ".." segments, backslashes, NUL
            characters, or a leading slash.
    """
    if not isinstance(nav_path, str):
        msg = f"Navigation path must be a string, got {type(nav_path).__name__}"
        raise InvalidPathError(msg)
    if nav_path == "":
        return []
    if "\\" in nav_path or "\x00" in nav_path:
        msg = f"Navigation path contains a forbidden character: {nav_path!r}"
        raise InvalidPathError(msg)

    segments = nav_path.split("/")
    for segment in segments:
        if segment == "":
            msg = f"Navigation path has an empty segment: {nav_path!r}"
            raise InvalidPathError(msg)
        if segment in (".", ".."):
            msg = f"Navigation path may not contain {segment!r}: {nav_path!r}"
            raise InvalidPathError(msg)
    return segments


def resolve(tree: DocTree, nav_path: str) -> DocNode:
    """Find the node addressed by a slash-separated navigation path.

    Matching is case-sensitive against node names. The empty path returns the
    root. Only the in-memory tree is consulted.

    Raises:
        InvalidPathError: If the path is malformed (see split_nav_path).
        NotFoundError: If any segment has no matching child.
    """
    node = tree.root_node
    for segment in split_nav_path(nav_path):
        match = next((child for child in tree.children(node) if child.name == segment), None)
        if match is None:
            msg = f"No such document: {nav_path}"
            raise NotFoundError(msg)
        node = match
    return node


def path_of(node: DocNode) -> str:
    """Navigation path that resolves back to node."""
    return node.nav_path


def get_breadcrumbs(tree: DocTree, node: DocNode) -> tuple[Breadcrumb, ...]:
    """Get breadcrumbs from the root to node.

    Returns depth + 1 entries, root first, ending with node itself.
    """
    chain: list[DocNode] = []
    current: DocNode | None = node
    while current is not None:
        chain.append(current)
        current = tree.parent(current)
    return tuple(Breadcrumb(label=n.name, path=n.nav_path) for n in reversed(chain))


def find_index_document(tree: DocTree, node: DocNode, names: tuple[str, ...]) -> DocNode | None:
    """Return the first child document of a directory whose name is in names."""
    if not node.is_directory:
        return None
    documents = {c.name: c for c in tree.children(node) if c.kind is NodeKind.DOCUMENT}
    for name in names:
        if name in documents:
            return documents[name]
    return None


def tree_to_dict(tree: DocTree, node: DocNode, max_depth: int | None = None) -> dict[str, Any]:
    """Export a subtree as nested dicts.

    Directories at the max_depth boundary keep child_count but lose their
    children key.
    """
    entry: dict[str, Any] = {
        "id": node.id,
        "name": node.name,
        "path": node.nav_path,
        "kind": str(node.kind),
    }
    if node.is_directory:
        entry["child_count"] = len(node.children)
        if max_depth is None or max_depth > 0:
            next_depth = None if max_depth is None else max_depth - 1
            entry["children"] = [tree_to_dict(tree, c, next_depth) for c in tree.children(node)]
    return entry
