"""Incremental patches producing new tree snapshots.

Every function takes a DocTree and returns a new one; the input is never
modified. Untouched nodes are shared between the old and the new snapshot.
"""

import dataclasses
from pathlib import PurePosixPath

from loguru import logger

from docbrowse.config import ViewerConfig
from docbrowse.core.tree.indexer import build_tree, index_subtree, is_eligible, make_document_node
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.models.node import DocNode


def _parent_of(relative_path: str) -> str:
    parent = PurePosixPath(relative_path).parent.as_posix()
    return "" if parent == "." else parent


def _attach(nodes: dict[str, DocNode], parent_id: str, child: DocNode) -> None:
    parent = nodes[parent_id]
    siblings = [nodes[c] for c in parent.children if c != child.id] + [child]
    siblings.sort(key=DocNode.sort_key)
    nodes[child.id] = child
    nodes[parent_id] = dataclasses.replace(parent, children=tuple(s.id for s in siblings))


def _detach(nodes: dict[str, DocNode], tree: DocTree, node: DocNode) -> tuple[str, ...]:
    removed = tree.subtree_ids(node)
    for node_id in removed:
        nodes.pop(node_id, None)
    if node.parent_id is not None and node.parent_id in nodes:
        parent = nodes[node.parent_id]
        remaining = tuple(c for c in parent.children if c != node.id)
        nodes[parent.id] = dataclasses.replace(parent, children=remaining)
    return removed


def _name_taken(nodes: dict[str, DocNode], parent_id: str, name: str) -> bool:
    return any(nodes[c].name == name for c in nodes[parent_id].children)


def _shadows_entry(tree: DocTree, parent_rel: str, name: str, config: ViewerConfig) -> bool:
    """Check whether another entry on disk maps to the same navigation name."""
    directory = tree.root / parent_rel
    try:
        entries = list(directory.iterdir())
    except OSError:
        return False
    for entry in entries:
        if entry.is_dir() and entry.name == name:
            return True
        if not entry.is_file() or not config.is_markdown(entry.name):
            continue
        if config.strip_extension(entry.name) == name:
            return True
    return False


def rebuild(tree: DocTree, config: ViewerConfig) -> tuple[DocTree, tuple[str, ...]]:
    """Re-index the whole root. Returns the new tree and ids that disappeared."""
    new_tree = build_tree(tree.root, config, log_level="DEBUG")
    removed = tuple(node_id for node_id in tree.nodes if node_id not in new_tree)
    added = sum(1 for node_id in new_tree.nodes if node_id not in tree)
    if removed or added:
        logger.info(
            "Re-indexed {}: {} nodes added, {} removed", tree.root, added, len(removed)
        )
    return new_tree, removed


def insert_document(
    tree: DocTree, relative_path: str, config: ViewerConfig
) -> tuple[DocTree, tuple[str, ...]]:
    """Add a Document node for a newly created file, in sort order.

    Ineligible files and files already in the tree leave the tree unchanged.
    A file whose directory is not indexed yet, or whose name collides with a
    sibling, triggers a re-index of its directory instead.

    Returns the new tree and ids that disappeared (sibling nodes displaced by
    the new file).
    """
    if tree.find_by_relative_path(relative_path) is not None:
        return tree, ()
    if not is_eligible(tree.root, relative_path, config, is_dir=False):
        return tree, ()
    if not (tree.root / relative_path).is_file():
        return tree, ()

    parent_rel = _parent_of(relative_path)
    parent = tree.find_by_relative_path(parent_rel)
    if parent is None:
        return reindex_directory(tree, parent_rel, config)

    node = make_document_node(tree, relative_path, parent, config)
    nodes = dict(tree.nodes)
    if _name_taken(nodes, parent.id, node.name):
        logger.debug("Name {!r} already used below {!r}, re-indexing", node.name, parent_rel or "/")
        return reindex_directory(tree, parent_rel, config)

    _attach(nodes, parent.id, node)
    logger.debug("Added document {}", relative_path)
    return DocTree(tree.root, nodes, tree.root_id), ()


def remove_path(
    tree: DocTree, relative_path: str, config: ViewerConfig
) -> tuple[DocTree, tuple[str, ...]]:
    """Drop the node for a deleted file or directory, with its subtree.

    Returns the new tree and the removed node ids. Unknown paths and the root
    itself leave the tree unchanged.
    """
    node = tree.find_by_relative_path(relative_path)
    if node is None or node.parent_id is None:
        return tree, ()

    nodes = dict(tree.nodes)
    removed = _detach(nodes, tree, node)
    new_tree = DocTree(tree.root, nodes, tree.root_id)
    logger.debug("Removed {} ({} nodes)", relative_path, len(removed))

    parent_rel = _parent_of(relative_path)
    if _shadows_entry(new_tree, parent_rel, node.name, config):
        # A sibling hidden by the removed node's name can now take its place.
        new_tree, more = reindex_directory(new_tree, parent_rel, config)
        removed = tuple(dict.fromkeys(removed + more))
    return new_tree, tuple(i for i in removed if i not in new_tree)


def reindex_directory(
    tree: DocTree, relative_path: str, config: ViewerConfig
) -> tuple[DocTree, tuple[str, ...]]:
    """Replace one directory's subtree with a fresh index of it from disk.

    A directory missing on disk is removed. A directory whose parent is not
    in the tree climbs to the nearest indexed ancestor. The root falls back
    to a full rebuild.

    Returns the new tree and ids that disappeared.
    """
    if relative_path == "":
        return rebuild(tree, config)

    parent_rel = _parent_of(relative_path)
    parent = tree.find_by_relative_path(parent_rel)
    if parent is None:
        if not is_eligible(tree.root, parent_rel, config, is_dir=True):
            return tree, ()
        return reindex_directory(tree, parent_rel, config)

    nodes = dict(tree.nodes)
    removed: tuple[str, ...] = ()
    existing = tree.find_by_relative_path(relative_path)
    if existing is not None:
        removed = _detach(nodes, tree, existing)

    directory = tree.root / relative_path
    if directory.is_dir() and is_eligible(tree.root, relative_path, config, is_dir=True):
        name = PurePosixPath(relative_path).name
        if _name_taken(nodes, parent.id, name):
            logger.debug("Name {!r} already used below {!r}, re-indexing", name, parent_rel or "/")
            return reindex_directory(tree, parent_rel, config)
        indexed = index_subtree(tree, relative_path, nodes[parent.id], config)
        if indexed is not None:
            new_node, subtree = indexed
            nodes.update(subtree)
            _attach(nodes, parent.id, new_node)

    new_tree = DocTree(tree.root, nodes, tree.root_id)
    logger.debug("Re-indexed {}", relative_path)
    return new_tree, tuple(i for i in removed if i not in new_tree)
