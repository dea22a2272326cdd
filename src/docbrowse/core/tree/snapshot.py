"""Immutable snapshot of the navigation tree."""

from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from docbrowse.models.node import DocNode, node_id_for


class DocTree:
    """Navigation tree stored as an id-keyed arena of DocNodes.

    A DocTree is never mutated after construction. Patches build a new
    DocTree that shares every untouched node with the previous one, so a
    reader holding a reference always sees a consistent tree.
    """

    __slots__ = ("_nodes", "root", "root_id")

    def __init__(self, root: Path, nodes: Mapping[str, DocNode], root_id: str) -> None:
        self.root = root
        self.root_id = root_id
        self._nodes = MappingProxyType(dict(nodes))

    @property
    def root_node(self) -> DocNode:
        return self._nodes[self.root_id]

    @property
    def nodes(self) -> Mapping[str, DocNode]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> DocNode | None:
        return self._nodes.get(node_id)

    def children(self, node: DocNode) -> tuple[DocNode, ...]:
        return tuple(self._nodes[child_id] for child_id in node.children)

    def parent(self, node: DocNode) -> DocNode | None:
        if node.parent_id is None:
            return None
        return self._nodes[node.parent_id]

    def find_by_relative_path(self, relative_path: str) -> DocNode | None:
        """Look up a node by its path on disk, relative to the root."""
        node = self._nodes.get(node_id_for(relative_path))
        if node is None or node.relative_path != relative_path:
            return None
        return node

    def walk(self, start: DocNode | None = None) -> Iterator[DocNode]:
        """Yield nodes depth-first, parents before children, in sort order."""
        stack = [start or self.root_node]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(self._nodes[child_id] for child_id in reversed(node.children))

    def subtree_ids(self, node: DocNode) -> tuple[str, ...]:
        return tuple(n.id for n in self.walk(node))
