"""Build the navigation tree by walking the documentation root."""

import fnmatch
from pathlib import Path, PurePosixPath

from loguru import logger

from docbrowse.config import ViewerConfig
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.errors import RootNotFoundError
from docbrowse.models.node import DocNode, NodeKind, node_id_for


def is_hidden(name: str, config: ViewerConfig) -> bool:
    """Check whether an entry name is hidden or matches an ignore pattern."""
    if name.startswith("."):
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in config.ignore_patterns)


def within_root(path: Path, root: Path) -> bool:
    try:
        path.resolve().relative_to(root)
    except (ValueError, OSError):
        return False
    return True


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def is_eligible(root: Path, relative_path: str, config: ViewerConfig, *, is_dir: bool) -> bool:
    """Apply the indexer's classification rules to a single path.

    The path does not need to exist; only names and (for existing entries)
    symlink containment are checked.
    """
    parts = PurePosixPath(relative_path).parts
    if not parts:
        return is_dir
    if any(is_hidden(part, config) or "\\" in part for part in parts):
        return False
    if not is_dir and not config.is_markdown(parts[-1]):
        return False
    full = root / relative_path
    return not full.exists() or within_root(full, root)


class _Indexer:
    """Depth-first walker accumulating nodes into an arena."""

    def __init__(self, root: Path, config: ViewerConfig) -> None:
        self.root = root
        self.config = config
        self.nodes: dict[str, DocNode] = {}

    def _candidates(
        self, directory: Path, ancestors: frozenset[Path]
    ) -> list[tuple[NodeKind, Path]]:
        try:
            entries = list(directory.iterdir())
        except OSError as exc:
            logger.warning("Cannot read directory {}: {}", directory, exc)
            return []

        found: list[tuple[NodeKind, Path]] = []
        for entry in entries:
            name = entry.name
            if is_hidden(name, self.config):
                continue
            if "\\" in name:
                logger.warning("Skipping {}: name cannot be addressed by a navigation path", entry)
                continue
            if entry.is_symlink() and not within_root(entry, self.root):
                logger.debug("Skipping {}: symlink leaves the documentation root", entry)
                continue
            if entry.is_dir():
                if entry.resolve() in ancestors:
                    logger.debug("Skipping {}: symlink loops back to an ancestor", entry)
                    continue
                found.append((NodeKind.DIRECTORY, entry))
            elif entry.is_file() and self.config.is_markdown(name):
                found.append((NodeKind.DOCUMENT, entry))

        found.sort(key=lambda item: (0 if item[0] is NodeKind.DIRECTORY else 1, item[1].name))
        return found

    def add_document(self, relative_path: str, parent: DocNode) -> DocNode:
        name = self.config.strip_extension(PurePosixPath(relative_path).name)
        node = DocNode(
            id=node_id_for(relative_path),
            name=name,
            relative_path=relative_path,
            nav_path=_join(parent.nav_path, name),
            kind=NodeKind.DOCUMENT,
            parent_id=parent.id,
        )
        self.nodes[node.id] = node
        return node

    def add_directory(
        self,
        relative_path: str,
        *,
        name: str,
        nav_path: str,
        parent_id: str | None,
        ancestors: frozenset[Path],
    ) -> DocNode:
        directory = self.root / relative_path if relative_path else self.root
        ancestors = ancestors | {directory.resolve()}
        placeholder = DocNode(
            id=node_id_for(relative_path),
            name=name,
            relative_path=relative_path,
            nav_path=nav_path,
            kind=NodeKind.DIRECTORY,
            parent_id=parent_id,
        )

        children: list[str] = []
        taken: set[str] = set()
        for kind, entry in self._candidates(directory, ancestors):
            child_rel = _join(relative_path, entry.name)
            if kind is NodeKind.DIRECTORY:
                child_name = entry.name
            else:
                child_name = self.config.strip_extension(entry.name)
            if child_name in taken:
                logger.warning(
                    "Skipping {}: name {!r} already used in {!r}",
                    child_rel, child_name, relative_path or "/",
                )
                continue
            taken.add(child_name)
            if kind is NodeKind.DIRECTORY:
                child = self.add_directory(
                    child_rel,
                    name=child_name,
                    nav_path=_join(nav_path, child_name),
                    parent_id=placeholder.id,
                    ancestors=ancestors,
                )
            else:
                child = self.add_document(child_rel, placeholder)
            children.append(child.id)

        node = DocNode(
            id=placeholder.id,
            name=name,
            relative_path=relative_path,
            nav_path=nav_path,
            kind=NodeKind.DIRECTORY,
            parent_id=parent_id,
            children=tuple(children),
        )
        self.nodes[node.id] = node
        return node


def build_tree(
    root: str | Path, config: ViewerConfig | None = None, *, log_level: str = "INFO"
) -> DocTree:
    """Index every Markdown document below root.

    Args:
        root: Documentation root directory.
        config: Extensions, ignore patterns and root label. Defaults apply if None.
        log_level: Level of the summary line (rebuilds pass "DEBUG").

    Returns:
        A DocTree whose root node represents the documentation root.

    Raises:
        RootNotFoundError: If root is missing or not a directory.
    """
    config = config or ViewerConfig()
    root_path = Path(root).expanduser()
    if not root_path.is_dir():
        msg = f"Documentation directory not found: {root_path}"
        raise RootNotFoundError(msg)
    root_path = root_path.resolve()

    indexer = _Indexer(root_path, config)
    root_node = indexer.add_directory(
        "", name=config.root_label, nav_path="", parent_id=None, ancestors=frozenset()
    )
    tree = DocTree(root_path, indexer.nodes, root_node.id)

    documents = sum(1 for n in indexer.nodes.values() if n.kind is NodeKind.DOCUMENT)
    logger.log(
        log_level,
        "Indexed {} documents in {} directories under {}",
        documents, len(tree) - documents, root_path,
    )
    return tree


def index_subtree(
    tree: DocTree,
    relative_path: str,
    parent: DocNode,
    config: ViewerConfig,
) -> tuple[DocNode, dict[str, DocNode]] | None:
    """Index one directory below an existing parent node.

    Returns the new directory node and every node of its subtree, keyed by id,
    or None if the directory is a symlink back to one of its ancestors.
    """
    indexer = _Indexer(tree.root, config)
    ancestors = frozenset((tree.root / n.relative_path).resolve() for n in _lineage(tree, parent))
    if (tree.root / relative_path).resolve() in ancestors:
        return None
    name = PurePosixPath(relative_path).name
    node = indexer.add_directory(
        relative_path,
        name=name,
        nav_path=_join(parent.nav_path, name),
        parent_id=parent.id,
        ancestors=ancestors,
    )
    return node, indexer.nodes


def make_document_node(
    tree: DocTree, relative_path: str, parent: DocNode, config: ViewerConfig
) -> DocNode:
    """Create (but do not attach) a Document node for a file below parent."""
    return _Indexer(tree.root, config).add_document(relative_path, parent)


def _lineage(tree: DocTree, node: DocNode) -> list[DocNode]:
    chain = [node]
    while (parent := tree.parent(chain[-1])) is not None:
        chain.append(parent)
    return chain
