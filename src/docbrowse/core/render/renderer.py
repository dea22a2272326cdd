"""Convert Markdown documents to HTML and list directories."""

import hashlib
import re

import markdown
from loguru import logger
from markdown.extensions.fenced_code import FencedCodeExtension
from markdown.extensions.tables import TableExtension
from markdown.extensions.toc import TocExtension

from docbrowse.config import DOCS_URL_PREFIX, ViewerConfig
from docbrowse.core.render.cache import RenderCache
from docbrowse.core.render.fragments import display_title, render_listing
from docbrowse.core.tree.indexer import within_root
from docbrowse.core.tree.navigation import get_breadcrumbs
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.errors import NotADocumentError, NotFoundError
from docbrowse.models.node import DirectoryListing, DocNode, NodeKind, RenderedDocument

_CODE_BLOCK_RE = re.compile(
    r'<pre><code class="language-(?P<lang>[\w+-]+)">(?P<body>.*?)</code></pre>',
    re.DOTALL,
)


def _extensions() -> list:
    # Fresh instances per conversion: Markdown objects are not thread-safe.
    return [FencedCodeExtension(), TableExtension(), TocExtension(), "sane_lists"]


def _mark_diagrams(html: str, languages: tuple[str, ...]) -> str:
    """Turn fenced diagram blocks into <div class="LANG"> for client-side rendering.

    The body stays HTML-escaped; the browser unescapes it into textContent,
    which is what the diagram library reads.
    """
    def replace(match: re.Match[str]) -> str:
        lang = match.group("lang")
        if lang not in languages:
            return match.group(0)
        return f'<div class="{lang}">{match.group("body")}</div>'

    return _CODE_BLOCK_RE.sub(replace, html)


def markdown_to_html(text: str, diagram_languages: tuple[str, ...] = ("mermaid",)) -> str:
    """Convert Markdown text to an HTML fragment."""
    md = markdown.Markdown(extensions=_extensions())
    return _mark_diagrams(md.convert(text), diagram_languages)


def extract_title(text: str, fallback: str) -> str:
    """Return the first level-1 ATX heading, or fallback."""
    in_fence = False
    for line in text.splitlines():
        if line.lstrip().startswith(("```", "~~~")):
            in_fence = not in_fence
            continue
        if not in_fence and line.startswith("# "):
            return line[2:].strip().rstrip("#").strip() or fallback
    return fallback


def checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def read_source(tree: DocTree, node: DocNode) -> bytes:
    """Read a Document node's current bytes.

    Raises:
        NotADocumentError: If node is a directory.
        NotFoundError: If the file vanished or now resolves outside the root.
    """
    if node.kind is not NodeKind.DOCUMENT:
        msg = f"Cannot render directory {node.nav_path!r} as a document"
        raise NotADocumentError(msg)
    path = tree.root / node.relative_path
    if not within_root(path, tree.root):
        msg = f"Document no longer inside the documentation root: {node.nav_path}"
        raise NotFoundError(msg)
    try:
        return path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
        msg = f"Document file disappeared: {node.nav_path}"
        raise NotFoundError(msg) from exc


def render_document(
    tree: DocTree,
    node: DocNode,
    config: ViewerConfig | None = None,
    cache: RenderCache | None = None,
) -> RenderedDocument:
    """Render a Document node's current file contents.

    Identical file bytes always give identical output. When a cache is given,
    a hit on (node id, checksum) skips the conversion; only finished renders
    are stored.

    Raises:
        NotADocumentError: If node is a directory.
        NotFoundError: If the file vanished or now resolves outside the root.
    """
    config = config or ViewerConfig()
    data = read_source(tree, node)

    source_checksum = checksum(data)
    if cache is not None:
        cached = cache.get(node.id, source_checksum)
        if cached is not None:
            logger.debug("Render cache hit for {}", node.nav_path)
            return cached

    text = data.decode("utf-8", errors="replace")
    doc = RenderedDocument(
        node_id=node.id,
        title=extract_title(text, node.name),
        html=markdown_to_html(text, config.diagram_languages),
        breadcrumbs=get_breadcrumbs(tree, node),
        source_checksum=source_checksum,
    )
    if cache is not None:
        cache.put(doc)
    logger.debug("Rendered {} ({} bytes)", node.nav_path, len(data))
    return doc


def render_directory(
    tree: DocTree, node: DocNode, prefix: str = DOCS_URL_PREFIX
) -> DirectoryListing:
    """List a directory's immediate children without touching the filesystem.

    Raises:
        NotADirectoryError: If node is a document.
    """
    if not node.is_directory:
        msg = f"Not a directory: {node.nav_path!r}"
        raise NotADirectoryError(msg)
    title = node.name if node.parent_id is None else display_title(node.name)
    return DirectoryListing(
        node_id=node.id,
        title=title,
        html=render_listing(tree, node, prefix),
        breadcrumbs=get_breadcrumbs(tree, node),
        entries=tree.children(node),
    )
