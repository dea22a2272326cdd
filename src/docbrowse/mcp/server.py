"""MCP server exposing documentation browsing and reading tools."""

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from docbrowse.config import DOCS_ROOT_ENV, resolve_docs_root
from docbrowse.core.render.renderer import extract_title, read_source, render_document
from docbrowse.core.store import DocStore
from docbrowse.core.tree.navigation import (
    find_index_document,
    get_breadcrumbs,
    resolve,
    tree_to_dict,
)
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.core.watch.watcher import ChangeWatcher
from docbrowse.errors import InvalidPathError, NotFoundError
from docbrowse.models.node import DocNode


def _breadcrumbs_str(tree: DocTree, node: DocNode) -> str:
    return " > ".join(c.label for c in get_breadcrumbs(tree, node))


# --- Core functions (testable without MCP context) ---


def docs_list(store: DocStore, *, path: str = "", max_depth: int | None = 2) -> dict[str, Any]:
    """List the documentation tree below a navigation path.

    Args:
        path: Slash-separated navigation path ("" for the root).
        max_depth: Levels of children to include (None = unlimited).
    """
    tree = store.tree
    try:
        node = resolve(tree, path)
    except (NotFoundError, InvalidPathError) as e:
        return {"error": str(e)}

    if max_depth is not None:
        max_depth = max(0, max_depth)
    result = tree_to_dict(tree, node, max_depth)
    result["breadcrumbs"] = _breadcrumbs_str(tree, node)
    return result


def docs_read(
    store: DocStore,
    *,
    path: str,
    output_format: str = "markdown",
) -> dict[str, Any]:
    """Read a document as Markdown source or rendered HTML.

    Directories resolve to their index/README document when they have one.

    Args:
        path: Slash-separated navigation path.
        output_format: "markdown" or "html".
    """
    if output_format not in ("markdown", "html"):
        return {"error": f"Unknown output_format '{output_format}'. Use 'markdown' or 'html'."}

    tree = store.tree
    try:
        node = resolve(tree, path)
    except (NotFoundError, InvalidPathError) as e:
        return {"error": str(e)}

    if node.is_directory:
        index_node = find_index_document(tree, node, store.config.index_names)
        if index_node is None:
            return {
                "error": f"'{node.nav_path}' is a directory without an index document.",
                "entries": [c.nav_path for c in tree.children(node)],
            }
        node = index_node

    try:
        if output_format == "html":
            doc = render_document(tree, node, store.config, store.cache)
            title, content, checksum = doc.title, doc.html, doc.source_checksum
        else:
            data = read_source(tree, node)
            content = data.decode("utf-8", errors="replace")
            title = extract_title(content, node.name)
            checksum = None
    except NotFoundError as e:
        return {"error": str(e)}

    estimated_tokens = len(content) // 4
    result: dict[str, Any] = {
        "path": node.nav_path,
        "title": title,
        "content": content,
        "breadcrumbs": _breadcrumbs_str(tree, node),
        "estimated_tokens": estimated_tokens,
    }
    if checksum is not None:
        result["checksum"] = checksum
    if estimated_tokens > 5000:
        result["warning"] = f"Large document (~{estimated_tokens} tokens)."
    return result


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    store: DocStore
    watcher: ChangeWatcher


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Index the documentation root and watch it until shutdown."""
    store = DocStore(resolve_docs_root())
    watcher = ChangeWatcher(store)
    watcher.start()
    try:
        yield ServerContext(store=store, watcher=watcher)
    finally:
        watcher.stop()


mcp_server = FastMCP(
    "docbrowse",
    instructions="""\
The documentation is a tree of Markdown files. Navigation paths are the
slash-separated names shown by docs_list_tool (file extensions dropped),
for example "api/reference".

1. Call docs_list_tool with path "" to see the top of the tree.
2. Drill into directories with docs_list_tool, or raise max_depth.
3. Call docs_read_tool with a document's path to get its Markdown source.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def docs_list_tool(
    ctx: Context, path: str = "", max_depth: int | None = 2
) -> dict[str, Any]:
    """List documents and directories below a navigation path.

    Args:
        path: Navigation path ("" for the root).
        max_depth: Levels of children to include (default 2, null = all).
    """
    return docs_list(_ctx(ctx).store, path=path, max_depth=max_depth)


@mcp_server.tool()
async def docs_read_tool(
    ctx: Context, path: str, output_format: str = "markdown"
) -> dict[str, Any]:
    """Read one document.

    Args:
        path: Navigation path of a document (or a directory with an index).
        output_format: "markdown" for the source, "html" for rendered output.
    """
    return docs_read(_ctx(ctx).store, path=path, output_format=output_format)


def run_mcp_server(root: Path | None = None) -> None:
    """Run the MCP server with stdio transport."""
    from docbrowse.logging_config import configure_logging

    configure_logging(verbose=False)
    if root is not None:
        os.environ[DOCS_ROOT_ENV] = str(root)
    logger.info("Starting MCP server for {}", resolve_docs_root())
    mcp_server.run(transport="stdio")
