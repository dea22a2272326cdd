"""CLI for docbrowse (serve, tree, render, MCP server)."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from docbrowse.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    POLL_INTERVAL,
    ViewerConfig,
    resolve_docs_root,
)
from docbrowse.core.render.fragments import (
    fill_template,
    load_template,
    render_breadcrumbs,
    render_sidebar,
)
from docbrowse.core.store import DocStore
from docbrowse.core.tree.navigation import tree_to_dict
from docbrowse.errors import InvalidPathError, NotFoundError, RootNotFoundError
from docbrowse.logging_config import configure_logging

app = typer.Typer(help="docbrowse: browse a directory of Markdown documents.")

RootArgument = Annotated[
    Path | None,
    typer.Argument(help="Documentation directory (default: $DOCBROWSE_ROOT or ./docs)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(root: Path | None, config: ViewerConfig | None = None) -> DocStore:
    """Index the documentation root, exiting if it does not exist."""
    try:
        return DocStore(resolve_docs_root(root), config)
    except RootNotFoundError as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e


@app.command()
def serve(
    root: RootArgument = None,
    host: str = typer.Option(DEFAULT_HOST, "--host", "-H", help="Address to listen on"),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", help="Port to listen on"),
    watch: bool = typer.Option(True, "--watch/--no-watch", help="Follow file changes"),
    template: Annotated[
        Path | None,
        typer.Option("--template", "-t", help="Page template with {{...}} placeholders"),
    ] = None,
    poll_interval: float = typer.Option(
        POLL_INTERVAL, "--poll-interval", help="Seconds between re-indexes if watching fails"
    ),
) -> None:
    """Serve the documentation over HTTP."""
    from docbrowse.core.watch.watcher import ChangeWatcher
    from docbrowse.web.app import run_server

    store = _open_store(root, ViewerConfig(poll_interval=poll_interval))
    template_text = load_template(template) if template else None

    watcher = ChangeWatcher(store) if watch else None
    if watcher is not None:
        watcher.start()
    try:
        run_server(store, host=host, port=port, template=template_text)
    finally:
        if watcher is not None:
            watcher.stop()


@app.command()
def tree(
    root: RootArgument = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Print the navigation tree."""
    store = _open_store(root)
    doc_tree = store.tree

    if output_json:
        typer.echo(json.dumps(tree_to_dict(doc_tree, doc_tree.root_node), indent=2))
        return

    for node in doc_tree.walk():
        indent = "  " * node.depth
        suffix = "/" if node.is_directory and node.parent_id is not None else ""
        typer.echo(f"{indent}{node.name}{suffix}")


@app.command()
def render(
    nav_path: str = typer.Argument("", help="Navigation path, e.g. 'api/reference'"),
    root: Annotated[
        Path | None,
        typer.Option("--root", "-r", help="Documentation directory"),
    ] = None,
    full_page: bool = typer.Option(False, "--page", help="Fill the page template"),
) -> None:
    """Render one document (or a directory listing) as HTML."""
    store = _open_store(root)
    try:
        doc_tree, node, view = store.view(nav_path)
    except (NotFoundError, InvalidPathError) as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(1) from e

    if not full_page:
        typer.echo(view.html)
        return

    typer.echo(
        fill_template(
            load_template(),
            title=view.title,
            sidebar_html=render_sidebar(doc_tree, active=node),
            breadcrumb_html=render_breadcrumbs(view.breadcrumbs),
            content_html=view.html,
        )
    )


@app.command()
def mcp(root: RootArgument = None) -> None:
    """Start the MCP server (stdio transport)."""
    from docbrowse.mcp.server import run_mcp_server

    docs_root = resolve_docs_root(root)
    if not docs_root.is_dir():
        logger.error("Documentation directory not found: {}", docs_root)
        raise typer.Exit(1)
    run_mcp_server(docs_root)
