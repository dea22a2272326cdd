"""Flask app serving the documentation tree through the page template."""

from flask import Flask, Response, redirect, request
from loguru import logger
from markupsafe import escape

from docbrowse.config import DOCS_URL_PREFIX
from docbrowse.core.render.fragments import (
    fill_template,
    load_template,
    render_breadcrumbs,
    render_sidebar,
)
from docbrowse.core.render.renderer import render_document
from docbrowse.core.store import DocStore
from docbrowse.core.tree.navigation import find_index_document
from docbrowse.errors import InvalidPathError, NotFoundError
from docbrowse.models.node import DirectoryListing


def _candidate_paths(url_path: str, extensions: tuple[str, ...]) -> list[str]:
    """Navigation paths to try for a URL path, most specific first.

    Trailing slashes are dropped. A final segment ending in a Markdown
    extension (links copied from the file system) is retried without it.
    """
    nav_path = url_path.rstrip("/")
    candidates = [nav_path]
    lowered = nav_path.lower()
    for ext in extensions:
        if lowered.endswith(ext.lower()) and len(nav_path) > len(ext):
            candidates.append(nav_path[: -len(ext)])
    return candidates


def create_app(store: DocStore, template: str | None = None) -> Flask:
    """Build the Flask app for a store.

    Args:
        store: Live documentation store.
        template: Page template text; the bundled template if None.
    """
    app = Flask(__name__)
    page_template = template if template is not None else load_template()
    app.config["DOCBROWSE_STORE"] = store

    def page(title: str, sidebar_html: str, breadcrumb_html: str, content_html: str) -> str:
        return fill_template(
            page_template,
            title=title,
            sidebar_html=sidebar_html,
            breadcrumb_html=breadcrumb_html,
            content_html=content_html,
        )

    def not_found(url_path: str) -> Response:
        tree = store.tree
        body = page(
            "Not found",
            render_sidebar(tree),
            f'<a href="{DOCS_URL_PREFIX}">{escape(tree.root_node.name)}</a>',
            f"<h1>Not found</h1>\n<p>Documentation file not found: {escape(url_path)}</p>\n",
        )
        return Response(body, status=404, mimetype="text/html")

    @app.before_request
    def log_request() -> None:
        logger.debug("Request received: {} {}", request.method, request.path)

    @app.get("/")
    def index() -> Response:
        return redirect(DOCS_URL_PREFIX)

    @app.get(DOCS_URL_PREFIX, defaults={"url_path": ""})
    @app.get(f"{DOCS_URL_PREFIX}<path:url_path>")
    def show(url_path: str) -> Response:
        try:
            for nav_path in _candidate_paths(url_path, store.config.extensions):
                try:
                    tree, node, view = store.view(nav_path)
                    break
                except NotFoundError:
                    continue
            else:
                logger.info("Not found: {}", url_path)
                return not_found(url_path)
        except InvalidPathError as exc:
            logger.warning("Rejected navigation path {!r}: {}", url_path, exc)
            return not_found(url_path)

        content = view
        if isinstance(view, DirectoryListing):
            index_node = find_index_document(tree, node, store.config.index_names)
            if index_node is not None:
                try:
                    content = render_document(tree, index_node, store.config, store.cache)
                except NotFoundError:
                    logger.info("Index document {} vanished, showing listing", index_node.nav_path)

        body = page(
            content.title,
            render_sidebar(tree, active=node),
            render_breadcrumbs(view.breadcrumbs),
            content.html,
        )
        return Response(body, mimetype="text/html")

    return app


def run_server(store: DocStore, *, host: str, port: int, template: str | None = None) -> None:
    """Serve until interrupted, one thread per request."""
    app = create_app(store, template)
    logger.info("Markdown documentation server listening at http://{}:{}", host, port)
    logger.info("Serving docs from: {}", store.root)
    app.run(host=host, port=port, threaded=True, use_reloader=False)
