"""HTML fragments for the page template: sidebar, breadcrumbs, listings."""

import re
from importlib import resources
from pathlib import Path
from urllib.parse import quote

from markupsafe import escape

from docbrowse.config import DOCS_URL_PREFIX
from docbrowse.core.tree.snapshot import DocTree
from docbrowse.models.node import Breadcrumb, DocNode

_PLACEHOLDER_RE = re.compile(r"\{\{(TITLE|SIDEBAR_HTML|BREADCRUMB_HTML|CONTENT_HTML)\}\}")
_ORDER_PREFIX_RE = re.compile(r"^\d+_")


def display_title(name: str) -> str:
    """Turn a file or directory name into a human-readable title.

    "02_getting-started.md" becomes "Getting Started".
    """
    title = name
    if title.lower().endswith(".md"):
        title = title[:-3]
    title = _ORDER_PREFIX_RE.sub("", title)
    title = re.sub(r"[-_]", " ", title)
    return " ".join(word[:1].upper() + word[1:] for word in title.split(" "))


def doc_url(nav_path: str, prefix: str = DOCS_URL_PREFIX) -> str:
    return prefix + quote(nav_path, safe="/")


def render_breadcrumbs(breadcrumbs: tuple[Breadcrumb, ...], prefix: str = DOCS_URL_PREFIX) -> str:
    """Render a trail as links joined by " / ", the last entry as plain text."""
    parts = []
    for i, crumb in enumerate(breadcrumbs):
        label = escape(crumb.label if i == 0 else display_title(crumb.label))
        if i == len(breadcrumbs) - 1:
            parts.append(f"<span>{label}</span>")
        else:
            parts.append(f'<a href="{escape(doc_url(crumb.path, prefix))}">{label}</a>')
    return " / ".join(parts)


def render_sidebar(
    tree: DocTree,
    active: DocNode | None = None,
    prefix: str = DOCS_URL_PREFIX,
) -> str:
    """Render the whole tree as nested lists of links."""
    active_id = active.id if active is not None else None

    def render_children(node: DocNode) -> str:
        items = []
        for child in tree.children(node):
            classes = ["nav-dir" if child.is_directory else "nav-doc"]
            if child.id == active_id:
                classes.append("active")
            link = (
                f'<a href="{escape(doc_url(child.nav_path, prefix))}">'
                f"{escape(display_title(child.name))}</a>"
            )
            nested = render_children(child) if child.is_directory and child.children else ""
            items.append(f'<li class="{" ".join(classes)}">{link}{nested}</li>')
        return f"<ul>{''.join(items)}</ul>" if items else ""

    return f'<nav class="nav-tree">{render_children(tree.root_node)}</nav>'


def render_listing(tree: DocTree, node: DocNode, prefix: str = DOCS_URL_PREFIX) -> str:
    """Render the immediate children of a directory."""
    title = node.name if node.parent_id is None else display_title(node.name)
    entries = tree.children(node)
    if not entries:
        return f'<h1>{escape(title)}</h1>\n<p class="empty">This directory has no documents.</p>\n'

    lines = [f"<h1>{escape(title)}</h1>", '<ul class="directory-listing">']
    for child in entries:
        css = "directory" if child.is_directory else "document"
        suffix = "/" if child.is_directory else ""
        lines.append(
            f'<li class="{css}"><a href="{escape(doc_url(child.nav_path, prefix))}">'
            f"{escape(display_title(child.name))}{suffix}</a></li>"
        )
    lines.append("</ul>")
    return "\n".join(lines) + "\n"


def load_template(path: str | Path | None = None) -> str:
    """Read the page template, defaulting to the one bundled with the package."""
    if path is not None:
        return Path(path).read_text(encoding="utf-8")
    return resources.files("docbrowse").joinpath("templates/page.html").read_text(encoding="utf-8")


def fill_template(
    template: str,
    *,
    title: str,
    sidebar_html: str,
    breadcrumb_html: str,
    content_html: str,
) -> str:
    """Substitute the four placeholders in a single pass.

    Placeholder text inside the injected fragments is left alone.
    """
    values = {
        "TITLE": str(escape(title)),
        "SIDEBAR_HTML": sidebar_html,
        "BREADCRUMB_HTML": breadcrumb_html,
        "CONTENT_HTML": content_html,
    }
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)
