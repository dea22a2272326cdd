"""Shared test fixtures."""

from pathlib import Path

import pytest

from docbrowse.core.store import DocStore
from docbrowse.core.tree.indexer import build_tree
from docbrowse.core.tree.snapshot import DocTree

SAMPLE_DOCS = {
    "guide.md": "# User Guide\n\nWelcome to the **guide**.\n",
    "api/ref.md": (
        "# API Reference\n"
        "\n"
        "| Name | Type |\n"
        "| ---- | ---- |\n"
        "| id   | str  |\n"
    ),
}

MIXED_DOCS = {
    "01_intro.md": "# Intro\n",
    "notes.txt": "not markdown",
    ".hidden.md": "# Hidden\n",
    "_drafts/wip.md": "# Work in progress\n",
    ".git/config": "[core]\n",
    "api/ref.md": "# Reference\n",
    "api/index.md": "# API\n\nStart here.\n",
    "api/v2/changes.markdown": "# Changes\n",
}


def write_docs(root: Path, files: dict[str, str]) -> Path:
    """Create files (and their directories) below root."""
    root.mkdir(parents=True, exist_ok=True)
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Return a root holding guide.md and api/ref.md."""
    return write_docs(tmp_path / "docs", SAMPLE_DOCS)


@pytest.fixture
def mixed_root(tmp_path: Path) -> Path:
    """Return a root mixing indexable, hidden, ignored and non-Markdown entries."""
    root = write_docs(tmp_path / "mixed", MIXED_DOCS)
    (root / "zeta").mkdir()
    return root


@pytest.fixture
def tree(docs_root: Path) -> DocTree:
    return build_tree(docs_root)


@pytest.fixture
def store(docs_root: Path) -> DocStore:
    return DocStore(docs_root)
