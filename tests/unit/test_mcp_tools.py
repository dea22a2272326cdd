"""Tests for MCP tool core functions."""

from pathlib import Path

from docbrowse.core.store import DocStore
from docbrowse.mcp.server import docs_list, docs_read


def test_docs_list_root(store: DocStore) -> None:
    result = docs_list(store)
    assert result["name"] == "Home"
    assert result["breadcrumbs"] == "Home"
    assert [c["path"] for c in result["children"]] == ["api", "guide"]
    assert result["children"][0]["children"][0]["path"] == "api/ref"


def test_docs_list_limits_depth(store: DocStore) -> None:
    result = docs_list(store, max_depth=0)
    assert result["child_count"] == 2
    assert "children" not in result

    negative = docs_list(store, max_depth=-3)
    assert "children" not in negative


def test_docs_list_subdirectory(store: DocStore) -> None:
    result = docs_list(store, path="api")
    assert result["breadcrumbs"] == "Home > api"
    assert [c["name"] for c in result["children"]] == ["ref"]


def test_docs_list_reports_bad_paths(store: DocStore) -> None:
    assert "error" in docs_list(store, path="missing")
    assert "error" in docs_list(store, path="../etc")


def test_docs_read_markdown(store: DocStore) -> None:
    result = docs_read(store, path="api/ref")
    assert result["path"] == "api/ref"
    assert result["title"] == "API Reference"
    assert result["content"].startswith("# API Reference\n")
    assert result["breadcrumbs"] == "Home > api > ref"
    assert result["estimated_tokens"] == len(result["content"]) // 4
    assert "checksum" not in result
    assert "warning" not in result


def test_docs_read_html(store: DocStore) -> None:
    result = docs_read(store, path="guide", output_format="html")
    assert "<strong>guide</strong>" in result["content"]
    assert len(result["checksum"]) == 64


def test_docs_read_rejects_unknown_format(store: DocStore) -> None:
    result = docs_read(store, path="guide", output_format="pdf")
    assert "Unknown output_format" in result["error"]


def test_docs_read_directory_without_index(store: DocStore) -> None:
    result = docs_read(store, path="api")
    assert "index document" in result["error"]
    assert result["entries"] == ["api/ref"]


def test_docs_read_directory_uses_index(docs_root: Path, store: DocStore) -> None:
    (docs_root / "api" / "README.md").write_text("# About the API\n")
    store.add_document("api/README.md")
    result = docs_read(store, path="api")
    assert result["path"] == "api/README"
    assert result["title"] == "About the API"


def test_docs_read_vanished_file(docs_root: Path, store: DocStore) -> None:
    (docs_root / "guide.md").unlink()
    assert "error" in docs_read(store, path="guide")


def test_docs_read_warns_on_large_documents(docs_root: Path, store: DocStore) -> None:
    (docs_root / "guide.md").write_text("# Big\n\n" + "word " * 5000)
    result = docs_read(store, path="guide")
    assert result["estimated_tokens"] > 5000
    assert "warning" in result
