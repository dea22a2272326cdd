"""Configuration constants and settings for docbrowse."""

import os
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

# Environment variable naming the documentation root.
DOCS_ROOT_ENV: str = "DOCBROWSE_ROOT"

# Used when neither an argument nor the environment names a root.
DEFAULT_DOCS_DIR: Path = Path("docs")

# Recognized Markdown extensions, compared case-insensitively.
MARKDOWN_EXTENSIONS: tuple[str, ...] = (".md", ".markdown")

# fnmatch patterns for entry names that are never indexed. Dot-entries are
# always skipped regardless of this list.
IGNORE_PATTERNS: tuple[str, ...] = ("_*",)

# Fenced code languages passed through for client-side diagram rendering.
DIAGRAM_LANGUAGES: tuple[str, ...] = ("mermaid",)

# Document names shown in place of a directory listing, first match wins.
INDEX_NAMES: tuple[str, ...] = ("index", "README")

ROOT_LABEL: str = "Home"

# Seconds between full re-indexes once the file watcher has degraded.
POLL_INTERVAL: float = 5.0

RENDER_CACHE_SIZE: int = 256

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 3000

# URL prefix under which the web layer serves navigation paths.
DOCS_URL_PREFIX: str = "/docs/"


@dataclass(frozen=True)
class ViewerConfig:
    """Settings consumed by the indexer, renderer and watcher."""

    extensions: tuple[str, ...] = MARKDOWN_EXTENSIONS
    ignore_patterns: tuple[str, ...] = IGNORE_PATTERNS
    root_label: str = ROOT_LABEL
    diagram_languages: tuple[str, ...] = DIAGRAM_LANGUAGES
    index_names: tuple[str, ...] = INDEX_NAMES
    cache_size: int = RENDER_CACHE_SIZE
    poll_interval: float = POLL_INTERVAL

    def is_markdown(self, filename: str) -> bool:
        """Check whether a file name carries a recognized Markdown extension."""
        lowered = filename.lower()
        return any(lowered.endswith(ext.lower()) for ext in self.extensions)

    def strip_extension(self, filename: str) -> str:
        """Return the file name without its Markdown extension."""
        lowered = filename.lower()
        for ext in sorted(self.extensions, key=len, reverse=True):
            if lowered.endswith(ext.lower()):
                return filename[: -len(ext)]
        return filename


def resolve_docs_root(root: str | Path | None = None) -> Path:
    """Pick the documentation root.

    An explicit argument wins, then $DOCBROWSE_ROOT, then ./docs. The result
    is absolute but not checked for existence; the indexer does that.
    """
    if root is not None:
        return Path(root).expanduser().resolve()
    env_root = os.environ.get(DOCS_ROOT_ENV)
    if env_root:
        return Path(env_root).expanduser().resolve()
    logger.warning("Documentation directory not provided, using default: ./{}", DEFAULT_DOCS_DIR)
    return DEFAULT_DOCS_DIR.resolve()
