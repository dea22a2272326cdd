"""Exceptions raised by the navigation and rendering core."""


class DocBrowseError(Exception):
    """Base class for docbrowse errors."""


class RootNotFoundError(DocBrowseError):
    """The documentation root is missing or is not a directory."""


class NotFoundError(DocBrowseError):
    """A navigation path does not match any node, or its file has vanished."""


class InvalidPathError(DocBrowseError):
    """A navigation path is malformed or tries to leave the root."""


class NotADocumentError(DocBrowseError):
    """A directory node was passed where a document node is required."""
