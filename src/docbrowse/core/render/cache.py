"""Bounded cache of rendered documents keyed by node id and source checksum."""

import threading
from collections import OrderedDict

from docbrowse.config import RENDER_CACHE_SIZE
from docbrowse.models.node import RenderedDocument


class RenderCache:
    """Thread-safe LRU of RenderedDocuments.

    Entries are keyed by (node_id, source_checksum), so an edited file simply
    misses and the stale entry ages out (or is dropped by invalidate()).
    """

    def __init__(self, max_entries: int = RENDER_CACHE_SIZE) -> None:
        if max_entries < 1:
            msg = f"max_entries must be positive, got {max_entries}"
            raise ValueError(msg)
        self.max_entries = max_entries
        self._entries: OrderedDict[tuple[str, str], RenderedDocument] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, node_id: str, checksum: str) -> RenderedDocument | None:
        key = (node_id, checksum)
        with self._lock:
            doc = self._entries.get(key)
            if doc is not None:
                self._entries.move_to_end(key)
            return doc

    def put(self, doc: RenderedDocument) -> None:
        key = (doc.node_id, doc.source_checksum)
        with self._lock:
            self._entries[key] = doc
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self, node_id: str) -> int:
        """Drop every entry for a node. Returns how many were dropped."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == node_id]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
