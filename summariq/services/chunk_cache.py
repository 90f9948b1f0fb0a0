"""
In-memory chunk cache keyed by document id.

One ``ChunkCache`` is created per running application (see ``summariq.main``)
and handed to request handlers through ``get_chunk_cache``.  Entries live
until evicted or until the process exits; nothing is persisted.

Entries are never updated in place.  Two concurrent misses for the same id
may both chunk the document; the last writer wins, and both values are
equal because chunking is deterministic.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Tuple

from summariq.services.chunking import Chunk, chunk_text

logger = logging.getLogger(__name__)


class ChunkCache:
    """Maps document ids to their chunk sequence; unbounded unless evicted."""

    def __init__(self) -> None:
        self._entries: Dict[str, Tuple[Chunk, ...]] = {}

    def get(self, document_id: str) -> Optional[Tuple[Chunk, ...]]:
        """Return the cached chunks for *document_id*, or ``None`` on a miss."""
        return self._entries.get(document_id)

    def get_or_create(
        self,
        document_id: str,
        text: str,
        target_size: int,
    ) -> Tuple[Chunk, ...]:
        """
        Return cached chunks for *document_id*, chunking *text* on a miss.

        On a hit *text* and *target_size* are ignored, even if the document
        content has changed under the same id.  Call :meth:`evict` first to
        force re-chunking.
        """
        cached = self._entries.get(document_id)
        if cached is not None:
            return cached

        chunks = tuple(chunk_text(text, target_size))
        self._entries[document_id] = chunks
        logger.info(
            "Chunk cache miss for %s: stored %d chunks (target_size=%d)",
            document_id,
            len(chunks),
            target_size,
        )
        return chunks

    def evict(self, document_id: str) -> bool:
        """Drop the entry for *document_id*. Returns True if one existed."""
        removed = self._entries.pop(document_id, None) is not None
        if removed:
            logger.info("Chunk cache evicted %s", document_id)
        return removed

    def clear(self) -> None:
        self._entries.clear()

    def document_ids(self) -> Sequence[str]:
        return list(self._entries)

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
