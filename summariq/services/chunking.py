"""
Fixed-size text chunking.

Splits a text blob into consecutive, non-overlapping character windows.
Every window holds exactly ``target_size`` characters except the last,
which holds the remainder, so joining the chunk texts in index order
reproduces the input exactly.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Chunk:
    """A contiguous window of a source document."""

    index: int        # 0-based position in source order
    text: str
    length: int       # == len(text)
    word_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "text": self.text,
            "length": self.length,
            "wordCount": self.word_count,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def count_words(text: str) -> int:
    """Count whitespace-delimited tokens; whitespace-only text counts as 1."""
    return len(text.split()) or 1


# ---------------------------------------------------------------------------
# Chunker
# ---------------------------------------------------------------------------

def chunk_text(text: str, target_size: int) -> List[Chunk]:
    """
    Split *text* into windows of *target_size* characters.

    Args:
        text:        Source text. Empty text yields an empty list.
        target_size: Window size in characters; must be positive.

    Returns:
        Chunks ordered by ``index`` (left-to-right in *text*).

    Raises:
        ValueError: *target_size* is not a positive integer.
    """
    if target_size <= 0:
        raise ValueError(f"target_size must be positive, got {target_size}")

    chunks: List[Chunk] = []
    for start in range(0, len(text), target_size):
        window = text[start:start + target_size]
        chunks.append(
            Chunk(
                index=len(chunks),
                text=window,
                length=len(window),
                word_count=count_words(window),
            )
        )

    logger.debug(
        "chunk_text: %d chars → %d chunks (target_size=%d)",
        len(text),
        len(chunks),
        target_size,
    )
    return chunks
