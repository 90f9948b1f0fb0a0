"""
Keyword-overlap retrieval over cached document chunks.

Scoring is deliberately simple: each question word longer than three
characters contributes the number of case-insensitive substring occurrences
it has in a chunk.  Substring (not whole-word) matching means "work" also
matches inside "network".

Public API
----------
score_and_rank(chunks, question, top_k) -> List[ScoredChunk]
build_context(scored)                   -> str
ContextRetriever.retrieve(document_id, question) -> RetrievedContext
"""
from __future__ import annotations

import dataclasses
import logging
import string
from typing import List, Optional, Sequence

from summariq.config import settings
from summariq.services.chunk_cache import ChunkCache
from summariq.services.chunking import Chunk
from summariq.services.documents import DocumentLoader

logger = logging.getLogger(__name__)

# Question words of this length or shorter are ignored
MIN_TOKEN_LENGTH = 3

CONTEXT_SEPARATOR = "\n\n"


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class ScoredChunk:
    chunk: Chunk
    score: int

    @property
    def index(self) -> int:
        return self.chunk.index

    @property
    def text(self) -> str:
        return self.chunk.text


@dataclasses.dataclass
class RetrievedContext:
    """Returned by ContextRetriever.retrieve."""

    document_id: str
    question: str
    chunks: List[ScoredChunk]
    context: str
    total_chunks: int
    cache_hit: bool


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def question_tokens(question: str) -> List[str]:
    """
    Lower-cased question words that take part in scoring.

    The length filter applies to the whitespace-split word; leading and
    trailing punctuation is trimmed afterwards, so "jumps?" scores as
    "jumps" and "dog?" as "dog".
    """
    tokens: List[str] = []
    for word in question.lower().split():
        if len(word) <= MIN_TOKEN_LENGTH:
            continue
        word = word.strip(string.punctuation)
        if word:
            tokens.append(word)
    return tokens


def score_chunk(chunk: Chunk, tokens: Sequence[str]) -> int:
    """Sum of non-overlapping substring occurrences of *tokens* in *chunk*."""
    haystack = chunk.text.lower()
    return sum(haystack.count(token) for token in tokens)


def score_and_rank(
    chunks: Sequence[Chunk],
    question: str,
    top_k: int,
) -> List[ScoredChunk]:
    """
    Rank *chunks* by relevance to *question* and keep the best *top_k*.

    Ties keep document order (Python's sort is stable, including with
    ``reverse=True``).  When no question word qualifies every chunk scores
    0 and the first *top_k* chunks are returned.
    """
    if top_k <= 0:
        raise ValueError(f"top_k must be positive, got {top_k}")

    tokens = question_tokens(question)
    scored = [ScoredChunk(chunk=c, score=score_chunk(c, tokens)) for c in chunks]
    ranked = sorted(scored, key=lambda s: s.score, reverse=True)
    return ranked[:top_k]


def build_context(scored: Sequence[ScoredChunk]) -> str:
    """Join the selected chunk texts with a blank line."""
    return CONTEXT_SEPARATOR.join(s.text for s in scored)


# ---------------------------------------------------------------------------
# Retriever
# ---------------------------------------------------------------------------

class ContextRetriever:
    """Selects the chunks of a document most relevant to a question."""

    def __init__(
        self,
        cache: ChunkCache,
        loader: DocumentLoader,
        chunk_size: Optional[int] = None,
        top_k: Optional[int] = None,
    ) -> None:
        self.cache = cache
        self.loader = loader
        self.chunk_size = chunk_size or settings.CHAT_CHUNK_SIZE
        self.top_k = top_k or settings.CHAT_TOP_K

    async def retrieve(self, document_id: str, question: str) -> RetrievedContext:
        """
        Return the top-ranked chunks of *document_id* for *question*.

        The document is only loaded and chunked on a cache miss.
        """
        chunks = self.cache.get(document_id)
        cache_hit = chunks is not None
        if chunks is None:
            document = await self.loader.load(document_id)
            chunks = self.cache.get_or_create(document_id, document.text, self.chunk_size)

        ranked = score_and_rank(chunks, question, self.top_k)

        logger.info(
            "retrieve %s: %d/%d chunks selected, scores=%s (cache %s)",
            document_id,
            len(ranked),
            len(chunks),
            [s.score for s in ranked],
            "hit" if cache_hit else "miss",
        )
        return RetrievedContext(
            document_id=document_id,
            question=question,
            chunks=ranked,
            context=build_context(ranked),
            total_chunks=len(chunks),
            cache_hit=cache_hit,
        )
