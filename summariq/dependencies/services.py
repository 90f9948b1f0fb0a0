"""
Service dependencies for FastAPI routes.

Per-application state (the chunk cache, the document registry and the LLM
client) lives on ``app.state`` and is created in ``summariq.main``;
everything else is built per request.  Tests swap implementations via
``app.dependency_overrides``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Depends, HTTPException, Request, status

from summariq.services.chunk_cache import ChunkCache
from summariq.services.documents import (
    DocumentExtractionError,
    DocumentLoader,
    DocumentNotFoundError,
    DocumentRegistry,
    LoadedDocument,
)
from summariq.services.generation import GenerationService
from summariq.services.llm_client import LLMClient
from summariq.services.retrieval import ContextRetriever

logger = logging.getLogger(__name__)


def get_chunk_cache(request: Request) -> ChunkCache:
    return request.app.state.chunk_cache


def get_document_registry(request: Request) -> DocumentRegistry:
    return request.app.state.document_registry


def get_document_loader(
    registry: DocumentRegistry = Depends(get_document_registry),
) -> DocumentLoader:
    return DocumentLoader(registry)


def get_llm_client(request: Request) -> LLMClient:
    """The application's LLM client; shared so Gemini keys rotate across requests."""
    return request.app.state.llm_client


def get_generation_service(
    llm: LLMClient = Depends(get_llm_client),
) -> GenerationService:
    return GenerationService(llm)


def get_context_retriever(
    cache: ChunkCache = Depends(get_chunk_cache),
    loader: DocumentLoader = Depends(get_document_loader),
) -> ContextRetriever:
    return ContextRetriever(cache, loader)


@contextmanager
def translate_document_errors(file_id: str) -> Iterator[None]:
    """
    Turn document loading errors raised in the block into HTTP errors.

    Raises:
        HTTPException 404: unknown document id.
        HTTPException 422: no usable text could be extracted.
    """
    try:
        yield
    except DocumentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="The requested document does not exist.",
        ) from exc
    except DocumentExtractionError as exc:
        logger.warning("Text extraction failed for %s: %s", file_id, exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc


async def load_document_or_error(loader: DocumentLoader, file_id: str) -> LoadedDocument:
    """Load *file_id*, answering 404/422 on loader errors."""
    with translate_document_errors(file_id):
        return await loader.load(file_id)
