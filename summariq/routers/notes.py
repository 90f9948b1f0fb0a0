"""
Study notes endpoint.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status

from summariq.dependencies.services import (
    get_document_loader,
    get_generation_service,
    load_document_or_error,
)
from summariq.models.schemas import NotesData, NotesMetadata, NotesRequest, NotesResponse
from summariq.services.document_parser import needs_ocr
from summariq.services.documents import DocumentLoader
from summariq.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter()

# Scanned documents with less text than this cannot be summarised
MIN_OCR_FALLBACK_CHARS = 100


@router.post("", response_model=NotesResponse)
async def generate_notes(
    request: NotesRequest,
    loader: DocumentLoader = Depends(get_document_loader),
    generator: GenerationService = Depends(get_generation_service),
) -> NotesResponse:
    """
    Generate markdown study notes for a document.

    Long documents are processed in windows of NOTES_CHUNK_SIZE characters
    and the per-window notes are joined.
    """
    logger.info("Generating %s notes for file: %s", request.length, request.file_id)

    document = await load_document_or_error(loader, request.file_id)

    if needs_ocr(document.extracted):
        logger.warning("%s looks scanned; OCR is not available", request.file_id)
        if len(document.text) < MIN_OCR_FALLBACK_CHARS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="This appears to be a scanned document. Please use a text-based PDF.",
            )

    result = await generator.generate_document_notes(document.text, request.length)

    logger.info("Notes generated: %d chars from %d chunk(s)", len(result.notes), result.chunks_processed)
    return NotesResponse(
        message="Notes generated successfully",
        data=NotesData(
            notes=result.notes,
            length=request.length,
            metadata=NotesMetadata(
                original_text_length=len(document.text),
                notes_length=len(result.notes),
                word_count=len(result.notes.split()),
                chunks_processed=result.chunks_processed,
                generated_at=datetime.now(timezone.utc),
            ),
        ),
    )
