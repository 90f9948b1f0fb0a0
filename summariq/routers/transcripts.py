"""
Transcript registration.

POST /: register plain text (e.g. a lecture or video transcript) as a
document.  The returned fileId works with every generation endpoint.
Transcripts are held in memory for the lifetime of the process.
"""
import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from summariq.dependencies.services import get_document_registry
from summariq.models.schemas import (
    TranscriptCreateRequest,
    TranscriptData,
    TranscriptResponse,
)
from summariq.services.documents import DocumentRegistry, TranscriptSource

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=TranscriptResponse, status_code=status.HTTP_201_CREATED)
async def create_transcript(
    request: TranscriptCreateRequest,
    registry: DocumentRegistry = Depends(get_document_registry),
) -> TranscriptResponse:
    file_id = uuid.uuid4().hex
    registry.register(
        TranscriptSource(
            file_id=file_id,
            title=request.title,
            text=request.text,
            source_url=request.source_url,
        )
    )
    logger.info("Transcript %r registered as %s (%d chars)", request.title, file_id, len(request.text))

    return TranscriptResponse(
        message="Transcript registered successfully",
        data=TranscriptData(
            file_id=file_id,
            title=request.title,
            length=len(request.text),
            created_at=datetime.now(timezone.utc),
        ),
    )
