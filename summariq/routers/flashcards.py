"""
Flashcards endpoint.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from summariq.dependencies.services import (
    get_document_loader,
    get_generation_service,
    load_document_or_error,
)
from summariq.models.schemas import (
    Flashcard,
    FlashcardsData,
    FlashcardsRequest,
    FlashcardsResponse,
)
from summariq.services.documents import DocumentLoader
from summariq.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=FlashcardsResponse)
async def generate_flashcards(
    request: FlashcardsRequest,
    loader: DocumentLoader = Depends(get_document_loader),
    generator: GenerationService = Depends(get_generation_service),
) -> FlashcardsResponse:
    logger.info("Generating %d flashcards for file: %s", request.count, request.file_id)

    document = await load_document_or_error(loader, request.file_id)
    result = await generator.generate_flashcards(document.text, request.count)
    cards = [Flashcard(**card) for card in result.value]

    logger.info("Flashcards generated: %d cards", len(cards))
    return FlashcardsResponse(
        message=(
            "Flashcards generated successfully"
            if result.ok
            else "The AI provider returned an unreadable response"
        ),
        data=FlashcardsData(
            flashcards=cards,
            total_cards=len(cards),
            parse_error=result.error,
            generated_at=datetime.now(timezone.utc),
        ),
    )
