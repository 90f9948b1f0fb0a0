"""
Keyword glossary endpoint.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from summariq.dependencies.services import (
    get_document_loader,
    get_generation_service,
    load_document_or_error,
)
from summariq.models.schemas import KeywordsData, KeywordsRequest, KeywordsResponse
from summariq.services.documents import DocumentLoader
from summariq.services.generation import GenerationService, find_keyword_contexts

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=KeywordsResponse)
async def extract_keywords(
    request: KeywordsRequest,
    loader: DocumentLoader = Depends(get_document_loader),
    generator: GenerationService = Depends(get_generation_service),
) -> KeywordsResponse:
    """
    Extract key terms with definitions, plus a snippet of the source text
    showing where each term is used.
    """
    logger.info("Extracting keywords for file: %s", request.file_id)

    document = await load_document_or_error(loader, request.file_id)
    result = await generator.extract_keywords(document.text)
    keyword_set = result.value

    contexts = find_keyword_contexts(document.raw_text, keyword_set.keywords)

    logger.info("Keywords extracted: %d terms", len(keyword_set.keywords))
    return KeywordsResponse(
        message=(
            "Keywords extracted successfully"
            if result.ok
            else "The AI provider returned an unreadable response"
        ),
        data=KeywordsData(
            keywords=keyword_set.keywords,
            definitions=keyword_set.definitions,
            contexts=contexts,
            total_keywords=len(keyword_set.keywords),
            parse_error=result.error,
            generated_at=datetime.now(timezone.utc),
        ),
    )
