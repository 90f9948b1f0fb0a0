"""
Chat endpoint: answer a question about one document.

The document is chunked once and cached; each question is answered from
the few chunks whose text best matches the question words.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from summariq.dependencies.services import (
    get_context_retriever,
    get_generation_service,
    translate_document_errors,
)
from summariq.models.schemas import ChatData, ChatRequest, ChatResponse, ChatSource
from summariq.services.generation import GenerationService
from summariq.services.retrieval import ContextRetriever

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    retriever: ContextRetriever = Depends(get_context_retriever),
    generator: GenerationService = Depends(get_generation_service),
) -> ChatResponse:
    logger.info("Chat question for file %s: %s", request.file_id, request.question[:80])

    with translate_document_errors(request.file_id):
        retrieved = await retriever.retrieve(request.file_id, request.question)

    answer = await generator.answer_question(request.question, retrieved.context)

    return ChatResponse(
        data=ChatData(
            question=request.question,
            answer=answer,
            sources=[
                ChatSource(index=s.index, score=s.score, length=len(s.text))
                for s in retrieved.chunks
            ],
            total_chunks=retrieved.total_chunks,
            timestamp=datetime.now(timezone.utc),
        ),
    )
