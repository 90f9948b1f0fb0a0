"""
Exam questions endpoint.
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
    ExamQuestion,
    ExamQuestionsData,
    ExamQuestionsRequest,
    ExamQuestionsResponse,
)
from summariq.services.documents import DocumentLoader
from summariq.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ExamQuestionsResponse)
async def generate_exam_questions(
    request: ExamQuestionsRequest,
    loader: DocumentLoader = Depends(get_document_loader),
    generator: GenerationService = Depends(get_generation_service),
) -> ExamQuestionsResponse:
    """Generate a mix of Short, Long and Conceptual exam questions with model answers."""
    logger.info("Generating %d exam questions for file: %s", request.count, request.file_id)

    document = await load_document_or_error(loader, request.file_id)
    result = await generator.generate_exam_questions(document.text, request.count)
    questions = [ExamQuestion(**q) for q in result.value]

    logger.info("Exam questions generated: %d questions", len(questions))
    return ExamQuestionsResponse(
        message=(
            "Exam questions generated successfully"
            if result.ok
            else "The AI provider returned an unreadable response"
        ),
        data=ExamQuestionsData(
            questions=questions,
            total_questions=len(questions),
            parse_error=result.error,
            generated_at=datetime.now(timezone.utc),
        ),
    )
