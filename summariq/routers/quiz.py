"""
Quiz endpoints.

POST /: generate multiple-choice questions for a document.
POST /check: compare a user's answer with the correct one.
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
    QuizCheckData,
    QuizCheckRequest,
    QuizCheckResponse,
    QuizData,
    QuizQuestion,
    QuizRequest,
    QuizResponse,
)
from summariq.services.documents import DocumentLoader
from summariq.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=QuizResponse)
async def generate_quiz(
    request: QuizRequest,
    loader: DocumentLoader = Depends(get_document_loader),
    generator: GenerationService = Depends(get_generation_service),
) -> QuizResponse:
    """
    Generate a multiple-choice quiz.  ``correctAnswer`` is the zero-based
    index of the right option, or null when the provider gave no usable
    answer for that question.
    """
    logger.info("Generating %d quiz questions for file: %s", request.count, request.file_id)

    document = await load_document_or_error(loader, request.file_id)
    result = await generator.generate_quiz(document.text, request.count)
    questions = [QuizQuestion(**q) for q in result.value]

    logger.info("Quiz generated: %d questions", len(questions))
    return QuizResponse(
        message=(
            "Quiz generated successfully"
            if result.ok
            else "The AI provider returned an unreadable response"
        ),
        data=QuizData(
            questions=questions,
            total_questions=len(questions),
            parse_error=result.error,
            generated_at=datetime.now(timezone.utc),
        ),
    )


@router.post("/check", response_model=QuizCheckResponse)
async def check_answer(request: QuizCheckRequest) -> QuizCheckResponse:
    """Case-insensitive comparison of the user's answer with the correct one."""
    is_correct = request.user_answer.strip().upper() == request.correct_answer.strip().upper()

    return QuizCheckResponse(
        data=QuizCheckData(
            is_correct=is_correct,
            correct_answer=request.correct_answer,
            explanation=request.explanation or "No explanation provided",
            message=(
                "Correct!"
                if is_correct
                else f"Wrong. The correct answer is {request.correct_answer}"
            ),
        ),
    )
