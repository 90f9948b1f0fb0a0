"""Request and response schemas for SummarIQ."""
from summariq.models.schemas import (
    ChatRequest,
    ChatResponse,
    ExamQuestionsRequest,
    ExamQuestionsResponse,
    FlashcardsRequest,
    FlashcardsResponse,
    HealthCheckResponse,
    KeywordsRequest,
    KeywordsResponse,
    NotesRequest,
    NotesResponse,
    QuizCheckRequest,
    QuizCheckResponse,
    QuizRequest,
    QuizResponse,
    TranscriptCreateRequest,
    TranscriptResponse,
    UploadResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ExamQuestionsRequest",
    "ExamQuestionsResponse",
    "FlashcardsRequest",
    "FlashcardsResponse",
    "HealthCheckResponse",
    "KeywordsRequest",
    "KeywordsResponse",
    "NotesRequest",
    "NotesResponse",
    "QuizCheckRequest",
    "QuizCheckResponse",
    "QuizRequest",
    "QuizResponse",
    "TranscriptCreateRequest",
    "TranscriptResponse",
    "UploadResponse",
]
