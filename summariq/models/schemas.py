"""
Pydantic schemas for request/response validation.

Field names are snake_case in Python and camelCase on the wire
(``file_id`` ↔ ``fileId``); requests accept either spelling.
"""
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Literal
from datetime import datetime


class CamelModel(BaseModel):
    """Base model serialising to camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel):
    """Common response envelope."""

    success: bool = True
    message: str = ""


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class HealthCheckResponse(ApiResponse):
    timestamp: datetime
    environment: str
    ai_provider: str
    ai_configured: bool
    cached_documents: int


# ---------------------------------------------------------------------------
# Upload / documents
# ---------------------------------------------------------------------------

class UploadedFileData(CamelModel):
    file_id: str
    filename: str
    filepath: str
    size: int
    type: Optional[str] = None
    extension: str
    uploaded_at: datetime


class UploadResponse(ApiResponse):
    data: UploadedFileData


class FileInfoData(CamelModel):
    file_id: str
    filename: str
    filepath: str
    size: int
    extension: str
    created_at: datetime
    modified_at: datetime


class FileInfoResponse(ApiResponse):
    data: FileInfoData


class TranscriptCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    text: str = Field(..., min_length=1)
    source_url: Optional[str] = None


class TranscriptData(CamelModel):
    file_id: str
    title: str
    length: int
    created_at: datetime


class TranscriptResponse(ApiResponse):
    data: TranscriptData


# ---------------------------------------------------------------------------
# Notes
# ---------------------------------------------------------------------------

class NotesRequest(CamelModel):
    file_id: str = Field(..., min_length=1)
    length: Literal["short", "medium", "detailed"] = "detailed"


class NotesMetadata(CamelModel):
    original_text_length: int
    notes_length: int
    word_count: int
    chunks_processed: int
    generated_at: datetime


class NotesData(CamelModel):
    notes: str
    length: str
    metadata: NotesMetadata


class NotesResponse(ApiResponse):
    data: NotesData


# ---------------------------------------------------------------------------
# Keywords
# ---------------------------------------------------------------------------

class KeywordsRequest(CamelModel):
    file_id: str = Field(..., min_length=1)


class KeywordsData(CamelModel):
    keywords: List[str]
    definitions: Dict[str, str]
    contexts: Dict[str, str]
    total_keywords: int
    parse_error: Optional[str] = None
    generated_at: datetime


class KeywordsResponse(ApiResponse):
    data: KeywordsData


# ---------------------------------------------------------------------------
# Flashcards
# ---------------------------------------------------------------------------

class FlashcardsRequest(CamelModel):
    file_id: str = Field(..., min_length=1)
    count: int = Field(20, ge=1, le=50)


class Flashcard(CamelModel):
    front: str
    back: str
    explanation: str = ""


class FlashcardsData(CamelModel):
    flashcards: List[Flashcard]
    total_cards: int
    parse_error: Optional[str] = None
    generated_at: datetime


class FlashcardsResponse(ApiResponse):
    data: FlashcardsData


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------

class QuizRequest(CamelModel):
    file_id: str = Field(..., min_length=1)
    count: int = Field(10, ge=1, le=30)


class QuizQuestion(CamelModel):
    question: str
    options: List[str]
    correct_answer: Optional[int] = None   # zero-based option index
    explanation: str = ""


class QuizData(CamelModel):
    questions: List[QuizQuestion]
    total_questions: int
    parse_error: Optional[str] = None
    generated_at: datetime


class QuizResponse(ApiResponse):
    data: QuizData


class QuizCheckRequest(CamelModel):
    user_answer: str = Field(..., min_length=1)
    correct_answer: str = Field(..., min_length=1)
    explanation: Optional[str] = None


class QuizCheckData(CamelModel):
    is_correct: bool
    correct_answer: str
    explanation: str
    message: str


class QuizCheckResponse(ApiResponse):
    data: QuizCheckData


# ---------------------------------------------------------------------------
# Exam questions
# ---------------------------------------------------------------------------

class ExamQuestionsRequest(CamelModel):
    file_id: str = Field(..., min_length=1)
    count: int = Field(10, ge=1, le=20)


class ExamQuestion(CamelModel):
    question: str
    type: Literal["Short", "Long", "Conceptual"]
    marks: int
    answer: str = ""


class ExamQuestionsData(CamelModel):
    questions: List[ExamQuestion]
    total_questions: int
    parse_error: Optional[str] = None
    generated_at: datetime


class ExamQuestionsResponse(ApiResponse):
    data: ExamQuestionsData


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------

class ChatRequest(CamelModel):
    file_id: str = Field(..., min_length=1)
    question: str = Field(..., min_length=1, max_length=2000)


class ChatSource(CamelModel):
    index: int
    score: int
    length: int


class ChatData(CamelModel):
    question: str
    answer: str
    sources: List[ChatSource]
    total_chunks: int
    timestamp: datetime


class ChatResponse(ApiResponse):
    data: ChatData
