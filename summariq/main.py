"""
Main FastAPI application for the SummarIQ backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import os
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from summariq.config import settings
from summariq.routers import (
    chat,
    exam_questions,
    flashcards,
    health,
    keywords,
    notes,
    quiz,
    transcripts,
    upload,
)
from summariq.services.chunk_cache import ChunkCache
from summariq.services.documents import DocumentRegistry
from summariq.services.llm_client import LLMClient, LLMProviderError

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting SummarIQ backend …")
    logger.info("=" * 60)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    logger.info("✓ Upload directory: %s", os.path.abspath(settings.UPLOAD_DIR))

    if settings.provider_key_configured():
        logger.info("✓ AI provider: %s", settings.AI_PROVIDER)
    else:
        logger.warning(
            "⚠ AI provider '%s' has no API key configured; generation endpoints will fail",
            settings.AI_PROVIDER,
        )

    logger.info("=" * 60)
    logger.info("  SummarIQ backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down SummarIQ backend …")
    app.state.chunk_cache.clear()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="SummarIQ API",
    description=(
        "**SummarIQ**: AI study assistant.\n\n"
        "Upload a document (PDF/DOCX) or a transcript and generate study "
        "notes, keywords, flashcards, quizzes and exam questions, or chat "
        "with it.\n\n"
        "Key endpoints:\n"
        "- `POST /api/upload`: upload a document\n"
        "- `POST /api/transcripts`: register transcript text\n"
        "- `POST /api/notes`: study notes\n"
        "- `POST /api/chat`: ask a question about a document\n"
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Process-wide state, shared by every request.
app.state.chunk_cache = ChunkCache()
app.state.document_registry = DocumentRegistry(settings.UPLOAD_DIR)
app.state.llm_client = LLMClient()


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    if request.url.path not in ("/health", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(LLMProviderError)
async def llm_provider_error_handler(request: Request, exc: LLMProviderError):
    """The AI provider failed; report it as a bad gateway."""
    logger.error("AI provider error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "success": False,
            "error": "AI provider error",
            "message": str(exc),
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "message": str(exc),
            "path": str(request.url.path),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,         prefix="/health",             tags=["Health"])
app.include_router(upload.router,         prefix="/api/upload",         tags=["Upload"])
app.include_router(transcripts.router,    prefix="/api/transcripts",    tags=["Transcripts"])
app.include_router(notes.router,          prefix="/api/notes",          tags=["Notes"])
app.include_router(keywords.router,       prefix="/api/keywords",       tags=["Keywords"])
app.include_router(flashcards.router,     prefix="/api/flashcards",     tags=["Flashcards"])
app.include_router(quiz.router,           prefix="/api/quiz",           tags=["Quiz"])
app.include_router(exam_questions.router, prefix="/api/exam-questions", tags=["Exam Questions"])
app.include_router(chat.router,           prefix="/api/chat",           tags=["Chat"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root: returns basic service info."""
    return {
        "name": "SummarIQ API",
        "version": "0.1.0",
        "description": "AI Study Assistant Backend",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "upload": "/api/upload",
            "transcripts": "/api/transcripts",
            "notes": "/api/notes",
            "keywords": "/api/keywords",
            "flashcards": "/api/flashcards",
            "quiz": "/api/quiz",
            "examQuestions": "/api/exam-questions",
            "chat": "/api/chat",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "summariq.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
