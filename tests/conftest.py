"""
Shared fixtures for SummarIQ backend tests.

The AI provider is replaced by ``FakeLLMClient`` through
``app.dependency_overrides``, so no network access or API key is needed.
Each test gets a fresh chunk cache and a document registry rooted in its
own temporary upload directory.
"""
from __future__ import annotations

import json
import os
import tempfile
from typing import Any, AsyncGenerator, Dict, List, Optional

import fitz  # PyMuPDF
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Configure settings *before* any summariq module is imported.
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="summariq-test-"))
os.environ["AI_PROVIDER"] = "openai"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["NOTES_CHUNK_DELAY_SECONDS"] = "0"

from summariq.dependencies.services import get_llm_client  # noqa: E402
from summariq.main import app  # noqa: E402
from summariq.services.chunk_cache import ChunkCache  # noqa: E402
from summariq.services.documents import DocumentRegistry  # noqa: E402


# ---------------------------------------------------------------------------
# Fake provider
# ---------------------------------------------------------------------------

FLASHCARDS_REPLY = json.dumps([
    {"front": "What is photosynthesis?", "back": "Light to chemical energy", "explanation": "Plants"},
    {"front": "Where does it happen?", "back": "Chloroplasts"},
])

QUIZ_REPLY = "```json\n" + json.dumps([
    {
        "question": "Where does photosynthesis happen?",
        "options": ["Mitochondria", "Chloroplasts", "Nucleus", "Ribosome"],
        "correctAnswer": 1,
        "explanation": "Chloroplasts hold chlorophyll.",
    },
    {
        "question": "Which gas is released?",
        "options": ["Oxygen", "Nitrogen", "Argon", "Helium"],
        "correctAnswer": "A",
        "explanation": "",
    },
]) + "\n```"

EXAM_REPLY = json.dumps([
    {"question": "Define photosynthesis.", "type": "Short", "marks": 5, "answer": "..."},
    {"question": "Explain the light reactions.", "type": "long", "answer": "..."},
    {"question": "Why are plants green?", "type": "Essay", "marks": "x", "answer": "..."},
])

KEYWORDS_REPLY = json.dumps({
    "keywords": ["photosynthesis", "chlorophyll", "Photosynthesis"],
    "definitions": {
        "photosynthesis": "Conversion of light energy into chemical energy.",
        "chlorophyll": "Green pigment that absorbs light.",
    },
})


class FakeLLMClient:
    """
    Stand-in for ``LLMClient``.

    Replies are chosen from the prompt text unless ``reply`` is set.  Set
    ``error`` to make every call raise it.  All calls are recorded.
    """

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.reply: Optional[str] = None
        self.error: Optional[Exception] = None

    async def generate(self, prompt: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, **kwargs})
        if self.error is not None:
            raise self.error
        if self.reply is not None:
            return self.reply
        return self._canned_reply(prompt)

    @staticmethod
    def _canned_reply(prompt: str) -> str:
        if "flashcards" in prompt:
            return FLASHCARDS_REPLY
        if "multiple choice" in prompt:
            return QUIZ_REPLY
        if "exam questions" in prompt:
            return EXAM_REPLY
        if "keywords" in prompt:
            return KEYWORDS_REPLY
        if "study notes" in prompt:
            return "## Notes\n\n- **Photosynthesis** makes sugar."
        return "Plants turn light into chemical energy."


# ---------------------------------------------------------------------------
# Sample content
# ---------------------------------------------------------------------------

SAMPLE_TEXT = (
    "Photosynthesis is the process by which green plants convert light energy "
    "into chemical energy. It takes place in the chloroplasts of leaf cells. "
    "Chlorophyll is the green pigment that absorbs red and blue light. "
    "The light reactions split water and release oxygen as a by-product. "
    "The Calvin cycle then fixes carbon dioxide into sugars using the energy "
    "stored during the light reactions. "
) * 4


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest_asyncio.fixture
async def client(fake_llm: FakeLLMClient, tmp_path) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the AI provider replaced
    by ``fake_llm`` and fresh in-memory state.
    """
    app.state.chunk_cache = ChunkCache()
    app.state.document_registry = DocumentRegistry(tmp_path / "uploads")
    app.dependency_overrides[get_llm_client] = lambda: fake_llm

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def transcript_id(client: AsyncClient) -> str:
    """Register SAMPLE_TEXT as a transcript and return its fileId."""
    resp = await client.post(
        "/api/transcripts",
        json={"title": "Photosynthesis lecture", "text": SAMPLE_TEXT},
    )
    assert resp.status_code == 201
    return resp.json()["data"]["fileId"]


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_TEXT


def make_pdf_bytes(lines: List[str]) -> bytes:
    """Return a one-page PDF containing *lines* of text."""
    doc = fitz.open()
    page = doc.new_page()
    if lines:
        page.insert_text((72, 72), "\n".join(lines), fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def pdf_bytes():
    """Factory fixture: ``pdf_bytes(lines)`` -> PDF file content."""
    return make_pdf_bytes
