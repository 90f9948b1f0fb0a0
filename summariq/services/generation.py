"""
Study-material generation: notes, keywords, flashcards, quizzes, exam
questions and document chat answers.

All prompts are module-level constants so they can be tuned without
touching logic code.  Structured artifacts are requested as JSON; replies
go through a best-effort parser and come back as a ``ParsedResponse`` whose
``error`` tells callers when the provider reply could not be parsed, as
opposed to a reply that was valid but empty.

Public API
----------
GenerationService.generate_notes(text, length)            -> str
GenerationService.generate_document_notes(text, length)   -> NotesResult
GenerationService.extract_keywords(text)                  -> ParsedResponse[KeywordSet]
GenerationService.generate_flashcards(text, count)        -> ParsedResponse[List[Dict]]
GenerationService.generate_quiz(text, count)              -> ParsedResponse[List[Dict]]
GenerationService.generate_exam_questions(text, count)    -> ParsedResponse[List[Dict]]
GenerationService.answer_question(question, context)      -> str
"""
from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import re
from typing import Any, Dict, Generic, List, Optional, Protocol, Tuple, TypeVar

from summariq.config import settings
from summariq.services.chunking import chunk_text

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Source text limits per artifact (characters)
KEYWORDS_TEXT_LIMIT = 8000
FLASHCARDS_TEXT_LIMIT = 10000
QUIZ_TEXT_LIMIT = 10000
EXAM_TEXT_LIMIT = 10000

NOTES_SEPARATOR = "\n\n---\n\n"

ANSWER_LETTERS = "ABCD"
EXAM_TYPES = ("Short", "Long", "Conceptual")
DEFAULT_EXAM_MARKS = {"Short": 5, "Long": 10, "Conceptual": 10}


# ---------------------------------------------------------------------------
# Provider protocol
# ---------------------------------------------------------------------------

class TextGenerator(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: Optional[str] = None,
        temperature: float = ...,
        max_tokens: int = ...,
        model: Optional[str] = None,
    ) -> str: ...


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class ParsedResponse(Generic[T]):
    """
    Parsed provider reply.

    ``value`` is always usable (an empty container on failure); ``error`` is
    set only when the reply could not be parsed into the expected shape.
    """

    value: T
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclasses.dataclass
class KeywordSet:
    keywords: List[str] = dataclasses.field(default_factory=list)
    definitions: Dict[str, str] = dataclasses.field(default_factory=dict)


@dataclasses.dataclass
class NotesResult:
    notes: str
    chunks_processed: int


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

NOTES_LENGTH_INSTRUCTIONS: Dict[str, str] = {
    "short": "Create concise notes (500 words).",
    "medium": "Create comprehensive notes (1500 words).",
    "detailed": "Create detailed notes (3000+ words).",
}

_NOTES_PROMPT = """\
Create study notes from this document. {instructions}

Use headings (##), bullet points, and **bold** for key terms.

Document:
{text}

Generate notes:"""

_KEYWORDS_PROMPT = """\
Extract 15-25 important keywords from this document.

Return JSON:
{{
  "keywords": ["term1", "term2"],
  "definitions": {{"term1": "definition"}}
}}

Document:
{text}

Return ONLY JSON:"""

_FLASHCARDS_PROMPT = """\
Create {count} flashcards.

Return JSON array:
[{{"front": "Question", "back": "Answer", "explanation": "..."}}]

Document:
{text}

Return ONLY JSON:"""

_QUIZ_PROMPT = """\
Create {count} multiple choice questions.

Return JSON array where correctAnswer is the INDEX (0, 1, 2, or 3) of the correct option:
[{{"question": "...", "options": ["Option 1", "Option 2", "Option 3", "Option 4"], \
"correctAnswer": 0, "explanation": "..."}}]

IMPORTANT: correctAnswer must be a NUMBER (0-3), not a letter!

Document:
{text}

Return ONLY JSON:"""

_EXAM_PROMPT = """\
Create EXACTLY {count} exam questions with a mix of types.

IMPORTANT RULES:
- Generate EXACTLY {count} questions total
- Short questions: 1-2 sentence answers, factual/definition-based (e.g., "What is X?", "Define Y")
- Long questions: 4-6 sentence answers, require explanation/analysis (e.g., "Explain how...", \
"Describe the process...")
- Conceptual questions: 3-4 sentence answers, test understanding of concepts (e.g., \
"Why does...", "Compare and contrast...")
- Mix the types evenly: aim for equal numbers of each type
- Each question must have a complete answer

Return JSON array (type MUST be exactly "Short", "Long", or "Conceptual"):
[{{"question": "...", "type": "Short" or "Long" or "Conceptual", "marks": 5 or 10, "answer": "..."}}]

Document:
{text}

Return ONLY JSON array with {count} questions:"""

_CHAT_PROMPT = """\
You are a helpful study assistant. Answer the question based on the provided context \
from the document.

RULES:
- Use the context to answer the question
- If the exact answer isn't in the context but related information is present, provide \
a helpful answer based on that information
- Be conversational and helpful
- Only say "I cannot find this information in the document" if the context has \
absolutely no relevant information
- Keep answers concise but complete (2-4 sentences)

Context from document:
{context}

Question: {question}

Answer:"""


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class GenerationService:
    """Builds artifact prompts, calls the provider and parses the replies."""

    NOTES_PROMPT = _NOTES_PROMPT
    KEYWORDS_PROMPT = _KEYWORDS_PROMPT
    FLASHCARDS_PROMPT = _FLASHCARDS_PROMPT
    QUIZ_PROMPT = _QUIZ_PROMPT
    EXAM_PROMPT = _EXAM_PROMPT
    CHAT_PROMPT = _CHAT_PROMPT

    def __init__(
        self,
        llm: TextGenerator,
        notes_chunk_size: Optional[int] = None,
        notes_chunk_delay: Optional[float] = None,
    ) -> None:
        self.llm = llm
        self.notes_chunk_size = notes_chunk_size or settings.NOTES_CHUNK_SIZE
        self.notes_chunk_delay = (
            settings.NOTES_CHUNK_DELAY_SECONDS
            if notes_chunk_delay is None
            else notes_chunk_delay
        )

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def generate_notes(self, text: str, length: str = "detailed") -> str:
        """Generate markdown notes for one piece of text."""
        instructions = NOTES_LENGTH_INSTRUCTIONS.get(
            length, NOTES_LENGTH_INSTRUCTIONS["detailed"]
        )
        prompt = self.NOTES_PROMPT.format(instructions=instructions, text=text)
        return await self.llm.generate(
            prompt,
            system_prompt="You are an expert note-taker.",
            temperature=0.5,
        )

    async def generate_document_notes(
        self,
        text: str,
        length: str = "detailed",
    ) -> NotesResult:
        """
        Generate notes for a whole document.

        Documents longer than ``notes_chunk_size`` characters are split into
        windows; each window gets its own notes call (sequentially, with a
        short pause in between) and the results are joined with a rule.
        """
        if len(text) <= self.notes_chunk_size:
            return NotesResult(notes=await self.generate_notes(text, length), chunks_processed=1)

        chunks = chunk_text(text, self.notes_chunk_size)
        logger.info("Generating notes in %d chunks", len(chunks))

        parts: List[str] = []
        for chunk in chunks:
            logger.info("Notes chunk %d/%d", chunk.index + 1, len(chunks))
            parts.append(await self.generate_notes(chunk.text, length))
            if chunk.index < len(chunks) - 1 and self.notes_chunk_delay > 0:
                await asyncio.sleep(self.notes_chunk_delay)

        return NotesResult(notes=NOTES_SEPARATOR.join(parts), chunks_processed=len(chunks))

    # ------------------------------------------------------------------
    # Keywords
    # ------------------------------------------------------------------

    async def extract_keywords(self, text: str) -> ParsedResponse[KeywordSet]:
        prompt = self.KEYWORDS_PROMPT.format(text=text[:KEYWORDS_TEXT_LIMIT])
        reply = await self.llm.generate(prompt, temperature=0.3)

        ok, raw = parse_json_reply(reply)
        if not ok or not isinstance(raw, dict):
            return ParsedResponse(KeywordSet(), error=_parse_error("a JSON object", reply))

        keywords: List[str] = []
        seen: set = set()
        for item in raw.get("keywords") or []:
            term = str(item).strip()
            if term and term.lower() not in seen:
                seen.add(term.lower())
                keywords.append(term)

        definitions_raw = raw.get("definitions")
        definitions: Dict[str, str] = {}
        if isinstance(definitions_raw, dict):
            definitions = {
                str(k).strip(): str(v).strip()
                for k, v in definitions_raw.items()
                if str(k).strip()
            }

        logger.info("extract_keywords: %d keywords", len(keywords))
        return ParsedResponse(KeywordSet(keywords=keywords, definitions=definitions))

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    async def generate_flashcards(
        self,
        text: str,
        count: int = 20,
    ) -> ParsedResponse[List[Dict[str, Any]]]:
        prompt = self.FLASHCARDS_PROMPT.format(count=count, text=text[:FLASHCARDS_TEXT_LIMIT])
        reply = await self.llm.generate(prompt, temperature=0.6)

        parsed = _parse_array(reply)
        if not parsed.ok:
            return parsed

        cards: List[Dict[str, Any]] = []
        for item in parsed.value:
            if not isinstance(item, dict):
                continue
            front = str(item.get("front", "")).strip()
            back = str(item.get("back", "")).strip()
            if not front or not back:
                continue
            cards.append({
                "front": front,
                "back": back,
                "explanation": str(item.get("explanation", "")).strip(),
            })

        logger.info("generate_flashcards: %d/%d cards", len(cards), count)
        return ParsedResponse(cards)

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    async def generate_quiz(
        self,
        text: str,
        count: int = 10,
    ) -> ParsedResponse[List[Dict[str, Any]]]:
        prompt = self.QUIZ_PROMPT.format(count=count, text=text[:QUIZ_TEXT_LIMIT])
        reply = await self.llm.generate(prompt, temperature=0.5)

        parsed = _parse_array(reply)
        if not parsed.ok:
            return parsed

        questions: List[Dict[str, Any]] = []
        for item in parsed.value:
            if not isinstance(item, dict):
                continue
            question = str(item.get("question", "")).strip()
            options = item.get("options")
            if not question or not isinstance(options, list) or not options:
                continue
            options = [str(o).strip() for o in options]
            questions.append({
                "question": question,
                "options": options,
                "correct_answer": normalize_answer_index(
                    item.get("correctAnswer", item.get("correct_answer")),
                    len(options),
                ),
                "explanation": str(item.get("explanation", "")).strip(),
            })

        logger.info("generate_quiz: %d/%d questions", len(questions), count)
        return ParsedResponse(questions)

    # ------------------------------------------------------------------
    # Exam questions
    # ------------------------------------------------------------------

    async def generate_exam_questions(
        self,
        text: str,
        count: int = 10,
    ) -> ParsedResponse[List[Dict[str, Any]]]:
        prompt = self.EXAM_PROMPT.format(count=count, text=text[:EXAM_TEXT_LIMIT])
        reply = await self.llm.generate(prompt, temperature=0.6, max_tokens=6000)

        parsed = _parse_array(reply)
        if not parsed.ok:
            return parsed

        questions: List[Dict[str, Any]] = []
        for item in parsed.value:
            if not isinstance(item, dict):
                continue
            question = str(item.get("question", "")).strip()
            if not question:
                continue
            qtype = normalize_exam_type(item.get("type"))
            questions.append({
                "question": question,
                "type": qtype,
                "marks": _to_marks(item.get("marks"), DEFAULT_EXAM_MARKS[qtype]),
                "answer": str(item.get("answer", "")).strip(),
            })

        logger.info("generate_exam_questions: %d/%d questions", len(questions), count)
        return ParsedResponse(questions)

    # ------------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------------

    async def answer_question(self, question: str, context: str) -> str:
        prompt = self.CHAT_PROMPT.format(context=context, question=question)
        return await self.llm.generate(prompt, temperature=0.3, max_tokens=1000)


# ---------------------------------------------------------------------------
# Normalisation helpers
# ---------------------------------------------------------------------------

def normalize_answer_index(value: Any, option_count: int = 4) -> Optional[int]:
    """
    Normalise a quiz answer to a zero-based option index.

    Accepts a letter ("A"–"D", optionally as "B)" or "(c)"), an integer
    index, or a digit string.  Returns ``None`` for anything else or for an
    index outside the option list.
    """
    index: Optional[int] = None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        index = value
    elif isinstance(value, float) and value.is_integer():
        index = int(value)
    elif isinstance(value, str):
        candidate = value.strip().upper()
        letter = re.fullmatch(r"\(?([A-D])[).:]?", candidate)
        if letter:
            index = ANSWER_LETTERS.index(letter.group(1))
        elif candidate.isdigit():
            index = int(candidate)

    if index is None or not 0 <= index < max(option_count, 1):
        return None
    return index


def normalize_exam_type(value: Any) -> str:
    """Map an exam question type onto Short / Long / Conceptual (default Short)."""
    candidate = str(value or "").strip().lower()
    for qtype in EXAM_TYPES:
        if candidate == qtype.lower():
            return qtype
    return "Short"


def _to_marks(value: Any, default: int) -> int:
    try:
        marks = int(value)
    except (TypeError, ValueError):
        return default
    return marks if marks > 0 else default


# ---------------------------------------------------------------------------
# Keyword context lookup
# ---------------------------------------------------------------------------

def find_keyword_contexts(
    text: str,
    keywords: List[str],
    window: int = 100,
) -> Dict[str, str]:
    """
    Find a source-text snippet for each keyword.

    Prefers the first sentence containing the keyword as a whole word
    (case-insensitive); falls back to ``window`` characters either side of
    the first substring match.  Keywords that never occur are omitted.
    """
    contexts: Dict[str, str] = {}
    lowered = text.lower()
    # Only period-terminated sentences qualify for the whole-sentence form
    sentences = [s for s in re.split(r"(?<=\.)", text) if s.endswith(".")]
    for keyword in keywords:
        if not keyword:
            continue
        pattern = re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE)
        sentence = next((s for s in sentences if pattern.search(s)), None)
        if sentence is not None:
            contexts[keyword] = sentence.strip()
            continue

        pos = lowered.find(keyword.lower())
        if pos != -1:
            start = max(0, pos - window)
            end = min(len(text), pos + len(keyword) + window)
            contexts[keyword] = "..." + text[start:end].strip() + "..."
    return contexts


# ---------------------------------------------------------------------------
# Robust JSON parsing
# ---------------------------------------------------------------------------

def parse_json_reply(reply: str) -> Tuple[bool, Any]:
    """
    Try several strategies to parse JSON from potentially messy LLM output.

    Handles:
    - Markdown code fences (```json … ```, ``` … ```)
    - Trailing commas before ] or }
    - Python-style True / False / None
    - Surrounding prose: finds the first balanced [...] or {...} block

    Returns ``(success, parsed_value)``.
    """
    if not reply or not reply.strip():
        return False, None

    text = reply.strip()

    # Strategy 1: direct parse
    ok, val = _try_json(text)
    if ok:
        return True, val

    # Strategy 2: strip markdown code fences
    stripped = _strip_code_fences(text)
    if stripped != text:
        ok, val = _try_json(stripped)
        if ok:
            return True, val
        text = stripped

    # Strategy 3: fix common JSON mangling
    ok, val = _try_json(_fix_json_issues(text))
    if ok:
        return True, val

    # Strategy 4: extract JSON structure from surrounding prose
    for open_b, close_b in (("[", "]"), ("{", "}")):
        fragment = _extract_json_structure(text, open_b, close_b)
        if fragment:
            ok, val = _try_json(fragment)
            if ok:
                return True, val
            ok, val = _try_json(_fix_json_issues(fragment))
            if ok:
                return True, val

    logger.warning("parse_json_reply: all strategies failed. Preview: %s", reply[:400])
    return False, None


def _parse_array(reply: str) -> ParsedResponse[List[Any]]:
    """Parse a reply expected to hold a JSON array (or an object wrapping one)."""
    ok, raw = parse_json_reply(reply)
    if ok and isinstance(raw, dict):
        # e.g. {"flashcards": [...]}
        raw = next((v for v in raw.values() if isinstance(v, list)), raw)
    if not ok or not isinstance(raw, list):
        return ParsedResponse([], error=_parse_error("a JSON array", reply))
    return ParsedResponse(raw)


def _parse_error(expected: str, reply: str) -> str:
    preview = " ".join((reply or "").split())[:120]
    return f"Provider reply was not {expected}: {preview!r}"


def _try_json(text: str) -> Tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return False, None


def _strip_code_fences(text: str) -> str:
    """Remove ```json / ``` delimiters that LLMs often wrap output in."""
    text = re.sub(r"^```(?:json|javascript|text)?\s*\n?", "", text, flags=re.IGNORECASE)
    text = re.sub(r"\n?```\s*$", "", text)
    return text.strip()


def _fix_json_issues(text: str) -> str:
    """Repair the most common JSON mangling patterns from LLMs."""
    text = re.sub(r",(\s*[}\]])", r"\1", text)
    text = re.sub(r"\bTrue\b", "true", text)
    text = re.sub(r"\bFalse\b", "false", text)
    text = re.sub(r"\bNone\b", "null", text)
    return text.strip()


def _extract_json_structure(text: str, open_b: str, close_b: str) -> str:
    """
    Find the first complete balanced open_b … close_b structure in *text*.
    Returns the matched fragment, or empty string if not found.
    """
    start = text.find(open_b)
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escape_next = False

    for i, ch in enumerate(text[start:], start=start):
        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == open_b:
            depth += 1
        elif ch == close_b:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return ""
