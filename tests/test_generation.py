"""Tests for the generation service and its reply parsing."""
import json
import time

import pytest

from summariq.services.generation import (
    NOTES_SEPARATOR,
    GenerationService,
    find_keyword_contexts,
    normalize_answer_index,
    normalize_exam_type,
    parse_json_reply,
)


# ---------------------------------------------------------------------------
# JSON reply parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "reply",
    [
        '[{"a": 1}]',
        '```json\n[{"a": 1}]\n```',
        '```\n[{"a": 1}]\n```',
        'Here you go:\n[{"a": 1},]\nHope that helps!',
    ],
)
def test_parse_json_reply_recovers_array(reply):
    assert parse_json_reply(reply) == (True, [{"a": 1}])


def test_parse_json_reply_fixes_python_literals():
    assert parse_json_reply('{"ok": True, "value": None}') == (True, {"ok": True, "value": None})


@pytest.mark.parametrize("reply", ["", "   ", "I could not read the document.", "[unclosed"])
def test_parse_json_reply_failure(reply):
    ok, value = parse_json_reply(reply)
    assert ok is False
    assert value is None


# ---------------------------------------------------------------------------
# Normalisation helpers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (3, 3),
        (2.0, 2),
        ("1", 1),
        ("B", 1),
        ("c", 2),
        ("(D)", 3),
        ("A)", 0),
        (4, None),
        (-1, None),
        ("E", None),
        ("", None),
        (None, None),
        (True, None),
        (1.5, None),
    ],
)
def test_normalize_answer_index(value, expected):
    assert normalize_answer_index(value, 4) == expected


def test_normalize_answer_index_respects_option_count():
    assert normalize_answer_index("C", 2) is None
    assert normalize_answer_index(1, 2) == 1


@pytest.mark.parametrize(
    "value, expected",
    [("Short", "Short"), ("long", "Long"), (" CONCEPTUAL ", "Conceptual"), ("Essay", "Short"), (None, "Short")],
)
def test_normalize_exam_type(value, expected):
    assert normalize_exam_type(value) == expected


def test_keyword_context_prefers_whole_sentence():
    text = "Cells divide. Photosynthesis happens in leaves. More text follows."
    assert find_keyword_contexts(text, ["photosynthesis"]) == {
        "photosynthesis": "Photosynthesis happens in leaves."
    }


def test_keyword_context_falls_back_to_window():
    text = "x" * 150 + "mitochondrion" + "y" * 150
    context = find_keyword_contexts(text, ["mitochondria", "mitochondrion"])
    assert "mitochondria" not in context
    assert context["mitochondrion"] == "..." + "x" * 100 + "mitochondrion" + "y" * 100 + "..."


def test_keyword_context_escapes_regex_characters():
    text = "We use C++ daily. Nothing else."
    assert find_keyword_contexts(text, ["C++"])["C++"].startswith("...")


# ---------------------------------------------------------------------------
# GenerationService
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_short_document_notes_use_one_call(fake_llm):
    service = GenerationService(fake_llm, notes_chunk_size=1000, notes_chunk_delay=0)
    result = await service.generate_document_notes("Some short text.", "short")

    assert result.chunks_processed == 1
    assert len(fake_llm.calls) == 1
    assert "Create concise notes (500 words)." in fake_llm.calls[0]["prompt"]
    assert fake_llm.calls[0]["system_prompt"] == "You are an expert note-taker."


@pytest.mark.asyncio
async def test_long_document_notes_are_chunked(fake_llm):
    fake_llm.reply = "notes"
    service = GenerationService(fake_llm, notes_chunk_size=10, notes_chunk_delay=0)
    result = await service.generate_document_notes("a" * 25, "medium")

    assert result.chunks_processed == 3
    assert result.notes == NOTES_SEPARATOR.join(["notes"] * 3)
    assert "a" * 10 in fake_llm.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_flashcards_drop_incomplete_cards(fake_llm):
    fake_llm.reply = json.dumps({"flashcards": [
        {"front": "Q1", "back": "A1"},
        {"front": "", "back": "A2"},
        "not a card",
    ]})
    result = await GenerationService(fake_llm).generate_flashcards("text", 3)

    assert result.ok
    assert result.value == [{"front": "Q1", "back": "A1", "explanation": ""}]


@pytest.mark.asyncio
async def test_unparseable_reply_reports_error(fake_llm):
    fake_llm.reply = "Sorry, I cannot help with that."
    result = await GenerationService(fake_llm).generate_quiz("text", 5)

    assert result.value == []
    assert not result.ok
    assert "Sorry, I cannot help" in result.error


@pytest.mark.asyncio
async def test_empty_array_is_not_an_error(fake_llm):
    fake_llm.reply = "[]"
    result = await GenerationService(fake_llm).generate_exam_questions("text", 5)

    assert result.ok
    assert result.value == []


@pytest.mark.asyncio
async def test_quiz_answers_are_normalised(fake_llm):
    fake_llm.reply = json.dumps([
        {"question": "Q1", "options": ["a", "b", "c", "d"], "correctAnswer": "C"},
        {"question": "Q2", "options": ["a", "b"], "correct_answer": 7},
        {"question": "Q3", "options": []},
    ])
    result = await GenerationService(fake_llm).generate_quiz("text", 3)

    assert [q["correct_answer"] for q in result.value] == [2, None]


@pytest.mark.asyncio
async def test_exam_questions_default_marks(fake_llm):
    fake_llm.reply = json.dumps([
        {"question": "Q1", "type": "long"},
        {"question": "Q2", "type": "Essay", "marks": 3},
    ])
    result = await GenerationService(fake_llm).generate_exam_questions("text", 2)

    assert [(q["type"], q["marks"]) for q in result.value] == [("Long", 10), ("Short", 3)]
    assert fake_llm.calls[0]["max_tokens"] == 6000


@pytest.mark.asyncio
async def test_keywords_are_deduplicated(fake_llm):
    fake_llm.reply = json.dumps({
        "keywords": ["Cell", "cell", " ", "Nucleus"],
        "definitions": {"Cell": "Basic unit of life."},
    })
    result = await GenerationService(fake_llm).extract_keywords("text " * 5000)

    assert result.value.keywords == ["Cell", "Nucleus"]
    assert result.value.definitions == {"Cell": "Basic unit of life."}
    assert len(fake_llm.calls[0]["prompt"]) < 9000


@pytest.mark.asyncio
async def test_answer_question_includes_context(fake_llm):
    answer = await GenerationService(fake_llm).answer_question("What is it?", "CONTEXT BLOCK")

    assert answer == "Plants turn light into chemical energy."
    assert "CONTEXT BLOCK" in fake_llm.calls[0]["prompt"]
    assert "Question: What is it?" in fake_llm.calls[0]["prompt"]


def test_keyword_context_on_long_text_without_periods():
    text = "word " * 20000 + "chloroplast " + "word " * 50

    t0 = time.perf_counter()
    contexts = find_keyword_contexts(text, ["mitochondria", "chloroplast", "cell wall"])
    elapsed = time.perf_counter() - t0

    assert list(contexts) == ["chloroplast"]
    assert contexts["chloroplast"].startswith("...word")
    assert elapsed < 2.0
