"""Tests for fixed-size text chunking."""
import pytest

from summariq.services.chunking import Chunk, chunk_text, count_words

FOX = "The quick brown fox jumps over the lazy dog"


def test_chunk_fox_sentence():
    chunks = chunk_text(FOX, 10)
    assert [c.text for c in chunks] == ["The quick ", "brown fox ", "jumps over", " the lazy ", "dog"]
    assert [c.index for c in chunks] == [0, 1, 2, 3, 4]
    assert [c.length for c in chunks] == [10, 10, 10, 10, 3]


@pytest.mark.parametrize("size", [1, 3, 7, 10, 43, 100])
def test_chunks_reassemble_to_source(size):
    text = FOX + "\n\n  tabs\tand   spaces  "
    chunks = chunk_text(text, size)
    assert "".join(c.text for c in chunks) == text
    assert all(c.length == len(c.text) for c in chunks)
    assert all(c.length == size for c in chunks[:-1])
    assert 0 < chunks[-1].length <= size


def test_empty_text_yields_no_chunks():
    assert chunk_text("", 5) == []


def test_text_shorter_than_target_is_one_chunk():
    chunks = chunk_text("short", 1000)
    assert len(chunks) == 1
    assert chunks[0].text == "short"


@pytest.mark.parametrize("size", [0, -4])
def test_non_positive_target_size_rejected(size):
    with pytest.raises(ValueError):
        chunk_text(FOX, size)


def test_word_count():
    assert chunk_text("one two three", 100)[0].word_count == 3
    # Whitespace-only windows still count as one word
    assert count_words("   ") == 1


def test_chunk_to_dict_uses_camel_case():
    chunk = Chunk(index=2, text="abc def", length=7, word_count=2)
    assert chunk.to_dict() == {"index": 2, "text": "abc def", "length": 7, "wordCount": 2}
