"""Tests for PDF/DOCX text extraction and document loading."""
import fitz  # PyMuPDF
import pytest
from docx import Document as DocxDocument

from summariq.services.document_parser import (
    DocumentParser,
    ExtractedText,
    clean_text,
    needs_ocr,
)
from summariq.services.documents import (
    DocumentExtractionError,
    DocumentLoader,
    DocumentNotFoundError,
    DocumentRegistry,
    TranscriptSource,
    UploadedFileSource,
)

LINE = "cells divide and grow in many different ways"


def _write_pdf(path, lines):
    doc = fitz.open()
    page = doc.new_page()
    if lines:
        page.insert_text((72, 72), "\n".join(lines), fontsize=10)
    doc.save(str(path))
    doc.close()


def _write_docx(path):
    doc = DocxDocument()
    doc.add_paragraph("Mitosis overview")
    doc.add_paragraph("   ")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Phase"
    table.rows[0].cells[1].text = "Prophase"
    doc.save(str(path))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pdf_text_extracted(tmp_path):
    path = tmp_path / "notes.pdf"
    _write_pdf(path, [LINE] * 8)

    extracted = await DocumentParser().extract_text(path)

    assert extracted.num_pages == 1
    assert "cells divide" in extracted.text
    assert extracted.word_count >= 50
    assert extracted.is_scanned is False


@pytest.mark.asyncio
async def test_blank_pdf_looks_scanned(tmp_path):
    path = tmp_path / "scan.pdf"
    _write_pdf(path, [])

    extracted = await DocumentParser().extract_text(path)

    assert extracted.text.strip() == ""
    assert extracted.is_scanned is True
    assert needs_ocr(extracted)


@pytest.mark.asyncio
async def test_corrupt_pdf_raises(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"this is not a pdf")
    with pytest.raises(RuntimeError):
        await DocumentParser().extract_text(path)


@pytest.mark.asyncio
async def test_docx_paragraphs_and_tables(tmp_path):
    path = tmp_path / "lecture.docx"
    _write_docx(path)

    extracted = await DocumentParser().extract_text(path)

    assert extracted.text == "Mitosis overview\nPhase | Prophase"


@pytest.mark.asyncio
async def test_presentation_has_no_text(tmp_path):
    extracted = await DocumentParser().extract_text(tmp_path / "slides.pptx")
    assert extracted.is_presentation
    assert extracted.text == ""


@pytest.mark.asyncio
async def test_unsupported_extension(tmp_path):
    with pytest.raises(ValueError):
        await DocumentParser().extract_text(tmp_path / "notes.txt")


def test_clean_text_collapses_whitespace():
    assert clean_text("  a\n\n b\t c  ") == "a b c"
    assert clean_text(None) == ""


def test_needs_ocr_for_short_text():
    assert needs_ocr(ExtractedText(text="only a few words"))
    assert not needs_ocr(ExtractedText(text="word " * 150))


# ---------------------------------------------------------------------------
# Registry and loader
# ---------------------------------------------------------------------------

def test_registry_finds_stored_file_by_exact_stem(tmp_path):
    (tmp_path / "biology-abc123.pdf").write_bytes(b"%PDF")
    registry = DocumentRegistry(tmp_path)

    source = registry.resolve("biology-abc123")
    assert isinstance(source, UploadedFileSource)
    assert source.path == tmp_path / "biology-abc123.pdf"

    with pytest.raises(DocumentNotFoundError):
        registry.resolve("abc123")


def test_registry_unknown_id(tmp_path):
    with pytest.raises(DocumentNotFoundError):
        DocumentRegistry(tmp_path / "missing").resolve("nope")


@pytest.mark.asyncio
async def test_loader_reads_transcript(tmp_path):
    registry = DocumentRegistry(tmp_path)
    registry.register(TranscriptSource(file_id="t1", title="Talk", text="  Hello \n world  "))

    document = await DocumentLoader(registry).load("t1")

    assert document.text == "Hello world"
    assert document.raw_text == "  Hello \n world  "
    assert isinstance(document.source, TranscriptSource)


@pytest.mark.asyncio
async def test_loader_rejects_presentation(tmp_path):
    path = tmp_path / "slides-1.pptx"
    path.write_bytes(b"pptx")
    registry = DocumentRegistry(tmp_path)

    with pytest.raises(DocumentExtractionError, match="OCR"):
        await DocumentLoader(registry).load("slides-1")


@pytest.mark.asyncio
async def test_loader_wraps_parser_errors(tmp_path):
    path = tmp_path / "broken-1.pdf"
    path.write_bytes(b"garbage")
    registry = DocumentRegistry(tmp_path)

    with pytest.raises(DocumentExtractionError):
        await DocumentLoader(registry).load("broken-1")
