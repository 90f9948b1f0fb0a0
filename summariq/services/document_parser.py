"""
Document text extraction for PDF, DOCX and PowerPoint uploads.

PDF text comes from PyMuPDF, DOCX text (paragraphs and tables) from
python-docx.  Presentations are accepted on upload but yield no text;
they are flagged so callers can report that OCR would be required.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import fitz  # PyMuPDF
from docx import Document as DocxDocument

logger = logging.getLogger(__name__)

# Below this many words per page a PDF is assumed to be a scan
SCANNED_WORDS_PER_PAGE = 50
# Below this many words a document is assumed to need OCR
MIN_TEXT_WORDS = 100


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class ExtractedText:
    """
    Output of the DocumentParser.

    Attributes:
        text:            Raw extracted text (not whitespace-normalised).
        num_pages:       Page count for PDFs; ``None`` where unknown.
        is_scanned:      True when the file looks image-based.
        is_presentation: True for PPT/PPTX, which are not text-extracted.
    """

    text: str
    num_pages: Optional[int] = None
    is_scanned: bool = False
    is_presentation: bool = False

    @property
    def word_count(self) -> int:
        return len(self.text.split())


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class DocumentParser:
    """Extracts plain text from stored upload files."""

    async def extract_text(self, file_path: Union[str, Path]) -> ExtractedText:
        """
        Extract the text of a stored document, dispatching on its extension.

        Raises:
            ValueError:   Unsupported file type.
            RuntimeError: Password-protected or unreadable file.
        """
        ext = Path(file_path).suffix.lower()
        if ext == ".pdf":
            return await self._extract_pdf(str(file_path))
        elif ext in (".docx", ".doc"):
            return await self._extract_docx(str(file_path))
        elif ext in (".ppt", ".pptx"):
            return ExtractedText(text="", is_scanned=True, is_presentation=True)
        else:
            raise ValueError(f"Unsupported file type: {ext!r}")

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    async def _extract_pdf(self, file_path: str) -> ExtractedText:
        try:
            doc = fitz.open(file_path)
        except Exception as exc:
            raise RuntimeError(f"Cannot open PDF file: {exc}") from exc

        try:
            if doc.needs_pass:
                raise RuntimeError(
                    "PDF is password-protected. Please provide an unlocked copy."
                )
            page_texts: List[str] = [page.get_text() for page in doc]
            num_pages = doc.page_count
        finally:
            doc.close()

        text = "\n".join(page_texts)
        words_per_page = len(text.split()) / num_pages if num_pages else 0.0

        logger.info(
            "Extracted %d chars from %d PDF pages (%.1f words/page)",
            len(text),
            num_pages,
            words_per_page,
        )
        return ExtractedText(
            text=text,
            num_pages=num_pages,
            is_scanned=words_per_page < SCANNED_WORDS_PER_PAGE,
        )

    # ------------------------------------------------------------------
    # DOCX
    # ------------------------------------------------------------------

    async def _extract_docx(self, file_path: str) -> ExtractedText:
        try:
            doc = DocxDocument(file_path)
        except Exception as exc:
            raise RuntimeError(f"Cannot open DOCX file: {exc}") from exc

        parts: List[str] = [
            para.text.strip() for para in doc.paragraphs if para.text.strip()
        ]

        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                non_empty = [c for c in cells if c]
                if non_empty:
                    parts.append(" | ".join(non_empty))

        text = "\n".join(parts)
        logger.info("Extracted %d chars from DOCX %s", len(text), Path(file_path).name)
        return ExtractedText(text=text, is_scanned=False)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace runs to a single space and trim."""
    return re.sub(r"\s+", " ", text).strip() if text else ""


def needs_ocr(extracted: ExtractedText) -> bool:
    """Return True if the extracted text is unlikely to be usable as-is."""
    if extracted.is_scanned or extracted.is_presentation:
        return True
    return extracted.word_count < MIN_TEXT_WORDS
