"""
Document sources, registry and text loading.

A document id resolves to one of two source kinds:

* ``UploadedFileSource``: a file stored under ``UPLOAD_DIR`` by the upload
  endpoint; its text is extracted on demand.
* ``TranscriptSource``: plain text registered directly (e.g. a video
  transcript); it is held in memory only.

The registry records the source kind when a document is created, so callers
never infer it from the shape of the id.  Uploaded files written by an
earlier process are still found by scanning ``UPLOAD_DIR``.
"""
from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

from summariq.services.document_parser import (
    DocumentParser,
    ExtractedText,
    clean_text,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class DocumentNotFoundError(LookupError):
    """No document is registered or stored under the requested id."""


class DocumentExtractionError(RuntimeError):
    """The document exists but no usable text could be extracted from it."""


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class UploadedFileSource:
    file_id: str
    path: Path
    filename: str = ""  # original upload name, when known


@dataclasses.dataclass(frozen=True)
class TranscriptSource:
    file_id: str
    title: str
    text: str
    source_url: Optional[str] = None


DocumentSource = Union[UploadedFileSource, TranscriptSource]


@dataclasses.dataclass
class LoadedDocument:
    """Text of a resolved document, ready for chunking or prompting."""

    file_id: str
    source: DocumentSource
    text: str                 # whitespace-normalised
    raw_text: str             # as extracted
    extracted: ExtractedText


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class DocumentRegistry:
    """Maps document ids to their source; one instance per application."""

    def __init__(self, upload_dir: Union[str, Path]) -> None:
        self.upload_dir = Path(upload_dir)
        self._sources: Dict[str, DocumentSource] = {}

    def register(self, source: DocumentSource) -> DocumentSource:
        self._sources[source.file_id] = source
        logger.info("Registered %s as %s", source.file_id, type(source).__name__)
        return source

    def resolve(self, file_id: str) -> DocumentSource:
        """
        Return the source for *file_id*.

        Raises:
            DocumentNotFoundError: Unknown id and no matching stored file.
        """
        source = self._sources.get(file_id)
        if source is not None:
            return source

        stored = self._find_stored_file(file_id)
        if stored is None:
            raise DocumentNotFoundError(f"Document {file_id!r} not found.")
        return self.register(UploadedFileSource(file_id=file_id, path=stored))

    def unregister(self, file_id: str) -> Optional[DocumentSource]:
        return self._sources.pop(file_id, None)

    def _find_stored_file(self, file_id: str) -> Optional[Path]:
        """Look for an upload whose stem equals *file_id*."""
        if not file_id or not self.upload_dir.is_dir():
            return None
        for name in sorted(os.listdir(self.upload_dir)):
            candidate = self.upload_dir / name
            if candidate.is_file() and candidate.stem == file_id:
                return candidate
        return None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class DocumentLoader:
    """Resolves a document id and returns its text."""

    def __init__(
        self,
        registry: DocumentRegistry,
        parser: Optional[DocumentParser] = None,
    ) -> None:
        self.registry = registry
        self.parser = parser or DocumentParser()

    async def load(self, file_id: str) -> LoadedDocument:
        """
        Load the text of *file_id*.

        Raises:
            DocumentNotFoundError:   Unknown id.
            DocumentExtractionError: Unsupported, unreadable or empty document.
        """
        source = self.registry.resolve(file_id)

        if isinstance(source, TranscriptSource):
            extracted = ExtractedText(text=source.text)
        else:
            try:
                extracted = await self.parser.extract_text(source.path)
            except (ValueError, RuntimeError) as exc:
                raise DocumentExtractionError(str(exc)) from exc

        text = clean_text(extracted.text)
        if not text:
            if extracted.is_presentation:
                raise DocumentExtractionError(
                    "Presentation files require OCR, which is not supported. "
                    "Please upload a text-based PDF or DOCX."
                )
            raise DocumentExtractionError("Document contains no extractable text.")

        logger.info("Loaded %s: %d chars", file_id, len(text))
        return LoadedDocument(
            file_id=file_id,
            source=source,
            text=text,
            raw_text=extracted.text,
            extracted=extracted,
        )
