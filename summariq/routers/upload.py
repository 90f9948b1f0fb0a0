"""
Document upload and management endpoints.

POST   /: store a PDF, PPT/PPTX or DOC/DOCX and return its fileId.
GET    /{file_id}: stored file info.
DELETE /{file_id}: delete the file and drop its cached chunks.
"""
from __future__ import annotations

import logging
import os
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from summariq.config import settings
from summariq.dependencies.services import get_chunk_cache, get_document_registry
from summariq.models.schemas import (
    ApiResponse,
    FileInfoData,
    FileInfoResponse,
    UploadedFileData,
    UploadResponse,
)
from summariq.services.chunk_cache import ChunkCache
from summariq.services.documents import (
    DocumentNotFoundError,
    DocumentRegistry,
    UploadedFileSource,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

@router.post("", response_model=UploadResponse)
async def upload_document(
    document: UploadFile = File(...),
    registry: DocumentRegistry = Depends(get_document_registry),
) -> UploadResponse:
    """
    Store an uploaded document and register it for later processing.

    - Max file size: MAX_FILE_SIZE_MB (default 25 MB)
    - Stored as ``<name>-<random>.<ext>``; the name without extension is the fileId
    - Text is extracted lazily, by the generation endpoints
    """
    if not document.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please select a document to upload.",
        )

    file_ext = Path(document.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Invalid file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    file_id = _make_file_id(document.filename)
    os.makedirs(registry.upload_dir, exist_ok=True)
    file_path = registry.upload_dir / f"{file_id}{file_ext}"
    file_size = 0

    try:
        # Stream to disk while enforcing the size limit
        async with aiofiles.open(file_path, "wb") as out:
            while True:
                chunk = await document.read(1024 * 1024)   # 1 MB slices
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > settings.max_file_size_bytes:
                    await out.close()
                    _safe_remove(file_path)
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail=f"File size exceeds {settings.MAX_FILE_SIZE_MB}MB limit.",
                    )
                await out.write(chunk)
    except HTTPException:
        raise
    except OSError as exc:
        logger.exception("Could not store upload %r", document.filename)
        _safe_remove(file_path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error storing document: {exc}",
        ) from exc

    registry.register(
        UploadedFileSource(file_id=file_id, path=file_path, filename=document.filename)
    )
    logger.info(
        "File uploaded: %s (%.2f MB) → %s",
        document.filename,
        file_size / 1024 / 1024,
        file_path,
    )

    return UploadResponse(
        message="File uploaded successfully",
        data=UploadedFileData(
            file_id=file_id,
            filename=document.filename,
            filepath=str(file_path),
            size=file_size,
            type=document.content_type,
            extension=file_ext,
            uploaded_at=datetime.now(timezone.utc),
        ),
    )


# ---------------------------------------------------------------------------
# File info
# ---------------------------------------------------------------------------

@router.get("/{file_id}", response_model=FileInfoResponse)
async def get_file_info(
    file_id: str,
    registry: DocumentRegistry = Depends(get_document_registry),
) -> FileInfoResponse:
    source = _resolve_uploaded(registry, file_id)
    stats = source.path.stat()

    return FileInfoResponse(
        data=FileInfoData(
            file_id=file_id,
            filename=source.filename or source.path.name,
            filepath=str(source.path),
            size=stats.st_size,
            extension=source.path.suffix.lower(),
            created_at=datetime.fromtimestamp(stats.st_ctime, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(stats.st_mtime, tz=timezone.utc),
        ),
    )


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@router.delete("/{file_id}", response_model=ApiResponse)
async def delete_file(
    file_id: str,
    registry: DocumentRegistry = Depends(get_document_registry),
    cache: ChunkCache = Depends(get_chunk_cache),
) -> ApiResponse:
    """Delete an uploaded file, unregister it and evict its cached chunks."""
    source = _resolve_uploaded(registry, file_id)

    _safe_remove(source.path)
    registry.unregister(file_id)
    cache.evict(file_id)

    logger.info("File deleted: %s", source.path.name)
    return ApiResponse(message="File deleted successfully")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_file_id(filename: str) -> str:
    """Build a unique, filesystem-safe id from the original file name."""
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", Path(filename).stem).strip("_")[:80]
    suffix = uuid.uuid4().hex[:12]
    return f"{stem}-{suffix}" if stem else suffix


def _resolve_uploaded(registry: DocumentRegistry, file_id: str) -> UploadedFileSource:
    try:
        source = registry.resolve(file_id)
    except DocumentNotFoundError:
        source = None
    if not isinstance(source, UploadedFileSource) or not source.path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="The requested file does not exist.",
        )
    return source


def _safe_remove(path: Path) -> None:
    """Delete *path* if it exists; log but never raise."""
    try:
        if path.exists():
            path.unlink()
    except OSError as exc:
        logger.warning("Could not remove file %s: %s", path, exc)
