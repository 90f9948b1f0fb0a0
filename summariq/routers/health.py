"""
Health check endpoint.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from summariq.config import settings
from summariq.dependencies.services import get_chunk_cache
from summariq.models.schemas import HealthCheckResponse
from summariq.services.chunk_cache import ChunkCache

router = APIRouter()


@router.get("", response_model=HealthCheckResponse)
async def health_check(cache: ChunkCache = Depends(get_chunk_cache)):
    """
    Report service status.

    ``aiConfigured`` is false when the selected provider has no API key;
    generation endpoints will answer 502 until one is set.
    """
    return HealthCheckResponse(
        message="SummarIQ backend is running",
        timestamp=datetime.now(timezone.utc),
        environment=settings.ENVIRONMENT,
        ai_provider=settings.AI_PROVIDER,
        ai_configured=settings.provider_key_configured(),
        cached_documents=len(cache),
    )
