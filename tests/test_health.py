"""Tests for the health check and root endpoints."""
import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200

    data = resp.json()
    assert data["success"] is True
    assert data["aiProvider"] == "openai"
    assert data["aiConfigured"] is True
    assert data["cachedDocuments"] == 0
    assert "timestamp" in data
    assert resp.headers["X-Process-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_health_counts_cached_documents(client: AsyncClient, transcript_id: str):
    resp = await client.post("/api/chat", json={"fileId": transcript_id, "question": "What is chlorophyll?"})
    assert resp.status_code == 200

    resp = await client.get("/health")
    assert resp.json()["cachedDocuments"] == 1


@pytest.mark.asyncio
async def test_root(client: AsyncClient):
    resp = await client.get("/")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "SummarIQ API"
    assert data["endpoints"]["chat"] == "/api/chat"
