"""Integration tests for FastAPI HTTP endpoints."""
import pytest
from httpx import ASGITransport, AsyncClient

from chatraffle.main import app


@pytest.mark.integration
@pytest.mark.asyncio
async def test_health_endpoint():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "chatraffle"
    assert isinstance(data["sessions"], int)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_cors_headers_present():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health", headers={"Origin": "http://frontend.example"})

    assert response.headers.get("access-control-allow-origin") == "*"
