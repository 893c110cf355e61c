"""Health endpoint tests."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient) -> None:
    """Test basic health check endpoint."""
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "file_provider": "s3-file"}


@pytest.mark.asyncio
async def test_openapi_docs_accessible(async_client: AsyncClient) -> None:
    """Test that OpenAPI documentation is accessible."""
    response = await async_client.get("/openapi.json")

    assert response.status_code == 200
    data = response.json()
    assert "/admin/uploads" in data["paths"]
    assert data["info"]["title"] == "Commerce File Storage"
