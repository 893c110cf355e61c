"""
Pytest configuration and fixtures.

Provides reusable fixtures for file provider testing:
- FakeS3Client: in-memory stand-in for the aioboto3 S3 client
- s3_options: valid provider options
- provider: S3FileProviderService wired to a FakeS3Client
- app / async_client: FastAPI app with the file provider overridden
"""

import logging
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from packages.file_storage.s3 import S3FileProviderService


# =============================================================================
# Fake S3
# =============================================================================


def make_client_error(code: str, operation: str, message: str = "error") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class FakeBody:
    """Minimal StreamingBody: async read(amt) plus sync close()."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0
        self.closed = False

    async def read(self, amt: int | None = None) -> bytes:
        if amt is None:
            amt = len(self._data) - self._pos
        chunk = self._data[self._pos:self._pos + amt]
        self._pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.closed = True


class FakeS3Client:
    """In-memory S3 client recording every call."""

    def __init__(self):
        self.objects: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failing_keys: set[str] = set()
        self.fail_with: Exception | None = None
        self.omit_body = False

    def _record(self, operation: str, kwargs: dict[str, Any]) -> None:
        self.calls.append((operation, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def calls_for(self, operation: str) -> list[dict[str, Any]]:
        return [kwargs for op, kwargs in self.calls if op == operation]

    async def put_object(self, **kwargs: Any) -> dict:
        self._record("put_object", kwargs)
        self.objects[kwargs["Key"]] = kwargs
        return {"ETag": '"etag"'}

    async def delete_object(self, **kwargs: Any) -> dict:
        self._record("delete_object", kwargs)
        if kwargs["Key"] in self.failing_keys:
            raise make_client_error("AccessDenied", "DeleteObject", "Access Denied")
        self.objects.pop(kwargs["Key"], None)
        return {}

    async def get_object(self, **kwargs: Any) -> dict:
        self._record("get_object", kwargs)
        stored = self.objects.get(kwargs["Key"])
        if stored is None:
            raise make_client_error("NoSuchKey", "GetObject", "The specified key does not exist.")
        if self.omit_body:
            return {"ContentLength": 0}
        return {
            "Body": FakeBody(stored["Body"]),
            "ContentLength": len(stored["Body"]),
            "ContentType": stored.get("ContentType"),
        }

    async def generate_presigned_url(self, **kwargs: Any) -> str:
        self._record("generate_presigned_url", kwargs)
        params = kwargs["Params"]
        return (
            f"https://signed.example.com/{params['Bucket']}/{params['Key']}"
            f"?X-Amz-Expires={kwargs['ExpiresIn']}&X-Amz-Signature=abc"
        )


# =============================================================================
# Provider Fixtures
# =============================================================================


@pytest.fixture
def s3_options() -> dict[str, Any]:
    """Valid options for the s3-file provider (AWS, no endpoint)."""
    return {
        "access_key_id": "test-access-key",
        "secret_access_key": "test-secret-key",
        "region": "us-east-1",
        "bucket": "media",
    }


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double to assert on info/warning/error calls."""
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def fake_s3() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def make_provider(mock_logger, fake_s3):
    """Factory for providers wired to the in-memory S3 client."""

    def _create(options: dict[str, Any]) -> S3FileProviderService:
        provider = S3FileProviderService(options, logger=mock_logger)
        provider._client = fake_s3  # Skip real client creation
        return provider

    return _create


@pytest.fixture
def provider(make_provider, s3_options) -> S3FileProviderService:
    return make_provider(s3_options)


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app(provider) -> FastAPI:
    """FastAPI app with the file provider dependency overridden."""
    from apps.api.dependencies import get_file_service
    from apps.api.main import app as fastapi_app

    fastapi_app.dependency_overrides[get_file_service] = lambda: provider
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app (no network)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
