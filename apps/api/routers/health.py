"""
Health check endpoint.
GET /health - Returns 200 with the configured file provider.
"""

from typing import Any

from fastapi import APIRouter

from apps.api.config import get_settings

router = APIRouter()


@router.get("/health")
def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        200 + {"status": "ok", "file_provider": ...}
    """
    return {
        "status": "ok",
        "file_provider": get_settings().file_provider,
    }
