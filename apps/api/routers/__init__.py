"""API routers package."""

from apps.api.routers import health, uploads

__all__ = ["health", "uploads"]
