"""
FastAPI application entrypoint.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apps.api.config import get_settings
from apps.api.routers import health, uploads
from packages.file_storage import AppException, get_file_provider
from packages.file_storage.exceptions import app_exception_handler

settings = get_settings()

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Misconfigured storage fails startup instead of every request
    provider = get_file_provider()
    logger.info(f"File provider ready: {provider.identifier}")
    yield
    await provider.close()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_exception_handler(AppException, app_exception_handler)

# Include routers
app.include_router(health.router)
app.include_router(uploads.router, prefix="/admin/uploads", tags=["uploads"])
