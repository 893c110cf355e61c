"""
FastAPI dependencies for the file module.
"""

from packages.file_storage import AbstractFileProviderService, get_file_provider


def get_file_service() -> AbstractFileProviderService:
    """Return the configured file provider."""
    return get_file_provider()
