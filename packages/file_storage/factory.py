"""Factory for creating file providers based on configuration."""

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from packages.file_storage.base import AbstractFileProviderService
from packages.file_storage.exceptions import InvalidInputError
from packages.file_storage.s3 import S3FileProviderService

if TYPE_CHECKING:
    from apps.api.config import Settings

PROVIDERS: dict[str, type[AbstractFileProviderService]] = {
    S3FileProviderService.identifier: S3FileProviderService,
}


def create_file_provider(
    identifier: str,
    options: Any,
    logger: logging.Logger | None = None,
) -> AbstractFileProviderService:
    """
    Create a file provider by its registered identifier.

    Args:
        identifier: Provider identifier (e.g. "s3-file")
        options: Provider-specific options
        logger: Optional logger injected into the provider

    Returns:
        Configured provider instance

    Raises:
        InvalidInputError: If the identifier is unknown or options are invalid
    """
    provider_cls = PROVIDERS.get(identifier)
    if provider_cls is None:
        raise InvalidInputError(
            f"Unknown file provider '{identifier}'. Available: {', '.join(sorted(PROVIDERS))}",
            field="identifier",
        )
    return provider_cls(options, logger=logger)


def get_file_provider_from_settings(settings: "Settings") -> AbstractFileProviderService:
    """
    Create a file provider directly from a Settings object.

    Useful for dependency injection in tests.
    """
    return create_file_provider(settings.file_provider, settings.s3_provider_options())


@lru_cache(maxsize=1)
def get_file_provider() -> AbstractFileProviderService:
    """Get the cached file provider configured by application settings."""
    # Import settings lazily to avoid circular imports
    from apps.api.config import get_settings

    return get_file_provider_from_settings(get_settings())
