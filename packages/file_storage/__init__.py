"""
File storage for the commerce backend.

Provides the file provider contract and its S3-compatible implementation:
- Safe object key generation from untrusted filenames
- Upload, delete, presigned URLs, buffer and stream reads
"""

from packages.file_storage.base import (
    AbstractFileProviderService,
    FileKeyInput,
    FileResult,
    PresignedUploadInput,
    UploadFileInput,
)
from packages.file_storage.exceptions import (
    AppException,
    InvalidInputError,
    NotFoundError,
    UnexpectedStateError,
)
from packages.file_storage.factory import create_file_provider, get_file_provider
from packages.file_storage.keys import generate_file_key
from packages.file_storage.options import S3FileProviderOptions
from packages.file_storage.s3 import DownloadStream, S3FileProviderService

__all__ = [
    # Contract
    "AbstractFileProviderService",
    "FileKeyInput",
    "FileResult",
    "PresignedUploadInput",
    "UploadFileInput",
    # Errors
    "AppException",
    "InvalidInputError",
    "NotFoundError",
    "UnexpectedStateError",
    # Providers
    "DownloadStream",
    "S3FileProviderOptions",
    "S3FileProviderService",
    "create_file_provider",
    "get_file_provider",
    # Keys
    "generate_file_key",
]
