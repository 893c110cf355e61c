"""File provider contract consumed by the commerce framework's file module."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from packages.file_storage.content import ContentEncoding


@dataclass(frozen=True)
class UploadFileInput:
    """A file to upload."""

    filename: str
    content: Any
    mime_type: str | None = None
    content_encoding: ContentEncoding | None = None


@dataclass(frozen=True)
class FileResult:
    """Location of a stored (or to-be-stored) file."""

    url: str
    key: str


@dataclass(frozen=True)
class FileKeyInput:
    """Reference to a stored file by its object key."""

    file_key: str


@dataclass(frozen=True)
class PresignedUploadInput:
    """Request for a presigned PUT URL."""

    filename: str
    mime_type: str | None = None


# Framework payloads arrive as plain dicts with camelCase keys
UploadFileData = Union[UploadFileInput, Mapping[str, Any]]
FileKeyData = Union[FileKeyInput, Mapping[str, Any]]
PresignedUploadData = Union[PresignedUploadInput, Mapping[str, Any]]
DeleteFileData = Union[FileKeyData, Sequence[FileKeyData]]


def read_field(data: Any, name: str, alias: str | None = None) -> Any:
    """
    Read a field from a DTO or a mapping.

    Mappings are looked up by the snake_case name first, then by the
    camelCase alias used in framework payloads.
    """
    if data is None:
        return None
    if isinstance(data, Mapping):
        value = data.get(name)
        if value is None and alias:
            value = data.get(alias)
        return value
    return getattr(data, name, None)


class AbstractFileProviderService(ABC):
    """
    Abstract base for file providers.

    Every provider registers under a unique ``identifier`` and implements
    the same upload / delete / presign / read operations.
    """

    identifier: str = ""

    @abstractmethod
    async def upload(self, file: UploadFileData | None) -> FileResult:
        """
        Store a file under a generated key.

        Args:
            file: Filename, content and MIME type

        Returns:
            FileResult with public URL and object key
        """
        pass

    @abstractmethod
    async def delete(self, file_data: DeleteFileData) -> None:
        """
        Delete one or many files by key.

        Args:
            file_data: A single file reference or a sequence of them
        """
        pass

    @abstractmethod
    async def get_presigned_download_url(self, file_data: FileKeyData) -> str:
        """Return a time-limited URL for downloading a file."""
        pass

    @abstractmethod
    async def get_presigned_upload_url(self, file_data: PresignedUploadData) -> FileResult:
        """Return a time-limited URL for uploading a file, and its key."""
        pass

    @abstractmethod
    async def get_as_buffer(self, file_data: FileKeyData) -> bytes:
        """
        Read a whole file into memory.

        Raises:
            NotFoundError: If the file doesn't exist
        """
        pass

    @abstractmethod
    async def get_download_stream(self, file_data: FileKeyData) -> AsyncIterator[bytes]:
        """
        Open a file for streaming.

        Raises:
            NotFoundError: If the file doesn't exist
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        return None
