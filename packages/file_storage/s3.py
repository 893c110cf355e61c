"""
S3-compatible file provider with filename sanitization.

Works with AWS S3 and S3-compatible services (MinIO, Cloudflare R2) via the
``endpoint`` option. Uploaded filenames are never used as object keys:
non-ASCII characters and symbols in keys cause SignatureDoesNotMatch errors
on some backends, so every file is stored under a generated key and the
original name is kept as object metadata.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack
from typing import Any
from urllib.parse import quote

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from packages.file_storage.base import (
    AbstractFileProviderService,
    DeleteFileData,
    FileKeyData,
    FileResult,
    PresignedUploadData,
    UploadFileData,
    read_field,
)
from packages.file_storage.content import normalize_content
from packages.file_storage.exceptions import (
    AppException,
    InvalidInputError,
    NotFoundError,
    UnexpectedStateError,
)
from packages.file_storage.keys import generate_file_key
from packages.file_storage.options import S3FileProviderOptions, build_options

DOWNLOAD_URL_EXPIRES_IN = 24 * 60 * 60  # 24 hours
UPLOAD_URL_EXPIRES_IN = 15 * 60  # 15 minutes
STREAM_CHUNK_SIZE = 64 * 1024
NOT_FOUND_CODES = {"NoSuchKey", "NotFound", "404"}

# Characters left unescaped by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class DownloadStream:
    """
    Async byte stream over an S3 object body.

    Iterate with ``async for chunk in stream`` or read everything with
    ``await stream.read()``. The body is released once iteration ends or
    ``aclose()`` is called.
    """

    def __init__(
        self,
        body: Any,
        file_key: str,
        content_length: int | None = None,
        chunk_size: int = STREAM_CHUNK_SIZE,
    ):
        self.file_key = file_key
        self.content_length = content_length
        self._body = body
        self._chunk_size = chunk_size
        self._closed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def __aenter__(self) -> "DownloadStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        try:
            while not self._closed:
                chunk = await self._body.read(self._chunk_size)
                if not chunk:
                    break
                yield chunk
        finally:
            await self.aclose()

    async def read(self, max_size: int | None = None) -> bytes:
        """
        Read the remaining body into memory.

        Args:
            max_size: Fail once more than this many bytes have been read

        Raises:
            UnexpectedStateError: If the body exceeds max_size
        """
        chunks: list[bytes] = []
        total = 0
        async for chunk in self:
            total += len(chunk)
            if max_size is not None and total > max_size:
                await self.aclose()
                raise UnexpectedStateError(
                    f"File {self.file_key} exceeds maximum buffer size of {max_size} bytes"
                )
            chunks.append(chunk)
        return b"".join(chunks)

    async def aclose(self) -> None:
        if not self._closed:
            self._closed = True
            self._body.close()


class S3FileProviderService(AbstractFileProviderService):
    """
    File provider backed by an S3-compatible object store.

    Example:
        provider = S3FileProviderService({
            "access_key_id": "...",
            "secret_access_key": "...",
            "region": "auto",
            "bucket": "media",
            "endpoint": "https://<account>.r2.cloudflarestorage.com",
        })

        result = await provider.upload({"filename": "图片.png", "content": data})
        url = await provider.get_presigned_download_url({"fileKey": result.key})

        await provider.close()
    """

    identifier = "s3-file"

    def __init__(
        self,
        options: S3FileProviderOptions | dict[str, Any],
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the S3 file provider.

        Args:
            options: Provider options (validated; required fields must be set)
            logger: Logger for operation messages (defaults to module logger)

        Raises:
            InvalidInputError: If a required option is missing
        """
        self.options = build_options(options)
        self.bucket = self.options.bucket
        self.file_url = self.options.file_url
        self.logger = logger or logging.getLogger(__name__)

        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_lock = asyncio.Lock()
        self._exit_stack: AsyncExitStack | None = None

        self.logger.info(
            f"S3 file service initialized with bucket: {self.bucket}, region: {self.options.region}"
        )

    @staticmethod
    def validate_options(options: dict[str, Any]) -> None:
        """Raise InvalidInputError if a required option is missing."""
        build_options(options)

    # =========================================================================
    # Client lifecycle
    # =========================================================================

    def _get_client_kwargs(self) -> dict:
        """Build kwargs for S3 client."""
        s3_config: dict[str, Any] = {}
        # Path-style unless explicitly disabled; most S3-compatible services need it
        if self.options.s3_force_path_style is not False:
            s3_config["addressing_style"] = "path"

        kwargs: dict[str, Any] = {
            "region_name": self.options.region,
            "aws_access_key_id": self.options.access_key_id,
            "aws_secret_access_key": self.options.secret_access_key,
            "config": Config(
                s3=s3_config or None,
                signature_version=self.options.signature_version,
            ),
        }
        if self.options.endpoint:
            kwargs["endpoint_url"] = self.options.endpoint
        return kwargs

    async def _get_client(self) -> Any:
        """Lazy initialize S3 client."""
        if self._client is None:
            async with self._client_lock:
                if self._client is None:
                    stack = AsyncExitStack()
                    self._client = await stack.enter_async_context(
                        self._session.client("s3", **self._get_client_kwargs())
                    )
                    self._exit_stack = stack
        return self._client

    async def close(self) -> None:
        """Close the S3 client if one was opened."""
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None
        self._client = None

    async def __aenter__(self) -> "S3FileProviderService":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # URLs
    # =========================================================================

    def build_file_url(self, key: str) -> str:
        """
        Build the public URL of a stored object.

        Precedence: configured file_url (CDN), then custom endpoint
        (path-style or virtual-hosted), then the AWS regional URL.
        """
        if self.file_url:
            base_url = self.file_url.rstrip("/")
            return f"{base_url}/{key}"

        if self.options.endpoint:
            endpoint = self.options.endpoint.rstrip("/")
            protocol = "https://"
            for scheme in ("http://", "https://"):
                if endpoint.startswith(scheme):
                    protocol = scheme
                    endpoint = endpoint[len(scheme):]
                    break

            if self.options.s3_force_path_style:
                return f"{protocol}{endpoint}/{self.bucket}/{key}"
            return f"{protocol}{self.bucket}.{endpoint}/{key}"

        return f"https://{self.bucket}.s3.{self.options.region}.amazonaws.com/{key}"

    # =========================================================================
    # Input validation
    # =========================================================================

    @staticmethod
    def _require_file_key(file_data: FileKeyData | None) -> str:
        file_key = read_field(file_data, "file_key", "fileKey")
        if not file_key:
            raise InvalidInputError("No file key provided", field="file_key")
        return file_key

    @staticmethod
    def _require_filename(file_data: Any) -> str:
        filename = read_field(file_data, "filename")
        if not filename:
            raise InvalidInputError("No filename provided", field="filename")
        return filename

    # =========================================================================
    # Provider operations
    # =========================================================================

    async def upload(self, file: UploadFileData | None) -> FileResult:
        """
        Upload a file under a generated key.

        Args:
            file: Filename, content (bytes, base64/binary string, buffer-like)
                and MIME type

        Returns:
            FileResult with public URL and generated key

        Raises:
            InvalidInputError: If file or filename is missing
            UnexpectedStateError: If the store rejects the upload
        """
        if file is None:
            raise InvalidInputError("No file provided", field="file")
        filename = self._require_filename(file)

        try:
            file_key = generate_file_key(filename)
            content = normalize_content(
                read_field(file, "content"),
                read_field(file, "content_encoding", "contentEncoding"),
            )

            params: dict[str, Any] = {
                "Bucket": self.bucket,
                "Key": file_key,
                "Body": content,
                "Metadata": {
                    "original-filename": quote(filename, safe=_URI_COMPONENT_SAFE),
                },
            }
            mime_type = read_field(file, "mime_type", "mimeType")
            if mime_type:
                params["ContentType"] = mime_type
            # Some S3-compatible services reject ACLs in path-style mode;
            # public access there comes from the bucket policy
            if not self.options.s3_force_path_style:
                params["ACL"] = "public-read"

            client = await self._get_client()
            await client.put_object(**params)

            url = self.build_file_url(file_key)
            self.logger.info(f"Successfully uploaded file {file_key} to S3 bucket {self.bucket}")
            return FileResult(url=url, key=file_key)
        except AppException:
            raise
        except Exception as e:
            self.logger.error(f"Failed to upload file {filename}: {e}")
            raise UnexpectedStateError(f"Failed to upload file: {e}") from e

    async def delete(self, file_data: DeleteFileData) -> None:
        """
        Delete one or many files.

        Every item must carry a key; this is checked before anything is
        deleted. Keys are then deleted one at a time, and a store error for
        one key is logged without stopping the rest.

        Raises:
            InvalidInputError: If any item has no file key
        """
        files = list(file_data) if isinstance(file_data, (list, tuple)) else [file_data]
        file_keys = [self._require_file_key(item) for item in files]

        for file_key in file_keys:
            try:
                client = await self._get_client()
                await client.delete_object(Bucket=self.bucket, Key=file_key)
                self.logger.info(f"Successfully deleted file {file_key} from S3 bucket {self.bucket}")
            except Exception as e:
                self.logger.warning(f"Failed to delete file {file_key}: {e}")

    async def get_presigned_download_url(self, file_data: FileKeyData) -> str:
        """
        Generate a GET URL valid for 24 hours.

        Raises:
            InvalidInputError: If the file key is missing
            UnexpectedStateError: If signing fails
        """
        file_key = self._require_file_key(file_data)

        try:
            client = await self._get_client()
            url = await client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": file_key},
                ExpiresIn=DOWNLOAD_URL_EXPIRES_IN,
            )
        except Exception as e:
            self.logger.error(f"Failed to generate presigned URL for {file_key}: {e}")
            raise UnexpectedStateError(f"Failed to generate presigned URL: {e}") from e

        self.logger.info(f"Generated presigned URL for file {file_key}")
        return url

    async def get_presigned_upload_url(self, file_data: PresignedUploadData) -> FileResult:
        """
        Generate a PUT URL valid for 15 minutes under a generated key.

        Raises:
            InvalidInputError: If the filename is missing
            UnexpectedStateError: If signing fails
        """
        filename = self._require_filename(file_data)
        file_key = generate_file_key(filename)

        params: dict[str, Any] = {"Bucket": self.bucket, "Key": file_key}
        mime_type = read_field(file_data, "mime_type", "mimeType")
        if mime_type:
            params["ContentType"] = mime_type

        try:
            client = await self._get_client()
            url = await client.generate_presigned_url(
                ClientMethod="put_object",
                Params=params,
                ExpiresIn=UPLOAD_URL_EXPIRES_IN,
            )
        except Exception as e:
            self.logger.error(f"Failed to generate presigned upload URL for {file_key}: {e}")
            raise UnexpectedStateError(f"Failed to generate presigned upload URL: {e}") from e

        return FileResult(url=url, key=file_key)

    async def _open_stream(self, file_key: str) -> DownloadStream:
        """
        GET an object and wrap its body.

        Raises:
            NotFoundError: If the object is missing or has no body
        """
        client = await self._get_client()
        try:
            response = await client.get_object(Bucket=self.bucket, Key=file_key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise NotFoundError("File", file_key) from e
            raise

        body = response.get("Body")
        if body is None:
            raise NotFoundError("File", file_key)
        return DownloadStream(body, file_key, content_length=response.get("ContentLength"))

    async def get_as_buffer(self, file_data: FileKeyData) -> bytes:
        """
        Read a whole object into memory.

        Bounded by the ``max_buffer_size`` option when set.

        Raises:
            InvalidInputError: If the file key is missing
            NotFoundError: If the object doesn't exist or is empty
            UnexpectedStateError: On any other retrieval failure
        """
        file_key = self._require_file_key(file_data)
        max_size = self.options.max_buffer_size

        try:
            stream = await self._open_stream(file_key)
            if max_size is not None and (stream.content_length or 0) > max_size:
                await stream.aclose()
                raise UnexpectedStateError(
                    f"File {file_key} exceeds maximum buffer size of {max_size} bytes"
                )
            buffer = await stream.read(max_size=max_size)
        except NotFoundError:
            raise
        except AppException as e:
            self.logger.error(f"Failed to get buffer for {file_key}: {e.message}")
            raise
        except Exception as e:
            self.logger.error(f"Failed to get buffer for {file_key}: {e}")
            raise UnexpectedStateError(f"Failed to get buffer: {e}") from e

        self.logger.info(f"Retrieved buffer for file {file_key}")
        return buffer

    async def get_download_stream(self, file_data: FileKeyData) -> DownloadStream:
        """
        Open an object for streaming without buffering it.

        Raises:
            InvalidInputError: If the file key is missing
            NotFoundError: If the object doesn't exist or is empty
            UnexpectedStateError: On any other retrieval failure
        """
        file_key = self._require_file_key(file_data)

        try:
            stream = await self._open_stream(file_key)
        except AppException:
            raise
        except Exception as e:
            self.logger.error(f"Failed to get download stream for {file_key}: {e}")
            raise UnexpectedStateError(f"Failed to get download stream: {e}") from e

        self.logger.info(f"Retrieved download stream for file {file_key}")
        return stream
