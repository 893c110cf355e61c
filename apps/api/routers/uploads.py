"""
Upload API endpoints backed by the configured file provider.

Endpoints:
- POST /admin/uploads: Upload one or more files
- POST /admin/uploads/presigned-urls: Get a presigned PUT URL
- GET /admin/uploads/{file_key}/download-url: Get a presigned GET URL
- GET /admin/uploads/{file_key}/content: Stream file content
- DELETE /admin/uploads/{file_key}: Delete a file
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile as FastAPIUploadFile, status
from fastapi.responses import StreamingResponse

from apps.api.dependencies import get_file_service
from apps.api.uploads.schemas import (
    DeleteFileResponse,
    FileUrlResponse,
    PresignedUploadRequest,
    PresignedUploadResponse,
    UploadedFileResponse,
    UploadFilesResponse,
)
from packages.file_storage import (
    AbstractFileProviderService,
    FileKeyInput,
    PresignedUploadInput,
    UploadFileInput,
)

router = APIRouter()

FileService = Annotated[AbstractFileProviderService, Depends(get_file_service)]


@router.post(
    "",
    response_model=UploadFilesResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload files",
)
async def upload_files(
    service: FileService,
    files: Annotated[list[FastAPIUploadFile], File(description="Files to upload")],
) -> UploadFilesResponse:
    """
    Upload files to the file provider.

    Each file is stored under a generated key; the original filename is
    kept as object metadata only.
    """
    uploaded = []
    for file in files:
        content = await file.read()
        result = await service.upload(
            UploadFileInput(
                filename=file.filename or "",
                content=content,
                mime_type=file.content_type,
            )
        )
        uploaded.append(UploadedFileResponse(id=result.key, url=result.url))
    return UploadFilesResponse(files=uploaded)


@router.post(
    "/presigned-urls",
    response_model=PresignedUploadResponse,
    summary="Get a presigned upload URL",
)
async def create_presigned_upload_url(
    service: FileService,
    body: PresignedUploadRequest,
) -> PresignedUploadResponse:
    """Issue a PUT URL valid for 15 minutes."""
    result = await service.get_presigned_upload_url(
        PresignedUploadInput(filename=body.filename, mime_type=body.mime_type)
    )
    return PresignedUploadResponse(url=result.url, key=result.key)


@router.get(
    "/{file_key}/download-url",
    response_model=FileUrlResponse,
    summary="Get a presigned download URL",
)
async def get_download_url(service: FileService, file_key: str) -> FileUrlResponse:
    """Issue a GET URL valid for 24 hours."""
    url = await service.get_presigned_download_url(FileKeyInput(file_key=file_key))
    return FileUrlResponse(url=url)


@router.get(
    "/{file_key}/content",
    summary="Stream file content",
)
async def get_file_content(service: FileService, file_key: str) -> StreamingResponse:
    """Stream the stored object without buffering it."""
    stream = await service.get_download_stream(FileKeyInput(file_key=file_key))
    return StreamingResponse(stream, media_type="application/octet-stream")


@router.delete(
    "/{file_key}",
    response_model=DeleteFileResponse,
    summary="Delete a file",
)
async def delete_file(service: FileService, file_key: str) -> DeleteFileResponse:
    """Delete a stored file. Store-side failures are logged, not raised."""
    await service.delete(FileKeyInput(file_key=file_key))
    return DeleteFileResponse(id=file_key)
