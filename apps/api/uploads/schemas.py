"""Pydantic schemas for upload API request/response models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Request Schemas
# =============================================================================


class PresignedUploadRequest(BaseModel):
    """Request body for a presigned upload URL."""

    filename: str = Field(
        ...,
        min_length=1,
        description="Original filename; only its extension is kept in the key",
    )
    mime_type: str | None = Field(
        default=None,
        description="Content type the client will upload with",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filename": "商品图片.png",
                "mime_type": "image/png",
            }
        }
    )


# =============================================================================
# Response Schemas
# =============================================================================


class UploadedFileResponse(BaseModel):
    """A stored file."""

    id: str = Field(..., description="Object key")
    url: str = Field(..., description="Public URL")


class UploadFilesResponse(BaseModel):
    """Response for POST /admin/uploads."""

    files: list[UploadedFileResponse]


class DeleteFileResponse(BaseModel):
    """Response for DELETE /admin/uploads/{file_key}."""

    id: str
    object: Literal["file"] = "file"
    deleted: bool = True


class FileUrlResponse(BaseModel):
    """A presigned download URL."""

    url: str


class PresignedUploadResponse(BaseModel):
    """A presigned upload URL and the key the object will be stored under."""

    url: str
    key: str
