"""Configuration for the S3 file provider."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from packages.file_storage.exceptions import InvalidInputError

REQUIRED_FIELDS = (
    "access_key_id",
    "secret_access_key",
    "region",
    "bucket",
)


class S3FileProviderOptions(BaseModel):
    """
    Options for S3FileProviderService.

    Immutable once constructed. Accepts the framework's camelCase aliases
    (``s3ForcePathStyle``, ``signatureVersion``) as well as field names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    access_key_id: str
    secret_access_key: str
    region: str
    bucket: str

    file_url: str | None = Field(
        default=None,
        description="Public base URL (e.g. CDN) used to build file URLs",
    )
    endpoint: str | None = Field(
        default=None,
        description="Custom endpoint for S3-compatible services (MinIO, R2)",
    )
    s3_force_path_style: bool | None = Field(
        default=None,
        alias="s3ForcePathStyle",
        description="Use path-style addressing (bucket in URL path)",
    )
    signature_version: str | None = Field(
        default=None,
        alias="signatureVersion",
        description="Signature version hint, e.g. 's3v4'",
    )
    max_buffer_size: int | None = Field(
        default=None,
        ge=1,
        description="Maximum object size in bytes read by get_as_buffer",
    )


def validate_options(options: dict[str, Any]) -> None:
    """
    Check that every required option is present and non-empty.

    Raises:
        InvalidInputError: Naming the first missing field
    """
    for field in REQUIRED_FIELDS:
        if not options.get(field):
            raise InvalidInputError(
                f"{field} is required in the provider's options",
                field=field,
            )


def build_options(options: "S3FileProviderOptions | dict[str, Any]") -> S3FileProviderOptions:
    """Validate raw options and return an immutable options model."""
    if isinstance(options, S3FileProviderOptions):
        validate_options(options.model_dump())
        return options
    validate_options(options)
    return S3FileProviderOptions.model_validate(options)
