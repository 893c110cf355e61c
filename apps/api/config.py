"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Any, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Commerce File Storage"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # File module
    file_provider: str = "s3-file"

    # S3 / S3-compatible storage (MinIO, R2)
    s3_file_url: str | None = None  # Public base URL, e.g. CDN
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_region: str = ""
    s3_bucket: str = ""
    s3_endpoint: str | None = None  # Set for S3-compatible services, None for AWS S3
    s3_force_path_style: bool | None = None
    s3_signature_version: str | None = None
    s3_max_buffer_size: int | None = None

    def s3_provider_options(self) -> dict[str, Any]:
        """Options for the s3-file provider, keyed by option name."""
        return {
            "file_url": self.s3_file_url,
            "access_key_id": self.s3_access_key_id,
            "secret_access_key": self.s3_secret_access_key,
            "region": self.s3_region,
            "bucket": self.s3_bucket,
            "endpoint": self.s3_endpoint,
            "s3_force_path_style": self.s3_force_path_style,
            "signature_version": self.s3_signature_version,
            "max_buffer_size": self.s3_max_buffer_size,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
