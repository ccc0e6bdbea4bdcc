"""
Configuration management for Artwork Catalog.
"""

from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_PRESIGN_TTL_SECONDS = 600
DEFAULT_REGION = "us-east-1"


def _env(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class Settings(BaseSettings):
    """Application settings.

    Several fields accept more than one environment variable name so the
    service runs unchanged on hosts that expose object storage under their
    own naming (Railway buckets, plain AWS, generic S3 providers). The first
    non-empty variable in each list wins.
    """

    # Application
    app_name: str = Field(default="Artwork Catalog", validation_alias=_env("APP_NAME"))
    debug: bool = Field(default=False, validation_alias=_env("DEBUG"))
    environment: str = Field(
        default="development", validation_alias=_env("ENVIRONMENT")
    )

    # API
    api_host: str = Field(default="0.0.0.0", validation_alias=_env("API_HOST"))
    api_port: int = Field(default=8090, validation_alias=_env("PORT", "API_PORT"))
    api_workers: int = Field(default=1, validation_alias=_env("API_WORKERS"))
    cors_allowed_origins: str = Field(
        default="*",
        validation_alias=_env("CORS_ALLOWED_ORIGINS"),
        description="Comma-separated list of allowed origins ('*' allows all).",
    )

    # Filesystem storage
    artworks_dir: str = Field(default="../art", validation_alias=_env("ARTWORKS_DIR"))

    # Security
    admin_token: Optional[str] = Field(default=None, validation_alias=_env("ADMIN_TOKEN"))

    # Database overlay
    database_url: Optional[str] = Field(
        default=None, validation_alias=_env("DATABASE_URL")
    )
    db_timeout_seconds: float = Field(
        default=2.0, validation_alias=_env("DB_TIMEOUT_SECONDS")
    )
    db_write_timeout_seconds: float = Field(
        default=3.0, validation_alias=_env("DB_WRITE_TIMEOUT_SECONDS")
    )
    db_pool_max_connections: int = Field(
        default=10, validation_alias=_env("DB_POOL_MAX_CONNECTIONS")
    )
    db_pool_min_connections: int = Field(
        default=1, validation_alias=_env("DB_POOL_MIN_CONNECTIONS")
    )
    db_pool_max_lifetime_seconds: int = Field(
        default=1800, validation_alias=_env("DB_POOL_MAX_LIFETIME_SECONDS")
    )

    # Object storage
    bucket_name: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "BUCKET_NAME",
            "BUCKET",
            "ARTWORKS_BUCKET",
            "OBJECT_STORAGE_BUCKET",
            "AWS_S3_BUCKET",
        ),
    )
    bucket_region: str = Field(
        default=DEFAULT_REGION,
        validation_alias=_env(
            "BUCKET_REGION", "REGION", "AWS_REGION", "S3_REGION", "OBJECT_STORAGE_REGION"
        ),
    )
    bucket_endpoint: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "BUCKET_ENDPOINT",
            "ENDPOINT",
            "AWS_ENDPOINT_URL_S3",
            "S3_ENDPOINT",
            "OBJECT_STORAGE_ENDPOINT",
        ),
    )
    bucket_access_key_id: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "BUCKET_ACCESS_KEY_ID",
            "ACCESS_KEY_ID",
            "AWS_ACCESS_KEY_ID",
            "S3_ACCESS_KEY_ID",
            "OBJECT_STORAGE_ACCESS_KEY_ID",
        ),
    )
    bucket_secret_access_key: Optional[str] = Field(
        default=None,
        validation_alias=_env(
            "BUCKET_SECRET_ACCESS_KEY",
            "SECRET_ACCESS_KEY",
            "AWS_SECRET_ACCESS_KEY",
            "S3_SECRET_ACCESS_KEY",
            "OBJECT_STORAGE_SECRET_ACCESS_KEY",
        ),
    )
    public_base_url: Optional[str] = Field(
        default=None,
        validation_alias=_env("ARTWORKS_PUBLIC_BASE_URL", "PUBLIC_BUCKET_BASE_URL"),
    )
    presign_ttl_seconds: int = Field(
        default=DEFAULT_PRESIGN_TTL_SECONDS,
        validation_alias=_env("ARTWORKS_PRESIGN_TTL_SECONDS"),
    )

    # Uploads
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024, validation_alias=_env("MAX_UPLOAD_BYTES")
    )

    # Logging
    log_level: str = Field(default="INFO", validation_alias=_env("LOG_LEVEL"))
    log_format: str = Field(default="json", validation_alias=_env("LOG_FORMAT"))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_ignore_empty = True
        populate_by_name = True
        extra = "ignore"

    @field_validator(
        "admin_token",
        "database_url",
        "bucket_name",
        "bucket_endpoint",
        "bucket_access_key_id",
        "bucket_secret_access_key",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("bucket_region", mode="before")
    @classmethod
    def _normalize_region(cls, value):
        # Some providers display the region as "auto"; boto3 needs a real name.
        if value is None:
            return DEFAULT_REGION
        value = str(value).strip()
        if not value or value.lower() == "auto":
            return DEFAULT_REGION
        return value

    @field_validator("public_base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value):
        if value is None:
            return None
        value = str(value).strip().rstrip("/")
        return value or None

    @field_validator("presign_ttl_seconds", mode="before")
    @classmethod
    def _positive_ttl(cls, value):
        try:
            ttl = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PRESIGN_TTL_SECONDS
        return ttl if ttl > 0 else DEFAULT_PRESIGN_TTL_SECONDS

    @property
    def object_store_enabled(self) -> bool:
        return self.bucket_name is not None

    @property
    def database_enabled(self) -> bool:
        return self.database_url is not None

    @property
    def cors_origins(self) -> List[str]:
        origins = [o.strip() for o in self.cors_allowed_origins.split(",")]
        return [o for o in origins if o] or ["*"]


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings


def reset_settings() -> Settings:
    """Re-read settings from the current process environment."""
    global settings
    settings = Settings()
    return settings
