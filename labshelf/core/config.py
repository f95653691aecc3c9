"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class StorageBackend(str, Enum):
    """Where uploaded binaries live."""
    LOCAL = "local"
    MINIO = "minio"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every value can be overridden through an environment variable of the
    same name (case-insensitive) or a ``.env`` file.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./labshelf.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(default=5, description="Number of persistent database connections")
    db_max_overflow: int = Field(default=10, description="Extra connections allowed during bursts")
    db_pool_timeout: int = Field(default=30, description="Seconds to wait for a pooled connection")
    db_pool_recycle: int = Field(default=1800, description="Seconds before a connection is recycled")

    # Authentication
    # AUTH_ENABLED=false: every request runs as the anonymous user (dev mode).
    jwt_secret_key: str = Field(
        default="dev-insecure-key-change-me",
        description="JWT signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    auth_enabled: bool = Field(
        default=False,
        description="Require bearer tokens on write endpoints"
    )

    # Capacity policy
    max_folder_size_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Aggregate byte ceiling for the files of one folder"
    )
    max_file_size_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Byte ceiling for a single uploaded file"
    )

    # Blob storage
    storage_backend: StorageBackend = Field(
        default=StorageBackend.LOCAL,
        description="Blob store implementation (local/minio)"
    )
    storage_root: str = Field(
        default="./data/blobs",
        description="Root directory for the local blob store"
    )
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="Externally visible base URL used to build local download URLs"
    )
    download_url_ttl_seconds: int = Field(
        default=3600,
        description="Lifetime of presigned download URLs"
    )
    minio_endpoint: str = Field(default="localhost:9000")
    minio_access_key: str = Field(default="minioadmin")
    minio_secret_key: str = Field(default="minioadmin")
    minio_bucket: str = Field(default="labshelf")
    minio_secure: bool = Field(default=False)

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """Parse the comma-separated origins; wildcards are refused."""
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('max_folder_size_bytes', 'max_file_size_bytes')
    @classmethod
    def validate_positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Size limits must be positive")
        return v

    @field_validator('public_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == "dev-insecure-key-change-me":
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )

        if not self.auth_enabled:
            errors.append("AUTH_ENABLED is false. Authentication must be enabled in production.")

        if self.storage_backend == StorageBackend.MINIO and self.minio_secret_key == "minioadmin":
            errors.append("MINIO_SECRET_KEY is the MinIO default. Use real object-store credentials.")

        if self.max_file_size_bytes > self.max_folder_size_bytes:
            errors.append(
                "MAX_FILE_SIZE_BYTES is larger than MAX_FOLDER_SIZE_BYTES; "
                "no file of the maximum size could ever be stored."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
