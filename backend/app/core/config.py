"""Application settings and configuration management.

This module provides Pydantic-based settings management that loads
configuration from environment variables or a .env file. Settings include
the AWS credentials used by the S3 client, CORS origins, the listener
address and the log level.

Example:
    Settings can be accessed via the cached get_settings() function:
        >>> from app.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.aws_region)

    Environment variables can override defaults:
        >>> AWS_REGION=us-west-2
        >>> AWS_ACCESS_KEY_ID=AKIA...
        >>> AWS_SECRET_ACCESS_KEY=...
"""

import functools

import pydantic_settings


class Settings(pydantic_settings.BaseSettings):
    """Runtime configuration pulled from environment variables or defaults.

    All settings can be overridden via environment variables or .env file.
    Instances are frozen: the configuration is read once at startup and
    shared by every request handler without synchronization.

    Attributes:
        aws_region: AWS region for the S3 client (None uses botocore's
            default resolution chain).
        aws_access_key_id: Access key id for the S3 client.
        aws_secret_access_key: Secret access key for the S3 client.
        allow_origins: List of allowed CORS origins.
        host: Interface the HTTP listener binds to.
        port: Port the HTTP listener binds to.
        log_level: Root logging level name.

    Example:
        Create settings with custom values:
            >>> settings = Settings(
            ...     aws_region="us-west-2",
            ...     allow_origins=["http://localhost:5173"],
            ... )
    """

    aws_region: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    allow_origins: list[str] = ["http://localhost:3001"]
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )


@functools.lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables or .env file and cached
    for the lifetime of the application. Subsequent calls return the same
    cached instance.

    Returns:
        Settings instance with all configuration values populated.

    Example:
        The settings are cached, so multiple calls return the same instance:
            >>> settings1 = get_settings()
            >>> settings2 = get_settings()
            >>> assert settings1 is settings2  # Same instance
    """
    return Settings()
