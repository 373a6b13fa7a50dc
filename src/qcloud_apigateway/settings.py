"""
Client settings using Pydantic.

Provides environment-based configuration loading with QCLOUD_ prefix.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client settings."""

    # Credentials
    secret_id: str | None = None
    secret_key: str | None = None

    # Default region code (bj, sh, gz)
    region: str = "gz"

    # Endpoint
    protocol: str = "https"
    base_host: str = "api.qcloud.com"
    path: str = "/v2/index.php"
    method: str = "POST"

    # Signing
    signature_method: str = "HmacSHA1"

    # HTTP client settings
    timeout: float = 30.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "QCLOUD_"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
