#clickhouse_hosting\infrastructure\clickhouse\config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class HostingSettings(BaseSettings):
    """Hosting configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CLICKHOUSE_HOSTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Image overrides (None = template default)
    image_registry: Optional[str] = None
    image: Optional[str] = None
    image_tag: Optional[str] = None

    # Administrative HTTP calls
    admin_timeout_seconds: float = 30.0

    # Generated password parameters
    password_length: int = 22


settings = HostingSettings()
