"""
Configuration settings for the Baton Event Service.
"""
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service configuration loaded from environment variables.

    For local development, values can also be placed in a .env file.
    """
    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service settings
    service_name: str = "baton-event-service"
    service_host: str = "0.0.0.0"
    service_port: int = Field(
        default=10000,
        validation_alias=AliasChoices("PORT", "SERVICE_PORT"),
    )
    debug: bool = False

    # CORS
    cors_origins: List[str] = ["*"]

    # Ingestion
    max_body_bytes: int = 1024 * 1024

    # Event log
    max_events: int = 1000
    default_query_limit: int = 50

    # Stream settings
    stream_heartbeat_interval: float = 15  # seconds
    stream_max_queue_size: int = 100
    stream_send_timeout: float = 30  # seconds
    stream_announce_status: bool = True


# Global settings instance
settings = Settings()
