# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads feed endpoint, encryption and logging settings from environment and .env file.

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Aggregate ids that show up in dumps often enough to deserve a name
DEFAULT_KNOWN_AGGREGATES: dict[str, str] = {
    "2e662fd5-a9cc-42d8-a85a-ac2eb75827f6": "dc seeded app",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Feed
    atomfeed_endpoint: str = ""
    feed_proto: Literal["http", "https"] = "https"
    feed_insecure: bool = False  # skip TLS certificate verification
    feed_timeout: float = 30.0

    # Encryption (a key alias switches the reader to encrypted mode)
    key_alias: str | None = None
    aws_region: str | None = None

    # Dump comparison
    known_aggregates: dict[str, str] = DEFAULT_KNOWN_AGGREGATES

    # Logging
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @property
    def feed_base_url(self) -> str:
        """Build the notifications base URL from protocol and endpoint."""
        return f"{self.feed_proto}://{self.atomfeed_endpoint}/notifications"

    @property
    def is_encrypted(self) -> bool:
        """Whether feed pages are expected as encrypted envelopes."""
        return bool(self.key_alias)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    ATOMFEED_ENDPOINT has no usable default and must be set before dumping.
    """
    return Settings()
