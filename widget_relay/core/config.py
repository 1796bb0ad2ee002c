"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # OpenAI Assistants (upstream conversational service)
    OPENAI_API_KEY: SecretStr = SecretStr("")
    ASSISTANT_ID: str = ""

    # Stream shaping
    SHOW_SOURCES: bool = True  # Append file citations after the answer
    STRIP_ANNOTATIONS: bool = True  # Remove 【n:m†file】 markers from deltas
    HEARTBEAT_INTERVAL_SECONDS: float = 15.0

    # Lead detection
    TELEGRAM_NOTIFY_IF_CONTACT: bool = True
    LEAD_SCAN_LIMIT: int = 30
    LEAD_NOTICE_TITLE: str = "🔔 Lead with contacts"

    # Summarization
    TELEGRAM_SUMMARY_MODEL: str = "gpt-4o-mini"
    SUMMARY_LOCALE: str = "ru"
    SUMMARY_MAX_MESSAGES: int = 20
    SUMMARY_MAX_CHARS: int = 12_000
    SUMMARY_MAX_TOKENS: int = 220
    SUMMARY_TEMPERATURE: float = 0.2

    # Telegram delivery
    TELEGRAM_BOT_TOKEN: SecretStr | None = None
    TELEGRAM_CHAT_ID: str = ""
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    TELEGRAM_CHUNK_SIZE: int = 3800
    TELEGRAM_TIMEOUT_SECONDS: float = 10.0

    # Citation filename cache
    CITATION_CACHE_SIZE: int = 1024
    CITATION_CACHE_TTL_SECONDS: int = 86_400

    # Background lead tasks get this long to finish on shutdown
    SHUTDOWN_DRAIN_SECONDS: float = 10.0

    # HTTP surface
    PORT: int = 3000
    PUBLIC_API_BASE: str = "/api"
    CORS_ORIGINS: str = "*"

    # Logging
    LOG_FORMAT: Literal["text", "json"] = "text"
    LOG_LEVEL: str = "INFO"

    @field_validator("HEARTBEAT_INTERVAL_SECONDS")
    @classmethod
    def validate_heartbeat_interval(cls, v: float) -> float:
        """Heartbeat interval must be a positive number of seconds."""
        if v <= 0:
            raise ValueError("HEARTBEAT_INTERVAL_SECONDS must be positive")
        return v

    @field_validator("LEAD_SCAN_LIMIT", "SUMMARY_MAX_MESSAGES", "TELEGRAM_CHUNK_SIZE")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Scan limits and chunk size must be at least 1."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @field_validator("TELEGRAM_API_BASE")
    @classmethod
    def validate_telegram_api_base(cls, v: str) -> str:
        """Validate the Bot API base URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("TELEGRAM_API_BASE must start with http:// or https://")
        return v.rstrip("/")

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def assistant_configured(self) -> bool:
        """Check if a run target is configured."""
        return bool(self.ASSISTANT_ID.strip())

    @property
    def telegram_configured(self) -> bool:
        """Check if both Telegram credentials are present."""
        token = self.TELEGRAM_BOT_TOKEN.get_secret_value() if self.TELEGRAM_BOT_TOKEN else ""
        return bool(token and self.TELEGRAM_CHAT_ID)

    def validate_startup(self) -> None:
        """Validate that all required secrets are configured.

        A missing ASSISTANT_ID is only a warning: every /chat request will
        then terminate with a configuration error event.

        Raises:
            ValueError: If any required secret is missing or empty.
        """
        required_secrets = {
            "OPENAI_API_KEY": self.OPENAI_API_KEY.get_secret_value(),
        }
        missing = [name for name, value in required_secrets.items() if not value]
        if missing:
            raise ValueError(f"Required secrets are missing or empty: {', '.join(missing)}")

        if not self.assistant_configured:
            logger.warning("ASSISTANT_ID is not set - /chat requests will fail to start a run")
        if self.TELEGRAM_NOTIFY_IF_CONTACT and not self.telegram_configured:
            logger.warning("Telegram credentials not configured - lead notifications DISABLED")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from the environment.
    """
    return Settings()
