"""
Application configuration and settings.
Centralized configuration management using Pydantic Settings.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEEPSEEK_API_URL = "https://chat.deepseek.com/api/v0/chat"
DEFAULT_MODEL_CLASS = "deepseek_code"
VALID_MODELS = ("deepseek_code", "deepseek_chat")

# Upstream needs time to apply a context reset before the next completion.
# There is no acknowledgment for this, the value was found empirically.
DEFAULT_CONTEXT_SETTLE_SECONDS = 2.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        extra="ignore",
        case_sensitive=False,
        env_file=[".env", ".env.local"],  # .env.local overrides .env
        populate_by_name=True,
        frozen=True,
    )

    # Application settings
    app_name: str = "DeepSeek Chat Relay"
    environment: str = Field(
        default="local", validation_alias=AliasChoices("SYSTEM_ENVIRONMENT", "environment")
    )
    host: str = "0.0.0.0"
    port: int = 3000

    # Upstream settings
    deepseek_api_key: str = Field(
        default="", validation_alias=AliasChoices("DEEPSEEK", "DEEPSEEK_API_KEY")
    )
    deepseek_api_url: str = DEEPSEEK_API_URL
    default_model_class: str = Field(
        default=DEFAULT_MODEL_CLASS,
        validation_alias=AliasChoices("DEEPSEEK_MODEL_CLASS", "default_model_class"),
    )
    context_settle_seconds: float = Field(default=DEFAULT_CONTEXT_SETTLE_SECONDS, ge=0)

    # End-to-end deadline for one relay; None disables it
    request_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    disconnect_poll_seconds: float = Field(default=0.5, gt=0)

    # CORS settings
    allowed_origins: List[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    enable_request_logging: bool = True

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def has_credential(self) -> bool:
        """Check if the upstream bearer token is configured."""
        return bool(self.deepseek_api_key)


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
