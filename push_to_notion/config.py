"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from push_to_notion.kernel.ids import normalize_notion_id


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = Field(default="development")

    # Slack
    slack_bot_token: str = Field(default="")
    slack_signing_secret: str = Field(default="")

    # Notion
    notion_token: str = Field(default="")
    notion_api_url: str = Field(default="https://api.notion.com/v1")
    notion_timeout_seconds: float = Field(default=10.0)

    # Comma separated; empty means every database the integration can see
    allowed_database_ids: str = Field(default="")

    # Read-only upstream calls
    http_max_attempts: int = Field(default=3)

    # Overall budget for the reads behind a synchronous Slack answer
    # (typeahead options, submission schema lookup). Slack waits 3 seconds.
    interactive_timeout_seconds: float = Field(default=2.5)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="json")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    @property
    def allowed_database_set(self) -> frozenset[str]:
        """Normalized allow-list of Notion database ids."""
        return frozenset(
            normalize_notion_id(part)
            for part in self.allowed_database_ids.split(",")
            if part.strip()
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
