"""
Configuration management for the project assistant.

Uses Pydantic Settings for type-safe configuration with .env file support.
"""
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_PACKAGE_DIR = Path(__file__).parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=_PACKAGE_DIR.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # LLM Settings
    openai_api_key: str = Field(default="")
    llm_model: str = Field(default="gpt-4o-mini")
    llm_temperature: float = Field(default=0.7)
    llm_max_tokens: int = Field(default=2048)
    turn_timeout_seconds: float = Field(default=30.0, description="Wall-clock limit for one model turn")

    # Project data service
    project_api_url: str = Field(default="http://localhost:8080/api/v1")
    project_api_token: str = Field(default="", description="Bearer token for the project data service")
    project_api_timeout: float = Field(default=15.0)

    # Defaults applied to model-proposed actions
    default_list_color: str = Field(default="#3B82F6")
    default_task_color: str = Field(default="#6B7280")

    log_level: str = Field(default="INFO")

    def validate_config(self) -> list[str]:
        """Validate configuration and return list of warnings/errors."""
        issues = []

        if not self.openai_api_key:
            issues.append("OPENAI_API_KEY is not set")

        if not self.project_api_url:
            issues.append("PROJECT_API_URL is not set")

        if self.turn_timeout_seconds <= 0:
            issues.append("TURN_TIMEOUT_SECONDS must be positive")

        return issues


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
