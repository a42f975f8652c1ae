"""Configuration for the Mindful service."""

import sys

from loguru import logger
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Mindful configuration settings."""

    # Data store
    DATABASE_URL: str = "sqlite+aiosqlite:///./mindful.db"

    # Completion service (OpenAI-compatible)
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    CHAT_MODEL: str = "gpt-4o"
    CLASSIFIER_MODEL: str = "gpt-4o-mini"
    TITLE_MODEL: str = "gpt-3.5-turbo"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 300
    LLM_TIMEOUT_SECONDS: float = 60.0

    # Route classification through the LLM first (keyword classifier stays the fallback)
    USE_LLM_CLASSIFIER: bool = False

    # Quota / renewal policy
    DAILY_MESSAGE_LIMIT: int = 50
    CONTEXT_WINDOW_MESSAGES: int = 10
    RENEWAL_COOLDOWN_DAYS: int = 30
    RESUMABLE_WINDOW_HOURS: int = 24

    # Auth
    JWT_SECRET: str = "dev_secret_change_in_production"
    JWT_ALGORITHM: str = "HS256"

    # Server
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    class Config:
        env_file = ".env"


# Global settings instance
settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Replace loguru's default sink with one at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=level or settings.LOG_LEVEL)
