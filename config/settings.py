"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    APP_CONFIG_PATH: str = Field(default="app_config.json")

    LLM_BASE_URL: str = "https://api.openai.com"
    LLM_ENDPOINT: str = "/v1/chat/completions"
    LLM_MODEL: str = "gpt-4"
    LLM_API_KEY_ENV: str = "OPENAI_API_KEY"
    LLM_TIMEOUT_S: float = Field(default=60.0, ge=0.1)
    LLM_MAX_RETRIES: int = Field(default=2, ge=0)
    LLM_MAX_TOKENS: int = 2000
    LLM_TEMPERATURE: float = 0.7

    MAX_QUESTIONS: int = Field(default=10, ge=1)
    QUESTION_BANK_SIZE: int = Field(default=10, ge=1)
    EXIT_OFFER_STREAK: int = 4
    NUDGE_STREAK: int = 2
    ANSWER_TRUNCATE_CHARS: int = 500

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
