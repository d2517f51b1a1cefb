"""Application configuration using pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "dropship-ai"
    debug: bool = False
    environment: str = "development"

    # Database (SQLite for local dev, PostgreSQL for prod)
    database_url: str = "sqlite+aiosqlite:///./dropship_ai.db"

    # Frontend
    frontend_url: str = "http://localhost:3000"

    # API
    api_prefix: str = "/api"

    # LLM (any OpenAI-compatible chat completions endpoint)
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    openai_base_url: str = "https://api.openai.com/v1"
    rationale_timeout_seconds: float = 15.0
    ai_cache_ttl_seconds: int = 3600

    # AI endpoint rate limiting (fixed window, per caller)
    ai_rate_limit_max: int = 10
    ai_rate_limit_window_seconds: int = 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
