"""
Application Configuration

Centralized settings management using Pydantic BaseSettings.
All values are loaded from environment variables or .env file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GEMINI_TIMEOUT_MS = 10_000


class Settings(BaseSettings):
    """
    Application settings with environment variable binding.

    Required env vars (no defaults):
        POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_HOST, POSTGRES_DB

    Optional env vars:
        POSTGRES_PORT (5432), REDIS_HOST (redis), REDIS_PORT (6379),
        LOG_LEVEL (INFO), SUPABASE_* (auth), GEMINI_* (AI features)
    """

    PROJECT_NAME: str = "AI Memo"

    # Database
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_HOST: str
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str

    # Redis (drafts, AI history)
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379

    # Logging
    LOG_LEVEL: str = "INFO"

    # Hosted auth (Supabase)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SITE_URL: str = "http://localhost:3000"

    # Gemini (OpenAI-compatible endpoint)
    GEMINI_API_KEY: str | None = None
    GOOGLE_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    GEMINI_TIMEOUT_MS: int = DEFAULT_GEMINI_TIMEOUT_MS

    # Application behaviour
    NOTES_PAGE_SIZE: int = 20
    SUMMARY_CACHE_TTL_SECONDS: int = 300
    DRAFT_TTL_SECONDS: int = 7 * 24 * 3600
    AI_HISTORY_TTL_SECONDS: int = 24 * 3600

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",  # Silently ignore unknown env vars
    )

    @property
    def DATABASE_URL(self) -> str:
        """Async PostgreSQL connection string using asyncpg driver."""
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def REDIS_URL(self) -> str:
        """Redis connection string."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"

    @property
    def gemini_api_key(self) -> str | None:
        """GEMINI_API_KEY, falling back to GOOGLE_API_KEY."""
        return self.GEMINI_API_KEY or self.GOOGLE_API_KEY

    @property
    def gemini_timeout_seconds(self) -> float:
        """Request timeout for the LLM client. Non-positive values use the default."""
        timeout_ms = self.GEMINI_TIMEOUT_MS
        if timeout_ms <= 0:
            timeout_ms = DEFAULT_GEMINI_TIMEOUT_MS
        return timeout_ms / 1000


settings = Settings()  # type: ignore[call-arg]
