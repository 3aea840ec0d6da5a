"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - agent_max_iterations is configuration, never a constant in the agent loop
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database (conversation history)
    database_url: str = "sqlite+aiosqlite:///data/conversations.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres URLs come as postgresql://; the async engine needs asyncpg."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    session_ttl_seconds: int = 2 * 60 * 60

    # Anthropic
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_base_url: str | None = None
    anthropic_timeout_seconds: int = 300

    # Agent
    agent_model: str = "claude-sonnet-4-5"
    agent_max_tokens: int = 1024
    agent_max_iterations: int = 10
    agent_streaming: bool = True

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
