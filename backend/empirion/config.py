"""Settings — process configuration read from the environment (and .env).

Invariants:
    - Secrets only arrive through the environment; the API key default is a
      placeholder that disables the advisor instead of failing startup
    - get_settings() returns one cached Settings per process
    - plan_wizard_steps bounds every step index the lifecycle accepts

Design Decisions:
    - pydantic-settings: typed, validated env parsing with .env support for local runs
    - Non-secret defaults match the docker-compose stack
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Plan store
    database_url: str = "postgresql+asyncpg://empirion:empirion@db:5432/empirion"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # Plan wizard
    plan_wizard_steps: int = Field(5, ge=1, le=20)

    # Advisor (Anthropic Messages API)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = Field(3, ge=0)
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000
    advisor_model: str = "claude-sonnet-4-5"
    advisor_max_tokens: int = 1024

    # HTTP
    cors_origins: list[str] = ["http://localhost:5173"]

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """postgresql:// URLs from hosting providers need the asyncpg driver name."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v.removeprefix("postgresql://")
        return v

    @property
    def advisor_enabled(self) -> bool:
        return not self.anthropic_api_key.endswith("placeholder")


@lru_cache
def get_settings() -> Settings:
    return Settings()
