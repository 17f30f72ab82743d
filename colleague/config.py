"""Application settings loaded from environment variables."""

import os
from functools import lru_cache

from pydantic import BaseModel, Field


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Settings(BaseModel):
    """Runtime configuration for the service."""

    anthropic_api_key: str | None = None
    llm_model: str = "claude-sonnet-4-5"
    llm_max_tokens: int = Field(default=4096, gt=0)
    llm_temperature: float = Field(default=0.7, ge=0.0, le=1.0)

    # Token budget for persisted history sent with a new user message
    context_max_tokens: int = Field(default=4096, gt=0)

    # None keeps pending approvals until they are resolved
    approval_ttl_minutes: int | None = Field(default=None, gt=0)

    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        cors = os.getenv("CORS_ORIGINS", "*")
        return cls(
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            llm_model=os.getenv("LLM_MODEL", "claude-sonnet-4-5"),
            llm_max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
            llm_temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
            context_max_tokens=int(os.getenv("CONTEXT_MAX_TOKENS", "4096")),
            approval_ttl_minutes=_optional_int("APPROVAL_TTL_MINUTES"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
