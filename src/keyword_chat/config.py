"""Runtime settings read from the environment."""

import os
from typing import List

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "KEYWORD_CHAT_"


class Settings(BaseModel):
    """Application settings."""

    reply_delay: float = Field(default=1.0, ge=0)
    log_level: str = "INFO"
    log_json: bool = False
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {value}")
        return value


def get_settings() -> Settings:
    """Build settings from ``KEYWORD_CHAT_*`` environment variables."""
    origins = os.getenv(f"{ENV_PREFIX}CORS_ORIGINS", "*")
    return Settings(
        reply_delay=os.getenv(f"{ENV_PREFIX}REPLY_DELAY", "1.0"),
        log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO"),
        log_json=os.getenv(f"{ENV_PREFIX}LOG_JSON", "false"),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
