"""Runtime configuration for strictify.

Values come from the process environment (``STRICTIFY_*``) and an optional
``.env`` file in the working directory.
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """strictify settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STRICTIFY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    warn_dropped_keys: bool = Field(
        default=True,
        description="Log a warning for every keyword dropped during strictification",
    )
    max_depth: int | None = Field(
        default=None,
        gt=0,
        description="Maximum schema nesting depth; unlimited when unset",
    )
    passthrough_prefix: str = Field(
        default="_tool_",
        description="Tool-call argument prefix kept by unstrictify even when not in the schema",
    )
    log_level: str = Field(default="WARNING", description="Log level used by the CLI")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return settings
