"""
svelte-unsafe-html Configuration

Centralized configuration management using pydantic-settings.
All environment variables use the SVELTE_UNSAFE_HTML_ prefix.

Usage:
    from svelte_unsafe_html.config import get_settings

    settings = get_settings()
    settings.sanitizers   # e.g. SVELTE_UNSAFE_HTML_SANITIZERS='["sanitize", "purify"]'
    settings.modern       # SVELTE_UNSAFE_HTML_MODERN=true
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

from svelte_unsafe_html.exceptions import InvalidConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """
    Analyzer settings.

    Environment variables use the SVELTE_UNSAFE_HTML_ prefix.
    Example: SVELTE_UNSAFE_HTML_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SVELTE_UNSAFE_HTML_",
        extra="ignore",
    )

    sanitizers: list[str] = Field(
        default_factory=list,
        description="Function names trusted to sanitize HTML (e.g. sanitize, DOMPurify)",
    )
    modern: bool = Field(default=False, description="Parse with the Svelte 5 (modern) template dialect")
    extensions: list[str] = Field(
        default_factory=lambda: [".svelte"],
        description="File extensions collected when a directory is checked",
    )
    log_level: str = Field(default="WARNING", description="Logging level")
    log_format: Literal["console", "json"] = Field(default="console", description="Log renderer")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext if ext.startswith(".") else f".{ext}" for ext in value]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load settings from the environment (cached).

    Raises:
        InvalidConfigurationError: If an environment value is invalid
    """
    try:
        return Settings()
    except (ValidationError, SettingsError) as e:
        raise InvalidConfigurationError("Invalid SVELTE_UNSAFE_HTML_* configuration", details={"errors": str(e)}) from e
