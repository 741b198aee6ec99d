"""
Facade Configuration.

All settings are read from ``UNILOG_*`` environment variables (or a ``.env``
file). They only influence which backend is preferred, the threshold used by
adapters that do not own one, and how the built-in sink renders.

Usage:
    from unilog.config import get_settings

    get_settings().level      # Level.INFO
    get_settings().backend    # "auto"
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .levels import Level

BackendName = Literal["auto", "loguru", "structlog", "stdlib", "native", "nop"]


class OutputFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class OutputStream(str, Enum):
    STDERR = "stderr"
    STDOUT = "stdout"


class UnilogSettings(BaseSettings):
    """Logging facade configuration."""

    model_config = SettingsConfigDict(
        env_prefix="UNILOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: Level = Field(default=Level.INFO, description="Threshold for adapters without their own gating")
    backend: BackendName = Field(default="auto", description="Preferred backend, or 'auto' to detect")
    format: OutputFormat = Field(default=OutputFormat.CONSOLE, description="Built-in sink output format")
    stream: OutputStream = Field(default=OutputStream.STDERR, description="Built-in sink output stream")
    color: bool = Field(default=True, description="Colour level names when the stream is a TTY")
    timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S.%f",
        description="Built-in sink timestamp format (microseconds trimmed to milliseconds)",
    )
    debug: bool = Field(default=False, description="Report backend selection and format mismatches")

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> Level:
        return Level.from_value(value)

    @field_validator("backend", mode="before")
    @classmethod
    def _normalize_backend(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


@lru_cache(maxsize=1)
def get_settings() -> UnilogSettings:
    """
    Process-wide settings, loaded once.

    Invalid values or an unreadable ``.env`` file fall back to the defaults;
    a broken environment must not stop the process from logging.
    """
    try:
        return UnilogSettings()
    except Exception as exc:
        from .diagnostics import report

        report("invalid UNILOG_* configuration, using defaults", exc)
        return UnilogSettings.model_construct()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
