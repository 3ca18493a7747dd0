"""
Chrysalis Configuration Module.

Implements the Nested Settings Pattern: each concern has its own settings class
and environment variable prefix.

Usage:
    from chrysalis.config import settings

    settings.logging.level        # CHRYSALIS_LOG_LEVEL
    settings.pipeline.min_level   # CHRYSALIS_PIPELINE_MIN_LEVEL

The core never reads these implicitly; pass them to the ``from_settings``
constructors and to ``configure_logging``.
"""

from functools import cached_property

from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import DiagnosticLevel, LogFormat, LoggingSettings
from .pipeline import PipelineSettings


class Settings(BaseSettings):
    """Composite settings aggregating all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()

    @cached_property
    def pipeline(self) -> PipelineSettings:
        return PipelineSettings()


settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DiagnosticLevel",
    "LogFormat",
    "LoggingSettings",
    "PipelineSettings",
]
