"""
Diagnostic Logging Configuration.

Controls how Chrysalis reports its own events (extension lifecycle, filtered
entries, sink failures). Application log entries are rendered by whatever
Formatter the application picks and are not affected by these settings.
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiagnosticLevel(str, Enum):
    """Threshold for the package's own events, named like stdlib levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggingSettings(BaseSettings):
    """Diagnostic logging configuration (``CHRYSALIS_LOG_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="CHRYSALIS_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    level: DiagnosticLevel = Field(default=DiagnosticLevel.INFO, description="Lowest diagnostic level emitted")
    format: LogFormat = Field(default=LogFormat.CONSOLE, description="Rendering used by the stdio sink")
    use_color: bool | None = Field(
        default=None,
        description="Force ANSI colors on or off (unset: only when the stream is a TTY)",
    )

    # Console layout
    console_timestamp_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="strftime pattern, UTC")
    console_level_width: int = Field(default=8, ge=0, description="Width of the right-aligned level column")
    console_logger_width: int = Field(default=32, ge=0, description="Width of the right-aligned origin column")
    console_separator: str = Field(default=" | ", description="Text placed between columns")
