"""
Formatters: render a LogEntry (or any Serializable value) as text.

Design Pattern: Strategy Pattern. Every formatter implements
``format_with_options``; ``format`` renders with the formatter's own default
options. Formatters are pure functions of (entry, options).

Reference formatters:
- JsonFormatter: compact JSON (orjson)
- PrettyFormatter: indented JSON
- ConsoleFormatter: one aligned, optionally colored line per entry
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict

from . import codec
from .errors import FormatError, SerializationError
from .utils import format_timestamp_custom, truncate_string
from .values import Value, to_value

if TYPE_CHECKING:
    from .config.logging import LoggingSettings
    from .config.pipeline import PipelineSettings


class FormatterOptions(BaseModel):
    """Rendering options. Unknown keys are ignored so newer callers stay compatible."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    pretty_print: bool = False
    include_metadata: bool = True
    include_context: bool = True
    include_timestamps: bool = True
    include_levels: bool = True
    field_filter: Optional[FrozenSet[str]] = None

    @classmethod
    def from_settings(cls, settings: "PipelineSettings") -> "FormatterOptions":
        return cls(
            pretty_print=settings.pretty_print,
            include_metadata=settings.include_metadata,
        )


def select_fields(value: Value, options: FormatterOptions) -> Value:
    """Drop the top-level fields ``options`` excludes. Non-mappings pass through."""
    if not isinstance(value, dict):
        return value
    excluded = set()
    if not options.include_metadata:
        excluded.add("metadata")
    if not options.include_context:
        excluded.add("context")
    if not options.include_timestamps:
        excluded.add("timestamp")
    if not options.include_levels:
        excluded.add("level")
    return {
        key: item
        for key, item in value.items()
        if key not in excluded and (options.field_filter is None or key in options.field_filter)
    }


# =============================================================================
# Formatter Abstraction
# =============================================================================


class Formatter(ABC):
    """Abstract base class for formatters."""

    def __init__(self, options: Optional[FormatterOptions] = None):
        self.options = options or self.default_options()

    @classmethod
    def default_options(cls) -> FormatterOptions:
        return FormatterOptions()

    def format(self, entry: Any) -> str:
        """Render ``entry`` with this formatter's options."""
        return self.format_with_options(entry, self.options)

    @abstractmethod
    def format_with_options(self, entry: Any, options: FormatterOptions) -> str:
        """Render ``entry`` with explicit options.

        Raises:
            FormatError: If ``entry`` cannot be converted to a Value.
        """
        ...

    def prepare(self, entry: Any, options: FormatterOptions) -> Value:
        """Convert ``entry`` to a Value and apply field selection."""
        try:
            return select_fields(to_value(entry), options)
        except SerializationError as exc:
            raise FormatError(formatter=type(self).__name__, reason=exc.message) from exc


class JsonFormatter(Formatter):
    """Compact JSON, one object per entry."""

    def format_with_options(self, entry: Any, options: FormatterOptions) -> str:
        value = self.prepare(entry, options)
        try:
            return codec.dumps(value, pretty=options.pretty_print)
        except SerializationError as exc:
            raise FormatError(formatter=type(self).__name__, reason=exc.message) from exc


class PrettyFormatter(JsonFormatter):
    """Indented JSON. Explicit options still decide indentation."""

    @classmethod
    def default_options(cls) -> FormatterOptions:
        return FormatterOptions(pretty_print=True)


# =============================================================================
# Console Formatter (Aligned Columns)
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "timestamp": "\033[90m",
    "logger": "\033[35m",
    "key": "\033[34m",
}

LEVEL_COLORS = {
    "TRACE": "\033[2m",
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARN": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[1;31m",
    "FATAL": "\033[1;35m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


class ConsoleFormatter(Formatter):
    """Human-readable console rendering (fixed width, right-aligned).

    Format: ``timestamp | LEVEL | origin | message key=value ...``

    The origin column shows ``context["logger"]`` when present, otherwise the
    source location. ``pretty_print`` has no effect on this formatter.
    """

    ORIGIN_KEY = "logger"
    MAX_VALUE_LENGTH = 200

    def __init__(
        self,
        options: Optional[FormatterOptions] = None,
        *,
        timestamp_format: str = "%Y-%m-%d %H:%M:%S",
        level_width: int = 8,
        logger_width: int = 32,
        separator: str = " | ",
        use_color: bool = False,
    ):
        super().__init__(options)
        self.timestamp_format = timestamp_format
        self.level_width = level_width
        self.logger_width = logger_width
        self.separator = separator
        self.use_color = use_color

    @classmethod
    def from_settings(cls, settings: "LoggingSettings", *, use_color: bool = False) -> "ConsoleFormatter":
        return cls(
            timestamp_format=settings.console_timestamp_format,
            level_width=settings.console_level_width,
            logger_width=settings.console_logger_width,
            separator=settings.console_separator,
            use_color=settings.use_color if settings.use_color is not None else use_color,
        )

    @staticmethod
    def _fit_right(text: str, width: int) -> str:
        if width <= 0:
            return text
        if len(text) > width:
            if width <= 3:
                text = text[-width:]
            else:
                text = "..." + text[-(width - 3) :]
        return f"{text:>{width}}"

    def _format_timestamp(self, raw_timestamp: Any) -> str:
        try:
            dt = datetime.fromisoformat(str(raw_timestamp).replace("Z", "+00:00"))
        except ValueError:
            return str(raw_timestamp)
        return format_timestamp_custom(dt, self.timestamp_format)

    def _maybe_color(self, text: str, color: str) -> str:
        return colorize(text, color) if self.use_color else text

    def _colorize_level(self, text: str, level_upper: str) -> str:
        color = LEVEL_COLORS.get(level_upper)
        if not self.use_color or not color:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _render_value(self, value: Value) -> str:
        text = value if isinstance(value, str) else codec.dumps(value)
        return truncate_string(text, self.MAX_VALUE_LENGTH)

    def _origin(self, value: Dict[str, Value]) -> str:
        context = value.get("context")
        if isinstance(context, dict) and isinstance(context.get(self.ORIGIN_KEY), str):
            return context[self.ORIGIN_KEY]
        source = value.get("source")
        if isinstance(source, dict):
            return f"{source.get('file')}:{source.get('line')}"
        return "-"

    def format_with_options(self, entry: Any, options: FormatterOptions) -> str:
        value = self.prepare(entry, options)
        if not isinstance(value, dict):
            return self._render_value(value)

        columns = []
        if "timestamp" in value:
            columns.append(self._maybe_color(self._format_timestamp(value["timestamp"]), "timestamp"))
        if "level" in value:
            level_upper = str(value["level"]).upper()
            columns.append(self._colorize_level(self._fit_right(level_upper, self.level_width), level_upper))
        columns.append(self._maybe_color(self._fit_right(self._origin(value), self.logger_width), "logger"))

        message_text = str(value.get("message", ""))
        extras = []
        context = value.get("context")
        if isinstance(context, dict):
            for key, item in context.items():
                if key == self.ORIGIN_KEY:
                    continue
                extras.append(f"{self._maybe_color(key, 'key')}={self._maybe_color(self._render_value(item), 'dim')}")
        metadata = value.get("metadata")
        if isinstance(metadata, dict):
            for key, item in metadata.items():
                extras.append(
                    f"{self._maybe_color('metadata.' + key, 'key')}={self._maybe_color(self._render_value(item), 'dim')}"
                )
        if extras:
            message_text = f"{message_text} " + " ".join(extras)
        columns.append(message_text)

        return self.separator.join(columns)
