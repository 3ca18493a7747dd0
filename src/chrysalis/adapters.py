"""
Adapters: convert externally defined log records into LogEntry objects.

An adapter is parameterized by the record type it accepts. Severity mapping
is always total: every external severity resolves to exactly one LogLevel,
with an explicit default for values the mapping does not name. Unmapped
severities never cause data to be dropped.

Reference adapters:
- StandardAdapter: plain strings
- StdlibLogRecordAdapter: ``logging.LogRecord``
- EventDictAdapter: structlog event dicts
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Hashable, Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .entry import ConflictPolicy, LogEntry
from .errors import AdapterError, ContextConflictError, SerializationError
from .levels import LogLevel
from .utils import sanitize_field_name

if TYPE_CHECKING:
    from .config.pipeline import PipelineSettings

R = TypeVar("R")

Severity = Union[int, str]


class SeverityMap(BaseModel):
    """Total mapping from an external severity to a LogLevel.

    String keys are matched case-insensitively. Anything not in ``mapping``
    (including unhashable values) resolves to ``default``, which is the most
    severe level unless configured otherwise.
    """

    model_config = ConfigDict(frozen=True)

    mapping: Dict[Severity, LogLevel] = Field(default_factory=dict)
    default: LogLevel = LogLevel.FATAL

    @field_validator("mapping")
    @classmethod
    def normalize_keys(cls, value: Dict[Severity, LogLevel]) -> Dict[Severity, LogLevel]:
        return {key.strip().lower() if isinstance(key, str) else key: level for key, level in value.items()}

    def resolve(self, severity: Any) -> LogLevel:
        if isinstance(severity, str):
            severity = severity.strip().lower()
        if not isinstance(severity, Hashable):
            return self.default
        return self.mapping.get(severity, self.default)

    def with_default(self, default: LogLevel) -> "SeverityMap":
        return self.model_copy(update={"default": default})


class AdapterOptions(BaseModel):
    """Adapter settings.

    Attributes:
        include_source: Copy file/line information when the record has it.
        include_thread: Copy the thread name into ``metadata["thread"]``.
        include_stack_traces: Copy formatted exception text into the context.
        sanitize_keys: Rewrite context keys with :func:`sanitize_field_name`.
        stringify_unsupported: Store ``repr()`` of values the Value model
            cannot hold instead of failing the conversion.
        context_conflict: Rule for context keys written twice.
        severity_map: Replaces the adapter's built-in severity mapping.
        default_level: Replaces the default of the effective severity mapping.
    """

    model_config = ConfigDict(frozen=True)

    include_source: bool = True
    include_thread: bool = True
    include_stack_traces: bool = True
    sanitize_keys: bool = False
    stringify_unsupported: bool = False
    context_conflict: ConflictPolicy = ConflictPolicy.OVERWRITE
    severity_map: Optional[SeverityMap] = None
    default_level: Optional[LogLevel] = None

    @classmethod
    def from_settings(cls, settings: "PipelineSettings", **overrides: Any) -> "AdapterOptions":
        values: Dict[str, Any] = {
            "default_level": settings.adapter_default_level,
            "context_conflict": settings.context_conflict,
        }
        values.update(overrides)
        return cls(**values)


# =============================================================================
# Adapter Abstraction
# =============================================================================


class Adapter(ABC, Generic[R]):
    """Abstract base class for adapters over external record type ``R``."""

    default_severity_map: SeverityMap = SeverityMap()

    def __init__(self, options: Optional[AdapterOptions] = None):
        self.options = options or AdapterOptions()

    @abstractmethod
    def convert(self, record: R) -> LogEntry:
        """Map ``record`` to a new LogEntry.

        Raises:
            AdapterError: If the record cannot be mapped.
        """
        ...

    def configure(self, options: AdapterOptions) -> None:
        """Replace the adapter's options."""
        self.options = options

    @property
    def severity_map(self) -> SeverityMap:
        severity_map = self.options.severity_map or self.default_severity_map
        if self.options.default_level is not None:
            severity_map = severity_map.with_default(self.options.default_level)
        return severity_map

    def map_severity(self, severity: Any) -> LogLevel:
        return self.severity_map.resolve(severity)

    def error(self, reason: str) -> AdapterError:
        return AdapterError(adapter=type(self).__name__, reason=reason)

    def add_context(self, entry: LogEntry, key: str, value: Any) -> None:
        """Write one context field honoring the adapter's options."""
        if not isinstance(key, str):
            raise self.error(f"context keys must be strings, got {type(key).__name__}")
        if self.options.sanitize_keys:
            key = sanitize_field_name(key)
        try:
            entry.add_context(key, value, policy=self.options.context_conflict)
        except SerializationError as exc:
            if not self.options.stringify_unsupported:
                raise self.error(f"context field '{key}': {exc.message}") from exc
            entry.add_context(key, repr(value), policy=self.options.context_conflict)
        except ContextConflictError as exc:
            raise self.error(exc.message) from exc


class StandardAdapter(Adapter[str]):
    """Plain text records become INFO entries."""

    def convert(self, record: str) -> LogEntry:
        if not isinstance(record, str):
            raise self.error(f"expected str, got {type(record).__name__}")
        return LogEntry.new(record, LogLevel.INFO)


# =============================================================================
# Standard Library Records
# =============================================================================

_STANDARD_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


class StdlibLogRecordAdapter(Adapter[logging.LogRecord]):
    """Converts ``logging.LogRecord`` objects.

    Numeric levels are mapped exactly; custom levels (e.g. 25) fall through to
    the map's default. Attributes passed through ``extra=`` land in the
    context next to ``logger``, ``module`` and ``function``.
    """

    default_severity_map = SeverityMap(
        mapping={
            5: LogLevel.TRACE,
            logging.DEBUG: LogLevel.DEBUG,
            logging.INFO: LogLevel.INFO,
            logging.WARNING: LogLevel.WARN,
            logging.ERROR: LogLevel.ERROR,
            logging.CRITICAL: LogLevel.CRITICAL,
        }
    )

    def convert(self, record: logging.LogRecord) -> LogEntry:
        if not isinstance(record, logging.LogRecord):
            raise self.error(f"expected logging.LogRecord, got {type(record).__name__}")
        try:
            message = record.getMessage()
        except (TypeError, ValueError) as exc:
            raise self.error(f"message arguments do not match format: {exc}") from exc

        entry = LogEntry(
            message=message,
            level=self.map_severity(record.levelno),
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        )
        if self.options.include_source and record.pathname:
            entry.with_source(record.pathname, max(record.lineno or 0, 0))
        if self.options.include_thread and record.threadName:
            entry.with_thread(record.threadName)

        self.add_context(entry, "logger", record.name)
        self.add_context(entry, "module", record.module)
        self.add_context(entry, "function", record.funcName)
        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                self.add_context(entry, key, value)

        if self.options.include_stack_traces:
            exception_text = record.exc_text
            if not exception_text and record.exc_info:
                exception_text = logging.Formatter().formatException(record.exc_info)
            if exception_text:
                self.add_context(entry, "exception", exception_text)
        return entry


# =============================================================================
# structlog Event Dicts
# =============================================================================


class EventDictAdapter(Adapter[Mapping[str, Any]]):
    """Converts structlog event dicts.

    The message comes from ``event`` (or ``message`` once renamed), the level
    from ``level``; events without a level are INFO. ``filename``/``lineno``
    and ``thread_name`` (from structlog's CallsiteParameterAdder) become the
    source location and thread. Every other public key becomes context.
    """

    default_severity_map = SeverityMap(
        mapping={
            "trace": LogLevel.TRACE,
            "debug": LogLevel.DEBUG,
            "info": LogLevel.INFO,
            "warn": LogLevel.WARN,
            "warning": LogLevel.WARN,
            "error": LogLevel.ERROR,
            "exception": LogLevel.ERROR,
            "critical": LogLevel.CRITICAL,
            "fatal": LogLevel.FATAL,
        }
    )

    _CONSUMED_KEYS = frozenset({"event", "message", "level", "timestamp", "filename", "lineno", "thread_name"})

    def convert(self, record: Mapping[str, Any]) -> LogEntry:
        if not isinstance(record, Mapping):
            raise self.error(f"expected a mapping, got {type(record).__name__}")
        if "event" in record:
            message = record["event"]
        elif "message" in record:
            message = record["message"]
        else:
            raise self.error("event dict has neither 'event' nor 'message'")

        level = self.map_severity(record["level"]) if "level" in record else LogLevel.INFO
        fields: Dict[str, Any] = {"message": str(message), "level": level}
        if "timestamp" in record:
            fields["timestamp"] = self._parse_timestamp(record["timestamp"])
        entry = LogEntry(**fields)

        if self.options.include_source and "filename" in record:
            lineno = record.get("lineno")
            entry.with_source(str(record["filename"]), lineno if isinstance(lineno, int) and lineno >= 0 else 0)
        if self.options.include_thread and record.get("thread_name"):
            entry.with_thread(record["thread_name"])

        for key, value in record.items():
            if isinstance(key, str) and (key in self._CONSUMED_KEYS or key.startswith("_")):
                continue
            if key == "exception" and not self.options.include_stack_traces:
                continue
            self.add_context(entry, key, value)
        return entry

    def _parse_timestamp(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            try:
                return datetime.fromtimestamp(raw, tz=timezone.utc)
            except (OverflowError, OSError, ValueError) as exc:
                raise self.error(f"timestamp {raw!r} out of range") from exc
        if isinstance(raw, str):
            try:
                return datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError as exc:
                raise self.error(f"unparseable timestamp {raw!r}") from exc
        raise self.error(f"unsupported timestamp type {type(raw).__name__}")
