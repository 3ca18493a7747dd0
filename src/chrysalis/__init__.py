"""
Chrysalis: an extensible structured logging core.

Building blocks:
- LogEntry: canonical log event with type-erased context and metadata
- Formatter: renders entries (JSON, pretty JSON, console)
- Adapter: converts foreign records (strings, stdlib LogRecords, structlog events)
- ExtensionRegistry: named, type-indexed plugin lifecycle
- LogProcessor: ordered filter/transform pipeline
"""

from .adapters import (
    Adapter,
    AdapterOptions,
    EventDictAdapter,
    SeverityMap,
    StandardAdapter,
    StdlibLogRecordAdapter,
)
from .entry import ConflictPolicy, LogEntry, SourceLocation
from .errors import (
    AdapterError,
    ChrysalisError,
    ContextConflictError,
    DeserializationError,
    DuplicateExtensionError,
    ExtensionError,
    ExtensionInitError,
    ExtensionNotFoundError,
    ExtensionShutdownError,
    FormatError,
    SerializationError,
)
from .extensions import (
    Extension,
    ExtensionRegistry,
    LevelCounterExtension,
    ObserverExtension,
    TimestampFormatExtension,
)
from .formatters import ConsoleFormatter, Formatter, FormatterOptions, JsonFormatter, PrettyFormatter
from .levels import LogLevel
from .processor import LogProcessor
from .serializable import Serializable, SerializableModel, from_json, to_json
from .values import Value, to_value

__version__ = "0.1.0"

__all__ = [
    "Adapter",
    "AdapterOptions",
    "EventDictAdapter",
    "SeverityMap",
    "StandardAdapter",
    "StdlibLogRecordAdapter",
    "ConflictPolicy",
    "LogEntry",
    "SourceLocation",
    "AdapterError",
    "ChrysalisError",
    "ContextConflictError",
    "DeserializationError",
    "DuplicateExtensionError",
    "ExtensionError",
    "ExtensionInitError",
    "ExtensionNotFoundError",
    "ExtensionShutdownError",
    "FormatError",
    "SerializationError",
    "Extension",
    "ExtensionRegistry",
    "LevelCounterExtension",
    "ObserverExtension",
    "TimestampFormatExtension",
    "ConsoleFormatter",
    "Formatter",
    "FormatterOptions",
    "JsonFormatter",
    "PrettyFormatter",
    "LogLevel",
    "LogProcessor",
    "Serializable",
    "SerializableModel",
    "from_json",
    "to_json",
    "Value",
    "to_value",
]
