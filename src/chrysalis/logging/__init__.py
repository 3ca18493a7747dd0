"""
Diagnostic logging for Chrysalis.

Provides structured logging of the package's own events with pluggable sinks.

Design Pattern: Strategy Pattern for sink abstraction.
Library: structlog for event capture; rendering goes through Chrysalis'
own adapters and formatters (orjson for JSON).
"""

from .core import configure_logging, get_logger, reset_logging
from .handlers import ChrysalisHandler
from .sinks import BaseSink, StdioSink

__all__ = [
    "configure_logging",
    "get_logger",
    "reset_logging",
    "ChrysalisHandler",
    "BaseSink",
    "StdioSink",
]
