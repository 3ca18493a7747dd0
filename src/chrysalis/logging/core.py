"""
Diagnostic logging setup.

Chrysalis' own events (extension lifecycle, filtered entries) are captured
with structlog, shaped into the LogEntry wire vocabulary by a short processor
chain and then handed to every active sink. Rendering is the sinks' job, so
the structlog logger itself returns the event instead of printing it.

Loggers carry their own processor chain and never read structlog's global
configuration. Until ``configure_logging`` installs a sink every event is
dropped, so an application that never configures Chrysalis sees no output
from it, and configuring Chrysalis leaves the application's structlog setup
alone.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Iterable

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from chrysalis.config.logging import LogFormat, LoggingSettings
from chrysalis.formatters import ConsoleFormatter, JsonFormatter
from chrysalis.utils import format_timestamp, utc_now

from .sinks import BaseSink, StdioSink

DEFAULT_LOGGER_NAME = "chrysalis"

# =============================================================================
# Global State
# =============================================================================

_sinks: list[BaseSink] = []
_threshold: int = logging.INFO

_METHOD_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "msg": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "err": logging.ERROR,
    "error": logging.ERROR,
    "exception": logging.ERROR,
    "critical": logging.CRITICAL,
    "fatal": logging.CRITICAL,
}


def get_logger(name: str | None = None) -> Any:
    """Structured logger bound to ``name`` (default: ``chrysalis``)."""
    return structlog.wrap_logger(
        structlog.ReturnLogger(),
        processors=[drop_unrouted, *SHARED_PROCESSORS, dispatch_to_sinks],
        wrapper_class=structlog.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
        _name=name or DEFAULT_LOGGER_NAME,
    )


# =============================================================================
# Structlog Processors
# =============================================================================


def drop_unrouted(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Drop the event when no sink is installed or it is below the threshold."""
    if not _sinks or _METHOD_LEVELS.get(method_name, logging.INFO) < _threshold:
        raise structlog.DropEvent
    return event_dict


def stamp_utc(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Timestamp the event in the LogEntry wire format (UTC, ``Z`` suffix)."""
    event_dict.setdefault("timestamp", format_timestamp(utc_now()))
    return event_dict


def promote_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Move the private ``_name`` binding to the public ``logger`` key."""
    event_dict["logger"] = event_dict.pop("_name", DEFAULT_LOGGER_NAME)
    return event_dict


def event_to_message(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """structlog calls the message ``event``; LogEntry calls it ``message``."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def dispatch_to_sinks(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
    """Final processor: fan the event out to the active sinks."""
    for sink in tuple(_sinks):
        try:
            sink.emit(event_dict)
        except Exception as exc:
            # A broken sink must not break the application that is logging
            sys.stderr.write(f"chrysalis: {type(sink).__name__} failed to emit: {exc!r}\n")
    return ""


SHARED_PROCESSORS: tuple[Processor, ...] = (
    structlog.stdlib.add_log_level,
    stamp_utc,
    promote_logger_name,
    event_to_message,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


# =============================================================================
# Configuration Logic
# =============================================================================


def _close_sinks() -> None:
    while _sinks:
        _sinks.pop().close()


def _default_sink(settings: LoggingSettings, stream: Any) -> BaseSink:
    target = stream or sys.stderr
    if settings.format is LogFormat.JSON:
        return StdioSink(fmt=LogFormat.JSON, stream=target, formatter=JsonFormatter())
    is_tty = bool(getattr(target, "isatty", lambda: False)())
    formatter = ConsoleFormatter.from_settings(settings, use_color=is_tty)
    return StdioSink(fmt=LogFormat.CONSOLE, stream=target, formatter=formatter)


def configure_logging(
    settings: LoggingSettings | None = None,
    *,
    stream: Any = None,
    sinks: Iterable[BaseSink] | None = None,
) -> None:
    """
    Configure Chrysalis' diagnostic logging.

    Previously configured sinks are closed first, so calling this again
    replaces the whole setup.

    Args:
        settings: Logging settings (default: read from CHRYSALIS_LOG_* variables)
        stream: Target stream for the default stdio sink (default: stderr)
        sinks: Explicit sinks, replacing the default stdio sink
    """
    global _threshold
    settings = settings or LoggingSettings()
    _close_sinks()
    _sinks.extend(sinks if sinks is not None else [_default_sink(settings, stream)])
    _threshold = getattr(logging, settings.level.value, logging.INFO)


def reset_logging() -> None:
    """Close all sinks; diagnostics stay silent until configured again."""
    global _threshold
    _close_sinks()
    _threshold = logging.INFO
