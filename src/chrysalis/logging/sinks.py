"""
Log sink abstractions and concrete implementations.

Sinks receive the package's own structlog event dicts. The stdio sink turns
each event into a LogEntry with EventDictAdapter and renders it with a
Formatter, so diagnostics go through the same contracts as application logs.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Optional

from structlog.typing import EventDict

from chrysalis.adapters import AdapterOptions, EventDictAdapter
from chrysalis.config.logging import LogFormat
from chrysalis.formatters import ConsoleFormatter, Formatter, JsonFormatter

# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Destination for diagnostic events.

    ``emit`` receives the event dict after the shared processors ran (keys
    ``message``, ``level``, ``timestamp``, ``logger`` plus bound fields).
    """

    @abstractmethod
    def emit(self, event_dict: EventDict) -> None: ...

    @abstractmethod
    def close(self) -> None:
        """Flush and release resources. Called when logging is reconfigured."""
        ...


class StdioSink(BaseSink):
    """Standard I/O sink with configurable format.

    Args:
        fmt: Output format - "console" (aligned human-readable) or "json"
        stream: Output stream (default: stderr)
        formatter: Overrides the formatter implied by ``fmt``
    """

    def __init__(
        self,
        fmt: LogFormat | str = LogFormat.CONSOLE,
        stream: Any = None,
        formatter: Optional[Formatter] = None,
    ):
        self._fmt = LogFormat(fmt)
        self._stream = stream or sys.stderr
        self._adapter = EventDictAdapter(AdapterOptions(stringify_unsupported=True))
        self._formatter = formatter or self._default_formatter()

    def _default_formatter(self) -> Formatter:
        if self._fmt is LogFormat.JSON:
            return JsonFormatter()
        use_color = bool(getattr(self._stream, "isatty", lambda: False)())
        return ConsoleFormatter(use_color=use_color)

    @property
    def formatter(self) -> Formatter:
        return self._formatter

    def emit(self, event_dict: EventDict) -> None:
        entry = self._adapter.convert(event_dict)
        self._stream.write(self._formatter.format(entry) + "\n")
        self._stream.flush()

    def close(self) -> None:
        pass
