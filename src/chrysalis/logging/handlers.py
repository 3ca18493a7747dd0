"""
Bridge from the standard library ``logging`` module into Chrysalis.

ChrysalisHandler converts each ``logging.LogRecord`` into a LogEntry, runs it
through an optional LogProcessor and writes the formatted result to a stream.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Optional

from chrysalis.adapters import StdlibLogRecordAdapter
from chrysalis.formatters import Formatter, JsonFormatter

if TYPE_CHECKING:
    from chrysalis.processor import LogProcessor


class ChrysalisHandler(logging.Handler):
    """stdlib handler emitting Chrysalis-formatted entries."""

    def __init__(
        self,
        *,
        adapter: Optional[StdlibLogRecordAdapter] = None,
        processor: Optional["LogProcessor"] = None,
        formatter: Optional[Formatter] = None,
        stream: Any = None,
        level: int = logging.NOTSET,
    ) -> None:
        super().__init__(level=level)
        self.adapter = adapter or StdlibLogRecordAdapter()
        self.processor = processor
        self.entry_formatter = formatter or JsonFormatter()
        self.stream = stream or sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = self.adapter.convert(record)
            if self.processor is not None:
                entry = self.processor.process(entry)
                if entry is None:
                    return
            self.stream.write(self.entry_formatter.format(entry) + "\n")
            self.flush()
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        with self.lock:
            if self.stream and hasattr(self.stream, "flush"):
                self.stream.flush()
