"""
Reference extensions.

- TimestampFormatExtension: renders entry timestamps with a configurable pattern
- LevelCounterExtension: counts observed entries per level
"""

from __future__ import annotations

import threading
from collections import Counter
from datetime import datetime
from typing import Dict, Union

from chrysalis.entry import LogEntry
from chrysalis.levels import LogLevel
from chrysalis.logging import get_logger
from chrysalis.utils import format_timestamp_custom, utc_now

from .base import Extension, ObserverExtension

logger = get_logger("chrysalis.extensions.builtin")


class TimestampFormatExtension(Extension):
    """Formats timestamps with a ``strftime`` pattern (UTC)."""

    def __init__(self, pattern: str = "%Y-%m-%d %H:%M:%S"):
        self._pattern = pattern

    @property
    def name(self) -> str:
        return "timestamp_formatter"

    @property
    def pattern(self) -> str:
        return self._pattern

    def initialize(self) -> None:
        self._validate(self._pattern)

    def set_pattern(self, pattern: str) -> None:
        self._validate(pattern)
        self._pattern = pattern

    def format_timestamp(self, value: Union[LogEntry, datetime]) -> str:
        timestamp = value.timestamp if isinstance(value, LogEntry) else value
        return format_timestamp_custom(timestamp, self._pattern)

    @staticmethod
    def _validate(pattern: str) -> None:
        if not isinstance(pattern, str) or not pattern:
            raise ValueError("timestamp pattern must be a non-empty string")
        # strftime raises ValueError for malformed directives on some platforms
        format_timestamp_custom(utc_now(), pattern)


class LevelCounterExtension(ObserverExtension):
    """Counts entries per level. Keeps counts only, never the entries."""

    def __init__(self) -> None:
        self._counts: Counter[LogLevel] = Counter()
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "level_counter"

    def initialize(self) -> None:
        self.reset()

    def shutdown(self) -> None:
        logger.debug("level_counter_summary", counts=self.counts())

    def observe(self, entry: LogEntry) -> None:
        with self._lock:
            self._counts[entry.level] += 1

    def counts(self) -> Dict[str, int]:
        """Counts keyed by level name, in severity order, levels never seen omitted."""
        with self._lock:
            return {level.value: self._counts[level] for level in LogLevel if self._counts[level]}

    def total(self) -> int:
        with self._lock:
            return sum(self._counts.values())

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
