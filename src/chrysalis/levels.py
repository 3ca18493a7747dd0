"""
Log severity levels.

LogLevel is a closed, totally ordered enumeration. Ordering follows severity
(TRACE lowest, FATAL highest), never the lexical order of the level names.
"""

from __future__ import annotations

from enum import Enum


class LogLevel(str, Enum):
    """Severity of a log entry. Wire names are lower-case."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    CRITICAL = "critical"
    FATAL = "fatal"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        """Numeric rank, 0 (TRACE) to 6 (FATAL)."""
        return _SEVERITY[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity < other.severity

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity <= other.severity

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity > other.severity

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LogLevel):
            return NotImplemented
        return self.severity >= other.severity

    @classmethod
    def parse(cls, text: str) -> "LogLevel":
        """Lenient, case-insensitive parse that also accepts common aliases.

        Raises:
            ValueError: If ``text`` names no level.
        """
        normalized = str(text).strip().lower()
        level = _ALIASES.get(normalized)
        if level is None:
            raise ValueError(f"Unknown log level: {text!r}")
        return level

    @classmethod
    def coerce(cls, text: str, default: "LogLevel | None" = None) -> "LogLevel":
        """Like :meth:`parse`, but falls back to ``default`` (INFO) for unknown text."""
        try:
            return cls.parse(text)
        except ValueError:
            return default if default is not None else cls.INFO


_SEVERITY = {level: rank for rank, level in enumerate(LogLevel)}

_ALIASES = {level.value: level for level in LogLevel}
_ALIASES.update(
    {
        "warning": LogLevel.WARN,
        "err": LogLevel.ERROR,
        "crit": LogLevel.CRITICAL,
    }
)
