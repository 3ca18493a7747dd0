"""
LogLevel unit tests.
"""

from __future__ import annotations

import pytest

from chrysalis.levels import LogLevel


class TestOrdering:
    """Severity ordering"""

    def test_total_order_by_severity(self) -> None:
        """Levels compare by severity, not by name"""
        assert (
            LogLevel.TRACE
            < LogLevel.DEBUG
            < LogLevel.INFO
            < LogLevel.WARN
            < LogLevel.ERROR
            < LogLevel.CRITICAL
            < LogLevel.FATAL
        )

    def test_sorting_uses_severity(self) -> None:
        """sorted() yields severity order"""
        shuffled = [LogLevel.FATAL, LogLevel.INFO, LogLevel.TRACE, LogLevel.ERROR]
        assert sorted(shuffled) == [LogLevel.TRACE, LogLevel.INFO, LogLevel.ERROR, LogLevel.FATAL]

    def test_ge_and_le_include_equal(self) -> None:
        """>= and <= hold for equal levels"""
        assert LogLevel.WARN >= LogLevel.WARN
        assert LogLevel.WARN <= LogLevel.WARN
        assert not LogLevel.INFO >= LogLevel.WARN

    def test_severity_rank(self) -> None:
        """Numeric rank runs from 0 to 6"""
        assert LogLevel.TRACE.severity == 0
        assert LogLevel.FATAL.severity == 6


class TestParsing:
    """Text conversion"""

    def test_str_is_lower_case_wire_name(self) -> None:
        """str() gives the wire name"""
        assert str(LogLevel.WARN) == "warn"
        assert LogLevel("critical") is LogLevel.CRITICAL

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("INFO", LogLevel.INFO),
            (" warning ", LogLevel.WARN),
            ("Err", LogLevel.ERROR),
            ("crit", LogLevel.CRITICAL),
            ("fatal", LogLevel.FATAL),
        ],
    )
    def test_parse_accepts_names_and_aliases(self, text: str, expected: LogLevel) -> None:
        """parse() is case-insensitive and knows common aliases"""
        assert LogLevel.parse(text) is expected

    def test_parse_rejects_unknown_text(self) -> None:
        """Unknown text raises ValueError"""
        with pytest.raises(ValueError, match="Unknown log level"):
            LogLevel.parse("loud")

    def test_coerce_falls_back(self) -> None:
        """coerce() returns INFO or the given default for unknown text"""
        assert LogLevel.coerce("loud") is LogLevel.INFO
        assert LogLevel.coerce("loud", LogLevel.ERROR) is LogLevel.ERROR
        assert LogLevel.coerce("debug", LogLevel.ERROR) is LogLevel.DEBUG
