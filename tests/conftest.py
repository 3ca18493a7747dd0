"""
Shared fixtures for the Chrysalis test suite.
"""

from __future__ import annotations

import io

import pytest

from chrysalis.config.logging import LogFormat, LoggingSettings
from chrysalis.entry import LogEntry
from chrysalis.extensions import ExtensionRegistry
from chrysalis.levels import LogLevel
from chrysalis.logging import configure_logging, reset_logging


@pytest.fixture(autouse=True)
def diagnostics():
    """Route the package's own diagnostics into an in-memory JSON stream."""
    stream = io.StringIO()
    configure_logging(LoggingSettings(level="DEBUG", format=LogFormat.JSON), stream=stream)
    yield stream
    reset_logging()


@pytest.fixture
def boot_entry() -> LogEntry:
    """INFO entry 'boot' with context pid=100."""
    return LogEntry.new("boot", LogLevel.INFO).add_context("pid", 100)


@pytest.fixture
def registry():
    """Fresh registry, shut down after the test."""
    registry = ExtensionRegistry()
    yield registry
    for name in registry.names():
        registry.unregister(name)
