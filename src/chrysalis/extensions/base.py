"""
Extension capability.

Extensions are named, stateful plugin objects with an enabled flag and an
initialize/shutdown lifecycle. The set of extensions is open: applications
add their own by subclassing Extension (or ObserverExtension) without
touching the registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from chrysalis.entry import LogEntry


class Extension(ABC):
    """Abstract base class for extensions.

    Subclasses provide ``name``; ``initialize`` and ``shutdown`` default to
    no-ops. Extensions start enabled.
    """

    _enabled: bool = True

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name within a registry."""
        ...

    def initialize(self) -> None:
        """Acquire resources. Raise to refuse registration."""

    def shutdown(self) -> None:
        """Release resources."""

    def is_enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)


class ObserverExtension(Extension):
    """An extension that wants to see entries as they pass through the pipeline."""

    @abstractmethod
    def observe(self, entry: LogEntry) -> None:
        """Inspect ``entry``. Must not keep a reference to it."""
        ...
