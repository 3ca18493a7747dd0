"""
ExtensionRegistry: named, type-indexed collection of extensions.

Bounded Context: extension lifecycle and lookup (not dispatch).
Responsibilities:
  - Register extensions under unique names, initializing them on the way in
  - Look extensions up by name or by type (with a checked type tag)
  - Shut extensions down on the way out

Threading: one re-entrant lock guards the table, so an extension may use the
registry from inside its own ``initialize``/``shutdown``. Lookups return
snapshots.

Registries are ordinary objects: construct one where it is needed and pass it
along. There is no process-wide instance.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Type, TypeVar

from chrysalis.errors import (
    DuplicateExtensionError,
    ExtensionInitError,
    ExtensionNotFoundError,
    ExtensionShutdownError,
)
from chrysalis.logging import get_logger

from .base import Extension

logger = get_logger("chrysalis.extensions.registry")

ExtT = TypeVar("ExtT", bound=Extension)


@dataclass(frozen=True)
class _Registration:
    extension: Extension
    type_tag: type


class ExtensionRegistry:
    """Registry owning zero or more extensions, one per unique name.

    Example:
        registry = ExtensionRegistry()
        registry.register(LevelCounterExtension())

        counter = registry.get_by_type(LevelCounterExtension)
        if counter is not None and counter.is_enabled():
            counter.observe(entry)

        registry.unregister("level_counter")
    """

    def __init__(self) -> None:
        self._registrations: Dict[str, _Registration] = {}
        self._lock = threading.RLock()

    # ================================
    # Lifecycle
    # ================================

    def register(self, extension: ExtT) -> ExtT:
        """Take ownership of ``extension`` and initialize it.

        Raises:
            TypeError: If ``extension`` is not an Extension.
            ValueError: If its name is empty.
            DuplicateExtensionError: If the name is already taken. The new
                extension is not initialized.
            ExtensionInitError: If ``initialize()`` raised. The extension is
                not retained.
        """
        if not isinstance(extension, Extension):
            raise TypeError(f"Expected an Extension, got {type(extension).__name__}")
        name = extension.name
        if not isinstance(name, str) or not name:
            raise ValueError("Extension name must be a non-empty string")

        with self._lock:
            if name in self._registrations:
                raise DuplicateExtensionError(name=name)
            try:
                extension.initialize()
            except Exception as exc:
                logger.warning("extension_init_failed", name=name, error=str(exc))
                raise ExtensionInitError(name=name, reason=str(exc)) from exc
            self._registrations[name] = _Registration(extension=extension, type_tag=type(extension))

        logger.debug("extension_registered", name=name, type=type(extension).__name__)
        return extension

    def unregister(self, name: str) -> Extension:
        """Shut down and remove the extension called ``name``.

        The extension is removed even when ``shutdown()`` fails; the failure
        is then reported as ExtensionShutdownError.

        Raises:
            ExtensionNotFoundError: If no extension has that name.
            ExtensionShutdownError: If ``shutdown()`` raised.
        """
        failure: Optional[Exception] = None
        with self._lock:
            registration = self._registrations.get(name)
            if registration is None:
                raise ExtensionNotFoundError(name=name)
            try:
                registration.extension.shutdown()
            except Exception as exc:
                failure = exc
            finally:
                del self._registrations[name]

        if failure is not None:
            logger.warning("extension_shutdown_failed", name=name, error=str(failure))
            raise ExtensionShutdownError(name=name, reason=str(failure)) from failure
        logger.debug("extension_unregistered", name=name)
        return registration.extension

    def initialize_all(self) -> None:
        """Re-run ``initialize()`` on every extension, in registration order.

        Raises:
            ExtensionInitError: For the first extension that fails; the
                remaining ones are not initialized.
        """
        for name, extension in self._snapshot():
            try:
                extension.initialize()
            except Exception as exc:
                logger.warning("extension_init_failed", name=name, error=str(exc))
                raise ExtensionInitError(name=name, reason=str(exc)) from exc

    def shutdown_all(self) -> None:
        """Run ``shutdown()`` on every extension, newest first.

        Every extension gets its shutdown call; the first failure is raised
        afterwards as ExtensionShutdownError. Extensions stay registered.
        """
        first_failure: Optional[ExtensionShutdownError] = None
        for name, extension in reversed(self._snapshot()):
            try:
                extension.shutdown()
            except Exception as exc:
                logger.warning("extension_shutdown_failed", name=name, error=str(exc))
                if first_failure is None:
                    first_failure = ExtensionShutdownError(name=name, reason=str(exc))
                    first_failure.__cause__ = exc
        if first_failure is not None:
            raise first_failure

    # ================================
    # Lookup
    # ================================

    def get_by_name(self, name: str) -> Optional[Extension]:
        with self._lock:
            registration = self._registrations.get(name)
        return registration.extension if registration is not None else None

    get = get_by_name

    def get_by_type(self, ext_type: Type[ExtT], name: Optional[str] = None) -> Optional[ExtT]:
        """Return an extension of type ``ext_type`` (or a subclass), else None.

        Without ``name`` the first matching extension in registration order
        is returned. With ``name`` only the extension registered under that
        name is considered. A type mismatch is never an error.
        """
        if not isinstance(ext_type, type):
            return None
        with self._lock:
            if name is None:
                candidates = list(self._registrations.values())
            else:
                registration = self._registrations.get(name)
                candidates = [registration] if registration is not None else []
        for registration in candidates:
            if issubclass(registration.type_tag, ext_type) and isinstance(registration.extension, ext_type):
                return registration.extension
        return None

    def names(self) -> List[str]:
        with self._lock:
            return list(self._registrations)

    def enabled(self) -> List[Extension]:
        """Extensions whose own flag is currently set, in registration order."""
        return [extension for _, extension in self._snapshot() if extension.is_enabled()]

    def _snapshot(self) -> List[tuple[str, Extension]]:
        with self._lock:
            return [(name, registration.extension) for name, registration in self._registrations.items()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._registrations)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._registrations

    def __iter__(self) -> Iterator[Extension]:
        return iter([extension for _, extension in self._snapshot()])

    def __enter__(self) -> "ExtensionRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown_all()
