"""
Chrysalis unified exception hierarchy.

Every failure the core reports is a typed exception rooted at ChrysalisError,
carrying a machine-readable ``code`` and a ``details`` dict alongside the
human-readable message. Errors are grouped by concern:

- value/codec errors: SerializationError, DeserializationError, ContextConflictError
- extension lifecycle errors: ExtensionError and its subclasses
- boundary errors: FormatError, AdapterError
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ChrysalisError(Exception):
    """Root of all Chrysalis errors."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


# ================================
# Value / Codec Errors
# ================================


class SerializationError(ChrysalisError):
    """A value cannot be represented in the Value model or rendered to JSON."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        type_name: Optional[str] = None,
    ) -> None:
        details: Dict[str, Any] = {}
        if path:
            details["path"] = path
        if type_name:
            details["type"] = type_name
        super().__init__(message, code="SERIALIZATION_ERROR", details=details)
        self.path = path


class DeserializationError(ChrysalisError):
    """Input text is malformed or semantically invalid."""

    def __init__(self, message: str, *, reason: Optional[str] = None) -> None:
        details = {"reason": reason} if reason else {}
        super().__init__(message, code="DESERIALIZATION_ERROR", details=details)


class ContextConflictError(ChrysalisError):
    """A key already exists and the active conflict policy rejects overwrites."""

    def __init__(self, *, key: str, section: str) -> None:
        message = f"Key '{key}' already present in {section}"
        super().__init__(
            message,
            code="CONTEXT_CONFLICT",
            details={"key": key, "section": section},
        )
        self.key = key


# ================================
# Extension Errors
# ================================


class ExtensionError(ChrysalisError):
    """Base class for extension registry failures."""

    def __init__(self, message: str, *, code: str, name: str) -> None:
        super().__init__(message, code=code, details={"name": name})
        self.name = name


class DuplicateExtensionError(ExtensionError):
    """An extension with the same name is already registered."""

    def __init__(self, *, name: str) -> None:
        super().__init__(
            f"Extension with name '{name}' is already registered",
            code="DUPLICATE_EXTENSION",
            name=name,
        )


class ExtensionInitError(ExtensionError):
    """An extension's ``initialize()`` failed."""

    def __init__(self, *, name: str, reason: str) -> None:
        super().__init__(
            f"Failed to initialize extension '{name}': {reason}",
            code="EXTENSION_INIT_FAILED",
            name=name,
        )
        self.details["reason"] = reason


class ExtensionShutdownError(ExtensionError):
    """An extension's ``shutdown()`` failed. The extension has already been removed."""

    def __init__(self, *, name: str, reason: str) -> None:
        super().__init__(
            f"Failed to shut down extension '{name}': {reason}",
            code="EXTENSION_SHUTDOWN_FAILED",
            name=name,
        )
        self.details["reason"] = reason


class ExtensionNotFoundError(ExtensionError):
    """No extension is registered under the requested name."""

    def __init__(self, *, name: str) -> None:
        super().__init__(
            f"Extension '{name}' is not registered",
            code="EXTENSION_NOT_FOUND",
            name=name,
        )


# ================================
# Boundary Errors
# ================================


class FormatError(ChrysalisError):
    """A formatter could not render its input."""

    def __init__(self, *, formatter: str, reason: str) -> None:
        super().__init__(
            f"{formatter} failed to render entry: {reason}",
            code="FORMAT_ERROR",
            details={"formatter": formatter, "reason": reason},
        )


class AdapterError(ChrysalisError):
    """An adapter could not convert an external record into a LogEntry."""

    def __init__(self, *, adapter: str, reason: str) -> None:
        super().__init__(
            f"{adapter} could not convert record: {reason}",
            code="ADAPTER_ERROR",
            details={"adapter": adapter, "reason": reason},
        )
