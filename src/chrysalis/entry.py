"""
The canonical log entry.

A LogEntry is built once (directly or by an Adapter), enriched through
``add_context``/``add_metadata`` and pipeline transformers, and finally handed
to a Formatter. ``id``, ``timestamp`` and ``message`` are frozen; ``context``
and ``metadata`` only ever hold Values.

Wire shape (key order is stable)::

    {
        "id": "1b4e28ba-2fa1-11d2-883f-0016d3cca427",
        "timestamp": "2025-10-24T15:30:45.123456Z",
        "level": "info",
        "message": "boot",
        "context": {"pid": 100},
        "source": {"file": "main.py", "line": 12},
        "metadata": {}
    }

``source`` is omitted when unset.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union
from uuid import UUID, uuid4

from pydantic import ConfigDict, Field, field_validator

from .errors import ContextConflictError, DeserializationError, SerializationError
from .levels import LogLevel
from .serializable import SerializableModel
from .utils import ensure_utc, format_timestamp, get_nested_value, merge_values, utc_now
from .values import Value, to_mapping, to_value

_REQUIRED_WIRE_FIELDS = ("id", "timestamp", "level", "message")


class ConflictPolicy(str, Enum):
    """What ``add_context``/``add_metadata`` do when the key already exists."""

    OVERWRITE = "overwrite"  # last write wins, key keeps its original position
    KEEP_FIRST = "keep_first"
    REJECT = "reject"


class SourceLocation(SerializableModel):
    """Where a log event originated."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    file: str
    line: int = Field(ge=0)


class LogEntry(SerializableModel):
    """Canonical structured log event."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: UUID = Field(default_factory=uuid4, frozen=True)
    timestamp: datetime = Field(default_factory=utc_now, frozen=True)
    level: LogLevel = LogLevel.INFO
    message: str = Field(frozen=True)
    context: Dict[str, Any] = Field(default_factory=dict)
    source: Optional[SourceLocation] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("context", "metadata", mode="before")
    @classmethod
    def validate_values(cls, value: Any) -> Dict[str, Value]:
        try:
            return to_mapping(value)
        except SerializationError as exc:
            # pydantic only wraps ValueError into a ValidationError
            raise ValueError(exc.message) from exc

    # ================================
    # Construction
    # ================================

    @classmethod
    def new(cls, message: str, level: LogLevel = LogLevel.INFO) -> "LogEntry":
        """Fresh entry: new id, current timestamp, empty context and metadata."""
        return cls(message=message, level=level)

    def with_source(self, file: str, line: int) -> "LogEntry":
        """Set (or replace) the source location."""
        self.source = SourceLocation(file=file, line=line)
        return self

    def with_thread(self, thread_id: Union[str, int]) -> "LogEntry":
        """Record the originating thread or task under ``metadata["thread"]``."""
        self.metadata["thread"] = str(thread_id)
        return self

    # ================================
    # Context & Metadata
    # ================================

    def add_context(
        self,
        key: str,
        value: Any,
        *,
        policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
    ) -> "LogEntry":
        """Attach ``value`` under ``key`` in the context.

        With the default policy a repeated key is overwritten (last write
        wins). The entry is left untouched when conversion fails.

        Raises:
            SerializationError: If ``key`` is not a string or ``value`` has
                no Value representation.
            ContextConflictError: If ``key`` exists and ``policy`` is REJECT.
        """
        _insert(self.context, "context", key, value, policy)
        return self

    def add_metadata(
        self,
        key: str,
        value: Any,
        *,
        policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
    ) -> "LogEntry":
        """Same as :meth:`add_context`, for the metadata map."""
        _insert(self.metadata, "metadata", key, value, policy)
        return self

    def merge_context(self, values: Mapping[str, Any], *, deep: bool = False) -> "LogEntry":
        """Add several context keys at once.

        Every value is converted before any is applied, so a failure leaves
        the context unchanged. With ``deep=True`` nested mappings are merged
        instead of replaced.
        """
        converted = to_mapping(values, path="$.context")
        for key, item in converted.items():
            if deep and key in self.context:
                self.context[key] = merge_values(self.context[key], item)
            else:
                self.context[key] = item
        return self

    def get_context(self, path: str, default: Any = None) -> Any:
        """Look up a dotted path (``"user.roles.0"``) inside the context."""
        return get_nested_value(self.context, path, default)

    # ================================
    # Serialization
    # ================================

    def to_value(self) -> Dict[str, Value]:
        try:
            data: Dict[str, Value] = {
                "id": str(self.id),
                "timestamp": format_timestamp(self.timestamp),
                "level": self.level.value,
                "message": self.message,
                "context": to_mapping(self.context, path="$.context"),
            }
            if self.source is not None:
                data["source"] = self.source.to_value()
            data["metadata"] = to_mapping(self.metadata, path="$.metadata")
        except SerializationError as exc:
            raise SerializationError(
                f"LogEntry {self.id} holds an invalid value: {exc.message}",
                path=exc.path,
            ) from exc
        return data

    @classmethod
    def from_value(cls, data: Any) -> "LogEntry":
        if isinstance(data, Mapping):
            missing = [name for name in _REQUIRED_WIRE_FIELDS if name not in data]
            if missing:
                raise DeserializationError(
                    f"LogEntry is missing required field(s): {', '.join(missing)}",
                    reason="missing_field",
                )
        return super().from_value(data)


def _insert(
    target: Dict[str, Value],
    section: str,
    key: str,
    value: Any,
    policy: ConflictPolicy,
) -> None:
    if not isinstance(key, str):
        raise SerializationError(
            f"{section} keys must be strings, got {type(key).__name__}",
            type_name=type(key).__name__,
        )
    policy = ConflictPolicy(policy)
    converted = to_value(value, path=f"$.{section}.{key}")
    if key in target:
        if policy is ConflictPolicy.KEEP_FIRST:
            return
        if policy is ConflictPolicy.REJECT:
            raise ContextConflictError(key=key, section=section)
    target[key] = converted
