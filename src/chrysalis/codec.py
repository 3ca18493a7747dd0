"""
JSON codec glue.

Library: orjson for fast, deterministic JSON serialization. Key order follows
insertion order (no key sorting), which is what makes LogEntry output stable.
"""

from __future__ import annotations

from typing import Any, Union

import orjson

from .errors import DeserializationError, SerializationError
from .values import Value, to_value

_COMPACT = orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC
_PRETTY = _COMPACT | orjson.OPT_INDENT_2


def dumps(value: Any, *, pretty: bool = False) -> str:
    """Serialize ``value`` to JSON text.

    The value is normalized through :func:`to_value` first, so anything orjson
    would silently degrade (NaN becomes ``null``) is rejected instead.

    Raises:
        SerializationError: If ``value`` has no Value representation.
    """
    normalized = to_value(value)
    try:
        return orjson.dumps(normalized, option=_PRETTY if pretty else _COMPACT).decode()
    except orjson.JSONEncodeError as exc:
        raise SerializationError(f"JSON encoding failed: {exc}") from exc


def loads(text: Union[str, bytes, bytearray]) -> Value:
    """Parse JSON text into a Value.

    Raises:
        DeserializationError: On malformed JSON or a non-text input.
    """
    if not isinstance(text, (str, bytes, bytearray)):
        raise DeserializationError(
            f"Expected JSON text, got {type(text).__name__}",
            reason="not_text",
        )
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError as exc:
        raise DeserializationError(f"Malformed JSON: {exc}", reason="malformed") from exc
