"""
Type-erased structural values.

The Value model is the closed set of JSON-native Python builtins::

    None | bool | int | float | str | list[Value] | dict[str, Value]

Everything that enters a LogEntry's context or metadata passes through
:func:`to_value`, which either returns a Value or raises SerializationError.
Values that cannot survive a JSON round trip (NaN, infinities, integers wider
than 64 bits, unordered sets, bytes) are rejected here, at construction time,
so that serialization later never fails.
"""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union, cast
from uuid import UUID

from pydantic import BaseModel

from .errors import SerializationError
from .utils import format_timestamp

Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]

# orjson serializes integers up to 64 bits (signed or unsigned)
INT_MIN = -(2**63)
INT_MAX = 2**64 - 1


def to_value(obj: Any, *, path: str = "$") -> Value:
    """Convert ``obj`` into the Value model.

    Args:
        obj: Any supported Python object (see module docstring).
        path: Location of ``obj`` inside the enclosing structure, used in
            error messages.

    Returns:
        A freshly built Value; containers are always copied.

    Raises:
        SerializationError: If ``obj`` (or anything nested in it) has no
            lossless Value representation.
    """
    return _convert(obj, path, set())


def _convert(obj: Any, path: str, seen: Set[int]) -> Value:
    if obj is None:
        return None
    if isinstance(obj, Enum):
        return _convert(obj.value, path, seen)
    if isinstance(obj, bool):
        return obj
    if isinstance(obj, int):
        if not INT_MIN <= obj <= INT_MAX:
            raise SerializationError(
                f"Integer at {path} does not fit in 64 bits",
                path=path,
                type_name="int",
            )
        return int(obj)
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise SerializationError(
                f"Non-finite float at {path} ({obj!r}) cannot be represented",
                path=path,
                type_name="float",
            )
        return float(obj)
    if isinstance(obj, str):
        return str(obj)
    if isinstance(obj, Decimal):
        if not obj.is_finite():
            raise SerializationError(
                f"Non-finite decimal at {path} cannot be represented",
                path=path,
                type_name="Decimal",
            )
        return _convert(float(obj), path, seen)
    if isinstance(obj, datetime):
        return format_timestamp(obj)
    if isinstance(obj, (date, time)):
        return obj.isoformat()
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        raise SerializationError(
            f"Binary data at {path} is not supported; encode it as text first",
            path=path,
            type_name=type(obj).__name__,
        )
    if isinstance(obj, (set, frozenset)):
        raise SerializationError(
            f"Unordered set at {path} has no deterministic representation",
            path=path,
            type_name=type(obj).__name__,
        )

    # Containers and structured objects from here on
    marker = id(obj)
    if marker in seen:
        raise SerializationError(f"Cyclic reference at {path}", path=path, type_name=type(obj).__name__)
    seen.add(marker)
    try:
        return _convert_structured(obj, path, seen)
    finally:
        seen.discard(marker)


def _convert_structured(obj: Any, path: str, seen: Set[int]) -> Value:
    if isinstance(obj, Mapping):
        result: Dict[str, Value] = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise SerializationError(
                    f"Mapping key {key!r} at {path} is not a string",
                    path=path,
                    type_name=type(key).__name__,
                )
            result[str(key)] = _convert(item, f"{path}.{key}", seen)
        return result
    if isinstance(obj, (list, tuple)):
        return [_convert(item, f"{path}[{index}]", seen) for index, item in enumerate(obj)]

    to_value_method = getattr(obj, "to_value", None)
    if callable(to_value_method) and not isinstance(obj, type):
        return _convert(to_value_method(), path, seen)
    if isinstance(obj, BaseModel):
        return _convert(obj.model_dump(), path, seen)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            field.name: _convert(getattr(obj, field.name), f"{path}.{field.name}", seen)
            for field in dataclasses.fields(obj)
        }

    raise SerializationError(
        f"Unsupported type {type(obj).__name__} at {path}",
        path=path,
        type_name=type(obj).__name__,
    )


def to_mapping(obj: Optional[Mapping[str, Any]], *, path: str = "$") -> Dict[str, Value]:
    """Convert a mapping of arbitrary values into a Value mapping."""
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise SerializationError(
            f"Expected a mapping at {path}, got {type(obj).__name__}",
            path=path,
            type_name=type(obj).__name__,
        )
    return cast(Dict[str, Value], to_value(obj, path=path))
