"""
Small helpers shared across the core: timestamps, field names, nested values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict

# ================================
# Timestamps
# ================================


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize ``dt`` to UTC. Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """RFC 3339 text with microsecond precision and a ``Z`` suffix."""
    return ensure_utc(dt).isoformat(timespec="microseconds").replace("+00:00", "Z")


def format_timestamp_custom(dt: datetime, fmt: str) -> str:
    """Render ``dt`` (in UTC) with a ``strftime`` pattern."""
    return ensure_utc(dt).strftime(fmt)


# ================================
# Field Names
# ================================

_UNSAFE_FIELD_CHARS = re.compile(r"[.\s/\\:?#\[\]@()\"'=]")


def sanitize_field_name(name: str) -> str:
    """Replace characters that confuse JSON paths or log indexers with ``_``."""
    return _UNSAFE_FIELD_CHARS.sub("_", name)


def truncate_string(text: str, max_length: int) -> str:
    """Cut ``text`` to ``max_length`` characters, marking the cut with ``...``."""
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."


# ================================
# Nested Values
# ================================

_MISSING = object()


def get_nested_value(value: Any, path: str, default: Any = None) -> Any:
    """Walk a dot-separated ``path`` through mappings and lists.

    List elements are addressed by their index (``"roles.0"``). Returns
    ``default`` as soon as a step cannot be followed.
    """
    current = value
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, list):
            if not part.isdigit() or int(part) >= len(current):
                return default
            current = current[int(part)]
        else:
            return default
        if current is _MISSING:
            return default
    return current


def merge_values(base: Any, update: Any) -> Any:
    """Deep-merge ``update`` into a copy of ``base``.

    Mappings are merged key by key; for any other pair the update wins.
    """
    if isinstance(base, Mapping) and isinstance(update, Mapping):
        result = dict(base)
        for key, item in update.items():
            if key in result:
                result[key] = merge_values(result[key], item)
            else:
                result[key] = item
        return result
    return update


def flatten_value(value: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings into dotted keys.

    List elements get ``key[i]`` entries and the full list is kept under the
    list's own key as well.
    """
    result: Dict[str, Any] = {}
    if isinstance(value, Mapping):
        for key, item in value.items():
            new_key = f"{prefix}.{key}" if prefix else str(key)
            if isinstance(item, Mapping):
                result.update(flatten_value(item, new_key))
            elif isinstance(item, list):
                for index, element in enumerate(item):
                    element_key = f"{new_key}[{index}]"
                    if isinstance(element, Mapping):
                        result.update(flatten_value(element, element_key))
                    else:
                        result[element_key] = element
                result[new_key] = item
            else:
                result[new_key] = item
    elif prefix:
        result[prefix] = value
    return result


def is_empty_value(value: Any) -> bool:
    """True for None, empty strings, empty lists and empty mappings."""
    if value is None:
        return True
    if isinstance(value, (str, list, Mapping)):
        return len(value) == 0
    return False
