"""
Helper function unit tests.
"""

from __future__ import annotations

from datetime import datetime, timezone

from chrysalis.utils import (
    flatten_value,
    format_timestamp,
    get_nested_value,
    is_empty_value,
    merge_values,
    sanitize_field_name,
    truncate_string,
)


class TestStrings:
    """Field names and truncation"""

    def test_sanitize_field_name(self) -> None:
        """Path and whitespace characters become underscores"""
        assert sanitize_field_name("user.name") == "user_name"
        assert sanitize_field_name("a b/c") == "a_b_c"
        assert sanitize_field_name("plain_key") == "plain_key"

    def test_truncate_string(self) -> None:
        """Long text is cut and marked with an ellipsis"""
        assert truncate_string("hello world", 5) == "he..."
        assert truncate_string("hello", 5) == "hello"
        assert truncate_string("hello", 2) == "he"


class TestTimestamps:
    """Timestamp helpers"""

    def test_format_timestamp_naive_is_utc(self) -> None:
        """Naive datetimes are rendered as UTC"""
        assert format_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.000000Z"

    def test_format_timestamp_aware(self) -> None:
        """Aware UTC datetimes get a Z suffix"""
        assert format_timestamp(datetime(2025, 1, 2, tzinfo=timezone.utc)).endswith("Z")


class TestNestedValues:
    """Nested lookups, merge, flatten"""

    def test_get_nested_value(self) -> None:
        """Dotted paths walk mappings and list indices"""
        data = {"a": {"b": [10, {"c": "deep"}]}}
        assert get_nested_value(data, "a.b.0") == 10
        assert get_nested_value(data, "a.b.1.c") == "deep"
        assert get_nested_value(data, "a.x", "missing") == "missing"
        assert get_nested_value(data, "a.b.9") is None

    def test_merge_values(self) -> None:
        """Mappings merge recursively, other values are replaced"""
        base = {"a": {"x": 1, "y": 2}, "b": [1]}
        merged = merge_values(base, {"a": {"y": 3}, "b": [2]})
        assert merged == {"a": {"x": 1, "y": 3}, "b": [2]}
        assert base["a"]["y"] == 2

    def test_flatten_value(self) -> None:
        """Nested objects become dotted keys; lists keep their full value too"""
        flat = flatten_value({"user": {"id": 1, "tags": ["a", "b"]}})
        assert flat == {
            "user.id": 1,
            "user.tags[0]": "a",
            "user.tags[1]": "b",
            "user.tags": ["a", "b"],
        }

    def test_is_empty_value(self) -> None:
        """None and empty containers are empty; zero and False are not"""
        assert is_empty_value(None)
        assert is_empty_value("")
        assert is_empty_value([])
        assert is_empty_value({})
        assert not is_empty_value(0)
        assert not is_empty_value(False)
