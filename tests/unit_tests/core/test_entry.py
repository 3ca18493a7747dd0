"""
LogEntry unit tests.

Covers construction, context/metadata insertion policies, the wire format
and the JSON round trip.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest
from pydantic import ValidationError

from chrysalis.entry import ConflictPolicy, LogEntry, SourceLocation
from chrysalis.errors import ContextConflictError, DeserializationError, SerializationError
from chrysalis.levels import LogLevel


class TestConstruction:
    """LogEntry.new() and builders"""

    def test_new_entry_defaults(self) -> None:
        """Fresh id, UTC timestamp, empty maps, no source"""
        before = datetime.now(timezone.utc)
        entry = LogEntry.new("boot", LogLevel.INFO)
        assert isinstance(entry.id, UUID)
        assert entry.timestamp.tzinfo is not None
        assert entry.timestamp >= before
        assert entry.context == {}
        assert entry.metadata == {}
        assert entry.source is None

    def test_ids_are_unique(self) -> None:
        """Two entries never share an id"""
        assert LogEntry.new("a").id != LogEntry.new("a").id

    def test_default_level_is_info(self) -> None:
        """Level defaults to INFO"""
        assert LogEntry.new("x").level is LogLevel.INFO

    def test_naive_timestamp_taken_as_utc(self) -> None:
        """Naive datetimes are interpreted as UTC"""
        entry = LogEntry(message="x", timestamp=datetime(2025, 1, 1, 12, 0, 0))
        assert entry.timestamp == datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_offset_timestamp_normalized(self) -> None:
        """Aware datetimes are converted to UTC"""
        plus_two = timezone(timedelta(hours=2))
        entry = LogEntry(message="x", timestamp=datetime(2025, 1, 1, 14, 0, 0, tzinfo=plus_two))
        assert entry.timestamp.utcoffset() == timedelta(0)
        assert entry.timestamp.hour == 12

    def test_with_source_and_thread(self) -> None:
        """Builders set the source location and thread metadata"""
        entry = LogEntry.new("x").with_source("main.py", 12).with_thread(7)
        assert entry.source == SourceLocation(file="main.py", line=12)
        assert entry.metadata["thread"] == "7"

    def test_negative_line_rejected(self) -> None:
        """Line numbers are non-negative"""
        with pytest.raises(ValidationError):
            LogEntry.new("x").with_source("main.py", -1)

    def test_frozen_fields(self) -> None:
        """id, timestamp and message cannot be reassigned"""
        entry = LogEntry.new("x")
        with pytest.raises(ValidationError):
            entry.message = "changed"
        with pytest.raises(ValidationError):
            entry.timestamp = datetime.now(timezone.utc)

    def test_level_can_change(self) -> None:
        """Level is mutable and validated"""
        entry = LogEntry.new("x")
        entry.level = LogLevel.ERROR
        assert entry.level is LogLevel.ERROR
        with pytest.raises(ValidationError):
            entry.level = "loud"


class TestContext:
    """add_context / add_metadata"""

    def test_boot_pid_scenario(self, boot_entry: LogEntry) -> None:
        """INFO 'boot' with pid=100 renders level, message and context"""
        data = json.loads(boot_entry.to_json())
        assert data["level"] == "info"
        assert data["message"] == "boot"
        assert data["context"] == {"pid": 100}

    def test_last_write_wins(self) -> None:
        """A repeated key keeps a single entry holding the second value"""
        entry = LogEntry.new("x").add_context("k", 1).add_context("other", 0).add_context("k", 2)
        assert entry.context == {"k": 2, "other": 0}
        assert list(entry.context) == ["k", "other"]

    def test_keep_first_policy(self) -> None:
        """KEEP_FIRST ignores later writes"""
        entry = LogEntry.new("x").add_context("k", 1)
        entry.add_context("k", 2, policy=ConflictPolicy.KEEP_FIRST)
        assert entry.context["k"] == 1

    def test_reject_policy(self) -> None:
        """REJECT raises and leaves the value untouched"""
        entry = LogEntry.new("x").add_context("k", 1)
        with pytest.raises(ContextConflictError) as exc_info:
            entry.add_context("k", 2, policy="reject")
        assert exc_info.value.code == "CONTEXT_CONFLICT"
        assert exc_info.value.details == {"key": "k", "section": "context"}
        assert entry.context["k"] == 1

    def test_unsupported_value_leaves_entry_unchanged(self) -> None:
        """A failed conversion does not modify the context"""
        entry = LogEntry.new("x").add_context("ok", 1)
        with pytest.raises(SerializationError):
            entry.add_context("ratio", math.nan)
        assert entry.context == {"ok": 1}

    def test_non_string_key_rejected(self) -> None:
        """Context keys must be strings"""
        with pytest.raises(SerializationError, match="keys must be strings"):
            LogEntry.new("x").add_context(1, "one")  # type: ignore[arg-type]

    def test_metadata_is_separate(self) -> None:
        """Metadata has its own map"""
        entry = LogEntry.new("x").add_metadata("host", "web-1")
        assert entry.metadata == {"host": "web-1"}
        assert entry.context == {}

    def test_nan_rejected_at_construction(self) -> None:
        """Invalid values in the constructor fail validation"""
        with pytest.raises(ValidationError):
            LogEntry(message="x", context={"ratio": math.nan})

    def test_merge_context_shallow_and_deep(self) -> None:
        """merge_context replaces or deep-merges nested objects"""
        entry = LogEntry.new("x").add_context("user", {"id": 1, "name": "ada"})
        entry.merge_context({"user": {"name": "grace"}}, deep=True)
        assert entry.context["user"] == {"id": 1, "name": "grace"}
        entry.merge_context({"user": {"name": "alan"}})
        assert entry.context["user"] == {"name": "alan"}

    def test_merge_context_is_atomic(self) -> None:
        """A bad value aborts the whole merge"""
        entry = LogEntry.new("x")
        with pytest.raises(SerializationError):
            entry.merge_context({"a": 1, "b": math.inf})
        assert entry.context == {}

    def test_get_context_path(self) -> None:
        """Dotted paths reach into nested values"""
        entry = LogEntry.new("x").add_context("user", {"roles": ["admin", "ops"]})
        assert entry.get_context("user.roles.1") == "ops"
        assert entry.get_context("user.missing", "n/a") == "n/a"


class TestWireFormat:
    """to_value / to_json / from_json"""

    def test_key_order_and_source_omitted(self) -> None:
        """Keys follow the wire order; source is absent when unset"""
        data = LogEntry.new("x").to_value()
        assert list(data) == ["id", "timestamp", "level", "message", "context", "metadata"]

    def test_source_included_when_set(self) -> None:
        """source sits between context and metadata"""
        data = LogEntry.new("x").with_source("main.py", 3).to_value()
        assert list(data) == ["id", "timestamp", "level", "message", "context", "source", "metadata"]
        assert data["source"] == {"file": "main.py", "line": 3}

    def test_timestamp_text(self) -> None:
        """Timestamps render as RFC 3339 UTC with a Z suffix"""
        entry = LogEntry(message="x", timestamp=datetime(2025, 10, 24, 15, 30, 45, 123456, tzinfo=timezone.utc))
        assert entry.to_value()["timestamp"] == "2025-10-24T15:30:45.123456Z"

    def test_invalid_value_injected_after_construction(self) -> None:
        """A context value mutated in place is caught when serializing"""
        entry = LogEntry.new("x").add_context("ratio", 0.5)
        entry.context["ratio"] = math.nan
        with pytest.raises(SerializationError) as exc_info:
            entry.to_json()
        assert exc_info.value.path == "$.context.ratio"
        assert str(entry.id) in exc_info.value.message

    def test_round_trip(self) -> None:
        """from_json(to_json(e)) == e"""
        entry = (
            LogEntry.new("request done", LogLevel.WARN)
            .add_context("status", 503)
            .add_context("tags", ["a", "b"])
            .add_context("timing", {"ms": 12.5})
            .add_metadata("host", "web-1")
            .with_source("app.py", 42)
        )
        assert LogEntry.from_json(entry.to_json()) == entry
        assert LogEntry.from_json(entry.to_pretty_json()) == entry

    def test_malformed_json(self) -> None:
        """Malformed text raises DeserializationError"""
        with pytest.raises(DeserializationError) as exc_info:
            LogEntry.from_json("{not json")
        assert exc_info.value.details["reason"] == "malformed"

    def test_non_object_json(self) -> None:
        """A JSON array is not an entry"""
        with pytest.raises(DeserializationError, match="expects a JSON object"):
            LogEntry.from_json("[1, 2]")

    def test_missing_field(self) -> None:
        """Required wire fields must be present"""
        data = LogEntry.new("x").to_value()
        del data["message"]
        with pytest.raises(DeserializationError) as exc_info:
            LogEntry.from_value(data)
        assert exc_info.value.details["reason"] == "missing_field"
        assert "message" in exc_info.value.message

    def test_unknown_field(self) -> None:
        """Unknown top-level fields are rejected"""
        data = LogEntry.new("x").to_value()
        data["extra"] = 1
        with pytest.raises(DeserializationError, match="extra"):
            LogEntry.from_value(data)

    def test_unknown_level(self) -> None:
        """Unknown level names are rejected"""
        data = LogEntry.new("x").to_value()
        data["level"] = "loud"
        with pytest.raises(DeserializationError) as exc_info:
            LogEntry.from_value(data)
        assert exc_info.value.details["reason"] == "validation"
