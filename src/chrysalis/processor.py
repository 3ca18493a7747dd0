"""
LogProcessor: ordered filter/transform pipeline.

Filters run first, in registration order. The first filter returning a falsy
value drops the entry: later filters and all transformers are skipped, and
``process`` returns None. Surviving entries then pass through every
transformer in order. A transformer mutates the entry in place; returning a
LogEntry replaces the entry for the rest of the chain.

Exceptions raised by filters or transformers propagate unchanged.

The module also ships small factories for the filters and transformers most
pipelines need.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Union

from .entry import ConflictPolicy, LogEntry
from .extensions.base import ObserverExtension
from .levels import LogLevel
from .logging import get_logger
from .utils import flatten_value, get_nested_value, is_empty_value, truncate_string
from .values import to_mapping

if TYPE_CHECKING:
    from .config.pipeline import PipelineSettings
    from .extensions.registry import ExtensionRegistry

logger = get_logger("chrysalis.processor")

Filter = Callable[[LogEntry], Any]
Transformer = Callable[[LogEntry], Optional[LogEntry]]


class LogProcessor:
    """Ordered chain of filters followed by transformers.

    Example:
        processor = (
            LogProcessor()
            .add_filter(level_at_least(LogLevel.WARN))
            .add_transformer(redact_context("password"))
        )
        entry = processor.process(entry)
        if entry is not None:
            print(JsonFormatter().format(entry))
    """

    def __init__(self) -> None:
        self._filters: List[Filter] = []
        self._transformers: List[Transformer] = []

    @classmethod
    def from_settings(cls, settings: "PipelineSettings") -> "LogProcessor":
        """Processor with a minimum-level filter when ``settings.min_level`` is set."""
        processor = cls()
        if settings.min_level is not None:
            processor.add_filter(level_at_least(settings.min_level))
        return processor

    # ================================
    # Construction
    # ================================

    def add_filter(self, predicate: Filter) -> "LogProcessor":
        """Append a filter. Returns the processor for chaining."""
        if not callable(predicate):
            raise TypeError(f"filter must be callable, got {type(predicate).__name__}")
        self._filters.append(predicate)
        return self

    def add_transformer(self, transformer: Transformer) -> "LogProcessor":
        """Append a transformer. Returns the processor for chaining."""
        if not callable(transformer):
            raise TypeError(f"transformer must be callable, got {type(transformer).__name__}")
        self._transformers.append(transformer)
        return self

    @property
    def filters(self) -> Tuple[Filter, ...]:
        return tuple(self._filters)

    @property
    def transformers(self) -> Tuple[Transformer, ...]:
        return tuple(self._transformers)

    # ================================
    # Processing
    # ================================

    def process(self, entry: LogEntry) -> Optional[LogEntry]:
        """Run ``entry`` through the pipeline. Returns None when filtered out."""
        for predicate in self._filters:
            if not predicate(entry):
                logger.debug("entry_filtered", filter=_callable_name(predicate), entry_id=str(entry.id))
                return None

        for transformer in self._transformers:
            result = transformer(entry)
            if result is None:
                continue
            if not isinstance(result, LogEntry):
                raise TypeError(
                    f"transformer {_callable_name(transformer)} returned {type(result).__name__}, "
                    "expected LogEntry or None"
                )
            entry = result
        return entry

    def process_many(self, entries: Iterable[LogEntry]) -> Iterator[LogEntry]:
        """Yield the entries that survive the pipeline, in input order."""
        for entry in entries:
            processed = self.process(entry)
            if processed is not None:
                yield processed


def _callable_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or type(fn).__name__


# =============================================================================
# Filter Factories
# =============================================================================


def level_at_least(level: Union[LogLevel, str]) -> Filter:
    """Keep entries at or above ``level``."""
    threshold = level if isinstance(level, LogLevel) else LogLevel.parse(level)

    def level_filter(entry: LogEntry) -> bool:
        return entry.level >= threshold

    return level_filter


def has_context(key: str) -> Filter:
    """Keep entries whose context contains ``key``."""

    def context_key_filter(entry: LogEntry) -> bool:
        return key in entry.context

    return context_key_filter


_ABSENT = object()


def context_equals(path: str, value: Any) -> Filter:
    """Keep entries whose context value at dotted ``path`` equals ``value``."""

    def context_value_filter(entry: LogEntry) -> bool:
        found = get_nested_value(entry.context, path, _ABSENT)
        return found is not _ABSENT and found == value

    return context_value_filter


def message_contains(text: str, *, case_sensitive: bool = True) -> Filter:
    """Keep entries whose message contains ``text``."""
    needle = text if case_sensitive else text.lower()

    def message_filter(entry: LogEntry) -> bool:
        haystack = entry.message if case_sensitive else entry.message.lower()
        return needle in haystack

    return message_filter


# =============================================================================
# Transformer Factories
# =============================================================================


def enrich_context(*, policy: ConflictPolicy = ConflictPolicy.OVERWRITE, **fields: Any) -> Transformer:
    """Add fixed context fields to every entry.

    Values are converted once up front, so an unsupported value fails when the
    pipeline is built rather than on the first entry.
    """
    converted = to_mapping(fields, path="$.context")

    def context_enricher(entry: LogEntry) -> None:
        for key, value in converted.items():
            entry.add_context(key, value, policy=policy)

    return context_enricher


def redact_context(*keys: str, placeholder: str = "[REDACTED]") -> Transformer:
    """Replace the values of ``keys`` (top-level context keys) with ``placeholder``."""
    targets = frozenset(keys)

    def context_redactor(entry: LogEntry) -> None:
        for key in targets:
            if key in entry.context:
                entry.context[key] = placeholder

    return context_redactor


def truncate_context_strings(max_length: int) -> Transformer:
    """Shorten top-level string context values longer than ``max_length``."""
    if max_length < 0:
        raise ValueError("max_length must be >= 0")

    def context_truncator(entry: LogEntry) -> None:
        for key, value in entry.context.items():
            if isinstance(value, str) and len(value) > max_length:
                entry.context[key] = truncate_string(value, max_length)

    return context_truncator


def flatten_context() -> Transformer:
    """Rewrite nested context into dotted keys (``{"a": {"b": 1}}`` -> ``{"a.b": 1}``)."""

    def context_flattener(entry: LogEntry) -> None:
        entry.context = flatten_value(entry.context)

    return context_flattener


def drop_empty_context() -> Transformer:
    """Remove context keys holding None, empty strings, lists or objects."""

    def empty_context_dropper(entry: LogEntry) -> None:
        entry.context = {key: value for key, value in entry.context.items() if not is_empty_value(value)}

    return empty_context_dropper


def notify_observers(registry: "ExtensionRegistry") -> Transformer:
    """Let every enabled ObserverExtension in ``registry`` see the entry."""

    def observer_notifier(entry: LogEntry) -> None:
        for extension in registry.enabled():
            if isinstance(extension, ObserverExtension):
                extension.observe(entry)

    return observer_notifier
