"""
The Serializable capability.

A type is Serializable when it can produce the canonical JSON representation
of itself (and, for models, parse it back). LogEntry implements it natively;
user-defined log types get it by deriving from SerializableModel, which maps
fields one by one through the Value model.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Protocol, Type, TypeVar, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationError

from . import codec
from .errors import DeserializationError
from .values import Value, to_mapping

ModelT = TypeVar("ModelT", bound="SerializableModel")


@runtime_checkable
class Serializable(Protocol):
    """Anything that can render itself as a Value and as JSON text."""

    def to_value(self) -> Value: ...

    def to_json(self) -> str: ...


class SerializableModel(BaseModel):
    """Base class for structured log types with a JSON round trip.

    ``Model.from_json(m.to_json()) == m`` holds for every instance whose
    fields are representable as Values.
    """

    model_config = ConfigDict(extra="forbid")

    def to_value(self) -> Dict[str, Value]:
        """Field-by-field Value mapping, in declaration order."""
        return to_mapping({name: getattr(self, name) for name in type(self).model_fields})

    def to_json(self) -> str:
        return codec.dumps(self.to_value())

    def to_pretty_json(self) -> str:
        return codec.dumps(self.to_value(), pretty=True)

    @classmethod
    def from_value(cls: Type[ModelT], data: Any) -> ModelT:
        """Build an instance from an already-parsed Value mapping.

        Raises:
            DeserializationError: If ``data`` is not a mapping or fails
                validation (missing field, unknown field, bad type).
        """
        if not isinstance(data, Mapping):
            raise DeserializationError(
                f"{cls.__name__} expects a JSON object, got {type(data).__name__}",
                reason="not_an_object",
            )
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise DeserializationError(
                f"Invalid {cls.__name__}: {exc.error_count()} validation error(s): "
                + "; ".join(_describe(error) for error in exc.errors()),
                reason="validation",
            ) from exc

    @classmethod
    def from_json(cls: Type[ModelT], text: Union[str, bytes]) -> ModelT:
        return cls.from_value(codec.loads(text))


def _describe(error: Dict[str, Any]) -> str:
    location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
    return f"{location}: {error.get('msg', 'invalid')}"


def to_json(obj: Any, *, pretty: bool = False) -> str:
    """Serialize any structural object (Serializable, model, dataclass, mapping)."""
    return codec.dumps(obj, pretty=pretty)


def from_json(text: Union[str, bytes]) -> Value:
    """Parse JSON text into a plain Value."""
    return codec.loads(text)
