"""
Extension model: capability base classes, the registry and reference extensions.
"""

from .base import Extension, ObserverExtension
from .builtin import LevelCounterExtension, TimestampFormatExtension
from .registry import ExtensionRegistry

__all__ = [
    "Extension",
    "ObserverExtension",
    "ExtensionRegistry",
    "LevelCounterExtension",
    "TimestampFormatExtension",
]
