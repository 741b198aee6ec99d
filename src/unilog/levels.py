"""
Severity levels and the gating function.

Numeric values line up with the standard library's ``logging`` levels
(TRACE sits below DEBUG) so backends can map them without arithmetic.
"""

from __future__ import annotations

import logging
from enum import IntEnum

_ALIASES = {"WARNING": "WARN"}


class Level(IntEnum):
    """Closed, totally ordered set of severities."""

    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40

    @classmethod
    def from_name(cls, name: str) -> Level:
        """Resolve a level from its name, case-insensitive."""
        key = name.strip().upper()
        key = _ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(
                f"Unknown log level '{name}'. Valid levels: {', '.join(m.name for m in cls)}"
            ) from None

    @classmethod
    def from_value(cls, value: Level | int | str) -> Level:
        """Resolve a level from a member, an exact numeric value or a name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value.strip().isdigit():
                return cls.from_value(int(value))
            return cls.from_name(value)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(
                    f"No log level with value {value}. "
                    f"Valid values: {', '.join(f'{m.name}={m.value}' for m in cls)}"
                ) from None
        raise TypeError(f"Expected Level, int or str, got {type(value).__name__}")

    @property
    def label(self) -> str:
        return self.name

    @property
    def stdlib_level(self) -> int:
        return int(self)

    @property
    def stdlib_name(self) -> str:
        """Level name as the standard library (and loguru) spell it."""
        if self is Level.WARN:
            return "WARNING"
        return self.name


def is_enabled(threshold: Level, level: Level) -> bool:
    """Gating decision: ``level`` is emitted iff it is at or above ``threshold``."""
    return level >= threshold


def register_stdlib_names() -> None:
    """Teach the standard library the TRACE level name."""
    if logging.getLevelName(Level.TRACE.value) != Level.TRACE.name:
        logging.addLevelName(Level.TRACE.value, Level.TRACE.name)
