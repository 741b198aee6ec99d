"""
Log record passed from the facade to a backend.

A record lives for a single dispatch call. Its message is rendered on first
access, by the backend, never when the record is built.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import cached_property
from typing import Any

from . import formatting
from .formatting import ArgShape
from .levels import Level


@dataclass(frozen=True)
class LogRecord:
    level: Level
    logger_name: str
    template: str | None
    args: tuple[Any, ...] = ()
    shape: ArgShape = ArgShape.MESSAGE
    error: BaseException | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        level: Level,
        logger_name: str,
        template: Any,
        args: tuple[Any, ...],
        error: BaseException | None = None,
    ) -> LogRecord:
        """Build a record, detaching a trailing exception argument when no explicit error is given."""
        if template is not None and not isinstance(template, str):
            template = formatting.safe_str(template)
        if error is None:
            args, error = formatting.split_error(template, args)
        return cls(
            level=level,
            logger_name=logger_name,
            template=template,
            args=args,
            shape=formatting.shape_of(args),
            error=error,
        )

    @cached_property
    def message(self) -> str:
        """Rendered message (computed once, on first access)."""
        return formatting.render_shape(self.shape, self.template, self.args)

    @property
    def exc_info(self) -> tuple[type[BaseException], BaseException, Any] | None:
        if self.error is None:
            return None
        return type(self.error), self.error, self.error.__traceback__

    def format_error(self) -> str:
        """Formatted traceback of the attached error, or an empty string."""
        if self.error is None:
            return ""
        return "".join(traceback.format_exception(type(self.error), self.error, self.error.__traceback__))

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for JSON sinks."""
        data: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.label,
            "logger": self.logger_name,
            "message": self.message,
        }
        if self.error is not None:
            data["error"] = {
                "type": type(self.error).__name__,
                "message": formatting.safe_str(self.error),
                "traceback": self.format_error(),
            }
        return data
