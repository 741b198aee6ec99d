"""
structlog backend.

Selected when structlog is importable and the application has configured it
(``structlog.configure`` was called). Records go through the application's
processor chain; the facade only contributes the rendered event and the
error as ``exc_info``.

Gating follows the configured wrapper class when it is a filtering bound
logger (``is_enabled_for``); other wrapper classes fall back to
``UNILOG_LEVEL``. The logger name is bound as ``logger_name``.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog

from ..config import UnilogSettings, get_settings
from ..contract import LoggerContract
from ..levels import Level, is_enabled
from ..record import LogRecord

NAME = "structlog"

# structlog has no TRACE and spells WARN as "warning".
_METHODS = {
    Level.TRACE: "debug",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERROR: "error",
}


class StructlogLogger(LoggerContract):
    def __init__(self, name: str, threshold: Level):
        super().__init__(name)
        self._threshold = threshold
        # ``logger`` is a wrap_logger() parameter; the name needs its own key.
        self._logger: Any = structlog.get_logger(name, logger_name=name)

    def is_enabled(self, level: Level) -> bool:
        # Looked up on the class: the generic BoundLogger proxies any attribute.
        wrapper = structlog.get_config().get("wrapper_class")
        if hasattr(wrapper, "is_enabled_for"):
            return bool(self._logger.is_enabled_for(level.stdlib_level))
        return is_enabled(self._threshold, level)

    def _write(self, record: LogRecord) -> None:
        method = getattr(self._logger, _METHODS[record.level])
        if record.error is not None:
            method(record.message, exc_info=record.error)
        else:
            method(record.message)


def factory(settings: UnilogSettings | None = None) -> Callable[[str], StructlogLogger]:
    threshold = (settings or get_settings()).level

    def create(name: str) -> StructlogLogger:
        return StructlogLogger(name, threshold)

    return create
