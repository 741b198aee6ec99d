"""
loguru backend, preferred whenever loguru is installed.

loguru offers no per-level enabled query, so gating uses the configured
threshold. The logger name is bound as ``extra["logger_name"]``.
"""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger as _loguru

from ..config import UnilogSettings, get_settings
from ..contract import CALLER_DEPTH, LoggerContract
from ..levels import Level, is_enabled
from ..record import LogRecord

NAME = "loguru"


class LoguruLogger(LoggerContract):
    def __init__(self, name: str, threshold: Level):
        super().__init__(name)
        self._threshold = threshold
        self._logger: Any = _loguru.bind(logger_name=name)

    def is_enabled(self, level: Level) -> bool:
        return is_enabled(self._threshold, level)

    def _write(self, record: LogRecord) -> None:
        # No positional args reach loguru, so braces in the message are left alone.
        self._logger.opt(exception=record.error, depth=CALLER_DEPTH).log(
            record.level.stdlib_name, record.message
        )


def factory(settings: UnilogSettings | None = None) -> Callable[[str], LoguruLogger]:
    threshold = (settings or get_settings()).level

    def create(name: str) -> LoguruLogger:
        return LoguruLogger(name, threshold)

    return create
