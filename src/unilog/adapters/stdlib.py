"""
Standard library ``logging`` backend.

Gating is delegated to ``logging.Logger.isEnabledFor`` so the application's
own logging configuration stays authoritative. Selected when the root logger
has handlers, i.e. the application configured stdlib logging itself.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..config import UnilogSettings
from ..contract import CALLER_DEPTH, LoggerContract
from ..levels import Level, register_stdlib_names
from ..record import LogRecord

NAME = "stdlib"


class StdlibLogger(LoggerContract):
    def __init__(self, name: str):
        super().__init__(name)
        self._logger = logging.getLogger(name)

    def is_enabled(self, level: Level) -> bool:
        return self._logger.isEnabledFor(level.stdlib_level)

    def _write(self, record: LogRecord) -> None:
        # stacklevel points the stdlib record at the facade's caller.
        self._logger.log(
            record.level.stdlib_level,
            record.message,
            exc_info=record.exc_info,
            stacklevel=CALLER_DEPTH + 1,
        )


def factory(settings: UnilogSettings | None = None) -> Callable[[str], StdlibLogger]:
    register_stdlib_names()
    return StdlibLogger
