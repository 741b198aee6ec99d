"""
No-op backend: every level disabled. Selected only by name (``UNILOG_BACKEND=nop``).
"""

from __future__ import annotations

from typing import Callable

from ..config import UnilogSettings
from ..contract import LoggerContract
from ..levels import Level
from ..record import LogRecord

NAME = "nop"


class NopLogger(LoggerContract):
    def is_enabled(self, level: Level) -> bool:
        return False

    def _write(self, record: LogRecord) -> None:
        pass


def factory(settings: UnilogSettings | None = None) -> Callable[[str], NopLogger]:
    return NopLogger
