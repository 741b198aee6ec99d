"""
Helpers for tests of code that logs through unilog.

    from unilog.testing import RecordingLogger, recording_candidate

    registry = BackendRegistry(candidates=[recording_candidate(sink)])
"""

from __future__ import annotations

import threading
from typing import Callable

from . import diagnostics
from .config import UnilogSettings, reset_settings
from .contract import LoggerContract
from .factory import get_factory
from .levels import Level, is_enabled
from .record import LogRecord
from .registry import BackendCandidate, reset_registry


class RecordSink:
    """Thread-safe list of dispatched records."""

    def __init__(self) -> None:
        self._records: list[LogRecord] = []
        self._lock = threading.Lock()

    def append(self, record: LogRecord) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[LogRecord]:
        with self._lock:
            return list(self._records)

    @property
    def messages(self) -> list[str]:
        return [record.message for record in self.records]

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class RecordingLogger(LoggerContract):
    """Adapter that keeps every dispatched record in a :class:`RecordSink`."""

    def __init__(self, name: str, sink: RecordSink, threshold: Level = Level.TRACE):
        super().__init__(name)
        self.sink = sink
        self.threshold = threshold

    def is_enabled(self, level: Level) -> bool:
        return is_enabled(self.threshold, level)

    def _write(self, record: LogRecord) -> None:
        self.sink.append(record)


def recording_candidate(
    sink: RecordSink,
    threshold: Level = Level.TRACE,
    name: str = "recording",
    probe: Callable[[], bool] = lambda: True,
) -> BackendCandidate:
    """A registry candidate whose loggers record into ``sink``."""

    def load(settings: UnilogSettings) -> Callable[[str], RecordingLogger]:
        return lambda logger_name: RecordingLogger(logger_name, sink, threshold)

    return BackendCandidate(name, probe, load)


def reset() -> None:
    """Reset settings, registry, logger cache and reported failures."""
    reset_settings()
    reset_registry()
    get_factory().reset()
    diagnostics.clear()
