"""
Built-in fallback backend.

Writes one line per record to stderr (or stdout):

    [2024-05-01 12:00:00.123] [INFO] [app.db] connection established

followed by the formatted traceback when an error is attached. JSON line
output uses orjson. Write failures are swallowed; the calling thread never
sees them.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, TextIO

import orjson

from .. import diagnostics, formatting
from ..config import OutputFormat, OutputStream, UnilogSettings, get_settings
from ..contract import LoggerContract
from ..levels import Level, is_enabled
from ..record import LogRecord

COLORS = {
    "reset": "\033[0m",
    "TRACE": "\033[90m",
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARN": "\033[33m",
    "ERROR": "\033[31m",
}


def colorize(text: str, level: Level) -> str:
    """Apply the ANSI colour of ``level`` to text."""
    return f"{COLORS.get(level.label, '')}{text}{COLORS['reset']}"


def orjson_dumps(v: Any) -> str:
    return orjson.dumps(v, default=str, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


class ConsoleFormatter:
    """Renders ``[timestamp] [level] [logger] message`` lines."""

    def __init__(self, timestamp_format: str, use_color: bool = False):
        self._timestamp_format = timestamp_format
        self._use_color = use_color

    def _format_timestamp(self, record: LogRecord) -> str:
        text = record.timestamp.astimezone().strftime(self._timestamp_format)
        if self._timestamp_format.endswith("%f"):
            text = text[:-3]
        return text

    def format(self, record: LogRecord) -> str:
        level = record.level.label
        if self._use_color:
            level = colorize(level, record.level)
        line = f"[{self._format_timestamp(record)}] [{level}] [{record.logger_name}] {record.message}"
        if record.error is not None:
            line = f"{line}\n{record.format_error().rstrip()}"
        return line


class NativeLogger(LoggerContract):
    """Minimal built-in logger writing to a standard stream."""

    def __init__(self, name: str, settings: UnilogSettings | None = None):
        super().__init__(name)
        self._settings = settings or get_settings()
        self._threshold = self._settings.level
        self._json = self._settings.format == OutputFormat.JSON
        self._stream_name = "stdout" if self._settings.stream == OutputStream.STDOUT else "stderr"
        self._plain = ConsoleFormatter(self._settings.timestamp_format)
        self._colored = ConsoleFormatter(self._settings.timestamp_format, use_color=True)

    @property
    def threshold(self) -> Level:
        return self._threshold

    def is_enabled(self, level: Level) -> bool:
        return is_enabled(self._threshold, level)

    def _stream(self) -> TextIO | None:
        # Looked up per write so redirected streams are honoured.
        return getattr(sys, self._stream_name, None)

    def _render(self, record: LogRecord, stream: TextIO) -> str:
        if self._json:
            return orjson_dumps(record.to_dict())
        if self._settings.color and bool(getattr(stream, "isatty", lambda: False)()):
            return self._colored.format(record)
        return self._plain.format(record)

    def _write(self, record: LogRecord) -> None:
        if self._settings.debug:
            problem = formatting.mismatch(record.template, record.args)
            if problem is not None:
                diagnostics.report(str(problem))
        stream = self._stream()
        if stream is None:
            return
        try:
            stream.write(self._render(record, stream) + "\n")
            stream.flush()
        except (OSError, ValueError):
            pass


def factory(settings: UnilogSettings | None = None) -> Callable[[str], NativeLogger]:
    """Adapter factory bound to one settings snapshot."""
    settings = settings or get_settings()

    def create(name: str) -> NativeLogger:
        return NativeLogger(name, settings)

    return create
