"""
Logger contract shared by every call site and every backend.

A backend adapter subclasses :class:`LoggerContract` and implements two
primitives, :meth:`LoggerContract.is_enabled` and
:meth:`LoggerContract._write`. The public surface (one method per level, its
enabled check and the generic :meth:`LoggerContract.log`) is generated once
here, so every backend honours it identically:

    log = get_logger(__name__)
    log.info("user {} logged in from {}", user_id, address)
    log.error("payment failed", exc=err)

Disabled calls return before a record is built or anything is formatted.
Nothing raised by a backend ever reaches the caller.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Any, Callable

from . import diagnostics
from .exceptions import DispatchFailure
from .levels import Level
from .record import LogRecord

# Frames between the backend's write call and the user's call site:
# _write <- _dispatch <- public method <- caller.
CALLER_DEPTH = 3


def _level_method(level: Level) -> Callable[..., None]:
    def method(self: LoggerContract, msg: Any, *args: Any, exc: BaseException | None = None) -> None:
        try:
            if not self.is_enabled(level):
                return
        except Exception as err:
            self._absorb(err)
            return
        self._dispatch(level, msg, args, exc)

    method.__name__ = method.__qualname__ = level.name.lower()
    method.__doc__ = f"Log ``msg`` at {level.name}; ``args`` fill its ``{{}}`` placeholders."
    return method


def _enabled_method(level: Level) -> Callable[[LoggerContract], bool]:
    def method(self: LoggerContract) -> bool:
        try:
            return bool(self.is_enabled(level))
        except Exception as err:
            self._absorb(err)
            return False

    method.__name__ = method.__qualname__ = f"is_{level.name.lower()}_enabled"
    method.__doc__ = f"Whether {level.name} records are emitted by this logger."
    return method


class LoggerContract(ABC):
    """Abstract logger. Instances are immutable and safe to share between threads."""

    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    # =========================================================================
    # Backend Primitives
    # =========================================================================

    @abstractmethod
    def is_enabled(self, level: Level) -> bool:
        """Gating decision for ``level``. Must be cheap and side-effect free."""
        ...

    @abstractmethod
    def _write(self, record: LogRecord) -> None:
        """Hand an enabled record to the underlying engine."""
        ...

    # =========================================================================
    # Public Surface
    # =========================================================================

    trace = _level_method(Level.TRACE)
    debug = _level_method(Level.DEBUG)
    info = _level_method(Level.INFO)
    warn = _level_method(Level.WARN)
    error = _level_method(Level.ERROR)
    warning = warn

    is_trace_enabled = _enabled_method(Level.TRACE)
    is_debug_enabled = _enabled_method(Level.DEBUG)
    is_info_enabled = _enabled_method(Level.INFO)
    is_warn_enabled = _enabled_method(Level.WARN)
    is_error_enabled = _enabled_method(Level.ERROR)

    def log(self, level: Level | int | str, msg: Any, *args: Any, exc: BaseException | None = None) -> None:
        """Generic form for code that only knows its severity at runtime."""
        try:
            level = Level.from_value(level)
            if not self.is_enabled(level):
                return
        except Exception as err:
            self._absorb(err)
            return
        self._dispatch(level, msg, args, exc)

    def exception(self, msg: Any, *args: Any) -> None:
        """Log at ERROR with the exception currently being handled attached."""
        try:
            if not self.is_enabled(Level.ERROR):
                return
        except Exception as err:
            self._absorb(err)
            return
        self._dispatch(Level.ERROR, msg, args, sys.exc_info()[1])

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _dispatch(self, level: Level, msg: Any, args: tuple[Any, ...], exc: BaseException | None) -> None:
        try:
            self._write(LogRecord.create(level, self._name, msg, args, exc))
        except Exception as err:
            self._absorb(err)

    def _absorb(self, err: Exception) -> None:
        diagnostics.report_once(self._name, DispatchFailure(self._name, err), err)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name!r}>"
