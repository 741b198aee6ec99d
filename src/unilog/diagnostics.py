"""
Internal reporting channel.

The facade cannot log through itself, so its own notices (backend selection,
absorbed failures) are written as ``unilog: ...`` lines straight to the
process' standard error stream.
"""

from __future__ import annotations

import sys
import threading

PREFIX = "unilog: "

_seen: set[tuple[str, type]] = set()
_seen_lock = threading.Lock()


def report(message: str, error: BaseException | None = None) -> None:
    """Write an internal notice to stderr. Never raises."""
    line = PREFIX + message
    if error is not None:
        line = f"{line} ({type(error).__name__}: {error})"
    try:
        stream = sys.stderr or sys.__stderr__
        if stream is None:
            return
        stream.write(line + "\n")
        stream.flush()
    except (OSError, ValueError, AttributeError):
        pass


def report_once(key: str, failure: Exception, cause: BaseException) -> None:
    """Report the first failure with a given cause type for ``key``; later repeats are dropped."""
    marker = (key, type(cause))
    with _seen_lock:
        if marker in _seen:
            return
        _seen.add(marker)
    report(str(failure))


def clear() -> None:
    """Forget which failures were already reported."""
    with _seen_lock:
        _seen.clear()
