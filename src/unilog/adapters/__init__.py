"""
Backend adapters.

Each adapter subclasses :class:`unilog.contract.LoggerContract` and exposes a
``factory(settings)`` returning a callable that builds a logger for a name.
Adapters for optional engines (loguru, structlog) import their engine at
module import time and are loaded by the registry only after a successful
probe.
"""

from .native import NativeLogger
from .nop import NopLogger

__all__ = ["NativeLogger", "NopLogger"]
