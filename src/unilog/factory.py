"""
Public entry point: named loggers bound to the resolved backend.
"""

from __future__ import annotations

import inspect
from types import ModuleType
from typing import Any

from . import diagnostics
from .adapters.native import NativeLogger
from .contract import LoggerContract
from .registry import BackendRegistry, RegistryState, get_registry

ROOT_LOGGER_NAME = "root"


def logger_name(target: Any) -> str:
    """Derive a logger name from a string, module, class or instance."""
    if isinstance(target, str):
        return target
    if isinstance(target, ModuleType):
        return target.__name__
    cls = target if isinstance(target, type) else type(target)
    return f"{cls.__module__}.{cls.__qualname__}"


class LoggerFactory:
    """
    Hands out one logger per name.

    The first call resolves the backend; later calls for a known name are a
    dict lookup.
    """

    def __init__(self, registry: BackendRegistry | None = None):
        self._registry = registry
        self._loggers: dict[str, LoggerContract] = {}

    @property
    def registry(self) -> BackendRegistry:
        return self._registry or get_registry()

    def get(self, name: str) -> LoggerContract:
        logger = self._loggers.get(name)
        if logger is not None:
            return logger

        registry = self.registry
        resolution = registry.resolve()
        try:
            created = resolution.factory(name)
        except Exception as exc:
            diagnostics.report(f"backend '{resolution.backend}' could not create logger '{name}'", exc)
            registry.record_failure(f"{resolution.backend}:{name}", f"{type(exc).__name__}: {exc}")
            created = NativeLogger(name)

        # Loggers handed out while the registry is still resolving (re-entrant
        # calls) are temporary and must not be cached.
        if registry.state is not RegistryState.RESOLVED:
            return created
        return self._loggers.setdefault(name, created)

    def reset(self) -> None:
        """Forget cached loggers. For test harnesses only."""
        self._loggers.clear()


_factory = LoggerFactory()


def get_factory() -> LoggerFactory:
    return _factory


def get_logger(name: Any = None) -> LoggerContract:
    """
    Get a logger.

    Args:
        name: Logger name, or a module, class or instance to derive it from.
            Defaults to the calling module's ``__name__``.
    """
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame is not None else None
        name = caller.f_globals.get("__name__", ROOT_LOGGER_NAME) if caller is not None else ROOT_LOGGER_NAME
        del frame, caller
    return _factory.get(logger_name(name))
