"""
Backend detection and selection.

The registry resolves exactly once per process:

    UNINITIALIZED -> RESOLVING -> RESOLVED

The first caller probes the candidates in priority order under a lock;
concurrent first callers block on that lock and then read the published
:class:`Resolution`. After that, :meth:`BackendRegistry.resolve` is a plain
attribute read. If nothing probes successfully the built-in native adapter is
selected, so resolution always ends with a working backend.
"""

from __future__ import annotations

import importlib.util
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from . import diagnostics
from .adapters import native, nop
from .config import UnilogSettings, get_settings
from .contract import LoggerContract
from .exceptions import ConfigurationAmbiguity, ProbeFailure

AdapterFactory = Callable[[str], LoggerContract]

FALLBACK_BACKEND = "native"


class RegistryState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class BackendCandidate:
    """A known engine: a side-effect free probe and a loader for its adapter factory."""

    name: str
    probe: Callable[[], bool]
    load: Callable[[UnilogSettings], AdapterFactory]


@dataclass(frozen=True)
class Resolution:
    """Outcome of backend selection. Immutable once published."""

    backend: str
    factory: AdapterFactory
    available: tuple[str, ...] = ()
    failures: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_fallback(self) -> bool:
        return self.backend == FALLBACK_BACKEND


# =============================================================================
# Known Backends
# =============================================================================


def _probe_loguru() -> bool:
    return importlib.util.find_spec("loguru") is not None


def _load_loguru(settings: UnilogSettings) -> AdapterFactory:
    from .adapters import loguru_adapter

    return loguru_adapter.factory(settings)


def _probe_structlog() -> bool:
    if importlib.util.find_spec("structlog") is None:
        return False
    import structlog

    return structlog.is_configured()


def _load_structlog(settings: UnilogSettings) -> AdapterFactory:
    from .adapters import structlog_adapter

    return structlog_adapter.factory(settings)


def _probe_stdlib() -> bool:
    return logging.getLogger().hasHandlers()


def _load_stdlib(settings: UnilogSettings) -> AdapterFactory:
    from .adapters import stdlib

    return stdlib.factory(settings)


# Descending priority.
DEFAULT_CANDIDATES: tuple[BackendCandidate, ...] = (
    BackendCandidate("loguru", _probe_loguru, _load_loguru),
    BackendCandidate("structlog", _probe_structlog, _load_structlog),
    BackendCandidate("stdlib", _probe_stdlib, _load_stdlib),
)

# Never auto-detected; selectable by name only.
NAMED_BACKENDS: tuple[BackendCandidate, ...] = (
    BackendCandidate(FALLBACK_BACKEND, lambda: True, native.factory),
    BackendCandidate(nop.NAME, lambda: True, nop.factory),
)


# =============================================================================
# Registry
# =============================================================================


class BackendRegistry:
    """Process-wide, resolve-once backend selection."""

    def __init__(
        self,
        candidates: Iterable[BackendCandidate] = DEFAULT_CANDIDATES,
        settings: UnilogSettings | None = None,
    ) -> None:
        self._candidates = tuple(candidates)
        self._settings = settings
        self._lock = threading.Lock()
        self._state = RegistryState.UNINITIALIZED
        self._resolution: Resolution | None = None
        self._resolving_thread: int | None = None
        self._runtime_failures: dict[str, str] = {}
        self._failures_lock = threading.Lock()

    @property
    def state(self) -> RegistryState:
        return self._state

    @property
    def candidates(self) -> tuple[BackendCandidate, ...]:
        return self._candidates

    def resolve(self) -> Resolution:
        """Return the selected backend, detecting it on first use."""
        resolution = self._resolution
        if resolution is not None:
            return resolution

        # A probe or loader asking for a logger on the resolving thread
        # would deadlock on the lock; serve it from the fallback instead.
        if self._resolving_thread == threading.get_ident():
            return Resolution(FALLBACK_BACKEND, native.factory(self._effective_settings()))

        with self._lock:
            if self._resolution is None:
                self._state = RegistryState.RESOLVING
                self._resolving_thread = threading.get_ident()
                try:
                    resolution = self._detect()
                finally:
                    self._resolving_thread = None
                self._resolution = resolution
                self._state = RegistryState.RESOLVED
            return self._resolution

    def status(self) -> dict[str, Any]:
        """Current registry state for display."""
        resolution = self._resolution
        failures = dict(resolution.failures) if resolution else {}
        with self._failures_lock:
            failures.update(self._runtime_failures)
        return {
            "state": self._state.value,
            "backend": resolution.backend if resolution else None,
            "available": list(resolution.available) if resolution else [],
            "failures": failures,
            "candidates": [c.name for c in self._candidates],
        }

    def record_failure(self, key: str, message: str) -> None:
        """Note a failure after resolution (e.g. one logger could not be built)."""
        with self._failures_lock:
            self._runtime_failures[key] = message

    def reset(self) -> None:
        """
        Return to UNINITIALIZED. For test harnesses only, not for production use.
        """
        with self._lock:
            self._resolution = None
            self._state = RegistryState.UNINITIALIZED
        with self._failures_lock:
            self._runtime_failures.clear()

    # =========================================================================
    # Detection
    # =========================================================================

    def _effective_settings(self) -> UnilogSettings:
        return self._settings or get_settings()

    def _detect(self) -> Resolution:
        settings = UnilogSettings.model_construct()
        failures: dict[str, str] = {}
        try:
            settings = self._effective_settings()
            resolution = self._select(settings, failures)
        except Exception as exc:
            diagnostics.report("backend detection failed, using the built-in logger", exc)
            failures["registry"] = f"{type(exc).__name__}: {exc}"
            resolution = None
        if resolution is None:
            resolution = Resolution(FALLBACK_BACKEND, native.factory(settings), (), failures)
        if settings.debug:
            diagnostics.report(f"selected logging backend '{resolution.backend}'")
        return resolution

    def _select(self, settings: UnilogSettings, failures: dict[str, str]) -> Resolution | None:
        if settings.backend != "auto":
            forced = self._find(settings.backend)
            factory = self._attempt(forced, settings, failures) if forced else None
            if factory is not None:
                return Resolution(forced.name, factory, (forced.name,), failures)
            diagnostics.report(f"requested backend '{settings.backend}' is not available, detecting instead")

        for index, candidate in enumerate(self._candidates):
            factory = self._attempt(candidate, settings, failures)
            if factory is None:
                continue
            available = (candidate.name,) + tuple(
                other.name for other in self._candidates[index + 1 :] if self._quiet_probe(other)
            )
            if len(available) > 1 and settings.debug:
                diagnostics.report(str(ConfigurationAmbiguity(candidate.name, available)))
            return Resolution(candidate.name, factory, available, failures)
        return None

    def _find(self, name: str) -> BackendCandidate | None:
        for candidate in self._candidates + NAMED_BACKENDS:
            if candidate.name == name:
                return candidate
        return None

    @staticmethod
    def _attempt(
        candidate: BackendCandidate, settings: UnilogSettings, failures: dict[str, str]
    ) -> AdapterFactory | None:
        """
        Probe, load and try out one candidate. Any exception means "not available".

        The loaded factory must build one logger before the candidate is
        selected, so an engine that imports but cannot construct an adapter
        is skipped instead of being reported as the active backend.
        """
        try:
            if not candidate.probe():
                return None
            factory = candidate.load(settings)
            factory("unilog")
            return factory
        except Exception as exc:
            failure = ProbeFailure(candidate.name, exc)
            failures[candidate.name] = str(failure)
            diagnostics.report(str(failure))
            return None

    @staticmethod
    def _quiet_probe(candidate: BackendCandidate) -> bool:
        try:
            return bool(candidate.probe())
        except Exception:
            return False


_registry = BackendRegistry()


def get_registry() -> BackendRegistry:
    """The process-wide registry."""
    return _registry


def reset_registry() -> None:
    """Reset the process-wide registry. For test harnesses only."""
    _registry.reset()
