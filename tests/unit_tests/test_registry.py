"""
后端注册表单元测试

验证优先级选择、探测失败降级、后备日志器兜底,
以及并发首次调用下只解析一次。
"""

from __future__ import annotations

import logging
import threading
import time

import pytest
import structlog
from structlog.testing import capture_logs

import unilog
from unilog.adapters.native import NativeLogger
from unilog.adapters.nop import NopLogger
from unilog.adapters.stdlib import StdlibLogger
from unilog.adapters.structlog_adapter import StructlogLogger
from unilog.config import UnilogSettings
from unilog.factory import LoggerFactory
from unilog.registry import (
    DEFAULT_CANDIDATES,
    BackendCandidate,
    BackendRegistry,
    RegistryState,
    _probe_stdlib,
    _probe_structlog,
    get_registry,
)
from unilog.testing import RecordingLogger, RecordSink, recording_candidate


class CountingProbe:
    def __init__(self, result: bool = True, delay: float = 0.0):
        self.result = result
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self) -> bool:
        with self._lock:
            self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        return self.result


def failing_probe() -> bool:
    raise RuntimeError("probe exploded")


def failing_load(settings: UnilogSettings):
    raise ImportError("engine half-installed")


class TestSelection:
    """优先级选择测试"""

    def test_first_successful_probe_wins(self, sink: RecordSink) -> None:
        registry = BackendRegistry(
            candidates=[
                recording_candidate(sink, name="absent", probe=lambda: False),
                recording_candidate(sink, name="preferred"),
                recording_candidate(sink, name="secondary"),
            ],
            settings=UnilogSettings(),
        )
        resolution = registry.resolve()
        assert resolution.backend == "preferred"
        assert resolution.available == ("preferred", "secondary")
        assert isinstance(resolution.factory("svc"), RecordingLogger)

    def test_probe_exception_means_unavailable(self, sink: RecordSink, capsys) -> None:
        """探测抛异常视为不可用, 继续尝试下一个候选"""
        registry = BackendRegistry(
            candidates=[
                BackendCandidate("broken", failing_probe, lambda s: NativeLogger),
                recording_candidate(sink, name="healthy"),
            ],
            settings=UnilogSettings(),
        )
        resolution = registry.resolve()
        assert resolution.backend == "healthy"
        assert "RuntimeError: probe exploded" in resolution.failures["broken"]
        assert "probe for backend 'broken' failed" in capsys.readouterr().err

    def test_settings_lookup_failure_falls_back_to_native(self, monkeypatch, sink: RecordSink, capsys) -> None:
        def broken_settings():
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        monkeypatch.setattr("unilog.registry.get_settings", broken_settings)
        resolution = BackendRegistry(candidates=[recording_candidate(sink)]).resolve()
        assert resolution.backend == "native"
        assert "UnicodeDecodeError" in resolution.failures["registry"]
        assert "backend detection failed" in capsys.readouterr().err

    def test_load_failure_moves_on(self, sink: RecordSink) -> None:
        registry = BackendRegistry(
            candidates=[
                BackendCandidate("half", lambda: True, failing_load),
                recording_candidate(sink, name="healthy"),
            ],
            settings=UnilogSettings(),
        )
        assert registry.resolve().backend == "healthy"

    def test_no_candidate_falls_back_to_native(self) -> None:
        """无可用后端时选择内置后备日志器"""
        registry = BackendRegistry(
            candidates=[BackendCandidate("absent", lambda: False, failing_load)],
            settings=UnilogSettings(),
        )
        started = time.monotonic()
        resolution = registry.resolve()
        assert time.monotonic() - started < 1.0
        assert resolution.is_fallback
        assert isinstance(resolution.factory("svc"), NativeLogger)

    def test_empty_candidate_list(self) -> None:
        resolution = BackendRegistry(candidates=[], settings=UnilogSettings()).resolve()
        assert resolution.backend == "native"

    def test_ambiguity_reported_in_debug(self, sink: RecordSink, capsys) -> None:
        registry = BackendRegistry(
            candidates=[recording_candidate(sink, name="a"), recording_candidate(sink, name="b")],
            settings=UnilogSettings(debug=True),
        )
        registry.resolve()
        err = capsys.readouterr().err
        assert "multiple logging backends available (a, b); selected 'a'" in err
        assert "selected logging backend 'a'" in err


class TestExplicitBackend:
    """显式指定后端测试"""

    def test_named_nop_backend(self, sink: RecordSink) -> None:
        registry = BackendRegistry(
            candidates=[recording_candidate(sink)],
            settings=UnilogSettings(backend="nop"),
        )
        resolution = registry.resolve()
        assert resolution.backend == "nop"
        assert isinstance(resolution.factory("svc"), NopLogger)

    def test_named_candidate_beats_priority(self, sink: RecordSink) -> None:
        registry = BackendRegistry(
            candidates=[recording_candidate(sink, name="structlog"), recording_candidate(sink, name="stdlib")],
            settings=UnilogSettings(backend="stdlib"),
        )
        assert registry.resolve().backend == "stdlib"

    def test_unavailable_named_backend_detects_instead(self, sink: RecordSink, capsys) -> None:
        registry = BackendRegistry(
            candidates=[recording_candidate(sink, name="recording")],
            settings=UnilogSettings(backend="loguru"),
        )
        assert registry.resolve().backend == "recording"
        assert "requested backend 'loguru' is not available" in capsys.readouterr().err


class TestLifecycle:
    """状态机与并发测试"""

    def test_state_transitions_and_single_probe(self) -> None:
        probe = CountingProbe()
        registry = BackendRegistry(
            candidates=[BackendCandidate("only", probe, lambda s: NopLogger)],
            settings=UnilogSettings(),
        )
        assert registry.state is RegistryState.UNINITIALIZED

        first = registry.resolve()
        second = registry.resolve()
        assert registry.state is RegistryState.RESOLVED
        assert first is second
        assert probe.calls == 1

    def test_concurrent_first_use_resolves_once(self) -> None:
        """100 个线程竞争首次解析, 只探测一次且观察到同一结果"""
        probe = CountingProbe(delay=0.05)
        registry = BackendRegistry(
            candidates=[BackendCandidate("slow", probe, lambda s: NopLogger)],
            settings=UnilogSettings(),
        )
        workers = 100
        barrier = threading.Barrier(workers)
        results: list[object] = [None] * workers

        def worker(index: int) -> None:
            barrier.wait()
            results[index] = registry.resolve()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert probe.calls == 1
        assert all(result is results[0] for result in results)
        assert results[0].backend == "slow"

    def test_reentrant_resolution_does_not_deadlock(self) -> None:
        """解析过程中同线程重入时由后备日志器服务"""
        seen = []

        def load(settings: UnilogSettings):
            seen.append(registry.resolve())
            return NopLogger

        registry = BackendRegistry(
            candidates=[BackendCandidate("reentrant", lambda: True, load)],
            settings=UnilogSettings(),
        )
        resolution = registry.resolve()
        assert resolution.backend == "reentrant"
        assert seen[0].backend == "native"
        assert registry.resolve() is resolution

    def test_reset_allows_redetection(self) -> None:
        probe = CountingProbe()
        registry = BackendRegistry(
            candidates=[BackendCandidate("only", probe, lambda s: NopLogger)],
            settings=UnilogSettings(),
        )
        registry.resolve()
        registry.reset()
        assert registry.state is RegistryState.UNINITIALIZED
        registry.resolve()
        assert probe.calls == 2

    def test_status(self, sink: RecordSink) -> None:
        registry = BackendRegistry(candidates=[recording_candidate(sink)], settings=UnilogSettings())
        assert registry.status()["state"] == "uninitialized"
        registry.resolve()
        status = registry.status()
        assert status["state"] == "resolved"
        assert status["backend"] == "recording"
        assert status["candidates"] == ["recording"]


class TestDefaultProbes:
    """内置探测测试"""

    def test_priority_order(self) -> None:
        assert [c.name for c in DEFAULT_CANDIDATES] == ["loguru", "structlog", "stdlib"]

    def test_stdlib_probe_needs_handlers(self) -> None:
        root = logging.getLogger()
        saved = root.handlers[:]
        try:
            root.handlers.clear()
            assert _probe_stdlib() is False
            root.addHandler(logging.NullHandler())
            assert _probe_stdlib() is True
        finally:
            root.handlers[:] = saved

    def test_structlog_probe_needs_configuration(self) -> None:
        structlog.reset_defaults()
        try:
            assert _probe_structlog() is False
            structlog.configure(processors=[structlog.processors.KeyValueRenderer()])
            assert _probe_structlog() is True
        finally:
            structlog.reset_defaults()


@pytest.mark.parametrize("backend", ["native", "nop"])
def test_named_builtin_backends_always_available(backend: str) -> None:
    registry = BackendRegistry(candidates=[], settings=UnilogSettings(backend=backend))
    assert registry.resolve().backend == backend


class TestDefaultCandidateSelection:
    """内置候选的端到端选择: 解析结果与实际适配器一致"""

    @pytest.fixture
    def without_loguru(self) -> list[BackendCandidate]:
        return [c for c in DEFAULT_CANDIDATES if c.name != "loguru"]

    @pytest.fixture
    def root_handler(self):
        root = logging.getLogger()
        saved = root.handlers[:]
        root.addHandler(logging.NullHandler())
        yield
        root.handlers[:] = saved

    def test_configured_structlog_is_selected(self, without_loguru, root_handler) -> None:
        structlog.configure(processors=[structlog.processors.KeyValueRenderer()])
        try:
            registry = BackendRegistry(candidates=without_loguru, settings=UnilogSettings())
            log = LoggerFactory(registry).get("svc")
            assert isinstance(log, StructlogLogger)
            assert registry.status()["backend"] == "structlog"
            assert registry.status()["failures"] == {}
            with capture_logs() as logs:
                log.info("hello {}", 1)
            assert logs == [{"event": "hello 1", "log_level": "info", "logger_name": "svc"}]
        finally:
            structlog.reset_defaults()

    def test_env_named_structlog_through_get_logger(self, monkeypatch) -> None:
        structlog.configure(processors=[structlog.processors.KeyValueRenderer()])
        try:
            monkeypatch.setenv("UNILOG_BACKEND", "structlog")
            assert isinstance(unilog.get_logger("svc"), StructlogLogger)
            assert get_registry().status()["backend"] == "structlog"
        finally:
            structlog.reset_defaults()

    def test_stdlib_selected_when_structlog_unconfigured(self, without_loguru, root_handler) -> None:
        structlog.reset_defaults()
        registry = BackendRegistry(candidates=without_loguru, settings=UnilogSettings())
        log = LoggerFactory(registry).get("svc")
        assert isinstance(log, StdlibLogger)
        assert registry.status()["backend"] == "stdlib"
