"""
Unified logging facade.

Library and application code depends only on :class:`LoggerContract`; the
concrete engine is detected once per process:

- loguru: when installed
- structlog: when configured by the application
- stdlib: when the root ``logging`` logger has handlers
- native: built-in ``[timestamp] [level] [logger] message`` stream writer

Usage:
    from unilog import get_logger

    log = get_logger(__name__)
    log.info("loaded {} rows from {}", count, path)
"""

from .contract import LoggerContract
from .factory import LoggerFactory, get_logger
from .levels import Level
from .record import LogRecord
from .registry import BackendCandidate, BackendRegistry, Resolution, get_registry

__all__ = [
    "BackendCandidate",
    "BackendRegistry",
    "Level",
    "LogRecord",
    "LoggerContract",
    "LoggerFactory",
    "Resolution",
    "get_logger",
    "get_registry",
]
