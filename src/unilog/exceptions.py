"""
Failure taxonomy.

None of these ever reaches a caller of a logging method. They describe
failures the facade absorbed and are handed to :mod:`unilog.diagnostics`.
"""

from __future__ import annotations


class UnilogError(Exception):
    """Base class for all facade failures."""


class ProbeFailure(UnilogError):
    """A backend's capability probe or loader raised unexpectedly."""

    def __init__(self, backend: str, cause: BaseException):
        self.backend = backend
        self.cause = cause
        super().__init__(f"probe for backend '{backend}' failed: {type(cause).__name__}: {cause}")


class ConfigurationAmbiguity(UnilogError):
    """More than one logging engine is available; the priority order decided."""

    def __init__(self, selected: str, available: tuple[str, ...]):
        self.selected = selected
        self.available = available
        super().__init__(
            f"multiple logging backends available ({', '.join(available)}); selected '{selected}'"
        )


class FormatMismatch(UnilogError):
    """Placeholder count and argument count differ."""

    def __init__(self, template: str, expected: int, actual: int):
        self.template = template
        self.expected = expected
        self.actual = actual
        super().__init__(f"template {template!r} has {expected} placeholder(s) but got {actual} argument(s)")


class DispatchFailure(UnilogError):
    """A backend raised while gating or writing a record."""

    def __init__(self, logger_name: str, cause: BaseException):
        self.logger_name = logger_name
        self.cause = cause
        super().__init__(f"logger '{logger_name}' failed to dispatch: {type(cause).__name__}: {cause}")
