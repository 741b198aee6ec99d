"""
Lazy message formatting.

Templates use ``{}`` as a positional placeholder. ``\\{}`` escapes the anchor
and renders a literal ``{}``; ``\\\\{}`` renders one backslash followed by the
substituted value.

Arity mismatches never raise: unfilled placeholders pass through literally and
excess arguments are ignored. A trailing exception argument that no
placeholder consumes is split off by :func:`split_error` and carried as the
record's error instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Sequence

from .exceptions import FormatMismatch

ANCHOR = "{}"
ESCAPE = "\\"


class ArgShape(str, Enum):
    """Argument shape of a log call."""

    MESSAGE = "message"
    ONE = "one"
    TWO = "two"
    MANY = "many"


def shape_of(args: Sequence[Any]) -> ArgShape:
    n = len(args)
    if n == 0:
        return ArgShape.MESSAGE
    if n == 1:
        return ArgShape.ONE
    if n == 2:
        return ArgShape.TWO
    return ArgShape.MANY


def safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception as exc:
        return f"[!str() failed: {type(exc).__name__}]"


def _scan(template: str, args: Sequence[Any]) -> tuple[str, int]:
    """Substitute ``args`` into ``template``; returns the text and the number of args used."""
    out: list[str] = []
    i = 0
    used = 0
    count = len(args)
    while used < count:
        j = template.find(ANCHOR, i)
        if j == -1:
            break
        if j > 0 and template[j - 1] == ESCAPE:
            if j > 1 and template[j - 2] == ESCAPE:
                # Double escape: keep one backslash, still substitute.
                out.append(template[i : j - 1])
                out.append(safe_str(args[used]))
                used += 1
                i = j + 2
            else:
                out.append(template[i : j - 1])
                out.append("{")
                i = j + 1
        else:
            out.append(template[i:j])
            out.append(safe_str(args[used]))
            used += 1
            i = j + 2
    out.append(template[i:])
    return "".join(out), used


def count_placeholders(template: str | None) -> int:
    """Number of unescaped placeholders in ``template``."""
    if not template:
        return 0
    count = 0
    i = 0
    while True:
        j = template.find(ANCHOR, i)
        if j == -1:
            return count
        escaped = j > 0 and template[j - 1] == ESCAPE and not (j > 1 and template[j - 2] == ESCAPE)
        if not escaped:
            count += 1
        i = j + 2


# =============================================================================
# Render Shapes
# =============================================================================


def render(template: str | None, args: Sequence[Any]) -> str:
    """Variadic form: fill placeholders left-to-right with ``args``."""
    if template is None:
        return ""
    if not args:
        return template
    return _scan(template, args)[0]


def render_message(template: str | None) -> str:
    """Message-only form; no substitution takes place."""
    if template is None:
        return ""
    return template


def render_one(template: str | None, arg: Any) -> str:
    if template is None:
        return ""
    if ESCAPE in template:
        return _scan(template, (arg,))[0]
    head, anchor, tail = template.partition(ANCHOR)
    if not anchor:
        return template
    return head + safe_str(arg) + tail


def render_two(template: str | None, arg_a: Any, arg_b: Any) -> str:
    if template is None:
        return ""
    if ESCAPE in template:
        return _scan(template, (arg_a, arg_b))[0]
    head, anchor, tail = template.partition(ANCHOR)
    if not anchor:
        return template
    middle, anchor, tail = tail.partition(ANCHOR)
    if not anchor:
        return head + safe_str(arg_a) + middle
    return head + safe_str(arg_a) + middle + safe_str(arg_b) + tail


def render_shape(shape: ArgShape, template: str | None, args: Sequence[Any]) -> str:
    """Single dispatch point used by records to render their message."""
    if shape is ArgShape.MESSAGE:
        return render_message(template)
    if shape is ArgShape.ONE:
        return render_one(template, args[0])
    if shape is ArgShape.TWO:
        return render_two(template, args[0], args[1])
    return render(template, args)


# =============================================================================
# Argument Inspection
# =============================================================================


def split_error(template: str | None, args: tuple[Any, ...]) -> tuple[tuple[Any, ...], BaseException | None]:
    """Detach a trailing exception that no placeholder consumes."""
    if not args or not isinstance(args[-1], BaseException):
        return args, None
    if count_placeholders(template) >= len(args):
        return args, None
    return args[:-1], args[-1]


def mismatch(template: str | None, args: Sequence[Any]) -> FormatMismatch | None:
    """Describe an arity mismatch between ``template`` and ``args``, if any."""
    expected = count_placeholders(template)
    if expected == len(args) or not args:
        return None
    return FormatMismatch(template or "", expected, len(args))
