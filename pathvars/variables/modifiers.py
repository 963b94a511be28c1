"""
Bash style parameter expansion operators.

All patterns are plain string comparisons, there is no glob matching:

- $(var-default)          default when var is unset or empty
- $(var+alternate)        alternate when var is set and non-empty
- $(var:offset[:length])  substring, counted in codepoints
- $(var#prefix)           remove a literal prefix
- $(var%suffix)           remove a literal suffix
- $(var/pattern/repl)     replace every occurrence
- $(var//pattern/repl)    replace every occurrence
- $(var/#pattern/repl)    replace a literal prefix
- $(var/%pattern/repl)    replace a literal suffix
- $(var^) $(var^^)        uppercase first character / whole value
- $(var,) $(var,,)        lowercase first character / whole value
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


_ATOI_PATTERN = re.compile(r'\s*([+-]?)(\d+)')
_ATOI_MAX_DIGITS = 18


class ReplaceMode(str, Enum):
    """Which occurrences of the pattern a replacement touches."""
    FIRST = "first"
    GLOBAL = "global"
    PREFIX = "prefix"
    SUFFIX = "suffix"


class CaseScope(str, Enum):
    FIRST_CHAR = "first_char"
    WHOLE = "whole"


class CaseDirection(str, Enum):
    UPPER = "upper"
    LOWER = "lower"


@dataclass(frozen=True)
class NoOp:
    """Pass the base value through unchanged."""


@dataclass(frozen=True)
class Default:
    text: str


@dataclass(frozen=True)
class Alternate:
    text: str


@dataclass(frozen=True)
class Slice:
    offset: int
    length: Optional[int] = None


@dataclass(frozen=True)
class StripPrefix:
    pattern: str


@dataclass(frozen=True)
class StripSuffix:
    pattern: str


@dataclass(frozen=True)
class Replace:
    mode: ReplaceMode
    pattern: str
    replacement: str = ""


@dataclass(frozen=True)
class CaseFold:
    scope: CaseScope
    direction: CaseDirection


ModifierOp = Union[NoOp, Default, Alternate, Slice, StripPrefix, StripSuffix, Replace, CaseFold]


def _atoi(text: str) -> int:
    """
    Read a leading integer the way C atoi does, 0 if there is none.

    Overlong digit runs saturate to the largest value with
    _ATOI_MAX_DIGITS digits, which still clamps like any huge offset.
    """
    match = _ATOI_PATTERN.match(text)
    if not match:
        return 0
    sign, digits = match.groups()
    digits = digits.lstrip('0') or '0'
    if len(digits) > _ATOI_MAX_DIGITS:
        digits = '9' * _ATOI_MAX_DIGITS
    return int(sign + digits)


def parse_modifier(spec: str) -> ModifierOp:
    """
    Parse the modifier text following a variable name.

    Malformed bodies parse to the closest meaningful operation instead of
    failing, unknown operators parse to NoOp.

    Args:
        spec: Modifier text, e.g. ':0:3' or '/img/photo'

    Returns:
        Parsed modifier operation
    """
    if not spec:
        return NoOp()

    operator, body = spec[0], spec[1:]

    if operator == '-':
        return Default(body)
    if operator == '+':
        return Alternate(body)
    if operator == ':':
        offset, sep, length = body.partition(':')
        return Slice(_atoi(offset), _atoi(length) if sep else None)
    if operator == '#':
        return StripPrefix(body)
    if operator == '%':
        return StripSuffix(body)
    if operator == '/':
        return _parse_replace(body)
    if operator in '^,':
        direction = CaseDirection.UPPER if operator == '^' else CaseDirection.LOWER
        scope = CaseScope.WHOLE if body[:1] == operator else CaseScope.FIRST_CHAR
        return CaseFold(scope, direction)

    return NoOp()


def _parse_replace(body: str) -> Replace:
    # Single '/' is global as well; existing patterns rely on it
    mode = ReplaceMode.GLOBAL
    if body[:1] == '/':
        body = body[1:]
    elif body[:1] == '#':
        mode = ReplaceMode.PREFIX
        body = body[1:]
    elif body[:1] == '%':
        mode = ReplaceMode.SUFFIX
        body = body[1:]

    pattern, _, replacement = body.partition('/')
    return Replace(mode, pattern, replacement)


def apply_modifier(base: Optional[str], spec: Union[str, ModifierOp]) -> str:
    """
    Apply a modifier to a resolved base value.

    Args:
        base: Resolved variable value, None when the variable is unset
        spec: Modifier text or an already parsed operation

    Returns:
        Transformed value; never None
    """
    op = parse_modifier(spec) if isinstance(spec, str) else spec

    if isinstance(op, Default):
        return op.text if not base else base

    # Everything else needs a value to work on
    if base is None:
        return ''

    if isinstance(op, Alternate):
        return op.text if base else ''
    if isinstance(op, Slice):
        return _slice(base, op.offset, op.length)
    if isinstance(op, StripPrefix):
        if op.pattern and base.startswith(op.pattern):
            return base[len(op.pattern):]
        return base
    if isinstance(op, StripSuffix):
        if op.pattern and base.endswith(op.pattern):
            return base[:len(base) - len(op.pattern)]
        return base
    if isinstance(op, Replace):
        return _replace(base, op)
    if isinstance(op, CaseFold):
        return _fold_case(base, op)

    return base


def _slice(value: str, offset: int, length: Optional[int]) -> str:
    size = len(value)

    if offset >= 0:
        start = min(offset, size)
    else:
        start = size + max(offset, -size)

    end = size
    if length is not None:
        remaining = size - start
        if length >= 0:
            end = start + min(length, remaining)
        else:
            end = size + max(length, -remaining)

    if start >= end:
        return ''
    return value[start:end]


def _replace(value: str, op: Replace) -> str:
    if op.mode == ReplaceMode.PREFIX:
        if value.startswith(op.pattern):
            return op.replacement + value[len(op.pattern):]
        return value
    if op.mode == ReplaceMode.SUFFIX:
        if value.endswith(op.pattern):
            return value[:len(value) - len(op.pattern)] + op.replacement
        return value

    if not op.pattern:
        return value
    if op.mode == ReplaceMode.FIRST:
        return value.replace(op.pattern, op.replacement, 1)
    return value.replace(op.pattern, op.replacement)


def _fold_case(value: str, op: CaseFold) -> str:
    if not value:
        return value

    if op.scope == CaseScope.WHOLE:
        return value.upper() if op.direction == CaseDirection.UPPER else value.lower()

    first = value[0].upper() if op.direction == CaseDirection.UPPER else value[0].lower()
    # only a one-to-one mapping; 'ß' stays 'ß' rather than becoming 'SS'
    if len(first) != 1:
        first = value[0]
    return first + value[1:]
