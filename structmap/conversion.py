"""
Assignability checks and best-effort conversion between runtime values and
declared field types.

The decoder only performs conversions that cannot lose meaning: numeric
widening, integral floats to int, moving items between list/tuple/set
containers, any mapping to dict, plain values to their Enum member. A bool
is never treated as a number. Anything richer (parsing strings, element
casting) belongs to the cast step.

Floats with a fractional part are not truncated into int fields, so a JSON
2.5 bound to an int is a TypeMismatchError. Sources that need truncation
put cast.to_type() in the pipeline; its int caster truncates.
"""

from __future__ import annotations

import collections.abc
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, TypeVar, get_args, get_origin

from structmap.indirection import is_ref_type, is_union, strip_annotations
from structmap.types import Ref

_NONE_TYPE = type(None)
_NUMBERS = (int, float, complex, Decimal)
_CONTAINERS = (list, tuple, set, frozenset)


def _is_integral(value: float | Decimal) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return value.is_finite() and value == value.to_integral_value()


def matches(value: Any, tp: Any) -> bool:
    """True if `value` can be stored as-is in a field declared as `tp`."""
    tp = strip_annotations(tp)
    if tp is Any or tp is object or isinstance(tp, TypeVar):
        return True
    if is_union(tp):
        return any(matches(value, arm) for arm in get_args(tp))
    if get_origin(tp) is Literal:
        return value in get_args(tp)
    if is_ref_type(tp):
        return isinstance(value, Ref)
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return False
    if isinstance(value, bool) and origin in _NUMBERS:
        return False
    return isinstance(value, origin)


def convert(value: Any, tp: Any) -> Any:
    """
    Convert `value` towards `tp` when a lossless relationship exists.

    Returns the value unchanged when no conversion applies; callers check
    the result with matches().
    """
    tp = strip_annotations(tp)
    if matches(value, tp):
        return value

    if is_union(tp):
        for arm in get_args(tp):
            if arm is _NONE_TYPE:
                continue
            converted = convert(value, arm)
            if matches(converted, arm):
                return converted
        return value

    origin = get_origin(tp) or tp
    if not isinstance(origin, type) or isinstance(value, bool):
        return value

    if issubclass(origin, Enum):
        try:
            return origin(value)
        except (ValueError, TypeError):
            return value

    # Out-of-range numbers and unhashable set items have no lossless
    # conversion; the unchanged value then fails matches().
    try:
        return _reshape(value, origin)
    except (OverflowError, TypeError, ValueError):
        return value


def _reshape(value: Any, origin: type) -> Any:
    if origin is float and isinstance(value, int):
        return float(value)
    if origin is complex and isinstance(value, (int, float)):
        return complex(value)
    if origin is Decimal and isinstance(value, int):
        return Decimal(value)
    if origin is Decimal and isinstance(value, float):
        return Decimal(str(value))
    if origin is int and isinstance(value, (float, Decimal)) and _is_integral(value):
        return int(value)

    if origin in _CONTAINERS and isinstance(value, _CONTAINERS):
        return origin(value)
    if origin is dict and isinstance(value, collections.abc.Mapping):
        return dict(value)
    if issubclass(origin, str) and isinstance(value, str):
        return origin(value)

    return value
