"""
Cast step: convert a field's source value to the field's declared type.

Runs after naming (and defaults), before the decoder assigns the value.
Strings are parsed the way text sources need it:

    "42"          -> int 42          "12.50" -> Decimal("12.50")
    "yes" / "off" -> True / False    "2026-02-01" -> date(2026, 2, 1)
    1588791963946 -> datetime (epoch milliseconds, UTC)

Containers are rebuilt element by element (list[int], tuple[str, ...],
dict[str, Ref[int]], set[UUID]); Ref layers are rebuilt around the cast
value; Optional and Union pick the first arm that accepts the value.
Record-typed values are left alone for the decoder to recurse into.

Custom casters per target type take precedence over the built-ins:

    cast.to_type({Money: lambda v: Money.of(v)})

A caster declines with NotConvertibleError; ValueError, TypeError and
ArithmeticError raised by a caster are treated the same way.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import sys
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Literal, Mapping, TypeVar, get_args, get_origin
from uuid import UUID

from structmap.conversion import matches
from structmap.exceptions import CastError, NotConvertibleError
from structmap.indirection import (
    describe_type,
    indirection_arg,
    is_ref_type,
    is_union,
    optional_arg,
    resolve_value,
    strip_annotations,
)
from structmap.types import FieldPart, MutationStep, Ref

Caster = Callable[[Any], Any]

_NONE_TYPE = type(None)
_TRUE_WORDS = frozenset({"true", "yes", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "0", "off", ""})
_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%m/%d/%Y", "%d/%m/%Y")
_NUMBERS = (int, float, Decimal)
_CONTAINER_FOR: dict[type, type] = {
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}


def _fail(value: Any, tp: Any, detail: str = "") -> NotConvertibleError:
    return NotConvertibleError(describe_type(type(value)), describe_type(tp), detail)


# -----------------------------------------------------------------------------
# Scalar casters
# -----------------------------------------------------------------------------


def to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (_NUMBERS, UUID, date)):
        return value.isoformat() if isinstance(value, date) else str(value)
    raise _fail(value, str)


def to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, (float, Decimal)):
        return int(value)
    if isinstance(value, str):
        number = Decimal(value.strip())
        # Same digit ceiling int(str) enforces; 0 disables it.
        limit = sys.get_int_max_str_digits()
        if limit and number.is_finite() and number.adjusted() >= limit:
            raise _fail(value, int, "too many digits")
        return int(number)
    raise _fail(value, int)


def to_float(value: Any) -> float:
    if isinstance(value, (bool, *_NUMBERS)):
        return float(value)
    if isinstance(value, str):
        return float(value.strip())
    raise _fail(value, float)


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        return Decimal(int(value))
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, (float, str)):
        return Decimal(str(value).strip())
    raise _fail(value, Decimal)


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, _NUMBERS):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise _fail(value, bool, f"{value!r} is not a boolean word")
    raise _fail(value, bool)


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except OSError as exc:
            # The platform's time conversion rejects out-of-range epochs.
            raise _fail(value, datetime, str(exc)) from exc
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    raise _fail(value, datetime)


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return to_datetime(value).date()
    if isinstance(value, str):
        text = value.strip()
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        raise _fail(value, date, f"cannot parse date {value!r}")
    raise _fail(value, date)


def to_uuid(value: Any) -> UUID:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        return UUID(value.strip())
    raise _fail(value, UUID)


def to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise _fail(value, bytes)


BUILTIN_CASTERS: dict[type, Caster] = {
    str: to_str,
    int: to_int,
    float: to_float,
    bool: to_bool,
    Decimal: to_decimal,
    datetime: to_datetime,
    date: to_date,
    UUID: to_uuid,
    bytes: to_bytes,
}


# -----------------------------------------------------------------------------
# Structural casting
# -----------------------------------------------------------------------------


def cast_value(value: Any, tp: Any, casters: Mapping[type, Caster] = BUILTIN_CASTERS) -> Any:
    """Cast `value` to the declared type `tp`. None stays None."""
    value = resolve_value(value, unwrap_dynamic=True)
    if value is None:
        return None

    tp = strip_annotations(tp)
    if tp is Any or tp is object or isinstance(tp, TypeVar):
        return value
    if is_ref_type(tp):
        return Ref(cast_value(value, indirection_arg(tp), casters))
    inner = optional_arg(tp)
    if inner is not None:
        return cast_value(value, inner, casters)
    if is_union(tp):
        return _to_union(value, tp, casters)
    if get_origin(tp) is Literal:
        return _to_literal(value, tp, casters)

    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        raise _fail(value, tp, "unsupported type")

    caster = casters.get(origin)
    if caster is not None:
        return _call(caster, value, tp)
    if dataclasses.is_dataclass(origin):
        return value
    if issubclass(origin, Enum):
        return _to_enum(value, origin, casters)
    if issubclass(origin, collections.abc.Mapping):
        return _to_mapping(value, tp, origin, casters)
    if origin is tuple:
        return _to_tuple(value, tp, casters)
    if issubclass(origin, (collections.abc.Sequence, collections.abc.Set)):
        return _to_collection(value, tp, origin, casters)
    if isinstance(value, origin):
        return value
    raise _fail(value, tp)


def _call(caster: Caster, value: Any, tp: Any) -> Any:
    try:
        return caster(value)
    except NotConvertibleError:
        raise
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise _fail(value, tp, str(exc)) from exc


def _to_union(value: Any, tp: Any, casters: Mapping[type, Caster]) -> Any:
    if matches(value, tp):
        return value
    for arm in get_args(tp):
        if arm is _NONE_TYPE:
            continue
        try:
            return cast_value(value, arm, casters)
        except NotConvertibleError:
            continue
    raise _fail(value, tp, "no union member accepts the value")


def _to_literal(value: Any, tp: Any, casters: Mapping[type, Caster]) -> Any:
    for literal in get_args(tp):
        if value == literal and type(value) is type(literal):
            return literal
    for literal in get_args(tp):
        try:
            if cast_value(value, type(literal), casters) == literal:
                return literal
        except NotConvertibleError:
            continue
    raise _fail(value, tp, "not one of the allowed literals")


def _to_enum(value: Any, enum_type: type[Enum], casters: Mapping[type, Caster]) -> Enum:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        pass
    if isinstance(value, str) and value in enum_type.__members__:
        return enum_type[value]
    members = list(enum_type)
    if members:
        member_type = type(members[0].value)
        if member_type is not type(value) and member_type in casters:
            try:
                return enum_type(_call(casters[member_type], value, member_type))
            except (NotConvertibleError, ValueError):
                pass
    raise _fail(value, enum_type, "no matching member")


def _to_mapping(
    value: Any, tp: Any, origin: type, casters: Mapping[type, Caster]
) -> Any:
    if not isinstance(value, collections.abc.Mapping):
        raise _fail(value, tp)
    args = get_args(tp)
    key_type, value_type = args if len(args) == 2 else (Any, Any)
    container = _CONTAINER_FOR.get(origin, origin)
    return container(
        (cast_value(k, key_type, casters), cast_value(v, value_type, casters))
        for k, v in value.items()
    )


def _items(value: Any, tp: Any) -> list[Any]:
    if isinstance(value, (str, bytes, bytearray, collections.abc.Mapping)):
        raise _fail(value, tp, "expected a sequence")
    if not isinstance(value, collections.abc.Iterable):
        raise _fail(value, tp, "expected a sequence")
    return list(value)


def _to_tuple(value: Any, tp: Any, casters: Mapping[type, Caster]) -> tuple[Any, ...]:
    items = _items(value, tp)
    args = get_args(tp)
    if not args:
        return tuple(items)
    if len(args) == 2 and args[1] is Ellipsis:
        return tuple(cast_value(item, args[0], casters) for item in items)
    if len(items) != len(args):
        raise _fail(value, tp, f"expected {len(args)} items, got {len(items)}")
    return tuple(cast_value(item, arg, casters) for item, arg in zip(items, args))


def _to_collection(
    value: Any, tp: Any, origin: type, casters: Mapping[type, Caster]
) -> Any:
    items = _items(value, tp)
    args = get_args(tp)
    item_type = args[0] if args else Any
    container = _CONTAINER_FOR.get(origin, origin)
    return container(cast_value(item, item_type, casters) for item in items)


# -----------------------------------------------------------------------------
# Step
# -----------------------------------------------------------------------------


def to_type(casters: Mapping[type, Caster] | None = None) -> MutationStep:
    """Cast each field's value to its declared type, custom casters first."""
    registry: dict[type, Caster] = {**BUILTIN_CASTERS, **(casters or {})}

    def step(part: FieldPart) -> None:
        if part.value is None:
            return
        try:
            part.value = cast_value(part.value, part.type, registry)
        except NotConvertibleError as exc:
            source = resolve_value(part.value, unwrap_dynamic=True)
            raise CastError(
                part.identifier,
                describe_type(type(source)),
                describe_type(part.type),
                str(exc),
            ) from exc

    return step
