"""
structmap.indirection -- Traversal through optional-value indirection.

Type level:
    Ref[T] and Optional[T] are indirection layers; Annotated[T, ...] and
    NewType wrappers are transparent. resolve_type() strips all of them.

Value level:
    A Ref box is one layer; a Dynamic box is one more when the caller asks
    for it. resolve_value() follows both down to the concrete value.

Assignment:
    set_value() writes through every Ref layer a declared type names,
    allocating the boxes that are missing.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import types
from typing import Annotated, Any, Union, get_args, get_origin

from structmap.types import Dynamic, Kind, Ref

_NONE_TYPE = type(None)


def strip_annotations(tp: Any) -> Any:
    """Remove Annotated and NewType wrappers, which carry no runtime shape."""
    while True:
        if get_origin(tp) is Annotated:
            tp = get_args(tp)[0]
            continue
        supertype = getattr(tp, "__supertype__", None)
        if supertype is not None:
            tp = supertype
            continue
        return tp


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def is_ref_type(tp: Any) -> bool:
    return tp is Ref or get_origin(tp) is Ref


def optional_arg(tp: Any) -> Any | None:
    """Return T for Optional[T] / T | None, otherwise None."""
    if not is_union(tp):
        return None
    args = get_args(tp)
    rest = [a for a in args if a is not _NONE_TYPE]
    if len(rest) == 1 and len(rest) < len(args):
        return rest[0]
    return None


def indirection_arg(tp: Any) -> Any | None:
    """Return the wrapped type if `tp` is one indirection layer, else None."""
    tp = strip_annotations(tp)
    if is_ref_type(tp):
        args = get_args(tp)
        return args[0] if args else Any
    return optional_arg(tp)


def resolve_type(tp: Any) -> Any:
    """Unwrap every indirection layer down to the innermost type."""
    tp = strip_annotations(tp)
    inner = indirection_arg(tp)
    if inner is None:
        return tp
    return resolve_type(inner)


def resolve_value(value: Any, unwrap_dynamic: bool = False) -> Any:
    """Follow Ref boxes (and Dynamic boxes if asked) to the concrete value.

    An empty Ref anywhere in the chain resolves to None.
    """
    if isinstance(value, Ref):
        return resolve_value(value.value, unwrap_dynamic)
    if unwrap_dynamic and isinstance(value, Dynamic):
        return resolve_value(value.value, unwrap_dynamic)
    return value


def set_value(holder: Any, attr: str, declared: Any, value: Any) -> None:
    """Assign `value` to `holder.attr` through the Ref layers of `declared`.

    Boxes already present on the chain are reused; missing ones are
    allocated. Optional layers are not storage and are passed over.
    """
    tp = strip_annotations(declared)
    inner = optional_arg(tp)
    if inner is not None:
        set_value(holder, attr, inner, value)
        return
    if is_ref_type(tp):
        ref = getattr(holder, attr, None)
        if not isinstance(ref, Ref):
            ref = Ref()
            setattr(holder, attr, ref)
        set_value(ref, "value", indirection_arg(tp), value)
        return
    setattr(holder, attr, value)


def kind_of_type(tp: Any) -> Kind:
    tp = strip_annotations(tp)
    if indirection_arg(tp) is not None:
        return Kind.INDIRECTION
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return Kind.SCALAR
    if dataclasses.is_dataclass(origin):
        return Kind.AGGREGATE
    if issubclass(origin, (str, bytes, bytearray)):
        return Kind.SCALAR
    if issubclass(origin, collections.abc.Mapping):
        return Kind.MAPPING
    if issubclass(origin, (collections.abc.Sequence, collections.abc.Set)):
        return Kind.SEQUENCE
    return Kind.SCALAR


def kind_of(value: Any) -> Kind:
    if value is None or isinstance(value, Ref):
        return Kind.INDIRECTION
    if isinstance(value, Dynamic):
        return kind_of(value.value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return Kind.AGGREGATE
    if isinstance(value, (str, bytes, bytearray)):
        return Kind.SCALAR
    if isinstance(value, collections.abc.Mapping):
        return Kind.MAPPING
    if isinstance(value, (collections.abc.Sequence, collections.abc.Set)):
        return Kind.SEQUENCE
    return Kind.SCALAR


def describe_type(tp: Any) -> str:
    """Readable name for a type or type expression, used in error messages."""
    if isinstance(tp, type) and not get_args(tp):
        return tp.__qualname__
    return repr(tp).replace("typing.", "").replace("structmap.types.", "")
