"""
structmap.record -- Field listing for target records.

A target record is an instance of a non-frozen dataclass. Record(target)
lists its observable fields in declaration order; fields whose name starts
with an underscore are private and never decoded.

Embedded records
----------------
A field declared with embedded() shares its parent's namespace: the decoder
feeds it the parent's source mapping instead of a nested one.

    @dataclass
    class Contact:
        address: str = ""

    @dataclass
    class Customer:
        contact: Contact = embedded(default_factory=Contact)
        name: str = ""

    {"name": "Ana", "address": "Street A"} decodes into both levels.
"""

from __future__ import annotations

import collections.abc
import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping, get_origin, get_type_hints

from structmap.exceptions import InvalidTargetError
from structmap.indirection import (
    describe_type,
    indirection_arg,
    kind_of_type,
    resolve_type,
    set_value,
    strip_annotations,
)
from structmap.types import Kind

EMBEDDED = "structmap.embedded"

_ABSTRACT_CONTAINERS: dict[type, type] = {
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
}


def embedded(*, metadata: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
    """dataclasses.field() for a member that shares its parent's namespace."""
    meta = dict(metadata or {})
    meta[EMBEDDED] = True
    return dataclasses.field(metadata=meta, **kwargs)


def type_hints(record_type: type) -> dict[str, Any]:
    """Resolved field annotations of a dataclass, Annotated extras kept."""
    try:
        return get_type_hints(record_type, include_extras=True)
    except NameError as exc:
        raise InvalidTargetError(
            describe_type(record_type), f"cannot resolve field annotations ({exc})"
        ) from exc


def is_exported(name: str) -> bool:
    return not name.startswith("_")


def zero_value(tp: Any) -> Any:
    """
    Zero value for a declared type.

    Indirection is absent (None), records are built from the zero values of
    their fields without defaults, containers are empty and scalars use
    their no-argument constructor. Types without one have no zero (None).
    """
    tp = strip_annotations(tp)
    if indirection_arg(tp) is not None:
        return None
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return None
    if dataclasses.is_dataclass(origin):
        return _zero_record(origin)
    if origin in _ABSTRACT_CONTAINERS:
        return _ABSTRACT_CONTAINERS[origin]()
    try:
        return origin()
    except TypeError:
        return None


def _zero_record(record_type: type) -> Any:
    hints = type_hints(record_type)
    kwargs: dict[str, Any] = {}
    unset: list[dataclasses.Field] = []
    for f in dataclasses.fields(record_type):
        if f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING:
            continue
        if f.init:
            kwargs[f.name] = zero_value(hints.get(f.name, f.type))
        else:
            unset.append(f)
    record = record_type(**kwargs)
    # init=False fields without a default are never set by __init__.
    for f in unset:
        if not hasattr(record, f.name):
            setattr(record, f.name, zero_value(hints.get(f.name, f.type)))
    return record


@dataclass(frozen=True)
class RecordField:
    """One declared member of a target record, with its write handle."""

    record: Any
    name: str
    type: Any
    tags: Mapping[str, Any]
    embedded: bool = False

    @property
    def is_aggregate(self) -> bool:
        return kind_of_type(resolve_type(self.type)) is Kind.AGGREGATE

    def get(self) -> Any:
        """Current value, or None when the attribute was never set."""
        return getattr(self.record, self.name, None)

    def set(self, value: Any) -> None:
        set_value(self.record, self.name, self.type, value)


class Record:
    """Write handle over a target record instance."""

    def __init__(self, target: Any):
        record_type = type(target)
        if isinstance(target, type) or not dataclasses.is_dataclass(target):
            raise InvalidTargetError(
                describe_type(target if isinstance(target, type) else record_type),
                "expected a dataclass instance",
            )
        if record_type.__dataclass_params__.frozen:
            raise InvalidTargetError(
                describe_type(record_type), "frozen dataclass fields are not assignable"
            )
        self._target = target

    @property
    def target(self) -> Any:
        return self._target

    @property
    def record_type(self) -> type:
        return type(self._target)

    def fields(self) -> list[RecordField]:
        """Observable fields in declaration order."""
        hints = type_hints(self.record_type)
        return [
            RecordField(
                record=self._target,
                name=f.name,
                type=hints.get(f.name, f.type),
                tags=f.metadata,
                embedded=bool(f.metadata.get(EMBEDDED, False)),
            )
            for f in dataclasses.fields(self._target)
            if is_exported(f.name)
        ]
