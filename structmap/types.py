"""
structmap.types -- Value boxes and the per-field working record.

Ref and Dynamic are the two wrappers a source value (or a record field) may
carry on top of its concrete value. FieldPart is the only structure handed
to mutation steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Mapping, TypeVar

T = TypeVar("T")


class Kind(str, Enum):
    """Structural kind of a type or a value."""

    SCALAR = "scalar"
    INDIRECTION = "indirection"  # Ref / Optional layer, or an absent value
    AGGREGATE = "aggregate"  # dataclass record
    SEQUENCE = "sequence"  # list, tuple, set, frozenset
    MAPPING = "mapping"


class Ref(Generic[T]):
    """Mutable optional-value box. Ref[Ref[str]] is two layers of indirection."""

    __slots__ = ("value",)

    def __init__(self, value: T | None = None):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ref):
            return NotImplemented
        return self.value == other.value

    def __repr__(self) -> str:
        return f"Ref({self.value!r})"


@dataclass(frozen=True)
class Dynamic:
    """A value whose static type is "any", tagged with its runtime kind."""

    value: Any

    @property
    def kind(self) -> Kind:
        from structmap.indirection import kind_of

        return kind_of(self.value)


@dataclass
class FieldPart:
    """
    Mutable working state for one record field during one decode call.

    `name` stays empty until a step sets it; the decoder falls back to
    `identifier` after the first step. `value` is None when the source
    mapping has nothing for the field.
    """

    identifier: str
    type: Any
    tags: Mapping[str, Any] = field(default_factory=dict)
    name: str = ""
    value: Any = None
    skip: bool = False
    embedded: bool = False


MutationStep = Callable[[FieldPart], None]
