"""
structmap -- Bind untyped key/value mappings onto typed dataclass records.

Usage:
    from structmap import Decoder
    from structmap.behavior import cast, flag, name

    decoder = Decoder(name.from_tag("structmap"), flag.required("structmap"), cast.to_type())
    decoder.decode({"user": "ana"}, settings)

The decoder walks the record's fields, runs every mutation step over each
field, and assigns the result. Built-in steps live in structmap.behavior;
assembling them from YAML lives in structmap.config.
"""

from structmap.decoder import Decoder
from structmap.exceptions import (
    CastError,
    ConfigError,
    DecodeError,
    EmbeddingShapeError,
    InternalFaultError,
    InvalidTargetError,
    MissingRequiredFieldError,
    NotConvertibleError,
    PipelineStepError,
    StructmapError,
    TypeMismatchError,
    UnknownStepError,
)
from structmap.record import Record, RecordField, embedded, zero_value
from structmap.tags import has_flag, lookup, parse_tag
from structmap.types import Dynamic, FieldPart, Kind, MutationStep, Ref

__all__ = [
    "CastError",
    "ConfigError",
    "DecodeError",
    "Decoder",
    "Dynamic",
    "EmbeddingShapeError",
    "FieldPart",
    "InternalFaultError",
    "InvalidTargetError",
    "Kind",
    "MissingRequiredFieldError",
    "MutationStep",
    "NotConvertibleError",
    "PipelineStepError",
    "Record",
    "RecordField",
    "Ref",
    "StructmapError",
    "TypeMismatchError",
    "UnknownStepError",
    "embedded",
    "has_flag",
    "lookup",
    "parse_tag",
    "zero_value",
]
