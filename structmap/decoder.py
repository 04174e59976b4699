"""
Decoder: binds an untyped source mapping onto a typed record instance.

Algorithm (per record, recursively):
    1. List the record's observable fields (structmap.record).
    2. For each field, build a fresh FieldPart and run the mutation steps in
       order. After the first step the lookup name is settled (falling back
       to the attribute name) and the value is read from the mapping once.
    3. Skip the field if a step asked for it.
    4. Record-typed fields are allocated if absent and decoded recursively,
       from the parent mapping when embedded, else from their own mapping.
    5. Other fields get the resolved value, converted when a lossless
       conversion exists, assigned through any Ref layers.

Failure modes:
    * A step raising aborts the decode; its exception propagates unchanged.
    * EmbeddingShapeError: non-embedded record field without a mapping.
    * TypeMismatchError: value not assignable to the field type.
    * InternalFaultError: any other fault, converted at the entry point.
    There is no rollback: fields assigned before a failure stay assigned.

A Decoder only holds its step tuple, so one instance can serve concurrent
decodes into distinct targets.
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from structmap.conversion import convert, matches
from structmap.exceptions import (
    DecodeError,
    EmbeddingShapeError,
    InternalFaultError,
    InvalidTargetError,
    StructmapError,
    TypeMismatchError,
)
from structmap.indirection import describe_type, resolve_type, resolve_value
from structmap.logging_config import LogContext, get_logger
from structmap.record import Record, RecordField, zero_value
from structmap.types import FieldPart, MutationStep

logger = get_logger("decoder")

R = TypeVar("R")


@dataclass
class _DecodeState:
    """Shared by every recursion level of one decode call."""

    steps: tuple[MutationStep, ...]
    step_error: BaseException | None = None
    field_count: int = 0


class Decoder:
    """Decodes mappings into records through an ordered mutation pipeline."""

    def __init__(self, *steps: MutationStep):
        self._steps: tuple[MutationStep, ...] = tuple(steps)

    @property
    def steps(self) -> tuple[MutationStep, ...]:
        return self._steps

    def add_step(self, step: MutationStep) -> None:
        """Append a step. Decodes already running keep their snapshot."""
        self._steps = (*self._steps, step)

    def decode(self, from_: Mapping[str, Any], to: Any) -> None:
        """Decode `from_` into the dataclass instance `to`, in place."""
        record = Record(to)
        if not isinstance(from_, Mapping):
            raise DecodeError(
                f"Source must be a mapping, got {describe_type(type(from_))}"
            )

        state = _DecodeState(steps=self._steps)
        record_type = describe_type(record.record_type)

        with LogContext.bind(record_type=record_type):
            logger.debug("decode_started", extra={"step_count": len(state.steps)})
            t0 = time.monotonic()
            try:
                self._decode(from_, record, state)
            except StructmapError:
                raise
            except Exception as exc:
                if exc is state.step_error:
                    raise
                logger.error(
                    "decode_failed",
                    extra={"field_count": state.field_count},
                    exc_info=True,
                )
                raise InternalFaultError(
                    record_type, f"{type(exc).__name__}: {exc}"
                ) from exc

            logger.debug(
                "decode_completed",
                extra={
                    "field_count": state.field_count,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 3),
                },
            )

    def build(self, from_: Mapping[str, Any], record_type: type[R]) -> R:
        """Allocate a zero-valued `record_type` and decode `from_` into it."""
        if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
            raise InvalidTargetError(
                describe_type(record_type), "expected a dataclass type"
            )
        target = zero_value(record_type)
        self.decode(from_, target)
        return target

    # -------------------------------------------------------------------------
    # Recursive walk
    # -------------------------------------------------------------------------

    def _decode(
        self, from_: Mapping[str, Any], record: Record, state: _DecodeState
    ) -> None:
        for field in record.fields():
            part = FieldPart(
                identifier=field.name,
                type=field.type,
                tags=field.tags,
                embedded=field.embedded,
            )
            self._run_steps(part, from_, state)

            if part.skip:
                logger.debug("field_skipped", extra={"field": field.name})
                continue

            if field.is_aggregate:
                self._decode_nested(from_, field, part, state)
            else:
                self._assign(field, part)
            state.field_count += 1

    def _run_steps(
        self, part: FieldPart, from_: Mapping[str, Any], state: _DecodeState
    ) -> None:
        for index, step in enumerate(state.steps):
            try:
                step(part)
            except Exception as exc:
                state.step_error = exc
                raise

            # The first step owns naming; the value is read once it is done.
            if index == 0:
                if not part.name:
                    part.name = part.identifier
                if part.name in from_:
                    part.value = from_[part.name]

    def _decode_nested(
        self,
        from_: Mapping[str, Any],
        field: RecordField,
        part: FieldPart,
        state: _DecodeState,
    ) -> None:
        nested = resolve_value(field.get())
        if nested is None:
            nested = zero_value(resolve_type(field.type))
            field.set(nested)

        if part.embedded:
            source = from_
        else:
            source = resolve_value(part.value, unwrap_dynamic=True)
            if not isinstance(source, Mapping):
                raise EmbeddingShapeError(
                    field.name, part.name, describe_type(type(source))
                )

        self._decode(source, Record(nested), state)

    def _assign(self, field: RecordField, part: FieldPart) -> None:
        value = resolve_value(part.value, unwrap_dynamic=True)
        if value is None:
            logger.debug("field_absent", extra={"field": field.name, "key": part.name})
            return

        target = resolve_type(field.type)
        converted = convert(value, target)
        if not matches(converted, target):
            raise TypeMismatchError(
                field.name, describe_type(type(value)), describe_type(target)
            )
        field.set(converted)
