"""
Typed Exception Hierarchy for structmap.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from StructmapError:

    StructmapError (base)
    |
    +-- DecodeError
    |   +-- InvalidTargetError
    |   +-- EmbeddingShapeError
    |   +-- TypeMismatchError
    |   +-- InternalFaultError
    |
    +-- PipelineStepError
    |   +-- MissingRequiredFieldError
    |   +-- CastError
    |
    +-- NotConvertibleError
    |
    +-- ConfigError
        +-- UnknownStepError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                    | When Raised
-----------|-------------------------|---------------------------------------------
Decode     | INVALID_TARGET          | Target is not a mutable dataclass instance
           | EMBEDDING_SHAPE         | Nested record value is not a mapping
           | TYPE_MISMATCH           | Value cannot be assigned to the field type
           | INTERNAL_FAULT          | Unexpected fault inside a decode call
-----------|-------------------------|---------------------------------------------
Pipeline   | MISSING_REQUIRED_FIELD  | Field flagged required has no value
           | CAST_FAILED             | cast step could not convert the value
-----------|-------------------------|---------------------------------------------
Cast       | NOT_CONVERTIBLE         | A caster declined the value
-----------|-------------------------|---------------------------------------------
Config     | CONFIG_ERROR            | Malformed decoder configuration
           | UNKNOWN_STEP            | Naming strategy name is not registered

===============================================================================
HANDLING PATTERNS
===============================================================================

1. CATCH SPECIFIC EXCEPTIONS:

    try:
        decoder.decode(payload, settings)
    except MissingRequiredFieldError as e:
        reply(400, f"{e.key} is required")
    except TypeMismatchError as e:
        reply(400, f"{e.field}: expected {e.target_type}, got {e.source_type}")

2. STEP ERRORS ARE NOT WRAPPED:

    Anything a mutation step raises reaches the caller unchanged, whether it
    derives from StructmapError or not. Only faults raised by the engine
    itself are converted to InternalFaultError.
"""

from __future__ import annotations


class StructmapError(Exception):
    """
    Base exception for all structmap errors.

    All subclasses carry a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STRUCTMAP_ERROR"


# Decode exceptions


class DecodeError(StructmapError):
    """Base exception for failures raised by the decode engine."""

    code: str = "DECODE_ERROR"


class InvalidTargetError(DecodeError):
    """Decode target is not an addressable record."""

    code: str = "INVALID_TARGET"

    def __init__(self, target_type: str, reason: str):
        self.target_type = target_type
        self.reason = reason
        super().__init__(f"Cannot decode into {target_type}: {reason}")


class EmbeddingShapeError(DecodeError):
    """A non-embedded record field received something other than a mapping."""

    code: str = "EMBEDDING_SHAPE"

    def __init__(self, field: str, key: str, source_type: str):
        self.field = field
        self.key = key
        self.source_type = source_type
        super().__init__(
            f"Field {field} is not an embedded record, expected its value "
            f"under {key!r} to be a mapping, got {source_type}"
        )


class TypeMismatchError(DecodeError):
    """A resolved value has no assignable relationship to the field type."""

    code: str = "TYPE_MISMATCH"

    def __init__(self, field: str, source_type: str, target_type: str):
        self.field = field
        self.source_type = source_type
        self.target_type = target_type
        super().__init__(
            f"Field {field} value of type {source_type} is not assignable "
            f"to type {target_type}"
        )


class InternalFaultError(DecodeError):
    """Unexpected fault during a decode call, converted at the entry point."""

    code: str = "INTERNAL_FAULT"

    def __init__(self, target_type: str, detail: str):
        self.target_type = target_type
        self.detail = detail
        super().__init__(f"Decoding into {target_type} failed: {detail}")


# Pipeline step exceptions


class PipelineStepError(StructmapError):
    """Base exception for failures reported by the built-in mutation steps."""

    code: str = "PIPELINE_STEP_ERROR"


class MissingRequiredFieldError(PipelineStepError):
    """Field flagged as required has no value in the source mapping."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str, key: str):
        self.field = field
        self.key = key
        super().__init__(f"Field {field} is required, no value found for {key!r}")


class CastError(PipelineStepError):
    """The cast step could not convert a value to the field type."""

    code: str = "CAST_FAILED"

    def __init__(self, field: str, source_type: str, target_type: str, reason: str):
        self.field = field
        self.source_type = source_type
        self.target_type = target_type
        self.reason = reason
        super().__init__(
            f"Field {field} cannot cast {source_type} to {target_type}: {reason}"
        )


# Cast exceptions


class NotConvertibleError(StructmapError):
    """A caster cannot produce the target type from the given value."""

    code: str = "NOT_CONVERTIBLE"

    def __init__(self, source_type: str, target_type: str, detail: str = ""):
        self.source_type = source_type
        self.target_type = target_type
        self.detail = detail
        message = f"{source_type} is not convertible to {target_type}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


# Configuration exceptions


class ConfigError(StructmapError):
    """Decoder configuration could not be loaded or is malformed."""

    code: str = "CONFIG_ERROR"


class UnknownStepError(ConfigError):
    """Configuration names a step that is not registered."""

    code: str = "UNKNOWN_STEP"

    def __init__(self, kind: str, name: str, known: tuple[str, ...]):
        self.kind = kind
        self.name = name
        self.known = known
        super().__init__(
            f"Unknown {kind} {name!r}; expected one of: {', '.join(known)}"
        )
