"""
Flag steps: act on the flags of a field's tag (``name,flag1,flag2``).

Place them after the naming step so `part.value` has been looked up.
"""

from __future__ import annotations

from structmap.exceptions import MissingRequiredFieldError
from structmap.tags import has_flag
from structmap.types import FieldPart, MutationStep

REQUIRED = "required"
OPTIONAL = "optional"
NO_EMBEDDED = "noembedded"


def required(key: str) -> MutationStep:
    """Fail when a field flagged ``required`` has no value."""

    def step(part: FieldPart) -> None:
        if part.value is None and has_flag(part.tags, key, REQUIRED):
            raise MissingRequiredFieldError(part.identifier, part.name)

    return step


def optional(key: str) -> MutationStep:
    """Skip a field flagged ``optional`` when it has no value.

    Nested records normally demand a mapping; this lets one be omitted.
    """

    def step(part: FieldPart) -> None:
        if part.value is None and has_flag(part.tags, key, OPTIONAL):
            part.skip = True

    return step


def no_embedded(key: str) -> MutationStep:
    """Make an embedded record flagged ``noembedded`` read its own sub-mapping."""

    def step(part: FieldPart) -> None:
        if part.embedded and has_flag(part.tags, key, NO_EMBEDDED):
            part.embedded = False

    return step
