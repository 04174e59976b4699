"""Default-value step: fill absent values from a tag."""

from __future__ import annotations

from structmap.tags import lookup, parse_tag
from structmap.types import FieldPart, MutationStep

DEFAULT_TAG = "default"


def from_tag(key: str = DEFAULT_TAG) -> MutationStep:
    """Use the name part of the `key` tag as the value when none was found.

    The default is text; put a cast step after this one to type it.
    """

    def step(part: FieldPart) -> None:
        if part.value is not None:
            return
        value, _ = parse_tag(lookup(part.tags, key))
        if value:
            part.value = value

    return step
