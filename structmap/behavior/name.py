"""
Naming steps: decide the key a field is looked up under.

These belong first in the pipeline; the decoder reads the source value right
after the first step runs.
"""

from __future__ import annotations

import re

from structmap.tags import lookup, parse_tag
from structmap.types import FieldPart, MutationStep

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

SKIP_NAME = "-"


def from_tag(key: str) -> MutationStep:
    """Name the field after the name part of its `key` tag; "-" skips it."""

    def step(part: FieldPart) -> None:
        name, _ = parse_tag(lookup(part.tags, key))
        if name == SKIP_NAME:
            part.skip = True
        elif name:
            part.name = name

    return step


def noop(part: FieldPart) -> None:
    """Leave the name empty; the decoder uses the attribute name."""


def snake_case(part: FieldPart) -> None:
    """userName / UserName -> user_name."""
    part.name = _CAMEL_BOUNDARY.sub("_", part.identifier).lower()


def camel_case(part: FieldPart) -> None:
    """user_name -> userName."""
    head, *rest = part.identifier.lstrip("_").split("_")
    part.name = head + "".join(word[:1].upper() + word[1:] for word in rest)


def pascal_case(part: FieldPart) -> None:
    """user_name -> UserName."""
    words = part.identifier.lstrip("_").split("_")
    part.name = "".join(word[:1].upper() + word[1:] for word in words)


def discovery(*steps: MutationStep) -> MutationStep:
    """Try naming steps in order; the first that names (or skips) the field wins."""

    def step(part: FieldPart) -> None:
        for candidate in steps:
            candidate(part)
            if part.name or part.skip:
                return

    return step
