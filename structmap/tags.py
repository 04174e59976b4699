"""
Tag strings attached to record fields.

Tags live in the dataclass field metadata, keyed by tag name:

    username: str = field(default="", metadata={"structmap": "user,required"})

A tag value has the form ``name[,flag1,flag2...]``. The name part may be
empty (``",required"``) to keep the default lookup name.
"""

from __future__ import annotations

from typing import Any, Mapping


def parse_tag(tag: str | None) -> tuple[str, frozenset[str]]:
    """Split a tag value into its name and its set of flags."""
    if not tag:
        return "", frozenset()
    name, _, rest = tag.partition(",")
    flags = frozenset(f.strip() for f in rest.split(",") if f.strip())
    return name.strip(), flags


def lookup(tags: Mapping[str, Any], key: str) -> str:
    """Return the tag value stored under `key`, or an empty string."""
    value = tags.get(key)
    if value is None:
        return ""
    return str(value)


def has_flag(tags: Mapping[str, Any], key: str, flag: str) -> bool:
    _, flags = parse_tag(lookup(tags, key))
    return flag in flags
