"""
Built-in mutation steps.

    name     -- choose the lookup key (must come first)
    default  -- substitute tag defaults for absent values
    flag     -- required / optional / noembedded tag flags
    cast     -- convert values to the declared field types

Canonical order: naming, default, flags, cast.
"""

from structmap.behavior import cast, default, flag, name

__all__ = ["cast", "default", "flag", "name"]
