"""
Normalizer - canonical form of a raw string for comparison.

Every lookup key in the resolver (cache keys, synonym keys, fuzzy
candidates) goes through `normalize` first, so that "Kaki-Lima!" and
"kaki lima" end up as the same key "kakilima".
"""

from __future__ import annotations

import re

from ..errors import InvalidInputError

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize(text: str) -> str:
    """
    Lowercase, trim and drop everything outside [a-z0-9].

    Idempotent: normalize(normalize(x)) == normalize(x).
    """
    if not isinstance(text, str):
        raise InvalidInputError(
            f"Expected a string to normalize, got {type(text).__name__}",
            reason="non_string_input",
        )
    return _NON_ALNUM.sub("", text.lower().strip())
