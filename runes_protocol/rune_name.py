# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Rune name encoding (modified base-26).

A name is folded left to right with A=0 ... Z=25, so "A" is 0, "B" is 1
and "AA" is 26. There is no decoder: nothing here needs a name back
from its number.
"""

import re

_NON_LETTERS = re.compile(r"[^A-Z]")


def normalize_rune_name(name: str) -> str:
    """Uppercase a name and strip everything outside A-Z."""
    return _NON_LETTERS.sub("", name.upper())


def encode_rune_name(name: str) -> int:
    """
    Encode a rune name as an unsigned integer.

    Args:
        name: Rune name; case and non-letters are ignored

    Returns:
        Encoded value (0 if the name has no letters)
    """
    value = 0
    for char in normalize_rune_name(name):
        value = value * 26 + (ord(char) - ord("A"))
    return value
