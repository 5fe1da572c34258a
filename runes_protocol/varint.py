# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Varint encoding/decoding (LEB128-style, unsigned).

Runestone integers are unbounded: a long rune name folds into a value
well past 64 bits, so neither direction caps the number of 7-bit groups.
"""

from typing import Tuple


class CodecError(ValueError):
    """Base exception for runestone codec errors."""
    pass


class InvalidValueError(CodecError):
    """Value outside the encodable domain (negative)."""
    pass


class TruncatedInputError(CodecError):
    """Buffer ended before a terminating varint byte."""
    pass


def encode_varint(value: int) -> bytes:
    """
    Encode an unsigned integer as a varint.

    Args:
        value: Non-negative integer to encode (any size)

    Returns:
        Varint-encoded bytes

    Raises:
        InvalidValueError: If value is negative
    """
    if value < 0:
        raise InvalidValueError(f"Cannot encode negative value as varint: {value}")

    result = []
    while value >= 0x80:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)
    return bytes(result)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode a varint from bytes.

    Args:
        data: Bytes containing the varint
        offset: Starting offset in data

    Returns:
        Tuple of (decoded value, number of bytes consumed)

    Raises:
        TruncatedInputError: If data ends before the terminating byte
    """
    value = 0
    shift = 0
    pos = offset

    while True:
        if pos >= len(data):
            raise TruncatedInputError(
                f"Varint decode: unexpected end of data at offset {pos}"
            )

        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift

        if not (byte & 0x80):
            break

        shift += 7

    return value, pos - offset
