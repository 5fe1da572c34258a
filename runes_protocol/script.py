# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Carrier output script for runestone payloads.

A payload travels in an OP_RETURN output as a single data push whose
first byte is the runestone marker:

    OP_RETURN <0x53 || payload>
"""

import struct
from typing import List, Optional

OP_RETURN = 0x6A
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E

RUNESTONE_MARKER = 0x53


def push_data(data: bytes) -> bytes:
    """Encode a minimal data push for data."""
    size = len(data)
    if size < OP_PUSHDATA1:
        return bytes([size]) + data
    if size <= 0xFF:
        return bytes([OP_PUSHDATA1, size]) + data
    if size <= 0xFFFF:
        return bytes([OP_PUSHDATA2]) + struct.pack("<H", size) + data
    return bytes([OP_PUSHDATA4]) + struct.pack("<I", size) + data


def carrier_data(payload: bytes) -> bytes:
    """Data pushed by the carrier output: marker byte then payload."""
    return bytes([RUNESTONE_MARKER]) + payload


def build_script(payload: bytes) -> bytes:
    """
    Build the OP_RETURN output script carrying a payload.

    Args:
        payload: Encoded runestone

    Returns:
        Serialized output script
    """
    return bytes([OP_RETURN]) + push_data(carrier_data(payload))


def parse_pushes(script: bytes) -> List[bytes]:
    """
    Split a push-only script into its data items.

    Raises:
        ValueError: If a non-push opcode is found or a push is truncated
    """
    items = []
    offset = 0
    while offset < len(script):
        opcode = script[offset]
        offset += 1
        if opcode < OP_PUSHDATA1:
            size = opcode
        elif opcode == OP_PUSHDATA1:
            size, offset = _read_size(script, offset, "<B")
        elif opcode == OP_PUSHDATA2:
            size, offset = _read_size(script, offset, "<H")
        elif opcode == OP_PUSHDATA4:
            size, offset = _read_size(script, offset, "<I")
        else:
            raise ValueError(f"Non-push opcode 0x{opcode:02x} at offset {offset - 1}")

        if offset + size > len(script):
            raise ValueError("Truncated data push")
        items.append(script[offset:offset + size])
        offset += size
    return items


def extract_payload(script: bytes) -> Optional[bytes]:
    """
    Extract a runestone payload from an output script.

    Args:
        script: Serialized output script

    Returns:
        Payload bytes (after the marker), or None if the script is not
        a runestone carrier
    """
    if not script or script[0] != OP_RETURN:
        return None
    try:
        pushes = parse_pushes(script[1:])
    except ValueError:
        return None
    if not pushes or not pushes[0] or pushes[0][0] != RUNESTONE_MARKER:
        return None
    return pushes[0][1:]


def _read_size(script: bytes, offset: int, fmt: str):
    width = struct.calcsize(fmt)
    if offset + width > len(script):
        raise ValueError("Truncated push length")
    (size,) = struct.unpack_from(fmt, script, offset)
    return size, offset + width
