# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Positional runestone reader.

The reader knows nothing about tags: it pulls consecutive varints off a
payload and reports each one with the offset it started at. Mapping
positions to fields is done by the caller (see protocol.decode_message).
"""

from typing import Iterator, List, NamedTuple, Optional

from .varint import decode_varint


class DecodedValue(NamedTuple):
    """A varint read from a payload, with its starting byte offset."""
    offset: int
    value: int


class RunestoneDecoder:
    """
    Sequential varint reader over a payload.

    Iterating yields every remaining value:
        for item in RunestoneDecoder(payload):
            print(item.offset, item.value)
    """

    def __init__(self, payload: bytes):
        self._payload = bytes(payload)
        self._offset = 0

    @property
    def offset(self) -> int:
        """Offset of the next unread byte."""
        return self._offset

    @property
    def at_end(self) -> bool:
        """True when every byte of the payload has been consumed."""
        return self._offset >= len(self._payload)

    def read(self) -> DecodedValue:
        """
        Read the next varint.

        Raises:
            TruncatedInputError: If the payload ends mid-value or is exhausted
        """
        start = self._offset
        value, consumed = decode_varint(self._payload, start)
        self._offset += consumed
        return DecodedValue(start, value)

    def read_many(self, count: int) -> List[DecodedValue]:
        """Read exactly count values."""
        return [self.read() for _ in range(count)]

    def __iter__(self) -> Iterator[DecodedValue]:
        while not self.at_end:
            yield self.read()


def decode_values(payload: bytes, count: Optional[int] = None) -> List[DecodedValue]:
    """
    Decode values from the start of a payload.

    Args:
        payload: Encoded runestone
        count: Number of values to read; None reads to the end

    Returns:
        List of DecodedValue in payload order

    Raises:
        TruncatedInputError: If the payload holds fewer values than requested
    """
    decoder = RunestoneDecoder(payload)
    if count is None:
        return list(decoder)
    return decoder.read_many(count)
