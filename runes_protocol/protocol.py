# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Runestone message definitions and serialization.

Three message shapes are produced, each a fixed run of varints:

    etch      1 <divisibility> 4 <rune> [6 <premine>] 0
    mint      20 <block> <tx> 0
    transfer  0 <block> <tx> <amount> <output>

The transfer message leads with the 0 tag and carries its edict after
it; etch and mint end with it. Existing consumers read these layouts
byte for byte, so the asymmetry is kept as is. Mint and transfer values
are positional and carry no per-field tags.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from .decoder import RunestoneDecoder
from .rune_name import encode_rune_name
from .varint import CodecError, encode_varint


class Tag(IntEnum):
    """Field tags used by the fixed message layouts."""
    BODY = 0
    DIVISIBILITY = 1
    RUNE = 4
    PREMINE = 6
    MINT = 20

    def __str__(self) -> str:
        return self.name


class MessageKind(Enum):
    """Runestone operation kinds."""
    ETCH = "etch"
    MINT = "mint"
    TRANSFER = "transfer"

    def __str__(self) -> str:
        return self.value


class MalformedMessageError(CodecError):
    """Payload does not match the layout of its message kind."""
    pass


@dataclass(frozen=True)
class RuneId:
    """Rune identifier: etching block height and transaction index."""
    block: int
    tx: int

    @classmethod
    def parse(cls, text: str) -> "RuneId":
        """
        Parse a "block:tx" identifier.

        Raises:
            ValueError: If text is not two decimal integers joined by ':'
        """
        parts = text.split(":")
        if len(parts) != 2 or not all(p.isdigit() and p.isascii() for p in parts):
            raise ValueError(f"Invalid rune id {text!r}, expected BLOCK:TX")
        return cls(int(parts[0]), int(parts[1]))

    def __str__(self) -> str:
        return f"{self.block}:{self.tx}"


@dataclass(frozen=True)
class Edict:
    """Single transfer instruction."""
    id: RuneId
    amount: int
    output: int


@dataclass(frozen=True)
class EtchMessage:
    """Decoded etch message."""
    divisibility: int
    rune: int
    premine: Optional[int] = None
    kind: MessageKind = MessageKind.ETCH


@dataclass(frozen=True)
class MintMessage:
    """Decoded mint message."""
    rune_id: RuneId
    kind: MessageKind = MessageKind.MINT


@dataclass(frozen=True)
class TransferMessage:
    """Decoded transfer message."""
    edict: Edict
    kind: MessageKind = MessageKind.TRANSFER


# Type alias for any decoded message
MessageType = Union[EtchMessage, MintMessage, TransferMessage]

RuneIdLike = Union[RuneId, str]


class Runestone:
    """Runestone builder, one static method per message kind."""

    @staticmethod
    def etch(name: str, divisibility: int, premine: Optional[int] = None) -> bytes:
        """Create an etch message."""
        return encode_etch(name, divisibility, premine)

    @staticmethod
    def mint(rune_id: RuneIdLike) -> bytes:
        """Create a mint message."""
        return encode_mint(rune_id)

    @staticmethod
    def transfer(rune_id: RuneIdLike, amount: int, output: int) -> bytes:
        """Create a transfer message."""
        return encode_transfer(rune_id, amount, output)


def encode_etch(name: str, divisibility: int, premine: Optional[int] = None) -> bytes:
    """
    Encode an etch message.

    Args:
        name: Rune name (letters only are significant)
        divisibility: Number of decimal places
        premine: Amount premined to the etcher; omitted from the
            payload entirely when None

    Returns:
        Encoded payload
    """
    payload = (
        _field(Tag.DIVISIBILITY, divisibility)
        + _field(Tag.RUNE, encode_rune_name(name))
    )
    if premine is not None:
        payload += _field(Tag.PREMINE, premine)
    return payload + encode_varint(Tag.BODY)


def encode_mint(rune_id: RuneIdLike) -> bytes:
    """Encode a mint message for an existing rune."""
    rune_id = _as_rune_id(rune_id)
    return (
        encode_varint(Tag.MINT)
        + encode_varint(rune_id.block)
        + encode_varint(rune_id.tx)
        + encode_varint(Tag.BODY)
    )


def encode_transfer(rune_id: RuneIdLike, amount: int, output: int) -> bytes:
    """
    Encode a transfer message carrying a single edict.

    Args:
        rune_id: Rune being moved
        amount: Quantity in the rune's smallest unit
        output: Index of the destination output

    Returns:
        Encoded payload
    """
    rune_id = _as_rune_id(rune_id)
    return (
        encode_varint(Tag.BODY)
        + encode_varint(rune_id.block)
        + encode_varint(rune_id.tx)
        + encode_varint(amount)
        + encode_varint(output)
    )


def expected_count(kind: MessageKind, has_premine: bool = False) -> int:
    """Number of varints in a message of the given kind."""
    if kind == MessageKind.ETCH:
        return 7 if has_premine else 5
    if kind == MessageKind.MINT:
        return 4
    return 5


def decode_message(payload: bytes, kind: MessageKind) -> MessageType:
    """
    Decode and verify a payload against the layout of its kind.

    Args:
        payload: Encoded runestone
        kind: Expected message kind

    Returns:
        Decoded message (EtchMessage, MintMessage or TransferMessage)

    Raises:
        TruncatedInputError: If the payload ends before the layout does
        MalformedMessageError: If a tag slot holds the wrong value or
            bytes follow the message
    """
    reader = RunestoneDecoder(payload)

    if kind == MessageKind.ETCH:
        _expect(reader, Tag.DIVISIBILITY)
        divisibility = reader.read().value
        _expect(reader, Tag.RUNE)
        rune = reader.read().value
        premine = None
        item = reader.read()
        if item.value == Tag.PREMINE:
            premine = reader.read().value
            item = reader.read()
        if item.value != Tag.BODY:
            raise MalformedMessageError(
                f"Expected tag {Tag.BODY.name} at offset {item.offset}, got {item.value}"
            )
        message = EtchMessage(divisibility=divisibility, rune=rune, premine=premine)

    elif kind == MessageKind.MINT:
        _expect(reader, Tag.MINT)
        block, tx = reader.read().value, reader.read().value
        _expect(reader, Tag.BODY)
        message = MintMessage(rune_id=RuneId(block, tx))

    elif kind == MessageKind.TRANSFER:
        _expect(reader, Tag.BODY)
        block, tx, amount, output = (v.value for v in reader.read_many(4))
        message = TransferMessage(
            edict=Edict(id=RuneId(block, tx), amount=amount, output=output)
        )

    else:
        raise ValueError(f"Unknown message kind: {kind}")

    if not reader.at_end:
        raise MalformedMessageError(
            f"{len(payload) - reader.offset} trailing byte(s) after {kind} message"
        )
    return message


def _field(tag: Tag, value: int) -> bytes:
    """Encode a tag/value pair."""
    return encode_varint(tag) + encode_varint(value)


def _expect(reader: RunestoneDecoder, tag: Tag) -> None:
    """Read one value and check it is the given tag."""
    item = reader.read()
    if item.value != tag:
        raise MalformedMessageError(
            f"Expected tag {tag.name} at offset {item.offset}, got {item.value}"
        )


def _as_rune_id(rune_id: RuneIdLike) -> RuneId:
    if isinstance(rune_id, RuneId):
        return rune_id
    return RuneId.parse(rune_id)
