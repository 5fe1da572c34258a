# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Runestone Protocol - Python codec and tooling for rune operations.

This package encodes etch, mint and transfer runestones, decodes them
back for verification, and embeds them in Bitcoin transactions through
a Bitcoin Core node.

Example usage:
    from runes_protocol import Runestone, RPCClient, Embedder

    payload = Runestone.etch("UNCOMMONGOODS", divisibility=2, premine=1000)

    with RPCClient("http://127.0.0.1:18332", "user", "pass") as rpc:
        embedder = Embedder(rpc, wallet_address="tb1q...")
        txid = embedder.embed_payload(payload)
        print(f"Etched in {txid}")
"""

from .decoder import DecodedValue, RunestoneDecoder, decode_values
from .protocol import (
    Tag,
    MessageKind,
    MalformedMessageError,
    RuneId,
    Edict,
    EtchMessage,
    MintMessage,
    TransferMessage,
    MessageType,
    Runestone,
    encode_etch,
    encode_mint,
    encode_transfer,
    expected_count,
    decode_message,
)
from .rpc import RPCClient, RPCError
from .rune_name import encode_rune_name, normalize_rune_name
from .script import build_script, extract_payload
from .transport import (
    Embedder,
    EmbedError,
    NoFundingSourceError,
    InsufficientValueError,
    BroadcastRejectedError,
)
from .varint import (
    CodecError,
    InvalidValueError,
    TruncatedInputError,
    encode_varint,
    decode_varint,
)

__version__ = "0.1.0"

__all__ = [
    # Varint
    "encode_varint",
    "decode_varint",
    "CodecError",
    "InvalidValueError",
    "TruncatedInputError",
    # Rune names
    "encode_rune_name",
    "normalize_rune_name",
    # Protocol types
    "Tag",
    "MessageKind",
    "MalformedMessageError",
    "RuneId",
    "Edict",
    "EtchMessage",
    "MintMessage",
    "TransferMessage",
    "MessageType",
    # Protocol encoding
    "Runestone",
    "encode_etch",
    "encode_mint",
    "encode_transfer",
    # Decoding
    "DecodedValue",
    "RunestoneDecoder",
    "decode_values",
    "expected_count",
    "decode_message",
    # Carrier script
    "build_script",
    "extract_payload",
    # Node / embedding
    "RPCClient",
    "RPCError",
    "Embedder",
    "EmbedError",
    "NoFundingSourceError",
    "InsufficientValueError",
    "BroadcastRejectedError",
]
