# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Request layer for the runes API.

Validates request bodies, maps them onto the message builders and hands
the payload to the embedder. The builders trust their input, so every
check on caller data happens here.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional

from .config import Config
from .decoder import decode_values
from .protocol import (
    MessageKind,
    RuneId,
    decode_message,
    encode_etch,
    encode_mint,
    encode_transfer,
)
from .rpc import RPCClient
from .rune_name import normalize_rune_name
from .transport import Embedder

MAX_DIVISIBILITY = 38


class RequestError(Exception):
    """Invalid request; carries the HTTP status to answer with."""

    def __init__(self, message: str, status: int = 400):
        super().__init__(message)
        self.status = status


def build_payload(kind: MessageKind, body: Mapping[str, Any]) -> bytes:
    """
    Validate a request body and encode its payload.

    Args:
        kind: Operation requested
        body: Decoded JSON request body

    Returns:
        Encoded runestone

    Raises:
        RequestError: If a field is missing or malformed
    """
    if not isinstance(body, Mapping):
        raise RequestError("Request body must be a JSON object")

    if kind == MessageKind.ETCH:
        name = body.get("runeName")
        if not name or body.get("divisibility") is None:
            raise RequestError("Missing required fields: runeName and divisibility")
        if not isinstance(name, str) or not normalize_rune_name(name):
            raise RequestError("runeName must contain at least one letter A-Z")
        divisibility = _uint(body, "divisibility")
        if divisibility > MAX_DIVISIBILITY:
            raise RequestError(f"divisibility must be at most {MAX_DIVISIBILITY}")
        premine = _uint(body, "premine", optional=True)
        return encode_etch(name, divisibility, premine)

    if kind == MessageKind.MINT:
        if not body.get("runeId"):
            raise RequestError("Missing required field: runeId")
        return encode_mint(_rune_id(body))

    if kind == MessageKind.TRANSFER:
        if not body.get("runeId") or body.get("amount") is None or body.get("output") is None:
            raise RequestError("Missing required fields: runeId, amount, output")
        return encode_transfer(_rune_id(body), _uint(body, "amount"), _uint(body, "output"))

    raise RequestError(f"Unknown operation: {kind}", status=404)


def describe_payload(kind: MessageKind, payload: bytes) -> Dict[str, Any]:
    """
    Decode a payload for display.

    Returns:
        Dict with the positional values and the decoded message fields

    Raises:
        CodecError: If the payload is truncated or does not match kind
    """
    values: List[Dict[str, int]] = [v._asdict() for v in decode_values(payload)]
    message = asdict(decode_message(payload, kind))
    message["kind"] = str(kind)
    return {"payload": payload.hex(), "values": values, "message": message}


class RunesService:
    """Handles etch, mint and transfer requests end to end."""

    MESSAGES = {
        MessageKind.ETCH: "Etching transaction created",
        MessageKind.MINT: "Mint transaction created",
        MessageKind.TRANSFER: "Transfer transaction created",
    }

    def __init__(self, embedder: Embedder):
        self._embedder = embedder

    @classmethod
    def from_config(cls, config: Config) -> "RunesService":
        """
        Wire a service to the node described by config.

        Raises:
            ConfigError: If no wallet address is configured
        """
        wallet_address = config.require_wallet()
        rpc = RPCClient(
            config.rpc_url,
            config.rpc_user,
            config.rpc_password,
            timeout=config.rpc_timeout,
        )
        embedder = Embedder(
            rpc,
            wallet_address,
            wif_private_key=config.wif_private_key,
            fee_sats=config.fee_sats,
        )
        return cls(embedder)

    @property
    def embedder(self) -> Embedder:
        return self._embedder

    def close(self):
        """Release the node connection."""
        self._embedder.close()

    def handle(self, kind: MessageKind, body: Mapping[str, Any]) -> Dict[str, str]:
        """
        Build, embed and broadcast one operation.

        Returns:
            {"txid": ..., "message": ...}

        Raises:
            RequestError: If the body is invalid
            EmbedError: If the transaction cannot be funded or broadcast
            RPCError: If the node cannot be reached
        """
        payload = build_payload(kind, body)
        txid = self._embedder.embed_payload(payload)
        return {"txid": txid, "message": self.MESSAGES[kind]}

    def etch(self, body: Mapping[str, Any]) -> Dict[str, str]:
        return self.handle(MessageKind.ETCH, body)

    def mint(self, body: Mapping[str, Any]) -> Dict[str, str]:
        return self.handle(MessageKind.MINT, body)

    def transfer(self, body: Mapping[str, Any]) -> Dict[str, str]:
        return self.handle(MessageKind.TRANSFER, body)


def _uint(body: Mapping[str, Any], key: str, optional: bool = False) -> Optional[int]:
    value = body.get(key)
    if value is None and optional:
        return None
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RequestError(f"{key} must be a non-negative integer")
    return value


def _rune_id(body: Mapping[str, Any]) -> RuneId:
    value = body.get("runeId")
    if not isinstance(value, str):
        raise RequestError("runeId must be a string in BLOCK:TX format")
    try:
        return RuneId.parse(value)
    except ValueError as e:
        raise RequestError(str(e))
