#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Rune etch/mint/transfer tool using a Bitcoin Core node.

Usage:
    python runes_tool.py etch UNCOMMONGOODS --divisibility 2 --premine 1000
    python runes_tool.py mint 500:20
    python runes_tool.py transfer 500:20 --amount 50 --output 1
    python runes_tool.py --dry-run mint 500:20
    python runes_tool.py decode transfer 00f403143201
    python runes_tool.py inspect <txid>
    python runes_tool.py serve --port 3000

Node settings come from RUNES_* environment variables; options override them.

Requirements:
    pip install requests
"""

import argparse
import sys
from typing import Optional

from runes_protocol import (
    CodecError,
    EmbedError,
    Embedder,
    MessageKind,
    RPCClient,
    RPCError,
    RuneId,
    Tag,
    decode_values,
    encode_etch,
    encode_mint,
    encode_transfer,
    normalize_rune_name,
)
from runes_protocol.api import describe_payload
from runes_protocol.config import Config, ConfigError
from runes_protocol.server import serve


def uint(text: str) -> int:
    """argparse type for non-negative integers."""
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {text}")
    return value


def rune_id(text: str) -> RuneId:
    """argparse type for BLOCK:TX identifiers."""
    try:
        return RuneId.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def guess_kind(payload: bytes) -> Optional[MessageKind]:
    """Guess the message kind from the leading value."""
    if not payload:
        return None
    first = decode_values(payload, 1)[0].value
    return {
        Tag.DIVISIBILITY: MessageKind.ETCH,
        Tag.MINT: MessageKind.MINT,
        Tag.BODY: MessageKind.TRANSFER,
    }.get(first)


def open_embedder(config: Config) -> Embedder:
    wallet_address = config.require_wallet()
    rpc = RPCClient(config.rpc_url, config.rpc_user, config.rpc_password, timeout=config.rpc_timeout)
    return Embedder(
        rpc,
        wallet_address,
        wif_private_key=config.wif_private_key,
        fee_sats=config.fee_sats,
    )


def print_payload(kind: MessageKind, payload: bytes):
    """Print a payload and its decoded values."""
    info = describe_payload(kind, payload)
    print(f"Payload ({len(payload)} bytes): {info['payload']}")
    print("Values:")
    for item in info["values"]:
        print(f"  [{item['offset']:3d}] {item['value']}")
    print(f"Message: {info['message']}")


def submit(config: Config, payload: bytes, dry_run: bool) -> bool:
    """Embed a payload unless dry_run; print the txid."""
    if dry_run:
        print("Dry run, not broadcasting")
        return True

    embedder = open_embedder(config)
    try:
        print(f"Broadcasting from {embedder.wallet_address}... ", end="", flush=True)
        txid = embedder.embed_payload(payload)
    except (EmbedError, RPCError) as e:
        print(f"FAILED: {e}")
        return False
    finally:
        embedder.close()

    print("OK")
    print(f"Transaction: {txid}")
    return True


def cmd_etch(config: Config, args) -> bool:
    """Etch a new rune."""
    name = normalize_rune_name(args.name)
    if not name:
        print(f"Error: rune name {args.name!r} has no letters A-Z")
        return False
    print(f"Rune:         {name}")
    print(f"Divisibility: {args.divisibility}")
    print(f"Premine:      {'-' if args.premine is None else args.premine}")
    payload = encode_etch(args.name, args.divisibility, args.premine)
    print_payload(MessageKind.ETCH, payload)
    return submit(config, payload, args.dry_run)


def cmd_mint(config: Config, args) -> bool:
    """Mint an existing rune."""
    print(f"Rune ID: {args.rune_id}")
    payload = encode_mint(args.rune_id)
    print_payload(MessageKind.MINT, payload)
    return submit(config, payload, args.dry_run)


def cmd_transfer(config: Config, args) -> bool:
    """Transfer runes to an output."""
    print(f"Rune ID: {args.rune_id}")
    print(f"Amount:  {args.amount}")
    print(f"Output:  {args.output}")
    payload = encode_transfer(args.rune_id, args.amount, args.output)
    print_payload(MessageKind.TRANSFER, payload)
    return submit(config, payload, args.dry_run)


def cmd_decode(args) -> bool:
    """Decode a hex payload."""
    try:
        payload = bytes.fromhex(args.payload)
    except ValueError:
        print(f"Error: not a hex string: {args.payload}")
        return False
    print_payload(MessageKind(args.kind), payload)
    return True


def cmd_inspect(config: Config, args) -> bool:
    """Fetch a transaction and decode its runestone."""
    embedder = open_embedder(config)
    try:
        payload = embedder.extract_payload(args.txid)
    finally:
        embedder.close()

    if payload is None:
        print(f"No runestone output in {args.txid}")
        return False

    kind = MessageKind(args.kind) if args.kind else guess_kind(payload)
    if kind is None:
        print(f"Unrecognized runestone: {payload.hex()}")
        return False
    print(f"Transaction: {args.txid}")
    print_payload(kind, payload)
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rune etch/mint/transfer tool for Bitcoin Core"
    )
    parser.add_argument("--rpc-url", help="Node RPC URL (e.g., http://127.0.0.1:18332)")
    parser.add_argument("--rpc-user", help="Node RPC username")
    parser.add_argument("--rpc-password", help="Node RPC password")
    parser.add_argument("--wallet-address", help="Funding and change address")
    parser.add_argument("--fee", type=uint, dest="fee_sats", help="Fixed fee in satoshis")
    parser.add_argument("--dry-run", "-n", action="store_true",
                        help="Build and print the payload without broadcasting")

    subparsers = parser.add_subparsers(dest="command", required=True)
    kinds = [str(k) for k in MessageKind]

    # etch command
    etch_parser = subparsers.add_parser("etch", help="Etch a new rune")
    etch_parser.add_argument("name", help="Rune name (letters A-Z)")
    etch_parser.add_argument("--divisibility", "-d", type=uint, required=True,
                             help="Decimal places")
    etch_parser.add_argument("--premine", "-p", type=uint, help="Premined amount")

    # mint command
    mint_parser = subparsers.add_parser("mint", help="Mint an existing rune")
    mint_parser.add_argument("rune_id", type=rune_id, help="Rune ID (BLOCK:TX)")

    # transfer command
    transfer_parser = subparsers.add_parser("transfer", help="Transfer runes")
    transfer_parser.add_argument("rune_id", type=rune_id, help="Rune ID (BLOCK:TX)")
    transfer_parser.add_argument("--amount", "-a", type=uint, required=True,
                                 help="Amount to transfer")
    transfer_parser.add_argument("--output", "-o", type=uint, required=True,
                                 help="Destination output index")

    # decode command
    decode_parser = subparsers.add_parser("decode", help="Decode a hex payload")
    decode_parser.add_argument("kind", choices=kinds, help="Message kind")
    decode_parser.add_argument("payload", help="Payload as hex")

    # inspect command
    inspect_parser = subparsers.add_parser("inspect", help="Decode the runestone of a transaction")
    inspect_parser.add_argument("txid", help="Transaction id")
    inspect_parser.add_argument("--kind", choices=kinds, help="Message kind (default: guess)")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Listen address")
    serve_parser.add_argument("--port", type=int, help="Listen port")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.from_env().override(
            rpc_url=args.rpc_url,
            rpc_user=args.rpc_user,
            rpc_password=args.rpc_password,
            wallet_address=args.wallet_address,
            fee_sats=args.fee_sats,
            host=getattr(args, "host", None),
            port=getattr(args, "port", None),
        )

        if args.command == "etch":
            ok = cmd_etch(config, args)
        elif args.command == "mint":
            ok = cmd_mint(config, args)
        elif args.command == "transfer":
            ok = cmd_transfer(config, args)
        elif args.command == "decode":
            ok = cmd_decode(args)
        elif args.command == "inspect":
            ok = cmd_inspect(config, args)
        else:
            serve(config)
            ok = True
    except (ConfigError, CodecError, RPCError, EmbedError) as e:
        print(f"Error: {e}")
        return 1

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
