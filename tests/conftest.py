# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Pytest fixtures: a scripted stand-in for the Bitcoin Core node."""

from decimal import Decimal

import pytest

from runes_protocol.rpc import RPCError
from runes_protocol.transport import Embedder

WALLET_ADDRESS = "tb1qw6gysxzz80haly4fn3gmx4rsjpueufqg5kzpp9"
OTHER_ADDRESS = "tb1qother0000000000000000000000000000000"
TXID = "ab" * 32


class FakeRPC:
    """
    Scripted RPC client.

    Each method maps to a result, an exception instance to raise, or a
    callable receiving the params. Calls are recorded in order.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.closed = False

    def call(self, method, *params):
        self.calls.append((method, params))
        if method not in self.responses:
            raise RPCError(f"{method}: Method not found", -32601)
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*params)
        return response

    def close(self):
        self.closed = True

    def methods(self):
        return [method for method, _ in self.calls]

    def params(self, method):
        for name, params in self.calls:
            if name == method:
                return params
        raise KeyError(method)


def wallet_utxo(amount="0.001", address=WALLET_ADDRESS, vout=0):
    return {
        "txid": "cd" * 32,
        "vout": vout,
        "address": address,
        "scriptPubKey": "0014" + "00" * 20,
        "amount": Decimal(amount),
    }


def node_responses(**overrides):
    """Responses for a node that accepts everything."""
    responses = {
        "listunspent": [wallet_utxo(address=OTHER_ADDRESS, vout=1), wallet_utxo()],
        "createrawtransaction": "02000000unsigned",
        "signrawtransactionwithkey": {"hex": "02000000signed", "complete": True},
        "signrawtransactionwithwallet": {"hex": "02000000walletsigned", "complete": True},
        "sendrawtransaction": TXID,
    }
    responses.update(overrides)
    return responses


@pytest.fixture
def fake_rpc():
    """Node that funds, signs and accepts any transaction."""
    return FakeRPC(node_responses())


@pytest.fixture
def embedder(fake_rpc):
    """Embedder signing with a WIF key through the fake node."""
    return Embedder(fake_rpc, WALLET_ADDRESS, wif_private_key="cTestWIF")
