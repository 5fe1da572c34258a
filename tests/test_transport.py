# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""Tests for Embedder class."""

from decimal import Decimal

import pytest

from runes_protocol.protocol import encode_mint, encode_transfer
from runes_protocol.rpc import RPCError
from runes_protocol.script import build_script
from runes_protocol.transport import (
    Embedder,
    EmbedError,
    NoFundingSourceError,
    InsufficientValueError,
    BroadcastRejectedError,
    find_payload,
    to_btc,
    to_sats,
)

from conftest import FakeRPC, OTHER_ADDRESS, TXID, WALLET_ADDRESS, node_responses, wallet_utxo


class TestAmounts:
    """Tests for satoshi conversion helpers."""

    def test_to_sats(self):
        assert to_sats(Decimal("0.001")) == 100000
        assert to_sats(Decimal("1.23456789")) == 123456789

    def test_to_sats_from_float(self):
        """Floats are converted through their decimal text."""
        assert to_sats(0.001) == 100000

    def test_to_sats_rounds_down(self):
        assert to_sats(Decimal("0.000000019")) == 1

    def test_to_btc(self):
        assert to_btc(99000) == "0.00099000"
        assert to_btc(123456789) == "1.23456789"


class TestSelectUtxo:
    """Tests for select_utxo method."""

    def test_picks_wallet_address(self, embedder):
        """First output for the wallet address is chosen."""
        utxo = embedder.select_utxo()
        assert utxo["address"] == WALLET_ADDRESS
        assert utxo["vout"] == 0

    def test_no_utxos(self):
        """NoFundingSourceError when the wallet has nothing to spend."""
        rpc = FakeRPC(node_responses(listunspent=[wallet_utxo(address=OTHER_ADDRESS)]))
        embedder = Embedder(rpc, WALLET_ADDRESS)

        with pytest.raises(NoFundingSourceError, match="No UTXOs available"):
            embedder.select_utxo()


class TestBuildTransaction:
    """Tests for build_transaction method."""

    def test_outputs(self, embedder, fake_rpc):
        """Outputs are the marked payload and the change."""
        payload = encode_mint("500:20")
        tx_hex = embedder.build_transaction(payload, wallet_utxo("0.001"))

        assert tx_hex == "02000000unsigned"
        inputs, outputs = fake_rpc.params("createrawtransaction")
        assert inputs == [{"txid": "cd" * 32, "vout": 0}]
        assert outputs == [
            {"data": "53" + payload.hex()},
            {WALLET_ADDRESS: "0.00099000"},
        ]

    def test_custom_fee(self, fake_rpc):
        """Fee is taken from the constructor."""
        embedder = Embedder(fake_rpc, WALLET_ADDRESS, fee_sats=5000)
        embedder.build_transaction(b"\x00", wallet_utxo("0.001"))

        _, outputs = fake_rpc.params("createrawtransaction")
        assert outputs[1] == {WALLET_ADDRESS: "0.00095000"}

    def test_value_too_low(self, embedder):
        """InsufficientValueError when the output cannot cover the fee."""
        with pytest.raises(InsufficientValueError, match="too low for fee"):
            embedder.build_transaction(b"\x00", wallet_utxo("0.000005"))

    def test_value_equal_to_fee(self, embedder):
        """Zero change is also rejected."""
        with pytest.raises(InsufficientValueError):
            embedder.build_transaction(b"\x00", wallet_utxo("0.00001000"))


class TestSignTransaction:
    """Tests for sign_transaction method."""

    def test_with_key(self, embedder, fake_rpc):
        """A configured WIF key signs through signrawtransactionwithkey."""
        signed = embedder.sign_transaction("02000000unsigned", wallet_utxo("0.001"))

        assert signed == "02000000signed"
        tx_hex, keys, prevtxs = fake_rpc.params("signrawtransactionwithkey")
        assert tx_hex == "02000000unsigned"
        assert keys == ["cTestWIF"]
        assert prevtxs[0]["amount"] == "0.00100000"
        assert prevtxs[0]["scriptPubKey"] == "0014" + "00" * 20

    def test_with_wallet(self, fake_rpc):
        """Without a key the node wallet signs."""
        embedder = Embedder(fake_rpc, WALLET_ADDRESS)
        signed = embedder.sign_transaction("02000000unsigned", wallet_utxo())

        assert signed == "02000000walletsigned"
        assert "signrawtransactionwithkey" not in fake_rpc.methods()

    def test_incomplete(self):
        """EmbedError when the node cannot complete the signature."""
        rpc = FakeRPC(node_responses(signrawtransactionwithkey={
            "hex": "02000000partial",
            "complete": False,
            "errors": [{"error": "Unable to sign input"}],
        }))
        embedder = Embedder(rpc, WALLET_ADDRESS, wif_private_key="cTestWIF")

        with pytest.raises(EmbedError, match="Unable to sign input"):
            embedder.sign_transaction("02000000unsigned", wallet_utxo())


class TestEmbedPayload:
    """Tests for embed_payload method."""

    def test_success(self, embedder, fake_rpc):
        """embed_payload funds, signs and broadcasts in order."""
        txid = embedder.embed_payload(encode_transfer("500:20", 50, 1))

        assert txid == TXID
        assert fake_rpc.methods() == [
            "listunspent",
            "createrawtransaction",
            "signrawtransactionwithkey",
            "sendrawtransaction",
        ]
        assert fake_rpc.params("sendrawtransaction") == ("02000000signed",)

    def test_broadcast_rejected(self):
        """Node rejection surfaces as BroadcastRejectedError."""
        rpc = FakeRPC(node_responses(
            sendrawtransaction=RPCError("sendrawtransaction: min relay fee not met", -26),
        ))
        embedder = Embedder(rpc, WALLET_ADDRESS, wif_private_key="cTestWIF")

        with pytest.raises(BroadcastRejectedError, match="min relay fee not met"):
            embedder.embed_payload(b"\x00")

    def test_no_funds_stops_before_building(self):
        """Nothing is built when there is no funding source."""
        rpc = FakeRPC(node_responses(listunspent=[]))
        embedder = Embedder(rpc, WALLET_ADDRESS)

        with pytest.raises(NoFundingSourceError):
            embedder.embed_payload(b"\x00")
        assert rpc.methods() == ["listunspent"]

    def test_rpc_error_propagates(self):
        """Other node failures propagate unchanged."""
        rpc = FakeRPC(node_responses(listunspent=RPCError("listunspent: connection refused")))
        embedder = Embedder(rpc, WALLET_ADDRESS)

        with pytest.raises(RPCError, match="connection refused"):
            embedder.embed_payload(b"\x00")

    def test_close(self, embedder, fake_rpc):
        """close() closes the node client."""
        embedder.close()
        assert fake_rpc.closed is True


class TestExtractPayload:
    """Tests for reading payloads back from transactions."""

    def test_extract(self):
        """extract_payload returns the payload of the carrier output."""
        payload = encode_mint("500:20")
        tx = {"vout": [
            {"scriptPubKey": {"hex": "0014" + "00" * 20}},
            {"scriptPubKey": {"hex": build_script(payload).hex()}},
        ]}
        rpc = FakeRPC({"getrawtransaction": tx})
        embedder = Embedder(rpc, WALLET_ADDRESS)

        assert embedder.extract_payload(TXID) == payload
        assert rpc.params("getrawtransaction") == (TXID, True)

    def test_no_carrier(self):
        """find_payload returns None without a carrier output."""
        assert find_payload([{"scriptPubKey": {"hex": "6a0100"}}]) is None
        assert find_payload([]) is None
