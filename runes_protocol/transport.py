# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Transaction embedding for runestone payloads.

Funds a carrier transaction from one wallet UTXO, places the payload in
an OP_RETURN output, has the node sign it and broadcasts it.
"""

from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, List, Optional

from .rpc import RPCClient, RPCError
from .script import carrier_data, extract_payload

COIN = Decimal(100_000_000)

DEFAULT_FEE_SATS = 1000


class EmbedError(Exception):
    """Base exception for embedding errors."""
    pass


class NoFundingSourceError(EmbedError):
    """No spendable output available for the wallet address."""
    pass


class InsufficientValueError(EmbedError):
    """Selected output cannot cover the fee."""
    pass


class BroadcastRejectedError(EmbedError):
    """Node rejected the assembled transaction."""
    pass


def to_sats(amount: Decimal) -> int:
    """Convert a BTC amount to satoshis, rounding down."""
    return int((Decimal(str(amount)) * COIN).to_integral_value(rounding=ROUND_FLOOR))


def to_btc(sats: int) -> str:
    """Format satoshis as a BTC amount string for RPC parameters."""
    return f"{Decimal(sats) / COIN:.8f}"


class Embedder:
    """
    Places runestone payloads on chain through a Bitcoin Core node.

    Signs with the configured WIF key when one is given, otherwise asks
    the node's wallet to sign.
    """

    def __init__(
        self,
        rpc: RPCClient,
        wallet_address: str,
        wif_private_key: Optional[str] = None,
        fee_sats: int = DEFAULT_FEE_SATS,
    ):
        """
        Args:
            rpc: Node client
            wallet_address: Address whose UTXOs fund the transaction and
                which receives the change
            wif_private_key: Optional signing key in WIF
            fee_sats: Fixed fee in satoshis (default 1000)
        """
        self._rpc = rpc
        self._wallet_address = wallet_address
        self._wif = wif_private_key
        self._fee_sats = fee_sats

    @property
    def wallet_address(self) -> str:
        return self._wallet_address

    def close(self):
        """Close the node client."""
        self._rpc.close()

    def select_utxo(self) -> Dict[str, Any]:
        """
        Pick the funding output.

        Returns:
            First unspent output belonging to the wallet address

        Raises:
            NoFundingSourceError: If the address has no unspent outputs
        """
        utxos = self._rpc.call("listunspent")
        for utxo in utxos:
            if utxo.get("address") == self._wallet_address:
                return utxo
        raise NoFundingSourceError(
            f"No UTXOs available for wallet {self._wallet_address}"
        )

    def build_transaction(self, payload: bytes, utxo: Dict[str, Any]) -> str:
        """
        Create the unsigned carrier transaction.

        Args:
            payload: Encoded runestone
            utxo: Funding output as returned by listunspent

        Returns:
            Unsigned transaction hex

        Raises:
            InsufficientValueError: If the output value does not exceed the fee
        """
        change = to_sats(utxo["amount"]) - self._fee_sats
        if change <= 0:
            raise InsufficientValueError(
                f"UTXO value too low for fee ({utxo['amount']} BTC, fee {self._fee_sats} sat)"
            )

        inputs = [{"txid": utxo["txid"], "vout": utxo["vout"]}]
        outputs = [
            {"data": carrier_data(payload).hex()},
            {self._wallet_address: to_btc(change)},
        ]
        return self._rpc.call("createrawtransaction", inputs, outputs)

    def sign_transaction(self, tx_hex: str, utxo: Dict[str, Any]) -> str:
        """
        Sign a transaction.

        Returns:
            Signed transaction hex

        Raises:
            EmbedError: If the node could not complete the signatures
        """
        if self._wif:
            prevtxs = [{
                "txid": utxo["txid"],
                "vout": utxo["vout"],
                "scriptPubKey": utxo["scriptPubKey"],
                "amount": f"{Decimal(str(utxo['amount'])):.8f}",
            }]
            result = self._rpc.call("signrawtransactionwithkey", tx_hex, [self._wif], prevtxs)
        else:
            result = self._rpc.call("signrawtransactionwithwallet", tx_hex)

        if not result.get("complete"):
            errors = result.get("errors") or []
            detail = "; ".join(e.get("error", "") for e in errors) or "unknown error"
            raise EmbedError(f"Signing incomplete: {detail}")
        return result["hex"]

    def broadcast(self, tx_hex: str) -> str:
        """
        Submit a signed transaction.

        Returns:
            Transaction id

        Raises:
            BroadcastRejectedError: If the node rejects the transaction
        """
        try:
            return self._rpc.call("sendrawtransaction", tx_hex)
        except RPCError as e:
            raise BroadcastRejectedError(str(e)) from e

    def embed_payload(self, payload: bytes) -> str:
        """
        Embed a payload in a new transaction and broadcast it.

        Args:
            payload: Encoded runestone

        Returns:
            Transaction id

        Raises:
            NoFundingSourceError: If no spendable output is available
            InsufficientValueError: If the output cannot cover the fee
            BroadcastRejectedError: If the node rejects the transaction
            RPCError: If any other node call fails
        """
        utxo = self.select_utxo()
        unsigned = self.build_transaction(payload, utxo)
        signed = self.sign_transaction(unsigned, utxo)
        return self.broadcast(signed)

    def extract_payload(self, txid: str) -> Optional[bytes]:
        """
        Fetch a transaction and return its runestone payload.

        Returns:
            Payload from the first carrier output, or None if there is none
        """
        tx = self._rpc.call("getrawtransaction", txid, True)
        return find_payload(tx.get("vout", []))


def find_payload(vouts: List[Dict[str, Any]]) -> Optional[bytes]:
    """Return the payload of the first runestone carrier among decoded outputs."""
    for vout in vouts:
        script_hex = vout.get("scriptPubKey", {}).get("hex", "")
        payload = extract_payload(bytes.fromhex(script_hex))
        if payload is not None:
            return payload
    return None
