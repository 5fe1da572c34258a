# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Bitcoin Core JSON-RPC client.

Handles HTTP communication with the node. Amounts are parsed as Decimal
so satoshi arithmetic stays exact.
"""

import itertools
import threading
from decimal import Decimal
from typing import Any, Optional

import requests


class RPCError(Exception):
    """Error reported by the node, or failure to reach it."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code

    def __str__(self) -> str:
        message = super().__str__()
        if self.code is None:
            return message
        return f"{message} (code {self.code})"


class RPCClient:
    """
    JSON-RPC client for a Bitcoin Core node.

    Can be used as a context manager:
        with RPCClient("http://127.0.0.1:18332", "user", "pass") as rpc:
            utxos = rpc.call("listunspent")
    """

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        timeout: float = 30.0,
    ):
        """
        Create a client.

        Args:
            url: Node RPC URL (e.g., "http://127.0.0.1:18332")
            username: RPC username
            password: RPC password
            timeout: Request timeout in seconds (default 30.0)
        """
        self._url = url
        self._timeout = timeout
        self._session = requests.Session()
        if username is not None:
            self._session.auth = (username, password or "")
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        """Close the HTTP session."""
        self._session.close()

    @property
    def url(self) -> str:
        """Return the node URL."""
        return self._url

    def call(self, method: str, *params: Any) -> Any:
        """
        Invoke an RPC method.

        Args:
            method: RPC method name
            *params: Positional parameters

        Returns:
            The "result" member of the response

        Raises:
            RPCError: If the node returns an error or cannot be reached
        """
        with self._lock:
            request_id = next(self._ids)
            body = {
                "jsonrpc": "1.0",
                "id": request_id,
                "method": method,
                "params": list(params),
            }
            try:
                resp = self._session.post(self._url, json=body, timeout=self._timeout)
            except requests.RequestException as e:
                raise RPCError(f"{method}: {e}") from e

        # Bitcoin Core reports RPC errors with HTTP 500 and a JSON body
        try:
            reply = resp.json(parse_float=Decimal)
        except ValueError:
            raise RPCError(f"{method}: HTTP {resp.status_code} {resp.reason}")

        error = reply.get("error")
        if error:
            raise RPCError(f"{method}: {error.get('message')}", error.get("code"))
        return reply.get("result")
