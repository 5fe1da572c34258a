# SPDX-License-Identifier: MIT
# Copyright (c) 2026 ADNT Sarl <info@adnt.io>

"""
Process configuration.

Loaded once at startup from the environment; command-line options
override individual fields. Credentials and keys are never defaults.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from .transport import DEFAULT_FEE_SATS


class ConfigError(Exception):
    """Missing or invalid configuration value."""
    pass


@dataclass(frozen=True)
class Config:
    """Runtime settings for the node client, embedder and HTTP API."""
    rpc_url: str = "http://127.0.0.1:18332"
    rpc_user: Optional[str] = None
    rpc_password: Optional[str] = None
    rpc_timeout: float = 30.0
    wallet_address: Optional[str] = None
    wif_private_key: Optional[str] = None
    fee_sats: int = DEFAULT_FEE_SATS
    host: str = "127.0.0.1"
    port: int = 3000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from environment variables.

        Args:
            environ: Mapping to read (default os.environ)

        Raises:
            ConfigError: If a numeric variable does not parse
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            rpc_url=env.get("RUNES_RPC_URL", defaults.rpc_url),
            rpc_user=env.get("RUNES_RPC_USER"),
            rpc_password=env.get("RUNES_RPC_PASSWORD"),
            rpc_timeout=_number(env, "RUNES_RPC_TIMEOUT", float, defaults.rpc_timeout),
            wallet_address=env.get("RUNES_WALLET_ADDRESS") or None,
            wif_private_key=env.get("RUNES_WIF") or None,
            fee_sats=_number(env, "RUNES_FEE_SATS", int, defaults.fee_sats),
            host=env.get("RUNES_HOST", defaults.host),
            port=_number(env, "RUNES_PORT", int, _number(env, "PORT", int, defaults.port)),
        )

    def override(self, **changes) -> "Config":
        """Return a copy with the non-None changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def require_wallet(self) -> str:
        """
        Return the wallet address.

        Raises:
            ConfigError: If no wallet address is configured
        """
        if not self.wallet_address:
            raise ConfigError(
                "No wallet address configured (set RUNES_WALLET_ADDRESS or --wallet-address)"
            )
        return self.wallet_address


def _number(env: Mapping[str, str], name: str, kind, default):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
