"""
Connection settings for the Aztec node.

Resolution order for the RPC URL:
    explicit value → network shortcut ("devnet", "testnet") → $CAZT_RPC_URL → default
The admin URL follows the same order without shortcuts.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

NETWORK_URLS: dict[str, str] = {
    "devnet": "https://devnet.aztec-labs.com",
    "testnet": "https://aztec-testnet-fullnode.zkv.xyz",
}

DEFAULT_RPC_URL = "http://localhost:8080"
DEFAULT_ADMIN_URL = "http://localhost:8880"

ENV_RPC_URL = "CAZT_RPC_URL"
ENV_ADMIN_URL = "CAZT_ADMIN_URL"


def resolve_rpc_url(url: str | None = None) -> str:
    if not url:
        return os.environ.get(ENV_RPC_URL) or DEFAULT_RPC_URL
    return NETWORK_URLS.get(url.lower(), url)


def resolve_admin_url(url: str | None = None) -> str:
    if not url:
        return os.environ.get(ENV_ADMIN_URL) or DEFAULT_ADMIN_URL
    return url


@dataclass
class Settings:
    """
    Client settings.

    Args:
        rpc_url:    node JSON-RPC endpoint (or a network shortcut)
        admin_url:  node admin JSON-RPC endpoint
        timeout:    HTTP timeout in seconds
        pretty:     indent JSON output
    """
    rpc_url: str = field(default_factory=resolve_rpc_url)
    admin_url: str = field(default_factory=resolve_admin_url)
    timeout: float = 15.0
    pretty: bool = True

    def __post_init__(self) -> None:
        self.rpc_url = resolve_rpc_url(self.rpc_url)
        self.admin_url = resolve_admin_url(self.admin_url)
