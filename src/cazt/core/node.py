"""
AztecNode: JSON-RPC client for an Aztec node.

Methods prefixed `nodeAdmin_` go to the admin endpoint, everything else to
the public RPC endpoint.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from cazt.core.config import resolve_admin_url, resolve_rpc_url
from cazt.core.models import TxEffect

logger = logging.getLogger("cazt.node")

ADMIN_METHOD_PREFIX = "nodeAdmin_"


class AztecNodeError(Exception):
    """Raised when the node returns an HTTP or JSON-RPC error."""
    pass


class AztecNode:
    """
    Synchronous JSON-RPC client for an Aztec node.

    Usage:
        node = AztecNode()                       # $CAZT_RPC_URL or localhost:8080
        node = AztecNode(rpc_url="devnet")
        with AztecNode(rpc_url="http://localhost:8080") as node:
            node.get_block_number()
    """

    def __init__(
        self,
        rpc_url: str | None = None,
        admin_url: str | None = None,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.rpc_url = resolve_rpc_url(rpc_url).rstrip("/")
        self.admin_url = resolve_admin_url(admin_url).rstrip("/")
        self._client = client or httpx.Client(
            headers={"Content-Type": "application/json"}, timeout=timeout
        )
        self._request_id = 0

    # ------------------------------------------------------------------
    # Raw JSON-RPC
    # ------------------------------------------------------------------

    def call(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Invoke a JSON-RPC method and return its `result`.

        Raises:
            AztecNodeError: on a non-200 response or an RPC `error` member.
        """
        url = self.admin_url if method.startswith(ADMIN_METHOD_PREFIX) else self.rpc_url
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }
        logger.debug(f"RPC {method} -> {url}")
        response = self._client.post(url, json=payload)
        if response.status_code != 200:
            raise AztecNodeError(f"HTTP error {response.status_code} for {method}: {response.text}")
        data = response.json()
        if data.get("error") is not None:
            raise AztecNodeError(f"RPC error for {method}: {data['error']}")
        return data.get("result")

    # ------------------------------------------------------------------
    # Node info
    # ------------------------------------------------------------------

    def is_ready(self) -> bool:
        return bool(self.call("node_isReady"))

    def get_node_info(self) -> dict[str, Any]:
        return self.call("node_getNodeInfo")

    def get_chain_id(self) -> int:
        return int(self.call("node_getChainId"))

    def get_version(self) -> int:
        return int(self.call("node_getVersion"))

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def get_block_number(self) -> int:
        """Return the latest L2 block number."""
        return int(self.call("node_getBlockNumber"))

    def get_proven_block_number(self) -> int:
        return int(self.call("node_getProvenBlockNumber"))

    # ------------------------------------------------------------------
    # Transactions & state
    # ------------------------------------------------------------------

    def get_tx_receipt(self, tx_hash: str) -> dict[str, Any]:
        return self.call("node_getTxReceipt", [tx_hash])

    def get_tx_effect(self, tx_hash: str) -> TxEffect:
        """
        Return the committed effects of a transaction.

        Raises:
            AztecNodeError: if the node does not know the transaction.
        """
        data = self.call("node_getTxEffect", [tx_hash])
        if not data:
            raise AztecNodeError(f"Transaction {tx_hash} not found")
        return TxEffect.from_rpc(tx_hash, data)

    def get_private_logs(self, from_block: int, limit: int) -> list[Any]:
        return self.call("node_getPrivateLogs", [from_block, limit]) or []

    def get_public_storage_at(self, block: str | int, contract: str, slot: str) -> str:
        return self.call("node_getPublicStorageAt", [block, contract, slot])

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> AztecNode:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()
