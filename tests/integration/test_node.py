"""
Integration tests for cazt.core.node: the JSON-RPC client.

Requests are served by an in-process httpx.MockTransport, so the full
request/response path (URL routing, payload shape, error handling) is
exercised without a running node.

Run:  pytest tests/integration/ -v -m integration
"""

import json

import httpx
import pytest

from cazt.core.node import AztecNode, AztecNodeError
from cazt.tools.toolkit import CaztToolkit

pytestmark = pytest.mark.integration

RPC_URL = "http://rpc.test"
ADMIN_URL = "http://admin.test"


class FakeNode:
    """Records requests and answers from a method → result table."""

    def __init__(self, results=None, status=200):
        self.results = results or {}
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append((str(request.url).rstrip("/"), body))
        if self.status != 200:
            return httpx.Response(self.status, text="unavailable")
        method = body["method"]
        if method not in self.results:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": self.results[method]})


def _node(fake: FakeNode) -> AztecNode:
    client = httpx.Client(transport=httpx.MockTransport(fake))
    return AztecNode(rpc_url=RPC_URL, admin_url=ADMIN_URL, client=client)


class TestCall:

    def test_payload_shape(self):
        fake = FakeNode({"node_getBlockNumber": 10})
        with _node(fake) as node:
            node.call("node_getBlockNumber")
        url, body = fake.requests[0]
        assert url == RPC_URL
        assert body["jsonrpc"] == "2.0"
        assert body["method"] == "node_getBlockNumber"
        assert body["params"] == []

    def test_ids_increase(self):
        fake = FakeNode({"node_getBlockNumber": 10})
        with _node(fake) as node:
            node.call("node_getBlockNumber")
            node.call("node_getBlockNumber")
        assert fake.requests[1][1]["id"] == fake.requests[0][1]["id"] + 1

    def test_admin_routing(self):
        fake = FakeNode({"nodeAdmin_getConfig": {"p2p": True}})
        with _node(fake) as node:
            assert node.call("nodeAdmin_getConfig") == {"p2p": True}
        assert fake.requests[0][0] == ADMIN_URL

    def test_rpc_error(self):
        with _node(FakeNode()) as node:
            with pytest.raises(AztecNodeError, match="Method not found"):
                node.call("node_nope")

    def test_http_error(self):
        with _node(FakeNode(status=503)) as node:
            with pytest.raises(AztecNodeError, match="HTTP error 503"):
                node.get_block_number()


class TestHelpers:

    def test_block_numbers(self):
        fake = FakeNode({"node_getBlockNumber": 15, "node_getProvenBlockNumber": 12})
        with _node(fake) as node:
            assert node.get_block_number() == 15
            assert node.get_proven_block_number() == 12

    def test_node_info(self):
        fake = FakeNode({"node_getNodeInfo": {"nodeVersion": "1.0.0"}, "node_isReady": True})
        with _node(fake) as node:
            assert node.get_node_info()["nodeVersion"] == "1.0.0"
            assert node.is_ready() is True

    def test_tx_effect(self):
        fake = FakeNode({
            "node_getTxEffect": {
                "data": {"txHash": "0xabc", "noteHashes": ["0x01"], "nullifiers": ["0x0f"]},
                "l2BlockNumber": 3,
            }
        })
        with _node(fake) as node:
            effect = node.get_tx_effect("0xabc")
        assert fake.requests[0][1]["params"] == ["0xabc"]
        assert effect.block_number == 3
        assert effect.first_nullifier == "0x0f"

    def test_tx_effect_missing(self):
        fake = FakeNode({"node_getTxEffect": None})
        with _node(fake) as node:
            with pytest.raises(AztecNodeError, match="not found"):
                node.get_tx_effect("0xabc")

    def test_public_storage(self):
        fake = FakeNode({"node_getPublicStorageAt": "0x05"})
        with _node(fake) as node:
            assert node.get_public_storage_at("latest", "0x1f", "0x01") == "0x05"
        assert fake.requests[0][1]["params"] == ["latest", "0x1f", "0x01"]

    def test_chain_id_and_version(self):
        fake = FakeNode({"node_getChainId": 31337, "node_getVersion": "1"})
        with _node(fake) as node:
            assert node.get_chain_id() == 31337
            assert node.get_version() == 1
        assert [body["method"] for _, body in fake.requests] == ["node_getChainId", "node_getVersion"]

    def test_tx_receipt(self):
        fake = FakeNode({"node_getTxReceipt": {"txHash": "0xabc", "status": "success"}})
        with _node(fake) as node:
            assert node.get_tx_receipt("0xabc")["status"] == "success"
        assert fake.requests[0][1]["params"] == ["0xabc"]

    def test_private_logs(self):
        fake = FakeNode({"node_getPrivateLogs": [{"fields": ["0x01"]}]})
        with _node(fake) as node:
            assert node.get_private_logs(5, 10) == [{"fields": ["0x01"]}]
        assert fake.requests[0][1]["params"] == [5, 10]

    def test_private_logs_empty(self):
        fake = FakeNode({"node_getPrivateLogs": None})
        with _node(fake) as node:
            assert node.get_private_logs(5, 10) == []

    def test_toolkit_over_transport(self):
        """Toolkit node queries reach the wire through the same client."""
        fake = FakeNode({"node_getChainId": 1, "node_getTxReceipt": {"status": "dropped"}})
        with _node(fake) as node:
            toolkit = CaztToolkit(node=node)
            assert toolkit.chain_id() == 1
            assert toolkit.tx_receipt("0xdef") == {"status": "dropped"}


class TestConfiguration:

    def test_network_shortcut(self):
        node = AztecNode(rpc_url="devnet")
        try:
            assert node.rpc_url.startswith("https://")
        finally:
            node.close()

    def test_env(self, monkeypatch):
        monkeypatch.setenv("CAZT_RPC_URL", "http://env.test/")
        node = AztecNode()
        try:
            assert node.rpc_url == "http://env.test"
        finally:
            node.close()
