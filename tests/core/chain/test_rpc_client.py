"""
Tests for the JSON-RPC chain client.

Requests are served by an httpx.MockTransport that answers JSON-RPC methods
from a table and records every call.
"""

import json
import pytest
import httpx
from eth_account import Account

from wallet_sweep.core.chain import (
    ChainClientError,
    FeeEstimate,
    JsonRpcChainClient,
    NetworkSpec,
    ReceiptStatus,
    RpcError,
    TransactionSigningError,
)
from wallet_sweep.core.chain.rpc_client import build_balance_of_call, build_transfer_call


PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
TOKEN = "0x0000000000000000000000000000000000000001"
DESTINATION = "0x1234567890abcdef1234567890abcdef12345678"
TX_HASH = "0x" + "ab" * 32

NETWORK = NetworkSpec(key="testnetA", name="Testnet A", chain_id=5003, rpc_url="http://rpc.test")


class FakeRpcNode:
    """Answers JSON-RPC calls from ``results``; callables receive the params."""

    def __init__(self, results):
        self.results = results
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        result = self.results.get(body["method"])
        if isinstance(result, dict) and "error" in result:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": result["error"]})
        if callable(result):
            result = result(body["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def calls(self, method):
        return [r["params"] for r in self.requests if r["method"] == method]


def _client(node: FakeRpcNode) -> JsonRpcChainClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(node.handler))
    return JsonRpcChainClient(NETWORK, PRIVATE_KEY, http_client=http_client, poll_interval_seconds=0)


# =============================================================================
# Encoding
# =============================================================================


def test_balance_of_calldata():
    assert build_balance_of_call(DESTINATION) == (
        "0x70a08231" + "000000000000000000000000" + "1234567890abcdef1234567890abcdef12345678"
    )


def test_transfer_calldata():
    data = build_transfer_call(DESTINATION, 5_000_000)

    assert data.startswith("0xa9059cbb")
    assert len(data) == 2 + 8 + 64 + 64
    assert data.endswith(format(5_000_000, "064x"))


def test_invalid_key_is_rejected():
    with pytest.raises(TransactionSigningError):
        JsonRpcChainClient(NETWORK, "not-a-key")


# =============================================================================
# Reads
# =============================================================================


class TestReads:

    @pytest.mark.asyncio
    async def test_address_is_derived_from_key(self):
        client = _client(FakeRpcNode({}))

        assert client.address == Account.from_key(PRIVATE_KEY).address

    @pytest.mark.asyncio
    async def test_get_balance(self):
        node = FakeRpcNode({"eth_getBalance": hex(10 ** 16)})
        client = _client(node)

        assert await client.get_balance(client.address) == 10 ** 16
        assert node.calls("eth_getBalance") == [[client.address, "latest"]]

    @pytest.mark.asyncio
    async def test_read_token_balance(self):
        node = FakeRpcNode({"eth_call": "0x" + format(5_000_000, "064x")})
        client = _client(node)

        assert await client.read_token_balance(TOKEN, DESTINATION) == 5_000_000
        call_obj, block = node.calls("eth_call")[0]
        assert call_obj == {"to": TOKEN, "data": build_balance_of_call(DESTINATION)}
        assert block == "latest"

    @pytest.mark.asyncio
    async def test_empty_balance_of_result_raises(self):
        client = _client(FakeRpcNode({"eth_call": "0x"}))

        with pytest.raises(ChainClientError):
            await client.read_token_balance(TOKEN, DESTINATION)

    @pytest.mark.asyncio
    async def test_rpc_error_payload_raises(self):
        node = FakeRpcNode({"eth_getBalance": {"error": {"code": -32000, "message": "header not found"}}})
        client = _client(node)

        with pytest.raises(RpcError) as exc_info:
            await client.get_balance(client.address)

        assert exc_info.value.code == -32000
        assert exc_info.value.method == "eth_getBalance"
        assert "header not found" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_failure_raises_chain_client_error(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        client = JsonRpcChainClient(
            NETWORK,
            PRIVATE_KEY,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        with pytest.raises(ChainClientError):
            await client.get_gas_price()

    @pytest.mark.asyncio
    async def test_estimate_gas_for_native_transfer(self):
        node = FakeRpcNode({"eth_estimateGas": hex(21_000)})
        client = _client(node)

        assert await client.estimate_gas(DESTINATION, 0) == 21_000
        assert node.calls("eth_estimateGas")[0][0] == {
            "from": client.address,
            "to": DESTINATION,
            "value": "0x0",
        }


# =============================================================================
# Fees
# =============================================================================


class TestFeeEstimation:

    @pytest.mark.asyncio
    async def test_eip1559_estimate(self):
        node = FakeRpcNode({
            "eth_getBlockByNumber": {"number": "0x10", "baseFeePerGas": hex(50)},
            "eth_maxPriorityFeePerGas": hex(2),
        })

        fee = await _client(node).estimate_fee_rate()

        assert fee.is_eip1559 is True
        assert fee.max_fee_per_gas == 102
        assert fee.max_priority_fee_per_gas == 2
        assert fee.price_per_gas == 102

    @pytest.mark.asyncio
    async def test_legacy_chain_returns_empty_estimate(self):
        node = FakeRpcNode({"eth_getBlockByNumber": {"number": "0x10"}})

        fee = await _client(node).estimate_fee_rate()

        assert fee == FeeEstimate()
        assert fee.price_per_gas == 0
        assert node.calls("eth_maxPriorityFeePerGas") == []

    @pytest.mark.asyncio
    async def test_unsupported_priority_fee_falls_back_to_legacy(self):
        node = FakeRpcNode({
            "eth_getBlockByNumber": {"number": "0x10", "baseFeePerGas": hex(50)},
            "eth_maxPriorityFeePerGas": {"error": {"code": -32601, "message": "method not found"}},
        })

        fee = await _client(node).estimate_fee_rate()

        assert fee == FeeEstimate()
        assert len(node.calls("eth_maxPriorityFeePerGas")) == 1

    @pytest.mark.asyncio
    async def test_gas_price(self):
        assert await _client(FakeRpcNode({"eth_gasPrice": hex(10 ** 9)})).get_gas_price() == 10 ** 9


# =============================================================================
# Sending
# =============================================================================


class TestSending:

    @pytest.mark.asyncio
    async def test_native_send_uses_given_gas_and_fee(self):
        node = FakeRpcNode({
            "eth_getTransactionCount": "0x7",
            "eth_sendRawTransaction": TX_HASH,
        })
        client = _client(node)
        fee = FeeEstimate(max_fee_per_gas=2 * 10 ** 9, max_priority_fee_per_gas=10 ** 9)

        tx_hash = await client.send_native(DESTINATION, 10 ** 15, gas_limit=21_000, fee=fee)

        assert tx_hash == TX_HASH
        assert node.calls("eth_estimateGas") == []
        assert node.calls("eth_getBlockByNumber") == []
        assert node.calls("eth_getTransactionCount") == [[client.address, "pending"]]
        raw = node.calls("eth_sendRawTransaction")[0][0]
        assert raw.startswith("0x02")

    @pytest.mark.asyncio
    async def test_native_send_with_legacy_fee(self):
        node = FakeRpcNode({
            "eth_getTransactionCount": "0x0",
            "eth_sendRawTransaction": TX_HASH,
        })

        await _client(node).send_native(
            DESTINATION, 10 ** 15, gas_limit=21_000, fee=FeeEstimate(gas_price=10 ** 9)
        )

        raw = node.calls("eth_sendRawTransaction")[0][0]
        assert raw.startswith("0xf8")

    @pytest.mark.asyncio
    async def test_token_send_estimates_gas_with_calldata(self):
        node = FakeRpcNode({
            "eth_estimateGas": hex(65_000),
            "eth_getBlockByNumber": {"number": "0x10"},
            "eth_gasPrice": hex(10 ** 9),
            "eth_getTransactionCount": "0x1",
            "eth_sendRawTransaction": TX_HASH,
        })
        client = _client(node)

        tx_hash = await client.send_token(TOKEN, DESTINATION, 5_000_000)

        assert tx_hash == TX_HASH
        estimate = node.calls("eth_estimateGas")[0][0]
        assert estimate == {
            "from": client.address,
            "to": TOKEN,
            "data": build_transfer_call(DESTINATION, 5_000_000),
        }
        assert len(node.calls("eth_gasPrice")) == 1

    @pytest.mark.asyncio
    async def test_send_rejection_surfaces_as_rpc_error(self):
        node = FakeRpcNode({
            "eth_getTransactionCount": "0x0",
            "eth_sendRawTransaction": {"error": {"code": -32000, "message": "insufficient funds"}},
        })

        with pytest.raises(RpcError):
            await _client(node).send_native(
                DESTINATION, 1, gas_limit=21_000, fee=FeeEstimate(gas_price=1)
            )


# =============================================================================
# Receipts and lifecycle
# =============================================================================


class TestReceipts:

    @pytest.mark.asyncio
    async def test_polls_until_receipt_is_available(self):
        responses = iter([None, None, {"status": "0x1", "blockNumber": "0x20", "gasUsed": hex(21_000)}])
        node = FakeRpcNode({"eth_getTransactionReceipt": lambda params: next(responses)})

        receipt = await _client(node).wait_for_receipt(TX_HASH)

        assert receipt.status == ReceiptStatus.SUCCESS
        assert receipt.is_success is True
        assert receipt.block_number == 32
        assert receipt.gas_used == 21_000
        assert len(node.calls("eth_getTransactionReceipt")) == 3

    @pytest.mark.asyncio
    async def test_reverted_receipt(self):
        node = FakeRpcNode({"eth_getTransactionReceipt": {"status": "0x0", "blockNumber": "0x20"}})

        receipt = await _client(node).wait_for_receipt(TX_HASH)

        assert receipt.status == ReceiptStatus.REVERTED
        assert receipt.is_success is False

    @pytest.mark.asyncio
    async def test_close_leaves_injected_http_client_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(FakeRpcNode({}).handler))
        client = JsonRpcChainClient(NETWORK, PRIVATE_KEY, http_client=http_client)

        await client.close()

        assert http_client.is_closed is False
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_close_owned_http_client(self):
        client = JsonRpcChainClient(NETWORK, PRIVATE_KEY)

        await client.close()

        assert client._client.is_closed is True
