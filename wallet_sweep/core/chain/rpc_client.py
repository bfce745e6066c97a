"""
JSON-RPC chain client.

Implements ``ChainClient`` against a standard EVM JSON-RPC endpoint:
- Balance reads (native and ERC-20 ``balanceOf``)
- Fee and gas estimation
- Local signing with the agent's key and raw transaction submission
- Receipt polling
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from eth_account import Account
from eth_utils import encode_hex, to_checksum_address

from ...config import settings
from .client import (
    ChainClient,
    ChainClientError,
    FeeEstimate,
    ReceiptStatus,
    RpcError,
    TransactionReceipt,
    TransactionSigningError,
)
from .networks import NetworkSpec


logger = logging.getLogger(__name__)


ERC20_BALANCE_OF_SELECTOR = "0x70a08231"  # balanceOf(address)
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"    # transfer(address,uint256)


def _encode_uint256(value: int) -> str:
    """Encode a uint256 as a 32-byte hex string (without 0x prefix)."""
    return format(value, "064x")


def _encode_address(address: str) -> str:
    """Encode an address as a 32-byte hex string (without 0x prefix)."""
    addr = address.lower().replace("0x", "")
    return addr.zfill(64)


def _hex_to_int(value: Any) -> int:
    if value is None:
        raise ChainClientError("RPC returned no value")
    if isinstance(value, int):
        return value
    if value in ("0x", ""):
        return 0
    return int(value, 16)


def build_balance_of_call(owner: str) -> str:
    return ERC20_BALANCE_OF_SELECTOR + _encode_address(owner)


def build_transfer_call(to_address: str, amount: int) -> str:
    return ERC20_TRANSFER_SELECTOR + _encode_address(to_address) + _encode_uint256(amount)


class JsonRpcChainClient(ChainClient):
    """
    Chain client for one network, signing as one account.

    The client never retries and never gives up waiting for a receipt; the
    only time limit is the per-request HTTP timeout.
    """

    def __init__(
        self,
        network: NetworkSpec,
        private_key: str,
        http_client: Optional[httpx.AsyncClient] = None,
        poll_interval_seconds: Optional[float] = None,
    ):
        try:
            self._account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise TransactionSigningError(f"Invalid signing key: {e}") from e

        self.network = network.key
        self._spec = network
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=float(settings.request_timeout_seconds))
        self._poll_interval = (
            poll_interval_seconds
            if poll_interval_seconds is not None
            else settings.receipt_poll_interval_seconds
        )
        self._request_id = 0

    @property
    def address(self) -> str:
        return self._account.address

    async def _rpc_call(self, method: str, params: List[Any]) -> Any:
        """Make an RPC call to the network."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._request_id,
        }

        try:
            response = await self._client.post(self._spec.rpc_url, json=payload)
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            raise ChainClientError(f"{method} request to {self._spec.name} failed: {e}") from e

        if "error" in result:
            error = result["error"] or {}
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error: {error.get('message', error)}",
                    code=error.get("code"),
                    method=method,
                )
            raise RpcError(f"RPC error: {error}", method=method)

        return result.get("result")

    async def get_balance(self, address: str) -> int:
        return _hex_to_int(await self._rpc_call("eth_getBalance", [address, "latest"]))

    async def read_token_balance(self, token_address: str, owner: str) -> int:
        result = await self._rpc_call(
            "eth_call",
            [{"to": token_address, "data": build_balance_of_call(owner)}, "latest"],
        )
        if not result or result == "0x":
            raise ChainClientError(f"balanceOf returned no data for token {token_address}")
        return _hex_to_int(result)

    async def estimate_gas(self, to_address: str, value: int = 0) -> int:
        call_obj = {
            "from": self.address,
            "to": to_address,
            "value": hex(value),
        }
        return _hex_to_int(await self._rpc_call("eth_estimateGas", [call_obj]))

    async def estimate_fee_rate(self) -> FeeEstimate:
        """EIP-1559 estimate.

        Returns an empty FeeEstimate when the chain has no base fee or the
        node does not serve a priority fee, so callers use the legacy gas price.
        """
        block = await self._rpc_call("eth_getBlockByNumber", ["latest", False])
        base_fee_hex = (block or {}).get("baseFeePerGas")
        if base_fee_hex is None:
            return FeeEstimate()

        base_fee = _hex_to_int(base_fee_hex)
        try:
            priority_fee = _hex_to_int(await self._rpc_call("eth_maxPriorityFeePerGas", []))
        except RpcError as e:
            logger.warning(f"eth_maxPriorityFeePerGas unavailable on {self.network}, using legacy gas price: {e}")
            return FeeEstimate()

        return FeeEstimate(
            max_fee_per_gas=base_fee * 2 + priority_fee,
            max_priority_fee_per_gas=priority_fee,
        )

    async def get_gas_price(self) -> int:
        return _hex_to_int(await self._rpc_call("eth_gasPrice", []))

    async def _resolve_fee(self) -> FeeEstimate:
        fee = await self.estimate_fee_rate()
        if fee.price_per_gas:
            return fee
        return FeeEstimate(gas_price=await self.get_gas_price())

    async def send_token(self, token_address: str, to_address: str, amount: int) -> str:
        data = build_transfer_call(to_address, amount)
        gas_limit = _hex_to_int(
            await self._rpc_call(
                "eth_estimateGas",
                [{"from": self.address, "to": token_address, "data": data}],
            )
        )
        fee = await self._resolve_fee()
        return await self._sign_and_send(
            to_address=token_address,
            value=0,
            data=data,
            gas_limit=gas_limit,
            fee=fee,
        )

    async def send_native(
        self,
        to_address: str,
        value: int,
        gas_limit: Optional[int] = None,
        fee: Optional[FeeEstimate] = None,
    ) -> str:
        if gas_limit is None:
            gas_limit = await self.estimate_gas(to_address, value)
        if fee is None or not fee.price_per_gas:
            fee = await self._resolve_fee()
        return await self._sign_and_send(
            to_address=to_address,
            value=value,
            data="0x",
            gas_limit=gas_limit,
            fee=fee,
        )

    async def _sign_and_send(
        self,
        to_address: str,
        value: int,
        data: str,
        gas_limit: int,
        fee: FeeEstimate,
    ) -> str:
        nonce = _hex_to_int(
            await self._rpc_call("eth_getTransactionCount", [self.address, "pending"])
        )
        tx: Dict[str, Any] = {
            "to": to_checksum_address(to_address),
            "value": value,
            "data": data,
            "gas": gas_limit,
            "nonce": nonce,
            "chainId": self._spec.chain_id,
        }
        if fee.is_eip1559:
            tx["maxFeePerGas"] = fee.max_fee_per_gas
            tx["maxPriorityFeePerGas"] = fee.max_priority_fee_per_gas or 0
        else:
            tx["gasPrice"] = fee.price_per_gas

        try:
            signed = self._account.sign_transaction(tx)
        except (ValueError, TypeError) as e:
            raise TransactionSigningError(f"Failed to sign transaction: {e}") from e

        tx_hash = await self._rpc_call("eth_sendRawTransaction", [encode_hex(signed.raw_transaction)])
        logger.info(f"Transaction submitted on {self.network}: {tx_hash} (nonce={nonce})")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        while True:
            receipt = await self._rpc_call("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                status = _hex_to_int(receipt.get("status", "0x1"))
                return TransactionReceipt(
                    tx_hash=tx_hash,
                    status=ReceiptStatus.SUCCESS if status == 1 else ReceiptStatus.REVERTED,
                    block_number=_hex_to_int(receipt["blockNumber"]) if receipt.get("blockNumber") else None,
                    gas_used=_hex_to_int(receipt["gasUsed"]) if receipt.get("gasUsed") else None,
                )
            await asyncio.sleep(self._poll_interval)

    async def close(self) -> None:
        """Close HTTP client."""
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "JsonRpcChainClient",
    "ERC20_BALANCE_OF_SELECTOR",
    "ERC20_TRANSFER_SELECTOR",
    "build_balance_of_call",
    "build_transfer_call",
]
