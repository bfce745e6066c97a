"""
Chain capability interface.

The sweep executor talks to each network only through ``ChainClient``. A
client is bound to one network and one signing account.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChainClientError(Exception):
    """Base exception for chain client failures."""
    pass


class RpcError(ChainClientError):
    """The RPC endpoint returned an error payload."""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.method = method


class TransactionSigningError(ChainClientError):
    """The transaction could not be signed locally."""
    pass


class ReceiptStatus(str, Enum):
    SUCCESS = "success"
    REVERTED = "reverted"


@dataclass(frozen=True)
class FeeEstimate:
    """Per-gas fee estimate. EIP-1559 fields are None on legacy networks."""
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None
    gas_price: Optional[int] = None

    @property
    def is_eip1559(self) -> bool:
        return self.max_fee_per_gas is not None

    @property
    def price_per_gas(self) -> int:
        """Upper bound paid per gas unit, 0 when nothing usable was estimated."""
        return self.max_fee_per_gas or self.gas_price or 0


@dataclass(frozen=True)
class TransactionReceipt:
    tx_hash: str
    status: ReceiptStatus
    block_number: Optional[int] = None
    gas_used: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status == ReceiptStatus.SUCCESS


class ChainClient(ABC):
    """Balance reads, fee estimation and signed transfers on one network."""

    network: str

    @property
    @abstractmethod
    def address(self) -> str:
        """Address of the signing account."""

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""

    @abstractmethod
    async def read_token_balance(self, token_address: str, owner: str) -> int:
        """ERC-20 ``balanceOf(owner)`` in base units."""

    @abstractmethod
    async def send_token(self, token_address: str, to_address: str, amount: int) -> str:
        """Submit ERC-20 ``transfer(to, amount)``; returns the tx hash."""

    @abstractmethod
    async def send_native(
        self,
        to_address: str,
        value: int,
        gas_limit: Optional[int] = None,
        fee: Optional[FeeEstimate] = None,
    ) -> str:
        """Submit a native transfer; returns the tx hash."""

    @abstractmethod
    async def estimate_gas(self, to_address: str, value: int = 0) -> int:
        """Gas units for a plain transfer from the signer to ``to_address``."""

    @abstractmethod
    async def estimate_fee_rate(self) -> FeeEstimate:
        """Priority-fee-aware fee estimate."""

    @abstractmethod
    async def get_gas_price(self) -> int:
        """Legacy ``eth_gasPrice``."""

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Block until the transaction is mined."""

    async def close(self) -> None:
        """Release transport resources."""
        return None


__all__ = [
    "ChainClient",
    "ChainClientError",
    "RpcError",
    "TransactionSigningError",
    "ReceiptStatus",
    "FeeEstimate",
    "TransactionReceipt",
]
