"""
In-memory chain client.

A deterministic ``ChainClient`` that keeps balances in dictionaries. Transfers
move funds immediately and mined receipts are returned without polling. Used
for tests and dry runs.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .client import ChainClient, FeeEstimate, ReceiptStatus, TransactionReceipt


@dataclass
class RecordedCall:
    method: str
    args: Tuple[Any, ...] = ()


@dataclass
class _PendingTx:
    tx_hash: str
    kind: str                   # "token" | "native"
    reverted: bool = False


class InMemoryChainClient(ChainClient):
    """
    Chain client backed by in-process state.

    ``failures`` maps a method name to the exception it raises.
    ``revert`` holds transaction kinds ("token", "native") whose receipts
    come back reverted; reverted transfers do not move funds.
    """

    def __init__(
        self,
        network: str,
        address: str,
        native_balance: int = 0,
        token_balances: Optional[Dict[str, int]] = None,
        gas_units: int = 21_000,
        fee: Optional[FeeEstimate] = None,
        gas_price: int = 1_000_000_000,
        failures: Optional[Dict[str, Exception]] = None,
        revert: Optional[Set[str]] = None,
    ):
        self.network = network
        self._address = address
        self.native_balances: Dict[str, int] = {address.lower(): native_balance}
        # token address -> holder -> amount
        self.token_balances: Dict[str, Dict[str, int]] = {}
        for token, amount in (token_balances or {}).items():
            self.set_token_balance(token, address, amount)
        self.gas_units = gas_units
        self.fee = fee if fee is not None else FeeEstimate(gas_price=gas_price)
        self.gas_price = gas_price
        self.failures = dict(failures or {})
        self.revert = set(revert or ())
        self.calls: List[RecordedCall] = []
        self.closed = False
        self._txs: Dict[str, _PendingTx] = {}
        self._tx_counter = 0

    @property
    def address(self) -> str:
        return self._address

    def set_token_balance(self, token: str, holder: str, amount: int) -> None:
        self.token_balances.setdefault(token.lower(), {})[holder.lower()] = amount

    def token_balance_of(self, token: str, holder: str) -> int:
        return self.token_balances.get(token.lower(), {}).get(holder.lower(), 0)

    def native_balance_of(self, holder: str) -> int:
        return self.native_balances.get(holder.lower(), 0)

    def calls_to(self, method: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.method == method]

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append(RecordedCall(method=method, args=args))
        failure = self.failures.get(method)
        if failure is not None:
            raise failure

    def _new_tx(self, kind: str) -> _PendingTx:
        self._tx_counter += 1
        digest = hashlib.sha256(f"{self.network}:{self._address}:{self._tx_counter}".encode()).hexdigest()
        tx = _PendingTx(tx_hash=f"0x{digest}", kind=kind, reverted=kind in self.revert)
        self._txs[tx.tx_hash] = tx
        return tx

    async def get_balance(self, address: str) -> int:
        self._record("get_balance", address)
        return self.native_balance_of(address)

    async def read_token_balance(self, token_address: str, owner: str) -> int:
        self._record("read_token_balance", token_address, owner)
        return self.token_balance_of(token_address, owner)

    async def send_token(self, token_address: str, to_address: str, amount: int) -> str:
        self._record("send_token", token_address, to_address, amount)
        tx = self._new_tx("token")
        if not tx.reverted:
            held = self.token_balance_of(token_address, self._address)
            self.set_token_balance(token_address, self._address, held - amount)
            received = self.token_balance_of(token_address, to_address)
            self.set_token_balance(token_address, to_address, received + amount)
        return tx.tx_hash

    async def send_native(
        self,
        to_address: str,
        value: int,
        gas_limit: Optional[int] = None,
        fee: Optional[FeeEstimate] = None,
    ) -> str:
        self._record("send_native", to_address, value, gas_limit, fee)
        tx = self._new_tx("native")
        if not tx.reverted:
            price = (fee.price_per_gas if fee else 0) or self.gas_price
            gas_cost = (gas_limit or self.gas_units) * price
            sender = self._address.lower()
            self.native_balances[sender] = self.native_balance_of(sender) - value - gas_cost
            self.native_balances[to_address.lower()] = self.native_balance_of(to_address) + value
        return tx.tx_hash

    async def estimate_gas(self, to_address: str, value: int = 0) -> int:
        self._record("estimate_gas", to_address, value)
        return self.gas_units

    async def estimate_fee_rate(self) -> FeeEstimate:
        self._record("estimate_fee_rate")
        return self.fee

    async def get_gas_price(self) -> int:
        self._record("get_gas_price")
        return self.gas_price

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        self._record("wait_for_receipt", tx_hash)
        tx = self._txs[tx_hash]
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=ReceiptStatus.REVERTED if tx.reverted else ReceiptStatus.SUCCESS,
            block_number=self._tx_counter,
        )

    async def close(self) -> None:
        self.closed = True


__all__ = ["InMemoryChainClient", "RecordedCall"]
