"""
Per-network settlement executor.

Drains one network: every required token first, in validator order, then
the native asset minus a gas reserve. Each step either succeeds or raises
``SweepAborted`` tagged with the stage that failed. Nothing is retried.
"""

import logging
from typing import Callable, List, Optional, Sequence

from ..chain.client import ChainClient, FeeEstimate
from ..chain.networks import NetworkSpec
from ..constants import gas_reserve_wei
from .errors import CONFLICT_STATUS, SweepAborted, sweep_error, transfer_failed
from .models import AssetType, SweepErrorCode, SweepStage, TokenDescriptor, TransferRecord
from .units import format_units


StepCallback = Callable[[str, str], None]


class NetworkSettlementExecutor:
    """
    Sweeps one agent wallet on one network to a destination address.

    Responsibilities:
    - Read token balances and transfer full non-zero balances
    - Reserve native gas with the shared safety multiplier
    - Transfer the remaining native balance
    - Confirm every transfer before moving on
    """

    def __init__(
        self,
        network: NetworkSpec,
        client: ChainClient,
        destination: str,
        on_step: Optional[StepCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.network = network
        self.client = client
        self.destination = destination
        self._on_step = on_step
        self.logger = logger or logging.getLogger(__name__)

    def _step(self, asset: str) -> None:
        if self._on_step:
            self._on_step(self.network.key, asset)

    def _native_units(self, value: int) -> str:
        return format_units(value, self.network.native_decimals)

    async def settle(self, tokens: Sequence[TokenDescriptor]) -> List[TransferRecord]:
        """Sweep all tokens then the native asset. Returns the transfers made, in order."""
        transfers: List[TransferRecord] = []
        for token in tokens:
            record = await self.sweep_token(token)
            if record:
                transfers.append(record)

        record = await self.sweep_native()
        if record:
            transfers.append(record)
        return transfers

    async def sweep_token(self, token: TokenDescriptor) -> Optional[TransferRecord]:
        network = self.network.key
        self._step(token.symbol)

        try:
            balance = await self.client.read_token_balance(token.address, self.client.address)
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to check {token.symbol} balance on {network}.",
                network, token.symbol, SweepStage.BALANCE_CHECK, e,
            ))

        if balance == 0:
            self.logger.debug(f"No {token.symbol} to sweep on {network}")
            return None

        try:
            tx_hash = await self.client.send_token(token.address, self.destination, balance)
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to submit {token.symbol} transfer on {network}.",
                network, token.symbol, SweepStage.TRANSFER_SUBMIT, e,
            ))

        await self._confirm(
            tx_hash,
            symbol=token.symbol,
            stage=SweepStage.TRANSFER_RECEIPT,
            reverted_error=f"{token.symbol} transfer reverted on {network}.",
            failed_error=f"Failed to confirm {token.symbol} transfer on {network}.",
        )

        amount = format_units(balance, token.decimals)
        self.logger.info(f"Swept {amount} {token.symbol} on {network}: {tx_hash}")
        return TransferRecord(
            network=network,
            asset_type=AssetType.TOKEN,
            symbol=token.symbol,
            amount=amount,
            tx_hash=tx_hash,
        )

    async def sweep_native(self) -> Optional[TransferRecord]:
        network = self.network.key
        symbol = self.network.native_symbol
        self._step(symbol)

        try:
            balance = await self.client.get_balance(self.client.address)
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to read native balance on {network}.",
                network, symbol, SweepStage.NATIVE_BALANCE, e,
            ))

        if balance == 0:
            self.logger.debug(f"No {symbol} to sweep on {network}")
            return None

        try:
            fee = await self.client.estimate_fee_rate()
            if not fee.price_per_gas:
                fee = FeeEstimate(gas_price=await self.client.get_gas_price())
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to estimate gas price for native transfer on {network}.",
                network, symbol, SweepStage.NATIVE_GAS_PRICE, e,
            ))

        try:
            gas_units = await self.client.estimate_gas(self.destination, 0)
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to estimate native transfer gas on {network}.",
                network, symbol, SweepStage.NATIVE_GAS_ESTIMATE, e,
            ))

        reserve = gas_reserve_wei(gas_units, fee.price_per_gas)
        if balance <= reserve:
            raise SweepAborted(sweep_error(
                CONFLICT_STATUS,
                SweepErrorCode.INSUFFICIENT_SWEEP_GAS,
                f"Insufficient {symbol} on {network} to complete native asset sweep.",
                {
                    "network": network,
                    "balanceMnt": self._native_units(balance),
                    "requiredMnt": self._native_units(reserve),
                    "shortfallMnt": self._native_units(reserve - balance),
                    "destination": self.destination,
                },
            ))

        send_value = balance - reserve
        try:
            tx_hash = await self.client.send_native(
                self.destination,
                send_value,
                gas_limit=gas_units,
                fee=fee,
            )
        except Exception as e:
            raise SweepAborted(transfer_failed(
                f"Failed to submit native transfer on {network}.",
                network, symbol, SweepStage.NATIVE_TRANSFER_SUBMIT, e,
            ))

        await self._confirm(
            tx_hash,
            symbol=symbol,
            stage=SweepStage.NATIVE_TRANSFER_RECEIPT,
            reverted_error=f"Native transfer reverted on {network}.",
            failed_error=f"Failed to confirm native transfer on {network}.",
        )

        amount = self._native_units(send_value)
        self.logger.info(
            f"Swept {amount} {symbol} on {network}: {tx_hash} "
            f"(reserve={self._native_units(reserve)}, gas={gas_units})"
        )
        return TransferRecord(
            network=network,
            asset_type=AssetType.NATIVE,
            symbol=symbol,
            amount=amount,
            tx_hash=tx_hash,
        )

    async def _confirm(
        self,
        tx_hash: str,
        symbol: str,
        stage: SweepStage,
        reverted_error: str,
        failed_error: str,
    ) -> None:
        network = self.network.key
        try:
            receipt = await self.client.wait_for_receipt(tx_hash)
        except Exception as e:
            raise SweepAborted(transfer_failed(
                failed_error, network, symbol, stage, e, txHash=tx_hash,
            ))

        if not receipt.is_success:
            raise SweepAborted(transfer_failed(
                reverted_error, network, symbol, stage,
                txHash=tx_hash, receiptStatus=receipt.status.value,
            ))


__all__ = ["NetworkSettlementExecutor", "StepCallback"]
