"""
Settlement orchestrator.

Sequences the per-network executor across every sweep network and turns the
outcome into a single all-or-nothing result for the deletion caller.
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence, Union

import structlog

from ..chain.client import ChainClient
from ..chain.networks import NetworkSpec, sweep_networks
from ..chain.rpc_client import JsonRpcChainClient
from .errors import SweepAborted, token_config_error, unexpected_failure
from .executor import NetworkSettlementExecutor
from .models import (
    AgentRecord,
    SweepAttempt,
    SweepContext,
    SweepFailure,
    SweepState,
    SweepSummary,
    TokenConfigReason,
    TransferRecord,
)
from .preflight import ConfigLoader, preflight_sweep


ClientFactory = Callable[[NetworkSpec, str], ChainClient]
SweepResult = Union[SweepSummary, SweepFailure]


def default_client_factory(network: NetworkSpec, private_key: str) -> ChainClient:
    return JsonRpcChainClient(network, private_key)


class SweepOrchestrator:
    """
    Drains an agent wallet on every sweep network, one step at a time.

    Networks and assets are settled strictly in order so the ledger is
    deterministic and a failure on a later network never hides transfers
    already made on an earlier one. Attempts for the same signing account
    are serialized; attempts for different accounts run independently.

    Usage:
        orchestrator = SweepOrchestrator()
        result = await orchestrator.sweep_agent(record, private_key)
        if result.ok:
            payload = result.to_dict()
    """

    def __init__(
        self,
        networks: Optional[Sequence[NetworkSpec]] = None,
        client_factory: Optional[ClientFactory] = None,
        load_config: Optional[ConfigLoader] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._networks = list(networks) if networks is not None else None
        self._client_factory = client_factory or default_client_factory
        self._load_config = load_config
        self.logger = logger or logging.getLogger(__name__)

        # key: lowercased signer address
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def networks(self) -> List[NetworkSpec]:
        if self._networks is None:
            return sweep_networks()
        return list(self._networks)

    def _get_lock(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def preflight(
        self,
        record: AgentRecord,
        attempt: Optional[SweepAttempt] = None,
    ) -> Union[SweepContext, SweepFailure]:
        """Run the preflight gate, recording PREFLIGHT → DENIED | CONTEXT_READY."""
        attempt = attempt or SweepAttempt()
        attempt.transition(SweepState.PREFLIGHT)
        outcome = preflight_sweep(record, self._load_config, [n.key for n in self.networks])
        if isinstance(outcome, SweepFailure):
            attempt.transition(SweepState.DENIED)
        else:
            attempt.transition(SweepState.CONTEXT_READY)
        return outcome

    async def sweep_agent(
        self,
        record: AgentRecord,
        private_key: str,
        attempt: Optional[SweepAttempt] = None,
    ) -> SweepResult:
        """Preflight then settle. No chain client is created if preflight fails."""
        attempt = attempt or SweepAttempt()
        outcome = self.preflight(record, attempt)
        if isinstance(outcome, SweepFailure):
            return outcome
        return await self.settle(outcome, private_key, attempt)

    async def settle(
        self,
        context: SweepContext,
        private_key: str,
        attempt: Optional[SweepAttempt] = None,
    ) -> SweepResult:
        """
        Settle every network for an already-validated context.

        Args:
            context: Output of the preflight gate
            private_key: Plaintext signing key of the agent wallet
            attempt: State tracker (a fresh one when omitted)

        Returns:
            SweepSummary when every step on every network succeeded,
            otherwise the SweepFailure of the first failing step
        """
        attempt = attempt or SweepAttempt()
        if attempt.state == SweepState.IDLE:
            attempt.transition(SweepState.CONTEXT_READY)

        networks = self.networks
        uncovered = [n.key for n in networks if n.key not in context.tokens_by_network.networks]
        if uncovered:
            return self._fail(attempt, token_config_error(
                f'Transfer token configuration missing network "{uncovered[0]}".',
                TokenConfigReason.NETWORK_TOKENS_MISSING,
                network=uncovered[0],
            ))

        clients: List[ChainClient] = []
        try:
            signer: Optional[str] = None
            for network in networks:
                client = self._client_factory(network, private_key)
                clients.append(client)
                signer = signer or client.address
        except Exception as e:
            await self._close_all(clients)
            return self._fail(attempt, unexpected_failure(e, networks[0].key if networks else None))

        if signer is None:
            attempt.transition(SweepState.SETTLED)
            return SweepSummary(from_address="", destination=context.destination)

        async with self._get_lock(signer.lower()):
            structlog.contextvars.bind_contextvars(sweep_id=attempt.attempt_id, signer=signer)
            try:
                return await self._run(context, signer, list(zip(networks, clients)), attempt)
            finally:
                structlog.contextvars.unbind_contextvars("sweep_id", "signer")
                await self._close_all(clients)

    async def _run(
        self,
        context: SweepContext,
        signer: str,
        plan: List[tuple],
        attempt: SweepAttempt,
    ) -> SweepResult:
        transfers: List[TransferRecord] = []
        current_network: Optional[str] = None

        def on_step(network: str, asset: str) -> None:
            attempt.transition(SweepState.SETTLING, network=network, asset=asset)

        self.logger.info(
            f"Sweep {attempt.attempt_id} started: {signer} -> {context.destination} "
            f"on {', '.join(n.key for n, _ in plan)}"
        )

        try:
            for network, client in plan:
                current_network = network.key
                executor = NetworkSettlementExecutor(
                    network=network,
                    client=client,
                    destination=context.destination,
                    on_step=on_step,
                )
                transfers.extend(await executor.settle(context.tokens_by_network.tokens_for(network.key)))
        except SweepAborted as e:
            if transfers:
                self.logger.warning(
                    f"Sweep {attempt.attempt_id} aborted after {len(transfers)} confirmed transfer(s): "
                    + ", ".join(f"{t.amount} {t.symbol} on {t.network} ({t.tx_hash})" for t in transfers)
                )
            return self._fail(attempt, e.failure)
        except Exception as e:
            self.logger.exception(f"Sweep {attempt.attempt_id} hit an unexpected error")
            return self._fail(attempt, unexpected_failure(e, current_network))

        attempt.transition(SweepState.SETTLED)
        self.logger.info(f"Sweep {attempt.attempt_id} settled with {len(transfers)} transfer(s)")
        return SweepSummary(
            from_address=signer,
            destination=context.destination,
            transfers=transfers,
        )

    def _fail(self, attempt: SweepAttempt, failure: SweepFailure) -> SweepFailure:
        if not attempt.is_terminal:
            attempt.transition(SweepState.FAILED)
        self.logger.error(
            f"Sweep {attempt.attempt_id} failed: {failure.code.value} "
            f"({failure.details.get('stage') or failure.details.get('network')}) {failure.error}"
        )
        return failure

    async def _close_all(self, clients: List[ChainClient]) -> None:
        for client in clients:
            try:
                await client.close()
            except Exception as e:
                self.logger.warning(f"Failed to close {client.network} client: {e}")


# Singleton instance
_orchestrator: Optional[SweepOrchestrator] = None


def get_sweep_orchestrator() -> SweepOrchestrator:
    """Get the shared orchestrator so per-agent serialization spans callers."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = SweepOrchestrator()
    return _orchestrator


__all__ = [
    "SweepOrchestrator",
    "SweepResult",
    "ClientFactory",
    "default_client_factory",
    "get_sweep_orchestrator",
]
