"""
Agent deletion coordinator.

Deleting an agent is fail-closed: the persisted record is only removed once
every asset in its wallet has been swept to the creator address.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol

from ..sweep.errors import unexpected_failure
from ..sweep.models import AgentRecord, SweepAttempt, SweepFailure, SweepState
from ..sweep.orchestrator import SweepOrchestrator, get_sweep_orchestrator


logger = logging.getLogger(__name__)


class AgentStore(Protocol):
    def get_agent(self, agent_id: str, user_id: Optional[str] = None) -> Optional[AgentRecord]: ...

    def delete_agent(self, agent_id: str) -> bool: ...


class AgentRuntime(Protocol):
    def is_running(self, agent_id: str) -> bool: ...

    async def stop(self, agent_id: str) -> None: ...


# Resolves the plaintext signing key for an agent (decryption lives elsewhere).
KeyResolver = Callable[[AgentRecord], str]


@dataclass
class DeletionResult:
    """Status code and JSON body for the deletion caller."""
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def deleted(self) -> bool:
        return self.status == 200


class DeletionCoordinator:
    """
    Runs the delete flow for one agent:

    1. Look up the agent (404 when missing)
    2. Preflight the sweep; nothing else happens if it is denied
    3. Resolve the signing key; a failure keeps the record
    4. Stop the agent's runtime if it is running
    5. Sweep every asset; forward any failure verbatim and keep the record
    6. Delete the record and return the sweep summary
    """

    def __init__(
        self,
        store: AgentStore,
        runtime: AgentRuntime,
        resolve_key: KeyResolver,
        orchestrator: Optional[SweepOrchestrator] = None,
    ):
        self.store = store
        self.runtime = runtime
        self.resolve_key = resolve_key
        self.orchestrator = orchestrator or get_sweep_orchestrator()

    @staticmethod
    def _failure(failure: SweepFailure) -> DeletionResult:
        return DeletionResult(status=failure.status, body=failure.payload)

    async def delete_agent(self, agent_id: str, user_id: Optional[str] = None) -> DeletionResult:
        record = self.store.get_agent(agent_id, user_id)
        if record is None:
            return DeletionResult(status=404, body={"error": "Agent not found"})

        attempt = SweepAttempt()
        context = self.orchestrator.preflight(record, attempt)
        if isinstance(context, SweepFailure):
            return self._failure(context)

        try:
            private_key = self.resolve_key(record)
        except Exception as e:
            logger.error(f"Agent {agent_id} kept: signing key could not be resolved: {e}")
            attempt.transition(SweepState.FAILED)
            return self._failure(unexpected_failure(e))

        if self.runtime.is_running(agent_id):
            logger.info(f"Stopping agent {agent_id} before sweep")
            await self.runtime.stop(agent_id)

        result = await self.orchestrator.settle(context, private_key, attempt)
        if isinstance(result, SweepFailure):
            logger.warning(f"Agent {agent_id} kept: sweep failed with {result.code.value}")
            return self._failure(result)

        self.store.delete_agent(agent_id)
        logger.info(f"Agent {agent_id} deleted after sweeping {len(result.transfers)} asset(s)")
        return DeletionResult(status=200, body={"success": True, "sweep": result.to_dict()})


__all__ = [
    "AgentStore",
    "AgentRuntime",
    "KeyResolver",
    "DeletionResult",
    "DeletionCoordinator",
]
