"""
Sweep engine models and types.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4


logger = logging.getLogger(__name__)


class AssetType(str, Enum):
    """Asset classes moved by a sweep."""
    NATIVE = "NATIVE"
    TOKEN = "TOKEN"


class SweepErrorCode(str, Enum):
    """Failure codes surfaced to the deletion caller."""
    MISSING_CREATOR_ADDRESS = "MISSING_CREATOR_ADDRESS"      # 400
    INVALID_CREATOR_ADDRESS = "INVALID_CREATOR_ADDRESS"      # 400
    TOKEN_CONFIG_MISSING = "TOKEN_CONFIG_MISSING"            # 409
    INSUFFICIENT_SWEEP_GAS = "INSUFFICIENT_SWEEP_GAS"        # 409
    ASSET_TRANSFER_FAILED = "ASSET_TRANSFER_FAILED"          # 409


class TokenConfigReason(str, Enum):
    """Sub-codes for TOKEN_CONFIG_MISSING."""
    CONFIG_UNREADABLE = "CONFIG_UNREADABLE"
    REQUIRED_SYMBOLS_MISSING = "REQUIRED_SYMBOLS_MISSING"
    NETWORK_TOKENS_MISSING = "NETWORK_TOKENS_MISSING"
    TOKEN_ENTRY_MISSING = "TOKEN_ENTRY_MISSING"
    TOKEN_ADDRESS_INVALID = "TOKEN_ADDRESS_INVALID"
    TOKEN_DECIMALS_INVALID = "TOKEN_DECIMALS_INVALID"


class SweepStage(str, Enum):
    """The RPC step an ASSET_TRANSFER_FAILED originated from."""
    BALANCE_CHECK = "BALANCE_CHECK"
    TRANSFER_SUBMIT = "TRANSFER_SUBMIT"
    TRANSFER_RECEIPT = "TRANSFER_RECEIPT"
    NATIVE_BALANCE = "NATIVE_BALANCE"
    NATIVE_GAS_PRICE = "NATIVE_GAS_PRICE"
    NATIVE_GAS_ESTIMATE = "NATIVE_GAS_ESTIMATE"
    NATIVE_TRANSFER_SUBMIT = "NATIVE_TRANSFER_SUBMIT"
    NATIVE_TRANSFER_RECEIPT = "NATIVE_TRANSFER_RECEIPT"
    UNEXPECTED = "UNEXPECTED"


@dataclass(frozen=True)
class TokenDescriptor:
    """A fungible token that must be swept on one network."""
    symbol: str
    address: str
    decimals: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "address": self.address,
            "decimals": self.decimals,
        }


@dataclass(frozen=True)
class NetworkTokenConfig:
    """Validated token declaration: required symbols plus per-network descriptors."""
    required_symbols: Tuple[str, ...]
    tokens_by_network: Mapping[str, Tuple[TokenDescriptor, ...]]

    @property
    def networks(self) -> Tuple[str, ...]:
        return tuple(self.tokens_by_network.keys())

    def tokens_for(self, network: str) -> Tuple[TokenDescriptor, ...]:
        return self.tokens_by_network.get(network, ())


@dataclass(frozen=True)
class SweepContext:
    """Everything the orchestrator needs once preflight has passed."""
    destination: str
    tokens_by_network: NetworkTokenConfig
    agent_id: Optional[str] = None


@dataclass(frozen=True)
class TransferRecord:
    """One confirmed transfer out of the agent wallet."""
    network: str
    asset_type: AssetType
    symbol: str
    amount: str                                 # Human-readable decimal string
    tx_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network,
            "assetType": self.asset_type.value,
            "symbol": self.symbol,
            "amount": self.amount,
            "txHash": self.tx_hash,
        }


@dataclass
class SweepSummary:
    """Successful outcome of a sweep attempt."""
    from_address: str
    destination: str
    transfers: List[TransferRecord] = field(default_factory=list)

    ok = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "destination": self.destination,
            "transfers": [t.to_dict() for t in self.transfers],
        }


@dataclass(frozen=True)
class SweepFailure:
    """Terminal failure of a sweep attempt."""
    status: int
    code: SweepErrorCode
    error: str
    details: Mapping[str, Any] = field(default_factory=dict)

    ok = False

    def __post_init__(self):
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def payload(self) -> Dict[str, Any]:
        """Body the deletion caller forwards verbatim."""
        return {
            "error": self.error,
            "code": self.code.value,
            "details": dict(self.details),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, **self.payload}


@dataclass
class AgentRecord:
    """The persisted agent fields the sweep engine reads."""
    id: str
    name: str = ""
    wallet_address: str = ""
    creator_address: Optional[str] = None
    encrypted_private_key: str = ""


class SweepState(str, Enum):
    """Lifecycle of a single sweep attempt."""
    IDLE = "idle"
    PREFLIGHT = "preflight"
    DENIED = "denied"                   # Preflight rejected, no chain I/O done
    CONTEXT_READY = "context_ready"
    SETTLING = "settling"               # Moving one asset on one network
    FAILED = "failed"
    SETTLED = "settled"


@dataclass
class SweepTransition:
    """Record of a sweep state change."""
    from_state: SweepState
    to_state: SweepState
    network: Optional[str] = None
    asset: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_state": self.from_state.value,
            "to_state": self.to_state.value,
            "network": self.network,
            "asset": self.asset,
            "timestamp": self.timestamp.isoformat(),
        }


class InvalidSweepTransitionError(Exception):
    """Raised when a sweep attempt is moved to a state it cannot reach."""

    def __init__(self, from_state: SweepState, to_state: SweepState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(f"Invalid sweep transition: {from_state.value} -> {to_state.value}")


@dataclass
class SweepAttempt:
    """Tracks the state machine of one sweep attempt."""
    attempt_id: str = field(default_factory=lambda: f"sweep_{uuid4().hex[:16]}")
    state: SweepState = SweepState.IDLE
    history: List[SweepTransition] = field(default_factory=list)

    TRANSITIONS = {
        SweepState.IDLE: {SweepState.PREFLIGHT, SweepState.CONTEXT_READY},
        SweepState.PREFLIGHT: {SweepState.DENIED, SweepState.CONTEXT_READY},
        SweepState.CONTEXT_READY: {SweepState.SETTLING, SweepState.SETTLED, SweepState.FAILED},
        SweepState.SETTLING: {SweepState.SETTLING, SweepState.FAILED, SweepState.SETTLED},
        SweepState.DENIED: set(),
        SweepState.FAILED: set(),
        SweepState.SETTLED: set(),
    }

    @property
    def is_terminal(self) -> bool:
        return not self.TRANSITIONS[self.state]

    def transition(
        self,
        to_state: SweepState,
        network: Optional[str] = None,
        asset: Optional[str] = None,
    ) -> SweepTransition:
        if to_state not in self.TRANSITIONS[self.state]:
            raise InvalidSweepTransitionError(self.state, to_state)
        record = SweepTransition(
            from_state=self.state,
            to_state=to_state,
            network=network,
            asset=asset,
        )
        self.state = to_state
        self.history.append(record)
        logger.debug(
            f"Sweep {self.attempt_id}: {record.from_state.value} -> {to_state.value}"
            + (f" ({network}/{asset})" if network else "")
        )
        return record
