"""
Agent Wallet Sweep Engine

Drains an agent wallet before it is discarded:
- validate_transfer_token_config / load_transfer_token_config: which tokens to sweep
- preflight_sweep: destination and config checks, no chain I/O
- NetworkSettlementExecutor: token and native transfers on one network
- SweepOrchestrator: runs every network in order, all-or-nothing result

Usage:
    from wallet_sweep.core.sweep import get_sweep_orchestrator

    orchestrator = get_sweep_orchestrator()
    result = await orchestrator.sweep_agent(record, private_key)
    if not result.ok:
        return result.payload, result.status
"""

from .models import (
    AssetType,
    SweepErrorCode,
    TokenConfigReason,
    SweepStage,
    TokenDescriptor,
    NetworkTokenConfig,
    SweepContext,
    TransferRecord,
    SweepSummary,
    SweepFailure,
    AgentRecord,
    SweepState,
    SweepTransition,
    SweepAttempt,
    InvalidSweepTransitionError,
)

from .errors import (
    SweepAborted,
    sweep_error,
    token_config_error,
    transfer_failed,
    unexpected_failure,
)

from .units import format_units, to_native_units

from .token_config import (
    TokenConfigValidation,
    normalize_symbol,
    validate_transfer_token_config,
    read_transfer_token_config,
    load_transfer_token_config,
)

from .preflight import preflight_sweep

from .executor import NetworkSettlementExecutor

from .orchestrator import (
    SweepOrchestrator,
    SweepResult,
    ClientFactory,
    default_client_factory,
    get_sweep_orchestrator,
)

__all__ = [
    # Models
    "AssetType",
    "SweepErrorCode",
    "TokenConfigReason",
    "SweepStage",
    "TokenDescriptor",
    "NetworkTokenConfig",
    "SweepContext",
    "TransferRecord",
    "SweepSummary",
    "SweepFailure",
    "AgentRecord",
    "SweepState",
    "SweepTransition",
    "SweepAttempt",
    "InvalidSweepTransitionError",
    # Errors
    "SweepAborted",
    "sweep_error",
    "token_config_error",
    "transfer_failed",
    "unexpected_failure",
    # Units
    "format_units",
    "to_native_units",
    # Token config
    "TokenConfigValidation",
    "normalize_symbol",
    "validate_transfer_token_config",
    "read_transfer_token_config",
    "load_transfer_token_config",
    # Preflight
    "preflight_sweep",
    # Settlement
    "NetworkSettlementExecutor",
    "SweepOrchestrator",
    "SweepResult",
    "ClientFactory",
    "default_client_factory",
    "get_sweep_orchestrator",
]
