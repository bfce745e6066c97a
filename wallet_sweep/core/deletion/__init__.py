"""
Agent deletion with asset sweep.

- DeletionCoordinator: preflight, stop runtime, sweep, then delete the record
- build_sweep_notice: display text for a completed deletion
"""

from .coordinator import (
    AgentStore,
    AgentRuntime,
    KeyResolver,
    DeletionResult,
    DeletionCoordinator,
)

from .notice import (
    SweepNotice,
    short_address,
    build_sweep_notice,
)

__all__ = [
    "AgentStore",
    "AgentRuntime",
    "KeyResolver",
    "DeletionResult",
    "DeletionCoordinator",
    "SweepNotice",
    "short_address",
    "build_sweep_notice",
]
