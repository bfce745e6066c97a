"""
Sweep preflight gate.

Checks the destination address and token configuration before any chain I/O
is attempted, so malformed input never causes a network side effect.
"""

import logging
from typing import Callable, Optional, Sequence, Union

from ...services.address import is_usable_address
from .errors import ADMISSION_STATUS, sweep_error
from .models import AgentRecord, SweepContext, SweepErrorCode, SweepFailure
from .token_config import TokenConfigValidation, load_transfer_token_config


logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], TokenConfigValidation]


def preflight_sweep(
    record: AgentRecord,
    load_config: Optional[ConfigLoader] = None,
    networks: Optional[Sequence[str]] = None,
) -> Union[SweepContext, SweepFailure]:
    """
    Build a fresh SweepContext for an agent or deny the sweep.

    Args:
        record: The agent being deleted
        load_config: Token config source (default: the configured JSON file)
        networks: Network keys the config must cover when read from the
            default source (default: settings.sweep_networks)

    Returns:
        SweepContext on success, otherwise a SweepFailure (400 for a bad
        destination, 409 for token misconfiguration)
    """
    destination = record.creator_address
    if not destination:
        logger.info("Sweep denied for agent %s: no creator address", record.id)
        return sweep_error(
            ADMISSION_STATUS,
            SweepErrorCode.MISSING_CREATOR_ADDRESS,
            "Creator address is required before deleting an agent with asset sweep enabled.",
            {"agentId": record.id, "reason": "CREATOR_ADDRESS_MISSING"},
        )

    if not is_usable_address(destination):
        logger.info("Sweep denied for agent %s: invalid creator address", record.id)
        return sweep_error(
            ADMISSION_STATUS,
            SweepErrorCode.INVALID_CREATOR_ADDRESS,
            "Creator address is invalid. Cannot sweep assets before deletion.",
            {"agentId": record.id, "creatorAddress": destination},
        )

    if load_config is None:
        validation = load_transfer_token_config(networks=networks)
    else:
        validation = load_config()
    if not validation.ok:
        logger.warning(
            "Sweep denied for agent %s: token config invalid (%s)",
            record.id,
            validation.config_error.details.get("reason"),
        )
        return validation.config_error

    return SweepContext(
        destination=destination,
        tokens_by_network=validation.config,
        agent_id=record.id,
    )


__all__ = ["preflight_sweep", "ConfigLoader"]
