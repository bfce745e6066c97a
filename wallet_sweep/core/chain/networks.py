"""Networks an agent wallet is swept on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ...config import Settings, settings as default_settings
from ..constants import NATIVE_DECIMALS, NATIVE_SYMBOL


@dataclass(frozen=True)
class NetworkSpec:
    key: str
    name: str
    chain_id: int
    rpc_url: str
    native_symbol: str = NATIVE_SYMBOL
    native_decimals: int = NATIVE_DECIMALS


NETWORK_METADATA: Dict[str, Dict[str, Any]] = {
    "mantle": {
        "name": "Mantle",
        "chain_id": 5000,
        "rpc_setting": "mantle_rpc_url",
    },
    "mantleSepolia": {
        "name": "Mantle Sepolia",
        "chain_id": 5003,
        "rpc_setting": "mantle_sepolia_rpc_url",
    },
}


def get_network(key: str, settings: Optional[Settings] = None) -> NetworkSpec:
    """Resolve a network key to its spec. Raises KeyError for unknown keys."""

    cfg = settings or default_settings
    meta = NETWORK_METADATA.get(key)
    if meta is None:
        raise KeyError(f"Unknown sweep network: {key}")
    return NetworkSpec(
        key=key,
        name=meta["name"],
        chain_id=meta["chain_id"],
        rpc_url=getattr(cfg, meta["rpc_setting"]),
    )


def sweep_networks(
    keys: Optional[Sequence[str]] = None,
    settings: Optional[Settings] = None,
) -> List[NetworkSpec]:
    """Networks in sweep order (default: settings.sweep_networks)."""

    cfg = settings or default_settings
    return [get_network(key, cfg) for key in (keys or cfg.sweep_networks)]


__all__ = ["NetworkSpec", "NETWORK_METADATA", "get_network", "sweep_networks"]
