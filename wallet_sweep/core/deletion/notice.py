"""Human-readable notice shown after an agent has been deleted."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class SweepNotice:
    title: str
    subtitle: str
    transfers: List[str] = field(default_factory=list)
    destination: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "transfers": list(self.transfers),
            "destination": self.destination,
        }


def short_address(value: str) -> str:
    if len(value) < 12:
        return value
    return f"{value[:6]}...{value[-4:]}"


def build_sweep_notice(state: Any) -> Optional[SweepNotice]:
    """Summarize a deletion response for display.

    ``state`` carries ``deletedAgentName`` and, when the server returned one,
    ``deleteSweep`` (the sweep summary). Returns None without an agent name.
    """

    if not isinstance(state, Mapping):
        return None

    raw_name = state.get("deletedAgentName")
    name = raw_name.strip() if isinstance(raw_name, str) else ""
    if not name:
        return None

    title = f"{name} deleted"
    sweep = state.get("deleteSweep")
    if not isinstance(sweep, Mapping) or not isinstance(sweep.get("transfers"), list):
        return SweepNotice(
            title=title,
            subtitle="Agent deletion completed. Sweep details were not returned.",
        )

    transfers = [
        f"{item.get('amount')} {item.get('symbol')} ({item.get('assetType')} on {item.get('network')})"
        for item in sweep["transfers"]
        if isinstance(item, Mapping)
    ]
    destination = sweep.get("destination") or None

    if not transfers:
        return SweepNotice(
            title=title,
            subtitle="No transferable assets were found in the agent wallet.",
            transfers=transfers,
            destination=destination,
        )

    label = "asset" if len(transfers) == 1 else "assets"
    destination_text = f" to {short_address(destination)}" if destination else ""
    return SweepNotice(
        title=title,
        subtitle=f"Transferred {len(transfers)} {label}{destination_text}.",
        transfers=transfers,
        destination=destination,
    )


__all__ = ["SweepNotice", "short_address", "build_sweep_notice"]
