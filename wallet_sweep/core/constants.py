"""Constants shared by the sweep engine."""

from __future__ import annotations

from ..services.address import ZERO_ADDRESS

# Headroom applied over a point-in-time gas estimate (120 = estimate * 12 / 10).
# Used for the native sweep reserve and for any other gas headroom check.
GAS_SAFETY_MULTIPLIER_PERCENT = 120

NATIVE_SYMBOL = "MNT"
NATIVE_DECIMALS = 18

MAX_TOKEN_DECIMALS = 255


def apply_gas_headroom(gas_cost_wei: int) -> int:
    """Scale a gas cost by the safety multiplier using integer arithmetic."""

    return (gas_cost_wei * GAS_SAFETY_MULTIPLIER_PERCENT) // 100


def gas_reserve_wei(gas_units: int, gas_price_wei: int) -> int:
    """Native balance to withhold so a transfer of ``gas_units`` can still pay for itself."""

    return apply_gas_headroom(gas_units * gas_price_wei)


__all__ = [
    "GAS_SAFETY_MULTIPLIER_PERCENT",
    "ZERO_ADDRESS",
    "NATIVE_SYMBOL",
    "NATIVE_DECIMALS",
    "MAX_TOKEN_DECIMALS",
    "apply_gas_headroom",
    "gas_reserve_wei",
]
