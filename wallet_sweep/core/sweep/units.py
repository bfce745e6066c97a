"""Base-unit ↔ human-readable amount formatting."""

from __future__ import annotations

from ..constants import NATIVE_DECIMALS


def format_units(value: int, decimals: int) -> str:
    """Render an integer base-unit amount as a decimal string.

    Integer arithmetic only. Trailing fractional zeros are dropped but one
    fractional digit is always kept, so ``5_000_000`` at 6 decimals renders
    as ``"5.0"`` and ``1_230_000_000_000_000_000`` at 18 as ``"1.23"``.
    """

    if decimals < 0:
        raise ValueError(f"decimals must be non-negative, got {decimals}")

    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    fraction_digits = str(fraction).zfill(decimals).rstrip("0") if decimals else ""
    return f"{sign}{whole}.{fraction_digits or '0'}"


def to_native_units(value_wei: int) -> str:
    return format_units(value_wei, NATIVE_DECIMALS)


__all__ = ["format_units", "to_native_units"]
