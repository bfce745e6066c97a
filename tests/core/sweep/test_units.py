"""Tests for amount formatting and the gas reserve arithmetic."""

import pytest

from wallet_sweep.core.constants import (
    GAS_SAFETY_MULTIPLIER_PERCENT,
    apply_gas_headroom,
    gas_reserve_wei,
)
from wallet_sweep.core.sweep import format_units, to_native_units


@pytest.mark.parametrize("value,decimals,expected", [
    (5_000_000, 6, "5.0"),
    (1_230_000_000_000_000_000, 18, "1.23"),
    (9_974_800_000_000_000, 18, "0.0099748"),
    (0, 6, "0.0"),
    (1, 6, "0.000001"),
    (123, 0, "123.0"),
    (10 ** 80, 18, "1" + "0" * 62 + ".0"),
])
def test_format_units(value, decimals, expected):
    assert format_units(value, decimals) == expected


def test_format_units_keeps_full_precision():
    assert format_units(10 ** 30 + 1, 18) == "1000000000000.000000000000000001"


def test_format_units_rejects_negative_decimals():
    with pytest.raises(ValueError):
        format_units(1, -1)


def test_to_native_units():
    assert to_native_units(25_200_000_000_000) == "0.0000252"


class TestGasHeadroom:

    def test_multiplier_is_twelve_tenths(self):
        assert GAS_SAFETY_MULTIPLIER_PERCENT == 120
        assert apply_gas_headroom(10) == 12

    def test_reserve_uses_integer_floor(self):
        assert gas_reserve_wei(21_000, 1_000_000_000) == 25_200_000_000_000
        assert gas_reserve_wei(1, 9) == 10  # 10.8 floored

    def test_zero_price_means_zero_reserve(self):
        assert gas_reserve_wei(21_000, 0) == 0
