"""
Tests for transfer token configuration loading and validation.
"""

import json
import pytest

from wallet_sweep.config import settings
from wallet_sweep.core.sweep import (
    SweepErrorCode,
    TokenConfigReason,
    load_transfer_token_config,
    normalize_symbol,
    validate_transfer_token_config,
)


USDC = "0x0000000000000000000000000000000000000001"
WETH = "0x0000000000000000000000000000000000000002"
NETWORKS = ["testnetA", "testnetB"]


def _config(tokens_a=None, tokens_b=None, required=("USDC",)):
    default = [{"symbol": "USDC", "address": USDC, "decimals": 6}]
    return {
        "requiredSymbols": list(required),
        "networks": {
            "testnetA": {"tokens": default if tokens_a is None else tokens_a},
            "testnetB": {"tokens": default if tokens_b is None else tokens_b},
        },
    }


def _reason(validation) -> str:
    return validation.config_error.details["reason"]


class TestValidConfigs:

    def test_valid_config_produces_descriptors_per_network(self):
        validation = validate_transfer_token_config(_config(), NETWORKS)

        assert validation.ok is True
        assert validation.config_error is None
        assert validation.required_symbols == ("USDC",)
        assert list(validation.tokens_by_network) == NETWORKS
        token = validation.tokens_by_network["testnetA"][0]
        assert (token.symbol, token.address, token.decimals) == ("USDC", USDC, 6)

    def test_symbols_are_normalized(self):
        raw = _config(
            tokens_a=[{"symbol": " usdc ", "address": USDC, "decimals": 6}],
            required=(" Usdc",),
        )

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert validation.ok is True
        assert validation.tokens_by_network["testnetA"][0].symbol == "USDC"

    def test_descriptors_follow_required_symbol_order(self):
        tokens = [
            {"symbol": "USDC", "address": USDC, "decimals": 6},
            {"symbol": "WETH", "address": WETH, "decimals": 18},
        ]
        raw = _config(tokens_a=tokens, tokens_b=tokens, required=("WETH", "USDC"))

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert [t.symbol for t in validation.tokens_by_network["testnetB"]] == ["WETH", "USDC"]

    def test_duplicate_required_symbols_collapse(self):
        validation = validate_transfer_token_config(_config(required=("USDC", "usdc", "")), NETWORKS)

        assert validation.required_symbols == ("USDC",)
        assert len(validation.tokens_by_network["testnetA"]) == 1

    def test_last_duplicate_token_entry_wins(self):
        raw = _config(tokens_a=[
            {"symbol": "USDC", "address": "not-an-address", "decimals": 6},
            {"symbol": "usdc", "address": WETH, "decimals": 8},
        ])

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert validation.ok is True
        token = validation.tokens_by_network["testnetA"][0]
        assert (token.address, token.decimals) == (WETH, 8)

    def test_junk_entries_are_ignored(self):
        raw = _config(tokens_a=[
            "USDC",
            {"address": WETH, "decimals": 6},
            {"symbol": "  ", "address": WETH, "decimals": 6},
            {"symbol": "USDC", "address": USDC, "decimals": 6},
        ])

        assert validate_transfer_token_config(raw, NETWORKS).ok is True

    def test_integral_float_decimals_are_accepted(self):
        raw = _config(tokens_a=[{"symbol": "USDC", "address": USDC, "decimals": 6.0}])

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert validation.tokens_by_network["testnetA"][0].decimals == 6

    def test_unlisted_networks_are_not_validated(self):
        raw = {"requiredSymbols": ["USDC"], "networks": {"testnetA": _config()["networks"]["testnetA"]}}

        assert validate_transfer_token_config(raw, ["testnetA"]).ok is True


class TestInvalidConfigs:

    @pytest.mark.parametrize("raw", [None, [], {}, {"requiredSymbols": []}, {"requiredSymbols": "USDC"},
                                     {"requiredSymbols": ["", "  ", 5]}])
    def test_required_symbols_missing(self, raw):
        validation = validate_transfer_token_config(raw, NETWORKS)

        assert validation.ok is False
        assert validation.config is None
        assert _reason(validation) == TokenConfigReason.REQUIRED_SYMBOLS_MISSING.value

    def test_missing_network_fails_with_network_detail(self):
        raw = _config()
        del raw["networks"]["testnetB"]

        validation = validate_transfer_token_config(raw, NETWORKS)

        failure = validation.config_error
        assert failure.status == 409
        assert failure.code == SweepErrorCode.TOKEN_CONFIG_MISSING
        assert dict(failure.details) == {
            "network": "testnetB",
            "reason": "NETWORK_TOKENS_MISSING",
        }
        assert "testnetB" in failure.error

    def test_network_without_token_list_fails(self):
        raw = _config()
        raw["networks"]["testnetA"] = {"tokens": {"USDC": USDC}}

        assert _reason(validate_transfer_token_config(raw, NETWORKS)) == "NETWORK_TOKENS_MISSING"

    def test_missing_token_entry(self):
        raw = _config(tokens_b=[{"symbol": "WETH", "address": WETH, "decimals": 18}])

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert dict(validation.config_error.details) == {
            "network": "testnetB",
            "symbol": "USDC",
            "reason": "TOKEN_ENTRY_MISSING",
        }

    @pytest.mark.parametrize("address", [
        None,
        "",
        "0x123",
        "0x0000000000000000000000000000000000000000",
        "0x5aaeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
        12345,
    ])
    def test_invalid_token_address(self, address):
        raw = _config(tokens_a=[{"symbol": "USDC", "address": address, "decimals": 6}])

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert _reason(validation) == TokenConfigReason.TOKEN_ADDRESS_INVALID.value
        assert validation.config_error.details["symbol"] == "USDC"

    @pytest.mark.parametrize("decimals", [None, -1, 256, 6.5, "6", True])
    def test_invalid_decimals(self, decimals):
        raw = _config(tokens_a=[{"symbol": "USDC", "address": USDC, "decimals": decimals}])

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert _reason(validation) == TokenConfigReason.TOKEN_DECIMALS_INVALID.value

    def test_first_failure_wins(self):
        raw = _config(
            tokens_a=[{"symbol": "USDC", "address": USDC, "decimals": 300}],
            tokens_b=[],
        )

        validation = validate_transfer_token_config(raw, NETWORKS)

        assert validation.config_error.details["network"] == "testnetA"
        assert _reason(validation) == "TOKEN_DECIMALS_INVALID"


class TestLoadFromDisk:

    def test_shipped_config_is_valid_for_default_networks(self):
        validation = load_transfer_token_config()

        assert validation.ok is True
        assert validation.required_symbols == ("USDC",)
        assert set(validation.tokens_by_network) == set(settings.sweep_networks)

    def test_reads_file_from_path(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text(json.dumps(_config()))

        validation = load_transfer_token_config(path, NETWORKS)

        assert validation.ok is True

    def test_missing_file_is_reported_as_config_error(self, tmp_path):
        validation = load_transfer_token_config(tmp_path / "absent.json", NETWORKS)

        assert validation.ok is False
        assert validation.config_error.status == 409
        assert _reason(validation) == TokenConfigReason.CONFIG_UNREADABLE.value
        assert "absent.json" in validation.config_error.error

    def test_malformed_json_is_reported_as_config_error(self, tmp_path):
        path = tmp_path / "tokens.json"
        path.write_text("{not json")

        validation = load_transfer_token_config(path, NETWORKS)

        assert _reason(validation) == "CONFIG_UNREADABLE"
        assert validation.config_error.details["message"]


def test_normalize_symbol():
    assert normalize_symbol(" usdc ") == "USDC"
    assert normalize_symbol(None) == ""
    assert normalize_symbol(7) == ""
