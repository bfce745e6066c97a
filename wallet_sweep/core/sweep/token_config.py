"""
Transfer token configuration.

Loads and validates the static declaration of which fungible tokens must be
swept on each network::

    {
      "requiredSymbols": ["USDC"],
      "networks": {
        "mantle": {"tokens": [{"symbol": "USDC", "address": "0x...", "decimals": 6}]}
      }
    }

Validation is pure and cheap, so callers run it on every sweep attempt rather
than caching the result.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ...config import settings
from ...services.address import is_usable_address
from ..constants import MAX_TOKEN_DECIMALS
from .errors import token_config_error
from .models import NetworkTokenConfig, SweepFailure, TokenConfigReason, TokenDescriptor


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenConfigValidation:
    """Outcome of validating a token declaration."""
    ok: bool
    config: Optional[NetworkTokenConfig] = None
    config_error: Optional[SweepFailure] = None

    @property
    def required_symbols(self) -> Tuple[str, ...]:
        return self.config.required_symbols if self.config else ()

    @property
    def tokens_by_network(self) -> Mapping[str, Tuple[TokenDescriptor, ...]]:
        return self.config.tokens_by_network if self.config else MappingProxyType({})


def normalize_symbol(symbol: Any) -> str:
    if not isinstance(symbol, str):
        return ""
    return symbol.strip().upper()


def _normalize_required_symbols(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    symbols: List[str] = []
    for item in raw:
        symbol = normalize_symbol(item)
        if symbol and symbol not in symbols:
            symbols.append(symbol)
    return symbols


def _coerce_decimals(value: Any) -> Optional[int]:
    """Return decimals as an int, or None if it is not an integer in range."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if value < 0 or value > MAX_TOKEN_DECIMALS:
        return None
    return value


def _fail(
    reason: TokenConfigReason,
    error: str,
    network: Optional[str] = None,
    symbol: Optional[str] = None,
) -> TokenConfigValidation:
    return TokenConfigValidation(
        ok=False,
        config_error=token_config_error(error, reason, network=network, symbol=symbol),
    )


def validate_transfer_token_config(
    raw_config: Any,
    networks: Sequence[str],
) -> TokenConfigValidation:
    """Validate a raw token declaration for the given networks, in order.

    The first failing check wins. Within a network's token list, a later entry
    for the same normalized symbol replaces an earlier one.
    """
    config = raw_config if isinstance(raw_config, Mapping) else {}
    required_symbols = _normalize_required_symbols(config.get("requiredSymbols"))

    if not required_symbols:
        return _fail(
            TokenConfigReason.REQUIRED_SYMBOLS_MISSING,
            "Transfer token configuration is missing requiredSymbols.",
        )

    raw_networks = config.get("networks")
    if not isinstance(raw_networks, Mapping):
        raw_networks = {}

    tokens_by_network: Dict[str, Tuple[TokenDescriptor, ...]] = {}
    for network in networks:
        network_entry = raw_networks.get(network)
        network_tokens = network_entry.get("tokens") if isinstance(network_entry, Mapping) else None
        if not isinstance(network_tokens, list):
            return _fail(
                TokenConfigReason.NETWORK_TOKENS_MISSING,
                f'Transfer token configuration missing network "{network}".',
                network=network,
            )

        by_symbol: Dict[str, Mapping[str, Any]] = {}
        for entry in network_tokens:
            if not isinstance(entry, Mapping):
                continue
            symbol = normalize_symbol(entry.get("symbol"))
            if not symbol:
                continue
            by_symbol[symbol] = entry

        descriptors: List[TokenDescriptor] = []
        for symbol in required_symbols:
            entry = by_symbol.get(symbol)
            if entry is None:
                return _fail(
                    TokenConfigReason.TOKEN_ENTRY_MISSING,
                    f'Token "{symbol}" is not configured for {network}.',
                    network=network,
                    symbol=symbol,
                )

            address = entry.get("address")
            address = address.strip() if isinstance(address, str) else ""
            if not is_usable_address(address):
                return _fail(
                    TokenConfigReason.TOKEN_ADDRESS_INVALID,
                    f'Token "{symbol}" has an invalid address for {network}.',
                    network=network,
                    symbol=symbol,
                )

            decimals = _coerce_decimals(entry.get("decimals"))
            if decimals is None:
                return _fail(
                    TokenConfigReason.TOKEN_DECIMALS_INVALID,
                    f'Token "{symbol}" has invalid decimals for {network}.',
                    network=network,
                    symbol=symbol,
                )

            descriptors.append(TokenDescriptor(symbol=symbol, address=address, decimals=decimals))

        tokens_by_network[network] = tuple(descriptors)

    return TokenConfigValidation(
        ok=True,
        config=NetworkTokenConfig(
            required_symbols=tuple(required_symbols),
            tokens_by_network=MappingProxyType(tokens_by_network),
        ),
    )


def read_transfer_token_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read the raw JSON declaration. Raises OSError / ValueError on failure."""
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def load_transfer_token_config(
    path: Optional[Union[str, Path]] = None,
    networks: Optional[Sequence[str]] = None,
) -> TokenConfigValidation:
    """Read and validate the token declaration from disk.

    Args:
        path: JSON file (default: settings.transfer_tokens_path)
        networks: Network keys to validate (default: settings.sweep_networks)

    Returns:
        TokenConfigValidation; an unreadable file is reported as a config
        error rather than raised.
    """
    source = Path(path) if path is not None else settings.transfer_tokens_path
    network_keys = list(networks) if networks is not None else list(settings.sweep_networks)

    try:
        raw_config = read_transfer_token_config(source)
    except (OSError, ValueError) as exc:
        logger.error("Failed to read transfer token config %s: %s", source, exc)
        return TokenConfigValidation(
            ok=False,
            config_error=token_config_error(
                f"Transfer token configuration could not be read from {source.name}.",
                TokenConfigReason.CONFIG_UNREADABLE,
                message=str(exc),
            ),
        )

    return validate_transfer_token_config(raw_config, network_keys)


__all__ = [
    "TokenConfigValidation",
    "normalize_symbol",
    "validate_transfer_token_config",
    "read_transfer_token_config",
    "load_transfer_token_config",
]
