"""Helpers for validating EVM wallet and contract addresses."""

from __future__ import annotations

from typing import Any

from eth_utils import is_address, is_checksum_address, to_checksum_address, to_normalized_address

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def is_valid_evm_address(address: Any) -> bool:
    """Syntactic check: 0x-prefixed 20-byte hex, checksum enforced for mixed-case input."""

    if not isinstance(address, str) or not address.startswith("0x"):
        return False
    if not is_address(address):
        return False

    body = address[2:]
    if body != body.lower() and body != body.upper():
        return is_checksum_address(address)
    return True


def is_zero_address(address: str) -> bool:
    return to_normalized_address(address) == ZERO_ADDRESS


def is_usable_address(address: Any) -> bool:
    """Return True if funds can be sent to (or read from) this address."""

    return is_valid_evm_address(address) and not is_zero_address(address)


def checksum(address: str) -> str:
    return to_checksum_address(address)


__all__ = [
    "ZERO_ADDRESS",
    "is_valid_evm_address",
    "is_zero_address",
    "is_usable_address",
    "checksum",
]
