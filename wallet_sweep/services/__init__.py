"""Service layer helpers"""

from .address import (
    ZERO_ADDRESS,
    checksum,
    is_usable_address,
    is_valid_evm_address,
    is_zero_address,
)

__all__ = [
    "ZERO_ADDRESS",
    "checksum",
    "is_usable_address",
    "is_valid_evm_address",
    "is_zero_address",
]
