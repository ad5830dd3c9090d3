"""
Fixed-rate exchange vault
Holds a reserve of one asset and issues or retires another at an admin-set rate
"""

from .conversion import input_amount, output_amount
from .errors import (
    ArithmeticOverflow,
    DivisionByZero,
    InsufficientReserves,
    InvalidMetadata,
    InvalidRate,
    VaultError,
    WrongOwnerCap,
)
from .factory import PublishedVault, create_from_params, create_vault, publish_vault
from .params import VaultParams
from .vault import OwnerCap, Vault, VaultMetadata

__version__ = "0.1.0"
__all__ = [
    "output_amount",
    "input_amount",
    "Vault",
    "VaultMetadata",
    "OwnerCap",
    "VaultParams",
    "PublishedVault",
    "create_vault",
    "create_from_params",
    "publish_vault",
    "VaultError",
    "WrongOwnerCap",
    "InsufficientReserves",
    "InvalidRate",
    "InvalidMetadata",
    "ArithmeticOverflow",
    "DivisionByZero",
]
