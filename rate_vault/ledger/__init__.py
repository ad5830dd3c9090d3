"""
Host ledger model - objects, coins, issuer handles and signing accounts
"""

from .account import Account
from .coin import Balance, Coin, TreasuryCap, asset_symbol, asset_type
from .context import TxContext
from .store import ObjectStore, Ownership, Transaction

__all__ = [
    "Account",
    "Balance",
    "Coin",
    "TreasuryCap",
    "asset_symbol",
    "asset_type",
    "TxContext",
    "ObjectStore",
    "Ownership",
    "Transaction",
]
