"""
Fungible asset primitives: coins, balances and the issuer handle

Every value is a checked u64. A coin is consumed exactly once when it is
joined into a balance, merged into another coin or burned; any later use
raises CoinAlreadySpent.

An asset type is qualified by the id of the issuer handle that created it
("<issuer id>::<symbol>"). Two handles created with the same symbol issue
two distinct, non-interchangeable assets.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..conversion import checked_add_u64, checked_sub_u64, require_u64
from ..errors import (
    AssetMismatch,
    CoinAlreadySpent,
    InsufficientBalance,
    IssuerAlreadyAttached,
)
from .context import TxContext

ASSET_SEPARATOR = "::"


def asset_type(issuer_id: str, symbol: str) -> str:
    return f"{issuer_id}{ASSET_SEPARATOR}{symbol}"


def asset_symbol(asset: str) -> str:
    return asset.rsplit(ASSET_SEPARATOR, 1)[-1]


def _require_coin(coin) -> None:
    if not isinstance(coin, Coin):
        raise AssetMismatch(f"Expected a coin, got {type(coin).__name__}")


def _require_asset(expected: str, actual: str) -> None:
    if expected != actual:
        raise AssetMismatch(f"Expected asset {expected}, got {actual}")


@dataclass
class Coin:
    """Transferable amount of a single asset"""
    id: str
    asset: str
    value: int
    spent: bool = field(default=False, compare=False)

    def __post_init__(self):
        require_u64("value", self.value)

    @property
    def symbol(self) -> str:
        return asset_symbol(self.asset)

    def to_dict(self) -> dict:
        return {'id': self.id, 'asset': self.asset, 'symbol': self.symbol, 'value': self.value}

    @classmethod
    def zero(cls, asset: str, ctx: TxContext) -> 'Coin':
        return cls(ctx.fresh_id(), asset, 0)

    def ensure_live(self) -> None:
        if self.spent:
            raise CoinAlreadySpent(f"Coin {self.id} was already consumed")

    def destroy(self) -> int:
        """Consume the coin and return its value"""
        self.ensure_live()
        self.spent = True
        return self.value

    def split(self, amount: int, ctx: TxContext) -> 'Coin':
        """Carve amount off this coin into a new coin"""
        self.ensure_live()
        require_u64("amount", amount)
        if amount > self.value:
            raise InsufficientBalance(f"Cannot split {amount} from coin holding {self.value}")

        self.value -= amount
        return Coin(ctx.fresh_id(), self.asset, amount)

    def join(self, other: 'Coin') -> int:
        """Merge other into this coin, consuming it"""
        _require_coin(other)
        self.ensure_live()
        other.ensure_live()
        _require_asset(self.asset, other.asset)
        if other is self:
            raise CoinAlreadySpent(f"Coin {self.id} cannot be joined with itself")

        new_value = checked_add_u64(self.value, other.value)
        other.destroy()
        self.value = new_value
        return self.value


@dataclass
class Balance:
    """Non-transferable store of value held inside another object"""
    asset: str
    value: int = 0

    def check_join(self, coin: Coin) -> int:
        """Validate a join without applying it; returns the resulting value"""
        _require_coin(coin)
        coin.ensure_live()
        _require_asset(self.asset, coin.asset)
        return checked_add_u64(self.value, coin.value)

    def join(self, coin: Coin) -> int:
        new_value = self.check_join(coin)
        coin.destroy()
        self.value = new_value
        return self.value

    def split(self, amount: int, ctx: TxContext) -> Coin:
        require_u64("amount", amount)
        if amount > self.value:
            raise InsufficientBalance(f"Cannot take {amount} from balance of {self.value}")

        self.value = checked_sub_u64(self.value, amount)
        return Coin(ctx.fresh_id(), self.asset, amount)


@dataclass
class TreasuryCap:
    """Issuer handle: the sole authority to mint and burn one asset"""
    id: str
    symbol: str
    total_supply: int = 0
    attached_to: Optional[str] = None

    @classmethod
    def create_currency(cls, symbol: str, ctx: TxContext) -> 'TreasuryCap':
        if not symbol:
            raise ValueError("Asset symbol must not be empty")
        if ASSET_SEPARATOR in symbol:
            raise ValueError(f"Asset symbol must not contain {ASSET_SEPARATOR!r}")
        return cls(ctx.fresh_id(), symbol)

    @property
    def asset(self) -> str:
        return asset_type(self.id, self.symbol)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'asset': self.asset,
            'symbol': self.symbol,
            'total_supply': self.total_supply,
            'attached_to': self.attached_to,
        }

    def attach(self, owner_id: str) -> None:
        """Bind the handle to its owning object; a handle binds once"""
        if self.attached_to is not None:
            raise IssuerAlreadyAttached(
                f"Issuer for {self.symbol} is already attached to {self.attached_to}"
            )
        self.attached_to = owner_id

    def check_mint(self, amount: int) -> int:
        require_u64("amount", amount)
        return checked_add_u64(self.total_supply, amount)

    def mint(self, amount: int, ctx: TxContext) -> Coin:
        self.total_supply = self.check_mint(amount)
        return Coin(ctx.fresh_id(), self.asset, amount)

    def check_burn(self, coin: Coin) -> int:
        _require_coin(coin)
        coin.ensure_live()
        _require_asset(self.asset, coin.asset)
        return checked_sub_u64(self.total_supply, coin.value)

    def burn(self, coin: Coin) -> int:
        """Retire coin from circulation and return the burned value"""
        new_supply = self.check_burn(coin)
        value = coin.destroy()
        self.total_supply = new_supply
        return value
