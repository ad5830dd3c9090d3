import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .conversion import effective_rate, input_amount, output_amount, require_u64, require_u8
from .errors import (
    InsufficientReserves,
    InvalidMetadata,
    InvalidRate,
    WrongOwnerCap,
)
from .events import Minted, RateUpdated, Redeemed, ReserveDeposited, ReserveWithdrawn
from .ledger.coin import Balance, Coin, TreasuryCap
from .ledger.context import TxContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VaultMetadata:
    """Descriptive record of the output asset, bound to exactly one vault"""
    id: str
    vault_id: str
    name: str
    symbol: str
    description: str
    icon_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'vault_id': self.vault_id,
            'name': self.name,
            'symbol': self.symbol,
            'description': self.description,
            'icon_url': self.icon_url,
        }


@dataclass(frozen=True)
class OwnerCap:
    """Authorization token for reserve and rate administration of one vault"""
    id: str
    vault_id: str

    def to_dict(self) -> dict:
        return {'id': self.id, 'vault_id': self.vault_id}


class Vault:
    """
    Reserve of the input asset plus the issuer handle of the output asset.

    Every operation checks all of its preconditions before touching state,
    then mutates unconditionally, so a call either applies fully or raises
    with the vault unchanged.
    """

    def __init__(self, id: str, rate: int, rate_decimals: int, input_asset: str,
                 issuer: TreasuryCap, metadata_id: str):
        require_u64("rate", rate)
        require_u8("rate_decimals", rate_decimals)
        if rate == 0:
            raise InvalidRate("Rate must be greater than zero")

        self.id = id
        self._rate = rate
        self._rate_decimals = rate_decimals
        self._reserve = Balance(input_asset)
        # issuer handle lives only here, keyed by the bound metadata id
        self._issuer_key = metadata_id
        self._issuer = issuer

    # Read-only accessors

    @property
    def rate(self) -> int:
        return self._rate

    @property
    def rate_decimals(self) -> int:
        return self._rate_decimals

    @property
    def reserve_value(self) -> int:
        return self._reserve.value

    @property
    def input_asset(self) -> str:
        return self._reserve.asset

    @property
    def output_asset(self) -> str:
        return self._issuer.asset

    @property
    def output_supply(self) -> int:
        return self._issuer.total_supply

    @property
    def metadata_id(self) -> str:
        return self._issuer_key

    def effective_rate(self) -> Decimal:
        return effective_rate(self._rate, self._rate_decimals)

    def quote_mint(self, amount: int) -> int:
        """Output a mint of amount input would issue at the current rate"""
        return output_amount(self._rate, amount, self._rate_decimals)

    def quote_redeem(self, amount: int) -> int:
        """Input a redeem of amount output would release at the current rate"""
        return input_amount(self._rate, amount, self._rate_decimals)

    # Authorization

    def _check_owner_cap(self, owner_cap: OwnerCap) -> None:
        if not isinstance(owner_cap, OwnerCap):
            raise WrongOwnerCap(f"Expected an owner cap, got {type(owner_cap).__name__}")
        if owner_cap.vault_id != self.id:
            raise WrongOwnerCap(
                f"Owner cap {owner_cap.id} is bound to vault {owner_cap.vault_id}, not {self.id}"
            )

    def _check_metadata(self, metadata: VaultMetadata) -> None:
        if not isinstance(metadata, VaultMetadata):
            raise InvalidMetadata(f"Expected vault metadata, got {type(metadata).__name__}")
        if metadata.vault_id != self.id or metadata.id != self._issuer_key:
            raise InvalidMetadata(f"Metadata {metadata.id} is not bound to vault {self.id}")

    # Administrative operations

    def deposit(self, owner_cap: OwnerCap, coin: Coin, ctx: TxContext) -> None:
        """Add coin to the reserve"""
        self._check_owner_cap(owner_cap)
        self._reserve.check_join(coin)

        amount = coin.value
        self._reserve.join(coin)

        ctx.emit(ReserveDeposited(self.id, amount, self.reserve_value))
        logger.info("Vault %s: deposited %d, reserve %d", self.id[:10], amount, self.reserve_value)

    def withdraw(self, owner_cap: OwnerCap, amount: int, ctx: TxContext) -> Coin:
        """Take amount out of the reserve as a new coin"""
        self._check_owner_cap(owner_cap)
        require_u64("amount", amount)
        if amount > self.reserve_value:
            raise InsufficientReserves(
                f"Withdrawal of {amount} exceeds reserve of {self.reserve_value}"
            )

        coin = self._reserve.split(amount, ctx)

        ctx.emit(ReserveWithdrawn(self.id, amount, self.reserve_value))
        logger.info("Vault %s: withdrew %d, reserve %d", self.id[:10], amount, self.reserve_value)
        return coin

    def set_rate(self, owner_cap: OwnerCap, new_rate: int, ctx: TxContext) -> None:
        """
        Replace the rate for all subsequent mints and redeems.

        Collateralisation of outstanding supply is not re-checked here.
        """
        self._check_owner_cap(owner_cap)
        require_u64("new_rate", new_rate)
        if new_rate == 0:
            raise InvalidRate("Rate must be greater than zero")

        old_rate = self._rate
        self._rate = new_rate

        ctx.emit(RateUpdated(self.id, old_rate, new_rate))
        logger.info("Vault %s: rate %d -> %d", self.id[:10], old_rate, new_rate)

    # User operations

    def mint(self, metadata: VaultMetadata, coin: Coin, ctx: TxContext) -> Coin:
        """Exchange input coin for newly issued output"""
        self._check_metadata(metadata)
        self._reserve.check_join(coin)
        amount_in = coin.value
        amount_out = output_amount(self._rate, amount_in, self._rate_decimals)
        self._issuer.check_mint(amount_out)

        self._reserve.join(coin)
        minted = self._issuer.mint(amount_out, ctx)

        ctx.emit(Minted(self.id, ctx.sender, amount_in, amount_out, self._rate))
        logger.info("Vault %s: minted %d for %d input", self.id[:10], amount_out, amount_in)
        return minted

    def redeem(self, metadata: VaultMetadata, coin: Coin, ctx: TxContext) -> Coin:
        """Retire output coin in exchange for input drawn from the reserve"""
        self._check_metadata(metadata)
        self._issuer.check_burn(coin)
        amount_out = coin.value
        amount_in = input_amount(self._rate, amount_out, self._rate_decimals)
        if amount_in > self.reserve_value:
            raise InsufficientReserves(
                f"Redemption needs {amount_in} input, reserve holds {self.reserve_value}"
            )

        self._issuer.burn(coin)
        payout = self._reserve.split(amount_in, ctx)

        ctx.emit(Redeemed(self.id, ctx.sender, amount_out, amount_in, self._rate))
        logger.info("Vault %s: redeemed %d for %d input", self.id[:10], amount_out, amount_in)
        return payout

    def to_dict(self) -> dict:
        """Snapshot of the vault state"""
        return {
            'id': self.id,
            'rate': self._rate,
            'rate_decimals': self._rate_decimals,
            'effective_rate': str(self.effective_rate()),
            'reserve': self.reserve_value,
            'input_asset': self.input_asset,
            'output_asset': self.output_asset,
            'output_supply': self.output_supply,
            'metadata_id': self._issuer_key,
        }
