"""
Events emitted by vault operations
"""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class VaultEvent:
    vault_id: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data['type'] = type(self).__name__
        return data


@dataclass(frozen=True)
class VaultCreated(VaultEvent):
    metadata_id: str
    owner_cap_id: str
    rate: int
    rate_decimals: int
    input_asset: str
    output_asset: str


@dataclass(frozen=True)
class ReserveDeposited(VaultEvent):
    amount: int
    reserve: int


@dataclass(frozen=True)
class ReserveWithdrawn(VaultEvent):
    amount: int
    reserve: int


@dataclass(frozen=True)
class RateUpdated(VaultEvent):
    old_rate: int
    new_rate: int


@dataclass(frozen=True)
class Minted(VaultEvent):
    sender: str
    input_amount: int
    output_amount: int
    rate: int


@dataclass(frozen=True)
class Redeemed(VaultEvent):
    sender: str
    output_amount: int
    input_amount: int
    rate: int
