"""
Vault factory

Builds a vault together with its metadata and owner capability and binds
all three. Every argument is validated before any object exists, so the
triple is created as a whole or not at all.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import IssuerAlreadyAttached
from .events import VaultCreated
from .ledger.coin import TreasuryCap
from .ledger.context import TxContext
from .ledger.store import Transaction
from .params import VaultParams
from .vault import OwnerCap, Vault, VaultMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedVault:
    """Ids of a vault triple after publication"""
    vault_id: str
    metadata_id: str
    owner_cap_id: str

    def to_dict(self) -> dict:
        return {
            'vault_id': self.vault_id,
            'metadata_id': self.metadata_id,
            'owner_cap_id': self.owner_cap_id,
        }


def create_vault(ctx: TxContext, rate: int, issuer: TreasuryCap, decimals: int,
                 symbol, name, description, icon_url: Optional[str] = None,
                 *, input_asset: str) -> Tuple[Vault, VaultMetadata, OwnerCap]:
    """Create and bind (Vault, VaultMetadata, OwnerCap)"""
    params = VaultParams(
        rate=rate,
        rate_decimals=decimals,
        symbol=symbol,
        name=name,
        description=description,
        input_asset=input_asset,
        icon_url=icon_url,
    )
    return create_from_params(ctx, params, issuer)


def create_from_params(ctx: TxContext, params: VaultParams,
                       issuer: TreasuryCap) -> Tuple[Vault, VaultMetadata, OwnerCap]:
    if issuer.attached_to is not None:
        raise IssuerAlreadyAttached(
            f"Issuer for {issuer.asset} is already attached to {issuer.attached_to}"
        )

    vault_id = ctx.fresh_id()
    metadata = VaultMetadata(
        id=ctx.fresh_id(),
        vault_id=vault_id,
        name=params.name,
        symbol=params.symbol,
        description=params.description,
        icon_url=params.icon_url,
    )
    owner_cap = OwnerCap(id=ctx.fresh_id(), vault_id=vault_id)

    vault = Vault(
        id=vault_id,
        rate=params.rate,
        rate_decimals=params.rate_decimals,
        input_asset=params.input_asset,
        issuer=issuer,
        metadata_id=metadata.id,
    )
    issuer.attach(vault_id)

    ctx.emit(VaultCreated(
        vault_id=vault_id,
        metadata_id=metadata.id,
        owner_cap_id=owner_cap.id,
        rate=params.rate,
        rate_decimals=params.rate_decimals,
        input_asset=params.input_asset,
        output_asset=issuer.asset,
    ))
    logger.info(
        "Created vault %s: %s -> %s at %s",
        vault_id[:10], params.input_asset, issuer.asset, params.effective_rate(),
    )
    return vault, metadata, owner_cap


def publish_vault(tx: Transaction, params: VaultParams, issuer: TreasuryCap) -> PublishedVault:
    """Create a vault, share it, freeze its metadata and hand the cap to the sender"""
    vault, metadata, owner_cap = create_from_params(tx, params, issuer)

    tx.share(vault)
    tx.freeze(metadata)
    tx.transfer(owner_cap, tx.sender)

    return PublishedVault(vault.id, metadata.id, owner_cap.id)
