#!/usr/bin/env python3
"""
End-to-end demo of a fixed-rate exchange vault
"""

import logging

from rate_vault.errors import InsufficientReserves, InvalidRate
from rate_vault.factory import publish_vault
from rate_vault.ledger import Account, ObjectStore, TreasuryCap
from rate_vault.params import VaultParams


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 60)
    print("🏦 FIXED-RATE EXCHANGE VAULT - DEMO")
    print("=" * 60)
    print()

    # Step 1: Setup
    print("🔧 STEP 1: Setting up accounts and the input asset")
    print("-" * 40)

    store = ObjectStore()
    admin = Account()
    user = Account()
    print(f"✅ Admin: {admin.address}")
    print(f"✅ User:  {user.address}")

    with store.transaction(admin) as tx:
        usd = TreasuryCap.create_currency("USD", tx)
        funding = usd.mint(1_000, tx)
        tx.transfer(funding, user.address)
    print(f"✅ Funded user with {funding.value} USD")
    print()

    # Step 2: Create Vault
    print("🏗️  STEP 2: Creating vault at 2.00x")
    print("-" * 40)

    params = VaultParams.from_multiplier(
        "2.00", symbol="vUSD", name="Vault USD", input_asset=usd.asset,
        description="Issued at twice the deposited USD",
    )
    with store.transaction(admin) as tx:
        issuer = TreasuryCap.create_currency("vUSD", tx)
        published = publish_vault(tx, params, issuer)

    vault = store.get(published.vault_id)
    print(f"✅ Vault ID: {published.vault_id}")
    print(f"✅ Rate: {vault.rate} / 10^{vault.rate_decimals} = {vault.effective_rate()}")
    print(f"✅ Reserve: {vault.reserve_value} USD")
    print()

    # Step 3: Mint and redeem
    print("💱 STEP 3: Mint then redeem")
    print("-" * 40)

    print(f"Quote: 1000 USD -> {vault.quote_mint(1_000)} vUSD")
    with store.transaction(user) as tx:
        vault = tx.borrow_shared(published.vault_id)
        metadata = tx.read(published.metadata_id)
        minted = vault.mint(metadata, tx.take(funding.id), tx)
        tx.transfer(minted, tx.sender)
    print(f"✅ Minted {minted.value} vUSD, reserve now {vault.reserve_value} USD")

    with store.transaction(user) as tx:
        vault = tx.borrow_shared(published.vault_id)
        metadata = tx.read(published.metadata_id)
        payout = vault.redeem(metadata, tx.take(minted.id), tx)
        tx.transfer(payout, tx.sender)
    print(f"✅ Redeemed {minted.value} vUSD for {payout.value} USD, reserve now {vault.reserve_value} USD")
    print()

    # Step 4: Administration
    print("🔐 STEP 4: Owner operations")
    print("-" * 40)

    try:
        with store.transaction(admin) as tx:
            vault = tx.borrow_shared(published.vault_id)
            vault.set_rate(tx.take(published.owner_cap_id), 0, tx)
    except InvalidRate as e:
        print(f"❌ set_rate(0) rejected: {e}")

    try:
        with store.transaction(admin) as tx:
            vault = tx.borrow_shared(published.vault_id)
            vault.withdraw(tx.take(published.owner_cap_id), 1, tx)
    except InsufficientReserves as e:
        print(f"❌ Withdrawal rejected: {e}")

    vault = store.get(published.vault_id)
    print(f"✅ Rate unchanged at {vault.rate}, reserve {vault.reserve_value}")
    print()

    print(f"📜 {len(store.events)} events committed:")
    for event in store.events:
        print(f"   - {type(event).__name__}")


if __name__ == "__main__":
    main()
