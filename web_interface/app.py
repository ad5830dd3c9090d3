#!/usr/bin/env python3
"""
JSON API for fixed-rate exchange vaults over an in-memory ledger
"""

import os

from flask import Flask, jsonify, request

from rate_vault.errors import ObjectNotFound, VaultError
from rate_vault.factory import publish_vault
from rate_vault.ledger import Account, ObjectStore, TreasuryCap
from rate_vault.params import VaultParams
from rate_vault.vault import Vault


def _object_to_dict(obj) -> dict:
    data = obj.to_dict()
    data['type'] = type(obj).__name__
    return data


def _error_response(e: Exception):
    if isinstance(e, ObjectNotFound):
        return jsonify({'success': False, 'error': str(e), 'code': e.code}), 404
    if isinstance(e, VaultError):
        return jsonify({'success': False, 'error': str(e), 'code': e.code}), 400
    if isinstance(e, KeyError):
        return jsonify({'success': False, 'error': f"Missing field {e}"}), 400
    return jsonify({'success': False, 'error': str(e)}), 400


def create_app(store: ObjectStore = None) -> Flask:
    app = Flask(__name__)
    app.config["STORE"] = store if store is not None else ObjectStore()

    ledger = app.config['STORE']
    accounts = {}   # address -> Account, keys are held server-side
    assets = {}     # symbol -> asset type, for every issued asset
    faucets = {}    # symbol -> id of the faucet's issuer handle in the store
    faucet_account = Account()

    def _account(address: str) -> Account:
        if not isinstance(address, str) or address not in accounts:
            raise ObjectNotFound(f"Account {address} not found")
        return accounts[address]

    def _symbol(data: dict, field: str) -> str:
        symbol = data[field]
        if not isinstance(symbol, str):
            raise ValueError(f"{field} must be an asset symbol")
        return symbol

    def _shared_vault(vault_id: str) -> Vault:
        vault = ledger.get(vault_id)
        if not isinstance(vault, Vault):
            raise ObjectNotFound(f"Vault {vault_id} not found")
        return vault

    @app.route('/api/accounts', methods=['POST'])
    def create_account():
        """Create a new signing account"""
        account = Account()
        accounts[account.address] = account
        app.logger.debug("Created account %s", account.address)
        return jsonify({
            'success': True,
            'address': account.address,
            'public_key': account.public_key_hex,
        })

    @app.route('/api/assets')
    def list_assets():
        """Symbols and asset types issued through this ledger"""
        return jsonify({'assets': dict(assets)})

    @app.route('/api/faucet', methods=['POST'])
    def faucet():
        """Fund an account with test coins of an input asset"""
        try:
            data = request.get_json(silent=True) or {}
            recipient = _account(data['address']).address
            symbol = _symbol(data, 'asset')
            if symbol in assets and symbol not in faucets:
                raise ValueError(f"Asset {symbol} is issued by a vault")

            with ledger.transaction(faucet_account) as tx:
                if symbol in faucets:
                    issuer = tx.take(faucets[symbol])
                else:
                    issuer = TreasuryCap.create_currency(symbol, tx)
                coin = issuer.mint(data['amount'], tx)
                tx.transfer(coin, recipient)
                tx.transfer(issuer, tx.sender)

            if symbol not in faucets:
                faucets[symbol] = issuer.id
                assets[symbol] = issuer.asset
                app.logger.info("Opened faucet for %s", issuer.asset)

            return jsonify({'success': True, 'coin': _object_to_dict(coin), 'issuer_id': issuer.id})

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/create_vault', methods=['POST'])
    def create_vault():
        """Create a vault; the sender receives the owner cap"""
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            input_symbol = _symbol(data, 'input_asset')
            if input_symbol not in assets:
                raise ValueError(f"Unknown input asset {input_symbol}")
            params = VaultParams.from_dict(dict(data, input_asset=assets[input_symbol]))
            output_symbol = _symbol(data, 'output_asset')
            if output_symbol in assets:
                raise ValueError(f"Asset {output_symbol} already has an issuer")

            with ledger.transaction(sender) as tx:
                issuer = TreasuryCap.create_currency(output_symbol, tx)
                published = publish_vault(tx, params, issuer)
            assets[output_symbol] = issuer.asset

            app.logger.info("Created vault %s for %s", published.vault_id, sender.address)
            result = published.to_dict()
            result['success'] = True
            return jsonify(result)

        except (KeyError, ValueError) as e:
            app.logger.warning("Vault creation failed: %s", e)
            return _error_response(e)

    @app.route('/api/vault/<vault_id>')
    def get_vault(vault_id):
        """Current rate, decimals and reserve of a vault"""
        try:
            return jsonify(_object_to_dict(_shared_vault(vault_id)))
        except ValueError as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/quote')
    def quote(vault_id):
        """Preview a mint or redeem at the current rate"""
        try:
            vault = _shared_vault(vault_id)
            mint_in = request.args.get('mint', type=int)
            redeem_out = request.args.get('redeem', type=int)
            result = {'vault_id': vault_id, 'rate': vault.rate, 'rate_decimals': vault.rate_decimals}
            if mint_in is not None:
                result['mint_output'] = vault.quote_mint(mint_in)
            if redeem_out is not None:
                result['redeem_input'] = vault.quote_redeem(redeem_out)
            return jsonify(result)
        except ValueError as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/deposit', methods=['POST'])
    def deposit(vault_id):
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            _shared_vault(vault_id)

            with ledger.transaction(sender) as tx:
                vault = tx.borrow_shared(vault_id)
                owner_cap = tx.take(data['owner_cap_id'])
                coin = tx.take(data['coin_id'])
                vault.deposit(owner_cap, coin, tx)
                tx.transfer(owner_cap, tx.sender)

            return jsonify({'success': True, 'reserve': ledger.get(vault_id).reserve_value})

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/withdraw', methods=['POST'])
    def withdraw(vault_id):
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            _shared_vault(vault_id)

            with ledger.transaction(sender) as tx:
                vault = tx.borrow_shared(vault_id)
                owner_cap = tx.take(data['owner_cap_id'])
                coin = vault.withdraw(owner_cap, data['amount'], tx)
                tx.transfer(owner_cap, tx.sender)
                tx.transfer(coin, tx.sender)

            return jsonify({
                'success': True,
                'coin': _object_to_dict(coin),
                'reserve': ledger.get(vault_id).reserve_value,
            })

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/rate', methods=['POST'])
    def set_rate(vault_id):
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            _shared_vault(vault_id)

            with ledger.transaction(sender) as tx:
                vault = tx.borrow_shared(vault_id)
                owner_cap = tx.take(data['owner_cap_id'])
                vault.set_rate(owner_cap, data['rate'], tx)
                tx.transfer(owner_cap, tx.sender)

            return jsonify({'success': True, 'rate': ledger.get(vault_id).rate})

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/mint', methods=['POST'])
    def mint(vault_id):
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            _shared_vault(vault_id)

            with ledger.transaction(sender) as tx:
                vault = tx.borrow_shared(vault_id)
                metadata = tx.read(data['metadata_id'])
                coin = tx.take(data['coin_id'])
                minted = vault.mint(metadata, coin, tx)
                tx.transfer(minted, tx.sender)

            return jsonify({'success': True, 'coin': _object_to_dict(minted)})

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/vault/<vault_id>/redeem', methods=['POST'])
    def redeem(vault_id):
        try:
            data = request.get_json(silent=True) or {}
            sender = _account(data['sender'])
            _shared_vault(vault_id)

            with ledger.transaction(sender) as tx:
                vault = tx.borrow_shared(vault_id)
                metadata = tx.read(data['metadata_id'])
                coin = tx.take(data['coin_id'])
                payout = vault.redeem(metadata, coin, tx)
                tx.transfer(payout, tx.sender)

            return jsonify({'success': True, 'coin': _object_to_dict(payout)})

        except (KeyError, ValueError) as e:
            return _error_response(e)

    @app.route('/api/objects/<object_id>')
    def get_object(object_id):
        try:
            entry = ledger.owner_of(object_id)
            data = _object_to_dict(entry.obj)
            data['ownership'] = entry.ownership.value
            data['owner'] = entry.owner
            return jsonify(data)
        except ValueError as e:
            return _error_response(e)

    @app.route('/api/events')
    def get_events():
        return jsonify({'events': [event.to_dict() for event in ledger.events]})

    return app


app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 10000))
    app.run(
        host="0.0.0.0",
        port=port,
        debug=os.environ.get("VAULT_API_DEBUG", "") == "1",
    )
