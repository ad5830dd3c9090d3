"""
Ledger accounts backed by secp256k1 keys
"""

import hashlib
from typing import Optional

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.keys import MalformedPointError
from ecdsa.util import sigdecode_string, sigencode_string


class Account:
    """Signing identity that owns objects in the store"""

    def __init__(self, private_key: Optional[bytes] = None):
        if private_key:
            self.private_key = SigningKey.from_string(private_key, curve=SECP256k1)
        else:
            self.private_key = SigningKey.generate(curve=SECP256k1)

        self.public_key = self.private_key.get_verifying_key()

    @property
    def public_key_hex(self) -> str:
        """Compressed SEC1 public key in hex format"""
        return self.public_key.to_string("compressed").hex()

    @property
    def address(self) -> str:
        return self.address_from_public_key(self.public_key_hex)

    def private_key_hex(self) -> str:
        return self.private_key.to_string().hex()

    def sign(self, message: bytes) -> str:
        """Sign message and return signature in hex"""
        signature = self.private_key.sign_deterministic(
            message, hashfunc=hashlib.sha256, sigencode=sigencode_string
        )
        return signature.hex()

    @staticmethod
    def verify(message: bytes, signature_hex: str, public_key_hex: str) -> bool:
        """Verify signature against message and a compressed public key"""
        try:
            vk = VerifyingKey.from_string(bytes.fromhex(public_key_hex), curve=SECP256k1)
            return vk.verify(
                bytes.fromhex(signature_hex),
                message,
                hashfunc=hashlib.sha256,
                sigdecode=sigdecode_string,
            )
        except (BadSignatureError, MalformedPointError, ValueError):
            return False

    @staticmethod
    def address_from_public_key(public_key_hex: str) -> str:
        return "0x" + Account.hash160(bytes.fromhex(public_key_hex)).hex()

    @staticmethod
    def hash160(data: bytes) -> bytes:
        """Address hash: SHA256 of SHA256, truncated to 20 bytes"""
        sha256_hash = hashlib.sha256(data).digest()
        # RIPEMD160 is not available in every hashlib build, so it is never used
        return hashlib.sha256(sha256_hash).digest()[:20]

    @staticmethod
    def double_sha256(data: bytes) -> bytes:
        return hashlib.sha256(hashlib.sha256(data).digest()).digest()
