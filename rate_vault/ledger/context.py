"""
Transaction context: sender, digest, fresh object ids and buffered events
"""

import hashlib
from typing import Any, List, Optional


class TxContext:
    """Per-transaction context handed to every vault operation"""

    def __init__(self, sender: str, digest: bytes):
        self.sender = sender
        self.digest = digest
        self._ids_created = 0
        self._events: List[Any] = []

    @classmethod
    def dummy(cls, sender: str = "0x0", seed: Optional[bytes] = None) -> 'TxContext':
        """Context detached from any store, for tests and previews"""
        digest = hashlib.sha256(b"DUMMY_TX" + (seed or sender.encode())).digest()
        return cls(sender, digest)

    def fresh_id(self) -> str:
        """Derive a unique object id from the transaction digest"""
        hasher = hashlib.sha256()
        hasher.update(self.digest)
        hasher.update(self._ids_created.to_bytes(8, 'little'))
        self._ids_created += 1
        return "0x" + hasher.hexdigest()

    @property
    def ids_created(self) -> int:
        return self._ids_created

    def emit(self, event: Any) -> None:
        self._events.append(event)

    @property
    def events(self) -> List[Any]:
        return self._events.copy()
