"""
In-memory object store with atomic transactions

Objects are keyed by id and carry an ownership record: owned by an address,
shared (any transaction may borrow it mutably) or immutable (read-only
forever). A transaction journals a copy of every entry it touches before
handing the object out, and restores those entries if anything inside
raises, so a failed call never leaves partial effects. Entries the
transaction never touches are neither copied nor restored.
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from ..errors import ImmutableObject, InvalidSignature, ObjectNotFound, ObjectNotOwned
from .account import Account
from .context import TxContext

logger = logging.getLogger(__name__)


class Ownership(Enum):
    ADDRESS = "address"
    SHARED = "shared"
    IMMUTABLE = "immutable"


@dataclass
class StoredObject:
    obj: Any
    ownership: Ownership
    owner: Optional[str] = None


class Transaction(TxContext):
    """Transaction context bound to a store"""

    def __init__(self, store: 'ObjectStore', sender: str, digest: bytes):
        super().__init__(sender, digest)
        self.store = store
        # object id -> entry as it was before this transaction, None if absent
        self._journal: Dict[str, Optional[StoredObject]] = {}

    def _touch(self, object_id: str) -> None:
        if object_id not in self._journal:
            self._journal[object_id] = copy.deepcopy(self.store._objects.get(object_id))

    def take(self, object_id: str) -> Any:
        """Move an object owned by the sender out of the store"""
        entry = self.store._entry(object_id)
        if entry.ownership != Ownership.ADDRESS or entry.owner != self.sender:
            raise ObjectNotOwned(f"Object {object_id} is not owned by {self.sender}")
        self._touch(object_id)
        del self.store._objects[object_id]
        return entry.obj

    def borrow_shared(self, object_id: str) -> Any:
        """Mutable access to a shared object"""
        entry = self.store._entry(object_id)
        if entry.ownership == Ownership.IMMUTABLE:
            raise ImmutableObject(f"Object {object_id} is immutable")
        if entry.ownership != Ownership.SHARED:
            raise ObjectNotOwned(f"Object {object_id} is not shared")
        self._touch(object_id)
        return entry.obj

    def read(self, object_id: str) -> Any:
        """Read access to an immutable or shared object"""
        entry = self.store._entry(object_id)
        if entry.ownership == Ownership.ADDRESS:
            raise ObjectNotOwned(f"Object {object_id} is owned by an address")
        if entry.ownership == Ownership.SHARED:
            self._touch(object_id)
        return entry.obj

    def transfer(self, obj: Any, recipient: str) -> None:
        self._touch(obj.id)
        self.store._put(obj, Ownership.ADDRESS, recipient)

    def share(self, obj: Any) -> None:
        self._touch(obj.id)
        self.store._put(obj, Ownership.SHARED)

    def freeze(self, obj: Any) -> None:
        self._touch(obj.id)
        self.store._put(obj, Ownership.IMMUTABLE)

    @property
    def touched(self) -> List[str]:
        return list(self._journal)

    def rollback(self) -> None:
        """Put every touched entry back as it was before the transaction"""
        for object_id, entry in self._journal.items():
            if entry is None:
                self.store._objects.pop(object_id, None)
            else:
                self.store._objects[object_id] = entry


class ObjectStore:
    """Host ledger: object table, per-sender nonces and committed events"""

    def __init__(self):
        self._objects: Dict[str, StoredObject] = {}
        self._nonces: Dict[str, int] = {}
        self._events: List[Any] = []

    def _entry(self, object_id: str) -> StoredObject:
        entry = self._objects.get(object_id)
        if entry is None:
            raise ObjectNotFound(f"Object {object_id} not found")
        return entry

    def _put(self, obj: Any, ownership: Ownership, owner: Optional[str] = None) -> None:
        # objects re-enter the table only after being taken out of it
        existing = self._objects.get(obj.id)
        if existing is not None and existing.ownership == Ownership.IMMUTABLE:
            raise ImmutableObject(f"Object {obj.id} is immutable")
        if existing is not None:
            raise ObjectNotOwned(f"Object {obj.id} is already stored as {existing.ownership.value}")
        self._objects[obj.id] = StoredObject(obj, ownership, owner)

    def _next_digest(self, sender: str) -> bytes:
        nonce = self._nonces.get(sender, 0)
        self._nonces[sender] = nonce + 1
        return Account.double_sha256(
            b"TX_V1" + sender.encode() + nonce.to_bytes(8, 'little')
        )

    @contextmanager
    def transaction(self, account: Account) -> Iterator[Transaction]:
        """Run a signed, all-or-nothing transaction for account"""
        sender = account.address
        digest = self._next_digest(sender)
        signature = account.sign(digest)
        if not Account.verify(digest, signature, account.public_key_hex):
            raise InvalidSignature(f"Signature check failed for {sender}")

        tx = Transaction(self, sender, digest)
        try:
            yield tx
        except Exception as e:
            tx.rollback()
            logger.warning(
                "Transaction %s rolled back (%d objects restored): %s",
                digest.hex()[:16], len(tx.touched), e,
            )
            raise

        self._events.extend(tx.events)
        logger.debug(
            "Transaction %s committed: %d objects created, %d touched, %d events",
            digest.hex()[:16], tx.ids_created, len(tx.touched), len(tx.events),
        )

    def get(self, object_id: str) -> Any:
        """Read any object outside a transaction"""
        return self._entry(object_id).obj

    def owner_of(self, object_id: str) -> StoredObject:
        return self._entry(object_id)

    def objects_owned_by(self, address: str) -> List[Any]:
        return [
            entry.obj for entry in self._objects.values()
            if entry.ownership == Ownership.ADDRESS and entry.owner == address
        ]

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._objects

    @property
    def events(self) -> List[Any]:
        return self._events.copy()
