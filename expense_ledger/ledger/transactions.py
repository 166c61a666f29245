"""
Transaction Store

The single owner of the canonical transaction list.

DESIGN DECISION: Whole-document persistence.
Every mutation reads the full collection, changes it in memory and
writes the full collection back. That is O(n) per write, which is fine
for one person's ledger, and means there is never a partially updated
record on disk.

The catch is the lost-update race: two adds that both read before
either writes would each drop the other's record. All mutations
therefore run under one asyncio.Lock (shared with the category
registry) from the read through the completed write. Reads do not
take the lock and see either the old or the new document.

A mutation is committed only when the durable write succeeds. If the
write raises, the stored document is unchanged and the error reaches
the caller.

The store does not validate transactions beyond matching ids; that
is the caller's job (see expense_ledger.validation).
"""

import asyncio
from typing import Callable, Optional

import structlog

from expense_ledger.ledger.categories import CategoryRegistry
from expense_ledger.ledger.ids import new_id
from expense_ledger.models.transaction import Transaction, TransactionDraft
from expense_ledger.services.storage import (
    KeyValueStorageInterface,
    NotFoundError,
    PersistenceError,
)
from expense_ledger.services.storage.documents import (
    decode_transactions,
    encode_transactions,
)


logger = structlog.get_logger(__name__)


class TransactionStore:
    """
    Durable add/update/delete/list of transactions.

    Records handed out are frozen models in fresh lists, so callers
    can only change the ledger through this API.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str,
        lock: Optional[asyncio.Lock] = None,
        registry: Optional[CategoryRegistry] = None,
        id_generator: Callable[[], str] = new_id,
    ):
        """
        Initialize the store.

        Args:
            storage: Key-value substrate holding the document
            key: Namespaced record name for the transaction list
            lock: Single-writer lock. Pass the registry's lock so all
                ledger mutations are serialized together.
            registry: Seeded by load_or_init. Optional for tests.
            id_generator: Source of fresh transaction ids
        """
        self._storage = storage
        self._key = key
        self._lock = lock or asyncio.Lock()
        self._registry = registry
        self._new_id = id_generator

    @property
    def key(self) -> str:
        return self._key

    async def _load(self) -> list[Transaction]:
        document = await self._storage.get(self._key)
        transactions = decode_transactions(document, self._key)
        return transactions if transactions is not None else []

    async def _persist(self, transactions: list[Transaction], operation: str) -> None:
        try:
            await self._storage.set(self._key, encode_transactions(transactions))
        except PersistenceError as e:
            logger.error(
                "transactions_write_failed",
                key=self._key,
                operation=operation,
                error=str(e),
            )
            raise

    async def load_or_init(self) -> list[Transaction]:
        """
        First-access initialisation.

        Seeds the category registry if it is empty. There is no default
        transaction data: with nothing stored the list starts empty.

        Raises:
            PersistenceError: If stored data is corrupt or seeding fails
        """
        if self._registry is not None:
            await self._registry.ensure_seeded()
        transactions = await self._load()
        logger.debug("transactions_loaded", key=self._key, count=len(transactions))
        return transactions

    async def add(self, draft: TransactionDraft) -> Transaction:
        """
        Append a new transaction.

        Args:
            draft: The transaction without an id

        Returns:
            The stored transaction including its fresh id

        Raises:
            PersistenceError: If the collection could not be written.
                Nothing was added in that case.
        """
        async with self._lock:
            current = await self._load()
            transaction = draft.with_id(self._new_id())
            await self._persist([*current, transaction], "add")
        logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            count=len(current) + 1,
        )
        return transaction

    async def update(self, transaction: Transaction) -> Transaction:
        """
        Replace the stored transaction with the same id, in place.

        Raises:
            NotFoundError: If no transaction has that id (nothing is written)
            PersistenceError: If the collection could not be written
        """
        async with self._lock:
            current = await self._load()
            for index, existing in enumerate(current):
                if existing.id == transaction.id:
                    break
            else:
                raise NotFoundError(f"Transaction not found: {transaction.id}")
            updated = [*current[:index], transaction, *current[index + 1:]]
            await self._persist(updated, "update")
        logger.info("transaction_updated", transaction_id=transaction.id)
        return transaction

    async def delete(self, transaction_id: str) -> bool:
        """
        Remove a transaction by id.

        Deleting an id that does not exist is a no-op, so calling this
        twice has the same effect as calling it once.

        Returns:
            True if a transaction was removed

        Raises:
            PersistenceError: If the collection could not be written
        """
        async with self._lock:
            current = await self._load()
            remaining = [t for t in current if t.id != transaction_id]
            if len(remaining) == len(current):
                return False
            await self._persist(remaining, "delete")
        logger.info("transaction_deleted", transaction_id=transaction_id)
        return True

    async def get(self, transaction_id: str) -> Optional[Transaction]:
        for transaction in await self._load():
            if transaction.id == transaction_id:
                return transaction
        return None

    # Defined last: inside the class body the name shadows the builtin.
    async def list(self) -> list[Transaction]:
        """
        All transactions, in storage order.

        Storage order is insertion order, not chronological; callers that
        need ordering sort by date.

        Raises:
            PersistenceError: If the stored document is unreadable or corrupt
        """
        return await self._load()
