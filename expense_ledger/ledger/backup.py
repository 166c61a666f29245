"""
Backup: export, import and clearing of the ledger records.

The exported document maps each namespaced key to its parsed record,
exactly the format the store and registry read and write. Only keys
under the ledger namespace are touched, so unrelated data sharing the
same storage survives a clear.
"""

import asyncio
import json
from typing import Any, Optional

import structlog

from expense_ledger.services.storage import KeyValueStorageInterface, PersistenceError
from expense_ledger.services.storage.documents import (
    decode_categories,
    decode_transactions,
    encode_categories,
    encode_transactions,
    parse_document,
)


logger = structlog.get_logger(__name__)


class BackupFormatError(ValueError):
    """An import document does not match the ledger format."""
    pass


class LedgerBackup:
    """Whole-ledger export/import over the namespaced records."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        namespace: str,
        transactions_key: str,
        categories_key: str,
        lock: Optional[asyncio.Lock] = None,
    ):
        self._storage = storage
        self._namespace = namespace
        self._transactions_key = transactions_key
        self._categories_key = categories_key
        self._lock = lock or asyncio.Lock()

    async def namespaced_keys(self) -> list[str]:
        return await self._storage.keys(prefix=self._namespace)

    async def export_document(self) -> dict[str, Any]:
        """
        Produce {key: record} for every key under the namespace.

        Raises:
            PersistenceError: If a record is unreadable or not valid JSON
        """
        exported = {}
        for key in await self.namespaced_keys():
            document = await self._storage.get(key)
            if document is not None:
                exported[key] = parse_document(document, key)
        logger.info("ledger_exported", keys=sorted(exported))
        return exported

    def _encode_for_import(self, key: str, record: Any) -> str:
        if key == self._transactions_key:
            decode, encode = decode_transactions, encode_transactions
        elif key == self._categories_key:
            decode, encode = decode_categories, encode_categories
        else:
            raise BackupFormatError(f"Unknown record in backup: {key!r}")
        try:
            return encode(decode(json.dumps(record), key))
        except (PersistenceError, TypeError) as e:
            raise BackupFormatError(f"Invalid record {key!r} in backup: {e}") from e

    async def import_document(self, document: dict[str, Any]) -> list[str]:
        """
        Write the records of an exported document back to storage.

        Every record is validated before anything is written, so a bad
        document changes nothing. Records missing from the document are
        left as they are.

        Returns:
            The keys that were written

        Raises:
            BackupFormatError: If a key is unknown or a record is malformed
            PersistenceError: If a write fails
        """
        encoded = {
            key: self._encode_for_import(key, record)
            for key, record in document.items()
        }
        async with self._lock:
            for key, value in encoded.items():
                await self._storage.set(key, value)
        logger.info("ledger_imported", keys=sorted(encoded))
        return sorted(encoded)

    async def clear_all(self) -> list[str]:
        """
        Remove every record under the namespace.

        The next access behaves like a first run: categories are
        re-seeded and the transaction list is empty.
        """
        async with self._lock:
            keys = await self.namespaced_keys()
            for key in keys:
                await self._storage.delete(key)
        logger.warning("ledger_cleared", keys=keys)
        return keys

    async def storage_usage_bytes(self) -> int:
        """Total UTF-8 size of the namespaced records."""
        total = 0
        for key in await self.namespaced_keys():
            document = await self._storage.get(key)
            if document is not None:
                total += len(document.encode("utf-8"))
        return total
