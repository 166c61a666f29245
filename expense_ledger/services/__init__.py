"""Services package."""

from expense_ledger.services.storage import (
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    KeyValueStorageInterface,
    NotFoundError,
    PersistenceError,
    StorageError,
)

__all__ = [
    # Storage services
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
    "KeyValueStorageInterface",
    "NotFoundError",
    "PersistenceError",
    "StorageError",
]
