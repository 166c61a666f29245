"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
Files on disk are the default backend, but it is designed to be swappable.
"""

from expense_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    NotFoundError,
    PersistenceError,
    StorageError,
)
from expense_ledger.services.storage.file_storage import FileKeyValueStorage
from expense_ledger.services.storage.memory_storage import InMemoryKeyValueStorage

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "NotFoundError",
    "PersistenceError",
    "StorageError",
    # Implementations
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
]
