"""
Abstract Storage Interface

DESIGN DECISION: The ledger sits on a plain key-value substrate.
This allows us to:
1. Keep the records in a directory of JSON files on disk
2. Use in-memory storage for testing
3. Share the substrate with unrelated data, as long as keys are namespaced
4. Keep the store and registry decoupled from where bytes end up

The interface is intentionally tiny. Values are whole serialized
documents; there are no partial updates. A set either replaces the
previous value completely or fails and leaves it untouched.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for the durable key-value substrate.

    Any storage implementation (files, browser storage, a database
    table, etc.) must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The record name

        Returns:
            The stored document, or None if the key was never written

        Raises:
            PersistenceError: If the value exists but cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: The record name
            value: The complete serialized document

        Raises:
            PersistenceError: If the write fails. The previous value
                must still be intact in that case.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Remove a key.

        Args:
            key: The record name

        Returns:
            True if something was removed, False if the key did not exist
        """
        pass

    @abstractmethod
    async def keys(self, prefix: str = "") -> list[str]:
        """
        List stored keys.

        Args:
            prefix: Only return keys starting with this prefix

        Returns:
            Matching keys in sorted order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class PersistenceError(StorageError):
    """
    The durable store could not be read or written.

    Also raised when a stored document exists but is malformed.
    A missing document is not an error; it means first run.
    """
    pass
