"""In-memory key-value storage, for tests and throwaway ledgers."""

import asyncio
from typing import Optional

from expense_ledger.services.storage.interface import KeyValueStorageInterface


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """
    Dict-backed storage.

    latency (seconds) is awaited inside every call so that tests can
    interleave concurrent operations the way real IO would.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None, latency: float = 0.0):
        self._data: dict[str, str] = dict(initial or {})
        self._latency = latency
        self.write_count = 0

    async def _pause(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)
        else:
            await asyncio.sleep(0)

    async def get(self, key: str) -> Optional[str]:
        await self._pause()
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        await self._pause()
        self._data[key] = value
        self.write_count += 1

    async def delete(self, key: str) -> bool:
        await self._pause()
        return self._data.pop(key, None) is not None

    async def keys(self, prefix: str = "") -> list[str]:
        await self._pause()
        return sorted(key for key in self._data if key.startswith(prefix))

    def snapshot(self) -> dict[str, str]:
        """Copy of everything stored, keyed by record name."""
        return dict(self._data)
