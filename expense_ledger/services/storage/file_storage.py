"""
File Storage Implementation

DESIGN DECISION: Each key is one JSON file in a data directory because:
1. Users can inspect or back up their data with ordinary tools
2. No database setup required
3. Replacing a whole file atomically is easy and portable

TRADEOFFS:
- Every mutation rewrites the full record (fine for a personal ledger)
- Two processes writing the same directory clobber each other
  (last write wins, which is the documented policy)

Writes go to a temporary file in the same directory and are moved
into place with os.replace, so readers see either the old or the new
document and a failed write never leaves a truncated file behind.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog

from expense_ledger.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceError,
)


logger = structlog.get_logger(__name__)

_SUFFIX = ".json"


class FileKeyValueStorage(KeyValueStorageInterface):
    """
    Directory-backed key-value storage.

    Blocking file IO runs in a worker thread so the event loop stays
    responsive while a record is being written.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{_SUFFIX}"

    def _read(self, path: Path) -> Optional[str]:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {path.name}: {e}") from e

    def _write(self, path: Path, value: str) -> None:
        tmp_name = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(value)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise PersistenceError(f"Failed to write {path.name}: {e}") from e

    def _delete(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path.name}: {e}") from e

    def _list(self, prefix: str) -> list[str]:
        if not self._data_dir.is_dir():
            return []
        try:
            names = [
                entry.name[: -len(_SUFFIX)]
                for entry in self._data_dir.iterdir()
                if entry.is_file()
                and entry.name.endswith(_SUFFIX)
                and not entry.name.startswith(".")
            ]
        except OSError as e:
            raise PersistenceError(f"Failed to list {self._data_dir}: {e}") from e
        return sorted(name for name in names if name.startswith(prefix))

    async def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        return await asyncio.to_thread(self._read, path)

    async def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(self._write, path, value)
        logger.debug("record_written", key=key, size=len(value))

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        removed = await asyncio.to_thread(self._delete, path)
        if removed:
            logger.debug("record_deleted", key=key)
        return removed

    async def keys(self, prefix: str = "") -> list[str]:
        return await asyncio.to_thread(self._list, prefix)
