"""
Category Registry

Holds the category definitions the UI offers when a transaction is
entered, and the colors and icons used to draw the breakdown chart.

DESIGN DECISION: The registry does not enforce unique names.
Two categories of the same kind with the same name are legal and
simply merge under one label in the category summary.
"""

import asyncio
from typing import Callable, Optional

import structlog

from expense_ledger.ledger.ids import new_id
from expense_ledger.models.category import (
    Category,
    CategoryDraft,
    default_categories,
    resolve_category,
)
from expense_ledger.models.transaction import TransactionKind
from expense_ledger.services.storage import KeyValueStorageInterface, PersistenceError
from expense_ledger.services.storage.documents import (
    decode_categories,
    encode_categories,
)


logger = structlog.get_logger(__name__)


class CategoryRegistry:
    """
    Persisted set of categories.

    Seeds the default expense and income categories on first access.
    Mutations hold the shared ledger lock for their whole
    read-modify-write cycle.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str,
        lock: Optional[asyncio.Lock] = None,
        id_generator: Callable[[], str] = new_id,
    ):
        self._storage = storage
        self._key = key
        self._lock = lock or asyncio.Lock()
        self._new_id = id_generator

    @property
    def key(self) -> str:
        return self._key

    async def _read(self) -> Optional[list[Category]]:
        document = await self._storage.get(self._key)
        return decode_categories(document, self._key)

    async def _persist(self, categories: list[Category]) -> None:
        try:
            await self._storage.set(self._key, encode_categories(categories))
        except PersistenceError as e:
            logger.error("categories_write_failed", key=self._key, error=str(e))
            raise

    async def _load_or_seed(self) -> tuple[list[Category], bool]:
        """Caller must hold the lock. Returns (categories, seeded_now)."""
        categories = await self._read()
        if categories is not None:
            return categories, False
        seed = default_categories()
        await self._persist(seed)
        logger.info("categories_seeded", key=self._key, count=len(seed))
        return seed, True

    async def ensure_seeded(self) -> bool:
        """
        Write the default categories if nothing is stored yet.

        Returns:
            True if this call did the seeding
        """
        async with self._lock:
            _, seeded = await self._load_or_seed()
        return seeded

    async def add(self, draft: CategoryDraft) -> Category:
        """
        Register a new category.

        Raises:
            PersistenceError: If the category list cannot be written
        """
        async with self._lock:
            current, _ = await self._load_or_seed()
            category = draft.with_id(self._new_id())
            await self._persist([*current, category])
        logger.info(
            "category_added",
            category_id=category.id,
            name=category.name,
            kind=category.kind.value,
        )
        return category

    async def list_by_kind(self, kind: TransactionKind) -> list[Category]:
        return [category for category in await self.list() if category.kind == kind]

    async def resolve(self, name: str, kind: Optional[TransactionKind] = None) -> Category:
        """Display category for a name, with a fallback for orphans."""
        return resolve_category(await self.list(), name, kind)

    async def names(self, kind: TransactionKind) -> set[str]:
        return {category.name for category in await self.list_by_kind(kind)}

    # Defined last: inside the class body the name shadows the builtin.
    async def list(self) -> list[Category]:
        """
        All known categories.

        The first call against empty storage writes and returns the
        seeded defaults.

        Raises:
            PersistenceError: If the stored list is unreadable or corrupt
        """
        categories = await self._read()
        if categories is not None:
            return categories
        async with self._lock:
            categories, _ = await self._load_or_seed()
        return categories
