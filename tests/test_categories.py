"""Tests for the category registry."""

import asyncio

import pytest

from expense_ledger.ledger import CategoryRegistry
from expense_ledger.models.category import FALLBACK_COLOR, CategoryDraft
from expense_ledger.models.transaction import TransactionKind
from expense_ledger.services.storage import InMemoryKeyValueStorage, PersistenceError
from expense_ledger.services.storage.documents import encode_categories

from ledger_helpers import CATEGORIES_KEY, FlakyStorage


class TestSeeding:
    """Tests for first-access seeding."""

    def test_list_seeds_defaults(self):
        async def scenario():
            storage = InMemoryKeyValueStorage()
            registry = CategoryRegistry(storage, CATEGORIES_KEY)
            return await registry.list(), storage.write_count

        categories, writes = asyncio.run(scenario())
        assert len(categories) == 14
        assert writes == 1

    def test_ensure_seeded_only_once(self):
        async def scenario():
            storage = InMemoryKeyValueStorage()
            registry = CategoryRegistry(storage, CATEGORIES_KEY)
            first = await registry.ensure_seeded()
            second = await registry.ensure_seeded()
            return first, second, storage.write_count

        assert asyncio.run(scenario()) == (True, False, 1)

    def test_concurrent_first_access_seeds_once(self):
        async def scenario():
            storage = InMemoryKeyValueStorage(latency=0.001)
            registry = CategoryRegistry(storage, CATEGORIES_KEY)
            results = await asyncio.gather(*(registry.list() for _ in range(5)))
            return results, storage.write_count

        results, writes = asyncio.run(scenario())
        assert writes == 1
        assert all(len(r) == 14 for r in results)

    def test_existing_list_is_not_overwritten(self):
        custom = CategoryDraft(name="Pets", color="#A0C4FF", icon="paw", kind="expense").with_id("p")
        storage = InMemoryKeyValueStorage({CATEGORIES_KEY: encode_categories([custom])})
        registry = CategoryRegistry(storage, CATEGORIES_KEY)
        assert asyncio.run(registry.list()) == [custom]

    def test_empty_stored_list_is_kept(self):
        """An explicitly stored empty list is data, not a first run."""
        storage = InMemoryKeyValueStorage({CATEGORIES_KEY: "[]"})
        registry = CategoryRegistry(storage, CATEGORIES_KEY)
        assert asyncio.run(registry.list()) == []

    def test_corrupt_list_raises(self):
        storage = InMemoryKeyValueStorage({CATEGORIES_KEY: '[{"name": 1}]'})
        registry = CategoryRegistry(storage, CATEGORIES_KEY)
        with pytest.raises(PersistenceError):
            asyncio.run(registry.list())

    def test_failed_seed_write_raises(self):
        async def scenario():
            storage = FlakyStorage()
            storage.fail_writes = 1
            registry = CategoryRegistry(storage, CATEGORIES_KEY)
            with pytest.raises(PersistenceError):
                await registry.ensure_seeded()
            return storage.snapshot()

        assert asyncio.run(scenario()) == {}


class TestRegistryOperations:
    """Tests for add, lookups and resolution."""

    def test_add_appends(self):
        async def scenario():
            registry = CategoryRegistry(InMemoryKeyValueStorage(), CATEGORIES_KEY)
            added = await registry.add(
                CategoryDraft(name="Pets", color="#A0C4FF", icon="paw", kind="expense")
            )
            return added, await registry.list()

        added, categories = asyncio.run(scenario())
        assert len(categories) == 15
        assert categories[-1] == added
        assert added.id not in {str(i) for i in range(1, 15)}

    def test_duplicate_names_allowed(self):
        async def scenario():
            registry = CategoryRegistry(InMemoryKeyValueStorage(), CATEGORIES_KEY)
            await registry.add(CategoryDraft(name="Food", color="#000000", icon="pizza", kind="expense"))
            return await registry.list_by_kind(TransactionKind.EXPENSE)

        expense_categories = asyncio.run(scenario())
        assert [c.name for c in expense_categories].count("Food") == 2

    def test_names_by_kind(self):
        registry = CategoryRegistry(InMemoryKeyValueStorage(), CATEGORIES_KEY)
        names = asyncio.run(registry.names(TransactionKind.INCOME))
        assert names == {"Salary", "Freelance", "Gifts", "Investments", "Other"}

    def test_resolve_unknown_uses_fallback(self):
        registry = CategoryRegistry(InMemoryKeyValueStorage(), CATEGORIES_KEY)
        category = asyncio.run(registry.resolve("Gone", TransactionKind.EXPENSE))
        assert category.color == FALLBACK_COLOR
        assert category.name == "Gone"
