"""Tests for the key-value storage backends and the document codec."""

import asyncio
import json
from decimal import Decimal

import pytest

from expense_ledger.models.category import default_categories
from expense_ledger.services.storage import (
    FileKeyValueStorage,
    InMemoryKeyValueStorage,
    PersistenceError,
)
from expense_ledger.services.storage.documents import (
    decode_categories,
    decode_transactions,
    encode_categories,
    encode_transactions,
    parse_document,
)

from ledger_helpers import expense, income


class TestFileStorage:
    """Tests for the directory-backed storage."""

    def test_missing_key_reads_none(self, tmp_path):
        storage = FileKeyValueStorage(tmp_path / "data")
        assert asyncio.run(storage.get("expense_manager_transactions")) is None

    def test_set_then_get(self, tmp_path):
        async def scenario():
            storage = FileKeyValueStorage(tmp_path / "data")
            await storage.set("expense_manager_transactions", "[]")
            return await storage.get("expense_manager_transactions")

        assert asyncio.run(scenario()) == "[]"
        assert (tmp_path / "data" / "expense_manager_transactions.json").read_text() == "[]"

    def test_set_replaces_whole_value(self, tmp_path):
        async def scenario():
            storage = FileKeyValueStorage(tmp_path)
            await storage.set("k", '["a", "b", "c"]')
            await storage.set("k", '["d"]')
            return await storage.get("k")

        assert asyncio.run(scenario()) == '["d"]'

    def test_no_temp_files_left_behind(self, tmp_path):
        async def scenario():
            storage = FileKeyValueStorage(tmp_path)
            for i in range(5):
                await storage.set("k", f"[{i}]")

        asyncio.run(scenario())
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_delete(self, tmp_path):
        async def scenario():
            storage = FileKeyValueStorage(tmp_path)
            await storage.set("k", "[]")
            first = await storage.delete("k")
            second = await storage.delete("k")
            return first, second, await storage.get("k")

        assert asyncio.run(scenario()) == (True, False, None)

    def test_keys_filters_by_prefix(self, tmp_path):
        async def scenario():
            storage = FileKeyValueStorage(tmp_path)
            await storage.set("expense_manager_transactions", "[]")
            await storage.set("expense_manager_categories", "[]")
            await storage.set("other_app_state", "{}")
            return await storage.keys(prefix="expense_manager_"), await storage.keys()

        namespaced, everything = asyncio.run(scenario())
        assert namespaced == ["expense_manager_categories", "expense_manager_transactions"]
        assert len(everything) == 3

    def test_keys_on_missing_directory(self, tmp_path):
        storage = FileKeyValueStorage(tmp_path / "never-created")
        assert asyncio.run(storage.keys()) == []

    @pytest.mark.parametrize("key", ["", "a/b", "..", "a\\b"])
    def test_invalid_keys_rejected(self, tmp_path, key):
        storage = FileKeyValueStorage(tmp_path)
        with pytest.raises(PersistenceError, match="Invalid storage key"):
            asyncio.run(storage.set(key, "[]"))

    def test_unwritable_directory_raises_persistence_error(self, tmp_path):
        """A data_dir that is a regular file cannot hold records."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        storage = FileKeyValueStorage(blocker)
        with pytest.raises(PersistenceError):
            asyncio.run(storage.set("k", "[]"))


class TestInMemoryStorage:
    """Tests for the in-memory test double."""

    def test_round_trip_and_write_count(self):
        async def scenario():
            storage = InMemoryKeyValueStorage()
            await storage.set("a", "1")
            await storage.set("a", "2")
            return storage, await storage.get("a")

        storage, value = asyncio.run(scenario())
        assert value == "2"
        assert storage.write_count == 2
        assert storage.snapshot() == {"a": "2"}

    def test_initial_contents_are_copied(self):
        initial = {"a": "1"}
        storage = InMemoryKeyValueStorage(initial)
        asyncio.run(storage.set("b", "2"))
        assert initial == {"a": "1"}

    def test_keys_sorted_and_filtered(self):
        storage = InMemoryKeyValueStorage({"x_b": "", "x_a": "", "y": ""})
        assert asyncio.run(storage.keys("x_")) == ["x_a", "x_b"]


class TestDocuments:
    """Tests for the JSON document codec."""

    def test_missing_document_decodes_to_none(self):
        assert decode_transactions(None) is None
        assert decode_categories(None) is None

    def test_transactions_round_trip(self):
        transactions = [
            expense("12.34").with_id("1-0"),
            income("2500").with_id("1-1"),
        ]
        assert decode_transactions(encode_transactions(transactions)) == transactions

    def test_empty_list_round_trip(self):
        assert decode_transactions(encode_transactions([])) == []

    def test_amount_serialized_as_decimal_string(self):
        document = encode_transactions([expense("0.10").with_id("1-0")])
        record = json.loads(document)[0]
        assert record["amount"] == "0.10"
        assert record["kind"] == "expense"
        assert Decimal(record["amount"]) == Decimal("0.10")

    def test_categories_round_trip(self):
        categories = default_categories()
        assert decode_categories(encode_categories(categories)) == categories

    @pytest.mark.parametrize("document", [
        "not json",
        '{"a": 1}',
        '[{"id": "1", "amount": "-5"}]',
    ])
    def test_corrupt_transactions_raise(self, document):
        with pytest.raises(PersistenceError, match="corrupt"):
            decode_transactions(document, "expense_manager_transactions")

    def test_parse_document_rejects_invalid_json(self):
        with pytest.raises(PersistenceError, match="not valid JSON"):
            parse_document("{oops", "expense_manager_categories")
