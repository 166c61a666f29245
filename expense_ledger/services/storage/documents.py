"""
Document codec for the persisted ledger records.

Each record is a JSON array of objects. Transactions serialize their
date as an ISO-8601 timestamp and their amount as a decimal string,
so a write followed by a read gives back value-equal models.
"""

import json
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from expense_ledger.models.category import Category
from expense_ledger.models.transaction import Transaction
from expense_ledger.services.storage.interface import PersistenceError


_transactions_adapter = TypeAdapter(list[Transaction])
_categories_adapter = TypeAdapter(list[Category])


def encode_transactions(transactions: list[Transaction]) -> str:
    return _transactions_adapter.dump_json(transactions).decode("utf-8")


def decode_transactions(document: Optional[str], key: str = "transactions") -> Optional[list[Transaction]]:
    """
    Parse a stored transaction document.

    Returns None when there is no document at all.

    Raises:
        PersistenceError: If the document is not a valid transaction list
    """
    if document is None:
        return None
    try:
        return _transactions_adapter.validate_json(document)
    except ValidationError as e:
        raise PersistenceError(
            f"Stored record {key!r} is corrupt: {e.error_count()} invalid entries"
        ) from e


def encode_categories(categories: list[Category]) -> str:
    return _categories_adapter.dump_json(categories).decode("utf-8")


def decode_categories(document: Optional[str], key: str = "categories") -> Optional[list[Category]]:
    """Parse a stored category document. See decode_transactions."""
    if document is None:
        return None
    try:
        return _categories_adapter.validate_json(document)
    except ValidationError as e:
        raise PersistenceError(
            f"Stored record {key!r} is corrupt: {e.error_count()} invalid entries"
        ) from e


def parse_document(document: str, key: str) -> object:
    """Parse any stored record into plain JSON data (used by export)."""
    try:
        return json.loads(document)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"Stored record {key!r} is not valid JSON: {e}") from e
