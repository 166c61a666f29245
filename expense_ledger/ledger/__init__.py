"""Ledger package: the transaction store, category registry and backup."""

from expense_ledger.ledger.backup import BackupFormatError, LedgerBackup
from expense_ledger.ledger.categories import CategoryRegistry
from expense_ledger.ledger.ids import IdGenerator, new_id
from expense_ledger.ledger.transactions import TransactionStore

__all__ = [
    "BackupFormatError",
    "CategoryRegistry",
    "IdGenerator",
    "LedgerBackup",
    "TransactionStore",
    "new_id",
]
