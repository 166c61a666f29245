"""Caller-side validation package."""

from expense_ledger.validation.validator import TransactionValidator, ValidationError

__all__ = ["TransactionValidator", "ValidationError"]
