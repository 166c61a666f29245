"""Aggregation package."""

from expense_ledger.aggregation.engine import (
    balance,
    category_breakdown,
    category_summary,
    daily_buckets,
    signed_total,
    total_expense,
    total_income,
)

__all__ = [
    "balance",
    "category_breakdown",
    "category_summary",
    "daily_buckets",
    "signed_total",
    "total_expense",
    "total_income",
]
