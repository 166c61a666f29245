"""
Aggregation Engine

Pure reductions over a caller-supplied sequence of transactions.
Nothing here touches the store; callers filter first (usually through
the query engine) and pass the result in.

DESIGN DECISION: Sums are Decimal and start from Decimal("0").
balance() is therefore exactly total_income() - total_expense() and
exactly the signed sum over the same transactions, whatever the order.

An empty input always gives a neutral result: zero, an empty mapping,
or all-zero buckets.
"""

import bisect
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal

from expense_ledger.models.category import Category, resolve_category
from expense_ledger.models.report import CategoryTotal, DailyBucket
from expense_ledger.models.transaction import Transaction, TransactionKind
from expense_ledger.queries.engine import ensure_aware


ZERO = Decimal("0")


def _sum_kind(transactions: Iterable[Transaction], kind: TransactionKind) -> Decimal:
    return sum((t.amount for t in transactions if t.kind == kind), ZERO)


def total_income(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of income amounts."""
    return _sum_kind(transactions, TransactionKind.INCOME)


def total_expense(transactions: Iterable[Transaction]) -> Decimal:
    """Sum of expense amounts."""
    return _sum_kind(transactions, TransactionKind.EXPENSE)


def balance(transactions: Iterable[Transaction]) -> Decimal:
    """Income minus expense."""
    transactions = list(transactions)
    return total_income(transactions) - total_expense(transactions)


def signed_total(transactions: Iterable[Transaction]) -> Decimal:
    """Sum with income positive and expense negative. Equals balance()."""
    return sum((t.signed_amount for t in transactions), ZERO)


def category_summary(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Expense totals grouped by category name.

    Income never contributes, and categories with no expense in the
    input do not appear. Categories sharing a name share a bucket.
    Keys keep first-seen order.
    """
    summary: dict[str, Decimal] = {}
    for transaction in transactions:
        if transaction.kind != TransactionKind.EXPENSE:
            continue
        summary[transaction.category] = summary.get(transaction.category, ZERO) + transaction.amount
    return summary


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: list[Category],
) -> list[CategoryTotal]:
    """
    The category summary decorated for the breakdown chart.

    Sorted by amount, largest first (ties by name). Each entry carries
    the registry color and icon for its name, or the fallback ones when
    the category no longer exists.
    """
    summary = category_summary(transactions)
    total = sum(summary.values(), ZERO)
    ranked = sorted(summary.items(), key=lambda item: (-item[1], item[0]))
    breakdown = []
    for name, amount in ranked:
        category = resolve_category(categories, name, TransactionKind.EXPENSE)
        breakdown.append(CategoryTotal(
            name=name,
            amount=amount,
            color=category.color,
            icon=category.icon,
            share=float(amount / total) if total else 0.0,
        ))
    return breakdown


def daily_buckets(
    transactions: Iterable[Transaction],
    window_start: datetime,
    num_days: int,
) -> list[DailyBucket]:
    """
    Per-day income and expense totals for a trend chart.

    Bucket i covers [window_start + i days, window_start + i + 1 days):
    a transaction exactly on a bucket's start instant belongs to that
    bucket, not the previous one. Transactions outside the whole window
    are ignored.

    Days are added on the wall clock of window_start's time zone, so
    every bucket is one calendar day even across a DST change. A naive
    window_start is read as UTC.
    """
    if num_days <= 0:
        return []
    window_start = ensure_aware(window_start)

    starts = [window_start + timedelta(days=i) for i in range(num_days + 1)]
    expense = [ZERO] * num_days
    income = [ZERO] * num_days

    for transaction in transactions:
        if not starts[0] <= transaction.date < starts[-1]:
            continue
        index = bisect.bisect_right(starts, transaction.date) - 1
        if transaction.kind == TransactionKind.EXPENSE:
            expense[index] += transaction.amount
        else:
            income[index] += transaction.amount

    return [
        DailyBucket(
            date=starts[i].date(),
            start=starts[i],
            total_expense=expense[i],
            total_income=income[i],
        )
        for i in range(num_days)
    ]
