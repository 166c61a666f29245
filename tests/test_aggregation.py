"""Tests for the aggregation engine."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from expense_ledger.aggregation import (
    balance,
    category_breakdown,
    category_summary,
    daily_buckets,
    signed_total,
    total_expense,
    total_income,
)
from expense_ledger.models.category import FALLBACK_COLOR, FALLBACK_ICON, default_categories

from ledger_helpers import expense, income, utc, zone_or_skip


def stored(*drafts):
    return [draft.with_id(f"1-{i}") for i, draft in enumerate(drafts)]


WEEK_START = utc(2024, 6, 3)


class TestTotals:
    """Tests for income, expense and balance."""

    def test_simple_week(self):
        transactions = stored(
            expense(50, category="Food"),
            income(1000, category="Salary"),
        )
        assert total_income(transactions) == Decimal("1000")
        assert total_expense(transactions) == Decimal("50")
        assert balance(transactions) == Decimal("950")

    def test_empty_input(self):
        assert total_income([]) == Decimal("0")
        assert total_expense([]) == Decimal("0")
        assert balance([]) == Decimal("0")
        assert signed_total([]) == Decimal("0")

    def test_balance_identity_is_exact(self):
        """Cents never drift, however many small amounts are summed."""
        transactions = stored(
            *[expense("0.10") for _ in range(30)],
            *[income("0.20") for _ in range(15)],
            income("1234.56"),
            expense("999.99", category="Housing"),
        )
        assert balance(transactions) == total_income(transactions) - total_expense(transactions)
        assert balance(transactions) == signed_total(transactions)
        assert total_expense(transactions) == Decimal("1002.99")

    def test_balance_of_a_generator(self):
        """A one-shot iterable is consumed once for both sides."""
        transactions = stored(expense(10), expense(5), income(40))
        assert balance(t for t in transactions) == Decimal("25")
        assert balance(t for t in transactions if t.is_expense) == Decimal("-15")

    def test_order_does_not_matter(self):
        transactions = stored(expense("3.33"), income("10"), expense("0.01"))
        assert balance(list(reversed(transactions))) == balance(transactions)


class TestCategorySummary:
    """Tests for expense totals per category."""

    def test_groups_expenses_by_name(self):
        transactions = stored(
            expense(10, category="Food"),
            expense(5, category="Transportation"),
            expense("2.50", category="Food"),
        )
        assert category_summary(transactions) == {
            "Food": Decimal("12.50"),
            "Transportation": Decimal("5"),
        }

    def test_income_never_contributes(self):
        transactions = stored(
            income(100, category="income"),
            income(200, category="Salary"),
            expense(10, category="Food"),
        )
        summary = category_summary(transactions)
        assert "income" not in summary
        assert "Salary" not in summary
        assert summary == {"Food": Decimal("10")}

    def test_empty_input(self):
        assert category_summary([]) == {}

    def test_summary_totals_match_expense(self):
        transactions = stored(
            expense("1.25", category="Food"),
            expense("8", category="Health"),
            income("40"),
        )
        assert sum(category_summary(transactions).values()) == total_expense(transactions)


class TestCategoryBreakdown:
    """Tests for the chart-ready breakdown."""

    def test_sorted_largest_first_with_shares(self):
        transactions = stored(
            expense(25, category="Transportation"),
            expense(75, category="Food"),
        )
        breakdown = category_breakdown(transactions, default_categories())
        assert [c.name for c in breakdown] == ["Food", "Transportation"]
        assert breakdown[0].share == pytest.approx(0.75)
        assert breakdown[0].color == "#FF6B6B"
        assert breakdown[1].icon == "car"

    def test_ties_sorted_by_name(self):
        transactions = stored(
            expense(10, category="Shopping"),
            expense(10, category="Health"),
        )
        breakdown = category_breakdown(transactions, default_categories())
        assert [c.name for c in breakdown] == ["Health", "Shopping"]

    def test_orphaned_category_uses_fallback(self):
        transactions = stored(expense(10, category="Deleted Category"))
        [entry] = category_breakdown(transactions, default_categories())
        assert entry.name == "Deleted Category"
        assert entry.color == FALLBACK_COLOR
        assert entry.icon == FALLBACK_ICON
        assert entry.share == 1.0

    def test_expense_other_not_income_other(self):
        """'Other' exists for both kinds; the expense one is used."""
        [entry] = category_breakdown(stored(expense(1, category="Other")), default_categories())
        assert entry.color == "#BDB2FF"

    def test_empty(self):
        assert category_breakdown([], default_categories()) == []


class TestDailyBuckets:
    """Tests for per-day trend buckets."""

    def test_seven_days(self):
        buckets = daily_buckets([], WEEK_START, 7)
        assert len(buckets) == 7
        assert [b.date for b in buckets] == [date(2024, 6, 3) + timedelta(days=i) for i in range(7)]
        assert all(b.total_expense == 0 and b.total_income == 0 for b in buckets)
        assert buckets[0].label == "Mon"

    def test_bucket_boundaries(self):
        """A transaction at exactly midnight belongs to the day that starts then."""
        transactions = stored(
            expense(1, when=utc(2024, 6, 5, 0, 0)),
            expense(2, when=utc(2024, 6, 4, 23, 59, 59, 999999)),
            income(100, when=utc(2024, 6, 5, 12, 0)),
        )
        buckets = daily_buckets(transactions, WEEK_START, 7)
        assert buckets[1].total_expense == Decimal("2")
        assert buckets[2].total_expense == Decimal("1")
        assert buckets[2].total_income == Decimal("100")

    def test_outside_window_ignored(self):
        transactions = stored(
            expense(1, when=utc(2024, 6, 2, 23, 59)),
            expense(2, when=utc(2024, 6, 10, 0, 0)),
            expense(4, when=utc(2024, 6, 9, 23, 59)),
        )
        buckets = daily_buckets(transactions, WEEK_START, 7)
        assert sum(b.total_expense for b in buckets) == Decimal("4")
        assert buckets[6].total_expense == Decimal("4")

    def test_buckets_sum_to_totals(self):
        transactions = stored(
            *[expense(i + 1, when=WEEK_START + timedelta(hours=7 * i)) for i in range(20)],
            income(500, when=WEEK_START + timedelta(days=4)),
        )
        buckets = daily_buckets(transactions, WEEK_START, 7)
        assert sum(b.total_expense for b in buckets) == total_expense(transactions)
        assert sum(b.total_income for b in buckets) == total_income(transactions)

    def test_bucket_days_follow_window_zone(self):
        plus_two = timezone(timedelta(hours=2))
        start = datetime(2024, 6, 3, tzinfo=plus_two)
        # 22:30 UTC on Monday is already Tuesday in UTC+2
        transactions = stored(expense(7, when=utc(2024, 6, 3, 22, 30)))
        buckets = daily_buckets(transactions, start, 7)
        assert buckets[1].total_expense == Decimal("7")

    def test_zero_days(self):
        assert daily_buckets(stored(expense(1)), WEEK_START, 0) == []

    def test_naive_start_read_as_utc(self):
        buckets = daily_buckets(stored(expense(3, when=utc(2024, 6, 4, 1, 0))), datetime(2024, 6, 3), 7)
        assert buckets[0].start == WEEK_START
        assert buckets[1].total_expense == Decimal("3")

    def test_naive_start_with_empty_input(self):
        assert len(daily_buckets([], datetime(2024, 6, 3), 7)) == 7

    def test_buckets_across_dst_end(self):
        """23:30 on the Sunday the clocks go back still belongs to Sunday."""
        berlin = zone_or_skip("Europe/Berlin")
        start = datetime(2024, 10, 21, tzinfo=berlin)
        transactions = stored(
            expense(5, when=utc(2024, 10, 27, 22, 30)),
            expense(9, when=utc(2024, 10, 27, 23, 0)),
        )
        buckets = daily_buckets(transactions, start, 7)
        assert buckets[6].date == date(2024, 10, 27)
        assert buckets[6].start == utc(2024, 10, 26, 22, 0)
        assert buckets[6].total_expense == Decimal("5")
        assert sum(b.total_expense for b in buckets) == Decimal("5")
