"""
Query Engine

Date-windowed reads over the transaction store.

DESIGN DECISION: Ranges compare full timestamps, not calendar days.
A transaction at 23:30 on the last day of a window is inside it, one at
00:00 the next day is not. Both bounds are inclusive.

Week boundaries are computed in a configured time zone on wall-clock
dates, so a week is always seven calendar days even across a DST change.

Ordering is the caller's concern. The store keeps each recorded date
exactly as written, so newest_first gives the same order no matter how
the records happen to be stored.
"""

from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Optional

from expense_ledger.config import CalendarSettings
from expense_ledger.ledger.transactions import TransactionStore
from expense_ledger.models.report import WeekWindow
from expense_ledger.models.transaction import Transaction


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(moment: datetime) -> datetime:
    """Read a naive datetime as UTC; aware datetimes pass through."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def week_window(
    reference: datetime,
    first_day_of_week: int,
    tz: tzinfo,
    offset_weeks: int = 0,
) -> WeekWindow:
    """
    The week containing reference, shifted by offset_weeks.

    Args:
        reference: Any instant inside the wanted week. A naive
            reference is read as UTC, like every other timestamp.
        first_day_of_week: 0=Monday .. 6=Sunday
        tz: Zone whose midnights bound the days
        offset_weeks: -1 for the previous week, 1 for the next

    Returns:
        Window from midnight of the first day to the last microsecond
        of the seventh day
    """
    local = ensure_aware(reference).astimezone(tz)
    days_back = (local.weekday() - first_day_of_week) % 7
    first = local.date() - timedelta(days=days_back) + timedelta(weeks=offset_weeks)
    last = first + timedelta(days=6)
    return WeekWindow(
        start=datetime.combine(first, time.min, tzinfo=tz),
        end=datetime.combine(last, time.max, tzinfo=tz),
    )


def newest_first(transactions: list[Transaction]) -> list[Transaction]:
    """Sort by date descending; equal dates fall back to id so order is stable."""
    return sorted(transactions, key=lambda t: (t.date, t.id), reverse=True)


class QueryEngine:
    """
    Reads windows of transactions from the store.

    GUARANTEES:
    - Never mutates the store
    - Empty result, not an error, for an inverted range
    """

    def __init__(
        self,
        store: TransactionStore,
        calendar: Optional[CalendarSettings] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._store = store
        self._calendar = calendar or CalendarSettings()
        self._clock = clock

    async def by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        """
        Transactions dated within [start, end], inclusive.

        Naive bounds are read as UTC, the same rule transactions follow.
        If start is after end the result is empty.
        """
        start = ensure_aware(start)
        end = ensure_aware(end)
        if start > end:
            return []
        return [
            transaction
            for transaction in await self._store.list()
            if start <= transaction.date <= end
        ]

    def week_window(self, offset_weeks: int = 0, now: Optional[datetime] = None) -> WeekWindow:
        """Current week (offset 0) or a week before/after it."""
        return week_window(
            now or self._clock(),
            self._calendar.week_start_day,
            self._calendar.tz,
            offset_weeks,
        )

    async def in_window(self, window: WeekWindow) -> list[Transaction]:
        return await self.by_date_range(window.start, window.end)

    async def week(self, offset_weeks: int = 0, now: Optional[datetime] = None) -> list[Transaction]:
        """Transactions in the week offset_weeks away from the one containing now."""
        return await self.in_window(self.week_window(offset_weeks, now))

    async def current_week(self, now: Optional[datetime] = None) -> list[Transaction]:
        """Transactions in the week containing now (default: the clock)."""
        return await self.week(0, now)
