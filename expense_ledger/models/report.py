"""
Report Models

Plain data produced by the query and aggregation engines for the
dashboard, the reports screen and the trend chart.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from expense_ledger.models.transaction import Transaction


class WeekWindow(BaseModel):
    """
    An inclusive [start, end] window covering one week.

    end is the last representable instant of the seventh day.
    """
    model_config = ConfigDict(frozen=True)

    start: dt.datetime
    end: dt.datetime

    @model_validator(mode='after')
    def validate_order(self) -> 'WeekWindow':
        if self.end < self.start:
            raise ValueError("Window end cannot be before start")
        return self

    def contains(self, moment: dt.datetime) -> bool:
        return self.start <= moment <= self.end


class DailyBucket(BaseModel):
    """Income and expense totals for one calendar day."""
    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(
        ...,
        description="Calendar day of the bucket start"
    )
    start: dt.datetime = Field(
        ...,
        description="First instant of the bucket (inclusive)"
    )
    total_expense: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")

    @property
    def label(self) -> str:
        """Short weekday name for chart axes, e.g. 'Mon'."""
        return self.date.strftime("%a")

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


class CategoryTotal(BaseModel):
    """One slice of the expense-by-category breakdown."""
    model_config = ConfigDict(frozen=True)

    name: str
    amount: Decimal
    color: str
    icon: str
    share: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Fraction of total expense in this category"
    )


class WeeklyReport(BaseModel):
    """Everything the weekly reports screen shows."""

    window: WeekWindow
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    categories: list[CategoryTotal] = Field(default_factory=list)
    daily: list[DailyBucket] = Field(default_factory=list)
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Transactions in the window, newest first"
    )

    @property
    def has_data(self) -> bool:
        return bool(self.transactions)
