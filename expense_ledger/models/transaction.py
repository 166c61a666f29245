"""
Core Data Models for Expense Ledger

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the ledger invariants at construction time
2. Be serializable to and from the persisted JSON documents
3. Be immutable, so a record handed out by the store cannot be
   changed behind its back

DESIGN DECISION: Amounts are Decimal, never float.
Balance is income minus expense, and with Decimal that identity
holds exactly instead of to a floating-point tolerance.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Transactions in this category are income by definition and are never
# looked up in the category registry.
INCOME_CATEGORY = "income"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Polarity of a transaction or category.

    A transaction is exactly one of these, never both.
    """
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A transaction as entered by the user, before the store assigns an id.

    The description is kept verbatim; it only has to contain something
    other than whitespace.
    """
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount, always positive. The kind carries the sign"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category name, or the literal 'income'"
    )
    description: str = Field(
        ...,
        description="Free text, non-empty after trimming"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )
    kind: TransactionKind = Field(
        ...,
        description="Income or expense"
    )

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Description cannot be empty")
        return v

    @field_validator('date')
    @classmethod
    def assume_utc_when_naive(cls, v: datetime) -> datetime:
        """Timestamps without an offset are read as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with income positive and expense negative."""
        return -self.amount if self.is_expense else self.amount

    def with_id(self, transaction_id: str) -> "Transaction":
        """Promote this draft to a stored transaction."""
        return Transaction(id=transaction_id, **self.model_dump(exclude={"id"}))


class Transaction(TransactionDraft):
    """
    A transaction owned by the store.

    Every field can be replaced by an edit except the id.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique opaque identifier assigned by the store"
    )

    def edited(self, **changes) -> "Transaction":
        """
        Return a copy with some fields replaced.

        The copy is validated again; the id cannot be changed.
        """
        if "id" in changes:
            raise ValueError("Transaction id cannot be edited")
        data = self.model_dump()
        data.update(changes)
        return Transaction(**data)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'kind_mismatch')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of checking a transaction before it is handed to the store."""

    is_valid: bool = Field(
        ...,
        description="True when there are no error-level issues"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]
