"""
Data Models Package

This package contains all Pydantic models used by the Expense Ledger.
All data flowing through the system must conform to these schemas.
"""

from expense_ledger.models.transaction import (
    INCOME_CATEGORY,
    Transaction,
    TransactionDraft,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)
from expense_ledger.models.category import (
    DEFAULT_EXPENSE_CATEGORIES,
    DEFAULT_INCOME_CATEGORIES,
    FALLBACK_COLOR,
    FALLBACK_ICON,
    Category,
    CategoryDraft,
    default_categories,
    fallback_category,
    resolve_category,
)
from expense_ledger.models.report import (
    CategoryTotal,
    DailyBucket,
    WeeklyReport,
    WeekWindow,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "INCOME_CATEGORY",
    "Transaction",
    "TransactionDraft",
    "TransactionKind",
    "ValidationIssue",
    "ValidationResult",
    # Category models
    "DEFAULT_EXPENSE_CATEGORIES",
    "DEFAULT_INCOME_CATEGORIES",
    "FALLBACK_COLOR",
    "FALLBACK_ICON",
    "Category",
    "CategoryDraft",
    "default_categories",
    "fallback_category",
    "resolve_category",
    # Report models
    "CategoryTotal",
    "DailyBucket",
    "WeeklyReport",
    "WeekWindow",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
