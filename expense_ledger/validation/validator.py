"""
Two-Stage Transaction Validation

The store deliberately does not validate what it is given. Checking a
transaction before add/update is the caller's obligation, and this
module is what callers use to meet it.

STAGE 1 - SCHEMA VALIDATION:
- Amount present and greater than zero
- Description not blank
- Date parseable
- Kind is income or expense
This turns raw form input into a TransactionDraft.

STAGE 2 - SEMANTIC VALIDATION:
- Category exists in the registry for the transaction's kind
- The literal 'income' category is only used for income
- Suspiciously large amounts and far-future dates (warnings)

IMPORTANT: Validation never silently fixes anything. It reports issues
and the caller decides.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from expense_ledger.config import AppSettings, get_settings
from expense_ledger.models.category import Category
from expense_ledger.models.transaction import (
    INCOME_CATEGORY,
    TransactionDraft,
    TransactionKind,
    ValidationIssue,
    ValidationResult,
)


class ValidationError(Exception):
    """
    A transaction failed caller-side validation.

    Raised by the ledger flows, never by the store.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(messages or "Transaction is invalid")


_SCHEMA_MESSAGES = {
    "amount": ("Amount must be a number greater than zero", "Enter a positive amount"),
    "description": ("Description is required", "Add a short description"),
    "date": ("Date is missing or not a valid date", "Pick a date"),
    "kind": ("Choose income or expense", None),
    "category": ("Category is required", "Pick a category"),
}


class TransactionValidator:
    """
    Validates transactions against the registry before they are stored.

    Stage 1 needs no registry; stage 2 needs the current category list.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _issues_from_schema_error(self, error: PydanticValidationError) -> list[ValidationIssue]:
        issues = []
        seen = set()
        for detail in error.errors():
            field = str(detail["loc"][0]) if detail["loc"] else "transaction"
            if field in seen:
                continue
            seen.add(field)
            message, fix = _SCHEMA_MESSAGES.get(field, (detail["msg"], None))
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing" if detail["type"] == "missing" else "invalid_value",
                message=message,
                severity="error",
                suggested_fix=fix,
            ))
        return issues

    def parse_form(self, form: dict[str, Any]) -> tuple[Optional[TransactionDraft], ValidationResult]:
        """
        Stage 1: Build a draft from raw form values.

        Returns:
            (draft, result). draft is None when the result has errors.
        """
        try:
            draft = TransactionDraft(**form)
        except PydanticValidationError as e:
            issues = self._issues_from_schema_error(e)
            return None, ValidationResult(is_valid=False, issues=issues)
        return draft, ValidationResult(is_valid=True)

    def check_changes(self, changes: dict[str, Any]) -> ValidationResult:
        """
        Check the field names of an edit.

        Every key must name an editable transaction field; the id is not
        one of them.
        """
        editable = set(TransactionDraft.model_fields)
        issues = [
            ValidationIssue(
                field=name,
                issue_type="invalid_value",
                message=f"'{name}' is not an editable transaction field",
                severity="error",
                suggested_fix=f"Use one of: {', '.join(sorted(editable))}",
            )
            for name in sorted(changes)
            if name not in editable
        ]
        return ValidationResult(is_valid=not issues, issues=issues)

    def check(
        self,
        draft: TransactionDraft,
        categories: list[Category],
        now: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Stage 2: Semantic checks against the registry.

        Returns:
            Result listing every issue; is_valid is False on any error
        """
        issues = []
        now = now or datetime.now(timezone.utc)

        if draft.category == INCOME_CATEGORY:
            if draft.kind != TransactionKind.INCOME:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="kind_mismatch",
                    message="The 'income' category can only be used for income",
                    severity="error",
                    suggested_fix="Switch the transaction to income or pick an expense category",
                ))
        else:
            same_kind = {c.name for c in categories if c.kind == draft.kind}
            other_kind = {c.name for c in categories if c.kind != draft.kind}
            if draft.category not in same_kind:
                if draft.category in other_kind:
                    issues.append(ValidationIssue(
                        field="category",
                        issue_type="kind_mismatch",
                        message=f"'{draft.category}' is not an {draft.kind.value} category",
                        severity="error",
                        suggested_fix=f"Pick one of the {draft.kind.value} categories",
                    ))
                else:
                    issues.append(ValidationIssue(
                        field="category",
                        issue_type="unknown",
                        message=f"Unknown category '{draft.category}'",
                        severity="error",
                        suggested_fix="Pick an existing category or add it first",
                    ))

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if draft.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({draft.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        latest = now + timedelta(days=self._settings.future_date_tolerance_days)
        if draft.date > latest:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({draft.date.date().isoformat()}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return ValidationResult(is_valid=is_valid, issues=issues)

    def validate(
        self,
        draft: TransactionDraft,
        categories: list[Category],
        now: Optional[datetime] = None,
    ) -> TransactionDraft:
        """
        Run stage 2 and raise on errors.

        Raises:
            ValidationError: If there is any error-level issue
        """
        result = self.check(draft, categories, now)
        if not result.is_valid:
            raise ValidationError(result)
        return draft
