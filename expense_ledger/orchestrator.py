"""
Main Orchestrator for Expense Ledger

This module ties the components together and defines the flows a UI
calls into:
1. Transactions (validate → store → audit), with retry on failed writes
2. Reports (window → query → aggregate → weekly report)
3. Backup (export, import, clear, storage usage)

DESIGN DECISION: The orchestrator is the caller the core expects.
The store does not validate and does not retry; this layer does both.
Retrying a failed add or update is safe because a failed write commits
nothing.

There is no ambient singleton. create_ledger builds one Ledger whose
store, registry and backup share a single writer lock; pass that object
to whatever needs it.
"""

import asyncio
from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_ledger.aggregation import (
    balance,
    category_breakdown,
    daily_buckets,
    total_expense,
    total_income,
)
from expense_ledger.audit import AuditLogger, configure_logging, create_correlation_id
from expense_ledger.config import Settings, get_settings
from expense_ledger.ledger import CategoryRegistry, LedgerBackup, TransactionStore
from expense_ledger.models.category import Category, CategoryDraft
from expense_ledger.models.report import WeeklyReport
from expense_ledger.models.transaction import Transaction, TransactionDraft
from expense_ledger.queries import QueryEngine, newest_first
from expense_ledger.services.storage import (
    FileKeyValueStorage,
    KeyValueStorageInterface,
    NotFoundError,
    PersistenceError,
)
from expense_ledger.validation import TransactionValidator, ValidationError


logger = structlog.get_logger(__name__)


class Ledger:
    """
    The wired-up core: one storage, one writer lock, and the components
    that share them.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        storage_settings = settings.storage

        self.storage = storage
        self.settings = settings
        self.lock = asyncio.Lock()
        self.registry = CategoryRegistry(
            storage,
            storage_settings.categories_key,
            lock=self.lock,
        )
        self.store = TransactionStore(
            storage,
            storage_settings.transactions_key,
            lock=self.lock,
            registry=self.registry,
        )
        self.queries = QueryEngine(self.store, settings.calendar)
        self.backup = LedgerBackup(
            storage,
            storage_settings.key_namespace,
            storage_settings.transactions_key,
            storage_settings.categories_key,
            lock=self.lock,
        )


def create_ledger(
    storage: Optional[KeyValueStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> Ledger:
    """
    Build a Ledger.

    Args:
        storage: Substrate to use. Defaults to files under the
            configured data directory.
        settings: Defaults to get_settings()
    """
    settings = settings or get_settings()
    if storage is None:
        storage = FileKeyValueStorage(settings.storage.data_dir)
    return Ledger(storage, settings)


class TransactionFlow:
    """
    Orchestrates adding, editing and removing transactions.

    Flow for a new transaction:
    1. Parse → raw form values become a TransactionDraft (stage 1)
    2. Check → category and kind against the registry (stage 2)
    3. Store → append and persist, retried on PersistenceError
    4. Audit → one structured event per change
    """

    def __init__(
        self,
        ledger: Ledger,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        retry_attempts: Optional[int] = None,
        retry_backoff: Optional[float] = None,
    ):
        app_settings = ledger.settings.app
        self._ledger = ledger
        self._validator = validator or TransactionValidator(app_settings)
        self._audit_logger = audit_logger or AuditLogger()
        self._retry_attempts = retry_attempts or app_settings.persistence_retry_attempts
        self._retry_backoff = (
            retry_backoff
            if retry_backoff is not None
            else app_settings.persistence_retry_backoff_seconds
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=self._retry_backoff, max=10),
            retry=retry_if_exception_type(PersistenceError),
            reraise=True,
        )

    async def start(self) -> list[Transaction]:
        """
        First-access initialisation: seed categories, load transactions.
        """
        seeded = await self._ledger.registry.ensure_seeded()
        if seeded:
            categories = await self._ledger.registry.list()
            self._audit_logger.log_categories_seeded(len(categories))
        return await self._ledger.store.load_or_init()

    async def _validated(
        self,
        entry: Union[TransactionDraft, dict[str, Any]],
        correlation_id: UUID,
    ) -> TransactionDraft:
        if isinstance(entry, dict):
            draft, result = self._validator.parse_form(entry)
            if draft is None:
                self._audit_logger.log_validation_failed(
                    [issue.model_dump() for issue in result.issues], correlation_id
                )
                raise ValidationError(result)
        else:
            draft = entry

        categories = await self._ledger.registry.list()
        result = self._validator.check(draft, categories)
        if not result.is_valid:
            self._audit_logger.log_validation_failed(
                [issue.model_dump() for issue in result.issues], correlation_id
            )
            raise ValidationError(result)
        return draft

    async def record(
        self,
        entry: Union[TransactionDraft, dict[str, Any]],
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Validate and store a new transaction.

        Args:
            entry: A draft, or raw form values
                (amount, category, description, date, kind)

        Raises:
            ValidationError: If the entry is invalid (nothing stored)
            PersistenceError: If every write attempt failed
        """
        correlation_id = correlation_id or create_correlation_id()
        draft = await self._validated(entry, correlation_id)

        try:
            async for attempt in self._retrying():
                with attempt:
                    transaction = await self._ledger.store.add(draft)
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed("add", str(e), correlation_id)
            raise

        self._audit_logger.log_transaction_added(transaction, correlation_id)
        return transaction

    async def edit(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
        **changes: Any,
    ) -> Transaction:
        """
        Replace fields of an existing transaction; the id is preserved.

        Raises:
            NotFoundError: If there is no transaction with that id
            ValidationError: If a change names an unknown field or the
                edited transaction is invalid
            PersistenceError: If every write attempt failed
        """
        correlation_id = correlation_id or create_correlation_id()
        result = self._validator.check_changes(changes)
        if not result.is_valid:
            self._audit_logger.log_validation_failed(
                [issue.model_dump() for issue in result.issues], correlation_id
            )
            raise ValidationError(result)

        existing = await self._ledger.store.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        form = {**existing.model_dump(exclude={"id"}), **changes}
        draft = await self._validated(form, correlation_id)
        edited = draft.with_id(transaction_id)

        try:
            async for attempt in self._retrying():
                with attempt:
                    updated = await self._ledger.store.update(edited)
        except PersistenceError as e:
            self._audit_logger.log_persistence_failed("update", str(e), correlation_id)
            raise

        self._audit_logger.log_transaction_updated(transaction_id, correlation_id)
        return updated

    async def remove(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete a transaction. Unknown ids are a no-op."""
        removed = await self._ledger.store.delete(transaction_id)
        if removed:
            self._audit_logger.log_transaction_deleted(transaction_id, correlation_id)
        return removed

    async def add_category(self, draft: CategoryDraft) -> Category:
        category = await self._ledger.registry.add(draft)
        self._audit_logger.log_category_added(category.id, category.name, category.kind.value)
        return category


class ReportFlow:
    """
    Orchestrates the read side: dashboard lists and weekly reports.

    Flow:
    1. Window → resolve the week from the clock and calendar settings
    2. Query → transactions inside it
    3. Aggregate → totals, category breakdown, daily buckets
    """

    def __init__(self, ledger: Ledger):
        self._ledger = ledger

    async def recent_transactions(self, limit: Optional[int] = None) -> list[Transaction]:
        """All transactions, newest first, as the dashboard lists them."""
        ordered = newest_first(await self._ledger.store.list())
        return ordered if limit is None else ordered[:limit]

    async def weekly_report(
        self,
        offset_weeks: int = 0,
        now: Optional[datetime] = None,
    ) -> WeeklyReport:
        """
        Summary of one week.

        Args:
            offset_weeks: 0 for the current week, -1 for the previous one,
                1 for the next
            now: Reference instant, defaults to the query engine's clock
        """
        queries = self._ledger.queries
        window = queries.week_window(offset_weeks, now)
        transactions = await queries.in_window(window)
        categories = await self._ledger.registry.list()

        return WeeklyReport(
            window=window,
            total_income=total_income(transactions),
            total_expense=total_expense(transactions),
            balance=balance(transactions),
            categories=category_breakdown(transactions, categories),
            daily=daily_buckets(transactions, window.start, 7),
            transactions=newest_first(transactions),
        )


class BackupFlow:
    """Export, import and clear, with an audit trail."""

    def __init__(self, ledger: Ledger, audit_logger: Optional[AuditLogger] = None):
        self._backup = ledger.backup
        self._audit_logger = audit_logger or AuditLogger()

    async def export_document(self) -> dict[str, Any]:
        document = await self._backup.export_document()
        self._audit_logger.log_data_exported(sorted(document))
        return document

    async def import_document(self, document: dict[str, Any]) -> list[str]:
        keys = await self._backup.import_document(document)
        self._audit_logger.log_data_imported(keys)
        return keys

    async def clear_all(self) -> list[str]:
        keys = await self._backup.clear_all()
        self._audit_logger.log_data_cleared(keys)
        return keys

    async def storage_usage_bytes(self) -> int:
        return await self._backup.storage_usage_bytes()


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    settings: Optional[Settings] = None,
) -> tuple[TransactionFlow, ReportFlow, BackupFlow, Ledger]:
    """
    Factory function to create all application components.

    Args:
        storage: Substrate to use; files under the configured data
            directory when omitted
        settings: Defaults to get_settings()

    Returns:
        (transaction_flow, report_flow, backup_flow, ledger)
    """
    settings = settings or get_settings()
    configure_logging(settings.app.effective_log_level)
    logger.info(
        "ledger_starting",
        environment=settings.app.environment,
        debug_mode=settings.app.debug_mode,
        data_dir=str(settings.storage.data_dir),
    )

    ledger = create_ledger(storage, settings)
    audit_logger = AuditLogger()

    transaction_flow = TransactionFlow(ledger, audit_logger=audit_logger)
    report_flow = ReportFlow(ledger)
    backup_flow = BackupFlow(ledger, audit_logger=audit_logger)

    return transaction_flow, report_flow, backup_flow, ledger
