"""
Audit Logger

DESIGN DECISION: Every user-level change to the ledger is logged.
This provides:
1. Traceability of what changed and when
2. Debugging capability when a write fails
3. A record the user can be shown if something looks wrong

The audit logger:
- Writes structured JSON through structlog
- Never raises, so a logging problem cannot break a ledger operation
- Supports correlation IDs to tie the retries of one action together
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from expense_ledger.models.transaction import Transaction


def configure_logging(level: str = "INFO") -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger().setLevel(getattr(logging, level.upper()))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """Central audit logging service."""

    def __init__(self):
        self._logger = structlog.get_logger("expense_ledger.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event at the level its severity calls for."""
        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (ValueError, TypeError, OSError) as e:
            logging.getLogger(__name__).warning(
                "Failed to write audit event %s: %s", event.event_id, e
            )

    def log_transaction_added(
        self,
        transaction: Transaction,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction.id,
            kind=transaction.kind.value,
            category=transaction.category,
            amount=str(transaction.amount),
            correlation_id=correlation_id,
        ))

    def log_transaction_updated(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_updated(transaction_id, correlation_id))

    def log_transaction_deleted(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id, correlation_id))

    def log_categories_seeded(self, count: int) -> None:
        self.log(AuditEventBuilder.categories_seeded(count))

    def log_category_added(self, category_id: str, name: str, kind: str) -> None:
        self.log(AuditEventBuilder.category_added(category_id, name, kind))

    def log_data_exported(self, keys: list[str]) -> None:
        self.log(AuditEventBuilder.data_exported(keys))

    def log_data_imported(self, keys: list[str]) -> None:
        self.log(AuditEventBuilder.data_imported(keys))

    def log_data_cleared(self, keys: list[str]) -> None:
        self.log(AuditEventBuilder.data_cleared(keys))

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(issues, correlation_id))

    def log_persistence_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.persistence_failed(
            operation, error_message, correlation_id
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action and pass it through all
    subsequent operations, including retries.
    """
    return uuid4()
