"""
Audit Logger

Every mutation of the expense store or budget is logged, as are receipt
scans and storage failures. The audit logger:
- Writes structured JSON log lines through structlog
- Keeps a bounded in-memory history of recent events for the UI
- Never raises: a logging failure must not undo a user action
- Supports correlation IDs to trace related events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_ai.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
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

    def __init__(self, history_size: int = 200):
        """
        Initialize audit logger.

        Args:
            history_size: How many recent events to keep in memory.
        """
        self._logger = structlog.get_logger("expense_ai.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, newest first."""
        return list(reversed(self._history))

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and remember it."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_expense_added(
        self,
        expense_id: int,
        amount: str,
        category: str,
        source: str = "manual",
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            category=category,
            source=source,
            correlation_id=correlation_id,
        ))

    def log_expenses_replaced(self, count: int) -> None:
        self.log(AuditEventBuilder.expenses_replaced(count))

    def log_expenses_loaded(self, count: int, skipped: int) -> None:
        self.log(AuditEventBuilder.expenses_loaded(count, skipped))

    def log_records_skipped(self, key: str, skipped: int, errors: list[str]) -> None:
        self.log(AuditEventBuilder.records_skipped(key, skipped, errors))

    def log_receipt_uploaded(
        self,
        upload_id: UUID,
        filename: str,
        size_bytes: int,
        correlation_id: UUID,
    ) -> None:
        """Log receipt upload event."""
        self.log(AuditEventBuilder.receipt_uploaded(
            upload_id=upload_id,
            filename=filename,
            size_bytes=size_bytes,
            correlation_id=correlation_id,
        ))

    def log_receipt_processed(
        self,
        upload_id: UUID,
        expense_id: int,
        confidence: float,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.receipt_processed(
            upload_id=upload_id,
            expense_id=expense_id,
            confidence=confidence,
            correlation_id=correlation_id,
        ))

    def log_receipt_failed(
        self,
        filename: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.receipt_failed(
            filename=filename,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_budget_saved(self, monthly: str, categories: dict[str, str]) -> None:
        self.log(AuditEventBuilder.budget_saved(monthly, categories))

    def log_validation_failed(self, form: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.validation_failed(form, issues))

    def log_storage_write_failed(
        self,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.storage_write_failed(
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., receipt upload).
    Pass it through all subsequent operations.
    """
    return uuid4()
