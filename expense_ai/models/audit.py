"""
Audit Models for ExpenseAI

Every mutation of the expense store or budget, every receipt scan and
every storage failure produces an audit event. Audit events are
append-only: they are emitted, never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense store
    EXPENSE_ADDED = "expense_added"
    EXPENSES_REPLACED = "expenses_replaced"
    EXPENSES_LOADED = "expenses_loaded"
    RECORDS_SKIPPED = "records_skipped"

    # Receipt scanning
    RECEIPT_UPLOADED = "receipt_uploaded"
    RECEIPT_PROCESSED = "receipt_processed"
    RECEIPT_FAILED = "receipt_failed"

    # Budget
    BUDGET_SAVED = "budget_saved"

    # Input validation
    VALIDATION_FAILED = "validation_failed"

    # System events
    STORAGE_WRITE_FAILED = "storage_write_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'receipt', 'budget')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one receipt upload)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "12.50", "food")
        event = AuditEventBuilder.receipt_failed("scan.txt", "Unsupported", correlation_id)
    """

    @staticmethod
    def expense_added(
        expense_id: int,
        amount: str,
        category: str,
        source: str = "manual",
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=str(expense_id),
            correlation_id=correlation_id,
            description=f"Expense added: {amount} ({category})",
            details={
                "amount": amount,
                "category": category,
                "source": source,
            },
            is_user_action=True,
        )

    @staticmethod
    def expenses_replaced(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_REPLACED,
            entity_type="expense_store",
            description=f"Expense store replaced with {count} records",
            details={"count": count},
        )

    @staticmethod
    def expenses_loaded(count: int, skipped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            entity_type="expense_store",
            description=f"Loaded {count} expenses from storage",
            details={"count": count, "skipped": skipped},
        )

    @staticmethod
    def records_skipped(key: str, skipped: int, errors: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type="storage_key",
            entity_id=key,
            description=f"Skipped {skipped} malformed records under '{key}'",
            details={"skipped": skipped, "errors": errors[:10]},
        )

    @staticmethod
    def receipt_uploaded(
        upload_id: UUID,
        filename: str,
        size_bytes: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_UPLOADED,
            entity_type="receipt",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Receipt uploaded: {filename}",
            details={
                "filename": filename,
                "size_bytes": size_bytes,
            },
            is_user_action=True,
        )

    @staticmethod
    def receipt_processed(
        upload_id: UUID,
        expense_id: int,
        confidence: float,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_PROCESSED,
            entity_type="receipt",
            entity_id=str(upload_id),
            correlation_id=correlation_id,
            description=f"Receipt processed with {confidence:.0%} confidence",
            details={
                "expense_id": expense_id,
                "confidence": confidence,
            },
        )

    @staticmethod
    def receipt_failed(
        filename: str,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECEIPT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="receipt",
            correlation_id=correlation_id,
            description=f"Receipt could not be processed: {filename}",
            error_message=error_message,
            details={"filename": filename},
        )

    @staticmethod
    def budget_saved(monthly: str, categories: dict[str, str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_SAVED,
            entity_type="budget",
            description=f"Budget saved: monthly {monthly}",
            details={
                "monthly": monthly,
                "categories": categories,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(form: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="form",
            entity_id=form,
            description=f"{form.capitalize()} form rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def storage_write_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage_key",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Could not write '{key}' to storage",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
