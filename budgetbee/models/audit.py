"""
Audit Models for BudgetBee

Every significant action in the core is logged for audit purposes.
This provides:
1. Traceability of every store mutation, backup and restore
2. Debugging information when a write or restore goes wrong
3. A record of every fallback write that may have lost data

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Store mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_SAVED = "transactions_saved"
    SAVE_FAILED = "save_failed"
    FALLBACK_WRITE = "fallback_write"

    # Settings
    BUDGET_UPDATED = "budget_updated"
    CURRENCY_UPDATED = "currency_updated"
    PREFERENCES_UPDATED = "preferences_updated"

    # Alerts
    BUDGET_ALERT = "budget_alert"

    # Backup pipeline
    BACKUP_CREATED = "backup_created"
    BACKUP_FAILED = "backup_failed"
    BACKUP_EXPORTED = "backup_exported"
    RESTORE_COMPLETED = "restore_completed"
    RESTORE_FAILED = "restore_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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
        description="Type of entity (e.g., 'transaction', 'backup', 'settings')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity (transaction id, backup file name)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


def _error_fields(error: Optional[BaseException]) -> dict:
    if error is None:
        return {}
    return {
        "error_type": type(error).__name__,
        "error_message": str(error),
    }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, "12.50")
        event = AuditEventBuilder.backup_created("BudgetBee_Backup_...json", 3, "json")
    """

    @staticmethod
    def transactions_saved(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="transactions",
            description=f"Saved {count} transaction(s)",
            details={"count": count},
        )

    @staticmethod
    def transaction_added(transaction_id: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def transaction_updated(transaction_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction updated",
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, removed: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Deleted {removed} transaction(s)",
            details={"removed": removed},
        )

    @staticmethod
    def save_failed(operation: str, error: BaseException) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="transactions",
            description=f"Write failed during {operation}",
            details={"operation": operation},
            **_error_fields(error),
        )

    @staticmethod
    def fallback_write(operation: str, kept: int, succeeded: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FALLBACK_WRITE,
            severity=AuditSeverity.WARNING if succeeded else AuditSeverity.ERROR,
            entity_type="transactions",
            description=(
                f"Fallback write after failed {operation} "
                f"{'kept' if succeeded else 'could not keep'} {kept} transaction(s)"
            ),
            details={
                "operation": operation,
                "kept": kept,
                "succeeded": succeeded,
            },
        )

    @staticmethod
    def budget_updated(amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            entity_type="settings",
            description=f"Monthly budget set to {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def currency_updated(currency: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_UPDATED,
            entity_type="settings",
            description=f"Currency set to {currency}",
            details={"currency": currency},
        )

    @staticmethod
    def preferences_updated(preferences: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="settings",
            description="Notification preferences updated",
            details=preferences,
        )

    @staticmethod
    def budget_alert(level: str, message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_ALERT,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            description=message,
            details={"level": level},
        )

    @staticmethod
    def backup_created(file_name: str, transaction_count: int, fmt: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_CREATED,
            entity_type="backup",
            entity_id=file_name,
            description=f"Backup created with {transaction_count} transaction(s)",
            details={
                "format": fmt,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def backup_exported(file_name: str, size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_EXPORTED,
            entity_type="backup",
            entity_id=file_name,
            description=f"Backup exported ({size_bytes} bytes)",
            details={"size_bytes": size_bytes},
        )

    @staticmethod
    def backup_failed(operation: str, error: Optional[BaseException]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="backup",
            description=f"Backup {operation} failed",
            details={"operation": operation},
            **_error_fields(error),
        )

    @staticmethod
    def restore_completed(source: str, applied: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_COMPLETED,
            entity_type="backup",
            entity_id=source,
            description=f"Restore applied: {', '.join(applied) or 'nothing'}",
            details={"applied_fields": applied},
        )

    @staticmethod
    def restore_failed(source: str, error: Optional[BaseException]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESTORE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="backup",
            entity_id=source,
            description="Restore failed",
            **_error_fields(error),
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_type=error_type,
            error_message=error_message,
            details=details or {},
        )
