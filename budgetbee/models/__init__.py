"""
Data Models Package

This package contains all Pydantic models used in BudgetBee Core.
All data flowing through the store and the backup pipeline must
conform to these schemas.
"""

from budgetbee.models.transaction import (
    NotificationPreferences,
    Transaction,
    TransactionType,
)
from budgetbee.models.backup import (
    BackupFailure,
    BackupFormat,
    BackupMetadata,
    BackupResult,
    BackupSnapshot,
    BackupSuccess,
)
from budgetbee.models.alert import AlertLevel, BudgetAlert
from budgetbee.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "NotificationPreferences",
    "Transaction",
    "TransactionType",
    # Backup models
    "BackupFailure",
    "BackupFormat",
    "BackupMetadata",
    "BackupResult",
    "BackupSnapshot",
    "BackupSuccess",
    # Alert models
    "AlertLevel",
    "BudgetAlert",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
