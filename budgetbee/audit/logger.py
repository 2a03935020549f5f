"""
Audit Logger

DESIGN DECISION: Every significant action in the core is logged.
This provides:
1. Traceability of mutations, backups and restores
2. Debugging capability when a fallback write kicks in
3. A record of every budget alert that was raised

The audit logger:
- Is synchronous, like the rest of the core
- Never raises (a failing log call must not break a write path)
"""

from typing import Optional

import structlog

from budgetbee.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


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


def get_logger(name: Optional[str] = None):
    """Get a structured logger bound to a module name."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured log at a level matching
    its severity.
    """

    def __init__(self, logger_name: str = "budgetbee.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Logging must never break the caller
            return False

        return True

    def log_transaction_added(self, transaction_id: str, amount: str) -> None:
        """Log transaction addition."""
        self.log(AuditEventBuilder.transaction_added(transaction_id, amount))

    def log_transaction_updated(self, transaction_id: str) -> None:
        """Log transaction update."""
        self.log(AuditEventBuilder.transaction_updated(transaction_id))

    def log_transaction_deleted(self, transaction_id: str, removed: int) -> None:
        """Log transaction deletion."""
        self.log(AuditEventBuilder.transaction_deleted(transaction_id, removed))

    def log_transactions_saved(self, count: int) -> None:
        """Log a full collection write."""
        self.log(AuditEventBuilder.transactions_saved(count))

    def log_save_failed(self, operation: str, error: BaseException) -> None:
        """Log a failed collection write."""
        self.log(AuditEventBuilder.save_failed(operation, error))

    def log_fallback_write(self, operation: str, kept: int, succeeded: bool) -> None:
        """Log a best-effort fallback write."""
        self.log(AuditEventBuilder.fallback_write(operation, kept, succeeded))

    def log_budget_updated(self, amount: str) -> None:
        """Log monthly budget change."""
        self.log(AuditEventBuilder.budget_updated(amount))

    def log_currency_updated(self, currency: str) -> None:
        """Log currency change."""
        self.log(AuditEventBuilder.currency_updated(currency))

    def log_preferences_updated(self, preferences: dict) -> None:
        """Log notification preference change."""
        self.log(AuditEventBuilder.preferences_updated(preferences))

    def log_budget_alert(self, level: str, message: str) -> None:
        """Log a raised budget alert."""
        self.log(AuditEventBuilder.budget_alert(level, message))

    def log_backup_created(self, file_name: str, transaction_count: int, fmt: str) -> None:
        """Log backup creation."""
        self.log(AuditEventBuilder.backup_created(file_name, transaction_count, fmt))

    def log_backup_exported(self, file_name: str, size_bytes: int) -> None:
        """Log backup export to an external stream."""
        self.log(AuditEventBuilder.backup_exported(file_name, size_bytes))

    def log_backup_failed(self, operation: str, error: Optional[BaseException]) -> None:
        """Log a failed backup or export."""
        self.log(AuditEventBuilder.backup_failed(operation, error))

    def log_restore_completed(self, source: str, applied: list[str]) -> None:
        """Log a completed restore."""
        self.log(AuditEventBuilder.restore_completed(source, applied))

    def log_restore_failed(self, source: str, error: Optional[BaseException]) -> None:
        """Log a failed restore."""
        self.log(AuditEventBuilder.restore_failed(source, error))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
