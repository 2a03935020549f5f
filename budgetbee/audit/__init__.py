"""Audit logging package."""

from budgetbee.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
