"""
Tests for BudgetBee Core

Test strategy:
1. Unit tests for individual components (models, evaluator, codec)
2. Integration tests for the store and backup manager over
   in-memory and temporary-directory backends
3. Write faults are injected, never provoked on the real filesystem
"""

import pytest
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from budgetbee.models import (
    AlertLevel,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BackupFailure,
    BackupFormat,
    BackupMetadata,
    BackupSnapshot,
    BackupSuccess,
    NotificationPreferences,
    Transaction,
    TransactionType,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction creation with a generated id."""
        transaction = Transaction(
            title="Groceries",
            amount=Decimal("42.50"),
            date=datetime(2024, 3, 1, 9, 0),
            type=TransactionType.EXPENSE,
            category="Food",
        )
        assert transaction.id
        assert transaction.amount == Decimal("42.50")
        assert transaction.is_expense

    def test_transaction_ids_are_unique(self):
        """Test that default ids differ between transactions."""
        kwargs = dict(
            title="Bus",
            amount=Decimal("2"),
            date=datetime(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category="Transport",
        )
        assert Transaction(**kwargs).id != Transaction(**kwargs).id

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from title and category."""
        transaction = Transaction(
            title="  Rent  ",
            amount=Decimal("800"),
            date=datetime(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category=" Bills ",
        )
        assert transaction.title == "Rent"
        assert transaction.category == "Bills"

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(
                title="Refund",
                amount=Decimal("-5"),
                date=datetime(2024, 3, 1),
                type=TransactionType.INCOME,
                category="Other",
            )

    def test_transaction_rejects_empty_title(self):
        """Test that an empty title is rejected."""
        with pytest.raises(ValueError):
            Transaction(
                title="   ",
                amount=Decimal("1"),
                date=datetime(2024, 3, 1),
                type=TransactionType.EXPENSE,
                category="Food",
            )

    def test_transaction_is_frozen(self):
        """Test that transactions cannot be mutated in place."""
        transaction = Transaction(
            title="Coffee",
            amount=Decimal("3"),
            date=datetime(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category="Food",
        )
        with pytest.raises(ValidationError):
            transaction.amount = Decimal("4")

    def test_edit_keeps_id(self):
        """Test that an edited copy carries the same id."""
        original = Transaction(
            title="Coffee",
            amount=Decimal("3"),
            date=datetime(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category="Food",
        )
        edited = original.model_copy(update={"amount": Decimal("4")})
        assert edited.id == original.id
        assert edited.amount == Decimal("4")

    def test_falls_in_month(self):
        """Test calendar month matching."""
        transaction = Transaction(
            title="Salary",
            amount=Decimal("3000"),
            date=datetime(2024, 2, 29, 23, 59),
            type=TransactionType.INCOME,
            category="Salary",
        )
        assert transaction.falls_in_month(2024, 2)
        assert not transaction.falls_in_month(2024, 3)
        assert not transaction.falls_in_month(2023, 2)
        assert not transaction.is_expense


class TestNotificationPreferences:
    """Tests for NotificationPreferences."""

    def test_defaults(self):
        prefs = NotificationPreferences()
        assert prefs.budget_alerts_enabled is True
        assert prefs.daily_reminders_enabled is True
        assert prefs.reminder_time == 1200
        assert (prefs.reminder_hour, prefs.reminder_minute) == (20, 0)

    def test_at_builds_reminder_time(self):
        prefs = NotificationPreferences.at(7, 45, daily_reminders_enabled=False)
        assert prefs.reminder_time == 465
        assert prefs.reminder_hour == 7
        assert prefs.reminder_minute == 45
        assert prefs.daily_reminders_enabled is False

    def test_rejects_out_of_range_time(self):
        """Test that a reminder past 23:59 is rejected."""
        with pytest.raises(ValueError):
            NotificationPreferences(reminder_time=1440)


class TestBackupModels:
    """Tests for backup envelope and result models."""

    def test_metadata_serializes_camel_case(self):
        metadata = BackupMetadata(
            schema_version=1,
            created_at=1710505845000,
            device_model="Pixel",
            app_version="1.0.0",
            transaction_count=2,
        )
        dumped = metadata.model_dump(by_alias=True)
        assert dumped["schemaVersion"] == 1
        assert dumped["createdAt"] == 1710505845000
        assert dumped["deviceModel"] == "Pixel"
        assert dumped["transactionCount"] == 2

    def test_metadata_accepts_legacy_version_key(self):
        """Test that early backups with "version" still validate."""
        metadata = BackupMetadata.model_validate({"version": 1, "createdAt": 0})
        assert metadata.schema_version == 1
        assert metadata.device_model == "unknown"

    def test_snapshot_fields_default_to_absent(self):
        snapshot = BackupSnapshot(metadata=BackupMetadata(schema_version=1, created_at=0))
        assert snapshot.transactions is None
        assert snapshot.monthly_budget is None
        assert snapshot.currency is None
        assert snapshot.notification_preferences is None

    def test_snapshot_rejects_bad_currency(self):
        with pytest.raises(ValueError):
            BackupSnapshot(
                metadata=BackupMetadata(schema_version=1, created_at=0),
                currency="DOLLARS",
            )

    def test_with_counted_metadata(self):
        """Test that the count is restamped from the transactions."""
        transaction = Transaction(
            title="Tea",
            amount=Decimal("2"),
            date=datetime(2024, 3, 1),
            type=TransactionType.EXPENSE,
            category="Food",
        )
        snapshot = BackupSnapshot(
            metadata=BackupMetadata(schema_version=1, created_at=0, transaction_count=99),
            transactions=[transaction],
        )
        counted = snapshot.with_counted_metadata()
        assert counted.metadata.transaction_count == 1
        assert snapshot.metadata.transaction_count == 99

    def test_result_variants(self):
        success = BackupSuccess()
        failure = BackupFailure(message="boom", exception=OSError("disk full"))
        assert success.ok is True
        assert failure.ok is False
        assert isinstance(failure.exception, OSError)

    def test_format_extensions(self):
        assert BackupFormat.JSON.extension == "json"
        assert BackupFormat.TEXT.extension == "text"


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test event",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_builder_transaction_added(self):
        """Test AuditEventBuilder for transaction added."""
        event = AuditEventBuilder.transaction_added("tx-1", "12.50")
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.entity_id == "tx-1"

    def test_audit_event_builder_save_failed(self):
        """Test that failures carry the error type and message."""
        event = AuditEventBuilder.save_failed("save_transactions", OSError("disk full"))
        assert event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL)
        assert event.error_type == "OSError"
        assert "disk full" in event.error_message

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.budget_alert(AlertLevel.EXCEEDED.value, "over")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == event.event_type.value
        assert "event_id" in log_dict
