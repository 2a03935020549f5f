"""
Transaction Store

Owns the canonical list of transactions and the scalar settings
(budget, currency, dark mode, notification preferences) on top of a
primitive key-value layer.

DESIGN DECISION: Every mutation is read-entire-collection, transform,
write-entire-collection. The key-value layer has no partial update,
so a failed write fails the whole replace and never leaves half the
list changed.

FAILURE POLICY:
- Reads fail open: a fault is logged and a safe default is returned.
- Writes fail closed: a fault raises StorageError, after the
  documented best-effort fallback write has been attempted.

CONCURRENCY: No locking. The read-modify-write sequence is not atomic
against concurrent writers; callers that allow concurrent calls must
serialize access themselves or risk lost updates.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional, Union

import structlog
from pydantic import TypeAdapter

from budgetbee.alerts.evaluator import NotificationSink, build_alert
from budgetbee.audit import AuditLogger
from budgetbee.models.alert import BudgetAlert
from budgetbee.models.transaction import (
    CURRENCY_CODE_PATTERN,
    NotificationPreferences,
    Transaction,
)
from budgetbee.services.storage.interface import (
    InvalidArgumentError,
    KeyValueStore,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)

KEY_TRANSACTIONS = "transactions"
KEY_MONTHLY_BUDGET = "monthly_budget"
KEY_SELECTED_CURRENCY = "selected_currency"
KEY_DARK_MODE = "dark_mode"
KEY_BUDGET_ALERTS_ENABLED = "budget_alerts_enabled"
KEY_DAILY_REMINDERS_ENABLED = "daily_reminders_enabled"
KEY_REMINDER_TIME = "reminder_time"

DEFAULT_CURRENCY = "USD"
EMPTY_COLLECTION = "[]"

_CURRENCY_CODE = re.compile(CURRENCY_CODE_PATTERN)
_TRANSACTIONS = TypeAdapter(list[Transaction])


class TransactionStore:
    """
    Store for transactions and settings.

    Construct one per session and pass it to every collaborator that
    needs it.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        notification_sink: Optional[NotificationSink] = None,
        categories: Optional[Iterable[str]] = None,
        clock: Callable[[], datetime] = datetime.now,
        audit_logger: Optional[AuditLogger] = None,
        default_currency: str = DEFAULT_CURRENCY,
    ):
        """
        Initialize the store.

        Args:
            kv: Durable key-value backend.
            notification_sink: Receives budget alerts after writes.
                               If None, alerts are only logged.
            categories: Allowed category vocabulary. Empty or None
                        accepts any category.
            clock: Source of "now" for the monthly expense window.
            audit_logger: Audit trail. Defaults to a local AuditLogger.
            default_currency: Currency reported when none is stored.
        """
        self._kv = kv
        self._sink = notification_sink
        self._categories = [c for c in (categories or []) if c]
        self._clock = clock
        self._audit = audit_logger or AuditLogger()
        self._default_currency = default_currency

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def get_transactions(self) -> list[Transaction]:
        """
        Return stored transactions in insertion order.

        Never raises: an unreadable collection yields an empty list.
        """
        try:
            raw = self._kv.get_string(KEY_TRANSACTIONS, EMPTY_COLLECTION)
            if not raw:
                return []
            return _TRANSACTIONS.validate_json(raw)
        except Exception as e:
            logger.warning("transactions_read_failed", error=str(e), error_type=type(e).__name__)
            return []

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        """
        Replace the whole collection.

        On an encode or write fault, a single fallback write of an
        empty collection is attempted so no partial value survives,
        then StorageError is raised. A successful write triggers a
        budget re-evaluation.

        Raises:
            StorageError: If the collection could not be written
        """
        transactions = list(transactions)

        try:
            payload = _TRANSACTIONS.dump_json(transactions).decode("utf-8")
            self._kv.set_string(KEY_TRANSACTIONS, payload)
        except Exception as e:
            self._audit.log_save_failed("save_transactions", e)
            try:
                self._kv.set_string(KEY_TRANSACTIONS, EMPTY_COLLECTION)
                self._audit.log_fallback_write("save_transactions", kept=0, succeeded=True)
            except Exception as fallback_error:
                logger.error("empty_fallback_write_failed", error=str(fallback_error))
                self._audit.log_fallback_write("save_transactions", kept=0, succeeded=False)
            raise StorageError(f"Failed to save transactions: {e}") from e

        self._audit.log_transactions_saved(len(transactions))
        self._check_budget_alert()

    def add_transaction(self, transaction: Transaction) -> None:
        """
        Append a transaction.

        If the full read-modify-write fails, the transaction is
        persisted alone as a singleton collection so the new record is
        not lost.

        Raises:
            InvalidArgumentError: Unknown category or duplicate id
            StorageError: If even the singleton fallback write fails
        """
        self._validate_category(transaction)

        current = self.get_transactions()
        if any(existing.id == transaction.id for existing in current):
            raise InvalidArgumentError(f"Transaction id already exists: {transaction.id}")

        try:
            self.save_transactions([*current, transaction])
        except StorageError as e:
            logger.error("add_transaction_failed", transaction_id=transaction.id, error=str(e))
            try:
                self.save_transactions([transaction])
            except StorageError as fallback_error:
                self._audit.log_fallback_write("add_transaction", kept=1, succeeded=False)
                raise StorageError(
                    f"Failed to add transaction {transaction.id}: {fallback_error}"
                ) from fallback_error
            self._audit.log_fallback_write("add_transaction", kept=1, succeeded=True)
            return

        self._audit.log_transaction_added(transaction.id, str(transaction.amount))

    def update_transaction(self, transaction: Transaction) -> None:
        """
        Replace the stored record that has the same id.

        On a write fault the unmodified list is saved back and the
        update is reported as failed.

        Raises:
            NotFoundError: No record has this id (nothing is written)
            InvalidArgumentError: Unknown category
            StorageError: If the update could not be written
        """
        current = self.get_transactions()
        index = next(
            (i for i, existing in enumerate(current) if existing.id == transaction.id),
            None,
        )
        if index is None:
            raise NotFoundError(f"Transaction not found: {transaction.id}")

        self._validate_category(transaction)

        updated = list(current)
        updated[index] = transaction

        try:
            self.save_transactions(updated)
        except StorageError as e:
            logger.error("update_transaction_failed", transaction_id=transaction.id, error=str(e))
            try:
                self.save_transactions(current)
                self._audit.log_fallback_write("update_transaction", kept=len(current), succeeded=True)
            except StorageError:
                self._audit.log_fallback_write("update_transaction", kept=len(current), succeeded=False)
            raise StorageError(f"Failed to update transaction {transaction.id}: {e}") from e

        self._audit.log_transaction_updated(transaction.id)

    def delete_transaction(self, transaction: Union[Transaction, str]) -> int:
        """
        Remove every record with the given id.

        Deleting an id that is not stored is a no-op.

        Returns:
            Number of records removed

        Raises:
            StorageError: If the shortened list could not be written
        """
        transaction_id = transaction.id if isinstance(transaction, Transaction) else str(transaction)

        current = self.get_transactions()
        remaining = [t for t in current if t.id != transaction_id]
        removed = len(current) - len(remaining)
        if removed == 0:
            return 0

        self.save_transactions(remaining)
        self._audit.log_transaction_deleted(transaction_id, removed)
        return removed

    def get_categories(self) -> list[str]:
        """Get the configured category vocabulary."""
        return list(self._categories)

    def _validate_category(self, transaction: Transaction) -> None:
        if self._categories and transaction.category not in self._categories:
            raise InvalidArgumentError(
                f"Unknown category: {transaction.category}. Allowed: {self._categories}"
            )

    # =========================================================================
    # BUDGET
    # =========================================================================

    def get_monthly_budget(self) -> Decimal:
        """Get the monthly budget. Zero when unset or unreadable."""
        try:
            raw = self._kv.get_string(KEY_MONTHLY_BUDGET)
            if raw is None:
                return Decimal("0")
            return Decimal(raw)
        except Exception as e:
            logger.warning("monthly_budget_read_failed", error=str(e))
            return Decimal("0")

    def save_monthly_budget(self, amount: Union[Decimal, int, float, str]) -> None:
        """
        Set the monthly budget.

        Raises:
            InvalidArgumentError: Negative or non-numeric amount
            StorageError: If the write fails
        """
        try:
            value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation:
            raise InvalidArgumentError(f"Budget is not a number: {amount!r}")

        if not value.is_finite():
            raise InvalidArgumentError(f"Budget must be finite: {amount!r}")
        if value < 0:
            raise InvalidArgumentError("Budget cannot be negative")

        self._kv.set_string(KEY_MONTHLY_BUDGET, str(value))
        self._audit.log_budget_updated(str(value))

    def get_monthly_expenses(self) -> Decimal:
        """
        Sum of EXPENSE amounts dated in the current calendar month.

        "Current" is the clock's now at call time. Never raises.
        """
        try:
            now = self._clock()
            return sum(
                (
                    t.amount
                    for t in self.get_transactions()
                    if t.is_expense and t.falls_in_month(now.year, now.month)
                ),
                Decimal("0"),
            )
        except Exception as e:
            logger.warning("monthly_expenses_failed", error=str(e))
            return Decimal("0")

    def get_budget_status(self) -> BudgetAlert:
        """Current budget evaluation, without notifying anyone."""
        return build_alert(
            self.get_monthly_budget(),
            self.get_monthly_expenses(),
            self.get_selected_currency(),
        )

    def _check_budget_alert(self) -> None:
        """Re-evaluate the budget after a write and notify if alerting."""
        try:
            alert = self.get_budget_status()
            if not alert.level.is_alerting:
                return

            self._audit.log_budget_alert(alert.level.value, alert.message)

            if self._sink is None:
                return
            if not self.get_notification_preferences().budget_alerts_enabled:
                return
            self._sink.notify(alert)
        except Exception as e:
            # The write already succeeded; an alert failure must not undo it
            logger.warning("budget_alert_check_failed", error=str(e))
            self._audit.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": "budget_alert_check"},
            )

    # =========================================================================
    # CURRENCY
    # =========================================================================

    def get_selected_currency(self) -> str:
        """Get the selected currency code. Falls back to the default."""
        try:
            return self._kv.get_string(KEY_SELECTED_CURRENCY) or self._default_currency
        except Exception as e:
            logger.warning("currency_read_failed", error=str(e))
            return self._default_currency

    def set_selected_currency(self, currency: str) -> None:
        """
        Set the selected currency code.

        Raises:
            InvalidArgumentError: Not a three-letter code
            StorageError: If the write fails
        """
        code = (currency or "").strip().upper()
        if not _CURRENCY_CODE.match(code):
            raise InvalidArgumentError(f"Invalid currency code: {currency!r}")

        self._kv.set_string(KEY_SELECTED_CURRENCY, code)
        self._audit.log_currency_updated(code)

    # =========================================================================
    # APPEARANCE AND NOTIFICATIONS
    # =========================================================================

    def is_dark_mode_enabled(self) -> bool:
        try:
            return self._kv.get_bool(KEY_DARK_MODE, False)
        except Exception as e:
            logger.warning("dark_mode_read_failed", error=str(e))
            return False

    def set_dark_mode_enabled(self, enabled: bool) -> None:
        self._kv.set_bool(KEY_DARK_MODE, enabled)

    def get_notification_preferences(self) -> NotificationPreferences:
        """Get notification preferences. Defaults when unreadable."""
        defaults = NotificationPreferences()
        try:
            return NotificationPreferences(
                budget_alerts_enabled=self._kv.get_bool(
                    KEY_BUDGET_ALERTS_ENABLED, defaults.budget_alerts_enabled
                ),
                daily_reminders_enabled=self._kv.get_bool(
                    KEY_DAILY_REMINDERS_ENABLED, defaults.daily_reminders_enabled
                ),
                reminder_time=self._kv.get_int(KEY_REMINDER_TIME, defaults.reminder_time),
            )
        except Exception as e:
            logger.warning("notification_preferences_read_failed", error=str(e))
            return defaults

    def save_notification_preferences(self, preferences: NotificationPreferences) -> None:
        """
        Persist notification preferences.

        Raises:
            StorageError: If a write fails
        """
        self._kv.set_bool(KEY_BUDGET_ALERTS_ENABLED, preferences.budget_alerts_enabled)
        self._kv.set_bool(KEY_DAILY_REMINDERS_ENABLED, preferences.daily_reminders_enabled)
        self._kv.set_int(KEY_REMINDER_TIME, preferences.reminder_time)
        self._audit.log_preferences_updated(preferences.model_dump())
