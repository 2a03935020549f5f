"""
Core Data Models for BudgetBee

These models define the strict schemas for the records the store keeps.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and backups
4. Stay backward-compatible across backup versions

DESIGN DECISION: Amounts are stored as non-negative magnitudes.
Whether money came in or went out is carried by the transaction type,
never by the sign of the amount.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

def _new_transaction_id() -> str:
    return str(uuid4())


class Transaction(BaseModel):
    """
    A single financial transaction.

    CRITICAL: The id is unique within the store and never changes.
    Transactions are frozen; an edit is a new instance with the same id.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        default_factory=_new_transaction_id,
        min_length=1,
        max_length=100,
        description="Unique transaction ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Short description of the transaction"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Magnitude of the transaction (currency-agnostic)"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )
    type: TransactionType = Field(
        ...,
        description="EXPENSE or INCOME"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category from the configured vocabulary"
    )

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    def falls_in_month(self, year: int, month: int) -> bool:
        """Check if the transaction date is in the given calendar month."""
        return self.date.year == year and self.date.month == month


# =============================================================================
# SETTINGS MODELS
# =============================================================================

DEFAULT_REMINDER_TIME = 20 * 60  # 8:00 PM

# ISO 4217 style: three upper-case letters
CURRENCY_CODE_PATTERN = r"^[A-Z]{3}$"


class NotificationPreferences(BaseModel):
    """
    User preferences for budget alerts and daily reminders.

    reminder_time is stored as minutes since midnight.
    """

    budget_alerts_enabled: bool = Field(
        default=True,
        description="Send alerts when the budget crosses a threshold"
    )
    daily_reminders_enabled: bool = Field(
        default=True,
        description="Send a daily reminder to record expenses"
    )
    reminder_time: int = Field(
        default=DEFAULT_REMINDER_TIME,
        ge=0,
        le=1439,
        description="Reminder time of day in minutes since midnight"
    )

    @property
    def reminder_hour(self) -> int:
        return self.reminder_time // 60

    @property
    def reminder_minute(self) -> int:
        return self.reminder_time % 60

    @classmethod
    def at(cls, hour: int, minute: int, **kwargs) -> "NotificationPreferences":
        """Build preferences with the reminder set to hour:minute."""
        return cls(reminder_time=hour * 60 + minute, **kwargs)
