"""
Budget Alert Models

The alert level is a pure function of budget and expenses.
A BudgetAlert is what gets handed to a notification sink.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class AlertLevel(str, Enum):
    """Budget-threshold alerting state."""
    NONE = "none"
    ALERT_75 = "alert_75"        # 75% of budget used
    WARNING_90 = "warning_90"    # 90% of budget used
    EXCEEDED = "exceeded"        # Budget used up or overspent

    @property
    def is_alerting(self) -> bool:
        return self is not AlertLevel.NONE


class BudgetAlert(BaseModel):
    """A formatted budget alert."""

    level: AlertLevel
    title: str = ""
    message: str = ""
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    expenses: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str = "USD"
