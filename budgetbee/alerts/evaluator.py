"""
Budget Alert Evaluation

The evaluator is a pure function of (budget, expenses). It keeps no
memory of earlier alerts: every evaluation that lands in an alerting
band reports that band again. De-duplication, if wanted, belongs to
the notification sink.

Bands are inclusive at their lower bound:
    progress >= 100        -> EXCEEDED
    90 <= progress < 100   -> WARNING_90
    75 <= progress < 90    -> ALERT_75
    otherwise / budget <= 0 -> NONE
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_FLOOR
from typing import Union

import structlog

from budgetbee.models.alert import AlertLevel, BudgetAlert


logger = structlog.get_logger(__name__)

Number = Union[Decimal, int, float, str]

_TITLES = {
    AlertLevel.EXCEEDED: "Budget Exceeded!",
    AlertLevel.WARNING_90: "Budget Warning!",
    AlertLevel.ALERT_75: "Budget Alert!",
    AlertLevel.NONE: "",
}


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from dragging binary noise in
    return Decimal(str(value))


def progress_percent(budget: Number, expenses: Number) -> Decimal:
    """Expenses as a percentage of budget. Zero when no budget is set."""
    budget = _to_decimal(budget)
    if budget <= 0:
        return Decimal("0")
    return _to_decimal(expenses) / budget * 100


def evaluate(budget: Number, expenses: Number) -> AlertLevel:
    """Map budget and expenses to an alert level."""
    if _to_decimal(budget) <= 0:
        return AlertLevel.NONE

    progress = progress_percent(budget, expenses)
    if progress >= 100:
        return AlertLevel.EXCEEDED
    if progress >= 90:
        return AlertLevel.WARNING_90
    if progress >= 75:
        return AlertLevel.ALERT_75
    return AlertLevel.NONE


def format_amount(amount: Decimal, currency: str) -> str:
    return f"{currency} {amount:,.2f}"


def format_message(budget: Number, expenses: Number, currency: str = "USD") -> str:
    """
    Build the alert text.

    Exceeded budgets report the overage; everything else reports what
    is left, with the percentage left based on whole percent used.
    """
    budget = _to_decimal(budget)
    expenses = _to_decimal(expenses)

    if evaluate(budget, expenses) == AlertLevel.EXCEEDED:
        return f"You've exceeded your budget by {format_amount(expenses - budget, currency)}"

    used = int(progress_percent(budget, expenses).to_integral_value(rounding=ROUND_FLOOR))
    remaining = budget - expenses
    return f"You have {format_amount(remaining, currency)} remaining ({100 - used}% left)"


def build_alert(budget: Number, expenses: Number, currency: str = "USD") -> BudgetAlert:
    """Evaluate and format in one step. NONE alerts carry no text."""
    budget = _to_decimal(budget)
    expenses = _to_decimal(expenses)
    level = evaluate(budget, expenses)

    return BudgetAlert(
        level=level,
        title=_TITLES[level],
        message=format_message(budget, expenses, currency) if level.is_alerting else "",
        budget=max(budget, Decimal("0")),
        expenses=max(expenses, Decimal("0")),
        currency=currency,
    )


# =============================================================================
# NOTIFICATION SINKS
# =============================================================================

class NotificationSink(ABC):
    """
    Receives budget alerts.

    Delivery (OS notification, toast, email) is entirely up to the
    implementation.
    """

    @abstractmethod
    def notify(self, alert: BudgetAlert) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Default sink: writes alerts to the structured log."""

    def notify(self, alert: BudgetAlert) -> None:
        logger.warning(
            "budget_alert",
            level=alert.level.value,
            title=alert.title,
            message=alert.message,
        )


class RecordingNotificationSink(NotificationSink):
    """Keeps every alert in memory. Useful for tests and UI polling."""

    def __init__(self):
        self.alerts: list[BudgetAlert] = []

    def notify(self, alert: BudgetAlert) -> None:
        self.alerts.append(alert)

    @property
    def last(self):
        return self.alerts[-1] if self.alerts else None

    def clear(self) -> None:
        self.alerts.clear()
