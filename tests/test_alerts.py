"""
Tests for budget alert evaluation and formatting.
"""

import pytest
from decimal import Decimal

from budgetbee.alerts import (
    LoggingNotificationSink,
    RecordingNotificationSink,
    build_alert,
    evaluate,
    format_message,
    progress_percent,
)
from budgetbee.models import AlertLevel


class TestEvaluate:
    """Tests for threshold bands."""

    @pytest.mark.parametrize("expenses", [0, 50, 1000])
    def test_zero_budget_never_alerts(self, expenses):
        assert evaluate(0, expenses) == AlertLevel.NONE

    def test_negative_budget_never_alerts(self):
        assert evaluate(-10, 500) == AlertLevel.NONE

    @pytest.mark.parametrize(
        "expenses, level",
        [
            (0, AlertLevel.NONE),
            (74, AlertLevel.NONE),
            ("74.99", AlertLevel.NONE),
            (75, AlertLevel.ALERT_75),
            (89, AlertLevel.ALERT_75),
            (90, AlertLevel.WARNING_90),
            ("99.99", AlertLevel.WARNING_90),
            (100, AlertLevel.EXCEEDED),
            (150, AlertLevel.EXCEEDED),
        ],
    )
    def test_bands_are_inclusive_at_lower_bound(self, expenses, level):
        assert evaluate(100, expenses) == level

    def test_float_inputs(self):
        """Test that floats don't pick up binary rounding noise."""
        assert evaluate(0.3, 0.225) == AlertLevel.ALERT_75

    def test_progress_percent(self):
        assert progress_percent(200, 50) == Decimal("25")
        assert progress_percent(0, 50) == Decimal("0")


class TestFormatting:
    """Tests for alert text."""

    def test_exceeded_reports_overage(self):
        assert format_message(100, 150, "USD") == "You've exceeded your budget by USD 50.00"

    def test_remaining_reports_percent_left(self):
        assert format_message(100, 80, "EUR") == "You have EUR 20.00 remaining (20% left)"

    def test_percent_left_uses_whole_percent_used(self):
        """75.5% used leaves 25% by floor of the used percentage."""
        assert format_message(200, 151, "USD") == "You have USD 49.00 remaining (25% left)"

    def test_large_amounts_are_grouped(self):
        assert format_message(1000, 2500.5, "INR") == "You've exceeded your budget by INR 1,500.50"

    def test_build_alert_exceeded(self):
        alert = build_alert(100, 150)
        assert alert.level == AlertLevel.EXCEEDED
        assert alert.title == "Budget Exceeded!"
        assert alert.message == "You've exceeded your budget by USD 50.00"
        assert alert.budget == Decimal("100")
        assert alert.expenses == Decimal("150")

    def test_build_alert_titles(self):
        assert build_alert(100, 92).title == "Budget Warning!"
        assert build_alert(100, 76).title == "Budget Alert!"

    def test_build_alert_none_has_no_text(self):
        alert = build_alert(100, 10, "GBP")
        assert alert.level == AlertLevel.NONE
        assert alert.title == ""
        assert alert.message == ""
        assert alert.currency == "GBP"

    def test_repeated_evaluation_reports_again(self):
        """Test that there is no memory of earlier alerts."""
        first = build_alert(100, 95)
        second = build_alert(100, 95)
        assert first.level == second.level == AlertLevel.WARNING_90


class TestNotificationSinks:
    """Tests for the provided sinks."""

    def test_recording_sink(self):
        sink = RecordingNotificationSink()
        assert sink.last is None

        sink.notify(build_alert(100, 80))
        sink.notify(build_alert(100, 120))

        assert len(sink.alerts) == 2
        assert sink.last.level == AlertLevel.EXCEEDED

        sink.clear()
        assert sink.alerts == []

    def test_logging_sink_does_not_raise(self):
        LoggingNotificationSink().notify(build_alert(100, 120))
