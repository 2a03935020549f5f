"""Budget alert evaluation package."""

from budgetbee.alerts.evaluator import (
    LoggingNotificationSink,
    NotificationSink,
    RecordingNotificationSink,
    build_alert,
    evaluate,
    format_message,
    progress_percent,
)

__all__ = [
    "LoggingNotificationSink",
    "NotificationSink",
    "RecordingNotificationSink",
    "build_alert",
    "evaluate",
    "format_message",
    "progress_percent",
]
