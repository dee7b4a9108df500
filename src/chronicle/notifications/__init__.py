"""Change notifications: threshold alerts and periodic change summaries."""

from chronicle.notifications.alerts import (
    ChangeNotificationService,
    alert_message,
    alert_title,
    alert_type_for,
    threshold_exceeded,
)
from chronicle.notifications.summary import ChangeSummaryAggregator, summary_window
from chronicle.notifications.types import (
    DEFAULT_ALERT_THRESHOLDS,
    AlertPage,
    AlertQueryOptions,
    AlertThreshold,
    ChangeAlertEntry,
    ChangeSummaryEntry,
    MetricValues,
    ThresholdType,
)

__all__ = [
    # Services
    "ChangeNotificationService",
    "ChangeSummaryAggregator",
    # Functions
    "alert_message",
    "alert_title",
    "alert_type_for",
    "summary_window",
    "threshold_exceeded",
    # Types
    "DEFAULT_ALERT_THRESHOLDS",
    "AlertPage",
    "AlertQueryOptions",
    "AlertThreshold",
    "ChangeAlertEntry",
    "ChangeSummaryEntry",
    "MetricValues",
    "ThresholdType",
]
