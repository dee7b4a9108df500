"""Unit tests for threshold rules and alert text."""

import pytest

from chronicle.db.models.alert import AlertSeverity, ChangeAlertType
from chronicle.notifications.alerts import (
    alert_message,
    alert_title,
    alert_type_for,
    threshold_exceeded,
)
from chronicle.notifications.types import (
    DEFAULT_ALERT_THRESHOLDS,
    AlertThreshold,
    MetricValues,
    ThresholdType,
)
from chronicle.utils.numbers import change_percent


def make_threshold(
    type: ThresholdType = ThresholdType.BOTH,
    threshold: float = 5,
    is_percentage: bool = False,
) -> AlertThreshold:
    """Helper to create an AlertThreshold."""
    return AlertThreshold(
        metric="m",
        type=type,
        threshold=threshold,
        is_percentage=is_percentage,
        severity=AlertSeverity.WARNING,
    )


def fires(rule: AlertThreshold, previous: float, current: float) -> bool:
    return threshold_exceeded(rule, change_percent(previous, current), current - previous)


# =============================================================================
# Default Table Tests
# =============================================================================


class TestDefaultThresholds:
    """Tests for the default threshold table."""

    def test_table_contents(self) -> None:
        table = [
            (t.metric, t.type, t.threshold, t.is_percentage, t.severity)
            for t in DEFAULT_ALERT_THRESHOLDS
        ]
        assert table == [
            ("brandHealth", ThresholdType.DECREASE, 5, False, AlertSeverity.WARNING),
            ("brandHealth", ThresholdType.DECREASE, 10, False, AlertSeverity.CRITICAL),
            ("marketShare", ThresholdType.DECREASE, 0.1, True, AlertSeverity.WARNING),
            ("audience_size", ThresholdType.BOTH, 0.2, True, AlertSeverity.INFO),
            ("nps", ThresholdType.DECREASE, 15, False, AlertSeverity.CRITICAL),
            ("sentiment", ThresholdType.DECREASE, 0.2, False, AlertSeverity.WARNING),
        ]


# =============================================================================
# Threshold Rule Tests
# =============================================================================


class TestThresholdExceeded:
    """Tests for threshold_exceeded."""

    def test_both_fires_either_direction(self) -> None:
        rule = make_threshold(ThresholdType.BOTH, 5)
        assert fires(rule, 10, 15)
        assert fires(rule, 15, 10)
        assert not fires(rule, 10, 14)

    def test_increase_only(self) -> None:
        rule = make_threshold(ThresholdType.INCREASE, 5)
        assert fires(rule, 10, 20)
        assert not fires(rule, 20, 10)

    def test_decrease_only(self) -> None:
        rule = make_threshold(ThresholdType.DECREASE, 5)
        assert fires(rule, 20, 10)
        assert not fires(rule, 10, 20)

    def test_percentage_rule(self) -> None:
        rule = make_threshold(ThresholdType.DECREASE, 0.1, is_percentage=True)
        assert fires(rule, 0.30, 0.25)
        assert not fires(rule, 0.30, 0.29)

    def test_threshold_is_inclusive(self) -> None:
        assert fires(make_threshold(ThresholdType.DECREASE, 10), 80, 70)

    def test_zero_base_counts_as_full_increase(self) -> None:
        rule = make_threshold(ThresholdType.INCREASE, 0.5, is_percentage=True)
        assert fires(rule, 0, 1)


# =============================================================================
# Alert Text Tests
# =============================================================================


class TestAlertText:
    """Tests for alert type, title and message."""

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [
            (0.2, ChangeAlertType.SIGNIFICANT_INCREASE),
            (-0.2, ChangeAlertType.SIGNIFICANT_DECREASE),
            (0.0, ChangeAlertType.THRESHOLD_CROSSED),
        ],
    )
    def test_alert_type(self, percent: float, expected: ChangeAlertType) -> None:
        assert alert_type_for(percent) == expected

    def test_title_camel_case(self) -> None:
        assert alert_title("brandHealth", -0.125, "Acme") == "brand Health decreased for Acme"

    def test_title_snake_case(self) -> None:
        assert alert_title("audience_size", 0.3, "Gen Z") == "audience size increased for Gen Z"

    def test_message(self) -> None:
        message = alert_message("brandHealth", MetricValues(previous=80, current=70), -0.125, "Acme")
        assert message == "Acme: brandHealth changed from 80 to 70 (-12.5%)"

    def test_message_float_values(self) -> None:
        message = alert_message("sentiment", MetricValues(previous=0.5, current=0.2), -0.6, "Acme")
        assert message == "Acme: sentiment changed from 0.5 to 0.2 (-60.0%)"
