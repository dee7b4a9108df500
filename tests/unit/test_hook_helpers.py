"""Unit tests for hook helpers."""

from chronicle.hooks import HookResult, extract_threshold_metrics
from chronicle.notifications.types import MetricValues


class TestExtractThresholdMetrics:
    """Tests for extract_threshold_metrics."""

    def test_picks_numeric_threshold_fields(self):
        previous = {"name": "Acme", "brandHealth": 80, "nps": 30, "size": 1000}
        current = {"name": "Acme 2", "brandHealth": 70, "nps": 30, "size": 1200}

        metrics = extract_threshold_metrics(previous, current)

        assert metrics == {
            "size": MetricValues(previous=1000, current=1200),
            "brandHealth": MetricValues(previous=80, current=70),
            "nps": MetricValues(previous=30, current=30),
        }

    def test_skips_missing_and_non_numeric(self):
        previous = {"brandHealth": "high", "nps": 30, "loyalty": True}
        current = {"brandHealth": 70, "loyalty": False}

        assert extract_threshold_metrics(previous, current) == {}

    def test_ignores_unlisted_fields(self):
        assert extract_threshold_metrics({"reach": 1}, {"reach": 2}) == {}


class TestHookResult:
    """Tests for HookResult."""

    def test_to_dict(self):
        result = HookResult(hook="on_entity_created", success=False, error="boom")

        assert result.to_dict() == {
            "hook": "on_entity_created",
            "success": False,
            "alert_count": 0,
            "error": "boom",
        }
