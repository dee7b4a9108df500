"""Unit tests for the Delta Engine.

Tests cover:
- Added, removed and modified field detection
- Ignored bookkeeping fields
- Numeric significance (relative, absolute, default)
- Deep equality over nested values
- Summary generation
- Delta serialization shape
"""

import pytest

from chronicle.tracking.delta_engine import (
    IGNORED_FIELDS,
    SIGNIFICANCE_THRESHOLDS,
    DeltaEngine,
    compute_delta,
    create_delta_engine,
    deep_equal,
)
from chronicle.tracking.types import (
    AbsoluteThreshold,
    EntityDelta,
    FieldChangeType,
    SignificanceConfig,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def engine() -> DeltaEngine:
    """Create a delta engine with default thresholds."""
    return create_delta_engine()


# =============================================================================
# Basic Tests
# =============================================================================


class TestDeltaEngineBasic:
    """Tests for engine construction and identical snapshots."""

    def test_create_engine_default_thresholds(self) -> None:
        engine = create_delta_engine()
        assert engine.thresholds is SIGNIFICANCE_THRESHOLDS

    def test_create_engine_custom_thresholds(self) -> None:
        custom = {"default": SignificanceConfig(absolute=AbsoluteThreshold(min=1))}
        engine = create_delta_engine(custom)
        assert engine.thresholds is custom

    def test_identical_snapshots_have_no_changes(self, engine: DeltaEngine) -> None:
        snapshot = {"name": "Gen Z", "size": 1000, "filters": {"age": [18, 24]}}
        delta = engine.compute_delta(snapshot, dict(snapshot), "audience")

        assert delta.fields == []
        assert delta.changed_field_names == []
        assert delta.has_significant_changes is False
        assert delta.summary == "No changes detected"

    def test_empty_snapshots(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({}, {}, "chart")
        assert delta.fields == []


# =============================================================================
# Field Detection Tests
# =============================================================================


class TestFieldDetection:
    """Tests for added, removed and modified fields."""

    def test_detect_added_field(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"name": "A"}, {"name": "A", "status": "live"}, "report")

        assert len(delta.fields) == 1
        change = delta.fields[0]
        assert change.field == "status"
        assert change.change_type == FieldChangeType.ADDED
        assert change.old_value is None
        assert change.new_value == "live"
        assert change.is_significant is True

    def test_detect_removed_field(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"name": "A", "notes": "x"}, {"name": "A"}, "report")

        change = delta.fields[0]
        assert change.field == "notes"
        assert change.change_type == FieldChangeType.REMOVED
        assert change.new_value is None
        assert change.is_significant is True

    def test_key_present_with_none_is_not_removed(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"notes": "x"}, {"notes": None}, "report")

        assert delta.fields[0].change_type == FieldChangeType.MODIFIED

    def test_ignored_fields_are_skipped(self, engine: DeltaEngine) -> None:
        old = {"id": "1", "orgId": "o1", "createdAt": "a", "updatedAt": "b", "name": "A"}
        new = {"id": "2", "orgId": "o2", "createdAt": "c", "updatedAt": "d", "name": "A"}

        delta = engine.compute_delta(old, new, "audience")

        assert delta.fields == []
        assert IGNORED_FIELDS == {"updatedAt", "createdAt", "id", "orgId"}

    def test_field_order_follows_old_then_new_keys(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta(
            {"b": 1, "a": 1, "gone": 1}, {"a": 2, "b": 2, "fresh": 1}, "chart"
        )
        assert delta.changed_field_names == ["b", "a", "gone", "fresh"]

    def test_nested_change_is_modified(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta(
            {"filters": {"age": [18, 24]}}, {"filters": {"age": [18, 34]}}, "audience"
        )

        change = delta.fields[0]
        assert change.change_type == FieldChangeType.MODIFIED
        assert change.is_significant is True
        assert change.change_percent is None


# =============================================================================
# Significance Tests
# =============================================================================


class TestSignificance:
    """Tests for numeric significance thresholds."""

    def test_audience_size_relative_significant(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"audience_size": 1000}, {"audience_size": 1200}, "audience")

        change = delta.fields[0]
        assert change.is_significant is True
        assert change.change_percent == pytest.approx(0.2)

    def test_audience_size_relative_not_significant(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"audience_size": 1000}, {"audience_size": 1050}, "audience")

        assert delta.fields[0].is_significant is False
        assert delta.has_significant_changes is False

    def test_brand_health_absolute_threshold(self, engine: DeltaEngine) -> None:
        significant, _ = engine.check_significance("brand_health", 70, 75, "brand_tracking")
        minor, _ = engine.check_significance("brand_health", 70, 74, "brand_tracking")

        assert significant is True
        assert minor is False

    def test_nps_absolute_threshold(self, engine: DeltaEngine) -> None:
        significant, percent = engine.check_significance("nps", 20, 30, "brand_tracking")
        assert significant is True
        assert percent == pytest.approx(0.5)

    def test_sentiment_absolute_threshold(self, engine: DeltaEngine) -> None:
        significant, _ = engine.check_significance("sentiment", 0.1, 0.3, "brand_tracking")
        minor, _ = engine.check_significance("sentiment", 0.1, 0.15, "brand_tracking")

        assert significant is True
        assert minor is False

    def test_market_share_relative_threshold(self, engine: DeltaEngine) -> None:
        significant, _ = engine.check_significance("market_share", 0.20, 0.22, "brand_tracking")
        minor, _ = engine.check_significance("market_share", 0.20, 0.205, "brand_tracking")

        assert significant is True
        assert minor is False

    def test_unknown_field_uses_default_threshold(self, engine: DeltaEngine) -> None:
        significant, _ = engine.check_significance("views", 100, 110, "dashboard")
        minor, _ = engine.check_significance("views", 100, 109, "dashboard")

        assert significant is True
        assert minor is False

    def test_zero_to_zero_is_no_change(self, engine: DeltaEngine) -> None:
        significant, percent = engine.check_significance("views", 0, 0, "dashboard")
        assert percent == 0.0
        assert significant is False

    def test_zero_to_nonzero_is_full_change(self, engine: DeltaEngine) -> None:
        significant, percent = engine.check_significance("views", 0, 5, "dashboard")
        assert percent == 1.0
        assert significant is True

    def test_non_numeric_change_always_significant(self, engine: DeltaEngine) -> None:
        significant, percent = engine.check_significance("title", "Q1", "Q1 ", "report")
        assert significant is True
        assert percent is None

    def test_booleans_are_not_numbers(self, engine: DeltaEngine) -> None:
        significant, percent = engine.check_significance("active", True, False, "dashboard")
        assert significant is True
        assert percent is None

    def test_custom_threshold_table(self) -> None:
        engine = DeltaEngine(
            thresholds={"default": SignificanceConfig(absolute=AbsoluteThreshold(min=1000))}
        )
        delta = engine.compute_delta({"views": 100}, {"views": 200}, "dashboard")
        assert delta.has_significant_changes is False


# =============================================================================
# Deep Equality Tests
# =============================================================================


class TestDeepEqual:
    """Tests for structural equality."""

    def test_int_and_float_equal(self) -> None:
        assert deep_equal(1, 1.0)

    def test_bool_not_equal_to_int(self) -> None:
        assert not deep_equal(True, 1)

    def test_nested_structures(self) -> None:
        assert deep_equal({"a": [1, {"b": "c"}]}, {"a": [1, {"b": "c"}]})
        assert not deep_equal({"a": [1, 2]}, {"a": [2, 1]})

    def test_dict_key_sets_must_match(self) -> None:
        assert not deep_equal({"a": 1}, {"a": 1, "b": None})

    def test_none_values(self) -> None:
        assert deep_equal(None, None)
        assert not deep_equal(None, 0)


# =============================================================================
# Summary Tests
# =============================================================================


class TestSummary:
    """Tests for summary generation."""

    def test_minor_changes_summary(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta(
            {"audience_size": 1000, "awareness": 100},
            {"audience_size": 1010, "awareness": 101},
            "audience",
        )
        assert delta.summary == "2 minor changes"

    def test_single_minor_change_summary(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"audience_size": 1000}, {"audience_size": 1010}, "audience")
        assert delta.summary == "1 minor change"

    def test_priority_field_with_percent(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"size": 1000, "x": "a"}, {"size": 1200, "x": "b"}, "audience")
        assert delta.summary == "size increased (+20.0%)"

    def test_priority_field_decrease(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"nps": 40}, {"nps": 20}, "brand_tracking")
        assert delta.summary == "nps decreased (-50.0%)"

    def test_priority_field_text_change(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"name": "Old"}, {"name": "New"}, "audience")
        assert delta.summary == "name changed"

    def test_priority_field_added(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({}, {"status": "draft"}, "report")
        assert delta.summary == "status added"

    def test_non_priority_significant_changes(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"a": "x", "b": "y"}, {"a": "z", "b": "w"}, "chart")
        assert delta.summary == "2 significant changes"

    def test_single_non_priority_significant_change(self, engine: DeltaEngine) -> None:
        delta = engine.compute_delta({"a": "x"}, {"a": "z"}, "chart")
        assert delta.summary == "1 significant change"


# =============================================================================
# Serialization Tests
# =============================================================================


class TestDeltaSerialization:
    """Tests for the stored delta shape."""

    def test_to_dict_shape(self) -> None:
        delta = compute_delta({"size": 100}, {"size": 150}, "audience")
        data = delta.to_dict()

        assert data["changedFieldNames"] == ["size"]
        assert data["hasSignificantChanges"] is True
        assert data["summary"] == "size increased (+50.0%)"
        assert data["fields"][0] == {
            "field": "size",
            "oldValue": 100,
            "newValue": 150,
            "changeType": "modified",
            "isSignificant": True,
            "changePercent": 0.5,
        }

    def test_from_dict_restores_delta(self) -> None:
        delta = compute_delta({"name": "A"}, {"name": "B", "size": 1}, "audience")
        restored = EntityDelta.from_dict(delta.to_dict())
        assert restored == delta
