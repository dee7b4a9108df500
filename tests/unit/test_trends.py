"""Unit tests for trend analysis and trend shift detection.

Tests cover:
- OLS slope and coefficient of variation
- Direction classification (volatile, stable, increasing, decreasing)
- Unclamped trend strength
- Midpoint shift detection and shift typing
- Shift significance tiers
"""

from datetime import UTC, datetime, timedelta

import pytest

from chronicle.evolution.shifts import (
    detect_trend_shifts,
    shift_significance,
    slope_to_direction,
)
from chronicle.evolution.trends import (
    analyze_trend,
    calculate_slope,
    calculate_volatility,
    classify_direction,
)
from chronicle.evolution.types import (
    ShiftSignificance,
    ShiftType,
    TrendDataPoint,
    TrendDirection,
)

BASE_DATE = datetime(2026, 1, 1, tzinfo=UTC)


def make_points(values: list[float]) -> list[TrendDataPoint]:
    """Helper to create one data point per value, a day apart."""
    return [
        TrendDataPoint(version=i + 1, date=BASE_DATE + timedelta(days=i), value=v)
        for i, v in enumerate(values)
    ]


# =============================================================================
# Slope and Volatility Tests
# =============================================================================


class TestSlopeAndVolatility:
    """Tests for the statistical helpers."""

    def test_slope_linear_series(self) -> None:
        assert calculate_slope([60, 70, 80]) == pytest.approx(10.0)

    def test_slope_decreasing_series(self) -> None:
        assert calculate_slope([3, 2, 1]) == pytest.approx(-1.0)

    def test_slope_single_value(self) -> None:
        assert calculate_slope([5]) == 0.0

    def test_slope_empty(self) -> None:
        assert calculate_slope([]) == 0.0

    def test_volatility_constant_series(self) -> None:
        assert calculate_volatility([75, 75]) == 0.0

    def test_volatility_zero_mean(self) -> None:
        assert calculate_volatility([-1, 1]) == 0.0

    def test_volatility_population_std(self) -> None:
        # mean 70, population std sqrt(200/3)
        assert calculate_volatility([60, 70, 80]) == pytest.approx((200 / 3) ** 0.5 / 70)


# =============================================================================
# Trend Analysis Tests
# =============================================================================


class TestAnalyzeTrend:
    """Tests for analyze_trend."""

    def test_increasing_series(self) -> None:
        trend = analyze_trend("brandHealth", make_points([60, 70, 80]))

        assert trend.direction == TrendDirection.INCREASING
        assert trend.change_percent == pytest.approx(1 / 3)
        assert trend.trend_strength == pytest.approx(1 - trend.volatility)

    def test_decreasing_series(self) -> None:
        trend = analyze_trend("nps", make_points([50, 45, 40]))
        assert trend.direction == TrendDirection.DECREASING

    def test_stable_series(self) -> None:
        trend = analyze_trend("nps", make_points([75, 75]))

        assert trend.direction == TrendDirection.STABLE
        assert trend.change_percent == 0.0
        assert trend.trend_strength == 1.0

    def test_volatile_series(self) -> None:
        trend = analyze_trend("sentiment", make_points([1, 10, 1, 10]))
        assert trend.direction == TrendDirection.VOLATILE

    def test_trend_strength_can_be_negative(self) -> None:
        trend = analyze_trend("sentiment", make_points([1, 100, 1, 100, 1]))

        assert trend.volatility > 1
        assert trend.trend_strength < 0

    def test_small_slope_is_stable(self) -> None:
        assert classify_direction(0.01, 0.0) == TrendDirection.STABLE
        assert classify_direction(-0.019, 0.0) == TrendDirection.STABLE

    def test_volatility_overrides_slope(self) -> None:
        assert classify_direction(5.0, 0.31) == TrendDirection.VOLATILE


# =============================================================================
# Shift Detection Tests
# =============================================================================


class TestShiftDetection:
    """Tests for detect_trend_shifts."""

    def test_requires_four_points(self) -> None:
        trend = analyze_trend("x", make_points([1, 2, 1]))
        assert detect_trend_shifts([trend]) == []

    def test_reversal(self) -> None:
        trend = analyze_trend("brandHealth", make_points([1, 2, 2, 1]))
        shifts = detect_trend_shifts([trend])

        assert len(shifts) == 1
        shift = shifts[0]
        assert shift.shift_type == ShiftType.REVERSAL
        assert shift.previous_direction == TrendDirection.INCREASING
        assert shift.new_direction == TrendDirection.DECREASING
        assert shift.magnitude == pytest.approx(2.0)
        assert shift.significance == ShiftSignificance.HIGH
        assert shift.detected_at == BASE_DATE + timedelta(days=2)

    def test_acceleration_from_stable(self) -> None:
        trend = analyze_trend("size", make_points([10, 10, 10, 12]))
        shift = detect_trend_shifts([trend])[0]

        assert shift.shift_type == ShiftType.ACCELERATION
        assert shift.previous_direction == TrendDirection.STABLE
        assert shift.new_direction == TrendDirection.INCREASING

    def test_deceleration_to_stable(self) -> None:
        trend = analyze_trend("size", make_points([10, 12, 12, 12]))
        shift = detect_trend_shifts([trend])[0]

        assert shift.shift_type == ShiftType.DECELERATION
        assert shift.new_direction == TrendDirection.STABLE

    def test_same_direction_no_shift(self) -> None:
        trend = analyze_trend("size", make_points([1, 2, 3, 4, 5, 6]))
        assert detect_trend_shifts([trend]) == []

    def test_odd_length_midpoint(self) -> None:
        # midpoint 2: halves [5, 5] and [5, 6, 7]
        trend = analyze_trend("size", make_points([5, 5, 5, 6, 7]))
        shift = detect_trend_shifts([trend])[0]

        assert shift.detected_at == BASE_DATE + timedelta(days=2)
        assert shift.shift_type == ShiftType.ACCELERATION

    def test_breakout_never_produced(self) -> None:
        series = [[1, 2, 2, 1], [10, 10, 10, 12], [10, 12, 12, 12], [3, 1, 1, 3]]
        trends = [analyze_trend(f"m{i}", make_points(s)) for i, s in enumerate(series)]

        assert all(s.shift_type != ShiftType.BREAKOUT for s in detect_trend_shifts(trends))

    def test_slope_to_direction_ignores_volatility(self) -> None:
        assert slope_to_direction(0.02) == TrendDirection.INCREASING
        assert slope_to_direction(-0.02) == TrendDirection.DECREASING
        assert slope_to_direction(0.0199) == TrendDirection.STABLE

    @pytest.mark.parametrize(
        ("magnitude", "expected"),
        [
            (0.05, ShiftSignificance.LOW),
            (0.1, ShiftSignificance.LOW),
            (0.15, ShiftSignificance.MEDIUM),
            (0.2, ShiftSignificance.MEDIUM),
            (0.21, ShiftSignificance.HIGH),
        ],
    )
    def test_shift_significance_tiers(self, magnitude: float, expected: ShiftSignificance) -> None:
        assert shift_significance(magnitude) == expected
