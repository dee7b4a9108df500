"""Trend shift detection.

Splits each metric series at its midpoint and compares the direction of
the two halves. A change of direction is reported as a reversal,
acceleration or deceleration.
"""

from chronicle.evolution.trends import STABLE_SLOPE_THRESHOLD, calculate_slope
from chronicle.evolution.types import (
    ShiftSignificance,
    ShiftType,
    TrendAnalysis,
    TrendDirection,
    TrendShift,
)

MIN_SHIFT_POINTS = 4

_OPPOSITES = {
    (TrendDirection.INCREASING, TrendDirection.DECREASING),
    (TrendDirection.DECREASING, TrendDirection.INCREASING),
}


def slope_to_direction(slope: float) -> TrendDirection:
    """Direction of a slope, without the volatility override."""
    if abs(slope) < STABLE_SLOPE_THRESHOLD:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING


def shift_significance(magnitude: float) -> ShiftSignificance:
    """Tier a shift magnitude."""
    if magnitude > 0.2:
        return ShiftSignificance.HIGH
    if magnitude > 0.1:
        return ShiftSignificance.MEDIUM
    return ShiftSignificance.LOW


def detect_trend_shifts(trends: list[TrendAnalysis]) -> list[TrendShift]:
    """Detect direction changes between the halves of each metric series.

    Series with fewer than four points are skipped.

    Args:
        trends: Previously computed trend analyses

    Returns:
        One shift per metric whose halves disagree on direction
    """
    shifts: list[TrendShift] = []

    for trend in trends:
        points = trend.data_points
        if len(points) < MIN_SHIFT_POINTS:
            continue

        midpoint = len(points) // 2
        first_slope = calculate_slope([dp.value for dp in points[:midpoint]])
        second_slope = calculate_slope([dp.value for dp in points[midpoint:]])

        first_direction = slope_to_direction(first_slope)
        second_direction = slope_to_direction(second_slope)
        if first_direction == second_direction:
            continue

        if (first_direction, second_direction) in _OPPOSITES:
            shift_type = ShiftType.REVERSAL
        elif abs(second_slope) > abs(first_slope):
            shift_type = ShiftType.ACCELERATION
        else:
            shift_type = ShiftType.DECELERATION

        magnitude = abs(second_slope - first_slope)
        shifts.append(
            TrendShift(
                metric=trend.metric,
                shift_type=shift_type,
                previous_direction=first_direction,
                new_direction=second_direction,
                magnitude=magnitude,
                detected_at=points[midpoint].date,
                significance=shift_significance(magnitude),
            )
        )

    return shifts
