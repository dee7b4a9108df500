"""Trend analysis over metric series.

Classifies a series of observations as increasing, decreasing, stable or
volatile using a least-squares slope against the observation index and
the coefficient of variation.
"""

import math
from collections.abc import Sequence

from chronicle.evolution.types import TrendAnalysis, TrendDataPoint, TrendDirection
from chronicle.utils.numbers import change_percent

# Coefficient of variation above which a series is volatile
VOLATILITY_THRESHOLD = 0.3

# Absolute slope below which a series is stable
STABLE_SLOPE_THRESHOLD = 0.02


def calculate_slope(values: Sequence[float]) -> float:
    """Ordinary least-squares slope of values against their index (0..n-1).

    Returns:
        Slope, or 0.0 when fewer than two values are given
    """
    n = len(values)
    if n == 0:
        return 0.0
    x_mean = (n - 1) / 2
    y_mean = sum(values) / n

    numerator = 0.0
    denominator = 0.0
    for i, value in enumerate(values):
        numerator += (i - x_mean) * (value - y_mean)
        denominator += (i - x_mean) ** 2

    return numerator / denominator if denominator != 0 else 0.0


def calculate_volatility(values: Sequence[float]) -> float:
    """Coefficient of variation: population std divided by |mean|.

    Returns:
        Volatility, or 0.0 when the mean is zero or there are no values
    """
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    if mean == 0:
        return 0.0

    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / abs(mean)


def classify_direction(slope: float, volatility: float) -> TrendDirection:
    """Classify the overall direction of a series."""
    if volatility > VOLATILITY_THRESHOLD:
        return TrendDirection.VOLATILE
    if abs(slope) < STABLE_SLOPE_THRESHOLD:
        return TrendDirection.STABLE
    return TrendDirection.INCREASING if slope > 0 else TrendDirection.DECREASING


def analyze_trend(metric: str, data_points: list[TrendDataPoint]) -> TrendAnalysis:
    """Analyze the trend of a single metric.

    Args:
        metric: Metric name
        data_points: At least one observation, in ascending order

    Returns:
        TrendAnalysis with direction, change percent and trend strength
    """
    values = [dp.value for dp in data_points]
    slope = calculate_slope(values)
    volatility = calculate_volatility(values)

    return TrendAnalysis(
        metric=metric,
        data_points=data_points,
        direction=classify_direction(slope, volatility),
        change_percent=change_percent(values[0], values[-1]),
        trend_strength=1 - volatility,
        slope=slope,
        volatility=volatility,
    )
