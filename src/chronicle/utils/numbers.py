"""Numeric helpers shared by the delta, trend and alerting engines."""

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def is_number(value: Any) -> bool:
    """Check whether a value is a plain number (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def change_percent(previous: float, current: float) -> float:
    """Relative change from previous to current as a fraction.

    A change away from zero counts as a full 100% change, and zero to zero
    is no change.

    Args:
        previous: Earlier value
        current: Later value

    Returns:
        (current - previous) / |previous|, or 1.0 / 0.0 when previous is zero
    """
    if previous != 0:
        return (current - previous) / abs(previous)
    return 1.0 if current != 0 else 0.0


def format_percent(value: float) -> str:
    """Format a fraction as a signed percentage, e.g. 0.2 -> '+20.0%'."""
    sign = "+" if value >= 0 else ""
    return f"{sign}{value * 100:.1f}%"


def format_number(value: Any) -> str:
    """Render a metric value without a trailing '.0' for whole floats."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def humanize_metric(metric: str) -> str:
    """Turn snake_case or camelCase metric names into spaced words.

    Examples:
        >>> humanize_metric("audience_size")
        'audience size'
        >>> humanize_metric("brandHealth")
        'brand Health'
    """
    spaced = metric.replace("_", " ")
    spaced = _CAMEL_BOUNDARY.sub(r" \1", spaced)
    return spaced.strip()
