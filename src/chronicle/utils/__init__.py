"""Shared utilities for chronicle."""

from .exceptions import ChronicleError, ConfigurationError, TrackingError
from .numbers import change_percent, format_number, format_percent, humanize_metric, is_number

__all__ = [
    "ChronicleError",
    "ConfigurationError",
    "TrackingError",
    "change_percent",
    "format_number",
    "format_percent",
    "humanize_metric",
    "is_number",
]
