"""Tracking hooks for CRUD handlers."""

from chronicle.hooks.tracking_hooks import (
    THRESHOLD_FIELDS,
    ChangeTrackingHooks,
    HookResult,
    extract_threshold_metrics,
)

__all__ = [
    "ChangeTrackingHooks",
    "HookResult",
    "THRESHOLD_FIELDS",
    "extract_threshold_metrics",
]
