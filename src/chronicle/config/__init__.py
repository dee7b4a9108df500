"""Configuration for chronicle."""

from .settings import Settings, TrackingConfig, get_settings

__all__ = [
    "Settings",
    "TrackingConfig",
    "get_settings",
]
