"""Database models for chronicle."""

from .alert import AlertSeverity, ChangeAlert, ChangeAlertType, ChangeSummary, SummaryPeriod
from .analysis import AnalysisHistory, AnalysisType
from .base import Base, CreatedAtMixin, TimestampMixin, utc_now
from .tracker import UserChangeTracker
from .version import ChangeType, EntityVersion, VersionedEntityType

__all__ = [
    "Base",
    "CreatedAtMixin",
    "TimestampMixin",
    "utc_now",
    "EntityVersion",
    "ChangeType",
    "VersionedEntityType",
    "AnalysisHistory",
    "AnalysisType",
    "ChangeAlert",
    "ChangeAlertType",
    "AlertSeverity",
    "ChangeSummary",
    "SummaryPeriod",
    "UserChangeTracker",
]
