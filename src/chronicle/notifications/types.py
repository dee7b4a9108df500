"""Types for change alerts and periodic change summaries."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from chronicle.db.models.alert import (
    AlertSeverity,
    ChangeAlert,
    ChangeAlertType,
    ChangeSummary,
    SummaryPeriod,
)

# =============================================================================
# Thresholds
# =============================================================================


class ThresholdType(str, Enum):
    """Direction of change a threshold reacts to."""

    INCREASE = "increase"
    DECREASE = "decrease"
    BOTH = "both"


class AlertThreshold(BaseModel):
    """A rule that raises an alert when a metric moves far enough.

    Attributes:
        metric: Metric name the rule applies to
        type: Direction of change that can fire the rule
        threshold: Fraction (when is_percentage) or absolute amount
        is_percentage: Compare |change percent| instead of |absolute change|
        severity: Severity of the raised alert
    """

    metric: str
    type: ThresholdType
    threshold: float = Field(ge=0)
    is_percentage: bool
    severity: AlertSeverity


DEFAULT_ALERT_THRESHOLDS: list[AlertThreshold] = [
    AlertThreshold(
        metric="brandHealth",
        type=ThresholdType.DECREASE,
        threshold=5,
        is_percentage=False,
        severity=AlertSeverity.WARNING,
    ),
    AlertThreshold(
        metric="brandHealth",
        type=ThresholdType.DECREASE,
        threshold=10,
        is_percentage=False,
        severity=AlertSeverity.CRITICAL,
    ),
    AlertThreshold(
        metric="marketShare",
        type=ThresholdType.DECREASE,
        threshold=0.1,
        is_percentage=True,
        severity=AlertSeverity.WARNING,
    ),
    AlertThreshold(
        metric="audience_size",
        type=ThresholdType.BOTH,
        threshold=0.2,
        is_percentage=True,
        severity=AlertSeverity.INFO,
    ),
    AlertThreshold(
        metric="nps",
        type=ThresholdType.DECREASE,
        threshold=15,
        is_percentage=False,
        severity=AlertSeverity.CRITICAL,
    ),
    AlertThreshold(
        metric="sentiment",
        type=ThresholdType.DECREASE,
        threshold=0.2,
        is_percentage=False,
        severity=AlertSeverity.WARNING,
    ),
]


@dataclass
class MetricValues:
    """Previous and current value of a metric."""

    previous: float
    current: float


# =============================================================================
# Alerts
# =============================================================================


@dataclass
class ChangeAlertEntry:
    """Read model of a stored change alert."""

    id: UUID
    org_id: str
    entity_type: str
    entity_id: str
    alert_type: ChangeAlertType
    severity: AlertSeverity
    title: str
    message: str
    metric: str | None
    previous_value: Any
    current_value: Any
    change_percent: float | None
    threshold: float | None
    is_read: bool
    is_dismissed: bool
    metadata: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_model(cls, row: ChangeAlert) -> "ChangeAlertEntry":
        """Map a database row to a ChangeAlertEntry."""
        return cls(
            id=row.id,
            org_id=row.org_id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            alert_type=ChangeAlertType(row.alert_type),
            severity=AlertSeverity(row.severity),
            title=row.title,
            message=row.message,
            metric=row.metric,
            previous_value=row.previous_value,
            current_value=row.current_value,
            change_percent=row.change_percent,
            threshold=row.threshold,
            is_read=row.is_read,
            is_dismissed=row.is_dismissed,
            metadata=dict(row.extra_metadata or {}),
            created_at=row.created_at,
        )


@dataclass
class AlertPage:
    """A page of alerts plus the total matching count."""

    alerts: list[ChangeAlertEntry]
    total: int


class AlertQueryOptions(BaseModel):
    """Filters for listing an organization's alerts."""

    alert_types: list[ChangeAlertType] | None = None
    severities: list[AlertSeverity] | None = None
    entity_types: list[str] | None = None
    include_read: bool = False
    include_dismissed: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


# =============================================================================
# Summaries
# =============================================================================


@dataclass
class ChangeSummaryEntry:
    """Read model of a stored change summary.

    Highlights are dicts with type, title and description. Top changes are
    dicts with entityType, entityId, entityName, changeType and summary.
    """

    id: UUID
    org_id: str
    period: SummaryPeriod
    period_start: datetime
    period_end: datetime
    summary_type: str
    metrics: dict[str, Any]
    highlights: list[dict[str, Any]] = field(default_factory=list)
    new_items: int = 0
    updated_items: int = 0
    deleted_items: int = 0
    significant_changes: int = 0
    top_changes: list[dict[str, Any]] = field(default_factory=list)
    created_at: datetime | None = None

    @classmethod
    def from_model(cls, row: ChangeSummary) -> "ChangeSummaryEntry":
        """Map a database row to a ChangeSummaryEntry."""
        return cls(
            id=row.id,
            org_id=row.org_id,
            period=SummaryPeriod(row.period),
            period_start=row.period_start,
            period_end=row.period_end,
            summary_type=row.summary_type,
            metrics=dict(row.metrics or {}),
            highlights=list(row.highlights or []),
            new_items=row.new_items,
            updated_items=row.updated_items,
            deleted_items=row.deleted_items,
            significant_changes=row.significant_changes,
            top_changes=list(row.top_changes or []),
            created_at=row.created_at,
        )
