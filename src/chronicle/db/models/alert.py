"""Change alert and change summary models."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, CreatedAtMixin, PortableJSON, PortableUUID


class ChangeAlertType(str, Enum):
    """Types of change alerts."""

    SIGNIFICANT_INCREASE = "SIGNIFICANT_INCREASE"
    SIGNIFICANT_DECREASE = "SIGNIFICANT_DECREASE"
    THRESHOLD_CROSSED = "THRESHOLD_CROSSED"
    NEW_DATA_AVAILABLE = "NEW_DATA_AVAILABLE"
    TREND_REVERSAL = "TREND_REVERSAL"
    ANOMALY_DETECTED = "ANOMALY_DETECTED"


class AlertSeverity(str, Enum):
    """Severity levels for change alerts."""

    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class SummaryPeriod(str, Enum):
    """Rollup windows for change summaries."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ChangeAlert(Base, CreatedAtMixin):
    """Alert raised for a notable change on an entity.

    Alerts are never deleted in normal operation; is_read and is_dismissed
    only ever flip from False to True.
    """

    __tablename__ = "change_alerts"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    org_id: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(255), nullable=False)
    alert_type: Mapped[str] = mapped_column(String(50), nullable=False)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="INFO")

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    metric: Mapped[str | None] = mapped_column(String(100), nullable=True)
    previous_value: Mapped[Any] = mapped_column(PortableJSON(), nullable=True)
    current_value: Mapped[Any] = mapped_column(PortableJSON(), nullable=True)
    change_percent: Mapped[float | None] = mapped_column(Float, nullable=True)
    threshold: Mapped[float | None] = mapped_column(Float, nullable=True)

    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_dismissed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    extra_metadata: Mapped[dict] = mapped_column(
        "metadata", PortableJSON(), nullable=False, default=dict
    )

    __table_args__ = (
        Index("idx_change_alert_org_status", "org_id", "is_read", "is_dismissed"),
        Index("idx_change_alert_org_created", "org_id", "created_at"),
        Index("idx_change_alert_entity", "entity_type", "entity_id"),
        Index("idx_change_alert_severity", "severity"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChangeAlert(id={self.id}, type={self.alert_type}, "
            f"severity={self.severity}, metric={self.metric})>"
        )


class ChangeSummary(Base, CreatedAtMixin):
    """Periodic digest of changes for an organization.

    One row per (org_id, period, period_start, summary_type); regenerating
    the same window overwrites the row.
    """

    __tablename__ = "change_summaries"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    org_id: Mapped[str] = mapped_column(String(255), nullable=False)
    period: Mapped[str] = mapped_column(String(20), nullable=False)
    period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    summary_type: Mapped[str] = mapped_column(String(50), nullable=False, default="overview")

    metrics: Mapped[dict] = mapped_column(PortableJSON(), nullable=False, default=dict)
    highlights: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    new_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deleted_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    significant_changes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    top_changes: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)

    __table_args__ = (
        Index(
            "idx_change_summary_window",
            "org_id",
            "period",
            "period_start",
            "summary_type",
            unique=True,
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ChangeSummary(id={self.id}, org_id={self.org_id}, period={self.period}, "
            f"period_start={self.period_start})>"
        )
