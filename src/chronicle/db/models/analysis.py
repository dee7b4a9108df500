"""Analysis history models for AI-generated analysis outputs."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, CreatedAtMixin, PortableJSON, PortableUUID


class AnalysisType(str, Enum):
    """Kinds of analysis whose outputs are versioned."""

    CROSSTAB = "crosstab"
    AUDIENCE_INSIGHT = "audience_insight"
    BRAND_HEALTH = "brand_health"
    MARKET_ANALYSIS = "market_analysis"
    COMPETITOR_ANALYSIS = "competitor_analysis"
    TREND_ANALYSIS = "trend_analysis"


class AnalysisHistory(Base, CreatedAtMixin):
    """One versioned output of an analysis run.

    Versions are numbered per (analysis_type, reference_id), independently
    of entity versions, and rows are append-only.
    """

    __tablename__ = "analysis_history"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    org_id: Mapped[str] = mapped_column(String(255), nullable=False)
    analysis_type: Mapped[str] = mapped_column(String(50), nullable=False)
    reference_id: Mapped[str] = mapped_column(String(255), nullable=False)
    analysis_version: Mapped[int] = mapped_column(Integer, nullable=False)

    results: Mapped[dict] = mapped_column(PortableJSON(), nullable=False)
    ai_insights: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)
    key_metrics: Mapped[dict] = mapped_column(PortableJSON(), nullable=False, default=dict)
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    data_source_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # "metadata" is reserved on declarative classes
    extra_metadata: Mapped[dict] = mapped_column(
        "metadata", PortableJSON(), nullable=False, default=dict
    )

    __table_args__ = (
        Index(
            "idx_analysis_history_unique",
            "analysis_type",
            "reference_id",
            "analysis_version",
            unique=True,
        ),
        Index("idx_analysis_history_org", "org_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AnalysisHistory(id={self.id}, analysis={self.analysis_type}:{self.reference_id}, "
            f"version={self.analysis_version})>"
        )
