"""Types for analysis evolution, trends and trend shifts."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from chronicle.db.models.analysis import AnalysisHistory, AnalysisType

# =============================================================================
# Enums
# =============================================================================


class TrendDirection(str, Enum):
    """Overall direction of a metric series."""

    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    VOLATILE = "volatile"  # Coefficient of variation above 0.3


class ShiftType(str, Enum):
    """Kind of change between the two halves of a series."""

    REVERSAL = "reversal"
    ACCELERATION = "acceleration"
    DECELERATION = "deceleration"
    BREAKOUT = "breakout"  # Declared for consumers; never produced by detection


class ShiftSignificance(str, Enum):
    """Magnitude tier of a trend shift."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# =============================================================================
# Trends
# =============================================================================


@dataclass
class TrendDataPoint:
    """One observation of a metric."""

    version: int
    date: datetime
    value: float
    confidence: float | None = None


@dataclass
class TrendAnalysis:
    """Trend classification of one metric across a series of versions.

    Attributes:
        metric: Metric name
        data_points: Observations in ascending version order
        direction: Overall direction
        change_percent: Relative change from first to last value
        trend_strength: 1 - volatility (may be negative for very noisy series)
        slope: Least-squares slope of value against index
        volatility: Coefficient of variation of the values
    """

    metric: str
    data_points: list[TrendDataPoint]
    direction: TrendDirection
    change_percent: float
    trend_strength: float
    slope: float = 0.0
    volatility: float = 0.0


@dataclass
class TrendShift:
    """A change of direction or pace detected in a metric series."""

    metric: str
    shift_type: ShiftType
    previous_direction: TrendDirection
    new_direction: TrendDirection
    magnitude: float
    detected_at: datetime
    significance: ShiftSignificance


# =============================================================================
# Analysis History and Evolution
# =============================================================================


@dataclass
class AnalysisHistoryEntry:
    """Read model of one stored analysis run."""

    id: UUID
    org_id: str
    analysis_type: AnalysisType
    reference_id: str
    analysis_version: int
    results: dict[str, Any]
    ai_insights: list[str]
    key_metrics: dict[str, float]
    confidence: float | None
    data_source_date: datetime | None
    metadata: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_model(cls, row: AnalysisHistory) -> "AnalysisHistoryEntry":
        """Map a database row to an AnalysisHistoryEntry."""
        return cls(
            id=row.id,
            org_id=row.org_id,
            analysis_type=AnalysisType(row.analysis_type),
            reference_id=row.reference_id,
            analysis_version=row.analysis_version,
            results=dict(row.results or {}),
            ai_insights=list(row.ai_insights or []),
            key_metrics=dict(row.key_metrics or {}),
            confidence=row.confidence,
            data_source_date=row.data_source_date,
            metadata=dict(row.extra_metadata or {}),
            created_at=row.created_at,
        )


@dataclass
class AnalysisHistoryPage:
    """A page of analysis runs plus the total count."""

    history: list[AnalysisHistoryEntry]
    total: int


@dataclass
class ConfidencePoint:
    """Confidence of one analysis run."""

    version: int
    date: datetime
    confidence: float | None


@dataclass
class InsightEvolution:
    """How the AI insight set changed between two analysis runs."""

    previous_insights: list[str]
    current_insights: list[str]
    added_insights: list[str]
    removed_insights: list[str]
    consistent_insights: list[str]
    evolution_summary: str


@dataclass
class MetricChange:
    """Change of one key metric between two analysis runs."""

    metric: str
    from_value: float
    to_value: float
    change_percent: float
    is_significant: bool


@dataclass
class EvolutionComparison:
    """Full comparison of two analysis runs."""

    analysis_type: AnalysisType
    reference_id: str
    from_version: int
    to_version: int
    metric_changes: list[MetricChange] = field(default_factory=list)
    insight_evolution: InsightEvolution | None = None
    trends: list[TrendAnalysis] = field(default_factory=list)
    shifts: list[TrendShift] = field(default_factory=list)


@dataclass
class EvolutionExplanation:
    """Narrative explanation of an evolution comparison."""

    explanation: str
    factors: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
