"""Analysis evolution service.

Stores versioned AI analysis runs and explains how they evolve: metric
changes between runs, insight set changes, metric trends and trend shifts.
Also applies the same trend analysis to numeric fields of entity versions.

Classes:
    AnalysisEvolutionService: Analysis history, comparison and explanation
    EntityTrendService: Metric trends over entity version snapshots
"""

from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.config.settings import get_settings
from chronicle.core.context import ensure_org_access
from chronicle.core.logging import get_logger
from chronicle.db.models.analysis import AnalysisHistory, AnalysisType
from chronicle.db.models.base import utc_now
from chronicle.db.models.version import VersionedEntityType
from chronicle.db.repositories.analysis import AnalysisHistoryRepository
from chronicle.db.repositories.version import VersionRepository
from chronicle.evolution.shifts import detect_trend_shifts
from chronicle.evolution.trends import analyze_trend
from chronicle.evolution.types import (
    AnalysisHistoryEntry,
    AnalysisHistoryPage,
    ConfidencePoint,
    EvolutionComparison,
    EvolutionExplanation,
    InsightEvolution,
    MetricChange,
    ShiftSignificance,
    ShiftType,
    TrendAnalysis,
    TrendDataPoint,
)
from chronicle.utils.numbers import change_percent, is_number

logger = get_logger(__name__)

# Relative change at which a key metric change is significant
METRIC_SIGNIFICANCE_THRESHOLD = 0.1

MIN_TREND_POINTS = 2


# =============================================================================
# Pure Helpers
# =============================================================================


def trends_from_series(
    series: list[tuple[int, datetime, dict[str, Any], float | None]],
    metrics: list[str],
) -> list[TrendAnalysis]:
    """Build trend analyses from (version, date, values, confidence) rows.

    Rows missing a metric, or holding a non-numeric value for it, are
    skipped for that metric. Metrics with fewer than two points are omitted.
    """
    if len(series) < MIN_TREND_POINTS:
        return []

    trends: list[TrendAnalysis] = []
    for metric in metrics:
        points = [
            TrendDataPoint(version=version, date=date, value=values[metric], confidence=confidence)
            for version, date, values, confidence in series
            if is_number(values.get(metric))
        ]
        if len(points) < MIN_TREND_POINTS:
            continue
        trends.append(analyze_trend(metric, points))
    return trends


def calculate_metric_changes(
    from_metrics: dict[str, float], to_metrics: dict[str, float]
) -> list[MetricChange]:
    """Per-metric change between two runs, largest change first.

    A metric missing from one side counts as 0 on that side.
    """
    changes: list[MetricChange] = []
    for metric in dict.fromkeys([*from_metrics, *to_metrics]):
        from_value = from_metrics.get(metric, 0)
        to_value = to_metrics.get(metric, 0)
        percent = change_percent(from_value, to_value)
        changes.append(
            MetricChange(
                metric=metric,
                from_value=from_value,
                to_value=to_value,
                change_percent=percent,
                is_significant=abs(percent) >= METRIC_SIGNIFICANCE_THRESHOLD,
            )
        )
    return sorted(changes, key=lambda c: abs(c.change_percent), reverse=True)


def calculate_insight_evolution(
    previous_insights: list[str], current_insights: list[str]
) -> InsightEvolution:
    """Compare two insight lists, preserving their original order."""
    previous_set = set(previous_insights)
    current_set = set(current_insights)

    added = [i for i in current_insights if i not in previous_set]
    removed = [i for i in previous_insights if i not in current_set]
    consistent = [i for i in current_insights if i in previous_set]

    if not added and not removed:
        summary = "Insights remain consistent with previous analysis."
    elif len(added) > len(removed):
        summary = f"{len(added)} new insights identified. Analysis reveals additional patterns."
    elif len(removed) > len(added):
        summary = (
            f"{len(removed)} previous insights no longer apply. Data patterns have shifted."
        )
    else:
        summary = f"Analysis evolved with {len(added)} new and {len(removed)} outdated insights."

    return InsightEvolution(
        previous_insights=list(previous_insights),
        current_insights=list(current_insights),
        added_insights=added,
        removed_insights=removed,
        consistent_insights=consistent,
        evolution_summary=summary,
    )


def generate_evolution_explanation(comparison: EvolutionComparison) -> EvolutionExplanation:
    """Explain a comparison from its metric changes, shifts and insights.

    Args:
        comparison: Result of comparing two analysis runs

    Returns:
        Explanation text, contributing factors and recommendations
    """
    significant = [m for m in comparison.metric_changes if m.is_significant]
    factors: list[str] = []
    recommendations: list[str] = []

    for change in significant[:3]:
        direction = "increased" if change.change_percent > 0 else "decreased"
        factors.append(f"{change.metric} {direction} by {abs(change.change_percent * 100):.1f}%")

    for shift in comparison.shifts:
        if shift.significance != ShiftSignificance.LOW:
            factors.append(
                f"{shift.metric} shows {shift.shift_type.value} from "
                f"{shift.previous_direction.value} to {shift.new_direction.value}"
            )

    if any(s.shift_type == ShiftType.REVERSAL for s in comparison.shifts):
        recommendations.append("Review recent changes that may have caused trend reversals")

    insights = comparison.insight_evolution
    if insights is not None and insights.added_insights:
        recommendations.append(
            "Investigate newly identified patterns for actionable opportunities"
        )

    if any(m.change_percent < -METRIC_SIGNIFICANCE_THRESHOLD for m in significant):
        recommendations.append("Analyze factors contributing to declining metrics")

    explanation = (
        f"Analysis has evolved across {len(comparison.metric_changes)} metrics. "
        f"{len(significant)} show significant changes. "
        f"{insights.evolution_summary if insights else ''}"
    )

    return EvolutionExplanation(
        explanation=explanation, factors=factors, recommendations=recommendations
    )


# =============================================================================
# Analysis Evolution Service
# =============================================================================


class AnalysisEvolutionService:
    """Service for versioned analysis history and its evolution.

    Flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.history = AnalysisHistoryRepository(db)
        self.tracking_config = get_settings().tracking

    async def track_analysis(
        self,
        org_id: str,
        analysis_type: AnalysisType | str,
        reference_id: str,
        results: dict[str, Any],
        ai_insights: list[str],
        key_metrics: dict[str, float],
        *,
        confidence: float | None = None,
        data_source_date: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AnalysisHistoryEntry:
        """Store a new analysis run as the next version for its reference.

        Raises:
            VersionConflictError: If another writer took the same version number
        """
        ensure_org_access(org_id)
        analysis_type = AnalysisType(analysis_type).value

        latest = await self.history.get_latest(analysis_type, reference_id)
        next_version = latest.analysis_version + 1 if latest else 1

        row = await self.history.append(
            AnalysisHistory(
                org_id=org_id,
                analysis_type=analysis_type,
                reference_id=reference_id,
                analysis_version=next_version,
                results=results,
                ai_insights=list(ai_insights),
                key_metrics=dict(key_metrics),
                confidence=confidence,
                data_source_date=data_source_date,
                extra_metadata=metadata or {},
                created_at=utc_now(),
            )
        )

        logger.info(
            "analysis_tracked",
            org_id=org_id,
            analysis_type=analysis_type,
            reference_id=reference_id,
            analysis_version=next_version,
            insights=len(ai_insights),
            metrics=len(key_metrics),
        )
        return AnalysisHistoryEntry.from_model(row)

    async def get_analysis_history(
        self,
        analysis_type: AnalysisType | str,
        reference_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> AnalysisHistoryPage:
        """Get analysis runs, newest version first, plus the total count."""
        analysis_type = AnalysisType(analysis_type).value
        rows = await self.history.get_newest(
            analysis_type,
            reference_id,
            limit=self.tracking_config.history_page_size if limit is None else limit,
            offset=offset,
        )
        total = await self.history.count_for(analysis_type, reference_id)
        return AnalysisHistoryPage(
            history=[AnalysisHistoryEntry.from_model(r) for r in rows], total=total
        )

    async def get_latest_analysis(
        self, analysis_type: AnalysisType | str, reference_id: str
    ) -> AnalysisHistoryEntry | None:
        """Get the newest analysis run, or None."""
        row = await self.history.get_latest(AnalysisType(analysis_type).value, reference_id)
        return AnalysisHistoryEntry.from_model(row) if row else None

    async def get_confidence_history(
        self,
        analysis_type: AnalysisType | str,
        reference_id: str,
        periods: int | None = None,
    ) -> list[ConfidencePoint]:
        """Get the confidence of the first `periods` runs, oldest first."""
        rows = await self.history.get_ascending(
            AnalysisType(analysis_type).value,
            reference_id,
            limit=self.tracking_config.trend_periods if periods is None else periods,
        )
        return [
            ConfidencePoint(version=r.analysis_version, date=r.created_at, confidence=r.confidence)
            for r in rows
        ]

    async def get_metric_trends(
        self,
        analysis_type: AnalysisType | str,
        reference_id: str,
        metrics: list[str],
        periods: int | None = None,
    ) -> list[TrendAnalysis]:
        """Analyze key metric trends over the first `periods` runs.

        Args:
            metrics: Key metric names to analyze
            periods: Number of runs to load (defaults to the configured trend periods)
        """
        rows = await self.history.get_ascending(
            AnalysisType(analysis_type).value,
            reference_id,
            limit=self.tracking_config.trend_periods if periods is None else periods,
        )
        series = [
            (r.analysis_version, r.created_at, r.key_metrics or {}, r.confidence) for r in rows
        ]
        return trends_from_series(series, metrics)

    async def compare_versions(
        self,
        analysis_type: AnalysisType | str,
        reference_id: str,
        from_version: int,
        to_version: int,
    ) -> EvolutionComparison | None:
        """Compare two analysis runs.

        Returns:
            Comparison with metric changes, insight evolution, trends over
            the target run's metrics and detected shifts, or None if either
            run does not exist
        """
        analysis_type = AnalysisType(analysis_type)
        source = await self.history.get_by_version(analysis_type.value, reference_id, from_version)
        target = await self.history.get_by_version(analysis_type.value, reference_id, to_version)
        if source is None or target is None:
            return None

        trends = await self.get_metric_trends(
            analysis_type, reference_id, list((target.key_metrics or {}).keys())
        )

        return EvolutionComparison(
            analysis_type=analysis_type,
            reference_id=reference_id,
            from_version=from_version,
            to_version=to_version,
            metric_changes=calculate_metric_changes(
                source.key_metrics or {}, target.key_metrics or {}
            ),
            insight_evolution=calculate_insight_evolution(
                list(source.ai_insights or []), list(target.ai_insights or [])
            ),
            trends=trends,
            shifts=detect_trend_shifts(trends),
        )

    async def compare_with_previous(
        self, analysis_type: AnalysisType | str, reference_id: str
    ) -> EvolutionComparison | None:
        """Compare the newest run with the one before it, or None."""
        newest = await self.history.get_newest(
            AnalysisType(analysis_type).value, reference_id, limit=2
        )
        if len(newest) < 2:
            return None
        current, previous = newest
        return await self.compare_versions(
            analysis_type, reference_id, previous.analysis_version, current.analysis_version
        )

    calculate_insight_evolution = staticmethod(calculate_insight_evolution)
    generate_evolution_explanation = staticmethod(generate_evolution_explanation)


# =============================================================================
# Entity Trend Service
# =============================================================================


class EntityTrendService:
    """Trend analysis over numeric fields of entity version snapshots."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.versions = VersionRepository(db)
        self.tracking_config = get_settings().tracking

    async def get_entity_metric_trends(
        self,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        metrics: list[str],
        periods: int | None = None,
        *,
        org_id: str | None = None,
    ) -> list[TrendAnalysis]:
        """Analyze trends of snapshot fields over the first `periods` versions."""
        if org_id is not None:
            ensure_org_access(org_id)
        rows = await self.versions.get_ascending(
            VersionedEntityType(entity_type).value,
            entity_id,
            limit=self.tracking_config.trend_periods if periods is None else periods,
            org_id=org_id,
        )
        series = [(r.version, r.created_at, r.data or {}, None) for r in rows]
        return trends_from_series(series, metrics)
