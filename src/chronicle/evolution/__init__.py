"""Analysis evolution: history, trends and trend shifts."""

from chronicle.evolution.service import (
    AnalysisEvolutionService,
    EntityTrendService,
    calculate_insight_evolution,
    calculate_metric_changes,
    generate_evolution_explanation,
)
from chronicle.evolution.shifts import detect_trend_shifts, slope_to_direction
from chronicle.evolution.trends import analyze_trend, calculate_slope, calculate_volatility
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
    TrendDirection,
    TrendShift,
)

__all__ = [
    # Services
    "AnalysisEvolutionService",
    "EntityTrendService",
    # Functions
    "analyze_trend",
    "calculate_insight_evolution",
    "calculate_metric_changes",
    "calculate_slope",
    "calculate_volatility",
    "detect_trend_shifts",
    "generate_evolution_explanation",
    "slope_to_direction",
    # Types
    "AnalysisHistoryEntry",
    "AnalysisHistoryPage",
    "ConfidencePoint",
    "EvolutionComparison",
    "EvolutionExplanation",
    "InsightEvolution",
    "MetricChange",
    "ShiftSignificance",
    "ShiftType",
    "TrendAnalysis",
    "TrendDataPoint",
    "TrendDirection",
    "TrendShift",
]
