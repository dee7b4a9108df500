"""Entity change tracking: delta computation and version storage."""

from chronicle.tracking.delta_engine import (
    IGNORED_FIELDS,
    PRIORITY_FIELDS,
    SIGNIFICANCE_THRESHOLDS,
    DeltaEngine,
    compute_delta,
    create_delta_engine,
    deep_equal,
)
from chronicle.tracking.types import (
    AbsoluteThreshold,
    ChangeTimelineEntry,
    ChangeTimelineOptions,
    ChangeTimelinePage,
    EntityDelta,
    FieldChangeType,
    FieldDelta,
    NewItem,
    NewItemsSummary,
    RelativeThreshold,
    SignificanceConfig,
    VersionComparison,
    VersionEntry,
    VersionHistoryPage,
    VersionSnapshot,
)
from chronicle.tracking.version_store import ChangeTrackingService

__all__ = [
    # Delta engine
    "DeltaEngine",
    "compute_delta",
    "create_delta_engine",
    "deep_equal",
    "IGNORED_FIELDS",
    "PRIORITY_FIELDS",
    "SIGNIFICANCE_THRESHOLDS",
    # Version store
    "ChangeTrackingService",
    # Types
    "AbsoluteThreshold",
    "ChangeTimelineEntry",
    "ChangeTimelineOptions",
    "ChangeTimelinePage",
    "EntityDelta",
    "FieldChangeType",
    "FieldDelta",
    "NewItem",
    "NewItemsSummary",
    "RelativeThreshold",
    "SignificanceConfig",
    "VersionComparison",
    "VersionEntry",
    "VersionHistoryPage",
    "VersionSnapshot",
]
