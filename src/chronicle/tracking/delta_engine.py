"""Delta Engine for field-level snapshot comparison.

This module computes the differences between two JSON-like entity
snapshots, classifies each changed field, and flags materiality using
per-field numeric thresholds. It performs no I/O.

Classes:
    DeltaEngine: Computes EntityDelta objects with a configurable threshold table

Functions:
    compute_delta: Convenience wrapper around the default engine
    deep_equal: Structural equality over JSON-like values
"""

from typing import Any

from chronicle.db.models.version import VersionedEntityType
from chronicle.tracking.types import (
    AbsoluteThreshold,
    EntityDelta,
    FieldChangeType,
    FieldDelta,
    RelativeThreshold,
    SignificanceConfig,
)
from chronicle.utils.numbers import change_percent, format_percent, is_number

# =============================================================================
# Thresholds
# =============================================================================

SIGNIFICANCE_THRESHOLDS: dict[str, SignificanceConfig] = {
    "audience_size": SignificanceConfig(relative=RelativeThreshold(threshold=0.10)),
    "brand_health": SignificanceConfig(absolute=AbsoluteThreshold(min=5)),
    "market_share": SignificanceConfig(relative=RelativeThreshold(threshold=0.05)),
    "nps": SignificanceConfig(absolute=AbsoluteThreshold(min=10)),
    "sentiment": SignificanceConfig(absolute=AbsoluteThreshold(min=0.1)),  # -1..1 scale
    "awareness": SignificanceConfig(relative=RelativeThreshold(threshold=0.05)),
    "consideration": SignificanceConfig(relative=RelativeThreshold(threshold=0.05)),
    "preference": SignificanceConfig(relative=RelativeThreshold(threshold=0.05)),
    "default": SignificanceConfig(relative=RelativeThreshold(threshold=0.10)),
}

IGNORED_FIELDS = frozenset({"updatedAt", "createdAt", "id", "orgId"})

# Fields preferred when a summary names a single change
PRIORITY_FIELDS = ("size", "name", "status", "brandHealth", "marketShare", "nps")


# =============================================================================
# Equality
# =============================================================================


def deep_equal(a: Any, b: Any) -> bool:
    """Structural equality over dicts, lists and primitives.

    Numbers compare by value regardless of int/float, but booleans are
    their own type, so True never equals 1.
    """
    if is_number(a) and is_number(b):
        return a == b
    if type(a) is not type(b):
        return False
    if isinstance(a, dict):
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, (list, tuple)):
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b, strict=True))
    return a == b


# =============================================================================
# Delta Engine
# =============================================================================


class DeltaEngine:
    """Computes field-level deltas between entity snapshots.

    Attributes:
        thresholds: Significance rules keyed by field name, with a "default"
            entry used for fields that have no rule of their own
    """

    def __init__(self, thresholds: dict[str, SignificanceConfig] | None = None) -> None:
        """Initialize the engine.

        Args:
            thresholds: Optional threshold table. Uses SIGNIFICANCE_THRESHOLDS if not provided.
        """
        self.thresholds = thresholds if thresholds is not None else SIGNIFICANCE_THRESHOLDS

    def compute_delta(
        self,
        old_data: dict[str, Any],
        new_data: dict[str, Any],
        entity_type: VersionedEntityType | str,
    ) -> EntityDelta:
        """Compute the delta between two snapshots.

        Keys are visited in the order they appear in old_data, then any keys
        only in new_data. Bookkeeping fields (ids, timestamps, org) are skipped.

        Args:
            old_data: Previous snapshot
            new_data: Current snapshot
            entity_type: Type of the entity both snapshots belong to

        Returns:
            EntityDelta with per-field changes and a summary
        """
        fields: list[FieldDelta] = []
        all_keys = list(dict.fromkeys([*old_data.keys(), *new_data.keys()]))

        for key in all_keys:
            if key in IGNORED_FIELDS:
                continue

            in_old = key in old_data
            in_new = key in new_data

            if not in_old and in_new:
                fields.append(
                    FieldDelta(
                        field=key,
                        old_value=None,
                        new_value=new_data[key],
                        change_type=FieldChangeType.ADDED,
                        is_significant=True,
                    )
                )
            elif in_old and not in_new:
                fields.append(
                    FieldDelta(
                        field=key,
                        old_value=old_data[key],
                        new_value=None,
                        change_type=FieldChangeType.REMOVED,
                        is_significant=True,
                    )
                )
            elif not deep_equal(old_data[key], new_data[key]):
                is_significant, percent = self.check_significance(
                    key, old_data[key], new_data[key], entity_type
                )
                fields.append(
                    FieldDelta(
                        field=key,
                        old_value=old_data[key],
                        new_value=new_data[key],
                        change_type=FieldChangeType.MODIFIED,
                        is_significant=is_significant,
                        change_percent=percent,
                    )
                )

        return EntityDelta(
            fields=fields,
            changed_field_names=[f.field for f in fields],
            has_significant_changes=any(f.is_significant for f in fields),
            summary=self.generate_summary(fields),
        )

    def check_significance(
        self,
        field: str,
        old_value: Any,
        new_value: Any,
        entity_type: VersionedEntityType | str,
    ) -> tuple[bool, float | None]:
        """Decide whether a modified field is significant.

        Non-numeric changes are always significant. Numeric changes are
        significant when either the relative or the absolute rule of the
        field's config is met.

        Returns:
            Tuple of (is_significant, change_percent or None for non-numeric)
        """
        config = self.thresholds.get(field) or self.thresholds["default"]

        if not (is_number(old_value) and is_number(new_value)):
            return True, None

        percent = change_percent(old_value, new_value)

        if config.relative is not None and abs(percent) >= config.relative.threshold:
            return True, percent

        if config.absolute is not None and abs(new_value - old_value) >= config.absolute.min:
            return True, percent

        return False, percent

    def generate_summary(self, fields: list[FieldDelta]) -> str:
        """Build the one-line summary for a set of field changes."""
        if not fields:
            return "No changes detected"

        significant = [f for f in fields if f.is_significant]
        if not significant:
            return f"{len(fields)} minor change{'s' if len(fields) > 1 else ''}"

        priority = next((f for f in significant if f.field in PRIORITY_FIELDS), None)
        if priority is not None:
            summary = f"{priority.field} {self._change_direction(priority)}"
            if priority.change_percent is not None:
                summary += f" ({format_percent(priority.change_percent)})"
            return summary

        return f"{len(significant)} significant change{'s' if len(significant) > 1 else ''}"

    @staticmethod
    def _change_direction(change: FieldDelta) -> str:
        if change.change_type == FieldChangeType.ADDED:
            return "added"
        if change.change_type == FieldChangeType.REMOVED:
            return "removed"
        if is_number(change.old_value) and is_number(change.new_value):
            return "increased" if change.new_value > change.old_value else "decreased"
        return "changed"


def create_delta_engine(thresholds: dict[str, SignificanceConfig] | None = None) -> DeltaEngine:
    """Create a delta engine with optional custom thresholds."""
    return DeltaEngine(thresholds=thresholds)


_default_engine = DeltaEngine()


def compute_delta(
    old_data: dict[str, Any],
    new_data: dict[str, Any],
    entity_type: VersionedEntityType | str,
) -> EntityDelta:
    """Compute a delta with the default threshold table."""
    return _default_engine.compute_delta(old_data, new_data, entity_type)
