"""Types and data models for change tracking.

Defines field and entity deltas, significance configuration, and the
read models returned by the version store.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from chronicle.db.models.version import ChangeType, EntityVersion, VersionedEntityType

# =============================================================================
# Enums
# =============================================================================


class FieldChangeType(str, Enum):
    """How a single field changed between two snapshots."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


# =============================================================================
# Significance Configuration
# =============================================================================


class AbsoluteThreshold(BaseModel):
    """Minimum absolute numeric change that counts as significant."""

    min: float = Field(ge=0)


class RelativeThreshold(BaseModel):
    """Minimum relative change (fraction, 0.05 = 5%) that counts as significant."""

    threshold: float = Field(ge=0)


class SignificanceConfig(BaseModel):
    """Per-field significance rule.

    Either condition triggers significance on its own; a config may define
    one, both, or neither.
    """

    absolute: AbsoluteThreshold | None = None
    relative: RelativeThreshold | None = None


# =============================================================================
# Deltas
# =============================================================================


@dataclass
class FieldDelta:
    """One changed field between two snapshots.

    Attributes:
        field: Field name
        old_value: Previous value (None when added)
        new_value: Current value (None when removed)
        change_type: added / removed / modified
        is_significant: Whether the change crosses its materiality threshold
        change_percent: Relative change, only for numeric modifications
    """

    field: str
    old_value: Any
    new_value: Any
    change_type: FieldChangeType
    is_significant: bool
    change_percent: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape stored in EntityVersion.delta."""
        data: dict[str, Any] = {
            "field": self.field,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "changeType": self.change_type.value,
            "isSignificant": self.is_significant,
        }
        if self.change_percent is not None:
            data["changePercent"] = self.change_percent
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDelta":
        """Rebuild from the stored JSON shape."""
        return cls(
            field=data["field"],
            old_value=data.get("oldValue"),
            new_value=data.get("newValue"),
            change_type=FieldChangeType(data["changeType"]),
            is_significant=bool(data.get("isSignificant", False)),
            change_percent=data.get("changePercent"),
        )


@dataclass
class EntityDelta:
    """Aggregate diff between two entity snapshots.

    Attributes:
        fields: Per-field changes
        changed_field_names: Names of all changed fields, in detection order
        has_significant_changes: True if any field change is significant
        summary: Human-readable one-line description
    """

    fields: list[FieldDelta] = field(default_factory=list)
    changed_field_names: list[str] = field(default_factory=list)
    has_significant_changes: bool = False
    summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape stored in EntityVersion.delta."""
        return {
            "fields": [f.to_dict() for f in self.fields],
            "changedFieldNames": list(self.changed_field_names),
            "hasSignificantChanges": self.has_significant_changes,
            "summary": self.summary,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntityDelta":
        """Rebuild from the stored JSON shape."""
        return cls(
            fields=[FieldDelta.from_dict(f) for f in data.get("fields", [])],
            changed_field_names=list(data.get("changedFieldNames", [])),
            has_significant_changes=bool(data.get("hasSignificantChanges", False)),
            summary=data.get("summary", ""),
        )


# =============================================================================
# Version Store Read Models
# =============================================================================


def entity_display_name(data: dict[str, Any], entity_id: str) -> str:
    """Display name of a snapshot: name, then title, then the entity id."""
    return str(data.get("name") or data.get("title") or entity_id)


@dataclass
class VersionEntry:
    """Read model of a stored entity version."""

    id: UUID
    org_id: str
    entity_type: str
    entity_id: str
    version: int
    data: dict[str, Any]
    delta: EntityDelta | None
    changed_fields: list[str]
    change_type: ChangeType
    change_summary: str | None
    created_by: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, row: EntityVersion) -> "VersionEntry":
        """Map a database row to a VersionEntry."""
        return cls(
            id=row.id,
            org_id=row.org_id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            version=row.version,
            data=dict(row.data or {}),
            delta=EntityDelta.from_dict(row.delta) if row.delta else None,
            changed_fields=list(row.changed_fields or []),
            change_type=ChangeType(row.change_type),
            change_summary=row.change_summary,
            created_by=row.created_by,
            created_at=row.created_at,
        )


@dataclass
class VersionHistoryPage:
    """A page of versions plus the total matching count."""

    versions: list[VersionEntry]
    total: int


@dataclass
class VersionSnapshot:
    """One side of a version comparison."""

    version: int
    data: dict[str, Any]
    created_at: datetime


@dataclass
class VersionComparison:
    """Before/after view of two versions with a freshly computed delta."""

    entity_type: str
    entity_id: str
    before: VersionSnapshot
    after: VersionSnapshot
    delta: EntityDelta


@dataclass
class ChangeTimelineEntry:
    """One post-creation change in an organization's timeline."""

    id: UUID
    entity_type: str
    entity_id: str
    entity_name: str
    change_type: ChangeType
    summary: str
    changed_fields: list[str]
    is_significant: bool
    created_by: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, row: EntityVersion) -> "ChangeTimelineEntry":
        """Map a database row to a timeline entry.

        Versions without a stored delta count as significant.
        """
        delta = row.delta or None
        return cls(
            id=row.id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            entity_name=entity_display_name(row.data or {}, row.entity_id),
            change_type=ChangeType(row.change_type),
            summary=row.change_summary or "Changes made",
            changed_fields=list(row.changed_fields or []),
            is_significant=bool(delta["hasSignificantChanges"]) if delta else True,
            created_by=row.created_by,
            created_at=row.created_at,
        )


@dataclass
class ChangeTimelinePage:
    """A page of timeline entries plus the total matching count.

    The total counts rows before the significant-only filter is applied.
    """

    changes: list[ChangeTimelineEntry]
    total: int


class ChangeTimelineOptions(BaseModel):
    """Filters for an organization change timeline."""

    entity_types: list[VersionedEntityType] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)
    significant_only: bool = False
    user_id: str | None = None


@dataclass
class NewItem:
    """An entity created since a point in time."""

    id: str
    name: str
    created_at: datetime


@dataclass
class NewItemsSummary:
    """Newly created entities of one type."""

    entity_type: VersionedEntityType
    count: int
    items: list[NewItem] = field(default_factory=list)
