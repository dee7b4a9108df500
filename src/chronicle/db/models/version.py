"""Entity version snapshot models."""

from enum import Enum
from uuid import UUID

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from uuid_utils.compat import uuid7

from .base import Base, CreatedAtMixin, PortableJSON, PortableUUID


class VersionedEntityType(str, Enum):
    """Entity types whose state is versioned."""

    AUDIENCE = "audience"
    CROSSTAB = "crosstab"
    INSIGHT = "insight"
    CHART = "chart"
    REPORT = "report"
    DASHBOARD = "dashboard"
    BRAND_TRACKING = "brand_tracking"


class ChangeType(str, Enum):
    """Kind of mutation that produced a version."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    REGENERATE = "REGENERATE"  # AI-generated content refreshed


class EntityVersion(Base, CreatedAtMixin):
    """Immutable snapshot of an entity's full field state.

    Versions for a given (entity_type, entity_id) form a gap-free ascending
    sequence starting at 1; the highest version is the current state. Rows
    are append-only and never updated.
    """

    __tablename__ = "entity_versions"

    id: Mapped[UUID] = mapped_column(PortableUUID(), primary_key=True, default=uuid7)
    org_id: Mapped[str] = mapped_column(String(255), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(255), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    # Full snapshot and the diff against the preceding version
    data: Mapped[dict] = mapped_column(PortableJSON(), nullable=False)
    delta: Mapped[dict | None] = mapped_column(PortableJSON(), nullable=True)
    changed_fields: Mapped[list] = mapped_column(PortableJSON(), nullable=False, default=list)

    change_type: Mapped[str] = mapped_column(String(20), nullable=False)
    change_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        # Unique so concurrent writers of the same N+1 collide instead of duplicating
        Index("idx_entity_version_unique", "entity_type", "entity_id", "version", unique=True),
        Index("idx_entity_version_org_created", "org_id", "created_at"),
        Index("idx_entity_version_org_change_type", "org_id", "change_type"),
        Index("idx_entity_version_created_by", "created_by"),
    )

    def __repr__(self) -> str:
        return (
            f"<EntityVersion(id={self.id}, entity={self.entity_type}:{self.entity_id}, "
            f"version={self.version}, change_type={self.change_type})>"
        )
