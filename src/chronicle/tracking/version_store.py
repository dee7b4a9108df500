"""Version Store for entity change tracking.

Captures immutable, sequentially numbered snapshots of tracked entities,
computes deltas between consecutive snapshots, and serves history,
comparison, organization timeline and per-user "what's new" queries.

Classes:
    ChangeTrackingService: Append-only version capture and version queries
"""

from collections import defaultdict
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.config.settings import get_settings
from chronicle.core.context import ensure_org_access
from chronicle.core.logging import get_logger
from chronicle.db.models.base import utc_now
from chronicle.db.models.version import ChangeType, EntityVersion, VersionedEntityType
from chronicle.db.repositories.tracker import TrackerRepository
from chronicle.db.repositories.version import VersionRepository
from chronicle.tracking.delta_engine import DeltaEngine
from chronicle.tracking.types import (
    ChangeTimelineEntry,
    ChangeTimelineOptions,
    ChangeTimelinePage,
    NewItem,
    NewItemsSummary,
    VersionComparison,
    VersionEntry,
    VersionHistoryPage,
    VersionSnapshot,
    entity_display_name,
)

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class ChangeTrackingService:
    """Service for capturing and querying entity versions.

    The service flushes but never commits; the caller owns the transaction.

    Attributes:
        db: Database session
        delta_engine: Engine used to diff consecutive snapshots
    """

    def __init__(self, db: AsyncSession, delta_engine: DeltaEngine | None = None):
        """Initialize the change tracking service.

        Args:
            db: Database session
            delta_engine: Optional delta engine. Uses default thresholds if not provided.
        """
        self.db = db
        self.delta_engine = delta_engine or DeltaEngine()
        self.versions = VersionRepository(db)
        self.trackers = TrackerRepository(db)
        self.tracking_config = get_settings().tracking

    # -------------------------------------------------------------------------
    # Capture
    # -------------------------------------------------------------------------

    async def capture_version(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        data: dict[str, Any],
        change_type: ChangeType = ChangeType.UPDATE,
        user_id: str | None = None,
    ) -> VersionEntry:
        """Capture a new version of an entity.

        The new version number is one past the latest stored version, or 1
        for a first capture. Non-create changes against an existing version
        store a delta and take their summary from it.

        Args:
            org_id: Owning organization
            entity_type: Type of the entity
            entity_id: Entity identifier
            data: Full snapshot of the entity's fields
            change_type: Kind of change that produced this snapshot
            user_id: Actor that made the change

        Returns:
            The stored version

        Raises:
            VersionConflictError: If another writer took the same version number
        """
        ensure_org_access(org_id)
        entity_type = VersionedEntityType(entity_type).value
        change_type = ChangeType(change_type)

        latest = await self.versions.get_latest(entity_type, entity_id)
        next_version = latest.version + 1 if latest else 1

        delta = None
        changed_fields: list[str] = []
        if latest is not None and change_type != ChangeType.CREATE:
            entity_delta = self.delta_engine.compute_delta(latest.data, data, entity_type)
            delta = entity_delta.to_dict()
            changed_fields = entity_delta.changed_field_names
            change_summary = entity_delta.summary
        else:
            change_summary = f"Created {entity_type}: {entity_display_name(data, entity_id)}"

        row = await self.versions.append(
            EntityVersion(
                org_id=org_id,
                entity_type=entity_type,
                entity_id=entity_id,
                version=next_version,
                data=data,
                delta=delta,
                changed_fields=changed_fields,
                change_type=change_type.value,
                change_summary=change_summary,
                created_by=user_id,
                created_at=utc_now(),
            )
        )

        logger.info(
            "version_captured",
            org_id=org_id,
            entity_type=entity_type,
            entity_id=entity_id,
            version=next_version,
            change_type=change_type.value,
            changed_fields=len(changed_fields),
        )
        return VersionEntry.from_model(row)

    # -------------------------------------------------------------------------
    # Version Queries
    # -------------------------------------------------------------------------

    async def get_version_history(
        self,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
        before: datetime | None = None,
        after: datetime | None = None,
        org_id: str | None = None,
    ) -> VersionHistoryPage:
        """Get a page of an entity's versions, newest version first.

        Args:
            limit: Page size (defaults to the configured history page size)
            offset: Rows to skip
            before: Only versions created strictly before this instant
            after: Only versions created strictly after this instant
            org_id: Optional organization scope
        """
        if org_id is not None:
            ensure_org_access(org_id)
        rows, total = await self.versions.get_history(
            VersionedEntityType(entity_type).value,
            entity_id,
            limit=self.tracking_config.history_page_size if limit is None else limit,
            offset=offset,
            before=before,
            after=after,
            org_id=org_id,
        )
        return VersionHistoryPage(versions=[VersionEntry.from_model(r) for r in rows], total=total)

    async def compare_versions(
        self,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        version1: int,
        version2: int,
        *,
        org_id: str | None = None,
    ) -> VersionComparison | None:
        """Compare two versions of an entity.

        The older version is always reported as `before`, whatever the
        argument order.

        Returns:
            Comparison with a freshly computed delta, or None if either
            version does not exist
        """
        if org_id is not None:
            ensure_org_access(org_id)
        entity_type = VersionedEntityType(entity_type).value

        first = await self.versions.get_by_version(entity_type, entity_id, version1, org_id=org_id)
        second = await self.versions.get_by_version(
            entity_type, entity_id, version2, org_id=org_id
        )
        if first is None or second is None:
            return None

        before, after = (first, second) if first.version <= second.version else (second, first)
        delta = self.delta_engine.compute_delta(before.data, after.data, entity_type)

        return VersionComparison(
            entity_type=entity_type,
            entity_id=entity_id,
            before=VersionSnapshot(
                version=before.version, data=dict(before.data), created_at=before.created_at
            ),
            after=VersionSnapshot(
                version=after.version, data=dict(after.data), created_at=after.created_at
            ),
            delta=delta,
        )

    async def get_latest_version(
        self,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        *,
        org_id: str | None = None,
    ) -> VersionEntry | None:
        """Get the latest version of an entity, or None if never captured."""
        if org_id is not None:
            ensure_org_access(org_id)
        row = await self.versions.get_latest(
            VersionedEntityType(entity_type).value, entity_id, org_id=org_id
        )
        return VersionEntry.from_model(row) if row else None

    # -------------------------------------------------------------------------
    # Organization Timeline
    # -------------------------------------------------------------------------

    async def get_change_timeline(
        self,
        org_id: str,
        options: ChangeTimelineOptions | None = None,
    ) -> ChangeTimelinePage:
        """Get an organization's post-creation changes, newest first.

        The significant-only filter applies to the fetched page, so a page
        may hold fewer entries than the limit while the total still counts
        every matching change.
        """
        ensure_org_access(org_id)
        options = options or ChangeTimelineOptions()
        limit = self.tracking_config.timeline_page_size if options.limit is None else options.limit

        rows, total = await self.versions.get_org_changes(
            org_id,
            limit=limit,
            offset=options.offset,
            entity_types=[t.value for t in options.entity_types] if options.entity_types else None,
            start_date=options.start_date,
            end_date=options.end_date,
            created_by=options.user_id,
        )

        changes = [ChangeTimelineEntry.from_model(r) for r in rows]
        if options.significant_only:
            changes = [c for c in changes if c.is_significant]

        return ChangeTimelinePage(changes=changes, total=total)

    async def get_new_items_since(
        self,
        org_id: str,
        since: datetime,
        entity_types: Sequence[VersionedEntityType] | None = None,
    ) -> list[NewItemsSummary]:
        """Get entities created after a point in time, grouped by type."""
        ensure_org_access(org_id)
        type_filter = [VersionedEntityType(t).value for t in entity_types] if entity_types else None
        rows = await self.versions.get_created_since(org_id, since, entity_types=type_filter)

        grouped: dict[str, list[NewItem]] = defaultdict(list)
        for row in rows:
            grouped[row.entity_type].append(
                NewItem(
                    id=row.entity_id,
                    name=entity_display_name(row.data or {}, row.entity_id),
                    created_at=row.created_at,
                )
            )

        return [
            NewItemsSummary(
                entity_type=VersionedEntityType(entity_type), count=len(items), items=items
            )
            for entity_type, items in grouped.items()
        ]

    # -------------------------------------------------------------------------
    # User "What's New" Tracking
    # -------------------------------------------------------------------------

    async def track_user_visit(self, org_id: str, user_id: str) -> None:
        """Record that a user visited now."""
        ensure_org_access(org_id)
        await self.trackers.upsert(org_id, user_id, {"last_visit": utc_now()})
        logger.debug("user_visit_tracked", org_id=org_id, user_id=user_id)

    async def mark_changes_seen(self, org_id: str, user_id: str) -> None:
        """Record that a user has seen every change up to now."""
        ensure_org_access(org_id)
        await self.trackers.upsert(org_id, user_id, {"last_seen_changes": utc_now()})
        logger.debug("changes_marked_seen", org_id=org_id, user_id=user_id)

    async def get_user_last_visit(self, org_id: str, user_id: str) -> datetime | None:
        """Get when a user last visited, or None if never tracked."""
        ensure_org_access(org_id)
        tracker = await self.trackers.get_for_user(org_id, user_id)
        return tracker.last_visit if tracker else None

    async def get_last_seen_changes(self, org_id: str, user_id: str) -> datetime | None:
        """Get when a user last marked changes as seen, or None."""
        ensure_org_access(org_id)
        tracker = await self.trackers.get_for_user(org_id, user_id)
        return tracker.last_seen_changes if tracker else None

    async def get_unseen_changes_count(self, org_id: str, user_id: str) -> int:
        """Count post-creation changes a user has not seen yet.

        A user who never marked changes as seen has seen nothing.
        """
        last_seen = await self.get_last_seen_changes(org_id, user_id)
        return await self.versions.count_changes_since(org_id, last_seen or EPOCH)
