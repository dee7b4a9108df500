"""Version repository for entity version snapshots."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from chronicle.core.exceptions import VersionConflictError
from chronicle.db.models.version import EntityVersion
from chronicle.db.repositories.base import BaseRepository
from chronicle.db.retry import db_read_retry


class VersionRepository(BaseRepository[EntityVersion, UUID]):
    """Repository for EntityVersion model operations.

    Versions are append-only; the repository exposes no update path.
    """

    model = EntityVersion

    def _entity_criteria(
        self, entity_type: str, entity_id: str, org_id: str | None
    ) -> list[Any]:
        criteria = [EntityVersion.entity_type == entity_type, EntityVersion.entity_id == entity_id]
        if org_id is not None:
            criteria.append(EntityVersion.org_id == org_id)
        return criteria

    async def get_latest(
        self, entity_type: str, entity_id: str, *, org_id: str | None = None
    ) -> EntityVersion | None:
        """Get the highest-numbered version of an entity.

        Returns:
            Latest version or None if the entity has never been captured
        """
        stmt = (
            select(EntityVersion)
            .where(*self._entity_criteria(entity_type, entity_id, org_id))
            .order_by(EntityVersion.version.desc())
        )
        return await self.fetch_one(stmt)

    async def get_by_version(
        self,
        entity_type: str,
        entity_id: str,
        version: int,
        *,
        org_id: str | None = None,
    ) -> EntityVersion | None:
        """Get a specific version of an entity by exact number."""
        stmt = select(EntityVersion).where(
            *self._entity_criteria(entity_type, entity_id, org_id),
            EntityVersion.version == version,
        )
        return await self.fetch_one(stmt)

    async def get_history(
        self,
        entity_type: str,
        entity_id: str,
        *,
        limit: int,
        offset: int = 0,
        before: datetime | None = None,
        after: datetime | None = None,
        org_id: str | None = None,
    ) -> tuple[list[EntityVersion], int]:
        """Get a page of an entity's versions, newest first, plus the total.

        Args:
            before: Only versions created strictly before this instant
            after: Only versions created strictly after this instant

        Returns:
            Tuple of (versions ordered by version desc, total matching count)
        """
        criteria = self._entity_criteria(entity_type, entity_id, org_id)
        if before is not None:
            criteria.append(EntityVersion.created_at < before)
        if after is not None:
            criteria.append(EntityVersion.created_at > after)

        stmt = (
            select(EntityVersion)
            .where(*criteria)
            .order_by(EntityVersion.version.desc())
            .limit(limit)
            .offset(offset)
        )
        versions = await self.fetch_all(stmt)
        total = await self.count_where(*criteria)
        return versions, total

    async def get_ascending(
        self,
        entity_type: str,
        entity_id: str,
        *,
        limit: int,
        org_id: str | None = None,
    ) -> list[EntityVersion]:
        """Get the first `limit` versions of an entity, oldest first."""
        stmt = (
            select(EntityVersion)
            .where(*self._entity_criteria(entity_type, entity_id, org_id))
            .order_by(EntityVersion.version.asc())
            .limit(limit)
        )
        return await self.fetch_all(stmt)

    async def get_org_changes(
        self,
        org_id: str,
        *,
        limit: int,
        offset: int = 0,
        entity_types: Sequence[str] | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        created_by: str | None = None,
    ) -> tuple[list[EntityVersion], int]:
        """Get an org's post-creation versions, newest first, plus the total.

        Initial versions (version 1) are excluded so the timeline shows
        changes rather than creations.
        """
        criteria: list[Any] = [EntityVersion.org_id == org_id, EntityVersion.version > 1]
        if entity_types:
            criteria.append(EntityVersion.entity_type.in_(list(entity_types)))
        if start_date is not None:
            criteria.append(EntityVersion.created_at >= start_date)
        if end_date is not None:
            criteria.append(EntityVersion.created_at <= end_date)
        if created_by is not None:
            criteria.append(EntityVersion.created_by == created_by)

        stmt = (
            select(EntityVersion)
            .where(*criteria)
            .order_by(EntityVersion.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        versions = await self.fetch_all(stmt)
        total = await self.count_where(*criteria)
        return versions, total

    async def get_created_since(
        self,
        org_id: str,
        since: datetime,
        *,
        entity_types: Sequence[str] | None = None,
    ) -> list[EntityVersion]:
        """Get CREATE versions recorded after a timestamp, newest first."""
        criteria: list[Any] = [
            EntityVersion.org_id == org_id,
            EntityVersion.change_type == "CREATE",
            EntityVersion.created_at > since,
        ]
        if entity_types:
            criteria.append(EntityVersion.entity_type.in_(list(entity_types)))

        stmt = select(EntityVersion).where(*criteria).order_by(EntityVersion.created_at.desc())
        return await self.fetch_all(stmt)

    async def get_in_window(
        self, org_id: str, period_start: datetime, period_end: datetime
    ) -> list[EntityVersion]:
        """Get every version in [period_start, period_end], newest first."""
        stmt = (
            select(EntityVersion)
            .where(
                EntityVersion.org_id == org_id,
                EntityVersion.created_at >= period_start,
                EntityVersion.created_at <= period_end,
            )
            .order_by(EntityVersion.created_at.desc())
        )
        return await self.fetch_all(stmt)

    @db_read_retry
    async def count_changes_since(self, org_id: str, since: datetime) -> int:
        """Count post-creation versions recorded after a timestamp."""
        stmt = select(func.count(EntityVersion.id)).where(
            EntityVersion.org_id == org_id,
            EntityVersion.created_at > since,
            EntityVersion.version > 1,
        )
        result = await self.db.execute(stmt)
        return result.scalar() or 0

    async def append(self, version: EntityVersion) -> EntityVersion:
        """Persist a new version row.

        The unique (entity_type, entity_id, version) index rejects a second
        writer of the same version number. The insert runs in a savepoint, so
        a conflict undoes only this row and keeps the caller's pending work.

        Raises:
            VersionConflictError: If the version number is already taken
        """
        try:
            async with self.db.begin_nested():
                self.db.add(version)
                await self.db.flush()
        except IntegrityError as exc:
            raise VersionConflictError(
                entity_type=version.entity_type,
                entity_id=version.entity_id,
                version=version.version,
            ) from exc
        return version
