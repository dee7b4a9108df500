"""Analysis history repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from chronicle.core.exceptions import VersionConflictError
from chronicle.db.models.analysis import AnalysisHistory
from chronicle.db.repositories.base import BaseRepository


class AnalysisHistoryRepository(BaseRepository[AnalysisHistory, UUID]):
    """Repository for AnalysisHistory model operations."""

    model = AnalysisHistory

    async def get_latest(self, analysis_type: str, reference_id: str) -> AnalysisHistory | None:
        """Get the newest analysis version for a reference."""
        stmt = (
            select(AnalysisHistory)
            .where(
                AnalysisHistory.analysis_type == analysis_type,
                AnalysisHistory.reference_id == reference_id,
            )
            .order_by(AnalysisHistory.analysis_version.desc())
        )
        return await self.fetch_one(stmt)

    async def get_newest(
        self, analysis_type: str, reference_id: str, *, limit: int, offset: int = 0
    ) -> list[AnalysisHistory]:
        """Get analysis versions newest first."""
        stmt = (
            select(AnalysisHistory)
            .where(
                AnalysisHistory.analysis_type == analysis_type,
                AnalysisHistory.reference_id == reference_id,
            )
            .order_by(AnalysisHistory.analysis_version.desc())
            .limit(limit)
            .offset(offset)
        )
        return await self.fetch_all(stmt)

    async def get_ascending(
        self, analysis_type: str, reference_id: str, *, limit: int
    ) -> list[AnalysisHistory]:
        """Get the first `limit` analysis versions, oldest first."""
        stmt = (
            select(AnalysisHistory)
            .where(
                AnalysisHistory.analysis_type == analysis_type,
                AnalysisHistory.reference_id == reference_id,
            )
            .order_by(AnalysisHistory.analysis_version.asc())
            .limit(limit)
        )
        return await self.fetch_all(stmt)

    async def get_by_version(
        self, analysis_type: str, reference_id: str, analysis_version: int
    ) -> AnalysisHistory | None:
        """Get one analysis version by exact number."""
        stmt = select(AnalysisHistory).where(
            AnalysisHistory.analysis_type == analysis_type,
            AnalysisHistory.reference_id == reference_id,
            AnalysisHistory.analysis_version == analysis_version,
        )
        return await self.fetch_one(stmt)

    async def count_for(self, analysis_type: str, reference_id: str) -> int:
        """Count all analysis versions for a reference."""
        return await self.count_where(
            AnalysisHistory.analysis_type == analysis_type,
            AnalysisHistory.reference_id == reference_id,
        )

    async def append(self, entry: AnalysisHistory) -> AnalysisHistory:
        """Persist a new analysis version inside a savepoint.

        Raises:
            VersionConflictError: If the analysis version is already taken
        """
        try:
            async with self.db.begin_nested():
                self.db.add(entry)
                await self.db.flush()
        except IntegrityError as exc:
            raise VersionConflictError(
                entity_type=entry.analysis_type,
                entity_id=entry.reference_id,
                version=entry.analysis_version,
            ) from exc
        return entry
