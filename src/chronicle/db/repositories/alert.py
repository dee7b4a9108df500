"""Alert and change summary repositories."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, select, update

from chronicle.db.models.alert import ChangeAlert, ChangeSummary
from chronicle.db.repositories.base import BaseRepository

# Declaration order of AlertSeverity: sorting desc puts CRITICAL first
SEVERITY_RANK = {"INFO": 0, "WARNING": 1, "CRITICAL": 2}


class AlertRepository(BaseRepository[ChangeAlert, UUID]):
    """Repository for ChangeAlert model operations."""

    model = ChangeAlert

    async def query(
        self,
        org_id: str,
        *,
        limit: int,
        offset: int = 0,
        alert_types: Sequence[str] | None = None,
        severities: Sequence[str] | None = None,
        entity_types: Sequence[str] | None = None,
        include_read: bool = False,
        include_dismissed: bool = False,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> tuple[list[ChangeAlert], int]:
        """Get a page of alerts, most severe and newest first, plus the total."""
        criteria: list[Any] = [ChangeAlert.org_id == org_id]
        if alert_types:
            criteria.append(ChangeAlert.alert_type.in_(list(alert_types)))
        if severities:
            criteria.append(ChangeAlert.severity.in_(list(severities)))
        if entity_types:
            criteria.append(ChangeAlert.entity_type.in_(list(entity_types)))
        if not include_read:
            criteria.append(ChangeAlert.is_read.is_(False))
        if not include_dismissed:
            criteria.append(ChangeAlert.is_dismissed.is_(False))
        if start_date is not None:
            criteria.append(ChangeAlert.created_at >= start_date)
        if end_date is not None:
            criteria.append(ChangeAlert.created_at <= end_date)

        severity_rank = case(SEVERITY_RANK, value=ChangeAlert.severity, else_=-1)
        stmt = (
            select(ChangeAlert)
            .where(*criteria)
            .order_by(severity_rank.desc(), ChangeAlert.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        alerts = await self.fetch_all(stmt)
        total = await self.count_where(*criteria)
        return alerts, total

    async def count_unread(self, org_id: str) -> int:
        """Count alerts that are neither read nor dismissed."""
        return await self.count_where(
            ChangeAlert.org_id == org_id,
            ChangeAlert.is_read.is_(False),
            ChangeAlert.is_dismissed.is_(False),
        )

    async def count_in_window(
        self,
        org_id: str,
        period_start: datetime,
        period_end: datetime,
        *,
        severity: str | None = None,
    ) -> int:
        """Count alerts created in [period_start, period_end]."""
        criteria: list[Any] = [
            ChangeAlert.org_id == org_id,
            ChangeAlert.created_at >= period_start,
            ChangeAlert.created_at <= period_end,
        ]
        if severity is not None:
            criteria.append(ChangeAlert.severity == severity)
        return await self.count_where(*criteria)

    async def mark_all_read(self, org_id: str) -> int:
        """Flip is_read on every unread alert of an org.

        Returns:
            Number of alerts flipped
        """
        stmt = (
            update(ChangeAlert)
            .where(ChangeAlert.org_id == org_id, ChangeAlert.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.db.execute(stmt)
        await self.db.flush()
        return result.rowcount or 0


class SummaryRepository(BaseRepository[ChangeSummary, UUID]):
    """Repository for ChangeSummary model operations."""

    model = ChangeSummary

    async def get_for_window(
        self, org_id: str, period: str, period_start: datetime, summary_type: str
    ) -> ChangeSummary | None:
        """Get the summary row for an exact window key."""
        stmt = select(ChangeSummary).where(
            ChangeSummary.org_id == org_id,
            ChangeSummary.period == period,
            ChangeSummary.period_start == period_start,
            ChangeSummary.summary_type == summary_type,
        )
        return await self.fetch_one(stmt)

    async def upsert(
        self,
        org_id: str,
        period: str,
        period_start: datetime,
        summary_type: str,
        values: dict[str, Any],
    ) -> ChangeSummary:
        """Insert or overwrite the summary for a window key.

        Read-then-write inside the caller's transaction; the unique window
        index rejects a concurrent duplicate insert.
        """
        existing = await self.get_for_window(org_id, period, period_start, summary_type)
        if existing is not None:
            return await self.update(existing, values)

        summary = ChangeSummary(
            org_id=org_id,
            period=period,
            period_start=period_start,
            summary_type=summary_type,
            **values,
        )
        return await self.create(summary)

    async def list_for_org(
        self,
        org_id: str,
        *,
        limit: int,
        period: str | None = None,
        summary_type: str | None = None,
    ) -> list[ChangeSummary]:
        """Get stored summaries, most recent window first."""
        criteria: list[Any] = [ChangeSummary.org_id == org_id]
        if period is not None:
            criteria.append(ChangeSummary.period == period)
        if summary_type is not None:
            criteria.append(ChangeSummary.summary_type == summary_type)

        stmt = (
            select(ChangeSummary)
            .where(*criteria)
            .order_by(ChangeSummary.period_start.desc())
            .limit(limit)
        )
        return await self.fetch_all(stmt)
