"""Change summary aggregation.

Rolls the versions and alerts of a time window up into one stored
summary per (org, period, window start, summary type). Regenerating a
window overwrites its summary.

Classes:
    ChangeSummaryAggregator: Builds, stores and lists change summaries

Functions:
    summary_window: Previous complete daily, weekly or monthly window
"""

from collections import Counter
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.config.settings import get_settings
from chronicle.core.context import ensure_org_access
from chronicle.core.exceptions import InvalidPeriodError
from chronicle.core.logging import get_logger
from chronicle.db.models.alert import AlertSeverity, SummaryPeriod
from chronicle.db.models.version import ChangeType, EntityVersion
from chronicle.db.repositories.alert import AlertRepository, SummaryRepository
from chronicle.db.repositories.version import VersionRepository
from chronicle.notifications.types import ChangeSummaryEntry
from chronicle.tracking.types import entity_display_name

logger = get_logger(__name__)

DEFAULT_SUMMARY_TYPE = "overview"

_WINDOW_END_OFFSET = timedelta(microseconds=1)


def summary_window(
    period: SummaryPeriod | str, reference: datetime | None = None
) -> tuple[datetime, datetime]:
    """Get the last complete window of a period before a reference instant.

    Weeks start on Monday. Windows are inclusive on both ends; the end is
    one microsecond before the next window starts.

    Args:
        period: daily, weekly or monthly
        reference: Instant to look back from (defaults to now, UTC)

    Returns:
        Tuple of (period_start, period_end)

    Raises:
        InvalidPeriodError: If the period is not recognized
    """
    try:
        period = SummaryPeriod(period)
    except ValueError as exc:
        raise InvalidPeriodError(str(period)) from exc

    reference = reference or datetime.now(UTC)
    day_start = reference.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == SummaryPeriod.DAILY:
        end = day_start
        start = end - timedelta(days=1)
    elif period == SummaryPeriod.WEEKLY:
        end = day_start - timedelta(days=day_start.weekday())
        start = end - timedelta(days=7)
    else:
        end = day_start.replace(day=1)
        start = (end - timedelta(days=1)).replace(day=1)

    return start, end - _WINDOW_END_OFFSET


def _is_significant(version: EntityVersion) -> bool:
    return bool(version.delta and version.delta.get("hasSignificantChanges"))


class ChangeSummaryAggregator:
    """Builds periodic change summaries from versions and alerts.

    Flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.versions = VersionRepository(db)
        self.alerts = AlertRepository(db)
        self.summaries = SummaryRepository(db)
        self.tracking_config = get_settings().tracking

    async def generate_change_summary(
        self,
        org_id: str,
        period: SummaryPeriod | str,
        period_start: datetime,
        period_end: datetime,
        summary_type: str = DEFAULT_SUMMARY_TYPE,
    ) -> ChangeSummaryEntry:
        """Build and store the summary of one window.

        Counts versions in [period_start, period_end] by change type, picks
        the significant ones, adds highlights for new items, significant
        changes and critical alerts, and upserts the result.

        Args:
            org_id: Organization to summarize
            period: daily, weekly or monthly
            period_start: Window start (inclusive)
            period_end: Window end (inclusive)
            summary_type: Summary variant key

        Returns:
            The stored summary

        Raises:
            InvalidPeriodError: If the period is not recognized
        """
        ensure_org_access(org_id)
        try:
            period = SummaryPeriod(period)
        except ValueError as exc:
            raise InvalidPeriodError(str(period)) from exc

        versions = await self.versions.get_in_window(org_id, period_start, period_end)

        by_change_type = Counter(v.change_type for v in versions)
        new_items = by_change_type[ChangeType.CREATE.value]
        updated_items = by_change_type[ChangeType.UPDATE.value]
        deleted_items = by_change_type[ChangeType.DELETE.value]
        significant = [v for v in versions if _is_significant(v)]

        critical_alerts = await self.alerts.count_in_window(
            org_id, period_start, period_end, severity=AlertSeverity.CRITICAL.value
        )
        alert_count = await self.alerts.count_in_window(org_id, period_start, period_end)

        highlights: list[dict[str, Any]] = []
        if new_items > 0:
            highlights.append(
                {
                    "type": "new_items",
                    "title": f"{new_items} new items created",
                    "description": "New content was added during this period",
                }
            )
        if significant:
            highlights.append(
                {
                    "type": "significant_changes",
                    "title": f"{len(significant)} significant changes",
                    "description": "Notable updates that may require attention",
                }
            )
        if critical_alerts > 0:
            highlights.append(
                {
                    "type": "critical_alerts",
                    "title": f"{critical_alerts} critical alerts",
                    "description": "Important changes that need immediate review",
                }
            )

        top_changes = [
            {
                "entityType": v.entity_type,
                "entityId": v.entity_id,
                "entityName": entity_display_name(v.data or {}, v.entity_id),
                "changeType": v.change_type,
                "summary": (v.delta or {}).get("summary") or v.change_summary or "Changes made",
            }
            for v in significant[: self.tracking_config.top_changes_limit]
        ]

        metrics = {
            "totalChanges": len(versions),
            "changesByType": {
                "create": new_items,
                "update": updated_items,
                "delete": deleted_items,
            },
            "changesByEntityType": dict(Counter(v.entity_type for v in versions)),
            "alertCount": alert_count,
        }

        summary = await self.summaries.upsert(
            org_id,
            period.value,
            period_start,
            summary_type,
            {
                "period_end": period_end,
                "metrics": metrics,
                "highlights": highlights,
                "new_items": new_items,
                "updated_items": updated_items,
                "deleted_items": deleted_items,
                "significant_changes": len(significant),
                "top_changes": top_changes,
            },
        )

        logger.info(
            "change_summary_generated",
            org_id=org_id,
            period=period.value,
            summary_type=summary_type,
            total_changes=len(versions),
            significant_changes=len(significant),
            critical_alerts=critical_alerts,
        )
        return ChangeSummaryEntry.from_model(summary)

    async def get_change_summaries(
        self,
        org_id: str,
        *,
        period: SummaryPeriod | str | None = None,
        summary_type: str | None = None,
        limit: int | None = None,
    ) -> list[ChangeSummaryEntry]:
        """List stored summaries, most recent window first."""
        ensure_org_access(org_id)
        rows = await self.summaries.list_for_org(
            org_id,
            limit=self.tracking_config.summary_page_size if limit is None else limit,
            period=SummaryPeriod(period).value if period is not None else None,
            summary_type=summary_type,
        )
        return [ChangeSummaryEntry.from_model(r) for r in rows]

    async def generate_periodic_summary(
        self,
        org_id: str,
        period: SummaryPeriod | str,
        reference: datetime | None = None,
        summary_type: str = DEFAULT_SUMMARY_TYPE,
    ) -> ChangeSummaryEntry:
        """Summarize the last complete window of a period before `reference`."""
        period_start, period_end = summary_window(period, reference)
        return await self.generate_change_summary(
            org_id, period, period_start, period_end, summary_type
        )
