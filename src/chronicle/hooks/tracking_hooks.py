"""Best-effort tracking hooks for entity mutation handlers.

CRUD handlers call these hooks after their own mutation has succeeded.
Each hook runs its tracking work in its own unit of work, commits it, and
reports the outcome as a HookResult. A failing hook rolls back its own
work, logs the failure, and never raises, so tracking can never undo or
abort the caller's operation.

Usage:
    hooks = ChangeTrackingHooks(db)
    result = await hooks.on_entity_updated(org_id, "audience", audience_id, old, new)
    if not result.success:
        ...  # optional: surface in diagnostics, never required

Classes:
    HookResult: Outcome of one hook call
    ChangeTrackingHooks: Hook entry points
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.core.logging import LogContext, get_logger, log_exception
from chronicle.db.models.alert import AlertSeverity, ChangeAlertType, SummaryPeriod
from chronicle.db.models.analysis import AnalysisType
from chronicle.db.models.version import ChangeType, VersionedEntityType
from chronicle.db.retry import version_conflict_retry
from chronicle.evolution.service import AnalysisEvolutionService
from chronicle.evolution.types import AnalysisHistoryEntry
from chronicle.notifications.alerts import ChangeNotificationService
from chronicle.notifications.summary import ChangeSummaryAggregator
from chronicle.notifications.types import AlertThreshold, ChangeAlertEntry, MetricValues
from chronicle.tracking.types import VersionEntry, entity_display_name
from chronicle.tracking.version_store import ChangeTrackingService
from chronicle.utils.numbers import is_number

logger = get_logger(__name__)

# Numeric snapshot fields forwarded to threshold alerting on update
THRESHOLD_FIELDS = (
    "size",
    "brandHealth",
    "marketShare",
    "nps",
    "sentiment",
    "awareness",
    "consideration",
    "preference",
    "loyalty",
)


@dataclass
class HookResult:
    """Outcome of a tracking hook.

    Attributes:
        hook: Hook name
        success: Whether the tracking work was committed
        value: Main product of the hook (version, analysis entry, alert or summary)
        alerts: Alerts raised as a side effect
        error: Error text when the hook failed
    """

    hook: str
    success: bool
    value: Any = None
    alerts: list[ChangeAlertEntry] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "hook": self.hook,
            "success": self.success,
            "alert_count": len(self.alerts),
            "error": self.error,
        }


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def extract_threshold_metrics(
    previous_data: dict[str, Any], new_data: dict[str, Any]
) -> dict[str, MetricValues]:
    """Pick the threshold fields that are numbers in both snapshots."""
    return {
        name: MetricValues(previous=previous_data[name], current=new_data[name])
        for name in THRESHOLD_FIELDS
        if is_number(previous_data.get(name)) and is_number(new_data.get(name))
    }


class ChangeTrackingHooks:
    """Fire-and-forget tracking entry points for CRUD handlers.

    The session passed in must not hold the caller's uncommitted work:
    every hook commits or rolls back the whole session.

    Attributes:
        db: Database session owned by the hooks
        alert_thresholds: Optional threshold rules for update alerts
    """

    def __init__(
        self,
        db: AsyncSession,
        alert_thresholds: list[AlertThreshold] | None = None,
    ):
        self.db = db
        self.alert_thresholds = alert_thresholds
        self.tracking = ChangeTrackingService(db)
        self.notifications = ChangeNotificationService(db)
        self.evolution = AnalysisEvolutionService(db)
        self.summaries = ChangeSummaryAggregator(db)

    # -------------------------------------------------------------------------
    # Entity Hooks
    # -------------------------------------------------------------------------

    async def on_entity_created(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        data: dict[str, Any],
        user_id: str | None = None,
    ) -> HookResult:
        """Record the first version of a new entity."""

        async def work(result: HookResult) -> None:
            result.value = await self._capture(
                org_id, entity_type, entity_id, data, ChangeType.CREATE, user_id
            )

        return await self._run(
            "on_entity_created", work, org_id=org_id, entity_type=entity_type, entity_id=entity_id
        )

    async def on_entity_updated(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        previous_data: dict[str, Any],
        new_data: dict[str, Any],
        user_id: str | None = None,
    ) -> HookResult:
        """Record an update and alert on threshold metric changes."""

        async def work(result: HookResult) -> None:
            result.value = await self._capture(
                org_id, entity_type, entity_id, new_data, ChangeType.UPDATE, user_id
            )
            metrics = extract_threshold_metrics(previous_data, new_data)
            if metrics:
                result.alerts = await self.notifications.check_thresholds_and_alert(
                    org_id,
                    entity_type,
                    entity_id,
                    entity_display_name(new_data, entity_id),
                    metrics,
                    self.alert_thresholds,
                )

        return await self._run(
            "on_entity_updated", work, org_id=org_id, entity_type=entity_type, entity_id=entity_id
        )

    async def on_entity_deleted(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        deleted_data: dict[str, Any],
        user_id: str | None = None,
    ) -> HookResult:
        """Record the final snapshot of a deleted entity."""

        async def work(result: HookResult) -> None:
            result.value = await self._capture(
                org_id, entity_type, entity_id, deleted_data, ChangeType.DELETE, user_id
            )

        return await self._run(
            "on_entity_deleted", work, org_id=org_id, entity_type=entity_type, entity_id=entity_id
        )

    async def on_ai_content_regenerated(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        new_data: dict[str, Any],
        user_id: str | None = None,
    ) -> HookResult:
        """Record a version produced by regenerating AI content."""

        async def work(result: HookResult) -> None:
            result.value = await self._capture(
                org_id, entity_type, entity_id, new_data, ChangeType.REGENERATE, user_id
            )

        return await self._run(
            "on_ai_content_regenerated",
            work,
            org_id=org_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    # -------------------------------------------------------------------------
    # Analysis and Data Hooks
    # -------------------------------------------------------------------------

    async def on_analysis_completed(
        self,
        org_id: str,
        analysis_type: AnalysisType | str,
        reference_id: str,
        results: dict[str, Any],
        ai_insights: list[str],
        key_metrics: dict[str, float],
        *,
        confidence: float | None = None,
        data_source_date: datetime | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> HookResult:
        """Store a completed analysis run in the analysis history."""

        @version_conflict_retry
        async def track() -> AnalysisHistoryEntry:
            return await self.evolution.track_analysis(
                org_id,
                analysis_type,
                reference_id,
                results,
                ai_insights,
                key_metrics,
                confidence=confidence,
                data_source_date=data_source_date,
                metadata=metadata,
            )

        async def work(result: HookResult) -> None:
            result.value = await track()

        return await self._run(
            "on_analysis_completed",
            work,
            org_id=org_id,
            analysis_type=_plain(analysis_type),
            reference_id=reference_id,
        )

    async def on_new_data_available(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        description: str,
    ) -> HookResult:
        """Raise an informational alert that fresh data has arrived."""

        async def work(result: HookResult) -> None:
            alert = await self.notifications.create_alert(
                org_id,
                entity_type,
                entity_id,
                ChangeAlertType.NEW_DATA_AVAILABLE,
                title="New data available",
                message=description,
                severity=AlertSeverity.INFO,
            )
            result.value = alert
            result.alerts = [alert]

        return await self._run(
            "on_new_data_available",
            work,
            org_id=org_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )

    async def on_summary_period_closed(
        self,
        org_id: str,
        period: SummaryPeriod | str,
        reference: datetime | None = None,
    ) -> HookResult:
        """Generate the summary of the window that just closed.

        Intended for a periodic job; the window is the last complete one
        before `reference`.
        """

        async def work(result: HookResult) -> None:
            result.value = await self.summaries.generate_periodic_summary(
                org_id, period, reference
            )

        return await self._run(
            "on_summary_period_closed", work, org_id=org_id, period=_plain(period)
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @version_conflict_retry
    async def _capture(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        data: dict[str, Any],
        change_type: ChangeType,
        user_id: str | None,
    ) -> VersionEntry:
        return await self.tracking.capture_version(
            org_id, entity_type, entity_id, data, change_type, user_id
        )

    async def _run(
        self,
        hook: str,
        work: Callable[[HookResult], Awaitable[None]],
        **log_context: Any,
    ) -> HookResult:
        result = HookResult(hook=hook, success=False)
        with LogContext(hook=hook, **{k: _plain(v) for k, v in log_context.items()}):
            try:
                await work(result)
                await self.db.commit()
            except Exception as exc:
                await self.db.rollback()
                log_exception(logger, exc, event="hook_failed")
                return HookResult(hook=hook, success=False, error=str(exc))

            result.success = True
            logger.debug("hook_completed", alert_count=len(result.alerts))
            return result
