"""Threshold alerting for metric changes.

Compares previous and current metric values against threshold rules and
persists a change alert for every rule that fires. Also manages the
read and dismissed flags of stored alerts.

Classes:
    ChangeNotificationService: Alert creation, threshold checks and alert state
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from chronicle.config.settings import get_settings
from chronicle.core.context import ensure_org_access
from chronicle.core.exceptions import AlertNotFoundError
from chronicle.core.logging import get_logger
from chronicle.db.models.alert import AlertSeverity, ChangeAlert, ChangeAlertType
from chronicle.db.models.base import utc_now
from chronicle.db.models.version import VersionedEntityType
from chronicle.db.repositories.alert import AlertRepository
from chronicle.notifications.types import (
    DEFAULT_ALERT_THRESHOLDS,
    AlertPage,
    AlertQueryOptions,
    AlertThreshold,
    ChangeAlertEntry,
    MetricValues,
    ThresholdType,
)
from chronicle.utils.numbers import change_percent, format_number, format_percent, humanize_metric

logger = get_logger(__name__)


# =============================================================================
# Threshold Logic
# =============================================================================


def threshold_exceeded(threshold: AlertThreshold, percent: float, absolute_change: float) -> bool:
    """Check whether a change satisfies a threshold rule."""
    value = abs(percent) if threshold.is_percentage else abs(absolute_change)
    if value < threshold.threshold:
        return False

    if threshold.type == ThresholdType.BOTH:
        return True
    if threshold.type == ThresholdType.INCREASE:
        return percent > 0
    if threshold.type == ThresholdType.DECREASE:
        return percent < 0
    return False


def alert_type_for(percent: float) -> ChangeAlertType:
    """Alert type for the direction of a change."""
    if percent > 0:
        return ChangeAlertType.SIGNIFICANT_INCREASE
    if percent < 0:
        return ChangeAlertType.SIGNIFICANT_DECREASE
    return ChangeAlertType.THRESHOLD_CROSSED


def alert_title(metric: str, percent: float, entity_name: str) -> str:
    """e.g. 'brand Health decreased for Acme'."""
    direction = "increased" if percent > 0 else "decreased"
    return f"{humanize_metric(metric)} {direction} for {entity_name}"


def alert_message(metric: str, values: MetricValues, percent: float, entity_name: str) -> str:
    """e.g. 'Acme: brandHealth changed from 80 to 70 (-12.5%)'."""
    return (
        f"{entity_name}: {metric} changed from {format_number(values.previous)} "
        f"to {format_number(values.current)} ({format_percent(percent)})"
    )


def _as_metric_values(values: MetricValues | dict[str, float]) -> MetricValues:
    if isinstance(values, MetricValues):
        return values
    return MetricValues(previous=values["previous"], current=values["current"])


# =============================================================================
# Notification Service
# =============================================================================


class ChangeNotificationService:
    """Service for change alerts.

    Flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.alerts = AlertRepository(db)
        self.tracking_config = get_settings().tracking

    async def create_alert(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        alert_type: ChangeAlertType,
        *,
        title: str,
        message: str,
        severity: AlertSeverity = AlertSeverity.INFO,
        metric: str | None = None,
        previous_value: Any = None,
        current_value: Any = None,
        change_percent: float | None = None,
        threshold: float | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ChangeAlertEntry:
        """Persist a change alert."""
        ensure_org_access(org_id)
        alert = await self.alerts.create(
            ChangeAlert(
                org_id=org_id,
                entity_type=VersionedEntityType(entity_type).value,
                entity_id=entity_id,
                alert_type=ChangeAlertType(alert_type).value,
                severity=AlertSeverity(severity).value,
                title=title,
                message=message,
                metric=metric,
                previous_value=previous_value,
                current_value=current_value,
                change_percent=change_percent,
                threshold=threshold,
                is_read=False,
                is_dismissed=False,
                extra_metadata=metadata or {},
                created_at=utc_now(),
            )
        )

        logger.info(
            "change_alert_created",
            org_id=org_id,
            alert_id=str(alert.id),
            alert_type=alert.alert_type,
            severity=alert.severity,
            entity_type=alert.entity_type,
            entity_id=entity_id,
            metric=metric,
        )
        return ChangeAlertEntry.from_model(alert)

    async def check_thresholds_and_alert(
        self,
        org_id: str,
        entity_type: VersionedEntityType | str,
        entity_id: str,
        entity_name: str,
        metrics: dict[str, MetricValues | dict[str, float]],
        thresholds: list[AlertThreshold] | None = None,
    ) -> list[ChangeAlertEntry]:
        """Raise an alert for every threshold rule a metric change satisfies.

        A metric with several matching rules (for example two severities)
        can raise several alerts.

        Args:
            org_id: Owning organization
            entity_type: Type of the changed entity
            entity_id: Changed entity
            entity_name: Display name used in alert text
            metrics: Previous and current value per metric
            thresholds: Rules to apply. Uses DEFAULT_ALERT_THRESHOLDS if not provided.

        Returns:
            Alerts created, in metric then rule order
        """
        rules = thresholds if thresholds is not None else DEFAULT_ALERT_THRESHOLDS
        created: list[ChangeAlertEntry] = []

        for metric, raw_values in metrics.items():
            values = _as_metric_values(raw_values)
            percent = change_percent(values.previous, values.current)
            absolute_change = values.current - values.previous

            for rule in (r for r in rules if r.metric == metric):
                if not threshold_exceeded(rule, percent, absolute_change):
                    continue

                alert = await self.create_alert(
                    org_id,
                    entity_type,
                    entity_id,
                    alert_type_for(percent),
                    title=alert_title(metric, percent, entity_name),
                    message=alert_message(metric, values, percent, entity_name),
                    severity=rule.severity,
                    metric=metric,
                    previous_value=values.previous,
                    current_value=values.current,
                    change_percent=percent,
                    threshold=rule.threshold,
                )
                created.append(alert)

        if created:
            logger.info(
                "threshold_alerts_raised",
                org_id=org_id,
                entity_type=VersionedEntityType(entity_type).value,
                entity_id=entity_id,
                alert_count=len(created),
            )
        return created

    async def get_alerts(
        self, org_id: str, options: AlertQueryOptions | None = None
    ) -> AlertPage:
        """Get a page of alerts, most severe and newest first.

        Read and dismissed alerts are excluded unless the options include them.
        """
        ensure_org_access(org_id)
        options = options or AlertQueryOptions()
        limit = self.tracking_config.alert_page_size if options.limit is None else options.limit

        rows, total = await self.alerts.query(
            org_id,
            limit=limit,
            offset=options.offset,
            alert_types=[t.value for t in options.alert_types] if options.alert_types else None,
            severities=[s.value for s in options.severities] if options.severities else None,
            entity_types=options.entity_types,
            include_read=options.include_read,
            include_dismissed=options.include_dismissed,
            start_date=options.start_date,
            end_date=options.end_date,
        )
        return AlertPage(alerts=[ChangeAlertEntry.from_model(r) for r in rows], total=total)

    async def get_unread_alert_count(self, org_id: str) -> int:
        """Count alerts that are neither read nor dismissed."""
        ensure_org_access(org_id)
        return await self.alerts.count_unread(org_id)

    async def mark_as_read(self, alert_id: UUID) -> None:
        """Mark an alert as read.

        Raises:
            AlertNotFoundError: If the alert does not exist
        """
        alert = await self._get_alert(alert_id)
        if not alert.is_read:
            await self.alerts.update(alert, {"is_read": True})

    async def mark_all_as_read(self, org_id: str) -> int:
        """Mark every unread alert of an org as read.

        Returns:
            Number of alerts flipped
        """
        ensure_org_access(org_id)
        count = await self.alerts.mark_all_read(org_id)
        logger.info("alerts_marked_read", org_id=org_id, count=count)
        return count

    async def dismiss_alert(self, alert_id: UUID) -> None:
        """Dismiss an alert.

        Raises:
            AlertNotFoundError: If the alert does not exist
        """
        alert = await self._get_alert(alert_id)
        if not alert.is_dismissed:
            await self.alerts.update(alert, {"is_dismissed": True})

    async def _get_alert(self, alert_id: UUID) -> ChangeAlert:
        alert = await self.alerts.get(alert_id)
        if alert is None:
            raise AlertNotFoundError(alert_id)
        ensure_org_access(alert.org_id)
        return alert
