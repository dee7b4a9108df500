"""Unit tests for summary window derivation."""

from datetime import UTC, datetime, timedelta

import pytest

from chronicle.core.exceptions import InvalidPeriodError
from chronicle.db.models.alert import SummaryPeriod
from chronicle.notifications.summary import summary_window

# Wednesday
REFERENCE = datetime(2026, 3, 18, 15, 30, tzinfo=UTC)
ONE_MICROSECOND = timedelta(microseconds=1)


class TestSummaryWindow:
    """Tests for summary_window."""

    def test_daily(self) -> None:
        start, end = summary_window(SummaryPeriod.DAILY, REFERENCE)

        assert start == datetime(2026, 3, 17, tzinfo=UTC)
        assert end == datetime(2026, 3, 18, tzinfo=UTC) - ONE_MICROSECOND

    def test_weekly_starts_monday(self) -> None:
        start, end = summary_window("weekly", REFERENCE)

        assert start == datetime(2026, 3, 9, tzinfo=UTC)
        assert start.weekday() == 0
        assert end == datetime(2026, 3, 16, tzinfo=UTC) - ONE_MICROSECOND

    def test_monthly(self) -> None:
        start, end = summary_window(SummaryPeriod.MONTHLY, REFERENCE)

        assert start == datetime(2026, 2, 1, tzinfo=UTC)
        assert end == datetime(2026, 3, 1, tzinfo=UTC) - ONE_MICROSECOND

    def test_monthly_across_year_boundary(self) -> None:
        start, end = summary_window("monthly", datetime(2026, 1, 5, tzinfo=UTC))

        assert start == datetime(2025, 12, 1, tzinfo=UTC)
        assert end == datetime(2026, 1, 1, tzinfo=UTC) - ONE_MICROSECOND

    def test_invalid_period(self) -> None:
        with pytest.raises(InvalidPeriodError) as exc_info:
            summary_window("hourly", REFERENCE)
        assert exc_info.value.period == "hourly"

    def test_defaults_to_now(self) -> None:
        start, end = summary_window("daily")
        assert end < datetime.now(UTC)
        assert end - start == timedelta(days=1) - ONE_MICROSECOND
