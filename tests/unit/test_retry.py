"""Unit tests for storage retry policies."""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from chronicle.config.settings import Settings
from chronicle.core.exceptions import VersionConflictError
from chronicle.db.retry import db_read_retry, version_conflict_retry


@pytest.fixture
def two_attempts():
    settings = Settings(_env_file=None, DATABASE_RETRY_ATTEMPTS=2)
    with patch("chronicle.db.retry.get_settings", return_value=settings):
        yield settings


class TestVersionConflictRetry:
    """Tests for version_conflict_retry."""

    @pytest.mark.asyncio
    async def test_attempts_follow_settings(self, two_attempts):
        calls = []

        @version_conflict_retry
        async def capture():
            calls.append(1)
            raise VersionConflictError("audience", "aud_1", 1)

        with pytest.raises(VersionConflictError):
            await capture()
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_succeeds_after_conflict(self, two_attempts):
        calls = []

        @version_conflict_retry
        async def capture():
            calls.append(1)
            if len(calls) == 1:
                raise VersionConflictError("audience", "aud_1", 1)
            return 2

        assert await capture() == 2
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, two_attempts):
        calls = []

        @version_conflict_retry
        async def capture():
            calls.append(1)
            raise ValueError("bad snapshot")

        with pytest.raises(ValueError):
            await capture()
        assert len(calls) == 1


class TestDbReadRetry:
    """Tests for db_read_retry."""

    @pytest.mark.asyncio
    async def test_transient_error_attempts_follow_settings(self, two_attempts):
        calls = []

        @db_read_retry
        async def read():
            calls.append(1)
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            await read()
        assert len(calls) == 2
