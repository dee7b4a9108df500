"""Unit tests for structured logging configuration."""

import logging

import structlog

from chronicle.core.context import create_context, request_context
from chronicle.core.logging import (
    LogContext,
    add_environment_info,
    add_request_context,
    get_logger,
    setup_logging,
)


class TestAddRequestContext:
    """Tests for add_request_context processor."""

    def test_adds_context_when_available(self):
        ctx = create_context(org_id="org_1", actor_id="user_1")

        with request_context(ctx):
            result = add_request_context(None, "info", {"event": "test"})

        assert result["org_id"] == "org_1"
        assert result["actor_id"] == "user_1"
        assert result["correlation_id"] == str(ctx.correlation_id)

    def test_explicit_values_win(self):
        with request_context(create_context(org_id="org_1")):
            result = add_request_context(None, "info", {"event": "test", "org_id": "bound"})
        assert result["org_id"] == "bound"

    def test_no_context_available(self):
        result = add_request_context(None, "info", {"event": "test"})
        assert result == {"event": "test"}


class TestAddEnvironmentInfo:
    """Tests for add_environment_info processor."""

    def test_adds_environment(self, patch_settings):
        result = add_environment_info(None, "info", {"event": "test"})
        assert result["environment"] == "test"


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_setup_logging_default(self, patch_settings):
        setup_logging()

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("sqlalchemy").level == logging.WARNING

    def test_setup_logging_json_format(self, patch_settings):
        setup_logging(json_format=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_setup_logging_custom_level(self, patch_settings):
        setup_logging(log_level="WARNING")
        assert logging.getLogger().level == logging.WARNING


class TestGetLogger:
    """Tests for get_logger."""

    def test_get_logger_with_name(self):
        assert get_logger("chronicle.test") is not None


class TestLogContext:
    """Tests for LogContext."""

    def test_log_context_binds_values(self):
        with LogContext(org_id="org_1", entity_type="audience"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["org_id"] == "org_1"
            assert bound["entity_type"] == "audience"

        assert "org_id" not in structlog.contextvars.get_contextvars()
