"""Unit tests for request context management."""

import asyncio

import pytest

from chronicle.core.context import (
    ActorType,
    RequestContext,
    create_context,
    ensure_org_access,
    get_current_context,
    get_current_context_or_none,
    request_context,
)
from chronicle.core.exceptions import ContextNotSetError, OrgAccessDeniedError


class TestRequestContext:
    """Tests for the RequestContext model."""

    def test_create_context_defaults(self) -> None:
        ctx = create_context(org_id="org_1")

        assert ctx.org_id == "org_1"
        assert ctx.actor_id is None
        assert ctx.actor_type == ActorType.HUMAN
        assert ctx.correlation_id is not None

    def test_to_log_dict(self) -> None:
        ctx = create_context(org_id="org_1", actor_id="user_1", actor_type=ActorType.SYSTEM)
        data = ctx.to_log_dict()

        assert data["org_id"] == "org_1"
        assert data["actor_id"] == "user_1"
        assert data["actor_type"] == "system"
        assert data["correlation_id"] == str(ctx.correlation_id)

    def test_assert_org_mismatch(self) -> None:
        ctx = RequestContext(org_id="org_1")
        with pytest.raises(OrgAccessDeniedError):
            ctx.assert_org("org_2")


class TestContextVars:
    """Tests for contextvar helpers."""

    def test_no_context(self) -> None:
        assert get_current_context_or_none() is None
        with pytest.raises(ContextNotSetError):
            get_current_context()

    def test_request_context_sets_and_restores(self) -> None:
        ctx = create_context(org_id="org_1")
        with request_context(ctx):
            assert get_current_context() is ctx
        assert get_current_context_or_none() is None

    def test_ensure_org_access_without_context(self) -> None:
        ensure_org_access("any_org")

    def test_ensure_org_access_with_context(self) -> None:
        with request_context(create_context(org_id="org_1")):
            ensure_org_access("org_1")
            with pytest.raises(OrgAccessDeniedError):
                ensure_org_access("org_2")

    @pytest.mark.asyncio
    async def test_context_propagates_to_tasks(self) -> None:
        ctx = create_context(org_id="org_1")

        async def read_org() -> str:
            return get_current_context().org_id

        with request_context(ctx):
            assert await asyncio.create_task(read_org()) == "org_1"
