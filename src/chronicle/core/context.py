"""Request context for async-safe multi-tenant operations.

This module propagates the active organization, actor and correlation id
through contextvars so that log entries and org scoping checks can see them
without threading extra arguments through every call.

Usage:
    from chronicle.core.context import create_context, request_context

    ctx = create_context(org_id="org_123", actor_id="user_42")

    with request_context(ctx):
        await hooks.on_entity_updated(...)
"""

from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_utils.compat import uuid7

from chronicle.core.exceptions import ContextNotSetError, OrgAccessDeniedError


class ActorType(str, Enum):
    """Type of actor performing the operation."""

    HUMAN = "human"  # User acting through the application
    SERVICE = "service"  # Internal service call
    SYSTEM = "system"  # Scheduled job, e.g. periodic summaries


class RequestContext(BaseModel):
    """Context for a single request or background job."""

    request_id: UUID = Field(default_factory=uuid7)
    org_id: str
    actor_id: str | None = None
    actor_type: ActorType = ActorType.HUMAN
    correlation_id: UUID = Field(default_factory=uuid7)
    initiated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def assert_org(self, org_id: str) -> None:
        """Assert that an operation stays inside the active organization.

        Args:
            org_id: Organization targeted by the operation

        Raises:
            OrgAccessDeniedError: If org_id differs from the context org
        """
        if org_id != self.org_id:
            raise OrgAccessDeniedError(org_id=org_id, active_org_id=self.org_id)

    def to_log_dict(self) -> dict[str, Any]:
        """Fields bound onto every log entry emitted under this context."""
        return {
            "correlation_id": str(self.correlation_id),
            "org_id": self.org_id,
            "actor_id": self.actor_id,
            "actor_type": self.actor_type.value,
        }


# =============================================================================
# Context Variable Management
# =============================================================================

_request_context: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


def get_current_context() -> RequestContext:
    """Get the current request context.

    Raises:
        ContextNotSetError: If no context is set in the current execution context
    """
    ctx = _request_context.get()
    if ctx is None:
        raise ContextNotSetError(
            "No request context is set. Use request_context() context manager."
        )
    return ctx


def get_current_context_or_none() -> RequestContext | None:
    """Get the current request context, or None if not set."""
    return _request_context.get()


def set_context(ctx: RequestContext) -> Token[RequestContext | None]:
    """Set the request context and return a token for restoration.

    This is a low-level API. Prefer using the request_context() context manager.
    """
    return _request_context.set(ctx)


def reset_context(token: Token[RequestContext | None]) -> None:
    """Reset the context to its previous value using a token."""
    _request_context.reset(token)


@contextmanager
def request_context(ctx: RequestContext):
    """Context manager for setting request context.

    Works for both sync and async code because contextvars are propagated
    to async tasks.

    Args:
        ctx: The context to set for the duration of the block

    Yields:
        The context that was set
    """
    token = set_context(ctx)
    try:
        yield ctx
    finally:
        reset_context(token)


def ensure_org_access(org_id: str) -> None:
    """Check org scoping against the active context, if there is one.

    Calls made outside any request context (scripts, tests, jobs that did
    not bind a context) are not restricted.

    Raises:
        OrgAccessDeniedError: If a context is active for a different org
    """
    ctx = _request_context.get()
    if ctx is not None:
        ctx.assert_org(org_id)


def create_context(
    *,
    org_id: str,
    actor_id: str | None = None,
    actor_type: ActorType = ActorType.HUMAN,
    correlation_id: UUID | None = None,
) -> RequestContext:
    """Factory function to create a RequestContext with defaults.

    Args:
        org_id: Required organization identifier
        actor_id: User or service identifier
        actor_type: Type of actor (default: HUMAN)
        correlation_id: Optional correlation ID (auto-generated if not provided)

    Returns:
        A new RequestContext instance
    """
    return RequestContext(
        org_id=org_id,
        actor_id=actor_id,
        actor_type=actor_type,
        correlation_id=correlation_id or uuid7(),
    )
