"""Core services and utilities for chronicle."""

from .context import (
    ActorType,
    RequestContext,
    create_context,
    ensure_org_access,
    get_current_context,
    get_current_context_or_none,
    request_context,
    reset_context,
    set_context,
)
from .exceptions import (
    AlertNotFoundError,
    ContextNotSetError,
    InvalidPeriodError,
    OrgAccessDeniedError,
    VersionConflictError,
)

__all__ = [
    # Context
    "ActorType",
    "RequestContext",
    "create_context",
    "ensure_org_access",
    "get_current_context",
    "get_current_context_or_none",
    "request_context",
    "reset_context",
    "set_context",
    # Exceptions
    "AlertNotFoundError",
    "ContextNotSetError",
    "InvalidPeriodError",
    "OrgAccessDeniedError",
    "VersionConflictError",
]
