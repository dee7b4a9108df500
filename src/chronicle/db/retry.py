"""Bounded retry policies at the storage boundary.

Reads retry on transient connection errors. Version capture retries on
version-number collisions, which is the optimistic-concurrency guard for
concurrent writers of the same entity.
"""

from sqlalchemy.exc import DBAPIError, OperationalError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception,
    retry_if_exception_type,
    wait_exponential,
)

from chronicle.config.settings import get_settings
from chronicle.core.exceptions import VersionConflictError
from chronicle.core.logging import get_logger

logger = get_logger(__name__)


def _stop_after_configured_attempts(retry_state: RetryCallState) -> bool:
    """Stop once DATABASE_RETRY_ATTEMPTS attempts have been made."""
    return retry_state.attempt_number >= get_settings().DATABASE_RETRY_ATTEMPTS


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _log_retry(retry_state) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "storage_retry",
        attempt=retry_state.attempt_number,
        operation=getattr(retry_state.fn, "__qualname__", None),
        error_type=type(exc).__name__ if exc else None,
    )


db_read_retry = retry(
    retry=retry_if_exception(_is_transient),
    stop=_stop_after_configured_attempts,
    wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
    before_sleep=_log_retry,
    reraise=True,
)
"""Retry a read-only query on transient database errors."""


version_conflict_retry = retry(
    retry=retry_if_exception_type(VersionConflictError),
    stop=_stop_after_configured_attempts,
    wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
    before_sleep=_log_retry,
    reraise=True,
)
"""Retry a version capture that lost a race for its version number."""
