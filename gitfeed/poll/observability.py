"""Structured log events for poll cycles.

Every poll cycle emits a start event and exactly one of a completion or
failure event, with ``key=value`` fields that log aggregators can parse.
Failures carry an :class:`ErrorCategory` so alerts can separate transient
network trouble from configuration mistakes or feed schema drift.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from gitfeed.feed.errors import EventParseError, FeedConfigError, FeedNetworkError
from gitfeed.logging import get_logger, log_error, log_info, log_warning
from gitfeed.storage.errors import CacheStateError, PersistenceError

if typ.TYPE_CHECKING:
    import datetime as dt

    from .models import PollState, RefreshOutcome

logger = get_logger(__name__)

_HTTP_CLIENT_ERROR_THRESHOLD = 400
_HTTP_SERVER_ERROR_THRESHOLD = 500


class PollEventType(enum.StrEnum):
    """Structured log event types for poll observability."""

    CYCLE_STARTED = "poll.cycle.started"
    CYCLE_COMPLETED = "poll.cycle.completed"
    CYCLE_FAILED = "poll.cycle.failed"
    REFRESH_DROPPED = "poll.refresh.dropped"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    PERSISTENCE = "persistence"
    UNKNOWN = "unknown"


@dataclasses.dataclass(frozen=True, slots=True)
class PollRunContext:
    """Shared context for a single poll cycle."""

    resource: str
    started_at: dt.datetime


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (EventParseError, ErrorCategory.SCHEMA_DRIFT),
    (FeedConfigError, ErrorCategory.CONFIGURATION),
    (PersistenceError, ErrorCategory.PERSISTENCE),
    (CacheStateError, ErrorCategory.PERSISTENCE),
)


def categorize_error(exc: BaseException | None) -> ErrorCategory:
    """Categorize a poll failure for alerting purposes.

    Network errors without a status (timeouts, refused connections) and 5xx
    responses are transient; 4xx responses are client errors; a successful
    status with an unusable body means the feed format drifted.
    """
    if exc is None:
        return ErrorCategory.UNKNOWN

    if isinstance(exc, FeedNetworkError):
        status = exc.status_code
        if status is None or status >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        if status >= _HTTP_CLIENT_ERROR_THRESHOLD:
            return ErrorCategory.CLIENT_ERROR
        return ErrorCategory.SCHEMA_DRIFT

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    if isinstance(exc, ValueError):
        return ErrorCategory.CONFIGURATION

    return ErrorCategory.UNKNOWN


class PollEventLogger:
    """Emit structured poll events via femtologging.

    Events are emitted at INFO for lifecycle and success, WARNING for dropped
    refresh requests, and ERROR for failed cycles.
    """

    def log_cycle_started(self, context: PollRunContext) -> None:
        """Log poll cycle start."""
        log_info(
            logger,
            "[%s] resource=%s started_at=%s",
            PollEventType.CYCLE_STARTED,
            context.resource,
            context.started_at.isoformat(),
        )

    def log_cycle_completed(
        self,
        context: PollRunContext,
        outcome: RefreshOutcome,
        duration: dt.timedelta,
        *,
        history_size: int,
    ) -> None:
        """Log a poll cycle that ended without failure."""
        log_info(
            logger,
            "[%s] resource=%s duration_seconds=%.3f status=%s new_events=%d "
            "history_changed=%s history_size=%d",
            PollEventType.CYCLE_COMPLETED,
            context.resource,
            duration.total_seconds(),
            outcome.status,
            outcome.new_events,
            outcome.history_changed,
            history_size,
        )

    def log_cycle_failed(
        self,
        context: PollRunContext,
        reason: str,
        error: BaseException | None,
        duration: dt.timedelta,
    ) -> None:
        """Log a failed poll cycle with error categorization."""
        log_error(
            logger,
            "[%s] resource=%s duration_seconds=%.3f error_type=%s "
            "error_category=%s error_message=%s",
            PollEventType.CYCLE_FAILED,
            context.resource,
            duration.total_seconds(),
            type(error).__name__ if error is not None else "None",
            categorize_error(error),
            reason,
            exc_info=error,
        )

    def log_refresh_dropped(self, resource: str, state: PollState) -> None:
        """Log a refresh request ignored because a cycle is in flight."""
        log_warning(
            logger,
            "[%s] resource=%s state=%s",
            PollEventType.REFRESH_DROPPED,
            resource,
            state,
        )


__all__ = [
    "ErrorCategory",
    "PollEventLogger",
    "PollEventType",
    "PollRunContext",
    "categorize_error",
]
