"""Poll orchestration for the activity feed."""

from __future__ import annotations

from .controller import CompletionListener, HistoryListener, PollController
from .models import PollState, RefreshOutcome, RefreshStatus
from .observability import (
    ErrorCategory,
    PollEventLogger,
    PollEventType,
    PollRunContext,
    categorize_error,
)

__all__ = [
    "CompletionListener",
    "ErrorCategory",
    "HistoryListener",
    "PollController",
    "PollEventLogger",
    "PollEventType",
    "PollRunContext",
    "PollState",
    "RefreshOutcome",
    "RefreshStatus",
    "categorize_error",
]
